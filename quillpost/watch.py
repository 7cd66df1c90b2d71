"""Polling watch loop for the Quillpost dev server.

The loop wakes on a fixed interval, takes a cheap signature of the watched
files (path, mtime and size, via watchdog's DirectorySnapshot) and runs a
full rebuild when the signature changes. A change is only acted on once the
new signature has been seen on two consecutive polls, so a burst of saves
from an editor triggers one rebuild instead of several.

States:
    idle -> building -> idle      rebuild succeeded
    idle -> building -> failed -> idle
                                  rebuild failed; the error is reported and
                                  the previous output stays in place
"""

from __future__ import annotations

import os
import stat
import threading
from collections.abc import Callable, Iterable
from pathlib import Path

import click
from watchdog.utils.dirsnapshot import DirectorySnapshot

from .errors import QuillpostError

IDLE = "idle"
BUILDING = "building"
FAILED = "failed"


def compute_signature(paths: Iterable[Path]) -> tuple:
    """Return a hashable signature of every regular file under ``paths``.

    Missing paths contribute a sentinel, so creating or deleting a watched
    directory counts as a change.

    Args:
        paths: Directories (walked recursively) or single files.

    Returns:
        Tuple of (path, mtime_ns, size) entries.
    """
    entries: list[tuple] = []
    for root in paths:
        try:
            if root.is_dir():
                snapshot = DirectorySnapshot(str(root), recursive=True)
                stats = [(p, snapshot.stat_info(p)) for p in snapshot.paths]
            else:
                stats = [(str(root), os.stat(root))]
        except OSError:
            entries.append((str(root), None, None))
            continue
        for path, info in sorted(stats, key=lambda item: item[0]):
            if stat.S_ISREG(info.st_mode):
                entries.append((path, info.st_mtime_ns, info.st_size))
    return tuple(entries)


class WatchLoop:
    """Rebuilds the site whenever the watched files change.

    Attributes:
        rebuild: Callable running one full build; raises QuillpostError on
            a fatal build error.
        paths: Watched directories and files.
        interval: Seconds between polls.
        state: One of ``idle``, ``building``, ``failed``.
        last_error: The most recent rebuild failure, if any.
    """

    def __init__(
        self,
        rebuild: Callable[[], object],
        paths: Iterable[Path],
        interval: float = 0.5,
    ):
        self.rebuild = rebuild
        self.paths = list(paths)
        self.interval = interval
        self.state = IDLE
        self.last_error: Exception | None = None
        self._stable = compute_signature(self.paths)
        self._pending: tuple | None = None
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def poll_once(self) -> bool:
        """Check the watched files once and rebuild if they settled on a change.

        Returns:
            True if a rebuild was attempted.
        """
        current = compute_signature(self.paths)
        if current == self._stable:
            self._pending = None
            return False
        if current != self._pending:
            self._pending = current
            return False
        self._stable = current
        self._pending = None
        self._run_build()
        return True

    def _run_build(self) -> None:
        self.state = BUILDING
        click.echo("Change detected; rebuilding...")
        try:
            self.rebuild()
        except (QuillpostError, OSError) as exc:
            self.state = FAILED
            self.last_error = exc
            kind = getattr(exc, "kind", type(exc).__name__)
            click.echo(click.style(f"Rebuild failed: {kind}: {exc}", fg="red"), err=True)
        else:
            self.last_error = None
            click.echo("Rebuild complete.")
        self.state = IDLE

    def run(self) -> None:
        """Poll until stop() is called. An in-flight build always finishes."""
        while not self._stop_event.wait(self.interval):
            self.poll_once()

    def start(self) -> threading.Thread:
        """Run the loop on a daemon thread."""
        thread = threading.Thread(target=self.run, name="quillpost-watch", daemon=True)
        thread.start()
        self._thread = thread
        return thread

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
