"""Development server for Quillpost.

Serves the output directory over HTTP for local authoring:
- Sends no-cache headers so a browser reload always sees the latest build.
- Rejects directory listings and missing paths with a 404 (serving 404.html
  when present).
- Answers anything but GET and HEAD with 405.

The server knows nothing about posts; it serves whatever the last build
wrote. Rebuilding is the WatchLoop's job (see watch.py); serve_site wires the
two together.

Key classes:
- DevServer: Static file server for the output directory.
- _StaticHandler: HTTP request handler enforcing the rules above.
"""

from __future__ import annotations

import functools
from http import HTTPStatus
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

import click

from .build import CONFIG_FILENAME, build_site, load_config
from .watch import WatchLoop


class _StaticHandler(SimpleHTTPRequestHandler):
    """HTTP request handler serving the built site read-only."""

    allowed_methods = "GET, HEAD"

    def end_headers(self):
        self.send_header("Cache-Control", "no-cache, no-store, must-revalidate")
        super().end_headers()

    def log_message(self, format, *args):
        # Per-request access logs drown out rebuild messages.
        return

    def list_directory(self, path):  # pragma: no cover - exercised via send_head
        # Never expose directory listings; treat as missing content.
        return self._serve_404()

    def _serve_404(self):
        """Serve 404.html (when present) with a 404 status."""
        error_page = Path(self.directory) / "404.html"
        if error_page.is_file():
            encoded = error_page.read_bytes()
            self.send_response(HTTPStatus.NOT_FOUND)
            self.send_header("Content-type", "text/html; charset=utf-8")
            self.send_header("Content-Length", str(len(encoded)))
            self.end_headers()
            if self.command != "HEAD":
                self.wfile.write(encoded)
            return None
        self.send_error(HTTPStatus.NOT_FOUND, "File not found")
        return None

    def send_head(self):
        path = Path(self.translate_path(self.path))
        if path.is_dir():
            if not (path / "index.html").is_file():
                return self._serve_404()
        elif not path.is_file():
            return self._serve_404()
        return super().send_head()

    def _method_not_allowed(self):
        body = b"Method Not Allowed\n"
        self.send_response(HTTPStatus.METHOD_NOT_ALLOWED)
        self.send_header("Allow", self.allowed_methods)
        self.send_header("Content-type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    do_POST = _method_not_allowed
    do_PUT = _method_not_allowed
    do_PATCH = _method_not_allowed
    do_DELETE = _method_not_allowed
    do_OPTIONS = _method_not_allowed


class DevServer:
    """Static HTTP server for the output directory.

    Attributes:
        output_dir: Directory being served.
        host: Interface to bind.
        port: Port to bind.
    """

    def __init__(self, output_dir: Path, host: str = "127.0.0.1", port: int = 8080):
        self.output_dir = output_dir
        self.host = host
        self.port = port
        self._httpd: ThreadingHTTPServer | None = None

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}/"

    def make_server(self) -> ThreadingHTTPServer:
        handler = functools.partial(_StaticHandler, directory=str(self.output_dir))
        self._httpd = ThreadingHTTPServer((self.host, self.port), handler)
        return self._httpd

    def serve_forever(self) -> None:  # pragma: no cover - integration path
        httpd = self._httpd or self.make_server()
        click.echo(f"Serving {self.output_dir} at {self.url}")
        httpd.serve_forever()

    def stop(self) -> None:
        if self._httpd is not None:
            self._httpd.server_close()
            self._httpd = None


def watch_paths(project_root: Path, config) -> list[Path]:
    """Return the files and directories whose changes trigger a rebuild."""
    return [
        project_root / config.posts_dir,
        project_root / config.static_dir,
        project_root / config.templates_dir,
        project_root / CONFIG_FILENAME,
    ]


def serve_site(
    project_root: Path,
    host: str | None = None,
    port: int | None = None,
    watch: bool = True,
    poll_ms: int | None = None,
) -> None:
    """Build the site, then serve it and rebuild on changes until interrupted.

    The first build is fatal on error; later rebuilds are reported by the
    watch loop and leave the last good output in place.

    Args:
        project_root: Root directory of the project.
        host: Optional override for the configured host.
        port: Optional override for the configured port.
        watch: Whether to poll for changes and rebuild.
        poll_ms: Optional override for the configured poll interval.
    """
    config = load_config(project_root)
    result = build_site(project_root, config=config)
    click.echo(f"Built {len(result.posts)} posts into {result.output_dir}")

    def rebuild():
        # site.yml is watched too, so reread it; keep serving the same directory.
        build_site(
            project_root,
            config=load_config(project_root),
            output_dir_override=result.output_dir,
        )

    loop = None
    if watch:
        interval_ms = poll_ms or config.poll_ms
        loop = WatchLoop(rebuild, watch_paths(project_root, config), interval_ms / 1000)
        loop.start()
        click.echo(f"Watching for changes (polling every {interval_ms}ms)")

    server = DevServer(result.output_dir, host or config.host, port or config.port)
    server.make_server()
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        click.echo("Stopping.")
    finally:
        if loop is not None:
            loop.stop()
        server.stop()
