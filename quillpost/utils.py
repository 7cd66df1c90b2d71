"""Utility functions for Quillpost.

Key functions:
    slugify: Turn a filename stem or slug override into a URL-safe slug.
    is_markdown: Check if a path is a post source file.
    join_root_url: Join a base URL with a path.
    rfc822_date: Format a date for RSS.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timezone
from email.utils import format_datetime
from pathlib import Path

MARKDOWN_SUFFIXES = (".md", ".markdown")

_UNSAFE_SLUG_RE = re.compile(r"[^A-Za-z0-9._-]+")


def slugify(name: str) -> str:
    """Convert a filename stem to a URL-safe slug, preserving case.

    Runs of characters outside ``A-Z a-z 0-9 . _ -`` become a single dash;
    leading and trailing dashes and dots are dropped.

    Args:
        name: Filename stem or slug override.

    Returns:
        URL-safe slug, ``post`` when nothing usable is left.

    Examples:
        >>> slugify("Hello World")
        'Hello-World'

        >>> slugify("../etc/passwd")
        'etc-passwd'
    """
    cleaned = _UNSAFE_SLUG_RE.sub("-", name)
    cleaned = re.sub(r"-{2,}", "-", cleaned).strip("-.")
    return cleaned or "post"


def is_markdown(path: Path) -> bool:
    """Check if a path is a Markdown post source.

    Args:
        path: Path to check.

    Returns:
        True for ``.md`` and ``.markdown`` files (case-insensitive).
    """
    return path.suffix.lower() in MARKDOWN_SUFFIXES


def is_hidden(path: Path) -> bool:
    return path.name.startswith(".")


def join_root_url(root_url: str, path: str) -> str:
    """Safely join a root URL and a path, avoiding double slashes.

    Examples:
        >>> join_root_url('https://example.com/', 'about.html')
        'https://example.com/about.html'
    """
    if not root_url:
        return path if path.startswith("/") else f"/{path}"
    base = root_url.rstrip("/")
    suffix = path if path.startswith("/") else f"/{path}"
    return f"{base}{suffix}"


def rfc822_date(day: date) -> str:
    """Format a date as an RFC 822 timestamp at midnight UTC.

    Uses email.utils so the output does not depend on the process locale.

    Examples:
        >>> rfc822_date(date(2025, 1, 1))
        'Wed, 01 Jan 2025 00:00:00 +0000'
    """
    moment = datetime.combine(day, time(0, 0), tzinfo=timezone.utc)
    return format_datetime(moment)
