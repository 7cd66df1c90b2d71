"""Front-matter parsing for Quillpost.

A post source file starts with a YAML block fenced by ``---`` lines::

    ---
    title: Hello
    date: "2025-01-01"
    tags:
      - meta
    ---
    # Markdown body

This module splits a file into that block and its Markdown body, decodes the
block with PyYAML and validates the recognized keys.

Key functions:
- split_front_matter: Split raw content into (metadata text, body).
- parse_front_matter: Split and decode into a FrontMatter record.
- parse_date: Validate a YYYY-MM-DD calendar date.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

import yaml

from .errors import (
    InvalidDate,
    InvalidFrontMatterSyntax,
    MissingFrontMatter,
    MissingRequiredField,
    UnterminatedFrontMatter,
)

DELIMITER = "---"
DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_BOM = "\ufeff"
_TRUE_WORDS = ("true", "yes")
_FALSE_WORDS = ("false", "no")


_TEXT_TAGS = (
    "tag:yaml.org,2002:bool",
    "tag:yaml.org,2002:int",
    "tag:yaml.org,2002:float",
    "tag:yaml.org,2002:timestamp",
)


class _FrontMatterLoader(yaml.SafeLoader):
    """SafeLoader that leaves every plain scalar except null as written.

    ``title: 3.10`` stays ``"3.10"`` and ``draft: yes`` stays ``"yes"``;
    dates are validated by parse_date and booleans by _boolean.
    """


_FrontMatterLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in _TEXT_TAGS]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


@dataclass
class FrontMatter:
    """Decoded and validated front-matter of one post.

    Attributes:
        title: Post title, never empty.
        date: Publication date.
        date_raw: The date exactly as written in the file.
        description: Short summary, empty when absent.
        tags: Tags in the order they were written.
        draft: Whether the post is excluded from the site.
        slug: Optional slug override; None uses the filename.
    """

    title: str
    date: date
    date_raw: str
    description: str = ""
    tags: list[str] = field(default_factory=list)
    draft: bool = False
    slug: str | None = None


def _is_delimiter(line: str) -> bool:
    return line.rstrip() == DELIMITER


def split_front_matter(content: str | bytes) -> tuple[str, str]:
    """Split raw file content into its front-matter block and Markdown body.

    Bytes are decoded as UTF-8 with ``surrogateescape`` so undecodable bytes
    survive the split; the Markdown renderer rejects them later.

    Args:
        content: Raw file content.

    Returns:
        Tuple of (front-matter text without delimiters, body text).

    Raises:
        MissingFrontMatter: The first line is not ``---``.
        UnterminatedFrontMatter: No closing ``---`` line was found.
    """
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="surrogateescape")
    if content.startswith(_BOM):
        content = content[1:]

    first, newline, rest = content.partition("\n")
    if not _is_delimiter(first):
        raise MissingFrontMatter()
    if not newline:
        raise UnterminatedFrontMatter()

    offset = 0
    while True:
        line_end = rest.find("\n", offset)
        line = rest[offset:] if line_end == -1 else rest[offset:line_end]
        if _is_delimiter(line):
            body = "" if line_end == -1 else rest[line_end + 1 :]
            return rest[:offset], body
        if line_end == -1:
            raise UnterminatedFrontMatter()
        offset = line_end + 1


def parse_date(value: str) -> date:
    """Parse a YYYY-MM-DD date, rejecting impossible calendar days.

    Args:
        value: Date text.

    Returns:
        The parsed date.

    Raises:
        InvalidDate: The text is not a valid calendar date.

    Examples:
        >>> parse_date("2025-12-13")
        datetime.date(2025, 12, 13)
    """
    if not DATE_RE.fullmatch(value):
        raise InvalidDate(value)
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise InvalidDate(value) from exc


def _scalar(key: str, value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, (int, float)):
        return str(value)
    raise InvalidFrontMatterSyntax(
        f"'{key}' must be a single value, not {type(value).__name__}"
    )


def _boolean(key: str, value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise InvalidFrontMatterSyntax(f"'{key}' must be true or false, got {value!r}")


def _string_list(key: str, value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, list):
        return [_scalar(key, item) for item in value if item is not None]
    return [_scalar(key, value)]


def decode_front_matter(block: str) -> dict[str, Any]:
    """Decode a front-matter block into a mapping.

    Raises:
        InvalidFrontMatterSyntax: The block is not valid YAML or not a mapping.
    """
    try:
        data = yaml.load(block, Loader=_FrontMatterLoader)
    except (yaml.YAMLError, ValueError) as exc:
        raise InvalidFrontMatterSyntax(f"malformed YAML: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidFrontMatterSyntax(
            f"front matter must be key/value pairs, not {type(data).__name__}"
        )
    return data


def parse_front_matter(content: str | bytes) -> tuple[FrontMatter, str]:
    """Parse a post source file into its front matter and Markdown body.

    Unrecognized keys are ignored.

    Args:
        content: Raw file content.

    Returns:
        Tuple of (FrontMatter, body text).

    Raises:
        MissingFrontMatter: No opening delimiter.
        UnterminatedFrontMatter: No closing delimiter.
        InvalidFrontMatterSyntax: Malformed YAML or wrongly typed values.
        InvalidDate: ``date`` is not a YYYY-MM-DD calendar date.
        MissingRequiredField: ``title`` or ``date`` is absent or empty.
    """
    block, body = split_front_matter(content)
    data = decode_front_matter(block)

    title = _scalar("title", data.get("title"))
    if not title.strip():
        raise MissingRequiredField("title")
    date_raw = _scalar("date", data.get("date"))
    if not date_raw.strip():
        raise MissingRequiredField("date")

    slug = _scalar("slug", data.get("slug")).strip()
    front_matter = FrontMatter(
        title=title,
        date=parse_date(date_raw.strip()),
        date_raw=date_raw,
        description=_scalar("description", data.get("description")),
        tags=_string_list("tags", data.get("tags")),
        draft=_boolean("draft", data.get("draft")),
        slug=slug or None,
    )
    return front_matter, body
