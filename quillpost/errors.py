"""Error taxonomy for Quillpost.

Every failure a build can hit is a subclass of QuillpostError. Each error
exposes the file it concerns (``path``, which may be None) and a ``kind``
naming its place in the taxonomy, so the CLI can always report which file
failed and why.

Hierarchy:
    QuillpostError
    ├── FrontMatterError
    │   ├── MissingFrontMatter
    │   ├── UnterminatedFrontMatter
    │   ├── InvalidFrontMatterSyntax
    │   │   └── InvalidDate
    │   └── MissingRequiredField
    ├── RenderError
    ├── ReadError
    ├── PostError          (wraps one of the three above with its file)
    ├── DuplicateSlug
    ├── WriteError
    ├── TemplateError
    └── ConfigError
"""

from __future__ import annotations

from pathlib import Path


class QuillpostError(Exception):
    """Base class for all build-fatal errors.

    Attributes:
        message: Human-readable error message.
        path: File the error concerns, when known.
    """

    def __init__(self, message: str, path: Path | None = None):
        self.message = message
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)

    @property
    def kind(self) -> str:
        """Return the taxonomy name of this error."""
        return type(self).__name__


class FrontMatterError(QuillpostError):
    """The front-matter block of a post is missing or unusable."""


class MissingFrontMatter(FrontMatterError):
    def __init__(self, message: str = "file does not start with a '---' line"):
        super().__init__(message)


class UnterminatedFrontMatter(FrontMatterError):
    def __init__(self, message: str = "front matter has no closing '---' line"):
        super().__init__(message)


class InvalidFrontMatterSyntax(FrontMatterError):
    """The metadata block could not be decoded into key/value pairs."""


class InvalidDate(InvalidFrontMatterSyntax):
    """The ``date`` field is not a YYYY-MM-DD calendar date."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"invalid date {value!r}, expected YYYY-MM-DD")


class MissingRequiredField(FrontMatterError):
    """A required front-matter key is absent or empty.

    Attributes:
        field: Name of the missing key (``title`` or ``date``).
    """

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"missing required field '{field}'")


class RenderError(QuillpostError):
    """The Markdown body could not be rendered."""


class ReadError(QuillpostError):
    """A post source file could not be read."""


class PostError(QuillpostError):
    """A front-matter or render error, tagged with the post that caused it.

    Attributes:
        original_error: The wrapped FrontMatterError or RenderError.
    """

    def __init__(self, path: Path, original_error: QuillpostError):
        self.original_error = original_error
        super().__init__(original_error.message, path)

    @property
    def kind(self) -> str:
        return self.original_error.kind


class DuplicateSlug(QuillpostError):
    """Two non-draft posts resolve to the same output file.

    Slugs that differ only in case also clash, since their output files
    collide on case-insensitive filesystems.

    Attributes:
        slug: The contested slug.
        first_path: The post that claimed the slug first.
        first_slug: The slug as the first post spelled it.
    """

    def __init__(
        self, slug: str, first_path: Path, path: Path, first_slug: str | None = None
    ):
        self.slug = slug
        self.first_path = first_path
        self.first_slug = first_slug or slug
        if self.first_slug != slug:
            message = (
                f"slug '{slug}' differs only in case from '{self.first_slug}'"
                f" (used by {first_path.name}); {slug}.html and"
                f" {self.first_slug}.html collide on case-insensitive filesystems"
            )
        else:
            message = f"duplicate slug '{slug}' (already used by {first_path.name})"
        super().__init__(message, path)


class WriteError(QuillpostError):
    """An artifact could not be written to the output directory."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"cannot write output: {reason}", path)


class ConfigError(QuillpostError):
    """The site configuration file is malformed."""


class TemplateError(QuillpostError):
    """A page template failed to load or render."""
