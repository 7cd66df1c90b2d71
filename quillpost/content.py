"""Post loading for Quillpost.

This module discovers post source files, runs each through the front-matter
parser and the Markdown renderer, and produces the ordered collection of
published posts for one build.

Key classes:
- Post: Dataclass representing one published article.
- FileContentLoader: Discovers post source files in a directory.
- PostLoader: Builds the ordered PostCollection for a build.

Every build starts from scratch: posts are never cached between builds and
the posts directory is the only source of truth.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from .collections import PostCollection
from .errors import (
    DuplicateSlug,
    FrontMatterError,
    PostError,
    ReadError,
    RenderError,
)
from .frontmatter import FrontMatter, parse_front_matter
from .renderers import MarkdownRenderer
from .utils import is_hidden, is_markdown, slugify


@dataclass
class Post:
    """Represents one published article.

    Attributes:
        slug: URL-safe identifier, used for ``<slug>.html`` and feed GUIDs.
        title: Human-readable title.
        date: Publication date, used for display and ordering.
        date_raw: The date as written in the front matter.
        description: Short summary, empty when absent.
        tags: Tags in front-matter order.
        draft: Always False for posts in a built collection.
        body_html: Sanitized HTML rendering of the Markdown body.
        source_path: File the post was loaded from.
    """

    slug: str
    title: str
    date: date
    date_raw: str
    body_html: str
    source_path: Path
    description: str = ""
    tags: list[str] = field(default_factory=list)
    draft: bool = False

    @property
    def filename(self) -> str:
        """Return the output filename of the post's detail page."""
        return f"{self.slug}.html"


class FileContentLoader:
    """Discovers post source files in a directory.

    Only regular ``.md``/``.markdown`` files directly inside the directory
    count; dotfiles (editor swap files and the like) are skipped.

    Attributes:
        posts_dir: Directory containing post sources.
    """

    def __init__(self, posts_dir: Path):
        self.posts_dir = posts_dir

    def iter_files(self) -> list[Path]:
        """Return post source files sorted lexicographically by filename.

        Returns:
            List of paths; empty when the directory does not exist.
        """
        if not self.posts_dir.is_dir():
            return []
        files = [
            path
            for path in self.posts_dir.iterdir()
            if path.is_file() and is_markdown(path) and not is_hidden(path)
        ]
        return sorted(files, key=lambda p: p.name)


class PostLoader:
    """Loads, validates and orders all posts of a site.

    Files are processed one at a time in filename order so that the first
    fatal error reported is the same on every run.

    Attributes:
        posts_dir: Directory containing post sources.
        renderer: Markdown renderer used for post bodies.
    """

    def __init__(
        self,
        posts_dir: Path,
        renderer: MarkdownRenderer | None = None,
        content_loader: FileContentLoader | None = None,
    ):
        """Initialize the post loader.

        Args:
            posts_dir: Directory containing post sources.
            renderer: Optional custom Markdown renderer.
            content_loader: Optional custom file discovery.
        """
        self.posts_dir = posts_dir
        self.renderer = renderer or MarkdownRenderer()
        self._content_loader = content_loader or FileContentLoader(posts_dir)

    def load(self) -> PostCollection:
        """Load every non-draft post.

        Returns:
            PostCollection ordered by date descending, then slug ascending.

        Raises:
            PostError: A file has bad front matter or an unrenderable body.
            DuplicateSlug: Two non-draft files resolve to the same slug.
        """
        posts: list[Post] = []
        owners: dict[str, tuple[Path, str]] = {}
        for path in self._content_loader.iter_files():
            front_matter, body = self._parse(path)
            if front_matter.draft:
                continue
            slug = slugify(front_matter.slug or path.stem)
            # Case-insensitive filesystems would map Foo.html and foo.html
            # to the same file.
            key = slug.casefold()
            if key in owners:
                first_path, first_slug = owners[key]
                raise DuplicateSlug(slug, first_path, path, first_slug)
            owners[key] = (path, slug)
            posts.append(self._build(path, slug, front_matter, body))
        return PostCollection(posts)

    def _parse(self, path: Path) -> tuple[FrontMatter, str]:
        try:
            raw = path.read_bytes()
        except OSError as exc:
            raise PostError(path, ReadError(exc.strerror or str(exc))) from exc
        try:
            return parse_front_matter(raw)
        except FrontMatterError as exc:
            raise PostError(path, exc) from exc

    def _build(self, path: Path, slug: str, front_matter: FrontMatter, body: str) -> Post:
        try:
            body_html = self.renderer.render(body)
        except RenderError as exc:
            raise PostError(path, exc) from exc
        return Post(
            slug=slug,
            title=front_matter.title,
            date=front_matter.date,
            date_raw=front_matter.date_raw,
            body_html=body_html,
            source_path=path,
            description=front_matter.description,
            tags=list(front_matter.tags),
            draft=False,
        )


def load_posts(posts_dir: Path) -> PostCollection:
    """Load the posts in ``posts_dir`` with the default renderer."""
    return PostLoader(posts_dir).load()
