"""Markdown rendering for Quillpost.

Post bodies are written by people, so rendering runs in safe mode: raw HTML
in the Markdown is escaped rather than passed through, and links or images
pointing at harmful schemes (``javascript:``, ``vbscript:``, ``file:``,
non-image ``data:``) are replaced with ``#harmful-link`` by mistune.

Key classes:
- MarkdownRenderer: Renders a Markdown body to a sanitized HTML fragment.
"""

from __future__ import annotations

import mistune
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from .errors import RenderError

PLUGINS = ["strikethrough", "footnotes", "table", "url", "task_lists"]


class _SafeHTMLRenderer(mistune.HTMLRenderer):
    """HTML renderer with raw HTML escaped and Pygments code highlighting."""

    def __init__(self):
        super().__init__(escape=True)

    def block_code(self, code: str, info: str | None = None) -> str:
        """Render a fenced code block, highlighted when the language is known.

        Args:
            code: The code content.
            info: Info string of the fence (e.g. ``python``).

        Returns:
            HTML string; Pygments output or an escaped ``<pre><code>`` block.
        """
        if info:
            name = info.split(None, 1)[0]
            try:
                lexer = get_lexer_by_name(name, stripall=True)
            except ClassNotFound:
                lexer = None
            if lexer is not None:
                return highlight(code, lexer, HtmlFormatter(cssclass="highlight"))
        return super().block_code(code, info)


def _as_text(source: str | bytes) -> str:
    if isinstance(source, bytes):
        try:
            return source.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise RenderError(f"invalid UTF-8 at byte {exc.start}") from exc
    try:
        source.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise RenderError(f"invalid UTF-8 at offset {exc.start}") from exc
    return source


class MarkdownRenderer:
    """Renders Markdown bodies to sanitized HTML.

    Every call builds its own mistune parser and renderer and drops them on
    return, so no parser state is shared between calls and the same input
    always yields the same output.
    """

    def render(self, source: str | bytes) -> str:
        """Render Markdown to an HTML fragment.

        Args:
            source: Markdown text.

        Returns:
            Sanitized HTML.

        Raises:
            RenderError: The input is not valid UTF-8 or mistune failed on it.
        """
        text = _as_text(source)
        markdown = mistune.create_markdown(
            renderer=_SafeHTMLRenderer(), plugins=PLUGINS
        )
        try:
            return markdown(text)
        except Exception as exc:
            raise RenderError(f"{type(exc).__name__}: {exc}") from exc


def render_markdown(source: str | bytes) -> str:
    """Render Markdown with a default MarkdownRenderer."""
    return MarkdownRenderer().render(source)
