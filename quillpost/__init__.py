"""Quillpost static blog generator.

This package builds a static blog from a directory of Markdown posts with
YAML front matter: an index page, one page per post and an RSS feed. Post
bodies are rendered in safe mode, so raw HTML and dangerous link schemes
never reach the output.

The main entry point is the CLI module, which provides commands for
building the site once and for running the development server with a
polling rebuild loop.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
