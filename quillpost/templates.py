"""Template rendering engine for Quillpost.

This module uses Jinja2 to render the index page and the per-post detail
pages. Autoescaping is on for every template, so titles, descriptions and
tags taken from front matter are escaped; only a post's already-sanitized
``body_html`` is inserted verbatim (wrapped in Markup).

Built-in templates live in DEFAULT_TEMPLATES. A project can override any of
them by placing a file with the same name in its templates directory.

Key class:
- TemplateEngine: Renders pages and provides site context to templates.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import (
    ChoiceLoader,
    DictLoader,
    Environment,
    FileSystemLoader,
    TemplateError,
    select_autoescape,
)
from markupsafe import Markup

from . import errors
from .collections import PostCollection
from .content import Post

BASE_TEMPLATE = """\
<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{% block title %}{{ site.title }}{% endblock %}</title>
{% if site.description %}
<meta name="description" content="{{ site.description }}">
{% endif %}
{% if site.author %}
<meta name="author" content="{{ site.author }}">
{% endif %}
<link rel="alternate" type="application/rss+xml" title="{{ site.title }}" href="feed.xml">
</head>
<body>
<header><a href="index.html">{{ site.title }}</a></header>
<main>
{% block content %}{% endblock %}
</main>
</body>
</html>
"""

INDEX_TEMPLATE = """\
{% extends "base.html" %}
{% block content %}
<h1>Posts</h1>
<ul class="posts">
{% for post in posts %}
<li>
<a href="{{ post.filename }}">{{ post.title }}</a>
<time datetime="{{ post.date.isoformat() }}">{{ post.date.isoformat() }}</time>
{% if post.description %}
<p>{{ post.description }}</p>
{% endif %}
</li>
{% endfor %}
</ul>
{% endblock %}
"""

POST_TEMPLATE = """\
{% extends "base.html" %}
{% block title %}{{ post.title }} - {{ site.title }}{% endblock %}
{% block content %}
<article>
<h1>{{ post.title }}</h1>
<p><time datetime="{{ post.date.isoformat() }}">{{ post.date.isoformat() }}</time></p>
{% if post.tags %}
<ul class="tags">
{% for tag in post.tags %}
<li>{{ tag }}</li>
{% endfor %}
</ul>
{% endif %}
{{ body_html }}
</article>
<p><a href="index.html">Back</a></p>
{% endblock %}
"""

DEFAULT_TEMPLATES = {
    "base.html": BASE_TEMPLATE,
    "index.html": INDEX_TEMPLATE,
    "post.html": POST_TEMPLATE,
}


class TemplateEngine:
    """Template rendering engine using Jinja2.

    Attributes:
        site: Site configuration exposed to templates as ``site``.
        templates_dir: Optional directory with template overrides.
        env: Jinja2 environment.
    """

    def __init__(self, site: Any, templates_dir: Path | None = None):
        """Initialize the template engine.

        Args:
            site: Site configuration (title, description, author, base_url).
            templates_dir: Directory whose templates take precedence over the
                built-in ones; ignored when it does not exist.
        """
        self.site = site
        self.templates_dir = templates_dir
        loaders = []
        if templates_dir is not None and templates_dir.is_dir():
            loaders.append(FileSystemLoader(templates_dir))
        loaders.append(DictLoader(DEFAULT_TEMPLATES))
        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.env.globals["site"] = site

    def render_index(self, posts: PostCollection) -> str:
        """Render the index page listing every post in collection order."""
        return self._render("index.html", posts=posts)

    def render_post(self, post: Post) -> str:
        """Render a post's detail page.

        ``body_html`` is marked safe; every other field is autoescaped.
        """
        return self._render("post.html", post=post, body_html=Markup(post.body_html))

    def _render(self, name: str, **context: Any) -> str:
        try:
            template = self.env.get_template(name)
            return template.render(**context)
        except TemplateError as exc:
            filename = getattr(exc, "filename", None)
            path = Path(filename) if filename else self._template_path(name)
            lineno = getattr(exc, "lineno", None)
            where = f" on line {lineno}" if lineno else ""
            raise errors.TemplateError(
                f"{type(exc).__name__}{where}: {exc.message or exc}", path
            ) from exc
        except UnicodeDecodeError as exc:
            # Raised by FileSystemLoader; a broken parent is reported under
            # the requested template.
            raise errors.TemplateError(
                f"template is not valid UTF-8: {exc.reason} at byte {exc.start}",
                self._template_path(name),
            ) from exc

    def _template_path(self, name: str) -> Path | None:
        if self.templates_dir is None:
            return None
        candidate = self.templates_dir / name
        return candidate if candidate.exists() else None
