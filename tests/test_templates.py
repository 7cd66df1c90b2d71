from datetime import date
from pathlib import Path

import pytest

from quillpost.build import SiteConfig
from quillpost.collections import PostCollection
from quillpost.content import Post
from quillpost.errors import TemplateError
from quillpost.templates import TemplateEngine


def make_post(slug, day, **kwargs):
    defaults = dict(
        title=slug.title(),
        date_raw=day.isoformat(),
        body_html="<p>Body</p>",
        source_path=Path(f"{slug}.md"),
    )
    defaults.update(kwargs)
    return Post(slug=slug, date=day, **defaults)


def test_index_lists_posts_in_order_with_relative_links():
    engine = TemplateEngine(SiteConfig(title="My Blog"))
    posts = PostCollection(
        [make_post("first", date(2025, 1, 1)), make_post("second", date(2025, 2, 1), description="Two")]
    )
    html = engine.render_index(posts)
    assert "<title>My Blog</title>" in html
    assert "<h1>Posts</h1>" in html
    assert '<a href="second.html">Second</a>' in html
    assert html.index("second.html") < html.index("first.html")
    assert '<time datetime="2025-02-01">2025-02-01</time>' in html
    assert "<p>Two</p>" in html
    assert 'href="feed.xml"' in html


def test_index_with_no_posts():
    html = TemplateEngine(SiteConfig()).render_index(PostCollection())
    assert "<h1>Posts</h1>" in html
    assert "<li>" not in html


def test_post_page_escapes_metadata_but_not_body():
    engine = TemplateEngine(SiteConfig(title="Blog", author="Ann <ann@example.com>"))
    post = make_post(
        "x",
        date(2025, 1, 1),
        title="<script>alert(1)</script>",
        tags=["a&b"],
        body_html="<p><em>rendered</em></p>",
    )
    html = engine.render_post(post)
    assert "<script>alert(1)</script>" not in html
    assert "<h1>&lt;script&gt;alert(1)&lt;/script&gt;</h1>" in html
    assert "<li>a&amp;b</li>" in html
    assert "<p><em>rendered</em></p>" in html
    assert '<a href="index.html">Back</a>' in html
    assert 'content="Ann &lt;ann@example.com&gt;"' in html


def test_templates_dir_overrides_builtin(tmp_path):
    templates = tmp_path / "templates"
    templates.mkdir()
    (templates / "post.html").write_text(
        "<article>{{ post.title }}|{{ body_html }}|{{ site.title }}</article>", encoding="utf-8"
    )
    engine = TemplateEngine(SiteConfig(title="S"), templates)
    html = engine.render_post(make_post("x", date(2025, 1, 1), title="T & U"))
    assert html == "<article>T &amp; U|<p>Body</p>|S</article>"
    # index falls back to the built-in template
    assert "<h1>Posts</h1>" in engine.render_index(PostCollection())


def test_missing_templates_dir_uses_builtins(tmp_path):
    engine = TemplateEngine(SiteConfig(), tmp_path / "nope")
    assert "<h1>Posts</h1>" in engine.render_index(PostCollection())


def test_broken_template_raises_template_error(tmp_path):
    templates = tmp_path / "templates"
    templates.mkdir()
    (templates / "index.html").write_text("line one\n{% for %}\n", encoding="utf-8")
    engine = TemplateEngine(SiteConfig(), templates)
    with pytest.raises(TemplateError) as excinfo:
        engine.render_index(PostCollection())
    err = excinfo.value
    assert err.kind == "TemplateError"
    assert err.path == templates / "index.html"
    assert "line 2" in err.message


def test_undefined_attribute_error_is_wrapped(tmp_path):
    templates = tmp_path / "templates"
    templates.mkdir()
    (templates / "index.html").write_text("{{ posts.nope.deeper }}", encoding="utf-8")
    engine = TemplateEngine(SiteConfig(), templates)
    with pytest.raises(TemplateError):
        engine.render_index(PostCollection())
