import pytest

from quillpost.errors import RenderError
from quillpost.renderers import MarkdownRenderer, render_markdown


def test_render_heading_and_paragraph():
    html = render_markdown("# Hi\n\nSome *text*.\n")
    assert "<h1>Hi</h1>" in html
    assert "<p>Some <em>text</em>.</p>" in html


def test_raw_html_is_escaped():
    html = render_markdown("<script>alert(1)</script>\n\nInline <b>bold</b> tag.\n")
    assert "<script>" not in html
    assert "&lt;script&gt;" in html
    assert "<b>" not in html
    assert "&lt;b&gt;" in html


@pytest.mark.parametrize(
    "source",
    [
        "[click](javascript:alert(1))",
        "[click](JAVASCRIPT:alert(1))",
        "[click](vbscript:msgbox)",
        "![img](javascript:alert(1))",
    ],
)
def test_harmful_links_are_neutralized(source):
    html = render_markdown(source)
    assert "javascript:" not in html.lower()
    assert "vbscript:" not in html.lower()
    assert "#harmful-link" in html


def test_safe_links_survive():
    html = render_markdown("[home](https://example.com/a?b=1&c=2)")
    assert 'href="https://example.com/a?b=1' in html
    assert ">home</a>" in html
    assert "#harmful-link" not in html


def test_code_block_is_highlighted():
    html = render_markdown("```python\nprint('hi')\n```\n")
    assert 'class="highlight"' in html
    assert "print" in html


def test_unknown_language_falls_back_to_plain_block():
    html = render_markdown("```nosuchlang\n<tag>\n```\n")
    assert "<pre><code" in html
    assert "&lt;tag&gt;" in html


def test_plugins_enabled():
    html = render_markdown("~~gone~~\n\n| a | b |\n|---|---|\n| 1 | 2 |\n")
    assert "<del>gone</del>" in html
    assert "<table>" in html


def test_render_is_deterministic_and_isolated():
    renderer = MarkdownRenderer()
    first = renderer.render("Text[^1]\n\n[^1]: note\n")
    renderer.render("Other[^1]\n\n[^1]: different\n")
    assert renderer.render("Text[^1]\n\n[^1]: note\n") == first
    assert "different" not in first


def test_empty_body_renders_empty():
    assert render_markdown("") == ""


def test_invalid_utf8_bytes_raise_render_error():
    with pytest.raises(RenderError):
        render_markdown(b"ok \xff\xfe broken")


def test_surrogate_escaped_text_raises_render_error():
    text = b"bad \xff byte".decode("utf-8", errors="surrogateescape")
    with pytest.raises(RenderError):
        MarkdownRenderer().render(text)


def test_engine_failure_is_wrapped(monkeypatch):
    import mistune

    def broken(*args, **kwargs):
        def fail(text):
            raise RuntimeError("boom")

        return fail

    monkeypatch.setattr(mistune, "create_markdown", broken)
    with pytest.raises(RenderError) as excinfo:
        render_markdown("hi")
    assert "boom" in excinfo.value.message
