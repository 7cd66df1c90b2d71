import xml.etree.ElementTree as ET
from datetime import date
from pathlib import Path

from quillpost.build import SiteConfig
from quillpost.collections import PostCollection
from quillpost.content import Post
from quillpost.feeds import CONTENT_NS, RSSGenerator


def make_post(slug, day, **kwargs):
    defaults = dict(
        title=slug.title(),
        date_raw=day.isoformat(),
        body_html=f"<p>{slug} body</p>\n",
        source_path=Path(f"{slug}.md"),
    )
    defaults.update(kwargs)
    return Post(slug=slug, date=day, **defaults)


def site(**overrides):
    values = dict(title="My Blog", description="Notes", base_url="https://example.com/blog/")
    values.update(overrides)
    return SiteConfig(**values)


def test_feed_is_well_formed_and_ordered():
    posts = PostCollection(
        [
            make_post("older", date(2024, 12, 31), tags=["meta", "zig"]),
            make_post("newer", date(2025, 1, 1), description="Fresh"),
        ]
    )
    xml = RSSGenerator().generate(posts, site())
    root = ET.fromstring(xml.encode("utf-8"))
    assert root.tag == "rss"
    assert root.attrib["version"] == "2.0"

    channel = root.find("channel")
    assert channel.findtext("title") == "My Blog"
    assert channel.findtext("link") == "https://example.com/blog/"
    assert channel.findtext("description") == "Notes"
    assert channel.findtext("lastBuildDate") == "Wed, 01 Jan 2025 00:00:00 +0000"

    items = channel.findall("item")
    assert [i.findtext("title") for i in items] == ["Newer", "Older"]
    newest = items[0]
    assert newest.findtext("link") == "https://example.com/blog/newer.html"
    assert newest.findtext("guid") == "https://example.com/blog/newer.html"
    assert newest.find("guid").attrib["isPermaLink"] == "true"
    assert newest.findtext("pubDate") == "Wed, 01 Jan 2025 00:00:00 +0000"
    assert newest.findtext("description") == "Fresh"
    assert newest.findtext(f"{{{CONTENT_NS}}}encoded") == "<p>newer body</p>\n"

    older = items[1]
    assert older.findtext("description") == "Older"
    assert [c.text for c in older.findall("category")] == ["meta", "zig"]


def test_feed_escapes_text_values():
    post = make_post(
        "x",
        date(2025, 1, 1),
        title='Tom & Jerry <3 "quoted"',
        tags=["a&b"],
        body_html="<p>1 &lt; 2</p>",
    )
    xml = RSSGenerator().generate(PostCollection([post]), site(title="A & B"))
    assert "<title>A &amp; B</title>" in xml
    assert "Tom &amp; Jerry &lt;3" in xml
    assert "<category>a&amp;b</category>" in xml
    assert "&lt;p&gt;1 &amp;lt; 2&lt;/p&gt;" in xml

    item = ET.fromstring(xml.encode("utf-8")).find("channel/item")
    assert item.findtext("title") == 'Tom & Jerry <3 "quoted"'
    assert item.findtext(f"{{{CONTENT_NS}}}encoded") == "<p>1 &lt; 2</p>"


def test_empty_feed_is_valid():
    xml = RSSGenerator().generate(PostCollection(), site(description=""))
    channel = ET.fromstring(xml.encode("utf-8")).find("channel")
    assert channel.findall("item") == []
    assert channel.find("lastBuildDate") is None
    assert channel.findtext("description") == "My Blog"


def test_feed_is_deterministic():
    posts = PostCollection([make_post("a", date(2025, 1, 1)), make_post("b", date(2025, 1, 2))])
    generator = RSSGenerator()
    assert generator.generate(posts, site()) == generator.generate(posts, site())


def test_feed_filename_and_links():
    generator = RSSGenerator()
    assert generator.filename == "feed.xml"
    post = make_post("hello", date(2025, 1, 1))
    assert generator.post_link(post, site(base_url="https://example.com")) == "https://example.com/hello.html"
