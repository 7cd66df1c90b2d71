"""Feed generation for Quillpost.

Builds the RSS 2.0 document (``feed.xml``) for a site. Feed readers are a
stricter context than browsers, so every interpolated value, including the
already-sanitized post HTML carried in ``content:encoded``, is XML-escaped.

The output depends only on the posts and the site configuration: the
channel's ``lastBuildDate`` is the newest post's date rather than the wall
clock, so rebuilding unchanged posts yields a byte-identical feed.

Classes:
    RSSGenerator: Generates the RSS feed document.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from markupsafe import escape

from .utils import join_root_url, rfc822_date

if TYPE_CHECKING:
    from .content import Post

CONTENT_NS = "http://purl.org/rss/1.0/modules/content/"
ATOM_NS = "http://www.w3.org/2005/Atom"


def _xml(value: Any) -> str:
    return str(escape(str(value)))


class RSSGenerator:
    """Generates an RSS 2.0 feed for content syndication.

    Items follow the order of the posts passed in (the site order). Each
    item's guid is its permalink, which only depends on the slug, so it
    stays stable when a post is edited.
    """

    @property
    def filename(self) -> str:
        """Return RSS filename."""
        return "feed.xml"

    def post_link(self, post: Post, site: Any) -> str:
        return join_root_url(site.base_url, post.filename)

    def generate(self, posts: Iterable[Post], site: Any) -> str:
        """Generate RSS feed content.

        Args:
            posts: Posts in site order.
            site: Site configuration providing title, description, base_url.

        Returns:
            RSS XML document.
        """
        posts = list(posts)
        home = join_root_url(site.base_url, "/")
        lines = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            f'<rss version="2.0" xmlns:content="{CONTENT_NS}" xmlns:atom="{ATOM_NS}">',
            "<channel>",
            f"<title>{_xml(site.title)}</title>",
            f"<link>{_xml(home)}</link>",
            f"<description>{_xml(site.description or site.title)}</description>",
            f'<atom:link href="{_xml(join_root_url(site.base_url, self.filename))}"'
            ' rel="self" type="application/rss+xml"/>',
        ]
        if posts:
            newest = max(post.date for post in posts)
            lines.append(f"<lastBuildDate>{rfc822_date(newest)}</lastBuildDate>")

        for post in posts:
            link = _xml(self.post_link(post, site))
            lines.extend(
                [
                    "<item>",
                    f"<title>{_xml(post.title)}</title>",
                    f"<link>{link}</link>",
                    f'<guid isPermaLink="true">{link}</guid>',
                    f"<pubDate>{rfc822_date(post.date)}</pubDate>",
                    f"<description>{_xml(post.description or post.title)}</description>",
                ]
            )
            lines.extend(f"<category>{_xml(tag)}</category>" for tag in post.tags)
            lines.append(f"<content:encoded>{_xml(post.body_html)}</content:encoded>")
            lines.append("</item>")

        lines.extend(["</channel>", "</rss>"])
        return "\n".join(lines) + "\n"
