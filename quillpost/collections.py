from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .content import Post


def post_sort_key(post: Post) -> tuple[int, str]:
    """Newest first; equal dates fall back to slug ascending."""
    return (-post.date.toordinal(), post.slug)


class PostCollection(Sequence["Post"]):
    """Ordered, read-only sequence of published posts.

    Posts are kept in site order (date descending, slug ascending) no
    matter what order they were passed in, so every artifact that iterates
    a collection lists posts the same way.
    """

    def __init__(self, posts: Iterable[Post] = ()):
        self._posts = sorted(posts, key=post_sort_key)

    def __iter__(self) -> Iterator[Post]:
        return iter(self._posts)

    def __len__(self) -> int:
        return len(self._posts)

    def __getitem__(self, item):
        return self._posts[item]

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"PostCollection({len(self._posts)} posts)"
