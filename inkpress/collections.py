from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from .utils import segment_from_slug, tag_key, tag_segment, tag_slug, tag_url


@dataclass(frozen=True)
class TagCount:
    """A tag with the number of posts carrying it."""

    name: str
    count: int

    @property
    def slug(self) -> str:
        return tag_slug(self.name)

    @property
    def segment(self) -> str:
        return tag_segment(self.name)

    @property
    def url(self) -> str:
        return tag_url(self.name)


class PostCollection(Sequence[Any]):
    """Lightweight helper for working with lists of posts or previews."""

    def __init__(self, posts: Iterable[Any]):
        self._posts = list(posts)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._posts)

    def __len__(self) -> int:
        return len(self._posts)

    def __getitem__(self, item):
        return self._posts[item]

    def with_tag(self, tag: str) -> PostCollection:
        """Posts carrying ``tag``, compared case-insensitively."""
        key = tag_key(tag)
        return PostCollection(
            p for p in self._posts if any(tag_key(t) == key for t in p.tags)
        )

    def drafts(self) -> PostCollection:
        return PostCollection(p for p in self._posts if p.draft)

    def published(self) -> PostCollection:
        return PostCollection(p for p in self._posts if not p.draft)

    def sorted(self, reverse: bool = True) -> PostCollection:
        """Sort posts by date, newest first by default.

        The sort is stable in both directions: posts sharing a date keep the
        order they had in this collection.

        Args:
            reverse: If True (default), newest first. If False, oldest first.

        Returns:
            A new PostCollection with sorted posts.
        """
        return PostCollection(sorted(self._posts, key=lambda p: p.date, reverse=reverse))

    def latest(self, count: int = 5) -> PostCollection:
        return PostCollection(self.sorted()[:count])

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"PostCollection({len(self._posts)} posts)"


class TagCollection(Mapping[str, PostCollection]):
    """Mapping of canonical tag name to PostCollection.

    Tags differing only in case fold onto one entry. The canonical name is the
    casing met first while iterating the posts, so callers pass posts in
    listing order (newest first) to let the most recent spelling win.
    """

    def __init__(self, mapping: dict[str, Iterable[Any]]):
        self._mapping = {k: PostCollection(v) for k, v in mapping.items()}
        self._names = {tag_key(k): k for k in self._mapping}

    @classmethod
    def from_posts(cls, posts: Iterable[Any]) -> TagCollection:
        """Build the tag index of ``posts``."""
        canonical: dict[str, str] = {}
        mapping: dict[str, list[Any]] = {}
        for post in posts:
            for tag in post.tags:
                name = canonical.setdefault(tag_key(tag), tag)
                bucket = mapping.setdefault(name, [])
                if not bucket or bucket[-1] is not post:
                    bucket.append(post)
        return cls(mapping)

    def __getitem__(self, key: str) -> PostCollection:
        return self._mapping[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._mapping)

    def __len__(self) -> int:
        return len(self._mapping)

    def canonical(self, tag: str) -> str | None:
        """Return the stored casing of ``tag``, or None if unknown."""
        return self._names.get(tag_key(tag))

    def find_by_slug(self, slug: str) -> str | None:
        """Resolve a tag URL segment (encoded or not) to its canonical name."""
        wanted = segment_from_slug(slug)
        for name in self._mapping:
            if tag_segment(name) == wanted:
                return name
        return None

    def names(self) -> list[str]:
        """Canonical tag names in ascending order."""
        return sorted(self._mapping)

    def counts(self) -> list[TagCount]:
        return [TagCount(name, len(self._mapping[name])) for name in self.names()]

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"TagCollection({len(self._mapping)} tags)"
