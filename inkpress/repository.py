"""Post repository for Inkpress.

The repository is the single source of truth for post and tag data. Pages,
feeds and structured data all read through it.

Key classes:
- PostSource: Query surface shared by the repository and snapshots.
- PostRepository: Reads the posts directory afresh on every query.
- CorpusSnapshot: Immutable, fully loaded copy of the corpus.

PostRepository keeps no cache: each call rescans the posts directory and
re-parses what it needs, so it always reflects the files on disk. A build
takes one snapshot instead and answers every query from memory; taking a new
snapshot is the reload.

Malformed documents are isolated. Listings skip them and record their
defects on ``defects``; fetching one directly raises MalformedDocumentError.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from .collections import PostCollection, TagCollection, TagCount
from .content import FileContentLoader, Post, PostBuilder, PostNotFoundError, PostPreview
from .extractors import DocumentDefect, MalformedDocumentError


class PostSource(ABC):
    """Query operations over a set of posts.

    Subclasses provide the previews and single-post lookup; the tag queries
    are derived from the previews.
    """

    @abstractmethod
    def list_previews(self) -> list[PostPreview]:
        """Return all previews, newest first, ties in enumeration order."""
        ...

    @abstractmethod
    def get_post(self, post_id: str) -> Post:
        """Return the full post with id ``post_id``.

        Raises:
            PostNotFoundError: If no post has that id.
        """
        ...

    def post_ids(self) -> list[str]:
        """Ids of all listed posts, newest first."""
        return [preview.id for preview in self.list_previews()]

    def get_post_references(self, post_id: str) -> dict[str, str]:
        return dict(self.get_post(post_id).references)

    def tags(self) -> TagCollection:
        """Tag index over the listed posts, casing folded onto the newest post's."""
        return TagCollection.from_posts(self.list_previews())

    def list_tags(self) -> list[str]:
        """All tags, deduplicated case-insensitively, in ascending order."""
        return self.tags().names()

    def tag_counts(self) -> list[TagCount]:
        return self.tags().counts()

    def get_posts_by_tag(self, tag: str) -> list[PostPreview]:
        """Previews carrying ``tag`` (case-insensitive), newest first.

        An unknown tag yields an empty list.
        """
        return list(PostCollection(self.list_previews()).with_tag(tag))

    def find_tag(self, slug: str) -> str | None:
        """Resolve a tag URL segment to its canonical tag name."""
        return self.tags().find_by_slug(slug)


class PostRepository(PostSource):
    """Reads posts from a directory on every query.

    Attributes:
        posts_dir: Directory containing post source files.
        include_drafts: Whether draft files are part of the corpus.
        defects: Defects of documents skipped by the most recent listing on
            this instance. Concurrent callers read their own defects from
            ``scan()`` or ``snapshot().defects`` instead.
    """

    def __init__(
        self,
        posts_dir: Path,
        include_drafts: bool = False,
        content_loader: FileContentLoader | None = None,
        post_builder: PostBuilder | None = None,
    ):
        self.posts_dir = posts_dir
        self.include_drafts = include_drafts
        self._content_loader = content_loader or FileContentLoader(posts_dir)
        self._post_builder = post_builder or PostBuilder()
        self.defects: list[DocumentDefect] = []

    def _load(self, build) -> tuple[list, list[DocumentDefect]]:
        loaded = []
        defects: list[DocumentDefect] = []
        for path in self._content_loader.iter_files(self.include_drafts):
            try:
                loaded.append(build(path))
            except MalformedDocumentError as exc:
                defects.extend(exc.defects)
            except (OSError, UnicodeDecodeError) as exc:
                defects.append(DocumentDefect(path, "file", str(exc)))
        self.defects = defects
        return loaded, defects

    def scan(self) -> tuple[list[PostPreview], list[DocumentDefect]]:
        """List previews together with the defects of the skipped documents."""
        previews, defects = self._load(self._post_builder.build_preview)
        return list(PostCollection(previews).sorted()), defects

    def list_previews(self) -> list[PostPreview]:
        return self.scan()[0]

    def get_post(self, post_id: str) -> Post:
        """Fetch and render one post.

        Raises:
            PostNotFoundError: If no file has that id, it cannot be read, or
                the posts directory is missing.
            MalformedDocumentError: If the file's front-matter is invalid.
        """
        try:
            path = self._content_loader.find(post_id, self.include_drafts)
        except FileNotFoundError as exc:
            raise PostNotFoundError(post_id, str(exc)) from exc
        if path is None:
            raise PostNotFoundError(post_id)
        try:
            return self._post_builder.build_post(path)
        except (OSError, UnicodeDecodeError) as exc:
            raise PostNotFoundError(post_id, f"cannot read {path.name}: {exc}") from exc

    def snapshot(self) -> CorpusSnapshot:
        """Load every post once into an immutable snapshot."""
        posts, defects = self._load(self._post_builder.build_post)
        return CorpusSnapshot.from_posts(posts, defects)


@dataclass(frozen=True)
class CorpusSnapshot(PostSource):
    """Immutable, fully rendered corpus.

    Attributes:
        posts: Full posts, newest first.
        defects: Defects of documents left out of the snapshot.
    """

    posts: tuple[Post, ...]
    defects: tuple[DocumentDefect, ...] = ()

    @classmethod
    def from_posts(
        cls, posts: Iterable[Post], defects: Iterable[DocumentDefect] = ()
    ) -> CorpusSnapshot:
        return cls(tuple(PostCollection(posts).sorted()), tuple(defects))

    def list_previews(self) -> list[PostPreview]:
        return [post.preview() for post in self.posts]

    def get_post(self, post_id: str) -> Post:
        for post in self.posts:
            if post.id == post_id:
                return post
        raise PostNotFoundError(post_id)
