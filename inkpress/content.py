"""Content loading for Inkpress.

This module discovers post source files and builds Post and PostPreview
objects from them.

Key classes:
- PostPreview: Listing projection of a post, without body or references.
- Post: A fully rendered post.
- FileContentLoader: Discovers post source files in the posts directory.
- PostBuilder: Builds previews and full posts from a source file.

Previews only parse front-matter. Full posts also render the Markdown body
and link citations, which is the expensive part.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

from .errors import InkpressError
from .extractors import PostMetadata, parse_document
from .renderers import MarkdownRenderer, default_renderer
from .utils import is_draft, is_markdown, post_id_from_path


class PostNotFoundError(InkpressError, LookupError):
    """No source document matches the requested post id.

    Attributes:
        post_id: The id that was requested.
    """

    def __init__(self, post_id: str, reason: str = "no such post"):
        self.post_id = post_id
        super().__init__(f"{post_id}: {reason}")


@dataclass
class PostPreview:
    """Listing view of a post.

    Attributes:
        id: Post id, the source file name without ``.md``.
        title: Post title.
        date: Publication date.
        read_time: Reading time label.
        excerpt: Short summary.
        tags: Tags in front-matter order.
        has_citations: Whether the post defines any references.
        draft: Whether the source file is a draft.
        path: Path to the source file.
    """

    id: str
    title: str
    date: date
    read_time: str
    excerpt: str
    tags: list[str]
    has_citations: bool
    draft: bool = False
    path: Path | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "date": self.date.isoformat(),
            "readTime": self.read_time,
            "excerpt": self.excerpt,
            "tags": list(self.tags),
            "hasCitations": self.has_citations,
        }


@dataclass
class Post:
    """A fully rendered post.

    Attributes:
        id: Post id, the source file name without ``.md``.
        title: Post title.
        date: Publication date.
        read_time: Reading time label.
        excerpt: Short summary.
        tags: Tags in front-matter order.
        references: Citation number to URL.
        content_html: Rendered body with citation links.
        draft: Whether the source file is a draft.
        path: Path to the source file.
    """

    id: str
    title: str
    date: date
    read_time: str
    excerpt: str
    tags: list[str]
    content_html: str
    references: dict[str, str] = field(default_factory=dict)
    draft: bool = False
    path: Path | None = None

    @property
    def has_citations(self) -> bool:
        return bool(self.references)

    def preview(self) -> PostPreview:
        """Project this post onto its listing view."""
        return PostPreview(
            id=self.id,
            title=self.title,
            date=self.date,
            read_time=self.read_time,
            excerpt=self.excerpt,
            tags=list(self.tags),
            has_citations=self.has_citations,
            draft=self.draft,
            path=self.path,
        )

    def to_dict(self) -> dict[str, Any]:
        data = self.preview().to_dict()
        data["references"] = dict(self.references)
        data["contentHtml"] = self.content_html
        return data


class FileContentLoader:
    """Discovers post source files.

    Only ``*.md`` files directly inside the posts directory are posts.
    Dotfiles are ignored, and drafts (``_`` prefix) are skipped unless
    requested. A draft whose id is taken by a published file is always
    skipped, so ids stay unique. Files are returned in ascending name order,
    which is the enumeration order listings fall back on for equal dates.

    Attributes:
        posts_dir: Directory containing post source files.
    """

    def __init__(self, posts_dir: Path):
        self.posts_dir = posts_dir

    def iter_files(self, include_drafts: bool = False) -> list[Path]:
        """List all post source files.

        Args:
            include_drafts: Whether to include draft files.

        Returns:
            Sorted list of paths to post files.

        Raises:
            FileNotFoundError: If the posts directory does not exist.
        """
        if not self.posts_dir.is_dir():
            raise FileNotFoundError(f"Expected posts directory at {self.posts_dir}")
        candidates = [
            path
            for path in sorted(self.posts_dir.iterdir(), key=lambda p: p.name)
            if path.is_file() and not path.name.startswith(".") and is_markdown(path)
        ]
        published = {post_id_from_path(p) for p in candidates if not is_draft(p)}
        files: list[Path] = []
        for path in candidates:
            if is_draft(path) and (not include_drafts or post_id_from_path(path) in published):
                continue
            files.append(path)
        return files

    def find(self, post_id: str, include_drafts: bool = False) -> Path | None:
        """Return the source file whose derived id equals ``post_id`` exactly.

        A published file wins over a draft with the same id.
        """
        for path in self.iter_files(include_drafts):
            if post_id_from_path(path) == post_id:
                return path
        return None


class PostBuilder:
    """Builds PostPreview and Post objects from source files.

    Attributes:
        renderer: Markdown renderer used for full posts.
    """

    def __init__(self, renderer: MarkdownRenderer | None = None):
        self.renderer = renderer or default_renderer

    def read(self, path: Path) -> tuple[PostMetadata, str]:
        """Read and normalize a source file.

        Raises:
            OSError: If the file cannot be read.
            MalformedDocumentError: If the front-matter is invalid.
        """
        return parse_document(path.read_text(encoding="utf-8"), path)

    def build_preview(self, path: Path) -> PostPreview:
        """Build the listing view of a post from front-matter only."""
        metadata, _ = self.read(path)
        return PostPreview(
            id=post_id_from_path(path),
            title=metadata.title,
            date=metadata.date,
            read_time=metadata.read_time,
            excerpt=metadata.excerpt,
            tags=metadata.tags,
            has_citations=bool(metadata.references),
            draft=is_draft(path),
            path=path,
        )

    def build_post(self, path: Path) -> Post:
        """Build a full post, rendering its body and linking citations."""
        metadata, body = self.read(path)
        return Post(
            id=post_id_from_path(path),
            title=metadata.title,
            date=metadata.date,
            read_time=metadata.read_time,
            excerpt=metadata.excerpt,
            tags=metadata.tags,
            content_html=self.renderer.render_post(body, metadata.references),
            references=metadata.references,
            draft=is_draft(path),
            path=path,
        )
