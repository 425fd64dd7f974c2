"""Front-matter extraction and normalization for Inkpress.

A post source file is a YAML front-matter block fenced by ``---`` lines,
followed by a Markdown body. This module splits the two, then normalizes the
loosely typed YAML mapping into a fully typed PostMetadata record. A
document either normalizes completely or fails with every field-level defect
listed; partially typed data never leaves this module.

Key classes:
- DocumentDefect: One field-level problem with a document.
- MalformedDocumentError: Raised when a document cannot be normalized.
- FrontmatterExtractor: Splits raw text into front-matter and body.
- PostMetadataValidator: Normalizes front-matter into PostMetadata.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any

import yaml

from .errors import InkpressError
from .utils import tag_segment

FRONTMATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(.*?\r?\n)?---[ \t]*(?:\r?\n|\Z)", re.DOTALL
)

_SCALAR_TYPES = (str, int, float, bool)


@dataclass(frozen=True)
class DocumentDefect:
    """A single reason a document could not be normalized.

    Attributes:
        path: Source file of the document.
        field: Front-matter key at fault, or ``"frontmatter"`` for the block.
        message: Human-readable description.
    """

    path: Path
    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.path.name}: {self.field}: {self.message}"


class MalformedDocumentError(InkpressError):
    """A document's front-matter failed normalization.

    Attributes:
        path: Source file of the document.
        defects: Every field-level defect found.
    """

    def __init__(self, path: Path, defects: list[DocumentDefect]):
        self.path = path
        self.defects = list(defects)
        summary = "; ".join(f"{d.field}: {d.message}" for d in self.defects)
        super().__init__(f"{path}: {summary}")


@dataclass
class PostMetadata:
    """Typed front-matter of a post.

    Attributes:
        title: Post title.
        date: Publication date.
        excerpt: Short summary shown in listings.
        read_time: Free-text reading time label, e.g. "5 min read".
        tags: Normalized tag list, no duplicates.
        references: Citation number to URL.
    """

    title: str
    date: date
    excerpt: str = ""
    read_time: str = ""
    tags: list[str] = field(default_factory=list)
    references: dict[str, str] = field(default_factory=dict)


def is_path_safe_tag(tag: str) -> bool:
    """Whether a tag maps to exactly one output directory under ``tags/``.

    Slashes would nest the page and dot-only names would climb out of it.
    """
    segment = tag_segment(tag)
    if "/" in segment or "\\" in segment:
        return False
    return segment.strip(".") != ""


def normalize_tags(value: Any) -> list[str]:
    """Normalize a front-matter ``tags`` value to a list of strings.

    A missing value becomes an empty list and a single scalar becomes a
    one-element list. Sequence entries keep their order; ``None`` entries
    and repeats are dropped. Normalizing an already normalized list returns
    an equal list.

    Args:
        value: Raw ``tags`` value from YAML.

    Returns:
        List of tag strings.

    Raises:
        ValueError: If the value is a mapping, contains nested collections,
            or holds a tag that cannot be one URL path segment.
    """
    if value is None:
        return []
    if isinstance(value, _SCALAR_TYPES):
        items: list[Any] = [value]
    elif isinstance(value, (list, tuple)):
        items = list(value)
    else:
        raise ValueError(f"expected a string or a list, got {type(value).__name__}")

    tags: list[str] = []
    for item in items:
        if item is None:
            continue
        if not isinstance(item, _SCALAR_TYPES):
            raise ValueError(f"tag entries must be strings, got {type(item).__name__}")
        tag = str(item).strip()
        if not tag:
            continue
        if not is_path_safe_tag(tag):
            raise ValueError(f"tag {tag!r} cannot be used as a URL path segment")
        if tag not in tags:
            tags.append(tag)
    return tags


def normalize_references(value: Any) -> dict[str, str]:
    """Normalize a front-matter ``references`` mapping.

    YAML reads ``1: https://...`` with an integer key, so keys and values are
    coerced to strings.

    Raises:
        ValueError: If the value is not a mapping or a URL is missing.
    """
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"expected a mapping, got {type(value).__name__}")
    references: dict[str, str] = {}
    for key, url in value.items():
        if url is None or not isinstance(url, _SCALAR_TYPES):
            raise ValueError(f"reference {key!r} has no URL")
        references[str(key).strip()] = str(url).strip()
    return references


def normalize_date(value: Any) -> date:
    """Normalize a front-matter ``date`` value to a calendar date.

    YAML already turns unquoted ``2024-01-15`` into a date and timestamps
    into datetimes; quoted values arrive as ISO strings.

    Raises:
        ValueError: If the value is missing or not an ISO date.
    """
    if value is None:
        raise ValueError("missing")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            raise ValueError(f"not an ISO date: {value!r}") from None
    raise ValueError(f"not an ISO date: {value!r}")


class FrontmatterExtractor:
    """Splits raw document text into front-matter and body.

    A file without a fenced block has empty front-matter. Invalid YAML and
    non-mapping blocks are reported as a MalformedDocumentError so a broken
    draft is never mistaken for a post without metadata.
    """

    def extract(self, content: str, path: Path) -> dict[str, Any]:
        """Extract frontmatter from content.

        Args:
            content: Source content with potential frontmatter.
            path: Path to the source file.

        Returns:
            Dictionary with 'frontmatter' key and 'body' key.

        Raises:
            MalformedDocumentError: If the block is not a YAML mapping.
        """
        text = content.lstrip("\ufeff")
        match = FRONTMATTER_RE.match(text)
        if not match:
            return {"frontmatter": {}, "body": text}
        try:
            data = yaml.safe_load(match.group(1) or "") or {}
        except yaml.YAMLError as exc:
            raise MalformedDocumentError(
                path, [DocumentDefect(path, "frontmatter", f"invalid YAML: {exc}")]
            ) from exc
        if not isinstance(data, dict):
            raise MalformedDocumentError(
                path, [DocumentDefect(path, "frontmatter", "expected a mapping")]
            )
        return {"frontmatter": data, "body": text[match.end() :]}


class PostMetadataValidator:
    """Normalizes a front-matter mapping into PostMetadata.

    ``title`` and ``date`` are required. ``excerpt`` and ``readTime``
    (``read_time`` is accepted too) default to empty strings; ``tags`` and
    ``references`` default to empty collections.
    """

    def validate(self, frontmatter: Mapping[str, Any], path: Path) -> PostMetadata:
        """Normalize front-matter, collecting every defect.

        Args:
            frontmatter: Mapping parsed from YAML.
            path: Path to the source file, for defect reports.

        Returns:
            Fully typed PostMetadata.

        Raises:
            MalformedDocumentError: If any field fails normalization.
        """
        defects: list[DocumentDefect] = []

        def text_field(name: str, value: Any, required: bool = False) -> str:
            if value is None or (isinstance(value, str) and not value.strip()):
                if required:
                    defects.append(DocumentDefect(path, name, "missing"))
                return ""
            if not isinstance(value, _SCALAR_TYPES):
                defects.append(
                    DocumentDefect(path, name, f"expected text, got {type(value).__name__}")
                )
                return ""
            return str(value).strip()

        title = text_field("title", frontmatter.get("title"), required=True)
        excerpt = text_field("excerpt", frontmatter.get("excerpt"))
        read_time = text_field(
            "readTime", frontmatter.get("readTime", frontmatter.get("read_time"))
        )

        published = None
        try:
            published = normalize_date(frontmatter.get("date"))
        except ValueError as exc:
            defects.append(DocumentDefect(path, "date", str(exc)))

        tags: list[str] = []
        try:
            tags = normalize_tags(frontmatter.get("tags"))
        except ValueError as exc:
            defects.append(DocumentDefect(path, "tags", str(exc)))

        references: dict[str, str] = {}
        try:
            references = normalize_references(frontmatter.get("references"))
        except ValueError as exc:
            defects.append(DocumentDefect(path, "references", str(exc)))

        if defects or published is None:
            raise MalformedDocumentError(path, defects)
        return PostMetadata(
            title=title,
            date=published,
            excerpt=excerpt,
            read_time=read_time,
            tags=tags,
            references=references,
        )


def parse_document(text: str, path: Path) -> tuple[PostMetadata, str]:
    """Split and normalize a post source document.

    Args:
        text: Raw file content.
        path: Path to the source file.

    Returns:
        Tuple of (PostMetadata, Markdown body).

    Raises:
        MalformedDocumentError: If the front-matter is invalid.
    """
    extracted = FrontmatterExtractor().extract(text, path)
    metadata = PostMetadataValidator().validate(extracted["frontmatter"], path)
    return metadata, extracted["body"]
