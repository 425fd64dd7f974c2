"""Utility functions for Inkpress.

This module contains small helpers used throughout the Inkpress codebase:
the tag URL scheme, post id derivation, and path handling.

Key functions:
    tag_key: Identity of a tag for case-insensitive matching.
    tag_segment: Lower-cased, hyphen-joined form of a tag for output paths.
    tag_slug: Percent-encoded tag segment for URLs.
    tag_url: Relative URL of a tag page.
    tag_path, post_path: Site-relative paths of tag and post pages.
    titleize_tag: Turn a tag URL segment back into a display title.
    post_id_from_path: Derive a post id from its source file name.
    slugify: Convert a title to a file name slug.
    is_markdown: Check if a path is a Markdown file.
    is_draft: Check if a path is a draft post.
    ensure_clean_dir: Ensure a directory exists and is empty.
"""

from __future__ import annotations

import re
import shutil
from pathlib import Path
from urllib.parse import quote, unquote

WHITESPACE_RE = re.compile(r"\s+")


def tag_key(tag: str) -> str:
    """Return the matching identity of a tag.

    Tags compare equal when they differ only in case or in the length of
    whitespace runs.

    Args:
        tag: Tag as written in front-matter or a query.

    Returns:
        Lower-cased tag with whitespace runs collapsed to one space.

    Examples:
        >>> tag_key("Machine  Learning")
        'machine learning'
    """
    return WHITESPACE_RE.sub(" ", tag.strip()).lower()


def tag_segment(tag: str) -> str:
    """Return the unencoded URL path segment for a tag.

    Args:
        tag: Tag name.

    Returns:
        Lower-cased tag with whitespace runs replaced by a hyphen.

    Examples:
        >>> tag_segment("Machine Learning")
        'machine-learning'
    """
    return WHITESPACE_RE.sub("-", tag.strip()).lower()


def tag_slug(tag: str) -> str:
    """Return the percent-encoded URL segment for a tag.

    Examples:
        >>> tag_slug("C++ Tips")
        'c%2B%2B-tips'
    """
    return quote(tag_segment(tag), safe="")


def tag_url(tag: str) -> str:
    """Return the relative URL of a tag page, ``tags/<slug>``."""
    return f"tags/{tag_slug(tag)}"


def tag_path(tag: str) -> str:
    """Return the site-relative path of a tag page, ``/tags/<slug>/``."""
    return f"/{tag_url(tag)}/"


def post_path(post_id: str) -> str:
    """Return the site-relative path of a post page, ``/blog/<id>/``."""
    return f"/blog/{quote(post_id, safe='')}/"


def segment_from_slug(slug: str) -> str:
    """Decode a tag URL segment back into its comparable segment form."""
    return tag_segment(unquote(slug))


def titleize_tag(slug: str) -> str:
    """Convert a tag URL segment into a display title.

    Args:
        slug: Tag segment, encoded or not.

    Returns:
        Words split on hyphens with each word capitalized.

    Examples:
        >>> titleize_tag("machine-learning")
        'Machine Learning'
    """
    words = unquote(slug).replace("-", " ").split()
    return " ".join(word[:1].upper() + word[1:] for word in words)


def post_id_from_path(path: Path) -> str:
    """Derive the post id from a source file name.

    The ``.md`` extension is dropped, as is the leading underscore that marks
    a draft.

    Examples:
        >>> post_id_from_path(Path("posts/_upcoming.md"))
        'upcoming'
    """
    stem = path.stem
    return stem[1:] if stem.startswith("_") else stem


def slugify(name: str) -> str:
    """Convert a title to a URL-friendly slug.

    Args:
        name: Title or file name stem.

    Returns:
        Lower-cased slug of letters, digits and hyphens.
    """
    cleaned = re.sub(r"[^a-zA-Z0-9]+", "-", name)
    return cleaned.strip("-").lower() or "untitled"


def is_markdown(path: Path) -> bool:
    """Check if a path is a Markdown file.

    Args:
        path: Path to check.

    Returns:
        True if the file has .md extension (case-insensitive).
    """
    return path.suffix.lower() == ".md"


def is_draft(path: Path) -> bool:
    """Check if a path is a draft post (file name starting with ``_``)."""
    return path.name.startswith("_")


def ensure_clean_dir(path: Path) -> None:
    """Ensure a directory exists and is empty.

    If the directory exists, removes all contents. Creates the
    directory if it doesn't exist.

    Args:
        path: Directory path to clean or create.
    """
    if path.exists():
        shutil.rmtree(str(path))
    path.mkdir(parents=True, exist_ok=True)
