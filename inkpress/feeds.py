"""Feed generation for Inkpress.

This module generates the machine-readable artifacts written next to the
pages: the sitemap and the tag index. Feed generation is kept apart from
build orchestration.

Classes:
    FeedGenerator: Abstract base class for feed generators.
    SitemapGenerator: Generates sitemap.xml.
    TagIndexGenerator: Generates tags.json.
    FeedRegistry: Registry for managing feed generators.

Functions:
    create_default_feed_registry: Create a registry with default generators.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .html_utils import escape_html
from .structured_data import absolute_url
from .utils import post_path, tag_path

if TYPE_CHECKING:
    from .repository import PostSource


class FeedGenerator(ABC):
    """Abstract base class for feed generators.

    Subclasses implement specific formats. New formats are added by
    registering another subclass.
    """

    @property
    @abstractmethod
    def filename(self) -> str:
        """Return the output filename for this feed."""
        ...

    @abstractmethod
    def generate(self, source: PostSource, config: Mapping[str, Any]) -> str | None:
        """Generate feed content.

        Args:
            source: Posts and tags to describe.
            config: Site configuration.

        Returns:
            Feed content as a string, or None if the feed cannot be generated
            (e.g., missing required configuration).
        """
        ...

    def write(
        self, output_dir: Path, source: PostSource, config: Mapping[str, Any]
    ) -> bool:
        """Generate and write the feed to the output directory.

        Returns:
            True if the feed was written, False if skipped.
        """
        content = self.generate(source, config)
        if content is None:
            return False
        output_path = output_dir / self.filename
        output_path.write_text(content, encoding="utf-8")
        return True


@dataclass(frozen=True)
class SitemapEntry:
    """One ``<url>`` element of a sitemap."""

    loc: str
    lastmod: str
    changefreq: str
    priority: float

    def to_xml(self) -> str:
        return (
            f"  <url><loc>{escape_html(self.loc)}</loc>"
            f"<lastmod>{self.lastmod}</lastmod>"
            f"<changefreq>{self.changefreq}</changefreq>"
            f"<priority>{self.priority:.1f}</priority></url>"
        )


class SitemapGenerator(FeedGenerator):
    """Generates sitemap.xml for search engine indexing.

    Lists the home page and the tag index, then one URL per post (priority
    0.8, monthly) and one per tag (priority 0.6, weekly).

    Requires ``site_url`` in the configuration to generate absolute URLs.

    Attributes:
        now: Timestamp used as lastmod of the fixed routes; build time when None.
    """

    def __init__(self, now: datetime | None = None):
        self.now = now

    @property
    def filename(self) -> str:
        """Return sitemap filename."""
        return "sitemap.xml"

    def entries(self, source: PostSource, config: Mapping[str, Any]) -> list[SitemapEntry]:
        """Sitemap entries in output order."""
        built = (self.now or datetime.now(timezone.utc)).strftime("%Y-%m-%d")
        entries = [
            SitemapEntry(absolute_url(config, "/"), built, "weekly", 1.0),
            SitemapEntry(absolute_url(config, "/tags/"), built, "weekly", 0.7),
        ]
        for preview in source.list_previews():
            entries.append(
                SitemapEntry(
                    absolute_url(config, post_path(preview.id)),
                    preview.date.isoformat(),
                    "monthly",
                    0.8,
                )
            )
        for tag in source.list_tags():
            entries.append(
                SitemapEntry(absolute_url(config, tag_path(tag)), built, "weekly", 0.6)
            )
        return entries

    def generate(self, source: PostSource, config: Mapping[str, Any]) -> str | None:
        """Generate sitemap.xml content.

        Returns:
            Sitemap XML content, or None if no site URL is configured.
        """
        if not str(config.get("site_url") or "").strip():
            return None
        lines = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
        ]
        lines.extend(entry.to_xml() for entry in self.entries(source, config))
        lines.append("</urlset>")
        return "\n".join(lines) + "\n"


class TagIndexGenerator(FeedGenerator):
    """Generates tags.json, the tag taxonomy with its posts.

    Each entry carries the canonical name, URL slug, page URL, post count and
    the ids of the tagged posts, newest first.
    """

    @property
    def filename(self) -> str:
        return "tags.json"

    def generate(self, source: PostSource, config: Mapping[str, Any]) -> str | None:
        tags = source.tags()
        payload = []
        for count in tags.counts():
            payload.append(
                {
                    "name": count.name,
                    "slug": count.slug,
                    "url": absolute_url(config, tag_path(count.name)),
                    "count": count.count,
                    "posts": [post.id for post in tags[count.name]],
                }
            )
        return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


class FeedRegistry:
    """Registry for managing feed generators.

    Attributes:
        _generators: List of registered feed generators.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._generators: list[FeedGenerator] = []

    def register(self, generator: FeedGenerator) -> None:
        """Register a feed generator.

        Args:
            generator: Feed generator to register.
        """
        self._generators.append(generator)

    def generate_all(
        self, output_dir: Path, source: PostSource, config: Mapping[str, Any]
    ) -> list[str]:
        """Generate all registered feeds.

        Returns:
            List of filenames that were generated.
        """
        generated = []
        for generator in self._generators:
            if generator.write(output_dir, source, config):
                generated.append(generator.filename)
        return generated


def create_default_feed_registry(now: datetime | None = None) -> FeedRegistry:
    """Create a registry with default feed generators.

    Returns:
        FeedRegistry configured with the sitemap and tag index generators.
    """
    registry = FeedRegistry()
    registry.register(SitemapGenerator(now))
    registry.register(TagIndexGenerator())
    return registry
