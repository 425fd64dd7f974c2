"""schema.org structured data for Inkpress pages.

Each builder returns a plain dict ready for JSON serialization; render_jsonld
wraps one in a ``<script type="application/ld+json">`` element for
embedding in a page.

The ``site`` argument is the site configuration mapping (see
``build.DEFAULT_CONFIG``): ``site_name``, ``site_url``, ``base_path``,
``author``, ``image_url``, ``logo_url`` and ``search_path`` are read.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from typing import Any

from markupsafe import Markup

from .content import Post, PostPreview
from .html_utils import join_root_url, site_root
from .utils import post_path, tag_path

SCHEMA_CONTEXT = "https://schema.org"


def absolute_url(site: Mapping[str, Any], path: str) -> str:
    """Join a site-relative path onto the configured site root."""
    root = site_root(str(site.get("site_url") or ""), str(site.get("base_path") or ""))
    return join_root_url(root, path)


def blog_posting(post: Post | PostPreview, site: Mapping[str, Any]) -> dict[str, Any]:
    """BlogPosting for a single post page."""
    data: dict[str, Any] = {
        "@context": SCHEMA_CONTEXT,
        "@type": "BlogPosting",
        "headline": post.title,
        "description": post.excerpt,
        "datePublished": post.date.isoformat(),
        "mainEntityOfPage": {
            "@type": "WebPage",
            "@id": absolute_url(site, post_path(post.id)),
        },
        "keywords": ",".join(post.tags),
    }
    if site.get("author"):
        data["author"] = {"@type": "Person", "name": site["author"]}
    if site.get("image_url"):
        data["image"] = site["image_url"]
    publisher: dict[str, Any] = {"@type": "Organization", "name": site.get("site_name", "")}
    if site.get("logo_url"):
        publisher["logo"] = {"@type": "ImageObject", "url": site["logo_url"]}
    data["publisher"] = publisher
    return data


def website(site: Mapping[str, Any]) -> dict[str, Any]:
    """WebSite for the home page, with a SearchAction when search is configured."""
    data: dict[str, Any] = {
        "@context": SCHEMA_CONTEXT,
        "@type": "WebSite",
        "name": site.get("site_name", ""),
        "url": absolute_url(site, "/"),
    }
    search_path = site.get("search_path")
    if search_path:
        target = absolute_url(site, str(search_path))
        data["potentialAction"] = {
            "@type": "SearchAction",
            "target": f"{target}?q={{search_term_string}}",
            "query-input": "required name=search_term_string",
        }
    return data


def tag_collection_page(
    tag: str, posts: Iterable[PostPreview], site: Mapping[str, Any]
) -> dict[str, Any]:
    """CollectionPage listing the posts of one tag.

    Positions in the item list start at 1 and follow the order of ``posts``.
    """
    site_name = site.get("site_name", "")
    return {
        "@context": SCHEMA_CONTEXT,
        "@type": "CollectionPage",
        "headline": f"Posts tagged with {tag}",
        "description": f"Articles about {tag} on {site_name}",
        "url": absolute_url(site, tag_path(tag)),
        "mainEntity": {
            "@type": "ItemList",
            "itemListElement": [
                {
                    "@type": "ListItem",
                    "position": index,
                    "url": absolute_url(site, post_path(post.id)),
                    "name": post.title,
                }
                for index, post in enumerate(posts, start=1)
            ],
        },
    }


def tags_index_page(site: Mapping[str, Any]) -> dict[str, Any]:
    """CollectionPage for the page listing every tag."""
    return {
        "@context": SCHEMA_CONTEXT,
        "@type": "CollectionPage",
        "headline": "All Tags",
        "description": f"Browse all topics covered in {site.get('site_name', '')}",
        "url": absolute_url(site, "/tags/"),
    }


def render_jsonld(data: Mapping[str, Any]) -> Markup:
    """Render structured data as a JSON-LD script element.

    ``</`` is escaped so a title or excerpt can never close the script early.
    """
    payload = json.dumps(data, ensure_ascii=False).replace("</", "<\\/")
    return Markup(f'<script type="application/ld+json">{payload}</script>')
