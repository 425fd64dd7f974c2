"""Template rendering engine for Inkpress.

This module uses Jinja2 to render the blog pages. Templates are looked up
in the project's ``templates/`` directory first and fall back to the
defaults shipped with the package, so a project overrides a page by adding
a file of the same name.

Key class:
- TemplateEngine: Renders the home, post, tag index and tag pages.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from . import structured_data
from .collections import TagCount
from .content import Post, PostPreview
from .html_utils import join_root_url
from .utils import post_path, tag_path, titleize_tag

# Default page templates shipped with the package
DEFAULT_TEMPLATES_DIR = Path(__file__).parent / "templates" / "default"

__all__ = ["DEFAULT_TEMPLATES_DIR", "TemplateEngine"]


class TemplateEngine:
    """Template rendering engine using Jinja2.

    Attributes:
        config: Site configuration.
        env: Jinja2 environment.
    """

    def __init__(self, config: Mapping[str, Any], template_dir: Path | None = None):
        """Initialize the template engine.

        Args:
            config: Site configuration; exposed to templates as ``site``.
            template_dir: Optional directory with project templates.
        """
        self.config = config
        search_path = [DEFAULT_TEMPLATES_DIR]
        if template_dir is not None and template_dir.is_dir():
            search_path.insert(0, template_dir)
        self.env = Environment(
            loader=FileSystemLoader(search_path),
            autoescape=select_autoescape(["html", "xml", "html.jinja"]),
            enable_async=False,
        )
        self._install_globals()

    def _install_globals(self) -> None:
        """Install global variables, functions and filters in the Jinja environment."""
        self.env.globals["site"] = self.config
        self.env.globals["url_for"] = self._url_for
        self.env.filters["post_url"] = lambda post_id: self._url_for(post_path(post_id))
        self.env.filters["tag_url"] = lambda tag: self._url_for(tag_path(tag))
        self.env.filters["jsonld"] = structured_data.render_jsonld

    def _url_for(self, path: str) -> str:
        """Generate a site URL for a path under the configured base path.

        Args:
            path: Site-relative path.

        Returns:
            Path prefixed with ``base_path``; external URLs are returned as is.
        """
        if path.startswith(("http://", "https://", "//")):
            return path
        base_path = str(self.config.get("base_path") or "").strip("/")
        return join_root_url(f"/{base_path}" if base_path else "", path)

    def render(self, name: str, **context: Any) -> str:
        """Render a named template with the given context."""
        return self.env.get_template(name).render(**context)

    def render_index(self, posts: Iterable[PostPreview], tags: Iterable[TagCount]) -> str:
        """Render the home page listing all posts."""
        return self.render(
            "index.html.jinja",
            posts=list(posts),
            tags=list(tags),
            schema=structured_data.website(self.config),
        )

    def render_post(self, post: Post) -> str:
        """Render a single post page, references section included."""
        return self.render(
            "post.html.jinja",
            post=post,
            content=Markup(post.content_html),
            schema=structured_data.blog_posting(post, self.config),
        )

    def render_tags(self, tags: Iterable[TagCount]) -> str:
        """Render the page listing every tag with its post count."""
        return self.render(
            "tags.html.jinja",
            tags=list(tags),
            schema=structured_data.tags_index_page(self.config),
        )

    def render_tag(self, tag: str, posts: Iterable[PostPreview]) -> str:
        """Render the page of one tag."""
        posts = list(posts)
        return self.render(
            "tag.html.jinja",
            tag=tag,
            title=titleize_tag(tag),
            posts=posts,
            schema=structured_data.tag_collection_page(tag, posts, self.config),
        )
