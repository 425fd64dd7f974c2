"""Site building functionality for Inkpress.

This module contains the core logic for building the static blog. It loads
the configuration, snapshots the post corpus once, renders every page and
writes the feeds.

Key functions:
- build_site: Main function to build the entire site.
- load_config: Loads site configuration from inkpress.yaml.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml
from jinja2 import TemplateError, TemplateSyntaxError

from .content import Post, PostPreview
from .errors import InkpressError
from .extractors import DocumentDefect, is_path_safe_tag
from .feeds import create_default_feed_registry
from .repository import CorpusSnapshot, PostRepository
from .templates import TemplateEngine
from .utils import ensure_clean_dir, tag_segment

CONFIG_FILENAME = "inkpress.yaml"


class BuildError(InkpressError):
    """Error during site build with file context.

    Attributes:
        source_path: Path to the source file that caused the error.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        source_path: Path,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}")


DEFAULT_CONFIG = {
    "posts_dir": "posts",
    "output_dir": "output",
    "templates_dir": "templates",
    "site_url": "",
    "base_path": "",
    "site_name": "Blog",
    "description": "",
    "author": "",
    "image_url": "",
    "logo_url": "",
    "search_path": "",
}


@dataclass
class BuildResult:
    """Result of a site build operation.

    Attributes:
        posts: Previews of every post written, newest first.
        tags: Canonical names of every tag page written.
        output_dir: Directory where the site was built.
        defects: Defects of documents left out of the build.
        feeds: Feed filenames written.
    """

    posts: list[PostPreview]
    tags: list[str]
    output_dir: Path
    defects: list[DocumentDefect] = field(default_factory=list)
    feeds: list[str] = field(default_factory=list)


def load_config(project_root: Path) -> dict[str, Any]:
    """Load site configuration from inkpress.yaml.

    Args:
        project_root: Root directory of the project.

    Returns:
        Dictionary containing configuration values, with defaults applied.
    """
    config_path = project_root / CONFIG_FILENAME
    config = DEFAULT_CONFIG.copy()
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
            if isinstance(loaded, dict):
                config.update(loaded)
    return config


def open_repository(
    project_root: Path, config: dict[str, Any], include_drafts: bool = False
) -> PostRepository:
    """Create the repository reading the configured posts directory."""
    return PostRepository(
        project_root / str(config.get("posts_dir") or "posts"),
        include_drafts=include_drafts,
    )


def build_site(
    project_root: Path,
    include_drafts: bool = False,
    site_url: str | None = None,
    base_path: str | None = None,
    clean_output: bool = True,
    output_dir_override: Path | None = None,
    now: datetime | None = None,
) -> BuildResult:
    """Build the entire static blog.

    Args:
        project_root: Root directory of the project.
        include_drafts: Whether to include draft posts (starting with _).
        site_url: Optional absolute site URL, overriding the config.
        base_path: Optional deployment path prefix, overriding the config.
        clean_output: Whether to wipe the output directory before building.
        output_dir_override: Optional path to write the build output instead of config output_dir.
        now: Build timestamp for feeds; current time when None.

    Returns:
        BuildResult describing what was written.

    Raises:
        FileNotFoundError: If the posts directory does not exist.
        BuildError: If a page fails to render.
    """
    config = load_config(project_root)
    if site_url is not None:
        config["site_url"] = site_url
    if base_path is not None:
        config["base_path"] = base_path

    snapshot = open_repository(project_root, config, include_drafts).snapshot()

    output_dir = output_dir_override or (
        project_root / str(config.get("output_dir") or "output")
    )
    if clean_output:
        ensure_clean_dir(output_dir)
    else:
        output_dir.mkdir(parents=True, exist_ok=True)

    engine = TemplateEngine(
        config, project_root / str(config.get("templates_dir") or "templates")
    )
    tags = _write_pages(engine, snapshot, output_dir)
    feeds = create_default_feed_registry(now).generate_all(output_dir, snapshot, config)
    return BuildResult(
        posts=snapshot.list_previews(),
        tags=tags,
        output_dir=output_dir,
        defects=list(snapshot.defects),
        feeds=feeds,
    )


def _write_pages(
    engine: TemplateEngine, snapshot: CorpusSnapshot, output_dir: Path
) -> list[str]:
    """Render and write every page; return the tags that got a page."""
    previews = snapshot.list_previews()
    tag_counts = snapshot.tag_counts()
    index_source = output_dir / "index.html"

    _write_page(
        output_dir, "", _render(lambda: engine.render_index(previews, tag_counts), index_source)
    )
    for post in snapshot.posts:
        html = _render(lambda post=post: engine.render_post(post), _source_of(post))
        _write_page(output_dir, f"blog/{post.id}", html)

    _write_page(
        output_dir,
        "tags",
        _render(lambda: engine.render_tags(tag_counts), output_dir / "tags" / "index.html"),
    )
    written: list[str] = []
    for count in tag_counts:
        posts = snapshot.get_posts_by_tag(count.name)
        if not posts:
            continue
        if not is_path_safe_tag(count.name):
            raise BuildError(
                _source_of(posts[0]), f"Tag {count.name!r} cannot be used as a page path"
            )
        target = f"tags/{tag_segment(count.name)}"
        html = _render(
            lambda name=count.name, posts=posts: engine.render_tag(name, posts),
            output_dir / target / "index.html",
        )
        _write_page(output_dir, target, html)
        written.append(count.name)
    return written


def _source_of(post: Post | PostPreview) -> Path:
    return post.path or Path(f"{post.id}.md")


def _render(render, source_path: Path) -> str:
    """Call a render function, wrapping template failures in BuildError."""
    try:
        return render()
    except TemplateSyntaxError as exc:
        raise BuildError(
            source_path,
            f"Template syntax error in {exc.name} on line {exc.lineno}: {exc.message}",
            exc,
        ) from exc
    except TemplateError as exc:
        raise BuildError(source_path, _format_error_message(exc), exc) from exc


def _format_error_message(exc: Exception) -> str:
    """Format an exception into a user-friendly error message.

    Args:
        exc: The exception to format.

    Returns:
        A human-readable error message.
    """
    error_type = type(exc).__name__
    error_msg = str(exc)

    if error_type == "UndefinedError":
        return f"Undefined variable: {error_msg}"
    if error_type == "TemplateNotFound":
        return f"Template not found: {error_msg}"
    return f"{error_type}: {error_msg}"


def _write_page(output_dir: Path, url_path: str, rendered: str) -> None:
    """Write a rendered page as ``<url_path>/index.html``.

    Args:
        output_dir: Base output directory.
        url_path: Site-relative directory of the page, "" for the home page.
        rendered: Rendered HTML content.
    """
    target_dir = output_dir / url_path if url_path else output_dir
    target_dir.mkdir(parents=True, exist_ok=True)
    html_path = target_dir / "index.html"
    with open(html_path, "w", encoding="utf-8") as f:
        f.write(rendered)
