"""Command-line interface for Inkpress.

This module defines the CLI commands using Click framework.

Commands:
- build: Build the blog into the output directory.
- list: List posts, newest first, optionally filtered by tag.
- tags: List tags with their post counts.
- show: Print the rendered HTML of one post.
- sitemap: Print the sitemap XML.
- post: Create a new post file interactively.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path

import click
import questionary
import yaml

from . import __version__
from .errors import InkpressError


@click.group()
@click.version_option(version=__version__, prog_name="inkpress")
def cli():
    """Inkpress static blog generator."""


@cli.command()
@click.option("--drafts", is_flag=True, help="Include draft posts")
@click.option("--site-url", help="Absolute site URL (overrides inkpress.yaml)")
@click.option("--base-path", help="Deployment path prefix (overrides inkpress.yaml)")
@click.option(
    "--output",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory to write the site to (overrides inkpress.yaml)",
)
def build(drafts: bool, site_url: str | None, base_path: str | None, output: Path | None):
    """Build the blog into the output directory."""
    project_root = Path.cwd()
    from .build import BuildError, build_site

    try:
        result = build_site(
            project_root,
            include_drafts=drafts,
            site_url=site_url,
            base_path=base_path,
            output_dir_override=output,
        )
    except BuildError as exc:
        click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
        click.echo(click.style(f"  File: {_display_path(exc.source_path)}", fg="yellow"), err=True)
        click.echo(click.style(f"  Error: {exc.message}", fg="white"), err=True)
        raise SystemExit(1) from None
    except FileNotFoundError as exc:
        raise click.ClickException(str(exc)) from None
    _echo_defects(result.defects)
    click.echo(
        f"Built {len(result.posts)} posts and {len(result.tags)} tag pages "
        f"into {result.output_dir}"
    )
    if result.feeds:
        click.echo(f"Feeds: {', '.join(result.feeds)}")


@cli.command(name="list")
@click.option("--tag", help="Only posts with this tag (case-insensitive)")
@click.option("--drafts", is_flag=True, help="Include draft posts")
def list_posts(tag: str | None, drafts: bool):
    """List posts, newest first."""
    repository = _open_repository(drafts)
    previews = repository.get_posts_by_tag(tag) if tag else repository.list_previews()
    _echo_defects(repository.defects)
    for preview in previews:
        marker = " [draft]" if preview.draft else ""
        tags = f"  #{' #'.join(preview.tags)}" if preview.tags else ""
        click.echo(f"{preview.date.isoformat()}  {preview.id}  {preview.title}{marker}{tags}")


@cli.command()
@click.option("--drafts", is_flag=True, help="Include draft posts")
def tags(drafts: bool):
    """List tags with their post counts."""
    repository = _open_repository(drafts)
    counts = repository.tag_counts()
    _echo_defects(repository.defects)
    for count in counts:
        click.echo(f"{count.name} ({count.count})")


@cli.command()
@click.argument("post_id")
@click.option("--drafts", is_flag=True, help="Allow showing draft posts")
def show(post_id: str, drafts: bool):
    """Print the rendered HTML of one post."""
    repository = _open_repository(drafts)
    try:
        post = repository.get_post(post_id)
    except InkpressError as exc:
        raise click.ClickException(str(exc)) from None
    click.echo(post.content_html, nl=False)


@cli.command()
@click.option("--site-url", help="Absolute site URL (overrides inkpress.yaml)")
@click.option("--base-path", help="Deployment path prefix (overrides inkpress.yaml)")
def sitemap(site_url: str | None, base_path: str | None):
    """Print the sitemap XML."""
    from .build import load_config
    from .feeds import SitemapGenerator

    config = load_config(Path.cwd())
    if site_url is not None:
        config["site_url"] = site_url
    if base_path is not None:
        config["base_path"] = base_path
    repository = _open_repository(False, config)
    content = SitemapGenerator().generate(repository, config)
    if content is None:
        raise click.ClickException("No site_url configured; set it in inkpress.yaml or pass --site-url.")
    click.echo(content, nl=False)


@cli.command()
def post():
    """Create a new post file interactively."""
    from .build import load_config
    from .utils import slugify

    project_root = Path.cwd()
    config = load_config(project_root)
    posts_dir = project_root / str(config.get("posts_dir") or "posts")

    title = questionary.text(
        "Title:",
        validate=lambda x: len(x.strip()) > 0 or "Title cannot be empty",
        style=_questionary_style(),
    ).ask()
    if title is None:
        raise click.Abort()
    title = title.strip()

    raw_tags = questionary.text(
        "Tags (comma separated):",
        style=_questionary_style(),
    ).ask()
    if raw_tags is None:
        raise click.Abort()

    draft = questionary.confirm(
        "Save as draft?",
        default=False,
        style=_questionary_style(),
    ).ask()
    if draft is None:
        raise click.Abort()

    slug = slugify(title)
    filename = f"_{slug}.md" if draft else f"{slug}.md"
    target_path = posts_dir / filename
    # Drafts and published posts share ids, so check both spellings
    for candidate in (posts_dir / f"{slug}.md", posts_dir / f"_{slug}.md"):
        if candidate.exists():
            raise click.ClickException(f"A post with id '{slug}' already exists: {candidate.name}")

    frontmatter = {
        "title": title,
        "date": date.today().isoformat(),
        "readTime": "",
        "excerpt": "",
        "tags": [t.strip() for t in raw_tags.split(",") if t.strip()],
    }
    posts_dir.mkdir(parents=True, exist_ok=True)
    target_path.write_text(
        "---\n"
        + yaml.safe_dump(frontmatter, sort_keys=False, allow_unicode=True)
        + "---\n\n",
        encoding="utf-8",
    )
    click.echo(f"Created {_display_path(target_path)}")


def _open_repository(include_drafts: bool, config: dict | None = None):
    """Open the post repository of the project in the current directory."""
    from .build import load_config, open_repository

    project_root = Path.cwd()
    config = config if config is not None else load_config(project_root)
    repository = open_repository(project_root, config, include_drafts)
    if not repository.posts_dir.is_dir():
        raise click.ClickException(
            f"No posts directory found at {repository.posts_dir}. "
            "Run this command from an Inkpress project root."
        )
    return repository


def _echo_defects(defects) -> None:
    """Warn about documents that were skipped."""
    for defect in defects:
        click.echo(click.style(f"Skipped {defect}", fg="yellow"), err=True)


def _display_path(path: Path) -> str:
    """Show a path relative to the current directory when possible."""
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


def _questionary_style():
    """Return consistent questionary style."""
    return questionary.Style(
        [
            ("qmark", "fg:cyan bold"),
            ("question", "bold"),
            ("answer", "fg:cyan"),
            ("pointer", "fg:cyan bold"),
            ("highlighted", "fg:cyan bold"),
            ("selected", "fg:cyan"),
        ]
    )


def main():
    """Entry point for the CLI application."""
    cli()
