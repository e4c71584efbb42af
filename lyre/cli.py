"""Command-line interface for Lyre.

This module defines the CLI commands using Click framework.

Commands:
- build: Build the site into the output directory.
- watch: Build, then rebuild whenever posts or templates change.
- post: Create a new post file interactively.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path

import click
import questionary
import yaml

from . import __version__
from .build import BuildConfig, load_config
from .exceptions import BuildError
from .utils import slugify

_config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to the configuration file (defaults to ./lyre.yaml)",
)


@click.group()
@click.version_option(version=__version__, prog_name="lyre")
def cli():
    """Lyre static site generator."""


def _load(project_root: Path, config_path: Path | None) -> BuildConfig:
    try:
        return load_config(project_root, config_path)
    except BuildError as exc:
        _report(project_root, exc)


def _report(project_root: Path, exc: BuildError):
    """Print a build error and exit with status 1."""
    try:
        rel_path = exc.source_path.relative_to(project_root)
    except ValueError:
        rel_path = exc.source_path
    click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
    click.echo(click.style(f"  File: {rel_path}", fg="yellow"), err=True)
    click.echo(click.style(f"  Error: {exc.message}", fg="white"), err=True)
    raise SystemExit(1)


@cli.command()
@_config_option
def build(config_path: Path | None):
    """Build the site into the output directory."""
    project_root = Path.cwd()
    from .build import build_site

    config = _load(project_root, config_path)
    try:
        result = build_site(project_root, config)
    except BuildError as exc:
        _report(project_root, exc)
    click.echo(f"Built {len(result.entries)} posts into {result.output_dir}")


@cli.command()
@_config_option
def watch(config_path: Path | None):
    """Build, then rebuild whenever posts or templates change."""
    project_root = Path.cwd()
    from .watcher import SiteWatcher

    config = _load(project_root, config_path)
    SiteWatcher(project_root, config).start()


@cli.command()
@_config_option
def post(config_path: Path | None):
    """Create a new post interactively."""
    project_root = Path.cwd()
    config = _load(project_root, config_path)
    content_dir = project_root / config.content_dir

    title = questionary.text(
        "Title:",
        validate=lambda x: len(x.strip()) > 0 or "Title cannot be empty",
        style=_questionary_style(),
    ).ask()
    if title is None:
        raise click.Abort()
    title = title.strip()

    tags = questionary.text(
        "Tags (comma separated):",
        default="",
        style=_questionary_style(),
    ).ask()
    if tags is None:
        raise click.Abort()

    music_source = questionary.text(
        "Audio file (site-relative path, blank for none):",
        default="",
        style=_questionary_style(),
    ).ask()
    if music_source is None:
        raise click.Abort()

    slug = slugify(title)
    existing = _get_existing_slugs(content_dir)
    if slug in existing:
        raise click.ClickException(
            f"A post with slug '{slug}' already exists: {existing[slug].name}"
        )

    target = content_dir / f"{slug}.md"
    content_dir.mkdir(parents=True, exist_ok=True)
    target.write_text(
        _new_post(title, _split_tags(tags), music_source.strip()), encoding="utf-8"
    )
    click.echo(f"Created {target.relative_to(project_root)}")


def _split_tags(raw: str) -> list[str]:
    """Split a comma separated tag list, dropping blanks and repeats."""
    tags: list[str] = []
    for tag in raw.split(","):
        tag = tag.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def _new_post(title: str, tags: list[str], music_source: str) -> str:
    """Render the front matter and a title heading for a new post."""
    frontmatter: dict = {
        "title": title,
        "date": date.today().isoformat(),
        "description": "",
        "tags": tags,
    }
    if music_source:
        frontmatter["music-source"] = music_source
    block = yaml.safe_dump(frontmatter, sort_keys=False, allow_unicode=True)
    return f"---\n{block}---\n\n"


def _get_existing_slugs(folder: Path) -> dict[str, Path]:
    """Map the lowercased slug of every post in a folder to its file."""
    slugs: dict[str, Path] = {}
    if folder.exists():
        for f in folder.iterdir():
            if f.is_file() and f.suffix.lower() == ".md":
                slugs[f.stem.lower()] = f
    return slugs


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
