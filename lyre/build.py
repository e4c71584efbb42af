"""Site building functionality for Lyre.

This module contains the core logic for building the site from a project
directory. It loads configuration, parses posts, generates derived media for
audio posts, and writes every output file.

Key functions:
- build_site: Main function to build the entire site.
- load_config: Loads build and site configuration from lyre.yaml.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from .collections import EntryCollection
from .content import ContentProcessor, Entry
from .exceptions import BuildError, MediaError
from .feeds import ManifestGenerator, RSSGenerator
from .media import DerivedMediaGenerator, FFmpegMediaProcessor
from .protocols import MediaProcessor
from .templates import SiteTemplates, TemplateEngine

__all__ = [
    "BuildConfig",
    "BuildError",
    "BuildResult",
    "SiteConfig",
    "build_site",
    "load_config",
]

CONFIG_FILENAME = "lyre.yaml"


@dataclass(frozen=True)
class SiteConfig:
    """Site-wide values used for absolute URLs and feed metadata.

    Attributes:
        title: Site title.
        description: Site description.
        url: Canonical site URL without trailing slash.
        author: Author name for feeds and music tags.
        cover_image: Site-relative default cover for audio posts.
        language: Feed language code.
        category: Optional iTunes category.
        explicit: iTunes explicit flag.
        email: Optional iTunes owner email.
    """

    title: str = "Lyre"
    description: str = ""
    url: str = ""
    author: str = ""
    cover_image: str = "/cover.jpg"
    language: str = "en-US"
    category: str = ""
    explicit: bool = False
    email: str = ""


@dataclass(frozen=True)
class BuildConfig:
    """Where a build reads from and writes to.

    Paths are relative to the project root.

    Attributes:
        content_dir: Directory containing markdown posts.
        output_dir: Directory the site is written to.
        template: Home page template.
        post_template: Post page template.
        media_root: Directory site-relative media paths resolve against;
            the output directory when unset.
        ffmpeg: Optional ffmpeg binary override.
        ffprobe: Optional ffprobe binary override.
        feed_limit: Maximum number of RSS items.
        site: Site-wide values.
    """

    content_dir: str = "content"
    output_dir: str = "docs"
    template: str = "template.html"
    post_template: str = "template-post.html"
    media_root: str | None = None
    ffmpeg: str | None = None
    ffprobe: str | None = None
    feed_limit: int = 20
    site: SiteConfig = field(default_factory=SiteConfig)


DEFAULT_CONFIG: dict[str, Any] = {
    f.name: f.default for f in fields(BuildConfig) if f.name != "site"
}


def _known(cls, values: dict[str, Any]) -> dict[str, Any]:
    """Keep only keys naming a field of ``cls``; hyphens count as underscores."""
    names = {f.name for f in fields(cls)}
    known = {}
    for key, value in values.items():
        name = str(key).replace("-", "_")
        if name in names:
            known[name] = value
    return known


def load_config(project_root: Path, config_path: Path | None = None) -> BuildConfig:
    """Load configuration from lyre.yaml.

    Args:
        project_root: Root directory of the project.
        config_path: Optional explicit config file; defaults to
            ``<project_root>/lyre.yaml``.

    Returns:
        BuildConfig with defaults applied for missing keys.

    Raises:
        BuildError: If the file exists but is not valid YAML.
    """
    path = config_path or project_root / CONFIG_FILENAME
    loaded: Any = {}
    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise BuildError(path, f"Invalid configuration: {exc}", exc) from exc
    if not isinstance(loaded, dict):
        loaded = {}

    config = DEFAULT_CONFIG.copy()
    config.update(_known(BuildConfig, {k: v for k, v in loaded.items() if k != "site"}))
    site_values = loaded.get("site")
    if not isinstance(site_values, dict):
        site_values = {}
    site = SiteConfig(**_known(SiteConfig, site_values))
    return BuildConfig(**config, site=site)


@dataclass
class BuildResult:
    """Result of a site build operation.

    Attributes:
        entries: All entries, newest first.
        tags: Sorted unique tags across the site.
        output_dir: Directory where the site was built.
    """

    entries: list[Entry]
    tags: list[str]
    output_dir: Path


def build_site(
    project_root: Path,
    config: BuildConfig | None = None,
    media_processor: MediaProcessor | None = None,
    now: datetime | None = None,
) -> BuildResult:
    """Build the entire static site.

    Steps run in a fixed order: output directory, templates, posts, derived
    media (one entry at a time), sorting, manifest, post pages, home page,
    feed. Media failures are reported per entry and never stop the build;
    everything else raises.

    Args:
        project_root: Root directory of the project.
        config: Optional configuration; loaded from lyre.yaml when omitted.
        media_processor: Optional media tool; ffmpeg when omitted.
        now: Optional fixed build time for the feed.

    Returns:
        BuildResult containing the sorted entries, tags and output directory.
    """
    config = config or load_config(project_root)
    site = config.site
    output_dir = project_root / config.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)

    templates = SiteTemplates.load(
        project_root / config.template, project_root / config.post_template
    )
    entries = ContentProcessor(project_root / config.content_dir).load()

    media_root = project_root / (config.media_root or config.output_dir)
    generator = DerivedMediaGenerator(
        media_processor or FFmpegMediaProcessor(config.ffmpeg, config.ffprobe),
        media_root,
        site.cover_image,
    )
    for entry in EntryCollection(entries).rich_media():
        try:
            generator.process(entry)
        except (MediaError, OSError) as exc:
            print(f"Media generation failed for {entry.slug}: {exc}")

    ordered = EntryCollection(entries).sorted()
    tags = ordered.tags()

    ManifestGenerator().write(output_dir, ordered, site)

    engine = TemplateEngine(site)
    posts_dir = output_dir / "posts"
    posts_dir.mkdir(parents=True, exist_ok=True)
    cards = []
    for entry in ordered:
        _write_post(posts_dir, entry, engine.render_post(templates.post, entry))
        cards.append(engine.render_card(entry, listing=True))

    index = engine.render_home(templates.home, cards, tags)
    (output_dir / "index.html").write_text(index, encoding="utf-8")

    RSSGenerator(config.feed_limit, media_root, now).write(output_dir, ordered, site)

    print("Site generated successfully!")
    print(f"Generated {len(ordered)} posts with tags: {', '.join(tags)}")
    return BuildResult(entries=list(ordered), tags=tags, output_dir=output_dir)


def _write_post(posts_dir: Path, entry: Entry, rendered: str) -> None:
    """Write a rendered post page to ``posts/<slug>.html``."""
    html_path = posts_dir / f"{entry.slug}.html"
    with open(html_path, "w", encoding="utf-8") as f:
        f.write(rendered)
