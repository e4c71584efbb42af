"""Feed generation for Lyre.

This module writes the machine-readable outputs of a build: the JSON post
manifest consumed by client-side scripts and the RSS 2.0 feed, which
doubles as a podcast feed through the ``itunes`` namespace.

Classes:
    FeedGenerator: Base class for feed generators.
    ManifestGenerator: Generates posts.json.
    RSSGenerator: Generates rss.xml.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

from . import __version__
from .collections import EntryCollection
from .html_utils import cdata, escape_html, join_root_url
from .metadata import audio_type, description_for, post_url
from .utils import format_duration, format_iso, format_rfc2822

if TYPE_CHECKING:
    from .build import SiteConfig
    from .content import Entry

CONTENT_NS = "http://purl.org/rss/1.0/modules/content/"
ITUNES_NS = "http://www.itunes.com/dtds/podcast-1.0.dtd"


class FeedGenerator(ABC):
    """Abstract base class for feed generators.

    Subclasses implement specific output formats; ``write`` handles the
    file placement shared by all of them.
    """

    @property
    @abstractmethod
    def filename(self) -> str:
        """Return the output filename for this feed."""
        ...

    @abstractmethod
    def generate(self, entries: Iterable[Entry], site: SiteConfig) -> str:
        """Generate feed content from entries.

        Args:
            entries: Entries in publication order, newest first.
            site: Site configuration.

        Returns:
            Feed content as a string.
        """
        ...

    def write(self, output_dir: Path, entries: Iterable[Entry], site: SiteConfig) -> Path:
        """Generate and write the feed to the output directory.

        Returns:
            Path of the written file.
        """
        content = self.generate(entries, site)
        output_path = output_dir / self.filename
        output_path.write_text(content, encoding="utf-8")
        return output_path


class ManifestGenerator(FeedGenerator):
    """Generates posts.json, one record per entry in the given order."""

    @property
    def filename(self) -> str:
        return "posts.json"

    @staticmethod
    def record(entry: Entry) -> dict[str, Any]:
        """Manifest record of one entry; absent media fields are null."""
        return {
            "title": entry.title,
            "date": format_iso(entry.date),
            "tags": list(entry.tags),
            "slug": entry.slug,
            "description": entry.description,
            "musicSource": entry.music_source,
            "videoSource": entry.video_source,
            "waveformImage": entry.waveform_image,
        }

    def generate(self, entries: Iterable[Entry], site: SiteConfig) -> str:
        records = [self.record(entry) for entry in entries]
        return json.dumps(records, indent=2, ensure_ascii=False)


class RSSGenerator(FeedGenerator):
    """Generates an RSS 2.0 feed with podcast extensions.

    Only the ``limit`` most recent entries are included. Audio posts get an
    ``<enclosure>`` whose length is read from the file under ``media_root``
    when it exists.

    Attributes:
        limit: Maximum number of items.
        media_root: Directory site-relative media paths resolve against.
        now: Fixed build time, mainly for tests; defaults to the current time.
    """

    def __init__(
        self,
        limit: int = 20,
        media_root: Path | None = None,
        now: datetime | None = None,
    ):
        self.limit = limit
        self.media_root = media_root
        self.now = now

    @property
    def filename(self) -> str:
        return "rss.xml"

    def generate(self, entries: Iterable[Entry], site: SiteConfig) -> str:
        build_date = format_rfc2822(self.now or datetime.now(timezone.utc))
        cover_url = join_root_url(site.url, site.cover_image)

        lines = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            f'<rss version="2.0" xmlns:content="{CONTENT_NS}" xmlns:itunes="{ITUNES_NS}">',
            "  <channel>",
            f"    <title>{escape_html(site.title)}</title>",
            f"    <description>{escape_html(site.description)}</description>",
            f"    <link>{escape_html(site.url)}</link>",
            f"    <lastBuildDate>{build_date}</lastBuildDate>",
            f"    <generator>Lyre {__version__}</generator>",
            f"    <language>{escape_html(site.language)}</language>",
            f"    <itunes:author>{escape_html(site.author)}</itunes:author>",
            f"    <itunes:summary>{escape_html(site.description)}</itunes:summary>",
            f"    <itunes:explicit>{'true' if site.explicit else 'false'}</itunes:explicit>",
            f'    <itunes:image href="{escape_html(cover_url)}" />',
        ]
        if site.category:
            lines.append(f'    <itunes:category text="{escape_html(site.category)}" />')
        if site.email:
            lines.append(
                f"    <itunes:owner><itunes:name>{escape_html(site.author)}</itunes:name>"
                f"<itunes:email>{escape_html(site.email)}</itunes:email></itunes:owner>"
            )
        lines.append("")

        for entry in EntryCollection(entries).latest(self.limit):
            lines.append(self._item(entry, site))

        lines.extend(["  </channel>", "</rss>"])
        return "\n".join(lines)

    def _item(self, entry: Entry, site: SiteConfig) -> str:
        link = escape_html(post_url(entry, site))
        description = entry.description or f"{description_for(entry)}..."
        item = [
            "    <item>",
            f"      <title>{cdata(entry.title)}</title>",
            f"      <description>{cdata(description)}</description>",
            f"      <content:encoded>{cdata(entry.content)}</content:encoded>",
            f"      <link>{link}</link>",
            f'      <guid isPermaLink="true">{link}</guid>',
        ]
        if entry.date is not None:
            item.append(f"      <pubDate>{format_rfc2822(entry.date)}</pubDate>")
        if entry.music_source:
            audio_url = escape_html(join_root_url(site.url, entry.music_source))
            item.append(
                f'      <enclosure url="{audio_url}" '
                f'length="{self._length(entry.music_source)}" '
                f'type="{audio_type(entry.music_source)}" />'
            )
            item.append(f"      <itunes:author>{escape_html(site.author)}</itunes:author>")
        if entry.duration is not None:
            item.append(f"      <itunes:duration>{format_duration(entry.duration)}</itunes:duration>")
        if entry.waveform_image:
            image_url = escape_html(join_root_url(site.url, entry.waveform_image))
            item.append(f'      <itunes:image href="{image_url}" />')
        item.append("    </item>")
        return "\n".join(item)

    def _length(self, reference: str) -> int:
        if self.media_root is None:
            return 0
        try:
            return (self.media_root / reference.lstrip("/")).stat().st_size
        except OSError:
            return 0
