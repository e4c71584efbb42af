"""Open-Graph and Twitter card metadata for post pages.

Link previews depend on what a post carries. Audio posts with a generated
video advertise a ``video.other`` player card with absolute video and
audio URLs; audio posts that only got a waveform advertise it as a large
image; everything else is a plain ``article``.

Functions:
    description_for: Explicit description or a plain-text excerpt.
    build_open_graph: Ordered list of meta tags for an entry.
    render_meta_tags: Render meta tags as HTML.
"""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .html_utils import escape_html, join_root_url
from .utils import excerpt

if TYPE_CHECKING:
    from .build import SiteConfig
    from .content import Entry

DEFAULT_AUDIO_TYPE = "audio/mpeg"


@dataclass(frozen=True)
class MetaTag:
    """One ``<meta>`` element.

    Attributes:
        attribute: ``property`` for Open Graph, ``name`` for Twitter.
        key: Value of that attribute, e.g. ``og:title``.
        content: Tag content, unescaped.
    """

    attribute: str
    key: str
    content: str

    def render(self) -> str:
        return (
            f'<meta {self.attribute}="{escape_html(self.key)}" '
            f'content="{escape_html(self.content)}" />'
        )


def _og(key: str, content: str) -> MetaTag:
    return MetaTag("property", key, content)


def _twitter(key: str, content: str) -> MetaTag:
    return MetaTag("name", key, content)


def audio_type(path: str) -> str:
    """Guess the MIME type of an audio path, defaulting to MP3."""
    guessed, _ = mimetypes.guess_type(path)
    if guessed and guessed.startswith("audio/"):
        return guessed
    return DEFAULT_AUDIO_TYPE


def post_url(entry: Entry, site: SiteConfig) -> str:
    """Absolute permalink of an entry's page."""
    return join_root_url(site.url, f"/posts/{entry.slug}")


def description_for(entry: Entry) -> str:
    """Explicit description, else the first 200 characters of stripped content."""
    return entry.description or excerpt(entry.content)


def build_open_graph(entry: Entry, site: SiteConfig) -> list[MetaTag]:
    """Build the preview tags for an entry.

    Args:
        entry: Entry after derived media generation.
        site: Site configuration supplying the absolute URL base.

    Returns:
        Meta tags in render order.
    """
    description = description_for(entry)
    url = post_url(entry, site)
    has_video = entry.is_rich_media and entry.video_source is not None
    has_waveform = entry.is_rich_media and entry.waveform_image is not None

    tags = [
        _og("og:title", entry.title),
        _og("og:description", description),
        _og("og:url", url),
        _og("og:type", "video.other" if has_video else "article"),
        _og("og:site_name", site.title),
    ]

    if has_video:
        video_url = join_root_url(site.url, entry.video_source)
        audio_url = join_root_url(site.url, entry.music_source)
        tags += [
            _og("og:video", video_url),
            _og("og:video:secure_url", video_url),
            _og("og:video:type", "video/mp4"),
            _og("og:audio", audio_url),
            _og("og:audio:type", audio_type(entry.music_source)),
            _og("music:musician", site.author),
        ]
        if has_waveform:
            tags.append(_og("og:image", join_root_url(site.url, entry.waveform_image)))
        tags += [
            _twitter("twitter:card", "player"),
            _twitter("twitter:player", url),
            _twitter("twitter:player:stream", video_url),
            _twitter("twitter:player:stream:content_type", "video/mp4"),
        ]
    elif has_waveform:
        image_url = join_root_url(site.url, entry.waveform_image)
        tags += [
            _og("og:image", image_url),
            _og("og:image:type", "image/jpeg"),
            _twitter("twitter:card", "summary_large_image"),
            _twitter("twitter:image", image_url),
        ]
    else:
        tags.append(_twitter("twitter:card", "summary"))

    tags += [
        _twitter("twitter:title", entry.title),
        _twitter("twitter:description", description),
    ]
    return tags


def render_meta_tags(tags: list[MetaTag]) -> str:
    """Render meta tags one per line."""
    return "\n".join(f"    {tag.render()}" for tag in tags)
