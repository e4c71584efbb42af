"""Content processing for Lyre.

This module turns the markdown files of the content directory into Entry
objects: one per file, with normalized front matter and rendered HTML.

Key classes:
- Entry: Dataclass representing one post and its derived media.
- FileContentLoader: Discovers post files.
- EntryBuilder: Builds an Entry from a single file.
- ContentProcessor: Loads every post, reading files concurrently.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from .exceptions import BuildError, FrontmatterError
from .extractors import EntryMetadataExtractor, FrontmatterExtractor
from .protocols import ContentRenderer
from .renderers import MarkdownRenderer
from .utils import is_markdown

MUSIC_TAG = "music"


@dataclass
class Entry:
    """One parsed post plus the media derived from it.

    Attributes:
        slug: Filename stem; names the output page and its URL.
        title: Post title.
        date: Publication date, or None when missing or unparseable.
        content: Rendered HTML body.
        description: Explicit description, empty when absent.
        tags: Tags in front-matter order.
        music_source: Site-relative path of the audio file, if any.
        cover_image: Site-relative path of the cover image, if any.
        video_source: Generated preview video; set only when it exists.
        waveform_image: Generated waveform image; set only when it exists.
        duration: Audio length in seconds, when it could be probed.
        path: Path to the source file.
        frontmatter: Raw front-matter mapping.
    """

    slug: str
    title: str
    date: datetime | None
    content: str
    description: str = ""
    tags: list[str] = field(default_factory=list)
    music_source: str | None = None
    cover_image: str | None = None
    video_source: str | None = None
    waveform_image: str | None = None
    duration: float | None = None
    path: Path | None = None
    frontmatter: dict[str, Any] = field(default_factory=dict)

    @property
    def is_rich_media(self) -> bool:
        """True for audio posts: tagged ``music`` and pointing at an audio file."""
        return MUSIC_TAG in self.tags and bool(self.music_source)


class FileContentLoader:
    """Discovers post files in the content directory.

    Only markdown files directly inside the directory are posts.

    Attributes:
        content_dir: Directory containing posts.
    """

    def __init__(self, content_dir: Path):
        self.content_dir = content_dir

    def iter_files(self) -> list[Path]:
        """Return every markdown file in the content directory, sorted by name.

        Raises:
            BuildError: If the content directory does not exist.
        """
        if not self.content_dir.is_dir():
            raise BuildError(self.content_dir, "content directory not found")
        return sorted(
            path
            for path in self.content_dir.iterdir()
            if path.is_file() and is_markdown(path)
        )


class EntryBuilder:
    """Builds Entry objects from source files.

    Attributes:
        renderer: Markdown renderer.
        frontmatter_extractor: Splits the front matter from the body.
        metadata_extractor: Normalizes front-matter values.
    """

    def __init__(self, renderer: ContentRenderer | None = None):
        self.renderer = renderer or MarkdownRenderer()
        self.frontmatter_extractor = FrontmatterExtractor()
        self.metadata_extractor = EntryMetadataExtractor()

    def build(self, path: Path) -> Entry:
        """Build an Entry from a source file.

        Args:
            path: Path to the markdown file.

        Returns:
            Entry with rendered content and no derived media.

        Raises:
            BuildError: If the file cannot be read or its front matter is
                missing or malformed.
        """
        try:
            raw = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise BuildError(path, f"Could not read post: {exc}", exc) from exc
        try:
            parts = self.frontmatter_extractor.extract(raw, path)
        except FrontmatterError as exc:
            raise BuildError(path, str(exc), exc) from exc

        frontmatter = parts["frontmatter"]
        metadata = self.metadata_extractor.extract(frontmatter, path)
        return Entry(
            slug=path.stem,
            content=self.renderer.render(parts["body"]),
            path=path,
            frontmatter=frontmatter,
            **metadata,
        )


class ContentProcessor:
    """Loads all posts of a content directory.

    File reads and rendering run in a thread pool; the returned list is in
    sorted file order regardless of completion order.

    Attributes:
        content_dir: Directory containing posts.
    """

    def __init__(
        self,
        content_dir: Path,
        content_loader: FileContentLoader | None = None,
        entry_builder: EntryBuilder | None = None,
        max_workers: int | None = None,
    ):
        self.content_dir = content_dir
        self._content_loader = content_loader or FileContentLoader(content_dir)
        self._entry_builder = entry_builder or EntryBuilder()
        self._max_workers = max_workers

    def load(self) -> list[Entry]:
        """Load every post.

        Returns:
            List of Entry objects, one per source file.

        Raises:
            BuildError: If any post fails to parse, or two files share a slug.
        """
        files = self._content_loader.iter_files()
        _check_slug_collisions(files)
        if not files:
            return []
        with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
            return list(pool.map(self._entry_builder.build, files))


def _check_slug_collisions(files: list[Path]) -> None:
    """Fail fast when two source files would write the same output page."""
    seen: dict[str, Path] = {}
    for path in files:
        key = path.stem.lower()
        if key in seen:
            raise BuildError(
                path,
                f"slug '{path.stem}' collides with {seen[key].name}",
            )
        seen[key] = path
