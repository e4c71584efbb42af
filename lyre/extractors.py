"""Front-matter extraction for Lyre.

Every post starts with a YAML block between ``---`` lines. This module splits
that block from the markdown body and normalizes the known keys into the
values an Entry needs. A post without a readable block is an error; the
build treats it as fatal.

Key classes:
- FrontmatterExtractor: Splits front matter from the body.
- EntryMetadataExtractor: Applies defaults and type normalization.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml

from .exceptions import FrontmatterError
from .utils import parse_date, titleize

FRONTMATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)", re.DOTALL | re.MULTILINE
)


def extract_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Extract YAML front matter from content.

    Args:
        text: Raw file content.

    Returns:
        Tuple of (front matter dict, remaining body).

    Raises:
        FrontmatterError: If the block is missing, is not valid YAML, or
            does not hold a mapping.
    """
    text = text.lstrip("\ufeff")
    match = FRONTMATTER_RE.match(text)
    if not match:
        raise FrontmatterError("missing front matter block")
    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as exc:
        raise FrontmatterError(f"invalid front matter: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontmatterError(
            f"front matter must be a mapping, got {type(data).__name__}"
        )
    return data, text[match.end() :]


def normalize_tags(value: Any) -> list[str]:
    """Normalize a ``tags`` value to a list of strings, keeping order.

    Examples:
        >>> normalize_tags(["music", "live"])
        ['music', 'live']

        >>> normalize_tags("music")
        ['music']

        >>> normalize_tags(None)
        []
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(tag) for tag in value if tag is not None]
    return [str(value)]


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class FrontmatterExtractor:
    """Extracts YAML front matter from content."""

    def extract(self, content: str, path: Path) -> dict[str, Any]:
        """Extract front matter from content.

        Args:
            content: Source content with front matter.
            path: Path to the source file (unused).

        Returns:
            Dictionary with 'frontmatter' key and 'body' key.

        Raises:
            FrontmatterError: If the front matter is absent or malformed.
        """
        frontmatter, body = extract_frontmatter(content)
        return {"frontmatter": frontmatter, "body": body}


class EntryMetadataExtractor:
    """Turns raw front matter into normalized entry fields.

    Only defaulting happens here; unknown keys are kept in the raw
    front matter and otherwise ignored.
    """

    def extract(self, frontmatter: dict[str, Any], path: Path) -> dict[str, Any]:
        """Normalize front-matter values.

        Args:
            frontmatter: Parsed front-matter mapping.
            path: Path to the source file, used for the title fallback.

        Returns:
            Dictionary with title, description, date, tags, music_source
            and cover_image keys.
        """
        title = _optional_str(frontmatter.get("title")) or titleize(path.name)
        return {
            "title": title,
            "description": _optional_str(frontmatter.get("description")) or "",
            "date": parse_date(frontmatter.get("date")),
            "tags": normalize_tags(frontmatter.get("tags")),
            "music_source": _optional_str(frontmatter.get("music-source")),
            "cover_image": _optional_str(frontmatter.get("cover-image")),
        }
