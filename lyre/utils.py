"""Utility functions for Lyre.

This module contains the string, date and filesystem helpers shared by the
content, feed and template modules.

Key functions:
    slugify: Convert a title to a URL slug.
    titleize: Convert a filename to a human-readable title.
    parse_date: Normalize a front-matter date value to an aware datetime.
    format_display_date: Format a date for post cards.
    format_rfc2822: Format a date for RSS.
    format_iso: Format a date for the JSON manifest.
    format_duration: Format seconds as HH:MM:SS.
    excerpt: Plain-text excerpt of rendered HTML.
    is_markdown: Check if a path is a Markdown file.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timezone
from email.utils import format_datetime, parsedate_to_datetime
from pathlib import Path
from typing import Any

from .html_utils import strip_tags

EXCERPT_LENGTH = 200


def slugify(name: str) -> str:
    """Convert a title or filename stem to a slug.

    Args:
        name: Title or filename stem.

    Returns:
        Lowercase, hyphen-separated slug.

    Examples:
        >>> slugify("Hello, World!")
        'hello-world'
    """
    cleaned = re.sub(r"[^a-zA-Z0-9]+", "-", name)
    cleaned = cleaned.strip("-").lower()
    return cleaned or "untitled"


def titleize(filename: str) -> str:
    """Convert a filename to a human-readable title.

    Replaces hyphens and underscores with spaces and capitalizes each word.

    Args:
        filename: Filename with or without extension.

    Returns:
        Human-readable title string.

    Examples:
        >>> titleize("getting-started.md")
        'Getting Started'
    """
    base = Path(filename).stem
    words = re.split(r"[\s\-_]+", base)
    return " ".join(word.capitalize() for word in words if word) or "Untitled"


def parse_date(value: Any) -> datetime | None:
    """Normalize a front-matter date into a timezone-aware datetime.

    YAML already turns ``2024-01-01`` into a ``date`` and full timestamps
    into ``datetime``; strings are tried as ISO-8601 and then RFC 2822.
    Naive values are taken to be UTC.

    Args:
        value: Raw front-matter value.

    Returns:
        Aware datetime, or None when the value is missing or unparseable.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time())
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            try:
                parsed = parsedate_to_datetime(text)
            except (TypeError, ValueError, IndexError):
                return None
    else:
        return None
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_display_date(value: datetime | None) -> str:
    """Format a date the way post cards show it, e.g. ``January 1, 2024``."""
    if value is None:
        return "Undated"
    value = value.astimezone(timezone.utc)
    return f"{value:%B} {value.day}, {value.year}"


def format_rfc2822(value: datetime) -> str:
    """Format a date for RSS, e.g. ``Mon, 01 Jan 2024 00:00:00 GMT``."""
    return format_datetime(value.astimezone(timezone.utc), usegmt=True)


def format_iso(value: datetime | None) -> str | None:
    """Format a date as ISO-8601 UTC with milliseconds and a ``Z`` suffix."""
    if value is None:
        return None
    stamp = value.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


def format_duration(seconds: float) -> str:
    """Format a duration in seconds as ``HH:MM:SS``.

    Examples:
        >>> format_duration(3725.4)
        '01:02:05'
    """
    total = int(round(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def excerpt(html: str, limit: int = EXCERPT_LENGTH) -> str:
    """Return the first ``limit`` characters of ``html`` with tags stripped.

    The cut is a plain character slice and may end mid-word.
    """
    return strip_tags(html)[:limit]


def is_markdown(path: Path) -> bool:
    """Check if a path is a Markdown file.

    Args:
        path: Path to check.

    Returns:
        True if the file has .md extension (case-insensitive).
    """
    return path.suffix.lower() == ".md"
