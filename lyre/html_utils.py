"""HTML utility functions for Lyre.

This module provides the small string helpers used wherever Lyre emits markup:
escaping attribute values, joining the site URL with site-relative paths,
stripping tags for plain-text excerpts and wrapping text in CDATA sections.

Functions:
    escape_html: Escape special HTML characters in a string.
    join_root_url: Join a base URL with a path.
    strip_tags: Remove HTML tags from a string.
    cdata: Wrap text in a CDATA section.
"""

from __future__ import annotations

import re

_TAG_RE = re.compile(r"<[^>]*>")


def escape_html(text: str) -> str:
    """Escape special HTML characters in a string.

    Converts the following characters to their HTML entity equivalents:
    - & becomes &amp;
    - < becomes &lt;
    - > becomes &gt;
    - " becomes &quot;

    Args:
        text: The string to escape.

    Returns:
        The escaped string, safe for inclusion in HTML attributes.

    Examples:
        >>> escape_html('Tom & "Jerry"')
        'Tom &amp; &quot;Jerry&quot;'
    """
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def join_root_url(root_url: str, path: str) -> str:
    """Safely join a root URL and a path, avoiding double slashes.

    Args:
        root_url: Base URL (e.g., https://example.com/blog).
        path: Path beginning with or without a leading slash.

    Returns:
        Combined URL with proper slash handling.

    Examples:
        >>> join_root_url('https://example.com', '/music/a.mp3')
        'https://example.com/music/a.mp3'

        >>> join_root_url('https://example.com/', 'a.mp3')
        'https://example.com/a.mp3'
    """
    if path.startswith(("http://", "https://", "//")):
        return path
    if not root_url:
        return path
    base = root_url.rstrip("/")
    suffix = path if path.startswith("/") else f"/{path}"
    return f"{base}{suffix}"


def strip_tags(html: str) -> str:
    """Remove every ``<...>`` tag from an HTML string.

    Entities and whitespace are left as they are.
    """
    return _TAG_RE.sub("", html)


def cdata(text: str) -> str:
    """Wrap text in a CDATA section.

    Any ``]]>`` inside the text is split across two sections so the
    result stays well formed.

    Examples:
        >>> cdata("a ]]> b")
        '<![CDATA[a ]]]]><![CDATA[> b]]>'
    """
    return "<![CDATA[" + text.replace("]]>", "]]]]><![CDATA[>") + "]]>"
