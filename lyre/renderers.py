"""Markdown rendering for Lyre.

Post bodies are rendered with mistune. Headings get stable anchor ids and
fenced code blocks with a language are highlighted with Pygments.

Key classes:
- MarkdownRenderer: Implements the ContentRenderer protocol.
"""

from __future__ import annotations

import re

import mistune


def _generate_heading_id(text: str) -> str:
    """Generate a URL-friendly ID from heading text.

    Args:
        text: The heading text.

    Returns:
        URL-friendly slug suitable for anchor links.
    """
    slug = text.lower().strip()
    slug = re.sub(r"<[^>]+>", "", slug)
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[-\s]+", "-", slug)
    return slug.strip("-")


class _HighlightRenderer(mistune.HTMLRenderer):
    """HTML renderer with heading anchors and syntax highlighting."""

    def __init__(self):
        super().__init__(escape=False)
        self._heading_id_counts: dict[str, int] = {}

    def heading(self, text: str, level: int, **attrs) -> str:
        """Render a heading with an auto-generated, de-duplicated id."""
        base_id = _generate_heading_id(text)

        if base_id in self._heading_id_counts:
            self._heading_id_counts[base_id] += 1
            heading_id = f"{base_id}-{self._heading_id_counts[base_id]}"
        else:
            self._heading_id_counts[base_id] = 0
            heading_id = base_id

        return f'<h{level} id="{heading_id}">{text}</h{level}>\n'

    def block_code(self, code: str, info: str | None = None) -> str:
        """Render a code block with Pygments syntax highlighting.

        Args:
            code: The code content.
            info: Language identifier (e.g., 'python', 'javascript').

        Returns:
            HTML string with highlighted code.
        """
        if info:
            from pygments import highlight
            from pygments.formatters import HtmlFormatter
            from pygments.lexers import get_lexer_by_name
            from pygments.util import ClassNotFound

            try:
                lexer = get_lexer_by_name(info.split()[0], stripall=True)
            except ClassNotFound:
                lexer = None
            if lexer is not None:
                formatter = HtmlFormatter(nowrap=False, cssclass="highlight")
                return highlight(code, lexer, formatter)
        escaped = code.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
        lang_class = f' class="language-{info.split()[0]}"' if info else ""
        return f"<pre><code{lang_class}>{escaped}</code></pre>\n"


class MarkdownRenderer:
    """Renders Markdown post bodies to HTML.

    A fresh mistune parser is built per call so heading id counters never
    leak between posts.
    """

    plugins = ["strikethrough", "footnotes", "table", "url"]

    def render(self, content: str) -> str:
        """Render Markdown content to HTML.

        Args:
            content: Markdown source content.

        Returns:
            Rendered HTML string.
        """
        markdown = mistune.create_markdown(
            renderer=_HighlightRenderer(), plugins=self.plugins
        )
        return markdown(content)
