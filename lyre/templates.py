"""Page rendering for Lyre.

Site templates are plain HTML files with comment markers. Each marker is
replaced once, literally, with generated markup; there is no templating
language in the site templates themselves. The generated pieces (post
cards and tag filter buttons) come from small Jinja2 fragments shipped in
``lyre/fragments``, autoescaped except for the rendered post body.

Key classes:
- SiteTemplates: The home and post templates read from disk.
- TemplateEngine: Renders cards, tag filters, home and post pages.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from jinja2 import Environment, PackageLoader, select_autoescape
from markupsafe import Markup

from .exceptions import BuildError
from .metadata import audio_type, build_open_graph, render_meta_tags
from .utils import format_display_date

if TYPE_CHECKING:
    from .build import SiteConfig
    from .content import Entry

PORTFOLIO_ITEMS_MARKER = "<!-- PORTFOLIO_ITEMS -->"
TAG_FILTERS_MARKER = "<!-- TAG_FILTERS -->"
BLOG_ITEM_MARKER = "<!-- BLOG_ITEM -->"
BLOG_TITLE_MARKER = "<!-- BLOG_TITLE -->"
OG_TAGS_MARKER = "<!-- OG_TAGS -->"


def substitute(template: str, marker: str, value: str) -> str:
    """Replace the first occurrence of ``marker`` in ``template`` with ``value``.

    A template without the marker is returned unchanged.
    """
    return template.replace(marker, value, 1)


@dataclass(frozen=True)
class SiteTemplates:
    """The two page templates.

    Attributes:
        home: Template for ``index.html``.
        post: Template for each ``posts/<slug>.html``.
    """

    home: str
    post: str

    @classmethod
    def load(cls, home_path: Path, post_path: Path) -> SiteTemplates:
        """Read both templates from disk.

        Raises:
            BuildError: If either template cannot be read.
        """
        return cls(home=_read_template(home_path), post=_read_template(post_path))


def _read_template(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise BuildError(path, "Template not found", exc) from exc
    except OSError as exc:
        raise BuildError(path, f"Could not read template: {exc}", exc) from exc


class TemplateEngine:
    """Renders post cards and full pages.

    Attributes:
        site: Site configuration.
        env: Jinja2 environment holding the card fragments.
    """

    def __init__(self, site: SiteConfig):
        self.site = site
        self.env = Environment(
            loader=PackageLoader("lyre", "fragments"),
            autoescape=select_autoescape(["html", "xml"]),
            enable_async=False,
        )
        self.env.filters["display_date"] = format_display_date
        self.env.filters["audio_type"] = audio_type

    def render_card(self, entry: Entry, listing: bool = True) -> str:
        """Render the card markup of an entry.

        Args:
            entry: Entry to render.
            listing: True for the home page card, which links the title to
                the post page and carries ``data-tags`` for filtering.

        Returns:
            Card HTML.
        """
        template = self.env.get_template("card.html")
        return template.render(entry=entry, listing=listing)

    def render_tag_filters(self, tags: Iterable[str]) -> str:
        """Render the ``All`` button plus one button per tag, in the given order."""
        template = self.env.get_template("tag_filters.html")
        return template.render(tags=list(tags))

    def render_home(self, template: str, cards: Iterable[str], tags: Iterable[str]) -> str:
        """Fill the home template with the joined cards and the tag filters."""
        html = substitute(template, PORTFOLIO_ITEMS_MARKER, "\n".join(cards))
        return substitute(html, TAG_FILTERS_MARKER, self.render_tag_filters(tags))

    def render_post(self, template: str, entry: Entry) -> str:
        """Fill the post template with the entry card, title and preview tags."""
        og_tags = render_meta_tags(build_open_graph(entry, self.site))
        html = substitute(template, BLOG_ITEM_MARKER, self.render_card(entry, listing=False))
        html = substitute(html, BLOG_TITLE_MARKER, str(Markup.escape(entry.title)))
        return substitute(html, OG_TAGS_MARKER, og_tags)
