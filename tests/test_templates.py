from datetime import datetime, timezone

import pytest

from lyre.build import SiteConfig
from lyre.content import Entry
from lyre.exceptions import BuildError
from lyre.templates import (
    PORTFOLIO_ITEMS_MARKER,
    SiteTemplates,
    TemplateEngine,
    substitute,
)

from conftest import HOME_TEMPLATE, POST_TEMPLATE


def make_entry(**kwargs):
    values = dict(
        slug="hello",
        title="Hello",
        date=datetime(2024, 1, 1, tzinfo=timezone.utc),
        content="<p>Body &amp; <em>soul</em></p>",
        tags=["music", "live"],
        music_source="/music/a.mp3",
    )
    values.update(kwargs)
    return Entry(**values)


@pytest.fixture
def engine():
    return TemplateEngine(SiteConfig(title="Lyre", url="https://example.com"))


def test_substitute_replaces_first_marker_only():
    template = f"a {PORTFOLIO_ITEMS_MARKER} b {PORTFOLIO_ITEMS_MARKER}"
    assert substitute(template, PORTFOLIO_ITEMS_MARKER, "X") == f"a X b {PORTFOLIO_ITEMS_MARKER}"
    assert substitute("no marker", PORTFOLIO_ITEMS_MARKER, "X") == "no marker"


def test_listing_card(engine):
    html = engine.render_card(make_entry(), listing=True)
    assert 'data-tags="music live"' in html
    assert '<a href="/posts/hello">Hello</a>' in html
    assert "January 1, 2024" in html
    assert '<span class="tag" data-tag="music">music</span>' in html
    assert '<source src="/music/a.mp3" type="audio/mpeg">' in html
    assert "<p>Body &amp; <em>soul</em></p>" in html


def test_page_card_has_no_link_or_filter_tags(engine):
    html = engine.render_card(make_entry(), listing=False)
    assert "data-tags" not in html
    assert "/posts/hello" not in html
    assert "Hello" in html


def test_card_without_tags_or_audio(engine):
    html = engine.render_card(make_entry(tags=[], music_source=None, date=None))
    assert "portfolio-tags" not in html
    assert "<audio" not in html
    assert "Undated" in html


def test_card_escapes_title(engine):
    html = engine.render_card(make_entry(title="<script>x</script>"))
    assert "<script>x</script>" not in html
    assert "&lt;script&gt;" in html


def test_tag_filters(engine):
    html = engine.render_tag_filters(["live", "music"])
    assert '<button class="tag-filter active" data-filter="all">All</button>' in html
    assert html.index('data-filter="live"') < html.index('data-filter="music"')
    assert engine.render_tag_filters([]) == ""


def test_render_home(engine):
    html = engine.render_home(HOME_TEMPLATE, ["<div>one</div>", "<div>two</div>"], ["music"])
    assert "<main><div>one</div>\n<div>two</div></main>" in html
    assert 'data-filter="music"' in html
    assert "<!--" not in html


def test_render_post(engine):
    html = engine.render_post(POST_TEMPLATE, make_entry(title="Rock & Roll"))
    assert "<title>Rock &amp; Roll</title>" in html
    assert '<meta property="og:url" content="https://example.com/posts/hello" />' in html
    assert 'class="portfolio-item"' in html
    assert "<!--" not in html


def test_site_templates_load(tmp_path):
    (tmp_path / "home.html").write_text("home", encoding="utf-8")
    (tmp_path / "post.html").write_text("post", encoding="utf-8")
    templates = SiteTemplates.load(tmp_path / "home.html", tmp_path / "post.html")
    assert templates.home == "home" and templates.post == "post"

    with pytest.raises(BuildError) as excinfo:
        SiteTemplates.load(tmp_path / "home.html", tmp_path / "missing.html")
    assert excinfo.value.message == "Template not found"
