from datetime import datetime, timezone

import pytest

from lyre.content import ContentProcessor, Entry, EntryBuilder, FileContentLoader
from lyre.exceptions import BuildError, FrontmatterError
from lyre.extractors import EntryMetadataExtractor, extract_frontmatter, normalize_tags
from lyre.renderers import MarkdownRenderer, _generate_heading_id

from conftest import write_post


def test_extract_frontmatter_splits_body():
    data, body = extract_frontmatter("---\ntitle: Hi\ntags: [a]\n---\n# Body\n")
    assert data == {"title": "Hi", "tags": ["a"]}
    assert body == "# Body\n"


def test_extract_frontmatter_handles_bom_crlf_and_empty_block():
    data, body = extract_frontmatter("\ufeff---\r\ntitle: Hi\r\n---\r\ntext")
    assert data == {"title": "Hi"}
    assert body == "text"
    data, body = extract_frontmatter("---\n---\nonly body")
    assert data == {}
    assert body == "only body"


@pytest.mark.parametrize(
    "text",
    [
        "no front matter here",
        "---\ntitle: [unclosed\n---\nbody",
        "---\n- a list\n---\nbody",
        "---\ntitle: never closed\n",
    ],
)
def test_extract_frontmatter_rejects_bad_blocks(text):
    with pytest.raises(FrontmatterError):
        extract_frontmatter(text)


def test_metadata_defaults_and_normalization(tmp_path):
    meta = EntryMetadataExtractor().extract(
        {"tags": "music", "music-source": " /m/a.mp3 ", "date": "garbage"},
        tmp_path / "late-night-jam.md",
    )
    assert meta["title"] == "Late Night Jam"
    assert meta["description"] == ""
    assert meta["date"] is None
    assert meta["tags"] == ["music"]
    assert meta["music_source"] == "/m/a.mp3"
    assert meta["cover_image"] is None
    assert normalize_tags(["b", None, 3]) == ["b", "3"]


def test_markdown_renderer_headings_and_code():
    html = MarkdownRenderer().render(
        "# Intro\n\n## Intro\n\n~~gone~~\n\n```python\nprint('x')\n```\n\n```nosuchlang\n<x>\n```\n"
    )
    assert '<h1 id="intro">Intro</h1>' in html
    assert '<h2 id="intro-1">Intro</h2>' in html
    assert "<del>gone</del>" in html
    assert 'class="highlight"' in html
    assert '<code class="language-nosuchlang">&lt;x&gt;' in html
    assert _generate_heading_id("Hello, <em>World</em>!") == "hello-world"


def test_markdown_renderer_passes_raw_html():
    html = MarkdownRenderer().render('<div class="embed">raw</div>\n')
    assert '<div class="embed">raw</div>' in html


def test_entry_builder_builds_entry(tmp_path):
    path = write_post(
        tmp_path,
        "hello.md",
        "title: Hello\ndate: 2024-01-01\ntags: [music, live]\nmusic-source: a.mp3\ncover-image: c.jpg",
        "# Hi there",
    )
    entry = EntryBuilder().build(path)
    assert entry.slug == "hello"
    assert entry.title == "Hello"
    assert entry.date == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert entry.tags == ["music", "live"]
    assert entry.music_source == "a.mp3"
    assert entry.cover_image == "c.jpg"
    assert '<h1 id="hi-there">Hi there</h1>' in entry.content
    assert entry.is_rich_media
    assert entry.video_source is None and entry.waveform_image is None


def test_entry_is_rich_media_needs_tag_and_source():
    base = dict(slug="s", title="t", date=None, content="")
    assert not Entry(**base, tags=["music"]).is_rich_media
    assert not Entry(**base, tags=["jazz"], music_source="a.mp3").is_rich_media
    assert Entry(**base, tags=["music"], music_source="a.mp3").is_rich_media


def test_entry_builder_wraps_frontmatter_errors(tmp_path):
    path = tmp_path / "bad.md"
    path.write_text("just text", encoding="utf-8")
    with pytest.raises(BuildError) as excinfo:
        EntryBuilder().build(path)
    assert excinfo.value.source_path == path
    assert isinstance(excinfo.value.original_error, FrontmatterError)


def test_loader_lists_markdown_files_only(tmp_path):
    write_post(tmp_path, "b.md", "title: B")
    write_post(tmp_path, "a.md", "title: A")
    (tmp_path / "notes.txt").write_text("x", encoding="utf-8")
    (tmp_path / "nested").mkdir()
    write_post(tmp_path / "nested", "c.md", "title: C")
    names = [p.name for p in FileContentLoader(tmp_path).iter_files()]
    assert names == ["a.md", "b.md"]


def test_loader_requires_content_dir(tmp_path):
    with pytest.raises(BuildError):
        FileContentLoader(tmp_path / "missing").iter_files()


def test_content_processor_loads_in_file_order(tmp_path):
    for name in ["c.md", "a.md", "b.md"]:
        write_post(tmp_path, name, f"title: {name[0].upper()}")
    entries = ContentProcessor(tmp_path, max_workers=2).load()
    assert [e.slug for e in entries] == ["a", "b", "c"]


def test_content_processor_empty_dir(tmp_path):
    assert ContentProcessor(tmp_path).load() == []


def test_content_processor_rejects_slug_collisions(tmp_path):
    write_post(tmp_path, "Song.md", "title: One")
    write_post(tmp_path, "song.MD", "title: Two")
    if len(list(tmp_path.iterdir())) < 2:
        pytest.skip("case-insensitive filesystem")
    with pytest.raises(BuildError) as excinfo:
        ContentProcessor(tmp_path).load()
    assert "collides" in excinfo.value.message


def test_content_processor_fails_on_bad_post(tmp_path):
    write_post(tmp_path, "good.md", "title: Good")
    (tmp_path / "bad.md").write_text("---\ntitle: [\n---\n", encoding="utf-8")
    with pytest.raises(BuildError) as excinfo:
        ContentProcessor(tmp_path).load()
    assert excinfo.value.source_path.name == "bad.md"
