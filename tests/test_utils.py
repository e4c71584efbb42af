from datetime import date, datetime, timedelta, timezone
from pathlib import Path

from lyre import html_utils, utils
from lyre.executable_utils import find_executable


def test_slugify_and_titleize():
    assert utils.slugify("Hello, World!") == "hello-world"
    assert utils.slugify("  Late Night   Jam ") == "late-night-jam"
    assert utils.slugify("!!!") == "untitled"
    assert utils.titleize("late-night_jam.md") == "Late Night Jam"
    assert utils.titleize("---.md") == "Untitled"


def test_parse_date_accepts_yaml_values_and_strings():
    utc = timezone.utc
    assert utils.parse_date(date(2024, 1, 1)) == datetime(2024, 1, 1, tzinfo=utc)
    assert utils.parse_date(datetime(2024, 1, 1, 12, 30)) == datetime(
        2024, 1, 1, 12, 30, tzinfo=utc
    )
    assert utils.parse_date("2024-03-05T10:00:00Z") == datetime(
        2024, 3, 5, 10, tzinfo=utc
    )
    assert utils.parse_date("Tue, 05 Mar 2024 10:00:00 +0000") == datetime(
        2024, 3, 5, 10, tzinfo=utc
    )
    offset = utils.parse_date("2024-03-05T10:00:00+02:00")
    assert offset.utcoffset() == timedelta(hours=2)


def test_parse_date_returns_none_for_garbage():
    assert utils.parse_date(None) is None
    assert utils.parse_date("") is None
    assert utils.parse_date("next tuesday") is None
    assert utils.parse_date(42) is None


def test_date_formatting():
    value = datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert utils.format_display_date(value) == "January 1, 2024"
    assert utils.format_display_date(None) == "Undated"
    assert utils.format_rfc2822(value) == "Mon, 01 Jan 2024 00:00:00 GMT"
    assert utils.format_iso(value) == "2024-01-01T00:00:00.000Z"
    assert utils.format_iso(None) is None
    assert utils.format_duration(3725.4) == "01:02:05"
    assert utils.format_duration(59.6) == "00:01:00"


def test_excerpt_strips_tags_before_cutting():
    html = "<p>" + "<em>a</em>" * 300 + "</p>"
    text = utils.excerpt(html)
    assert text == "a" * 200
    assert utils.excerpt("<p>short</p>") == "short"


def test_is_markdown():
    assert utils.is_markdown(Path("post.md"))
    assert utils.is_markdown(Path("POST.MD"))
    assert not utils.is_markdown(Path("post.txt"))


def test_html_helpers():
    assert html_utils.escape_html('<a href="x">&</a>') == "&lt;a href=&quot;x&quot;&gt;&amp;&lt;/a&gt;"
    assert html_utils.join_root_url("https://example.com/", "a.mp3") == "https://example.com/a.mp3"
    assert html_utils.join_root_url("https://example.com", "/m/a.mp3") == "https://example.com/m/a.mp3"
    assert html_utils.join_root_url("", "/m/a.mp3") == "/m/a.mp3"
    assert html_utils.join_root_url("https://example.com", "https://cdn.test/a.mp3") == "https://cdn.test/a.mp3"
    assert html_utils.strip_tags("<p>Hi <b>there</b></p>") == "Hi there"
    assert html_utils.cdata("x]]>y") == "<![CDATA[x]]]]><![CDATA[>y]]>"


def test_find_executable_prefers_override(tmp_path, monkeypatch):
    binary = tmp_path / "ffmpeg-custom"
    binary.write_text("#!/bin/sh\n", encoding="utf-8")
    assert find_executable("ffmpeg", str(binary)) == str(binary)

    monkeypatch.setattr("shutil.which", lambda name: f"/usr/bin/{name}")
    assert find_executable("ffprobe") == "/usr/bin/ffprobe"
    assert find_executable("ffprobe", "probe2") == "/usr/bin/probe2"

    monkeypatch.setattr("shutil.which", lambda name: None)
    assert find_executable("ffmpeg") is None
