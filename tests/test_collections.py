from datetime import datetime, timezone

from lyre.collections import EntryCollection
from lyre.content import Entry


def make_entry(slug, date=None, tags=None, music_source=None):
    return Entry(
        slug=slug,
        title=slug.title(),
        date=date,
        content="",
        tags=tags or [],
        music_source=music_source,
    )


def day(n):
    return datetime(2024, 1, n, tzinfo=timezone.utc)


def test_sorted_newest_first_with_slug_ties_and_undated_last():
    entries = EntryCollection(
        [
            make_entry("zeta"),
            make_entry("b", day(2)),
            make_entry("a", day(2)),
            make_entry("old", day(1)),
            make_entry("alpha"),
            make_entry("new", day(3)),
        ]
    )
    ordered = entries.sorted()
    assert [e.slug for e in ordered] == ["new", "a", "b", "old", "alpha", "zeta"]
    assert [e.slug for e in entries] == ["zeta", "b", "a", "old", "alpha", "new"]


def test_latest_limits_after_sorting():
    entries = EntryCollection(make_entry(f"p{n:02d}", day(n)) for n in range(1, 26))
    latest = entries.latest(20)
    assert len(latest) == 20
    assert latest[0].slug == "p25"
    assert latest[-1].slug == "p06"


def test_filters_and_tags():
    entries = EntryCollection(
        [
            make_entry("a", tags=["music", "live"], music_source="/a.mp3"),
            make_entry("b", tags=["music"]),
            make_entry("c", tags=["essay"]),
        ]
    )
    assert [e.slug for e in entries.rich_media()] == ["a"]
    assert entries.tags() == ["essay", "live", "music"]
    assert EntryCollection([]).tags() == []
