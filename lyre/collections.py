from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from datetime import datetime, timezone

from .content import Entry

_UNDATED = datetime.min.replace(tzinfo=timezone.utc)


class EntryCollection(Sequence[Entry]):
    """Lightweight helper for ordering and slicing lists of Entries."""

    def __init__(self, entries: Iterable[Entry]):
        self._entries = list(entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, item):
        return self._entries[item]

    def rich_media(self) -> EntryCollection:
        return EntryCollection(e for e in self._entries if e.is_rich_media)

    def sorted(self) -> EntryCollection:
        """Sort entries newest first.

        Sorting order:
        1. Date: newest first
        2. Slug: ascending, when dates are equal
        3. Undated entries come after every dated entry, by slug

        Returns:
            A new EntryCollection with sorted entries.
        """
        by_slug = sorted(self._entries, key=lambda e: e.slug)
        # list.sort is stable with reverse=True, so slug order survives ties
        by_slug.sort(
            key=lambda e: (e.date is not None, e.date or _UNDATED), reverse=True
        )
        return EntryCollection(by_slug)

    def latest(self, count: int = 20) -> EntryCollection:
        return EntryCollection(self.sorted()[:count])

    def tags(self) -> list[str]:
        """Alphabetically sorted union of every entry's tags."""
        return sorted({tag for entry in self._entries for tag in entry.tags})

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"EntryCollection({len(self._entries)} entries)"
