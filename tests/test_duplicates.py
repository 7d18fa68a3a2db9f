from __future__ import annotations

from datetime import datetime
from types import SimpleNamespace

from assignment_tracker.features.spreadsheet_import.duplicates import DuplicateIndex, duplicate_key


def test_key_uses_calendar_day() -> None:
    assert duplicate_key("Essay", "English", datetime(2024, 3, 15, 8)) == duplicate_key(
        "Essay", "English", datetime(2024, 3, 15, 23, 59)
    )


def test_index_built_from_existing_assignments() -> None:
    existing = [
        SimpleNamespace(title="Essay", subject="English", due_date=datetime(2024, 3, 15)),
        SimpleNamespace(title="Essay", subject="English", due_date=datetime(2024, 3, 15, 12)),
    ]
    index = DuplicateIndex(existing)
    assert len(index) == 1
    assert index.is_duplicate("Essay", "English", datetime(2024, 3, 15, 17))
    assert not index.is_duplicate("Essay", "English", datetime(2024, 3, 16))
    assert not index.is_duplicate("Essay", "History", datetime(2024, 3, 15))
    assert not index.is_duplicate("essay", "English", datetime(2024, 3, 15))


def test_added_keys_are_seen() -> None:
    index = DuplicateIndex()
    assert not index.is_duplicate("Poster", "Art", datetime(2024, 3, 25))
    index.add("Poster", "Art", datetime(2024, 3, 25))
    assert index.is_duplicate("Poster", "Art", datetime(2024, 3, 25, 9))
