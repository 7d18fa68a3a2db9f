from __future__ import annotations

import math

import pytest

from assignment_tracker.features.spreadsheet_import.column_mapper import MappedRow
from assignment_tracker.features.spreadsheet_import.errors import MissingRequiredField
from assignment_tracker.features.spreadsheet_import.fields import (
    clean_text,
    normalize_priority,
    normalize_progress,
    normalize_status,
    optional_text,
    require_fields,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("high", "high"),
        ("HIGH", "high"),
        ("URGENT!!", "high"),
        ("Very high", "high"),
        ("3", "high"),
        ("low", "low"),
        ("Low priority", "low"),
        ("1", "low"),
        ("medium", "medium"),
        ("2", "medium"),
        ("whenever", "medium"),
        ("", "medium"),
        (3.0, "high"),
        (1.0, "low"),
        (3, "high"),
    ],
)
def test_normalize_priority(value, expected: str) -> None:
    assert normalize_priority(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        ("pending", "pending"),
        ("Finished", "completed"),
        ("done", "completed"),
        ("Completed", "completed"),
        ("in-progress", "in-progress"),
        ("In Progress", "in-progress"),
        ("working on it", "in-progress"),
        ("started", "in-progress"),
        ("not yet", "pending"),
    ],
)
def test_normalize_status(value, expected: str) -> None:
    assert normalize_status(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, 0),
        (45, 45),
        ("150", 100),
        ("-5", 0),
        ("45%", 45),
        (" 80 % ", 80),
        ("72.9", 72),
        (72.9, 72),
        (math.nan, 0),
        (math.inf, 0),
        ("abc", 0),
        (True, 0),
    ],
)
def test_normalize_progress(value, expected: int) -> None:
    assert normalize_progress(value) == expected


def test_text_helpers() -> None:
    assert clean_text("  Essay ") == "Essay"
    assert clean_text(None) == ""
    assert clean_text(math.nan) == ""
    assert optional_text("   ") is None
    assert optional_text(" Ms. Davis ") == "Ms. Davis"


def _row(**values) -> MappedRow:
    base = dict(
        title="Essay",
        subject="English",
        due_date="2024-03-15",
        description="",
        priority="medium",
        teacher="",
        status="pending",
        progress=0,
    )
    base.update(values)
    return MappedRow(**base)


def test_require_fields_accepts_complete_row() -> None:
    require_fields(_row())


@pytest.mark.parametrize("missing", ["title", "subject", "due_date"])
def test_require_fields_rejects_missing(missing: str) -> None:
    with pytest.raises(MissingRequiredField):
        require_fields(_row(**{missing: None}))


def test_missing_field_message_shows_values() -> None:
    with pytest.raises(MissingRequiredField) as excinfo:
        require_fields(_row(subject="  "))
    assert str(excinfo.value) == (
        'Skipping row with missing required fields: Title="Essay", Subject="  ", DueDate="2024-03-15"'
    )
