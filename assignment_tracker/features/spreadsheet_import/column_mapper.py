"""
Column mapper: resolve spreadsheet headers to canonical assignment fields.

COLUMN_SYNONYMS is consulted in order. Each synonym is tried as written, then
lowercase, then uppercase; the first non-empty cell wins.
"""
import math
from collections import namedtuple
from typing import Any, Dict, List, Mapping, Optional, Tuple

MappedRow = namedtuple(
    "MappedRow",
    [
        "title",        # raw value or None
        "subject",      # raw value or None
        "due_date",     # raw value or None (str, number, datetime)
        "description",  # "" when missing
        "priority",     # "medium" when missing
        "teacher",      # "" when missing
        "status",       # "pending" when missing
        "progress",     # 0 when missing
    ],
)

COLUMN_SYNONYMS: List[Tuple[str, List[str]]] = [
    ("title", ["Title", "Assignment", "Task", "Name"]),
    ("subject", ["Subject", "Course", "Class"]),
    ("due_date", [
        "Due Date", "DueDate", "due date", "dueDate", "DUE_DATE", "DUE Date",
        "Due", "Date", "Deadline",
    ]),
    ("description", ["Description", "Details", "Notes", "Instructions"]),
    ("priority", ["Priority", "Importance"]),
    ("teacher", ["Teacher", "Instructor", "Professor"]),
    ("status", ["Status"]),
    ("progress", ["Progress"]),
]

FIELD_DEFAULTS: Dict[str, Any] = {
    "title": None,
    "subject": None,
    "due_date": None,
    "description": "",
    "priority": "medium",
    "teacher": "",
    "status": "pending",
    "progress": 0,
}


def is_blank(value: Any) -> bool:
    """None, NaN, and whitespace-only strings count as empty cells."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def key_variants(synonym: str) -> List[str]:
    """Synonym as written, lower, UPPER (deduplicated, order kept)."""
    variants = []
    for key in (synonym, synonym.lower(), synonym.upper()):
        if key not in variants:
            variants.append(key)
    return variants


def lookup(row: Mapping[str, Any], synonyms: List[str]) -> Optional[Any]:
    """Return the first non-empty value among the synonym keys, else None."""
    for synonym in synonyms:
        for key in key_variants(synonym):
            if key in row and not is_blank(row[key]):
                return row[key]
    return None


def map_columns(row: Mapping[str, Any]) -> MappedRow:
    """Map one raw spreadsheet row to a MappedRow (defaults filled for optional fields)."""
    values = {}
    for field, synonyms in COLUMN_SYNONYMS:
        value = lookup(row, synonyms)
        values[field] = FIELD_DEFAULTS[field] if value is None else value
    return MappedRow(**values)
