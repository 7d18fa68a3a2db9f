"""
Field coercion for imported rows: priority/status vocabularies, progress range, required fields.
"""
import math
from typing import Any, Optional

from assignment_tracker.core.models import PRIORITIES, STATUSES

from .column_mapper import MappedRow, is_blank
from .errors import MissingRequiredField


def normalize_priority(value: Any) -> str:
    """'URGENT!!' -> high, '1' -> low, unknown -> medium."""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip().lower()
    if text in PRIORITIES:
        return text
    if "high" in text or "urgent" in text or text == "3":
        return "high"
    if "low" in text or text == "1":
        return "low"
    return "medium"


def normalize_status(value: Any) -> str:
    """'Finished' -> completed, 'working on it' -> in-progress, unknown -> pending."""
    text = str(value).strip().lower()
    if text in STATUSES:
        return text
    if "complete" in text or "done" in text or "finished" in text:
        return "completed"
    if "progress" in text or "working" in text or "started" in text:
        return "in-progress"
    return "pending"


def normalize_progress(value: Any) -> int:
    """Integer percent clamped to [0, 100]; 0 when unparseable."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, float):
        progress = 0 if math.isnan(value) or math.isinf(value) else int(value)
    elif isinstance(value, int):
        progress = value
    else:
        text = str(value).strip().rstrip("%").strip()
        try:
            progress = int(text)
        except ValueError:
            try:
                progress = int(float(text))
            except (ValueError, OverflowError):
                progress = 0
    return min(max(progress, 0), 100)


def clean_text(value: Any) -> str:
    return "" if is_blank(value) else str(value).strip()


def optional_text(value: Any) -> Optional[str]:
    text = clean_text(value)
    return text or None


def require_fields(row: MappedRow) -> None:
    """Raise MissingRequiredField unless title, subject and due date are all present."""
    if is_blank(row.title) or is_blank(row.subject) or is_blank(row.due_date):
        raise MissingRequiredField(row.title, row.subject, row.due_date)
