"""
Service layer: subjects (name, display color, teacher). Names are unique.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, select

from assignment_tracker.core.db import session_scope
from assignment_tracker.core.models import Subject

# Colors handed out to subjects created on demand (e.g. by spreadsheet import)
SUBJECT_PALETTE = [
    "#2196F3",
    "#4CAF50",
    "#FF9800",
    "#9C27B0",
    "#F44336",
    "#00BCD4",
    "#795548",
    "#607D8B",
]


def list_subjects() -> List[Subject]:
    with session_scope() as session:
        return list(session.execute(select(Subject).order_by(Subject.name)).scalars().all())


def get_subject(subject_id: int) -> Optional[Subject]:
    with session_scope() as session:
        return session.get(Subject, subject_id)


def get_subject_by_name(name: str) -> Optional[Subject]:
    with session_scope() as session:
        return session.execute(select(Subject).where(Subject.name == name)).scalars().first()


def create_subject(data: Dict[str, Any]) -> Subject:
    subject = Subject(
        name=data["name"],
        color=data.get("color") or next_palette_color(),
        teacher=data.get("teacher"),
    )
    with session_scope() as session:
        session.add(subject)
        session.flush()
    return subject


def update_subject(subject_id: int, fields: Dict[str, Any]) -> Optional[Subject]:
    with session_scope() as session:
        row = session.get(Subject, subject_id)
        if row is None:
            return None
        for key in ("name", "color", "teacher"):
            if key in fields:
                setattr(row, key, fields[key])
        return row


def delete_subject(subject_id: int) -> bool:
    with session_scope() as session:
        result = session.execute(delete(Subject).where(Subject.id == subject_id))
        return result.rowcount > 0


def next_palette_color() -> str:
    """Cycle through SUBJECT_PALETTE by the number of subjects already stored."""
    with session_scope() as session:
        count = session.execute(select(func.count(Subject.id))).scalar_one()
    return SUBJECT_PALETTE[count % len(SUBJECT_PALETTE)]


def ensure_subject(name: str, teacher: Optional[str] = None) -> Subject:
    """Return the subject called name, creating it with the next palette color if missing."""
    existing = get_subject_by_name(name)
    if existing is not None:
        return existing
    return create_subject({"name": name, "teacher": teacher})
