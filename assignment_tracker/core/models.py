"""
Core DB models: users, subjects, assignments, and spreadsheet upload history.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import Column, String, DateTime, Text, Integer, ForeignKey, select

from assignment_tracker.core.db import Base, session_scope

PRIORITIES = ("low", "medium", "high")
STATUSES = ("pending", "in-progress", "completed")
UPLOAD_STATUSES = ("processing", "completed", "failed")

DEFAULT_SUBJECTS = [
    {"name": "Mathematics", "color": "#2196F3", "teacher": "Mr. Johnson"},
    {"name": "English", "color": "#4CAF50", "teacher": "Ms. Davis"},
    {"name": "Science", "color": "#FF9800", "teacher": "Dr. Smith"},
    {"name": "History", "color": "#9C27B0", "teacher": "Mr. Wilson"},
]


def _utc_now() -> datetime:
    """UTC now as naive datetime for DateTime(timezone=False) columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Aware datetimes are converted to UTC; all results are plain naive datetimes."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return datetime.combine(value.date(), value.time())


class User(Base):
    """A student using the tracker. Assignments and uploads hang off user_id."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    email = Column(String(255), nullable=True, index=True)
    avatar = Column(Text, nullable=True)
    google_id = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=False), default=_utc_now, nullable=False)


class Subject(Base):
    """Subject (course) with a display color. Names are unique."""
    __tablename__ = "subjects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    color = Column(String(16), nullable=False)  # "#RRGGBB"
    teacher = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=False), default=_utc_now, nullable=False)


class Assignment(Base):
    """One assignment owned by a user. due_date is naive UTC."""
    __tablename__ = "assignments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    subject = Column(String(255), nullable=False, index=True)
    due_date = Column(DateTime(timezone=False), nullable=False, index=True)
    priority = Column(String(16), nullable=False, default="medium")  # low | medium | high
    status = Column(String(16), nullable=False, default="pending")  # pending | in-progress | completed
    progress = Column(Integer, nullable=False, default=0)
    teacher = Column(String(255), nullable=True)
    google_calendar_event_id = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=False), default=_utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=False), default=_utc_now, onupdate=_utc_now, nullable=False)


class UploadLog(Base):
    """One row per spreadsheet import attempt. Append-only history."""
    __tablename__ = "upload_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    filename = Column(String(500), nullable=False)
    status = Column(String(16), nullable=False, default="processing")  # processing | completed | failed
    assignments_created = Column(Integer, nullable=False, default=0)
    error_message = Column(Text, nullable=True)  # row errors joined with "; "
    created_at = Column(DateTime(timezone=False), default=_utc_now, nullable=False)
    processed_at = Column(DateTime(timezone=False), nullable=True)


def seed_defaults(config_data: Optional[Dict[str, Any]] = None) -> None:
    """Insert default subjects and the default user when they are missing."""
    users_config = (config_data or {}).get("users") or {}
    default_user = users_config.get("default", "Student")
    with session_scope() as session:
        existing = set(session.execute(select(Subject.name)).scalars().all())
        for entry in DEFAULT_SUBJECTS:
            if entry["name"] not in existing:
                session.add(Subject(**entry))
        if default_user:
            user = session.execute(select(User).where(User.name == default_user)).scalars().first()
            if user is None:
                session.add(User(name=default_user))
