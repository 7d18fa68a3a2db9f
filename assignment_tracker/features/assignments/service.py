"""
Service layer: assignment CRUD, upcoming list, and dashboard stats.
Every call is scoped to an explicit user_id.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select

from assignment_tracker.core.db import session_scope
from assignment_tracker.core.models import Assignment

UPDATABLE_FIELDS = (
    "title",
    "description",
    "subject",
    "due_date",
    "priority",
    "status",
    "progress",
    "teacher",
    "google_calendar_event_id",
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def list_assignments(
    user_id: int,
    status: Optional[str] = None,
    subject: Optional[str] = None,
) -> List[Assignment]:
    """Return the user's assignments sorted by due date, optionally filtered by status or subject."""
    with session_scope() as session:
        stmt = select(Assignment).where(Assignment.user_id == user_id)
        if status:
            stmt = stmt.where(Assignment.status == status)
        if subject:
            stmt = stmt.where(Assignment.subject == subject)
        stmt = stmt.order_by(Assignment.due_date.asc(), Assignment.id.asc())
        return list(session.execute(stmt).scalars().all())


def get_assignment(user_id: int, assignment_id: int) -> Optional[Assignment]:
    with session_scope() as session:
        return session.execute(
            select(Assignment).where(Assignment.id == assignment_id, Assignment.user_id == user_id)
        ).scalars().first()


def create_assignment(user_id: int, data: Dict[str, Any]) -> Assignment:
    """Insert one assignment for user_id. data keys follow the Assignment columns."""
    fields = {k: v for k, v in data.items() if k in UPDATABLE_FIELDS and v is not None}
    fields.setdefault("priority", "medium")
    fields.setdefault("status", "pending")
    fields.setdefault("progress", 0)
    now = _utc_now()
    assignment = Assignment(user_id=user_id, created_at=now, updated_at=now, **fields)
    with session_scope() as session:
        session.add(assignment)
        session.flush()
    return assignment


def update_assignment(user_id: int, assignment_id: int, fields: Dict[str, Any]) -> Optional[Assignment]:
    """Apply a partial update; returns None when the assignment does not exist for this user."""
    with session_scope() as session:
        row = session.execute(
            select(Assignment).where(Assignment.id == assignment_id, Assignment.user_id == user_id)
        ).scalars().first()
        if row is None:
            return None
        for key, value in fields.items():
            if key in UPDATABLE_FIELDS:
                setattr(row, key, value)
        row.updated_at = _utc_now()
        return row


def delete_assignment(user_id: int, assignment_id: int) -> bool:
    with session_scope() as session:
        result = session.execute(
            delete(Assignment).where(Assignment.id == assignment_id, Assignment.user_id == user_id)
        )
        return result.rowcount > 0


def clear_assignments(user_id: int) -> int:
    """Bulk delete all of the user's assignments. Returns the number removed."""
    with session_scope() as session:
        result = session.execute(delete(Assignment).where(Assignment.user_id == user_id))
        return result.rowcount


def upcoming_assignments(user_id: int, limit: int = 10, now: Optional[datetime] = None) -> List[Assignment]:
    """Not-yet-due, not-completed assignments, soonest first."""
    now = now or _utc_now()
    with session_scope() as session:
        stmt = (
            select(Assignment)
            .where(
                Assignment.user_id == user_id,
                Assignment.due_date >= now,
                Assignment.status != "completed",
            )
            .order_by(Assignment.due_date.asc())
            .limit(limit)
        )
        return list(session.execute(stmt).scalars().all())


def assignment_stats(user_id: int, now: Optional[datetime] = None) -> Dict[str, int]:
    """Counts for the dashboard cards: due today, due this week, completed, active."""
    now = now or _utc_now()
    today = datetime(now.year, now.month, now.day)
    week_from_now = today + timedelta(days=7)
    assignments = list_assignments(user_id)
    active = [a for a in assignments if a.status != "completed"]
    return {
        "due_today": sum(1 for a in active if a.due_date.date() == today.date()),
        "this_week": sum(1 for a in active if today <= a.due_date <= week_from_now),
        "completed": len(assignments) - len(active),
        "total_active": len(active),
    }
