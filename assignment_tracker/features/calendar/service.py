"""
Service layer: calendar month view, stored calendar tokens, and assignment -> event sync.
"""
import calendar
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select

from assignment_tracker.core.db import session_scope
from assignment_tracker.core.models import Assignment
from assignment_tracker.features.assignments.service import list_assignments, update_assignment
from assignment_tracker.features.calendar.models import CalendarToken

logger = logging.getLogger(__name__)


def month_view(user_id: int, year: int, month: int) -> List[List[Dict[str, Any]]]:
    """
    Weeks (Sunday first) covering the month; each day is
    {date, in_month, assignments} with the assignments due that day.
    """
    weeks = calendar.Calendar(firstweekday=calendar.SUNDAY).monthdatescalendar(year, month)
    start = datetime.combine(weeks[0][0], datetime.min.time())
    end = datetime.combine(weeks[-1][-1], datetime.min.time()) + timedelta(days=1)
    with session_scope() as session:
        rows = session.execute(
            select(Assignment)
            .where(
                Assignment.user_id == user_id,
                Assignment.due_date >= start,
                Assignment.due_date < end,
            )
            .order_by(Assignment.due_date.asc())
        ).scalars().all()

    by_day: Dict[date, List[Assignment]] = {}
    for a in rows:
        by_day.setdefault(a.due_date.date(), []).append(a)

    return [
        [
            {"date": day, "in_month": day.month == month, "assignments": by_day.get(day, [])}
            for day in week
        ]
        for week in weeks
    ]


def save_tokens(user_id: int, token_info: Dict[str, Any]) -> None:
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    with session_scope() as session:
        row = session.get(CalendarToken, user_id)
        if row:
            row.token = token_info
            row.updated_at = now
        else:
            session.add(CalendarToken(user_id=user_id, token=token_info, updated_at=now))


def get_tokens(user_id: int) -> Optional[Dict[str, Any]]:
    with session_scope() as session:
        row = session.get(CalendarToken, user_id)
        return dict(row.token) if row else None


def remove_tokens(user_id: int) -> bool:
    with session_scope() as session:
        result = session.execute(delete(CalendarToken).where(CalendarToken.user_id == user_id))
        return result.rowcount > 0


def has_tokens(user_id: int) -> bool:
    return get_tokens(user_id) is not None


def sync_assignments(user_id: int, client: Any) -> Dict[str, int]:
    """
    Push the user's assignments to Google Calendar: create events for assignments
    without an event id, update the rest. Refreshed tokens are saved back.
    """
    counts = {"created": 0, "updated": 0, "failed": 0}
    for assignment in list_assignments(user_id):
        if assignment.google_calendar_event_id:
            if client.update_event(assignment.google_calendar_event_id, assignment):
                counts["updated"] += 1
            else:
                counts["failed"] += 1
            continue
        event_id = client.create_event(assignment)
        if event_id:
            update_assignment(user_id, assignment.id, {"google_calendar_event_id": event_id})
            counts["created"] += 1
        else:
            counts["failed"] += 1
    if client.token_info:
        save_tokens(user_id, client.token_info)
    logger.info(f"Calendar sync for user {user_id}: {counts}")
    return counts


def unsync_assignments(user_id: int, client: Any) -> int:
    """Delete the user's synced events and clear their event ids. Returns events removed."""
    removed = 0
    for assignment in list_assignments(user_id):
        if not assignment.google_calendar_event_id:
            continue
        if client.delete_event(assignment.google_calendar_event_id):
            update_assignment(user_id, assignment.id, {"google_calendar_event_id": None})
            removed += 1
    return removed
