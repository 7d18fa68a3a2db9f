"""
Service layer: upload log history for spreadsheet imports.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy import select

from assignment_tracker.core.db import session_scope
from assignment_tracker.core.models import UploadLog

LOG_FIELDS = ("status", "assignments_created", "error_message", "processed_at")


def create_upload_log(data: Dict[str, Any]) -> UploadLog:
    log = UploadLog(
        user_id=data["user_id"],
        filename=data["filename"],
        status=data.get("status", "processing"),
    )
    with session_scope() as session:
        session.add(log)
        session.flush()
    return log


def update_upload_log(log_id: int, fields: Dict[str, Any]) -> Optional[UploadLog]:
    with session_scope() as session:
        row = session.get(UploadLog, log_id)
        if row is None:
            return None
        for key, value in fields.items():
            if key in LOG_FIELDS:
                setattr(row, key, value)
        return row


def get_upload_log(log_id: int) -> Optional[UploadLog]:
    with session_scope() as session:
        return session.get(UploadLog, log_id)


def get_upload_logs(user_id: int, limit: Optional[int] = 50) -> List[UploadLog]:
    """Return the user's upload history, newest first."""
    with session_scope() as session:
        stmt = (
            select(UploadLog)
            .where(UploadLog.user_id == user_id)
            .order_by(UploadLog.created_at.desc(), UploadLog.id.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(session.execute(stmt).scalars().all())
