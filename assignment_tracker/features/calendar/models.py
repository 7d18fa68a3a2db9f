"""
SQLAlchemy models for Google Calendar sync: one OAuth token per user.
"""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, JSON

from assignment_tracker.core.db import Base


class CalendarToken(Base):
    """Authorized-user credentials (google-auth JSON) for one user."""
    __tablename__ = "calendar_tokens"

    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    token = Column(JSON, nullable=False)  # {token, refresh_token, client_id, client_secret, scopes, expiry, ...}
    updated_at = Column(DateTime(timezone=False), nullable=False)
