"""
Per-feature API for the calendar. Mounted at /api/components/calendar/.
- /month: month grid of assignments for the current user
- /google/*: optional Google Calendar connection and sync (503 when disabled or not configured)
"""
from datetime import date, datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from assignment_tracker.api.server import user_dependency
from assignment_tracker.features.assignments.api import AssignmentResponse

from . import service


class CalendarDay(BaseModel):
    date: date
    in_month: bool
    assignments: List[AssignmentResponse]


class MonthResponse(BaseModel):
    year: int
    month: int
    weeks: List[List[CalendarDay]]


class GoogleStatusResponse(BaseModel):
    enabled: bool
    configured: bool
    connected: bool


class AuthUrlResponse(BaseModel):
    url: str


class SyncResponse(BaseModel):
    created: int
    updated: int
    failed: int


class DisconnectResponse(BaseModel):
    disconnected: bool
    events_removed: int


def get_router(tracker_app) -> Optional[APIRouter]:
    """Return router for this feature; mounted with prefix /api/components/calendar."""
    router = APIRouter(tags=["Calendar"])
    current_user_id = user_dependency(tracker_app)

    def configured_client(token_info=None):
        if not tracker_app.calendar_config.get("enabled", False):
            raise HTTPException(status_code=503, detail="Google Calendar sync is disabled")
        client = tracker_app.make_calendar_client(token_info)
        if not client.is_configured:
            raise HTTPException(status_code=503, detail="Google Calendar client secret not configured")
        return client

    @router.get("/month", response_model=MonthResponse)
    def month_grid(
        year: Optional[int] = Query(default=None, ge=1, le=9999),
        month: Optional[int] = Query(default=None, ge=1, le=12),
        user_id: int = Depends(current_user_id),
    ) -> MonthResponse:
        today = datetime.now(timezone.utc).date()
        year = year or today.year
        month = month or today.month
        weeks = service.month_view(user_id, year, month)
        return MonthResponse(
            year=year,
            month=month,
            weeks=[
                [
                    CalendarDay(
                        date=day["date"],
                        in_month=day["in_month"],
                        assignments=[AssignmentResponse.model_validate(a) for a in day["assignments"]],
                    )
                    for day in week
                ]
                for week in weeks
            ],
        )

    @router.get("/google/status", response_model=GoogleStatusResponse)
    def google_status(user_id: int = Depends(current_user_id)) -> GoogleStatusResponse:
        enabled = bool(tracker_app.calendar_config.get("enabled", False))
        configured = enabled and tracker_app.make_calendar_client().is_configured
        return GoogleStatusResponse(enabled=enabled, configured=configured, connected=service.has_tokens(user_id))

    @router.get("/google/auth-url", response_model=AuthUrlResponse)
    def google_auth_url(user_id: int = Depends(current_user_id)) -> AuthUrlResponse:
        client = configured_client()
        return AuthUrlResponse(url=client.auth_url(state=str(user_id)))

    @router.get("/google/callback")
    def google_callback(code: str, state: str):
        """OAuth redirect target. state carries the user id that requested the auth URL."""
        try:
            user_id = tracker_app.resolve_user_id(int(state))
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid state")
        client = configured_client()
        try:
            token_info = client.exchange_code(code)
        except Exception as e:
            tracker_app.logger.exception("Google Calendar token exchange failed")
            raise HTTPException(status_code=400, detail=f"Token exchange failed: {e}")
        service.save_tokens(user_id, token_info)
        return {"connected": True, "user_id": user_id}

    @router.post("/google/sync", response_model=SyncResponse)
    def google_sync(user_id: int = Depends(current_user_id)) -> SyncResponse:
        token_info = service.get_tokens(user_id)
        if token_info is None:
            raise HTTPException(status_code=409, detail="Google Calendar not connected")
        client = configured_client(token_info)
        return SyncResponse(**service.sync_assignments(user_id, client))

    @router.delete("/google", response_model=DisconnectResponse)
    def google_disconnect(remove_events: bool = False, user_id: int = Depends(current_user_id)) -> DisconnectResponse:
        removed = 0
        token_info = service.get_tokens(user_id)
        if remove_events and token_info is not None:
            removed = service.unsync_assignments(user_id, configured_client(token_info))
        return DisconnectResponse(disconnected=service.remove_tokens(user_id), events_removed=removed)

    return router
