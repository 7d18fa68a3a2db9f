"""
Google Calendar API client for one user.
Handles the OAuth2 web flow, token refresh, and assignment events (create/update/delete).
"""
import json
import logging
import os
from datetime import timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

SCOPES = ["https://www.googleapis.com/auth/calendar"]

# Google Calendar event colorId per subject name
SUBJECT_COLOR_IDS = {
    "Math": "5",
    "Science": "7",
    "English": "4",
    "History": "6",
    "Art": "2",
    "PE": "11",
    "French": "9",
    "Biology": "10",
    "Physics": "3",
    "Chemistry": "8",
}
DEFAULT_COLOR_ID = "1"


def _expand_path(path_str: str) -> str:
    """Expand user and env vars in path."""
    s = os.path.expanduser(path_str)
    s = os.path.expandvars(s)
    return s


def color_for_subject(subject: str) -> str:
    return SUBJECT_COLOR_IDS.get(subject, DEFAULT_COLOR_ID)


class GoogleCalendarClient:
    """One user's calendar: OAuth2 + events for assignments on the primary calendar."""

    def __init__(
        self,
        client_secret_path: str,
        redirect_uri: str,
        token_info: Optional[Dict[str, Any]] = None,
        time_zone: str = "America/New_York",
        event_duration_minutes: int = 60,
        calendar_id: str = "primary",
        logger: Optional[logging.Logger] = None,
        service: Any = None,
    ):
        self.client_secret_path = _expand_path(client_secret_path) if client_secret_path else ""
        self.redirect_uri = redirect_uri
        self.token_info = token_info
        self.time_zone = time_zone
        self.event_duration = timedelta(minutes=event_duration_minutes)
        self.calendar_id = calendar_id
        self.logger = logger or logging.getLogger(__name__)
        self._service = service
        self._creds = None

    @property
    def is_configured(self) -> bool:
        return bool(self.client_secret_path) and Path(self.client_secret_path).exists()

    def _flow(self, state: Optional[str] = None) -> Flow:
        return Flow.from_client_secrets_file(
            self.client_secret_path,
            scopes=SCOPES,
            redirect_uri=self.redirect_uri,
            state=state,
            autogenerate_code_verifier=False,
        )

    def auth_url(self, state: Optional[str] = None) -> str:
        """URL the user visits to grant calendar access. state comes back on the callback."""
        url, _ = self._flow(state).authorization_url(
            access_type="offline",
            include_granted_scopes="true",
            prompt="consent",
        )
        return url

    def exchange_code(self, code: str) -> Dict[str, Any]:
        """Trade the callback code for tokens; returns authorized-user info to persist."""
        flow = self._flow()
        flow.fetch_token(code=code)
        self._creds = flow.credentials
        self.token_info = json.loads(self._creds.to_json())
        return self.token_info

    def _ensure_service(self) -> bool:
        """Load credentials (refreshing if expired) and build service. Returns True if ready."""
        if self._service is not None:
            return True
        if not self.token_info:
            self.logger.error("No Google Calendar credentials stored")
            return False

        try:
            creds = Credentials.from_authorized_user_info(self.token_info, SCOPES)
        except ValueError as e:
            self.logger.warning(f"Could not load calendar token: {e}")
            return False

        if not creds.valid:
            if creds.expired and creds.refresh_token:
                try:
                    creds.refresh(Request())
                except RefreshError as e:
                    self.logger.error(f"Calendar token refresh failed: {e}")
                    return False
                self.token_info = json.loads(creds.to_json())
            else:
                self.logger.error("Calendar token is invalid and cannot be refreshed")
                return False

        self._creds = creds
        self._service = build("calendar", "v3", credentials=creds, cache_discovery=False)
        return True

    def build_event(self, assignment: Any, with_reminders: bool = True) -> Dict[str, Any]:
        """Event body for one assignment; due_date is naive UTC."""
        start = assignment.due_date.replace(tzinfo=timezone.utc)
        end = start + self.event_duration
        event = {
            "summary": f"{assignment.subject}: {assignment.title}",
            "description": assignment.description or f"Assignment for {assignment.subject}",
            "start": {"dateTime": start.isoformat(), "timeZone": self.time_zone},
            "end": {"dateTime": end.isoformat(), "timeZone": self.time_zone},
            "colorId": color_for_subject(assignment.subject),
        }
        if with_reminders:
            event["reminders"] = {
                "useDefault": False,
                "overrides": [
                    {"method": "email", "minutes": 24 * 60},
                    {"method": "popup", "minutes": 60},
                ],
            }
        return event

    def create_event(self, assignment: Any) -> Optional[str]:
        """Create an event; returns its id or None on failure."""
        if not self._ensure_service():
            return None
        try:
            created = (
                self._service.events()
                .insert(calendarId=self.calendar_id, body=self.build_event(assignment))
                .execute()
            )
        except HttpError as e:
            self.logger.error(f"Calendar events.insert failed for assignment {assignment.id}: {e}")
            return None
        return created.get("id")

    def update_event(self, event_id: str, assignment: Any) -> bool:
        if not self._ensure_service():
            return False
        try:
            (
                self._service.events()
                .update(
                    calendarId=self.calendar_id,
                    eventId=event_id,
                    body=self.build_event(assignment, with_reminders=False),
                )
                .execute()
            )
        except HttpError as e:
            self.logger.error(f"Calendar events.update failed for event {event_id}: {e}")
            return False
        return True

    def delete_event(self, event_id: str) -> bool:
        if not self._ensure_service():
            return False
        try:
            self._service.events().delete(calendarId=self.calendar_id, eventId=event_id).execute()
        except HttpError as e:
            self.logger.error(f"Calendar events.delete failed for event {event_id}: {e}")
            return False
        return True

    def list_calendars(self) -> List[Dict[str, Any]]:
        if not self._ensure_service():
            return []
        try:
            response = self._service.calendarList().list().execute()
        except HttpError as e:
            self.logger.error(f"Calendar calendarList.list failed: {e}")
            return []
        return response.get("items", [])
