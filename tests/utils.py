"""Fixtures and helpers for import and calendar tests."""
from __future__ import annotations

from io import BytesIO, StringIO
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pandas as pd
import yaml

from assignment_tracker.features.spreadsheet_import.storage import ImportStorage

SHEET_COLUMNS: Sequence[str] = ("Title", "Subject", "Due Date", "Priority", "Status", "Progress")

# 10 rows: 6 distinct assignments, 3 repeats of earlier rows (same day), 1 without a subject
TEN_ROWS: List[Dict[str, Any]] = [
    {"Title": "Essay", "Subject": "English", "Due Date": "2024-03-15", "Priority": "high"},
    {"Title": "Worksheet 4", "Subject": "Mathematics", "Due Date": "2024-03-16", "Priority": "low"},
    {"Title": "Lab report", "Subject": "Science", "Due Date": "2024-03-18", "Status": "Finished"},
    {"Title": "Essay", "Subject": "English", "Due Date": "2024-03-15 17:00"},
    {"Title": "Timeline", "Subject": "History", "Due Date": "03/20/2024", "Progress": "50%"},
    {"Title": "Lab notes", "Subject": None, "Due Date": "2024-03-21"},
    {"Title": "Worksheet 4", "Subject": "Mathematics", "Due Date": "2024-03-16"},
    {"Title": "Reading log", "Subject": "English", "Due Date": "2024-03-22", "Priority": "URGENT!!"},
    {"Title": "Poster", "Subject": "Art", "Due Date": "2024-03-25"},
    {"Title": "Timeline", "Subject": "History", "Due Date": "2024-03-20"},
]


def csv_bytes(rows: Sequence[Mapping[str, Any]], columns: Sequence[str] = SHEET_COLUMNS) -> bytes:
    buffer = StringIO()
    pd.DataFrame(list(rows), columns=list(columns)).to_csv(buffer, index=False)
    return buffer.getvalue().encode("utf-8")


def xlsx_bytes(rows: Sequence[Mapping[str, Any]], columns: Sequence[str] = SHEET_COLUMNS) -> bytes:
    buffer = BytesIO()
    pd.DataFrame(list(rows), columns=list(columns)).to_excel(buffer, index=False, engine="openpyxl")
    return buffer.getvalue()


def write_config(config_dir: Path, **overrides) -> Path:
    """Minimal config.yaml pointing the database and log file into config_dir."""
    data = {
        "database": {"path": str(config_dir / "tracker.db")},
        "logging": {"level": "DEBUG", "file": str(config_dir / "tracker.log")},
    }
    for section, values in overrides.items():
        data.setdefault(section, {}).update(values)
    config_dir.mkdir(parents=True, exist_ok=True)
    config_file = config_dir / "config.yaml"
    config_file.write_text(yaml.dump(data))
    return config_file


class InMemoryStorage(ImportStorage):
    """ImportStorage backed by plain lists, for importer tests without a database."""

    def __init__(self, assignments: Optional[List[Dict[str, Any]]] = None):
        self.assignments: List[SimpleNamespace] = [SimpleNamespace(**a) for a in assignments or []]
        self.logs: Dict[int, Dict[str, Any]] = {}
        self.subjects: List[str] = []

    def list_assignments(self, user_id: int) -> List[Any]:
        return [a for a in self.assignments if a.user_id == user_id]

    def create_assignment(self, data: Dict[str, Any]) -> Any:
        record = SimpleNamespace(id=len(self.assignments) + 1, **data)
        self.assignments.append(record)
        return record

    def create_upload_log(self, data: Dict[str, Any]) -> Any:
        log_id = len(self.logs) + 1
        self.logs[log_id] = dict(data, id=log_id)
        return SimpleNamespace(id=log_id)

    def update_upload_log(self, log_id: int, fields: Dict[str, Any]) -> None:
        self.logs[log_id].update(fields)

    def ensure_subject(self, name: str, teacher: Any = None) -> None:
        if name not in self.subjects:
            self.subjects.append(name)


class FakeRequest:
    def __init__(self, result: Any = None, error: Optional[Exception] = None):
        self.result = result
        self.error = error

    def execute(self) -> Any:
        if self.error is not None:
            raise self.error
        return self.result


class FakeEvents:
    """Stands in for service.events(); records every call."""

    def __init__(self, fail_with: Optional[Exception] = None):
        self.inserted: List[Dict[str, Any]] = []
        self.updated: List[Dict[str, Any]] = []
        self.deleted: List[str] = []
        self.fail_with = fail_with

    def insert(self, calendarId: str, body: Dict[str, Any]) -> FakeRequest:
        self.inserted.append(body)
        return FakeRequest({"id": f"evt-{len(self.inserted)}"}, self.fail_with)

    def update(self, calendarId: str, eventId: str, body: Dict[str, Any]) -> FakeRequest:
        self.updated.append(dict(body, id=eventId))
        return FakeRequest(body, self.fail_with)

    def delete(self, calendarId: str, eventId: str) -> FakeRequest:
        self.deleted.append(eventId)
        return FakeRequest(None, self.fail_with)


class FakeCalendarService:
    def __init__(self, fail_with: Optional[Exception] = None):
        self._events = FakeEvents(fail_with)

    def events(self) -> FakeEvents:
        return self._events

    def calendarList(self) -> Any:
        return SimpleNamespace(list=lambda: FakeRequest({"items": [{"id": "primary", "summary": "Me"}]}))
