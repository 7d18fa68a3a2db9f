"""
Spreadsheet import orchestrator.

One upload: UploadLog(processing) -> read rows -> per row:
map columns -> check required fields -> normalize due date -> coerce fields
-> duplicate check -> create. Row failures are collected as messages and never
stop the loop. The log ends completed (even with nothing created) or failed
when the file itself, or the run outside any row, breaks.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .column_mapper import map_columns
from .dates import SLASH_ORDERS, normalize_due_date
from .duplicates import DuplicateIndex
from .errors import DuplicateRow, ImportRowError, InvalidDate
from .fields import (
    clean_text,
    normalize_priority,
    normalize_progress,
    normalize_status,
    optional_text,
    require_fields,
)
from .reader import read_rows
from .storage import ImportStorage

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


@dataclass
class ImportResult:
    assignments_created: int = 0
    errors: List[str] = field(default_factory=list)
    upload_log_id: Optional[int] = None

    @property
    def message(self) -> str:
        if self.assignments_created > 0:
            return f"Successfully imported {self.assignments_created} assignments"
        return "No assignments were imported - check the errors below"


class SpreadsheetImporter:
    """Runs uploads for one store. slash_order: "MDY" (default) or "DMY"."""

    def __init__(self, storage: ImportStorage, slash_order: str = "MDY"):
        if slash_order not in SLASH_ORDERS:
            raise ValueError(f"slash_order must be one of {SLASH_ORDERS}, got {slash_order!r}")
        self.storage = storage
        self.slash_order = slash_order
        self.logger = logging.getLogger(self.__class__.__name__)

    def import_file(self, user_id: int, filename: str, content: bytes) -> ImportResult:
        """Import an uploaded spreadsheet. Raises UploadFatal if the file is unreadable."""
        return self._run(user_id, filename, lambda: read_rows(content, filename))

    def import_rows(self, user_id: int, rows: Iterable[Mapping[str, Any]], filename: str = "rows") -> ImportResult:
        """Import rows that were already converted from a sheet."""
        return self._run(user_id, filename, lambda: list(rows))

    def _run(self, user_id: int, filename: str, load_rows) -> ImportResult:
        upload_log = self.storage.create_upload_log(
            {"user_id": user_id, "filename": filename, "status": "processing"}
        )
        self.logger.info(f"Import started: {filename} (user {user_id}, upload log {upload_log.id})")
        try:
            rows = load_rows()
            result = self.process_rows(user_id, rows)
        except Exception as e:
            self.logger.exception(f"Import failed: {filename}")
            self.storage.update_upload_log(
                upload_log.id,
                {"status": "failed", "processed_at": _utc_now(), "error_message": str(e)},
            )
            raise
        result.upload_log_id = upload_log.id
        self.storage.update_upload_log(
            upload_log.id,
            {
                "status": "completed",
                "processed_at": _utc_now(),
                "assignments_created": result.assignments_created,
                "error_message": "; ".join(result.errors) if result.errors else None,
            },
        )
        self.logger.info(
            f"Import finished: {filename}: {result.assignments_created} created, {len(result.errors)} skipped"
        )
        return result

    def process_rows(self, user_id: int, rows: List[Mapping[str, Any]]) -> ImportResult:
        """Run every row in file order; one bad row never blocks the rest."""
        result = ImportResult()
        index = DuplicateIndex(self.storage.list_assignments(user_id))
        for number, row in enumerate(rows, start=1):
            try:
                data = self.build_assignment(user_id, row)
                if index.is_duplicate(data["title"], data["subject"], data["due_date"]):
                    raise DuplicateRow(data["title"], data["subject"])
                self.storage.ensure_subject(data["subject"], data.get("teacher"))
                self.storage.create_assignment(data)
            except DuplicateRow as e:
                self.logger.debug(f"Row {number}: {e}")
                result.errors.append(f"Row {number}: {e}")
                continue
            except ImportRowError as e:
                self.logger.debug(f"Row {number} skipped: {e}")
                result.errors.append(f"Row {number}: {e}")
                continue
            except Exception as e:
                self.logger.warning(f"Row {number} failed: {e}", exc_info=True)
                result.errors.append(f"Row {number}: Error processing assignment: {e}")
                continue
            index.add(data["title"], data["subject"], data["due_date"])
            result.assignments_created += 1
        return result

    def build_assignment(self, user_id: int, row: Mapping[str, Any]) -> Dict[str, Any]:
        """Normalize one raw row into assignment data. Raises ImportRowError subclasses."""
        mapped = map_columns(row)
        require_fields(mapped)
        title = clean_text(mapped.title)
        subject = clean_text(mapped.subject)
        try:
            due_date = normalize_due_date(mapped.due_date, self.slash_order)
        except InvalidDate:
            raise InvalidDate(mapped.due_date, title=title)
        return {
            "user_id": user_id,
            "title": title,
            "subject": subject,
            "description": clean_text(mapped.description),
            "due_date": due_date,
            "priority": normalize_priority(mapped.priority),
            "status": normalize_status(mapped.status),
            "progress": normalize_progress(mapped.progress),
            "teacher": optional_text(mapped.teacher),
        }
