"""
Persistence interface used by the importer, and its SQLAlchemy implementation.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List

from assignment_tracker.features.assignments import service as assignment_service
from assignment_tracker.features.subjects import service as subject_service

from . import service as upload_service


class ImportStorage(ABC):
    """What the importer needs from the store."""

    @abstractmethod
    def list_assignments(self, user_id: int) -> List[Any]:
        """All assignments of user_id (objects with title, subject, due_date)."""

    @abstractmethod
    def create_assignment(self, data: Dict[str, Any]) -> Any:
        """Persist one assignment; data carries user_id."""

    @abstractmethod
    def create_upload_log(self, data: Dict[str, Any]) -> Any:
        """Create an UploadLog; returned object has an id."""

    @abstractmethod
    def update_upload_log(self, log_id: int, fields: Dict[str, Any]) -> None:
        pass

    def ensure_subject(self, name: str, teacher: Any = None) -> None:
        """Create the subject if missing. Optional for stores without subjects."""


class SqlImportStorage(ImportStorage):
    """ImportStorage over the service layer (session_scope per call)."""

    def list_assignments(self, user_id: int) -> List[Any]:
        return assignment_service.list_assignments(user_id)

    def create_assignment(self, data: Dict[str, Any]) -> Any:
        fields = dict(data)
        user_id = fields.pop("user_id")
        return assignment_service.create_assignment(user_id, fields)

    def create_upload_log(self, data: Dict[str, Any]) -> Any:
        return upload_service.create_upload_log(data)

    def update_upload_log(self, log_id: int, fields: Dict[str, Any]) -> None:
        upload_service.update_upload_log(log_id, fields)

    def ensure_subject(self, name: str, teacher: Any = None) -> None:
        subject_service.ensure_subject(name, teacher=teacher)
