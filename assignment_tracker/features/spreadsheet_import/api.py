"""
Per-feature API for spreadsheet import. Mounted at /api/components/spreadsheet_import/.
- POST /upload: multipart file (.xlsx, .xls, .csv) -> {assignments_created, errors?, message}
- GET /logs: upload history for the current user
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel, ConfigDict

from assignment_tracker.api.server import user_dependency

from .errors import UploadFatal
from .reader import ALLOWED_EXTENSIONS, file_extension
from .service import get_upload_logs


class ImportResponse(BaseModel):
    assignments_created: int
    errors: Optional[List[str]] = None
    message: str


class UploadLogResponse(BaseModel):
    """Pydantic view of UploadLog for API; serializes from ORM."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    filename: str
    status: str
    assignments_created: int = 0
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None


def display_errors(errors: List[str], limit: int) -> Optional[List[str]]:
    """Cap the error list shown to the user; None when there are no errors."""
    if not errors:
        return None
    if limit and len(errors) > limit:
        return errors[:limit] + [f"... and {len(errors) - limit} more"]
    return list(errors)


def get_router(tracker_app) -> Optional[APIRouter]:
    """Return router for this feature; mounted with prefix /api/components/spreadsheet_import."""
    router = APIRouter(tags=["Spreadsheet Import"])
    current_user_id = user_dependency(tracker_app)

    @router.post("/upload", response_model=ImportResponse)
    def upload(
        file: Optional[UploadFile] = File(default=None),
        user_id: int = Depends(current_user_id),
    ) -> ImportResponse:
        if file is None or not file.filename:
            raise HTTPException(status_code=400, detail="No file uploaded")
        if file_extension(file.filename) not in ALLOWED_EXTENSIONS:
            raise HTTPException(
                status_code=400,
                detail=f"File type not allowed: {file.filename}. Only Excel (.xlsx, .xls) and CSV files are accepted.",
            )
        cfg = tracker_app.import_config
        max_bytes = int(float(cfg.get("max_upload_mb", 10)) * 1024 * 1024)
        content = file.file.read()
        if len(content) > max_bytes:
            raise HTTPException(status_code=413, detail=f"File too large (limit {cfg.get('max_upload_mb', 10)} MB)")

        importer = tracker_app.make_importer()
        try:
            result = importer.import_file(user_id, file.filename, content)
        except UploadFatal as e:
            raise HTTPException(status_code=400, detail=f"Failed to process spreadsheet: {e}")
        return ImportResponse(
            assignments_created=result.assignments_created,
            errors=display_errors(result.errors, int(cfg.get("error_display_limit", 20))),
            message=result.message,
        )

    @router.get("/logs", response_model=List[UploadLogResponse])
    def logs(limit: Optional[int] = 50, user_id: int = Depends(current_user_id)) -> List[UploadLogResponse]:
        return [UploadLogResponse.model_validate(r) for r in get_upload_logs(user_id, limit=limit)]

    return router
