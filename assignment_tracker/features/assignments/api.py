"""
Per-feature API for assignments. Mounted at /api/components/assignments/.
- / : list (filter by ?status= or ?subject=), create, bulk clear
- /upcoming, /stats, /export (CSV download)
- /{assignment_id}: read, update, delete
"""
from datetime import datetime
from io import StringIO
from typing import List, Literal, Optional

import pandas as pd
from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, ConfigDict, Field

from assignment_tracker.api.server import user_dependency
from assignment_tracker.core.models import to_naive_utc

from . import service

Priority = Literal["low", "medium", "high"]
Status = Literal["pending", "in-progress", "completed"]

NULLABLE_FIELDS = ("description", "teacher")
EXPORT_COLUMNS = ["title", "subject", "due_date", "priority", "status", "progress", "teacher", "description"]


class AssignmentResponse(BaseModel):
    """Pydantic view of Assignment for API; serializes from ORM."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    title: str
    description: Optional[str] = None
    subject: str
    due_date: datetime
    priority: str
    status: str
    progress: int = 0
    teacher: Optional[str] = None
    google_calendar_event_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AssignmentCreate(BaseModel):
    title: str = Field(min_length=1)
    subject: str = Field(min_length=1)
    due_date: datetime
    description: Optional[str] = None
    priority: Priority = "medium"
    status: Status = "pending"
    progress: int = Field(default=0, ge=0, le=100)
    teacher: Optional[str] = None


class AssignmentUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    subject: Optional[str] = Field(default=None, min_length=1)
    due_date: Optional[datetime] = None
    description: Optional[str] = None
    priority: Optional[Priority] = None
    status: Optional[Status] = None
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    teacher: Optional[str] = None


class StatsResponse(BaseModel):
    due_today: int
    this_week: int
    completed: int
    total_active: int


class ClearResponse(BaseModel):
    message: str
    deleted: int


def get_router(tracker_app) -> Optional[APIRouter]:
    """Return router for this feature; mounted with prefix /api/components/assignments."""
    router = APIRouter(tags=["Assignments"])
    current_user_id = user_dependency(tracker_app)

    @router.get("/", response_model=List[AssignmentResponse])
    def list_assignments(
        status: Optional[str] = None,
        subject: Optional[str] = None,
        user_id: int = Depends(current_user_id),
    ) -> List[AssignmentResponse]:
        records = service.list_assignments(user_id, status=status, subject=subject)
        return [AssignmentResponse.model_validate(r) for r in records]

    @router.post("/", response_model=AssignmentResponse, status_code=201)
    def create_assignment(body: AssignmentCreate, user_id: int = Depends(current_user_id)) -> AssignmentResponse:
        data = body.model_dump()
        data["due_date"] = to_naive_utc(body.due_date)
        record = service.create_assignment(user_id, data)
        return AssignmentResponse.model_validate(record)

    @router.delete("/", response_model=ClearResponse)
    def clear_assignments(user_id: int = Depends(current_user_id)) -> ClearResponse:
        deleted = service.clear_assignments(user_id)
        return ClearResponse(message="All assignments deleted successfully", deleted=deleted)

    @router.get("/upcoming", response_model=List[AssignmentResponse])
    def upcoming(limit: int = 10, user_id: int = Depends(current_user_id)) -> List[AssignmentResponse]:
        records = service.upcoming_assignments(user_id, limit=limit)
        return [AssignmentResponse.model_validate(r) for r in records]

    @router.get("/stats", response_model=StatsResponse)
    def stats(user_id: int = Depends(current_user_id)) -> StatsResponse:
        return StatsResponse(**service.assignment_stats(user_id))

    @router.get("/export")
    def export_csv(user_id: int = Depends(current_user_id)):
        """Download the user's assignments as CSV (same headers the importer reads)."""
        records = service.list_assignments(user_id)
        df = pd.DataFrame(
            [{c: getattr(r, c) for c in EXPORT_COLUMNS} for r in records],
            columns=EXPORT_COLUMNS,
        )
        df.columns = [c.replace("_", " ").title() for c in EXPORT_COLUMNS]
        buffer = StringIO()
        df.to_csv(buffer, index=False)
        buffer.seek(0)
        return StreamingResponse(
            buffer,
            media_type="text/csv",
            headers={"Content-Disposition": "attachment; filename=assignments.csv"},
        )

    @router.get("/{assignment_id}", response_model=AssignmentResponse)
    def get_assignment(assignment_id: int, user_id: int = Depends(current_user_id)) -> AssignmentResponse:
        record = service.get_assignment(user_id, assignment_id)
        if record is None:
            raise HTTPException(status_code=404, detail="Assignment not found")
        return AssignmentResponse.model_validate(record)

    @router.put("/{assignment_id}", response_model=AssignmentResponse)
    def update_assignment(
        assignment_id: int,
        body: AssignmentUpdate,
        user_id: int = Depends(current_user_id),
    ) -> AssignmentResponse:
        fields = {
            k: v for k, v in body.model_dump(exclude_unset=True).items()
            if v is not None or k in NULLABLE_FIELDS
        }
        if "due_date" in fields:
            fields["due_date"] = to_naive_utc(fields["due_date"])
        record = service.update_assignment(user_id, assignment_id, fields)
        if record is None:
            raise HTTPException(status_code=404, detail="Assignment not found")
        return AssignmentResponse.model_validate(record)

    @router.delete("/{assignment_id}", status_code=204)
    def delete_assignment(assignment_id: int, user_id: int = Depends(current_user_id)) -> Response:
        if not service.delete_assignment(user_id, assignment_id):
            raise HTTPException(status_code=404, detail="Assignment not found")
        return Response(status_code=204)

    return router
