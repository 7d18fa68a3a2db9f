"""
Per-feature API for subjects. Mounted at /api/components/subjects/.
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Response
from pydantic import BaseModel, ConfigDict, Field

from . import service

HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"


class SubjectResponse(BaseModel):
    """Pydantic view of Subject for API; serializes from ORM."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    color: str
    teacher: Optional[str] = None
    created_at: Optional[datetime] = None


class SubjectCreate(BaseModel):
    name: str = Field(min_length=1)
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    teacher: Optional[str] = None


class SubjectUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    teacher: Optional[str] = None


def get_router(tracker_app) -> Optional[APIRouter]:
    """Return router for this feature; mounted with prefix /api/components/subjects."""
    router = APIRouter(tags=["Subjects"])

    @router.get("/", response_model=List[SubjectResponse])
    def list_subjects() -> List[SubjectResponse]:
        return [SubjectResponse.model_validate(s) for s in service.list_subjects()]

    @router.post("/", response_model=SubjectResponse, status_code=201)
    def create_subject(body: SubjectCreate) -> SubjectResponse:
        name = body.name.strip()
        if service.get_subject_by_name(name) is not None:
            raise HTTPException(status_code=409, detail=f"Subject {name} already exists")
        record = service.create_subject({"name": name, "color": body.color, "teacher": body.teacher})
        return SubjectResponse.model_validate(record)

    @router.put("/{subject_id}", response_model=SubjectResponse)
    def update_subject(subject_id: int, body: SubjectUpdate) -> SubjectResponse:
        fields = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None or k == "teacher"}
        if "name" in fields:
            other = service.get_subject_by_name(fields["name"])
            if other is not None and other.id != subject_id:
                raise HTTPException(status_code=409, detail=f"Subject {fields['name']} already exists")
        record = service.update_subject(subject_id, fields)
        if record is None:
            raise HTTPException(status_code=404, detail="Subject not found")
        return SubjectResponse.model_validate(record)

    @router.delete("/{subject_id}", status_code=204)
    def delete_subject(subject_id: int) -> Response:
        if not service.delete_subject(subject_id):
            raise HTTPException(status_code=404, detail="Subject not found")
        return Response(status_code=204)

    return router
