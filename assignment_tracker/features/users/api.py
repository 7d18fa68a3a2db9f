"""
Per-feature API for users. Mounted at /api/components/users/.
/current resolves the X-User-Id header (or the configured default user).
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from assignment_tracker.api.server import user_dependency

from . import service


class UserResponse(BaseModel):
    """Pydantic view of User for API; serializes from ORM."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: Optional[str] = None
    avatar: Optional[str] = None
    created_at: Optional[datetime] = None


class UserCreate(BaseModel):
    name: str = Field(min_length=1)
    email: Optional[str] = None
    avatar: Optional[str] = None


def get_router(tracker_app) -> Optional[APIRouter]:
    """Return router for this feature; mounted with prefix /api/components/users."""
    router = APIRouter(tags=["Users"])
    current_user_id = user_dependency(tracker_app)

    @router.get("/", response_model=List[UserResponse])
    def list_users() -> List[UserResponse]:
        return [UserResponse.model_validate(u) for u in service.list_users()]

    @router.post("/", response_model=UserResponse, status_code=201)
    def create_user(body: UserCreate) -> UserResponse:
        name = body.name.strip()
        if service.get_user_by_name(name) is not None:
            raise HTTPException(status_code=409, detail=f"User {name} already exists")
        record = service.create_user({"name": name, "email": body.email, "avatar": body.avatar})
        return UserResponse.model_validate(record)

    @router.get("/current", response_model=UserResponse)
    def current_user(user_id: int = Depends(current_user_id)) -> UserResponse:
        return UserResponse.model_validate(service.get_user(user_id))

    return router
