"""
Service layer: users. The tracker has no ambient current user; callers pass user ids.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy import select

from assignment_tracker.core.db import session_scope
from assignment_tracker.core.models import User


def list_users() -> List[User]:
    with session_scope() as session:
        return list(session.execute(select(User).order_by(User.id)).scalars().all())


def get_user(user_id: int) -> Optional[User]:
    with session_scope() as session:
        return session.get(User, user_id)


def get_user_by_name(name: str) -> Optional[User]:
    with session_scope() as session:
        return session.execute(select(User).where(User.name == name)).scalars().first()


def create_user(data: Dict[str, Any]) -> User:
    user = User(
        name=data["name"],
        email=data.get("email"),
        avatar=data.get("avatar"),
        google_id=data.get("google_id"),
    )
    with session_scope() as session:
        session.add(user)
        session.flush()
    return user


def get_or_create_user(name: str) -> User:
    return get_user_by_name(name) or create_user({"name": name})
