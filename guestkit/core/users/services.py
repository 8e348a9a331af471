"""User service layer."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import func

from guestkit.core.auth.password import hash_password
from guestkit.core.users.models import User
from guestkit.core.users.schemas import UserCreateRequest
from guestkit.extensions import db


def get_user(user_id: int) -> Optional[User]:
    return db.session.get(User, user_id)


def find_user_by_email(email: str) -> Optional[User]:
    normalized = (email or "").strip().lower()
    return User.query.filter(func.lower(User.email) == normalized).first()


def create_user(payload: UserCreateRequest) -> User:
    normalized_email = payload.email.strip().lower()
    if find_user_by_email(normalized_email):
        raise ValueError("email_already_exists")
    user = User(
        email=normalized_email,
        full_name=payload.full_name,
        password_hash=hash_password(payload.password),
    )
    db.session.add(user)
    db.session.commit()
    return user
