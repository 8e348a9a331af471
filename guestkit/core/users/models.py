"""User model (the authenticated principal)."""

from __future__ import annotations

from flask_login import UserMixin
from sqlalchemy.orm import Mapped, mapped_column

from guestkit.core.models import TimestampMixin
from guestkit.extensions import db


class User(db.Model, TimestampMixin, UserMixin):
    __tablename__ = "user"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(db.String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(db.String(255), nullable=False)
    full_name: Mapped[str | None] = mapped_column(db.String(255))
    is_active: Mapped[bool] = mapped_column(default=True)
