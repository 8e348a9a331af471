"""Notes: a small resource owned by a user or a guest."""

from __future__ import annotations

from sqlalchemy.orm import Mapped, mapped_column

from guestkit.core.models import TimestampMixin
from guestkit.core.ownership.mixins import UserOrGuestOwnedMixin
from guestkit.extensions import db


class Note(db.Model, UserOrGuestOwnedMixin, TimestampMixin):
    __tablename__ = "note"
    __table_args__ = (
        db.CheckConstraint(
            "user_id IS NULL OR guest_id IS NULL", name="ck_note_single_owner"
        ),
        db.Index("ix_note_user_slug", "user_id", "slug"),
        db.Index("ix_note_guest_slug", "guest_id", "slug"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    slug: Mapped[str | None] = mapped_column(db.String(128))
    title: Mapped[str] = mapped_column(db.String(255), nullable=False)
    body: Mapped[str] = mapped_column(db.Text, nullable=False, default="")
