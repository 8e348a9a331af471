"""Guest identity model (anonymous visitor tracked by a cookie token)."""

from __future__ import annotations

import secrets
from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column

from guestkit.core.models import TimestampMixin
from guestkit.extensions import db


def generate_guest_token() -> str:
    return secrets.token_hex(32)


class GuestIdentity(db.Model, TimestampMixin):
    __tablename__ = "guest_identity"
    __table_args__ = (
        db.UniqueConstraint("token", name="uq_guest_identity_token"),
        db.Index("ix_guest_identity_last_seen_at", "last_seen_at"),
        # Deleted ids must never be handed to a new guest: owned rows may still reference them.
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    token: Mapped[str] = mapped_column(db.String(128), nullable=False, default=generate_guest_token)
    last_seen_at: Mapped[datetime] = mapped_column(nullable=False, default=datetime.utcnow)
    ip_address: Mapped[str | None] = mapped_column(db.String(45), nullable=True)

    def __repr__(self) -> str:
        return f"<GuestIdentity id={self.id} last_seen_at={self.last_seen_at}>"
