"""Column mixin for models owned by a user or a guest identity."""

from __future__ import annotations

from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from guestkit.extensions import db


class UserOrGuestOwnedMixin:
    """Declares ``user_id`` and ``guest_id`` (the default owner field names).

    Models with other field names declare their own columns and pass an
    OwnershipConfig to their resolver.
    """

    @declared_attr
    def user_id(cls) -> Mapped[int | None]:
        return mapped_column(db.ForeignKey("user.id", ondelete="CASCADE"), index=True, nullable=True)

    @declared_attr
    def guest_id(cls) -> Mapped[int | None]:
        return mapped_column(
            db.ForeignKey("guest_identity.id", ondelete="SET NULL"), index=True, nullable=True
        )


__all__ = ["UserOrGuestOwnedMixin"]
