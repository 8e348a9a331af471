"""Persistence for guest identities."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError

from guestkit.core.guests.models import GuestIdentity, generate_guest_token
from guestkit.extensions import db


class GuestRepository:
    """Thin wrapper over the ORM.

    Writes commit by default. With ``commit=False`` they are only flushed, so they
    join the caller's open transaction and share its fate.
    """

    def __init__(self, model: type = GuestIdentity, session=None):
        self.model = model
        self._session = session

    @property
    def session(self):
        return self._session if self._session is not None else db.session

    def find_by_token(self, token: str) -> Optional[GuestIdentity]:
        return self.session.query(self.model).filter(self.model.token == token).first()

    def find_by_id(self, guest_id: int) -> Optional[GuestIdentity]:
        return self.session.get(self.model, guest_id)

    def create(self, *, ip_address: Optional[str] = None, commit: bool = True) -> GuestIdentity:
        guest = self.model(
            token=generate_guest_token(), last_seen_at=datetime.utcnow(), ip_address=ip_address
        )
        self.session.add(guest)
        try:
            self._save(commit)
        except IntegrityError:
            self.session.rollback()
            raise
        return guest

    def touch(
        self, guest: GuestIdentity, *, ip_address: Optional[str] = None, commit: bool = True
    ) -> GuestIdentity:
        guest.last_seen_at = datetime.utcnow()
        if ip_address is not None:
            guest.ip_address = ip_address
        self._save(commit)
        return guest

    def delete(self, guest: GuestIdentity) -> None:
        self.session.delete(guest)
        self.session.commit()

    def delete_seen_before(self, cutoff: datetime) -> int:
        deleted = (
            self.session.query(self.model)
            .filter(self.model.last_seen_at < cutoff)
            .delete(synchronize_session="fetch")
        )
        self.session.commit()
        return deleted

    def _save(self, commit: bool) -> None:
        if commit:
            self.session.commit()
        else:
            self.session.flush()


__all__ = ["GuestRepository"]
