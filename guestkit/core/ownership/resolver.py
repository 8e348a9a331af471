"""Dual-owner (user or guest) assignment, scoping and migration for one resource model."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from flask import Request
from sqlalchemy.orm import Query
from sqlalchemy.sql.elements import ColumnElement

from guestkit.core.auth.context import AuthContext
from guestkit.core.guests.services import GuestIdentityManager, guest_manager
from guestkit.core.ownership.types import Owner, OwnerKind, OwnershipConfig
from guestkit.core.request_state import resolve_request
from guestkit.extensions import db

logger = logging.getLogger(__name__)


class OwnershipResolver:
    """Ownership operations for ``model``.

    Every write path sets one owner field and clears the other, so a resource
    never carries both a user and a guest reference.
    """

    def __init__(
        self,
        model: type,
        config: Optional[OwnershipConfig] = None,
        *,
        guests: Optional[GuestIdentityManager] = None,
        auth: Optional[AuthContext] = None,
    ) -> None:
        self.model = model
        self.config = config or OwnershipConfig()
        self.guests = guests or guest_manager
        self._auth = auth
        for field_name in (self.config.guest_foreign_key, self.config.principal_foreign_key):
            if not hasattr(model, field_name):
                raise ValueError(f"{model.__name__} has no owner field {field_name!r}")

    @property
    def auth(self) -> AuthContext:
        return self._auth or self.guests.auth

    @property
    def guest_column(self):
        return getattr(self.model, self.config.guest_foreign_key)

    @property
    def principal_column(self):
        return getattr(self.model, self.config.principal_foreign_key)

    # --- ownership values ---

    def ownership_values(self, request: Optional[Request] = None, *, commit: bool = True) -> dict[str, Any]:
        """Owner field values for the current request; creates a guest if needed.

        ``commit=False`` leaves a new or touched guest flushed but uncommitted.
        """
        req = resolve_request(request)
        principal = self.auth.current_principal(req)
        if principal is not None:
            return {
                self.config.principal_foreign_key: principal.id,
                self.config.guest_foreign_key: None,
            }
        guest = self.guests.get_or_create_guest(req, create_if_needed=True, commit=commit)
        return {
            self.config.principal_foreign_key: None,
            self.config.guest_foreign_key: guest.id,
        }

    def assign(self, resource: Any, request: Optional[Request] = None, persist: bool = True) -> bool:
        for field_name, value in self.ownership_values(request, commit=persist).items():
            setattr(resource, field_name, value)
        if persist:
            db.session.add(resource)
            db.session.commit()
        return True

    def unassign(self, resource: Any, persist: bool = True) -> bool:
        setattr(resource, self.config.principal_foreign_key, None)
        setattr(resource, self.config.guest_foreign_key, None)
        if persist:
            db.session.add(resource)
            db.session.commit()
        return True

    # --- queries ---

    def is_owned_by_current(self, resource: Any, request: Optional[Request] = None) -> bool:
        req = resolve_request(request)
        principal = self.auth.current_principal(req)
        if principal is not None:
            owner_id = getattr(resource, self.config.principal_foreign_key)
            return owner_id is not None and owner_id == principal.id
        # An anonymous caller without a guest identity owns nothing.
        guest = self.guests.get_guest(req, create_if_needed=False)
        if guest is None:
            return False
        guest_id = getattr(resource, self.config.guest_foreign_key)
        return guest_id is not None and guest_id == guest.id

    def predicate_for_current(self, request: Optional[Request] = None) -> ColumnElement[bool]:
        """Filter clause restricting ``model`` rows to the current owner."""
        req = resolve_request(request)
        principal = self.auth.current_principal(req)
        if principal is not None:
            return self.principal_column == principal.id
        guest = self.guests.get_or_create_guest(req, create_if_needed=True)
        return self.guest_column == guest.id

    def scope_for_current(self, query: Optional[Query] = None, request: Optional[Request] = None) -> Query:
        query = query if query is not None else db.session.query(self.model)
        return query.filter(self.predicate_for_current(request))

    def owner(self, resource: Any) -> Owner:
        principal_id = getattr(resource, self.config.principal_foreign_key)
        if principal_id is not None:
            principal = self.auth.load_principal(principal_id)
            return Owner(OwnerKind.PRINCIPAL, principal) if principal is not None else Owner.none()
        guest_id = getattr(resource, self.config.guest_foreign_key)
        if guest_id is not None:
            guest = self.guests.repository.find_by_id(guest_id)
            return Owner(OwnerKind.GUEST, guest) if guest is not None else Owner.none()
        return Owner.none()

    # --- migration ---

    def migrate_guest_to_principal(self, request: Optional[Request] = None) -> bool:
        """Hand every resource of the pre-login guest identity to the current principal.

        The guest identity is left in place; callers terminate it afterwards.
        """
        req = resolve_request(request)
        principal = self.auth.current_principal(req)
        if principal is None:
            return False
        # The token belongs to the anonymous session that preceded this login.
        guest = self.guests.get_guest(req, create_if_needed=False, ignore_authenticated=True)
        if guest is None:
            return False

        updated = (
            db.session.query(self.model)
            .filter(self.guest_column == guest.id)
            .update(
                {
                    self.config.principal_foreign_key: principal.id,
                    self.config.guest_foreign_key: None,
                },
                synchronize_session="fetch",
            )
        )
        db.session.commit()
        if updated:
            logger.info(
                "Migrated %d %s rows from guest %s to principal %s",
                updated,
                self.model.__tablename__,
                guest.id,
                principal.id,
            )
        return updated > 0

    # --- create helpers ---

    def create_with_ownership(self, data: Mapping[str, Any], request: Optional[Request] = None) -> Any:
        resource = self.model(**{**data, **self.ownership_values(request)})
        db.session.add(resource)
        db.session.commit()
        return resource

    def update_or_create_with_ownership(
        self,
        attributes: Mapping[str, Any],
        values: Optional[Mapping[str, Any]] = None,
        request: Optional[Request] = None,
    ) -> Any:
        """Upsert keyed on ``attributes`` plus the current owner."""
        ownership = self.ownership_values(request)
        lookup = {**attributes, **ownership}
        resource = db.session.query(self.model).filter_by(**lookup).first()
        if resource is None:
            resource = self.model(**{**lookup, **(values or {}), **ownership})
            db.session.add(resource)
        else:
            for field_name, value in {**(values or {}), **ownership}.items():
                setattr(resource, field_name, value)
        db.session.commit()
        return resource


__all__ = ["OwnershipResolver"]
