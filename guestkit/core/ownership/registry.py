"""Registry of ownership resolvers, used to claim guest resources at login."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional

from flask import Request

from guestkit.core.guests.services import GuestIdentityManager, guest_manager
from guestkit.core.ownership.resolver import OwnershipResolver
from guestkit.core.request_state import resolve_request

logger = logging.getLogger(__name__)


class OwnershipRegistry:
    def __init__(self) -> None:
        self._resolvers: Dict[str, OwnershipResolver] = {}

    def register(self, resolver: OwnershipResolver) -> OwnershipResolver:
        self._resolvers[resolver.model.__tablename__] = resolver
        return resolver

    def get(self, table_name: str) -> Optional[OwnershipResolver]:
        return self._resolvers.get(table_name)

    def list(self) -> Iterable[OwnershipResolver]:
        return list(self._resolvers.values())


def claim_guest_resources(
    request: Optional[Request] = None,
    *,
    resolvers: Optional[Iterable[OwnershipResolver]] = None,
    guests: Optional[GuestIdentityManager] = None,
) -> bool:
    """Migrate every registered resource type from the guest to the principal, then end the guest.

    Requires a principal on the request; returns whether any row moved.
    """
    req = resolve_request(request)
    manager = guests or guest_manager
    if manager.is_anonymous(req):
        return False
    moved = False
    for resolver in resolvers if resolvers is not None else ownership_registry.list():
        moved = resolver.migrate_guest_to_principal(req) or moved
    manager.terminate(req)
    return moved


# Global singleton
ownership_registry = OwnershipRegistry()


__all__ = ["OwnershipRegistry", "claim_guest_resources", "ownership_registry"]
