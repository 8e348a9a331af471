"""Resources owned by either an authenticated user or a guest identity."""

from guestkit.core.ownership.mixins import UserOrGuestOwnedMixin
from guestkit.core.ownership.registry import (
    OwnershipRegistry,
    claim_guest_resources,
    ownership_registry,
)
from guestkit.core.ownership.resolver import OwnershipResolver
from guestkit.core.ownership.types import Owner, OwnerKind, OwnershipConfig

__all__ = [
    "Owner",
    "OwnerKind",
    "OwnershipConfig",
    "OwnershipRegistry",
    "OwnershipResolver",
    "UserOrGuestOwnedMixin",
    "claim_guest_resources",
    "ownership_registry",
]
