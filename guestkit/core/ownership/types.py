"""Ownership value types."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Optional

DEFAULT_GUEST_FOREIGN_KEY = "guest_id"
DEFAULT_PRINCIPAL_FOREIGN_KEY = "user_id"


class OwnerKind(str, enum.Enum):
    PRINCIPAL = "principal"
    GUEST = "guest"
    NONE = "none"


@dataclass(frozen=True)
class Owner:
    """Who owns a resource; ``record`` is None only when kind is NONE."""

    kind: OwnerKind
    record: Optional[Any] = None

    @classmethod
    def none(cls) -> "Owner":
        return cls(OwnerKind.NONE)

    @property
    def is_principal(self) -> bool:
        return self.kind is OwnerKind.PRINCIPAL

    @property
    def is_guest(self) -> bool:
        return self.kind is OwnerKind.GUEST

    def __bool__(self) -> bool:
        return self.kind is not OwnerKind.NONE


@dataclass(frozen=True)
class OwnershipConfig:
    """Per-resource-type field names for the two owner references."""

    guest_foreign_key: str = DEFAULT_GUEST_FOREIGN_KEY
    principal_foreign_key: str = DEFAULT_PRINCIPAL_FOREIGN_KEY

    def __post_init__(self) -> None:
        if not self.guest_foreign_key or not self.principal_foreign_key:
            raise ValueError("foreign_key_required")
        if self.guest_foreign_key == self.principal_foreign_key:
            raise ValueError("foreign_keys_must_differ")


__all__ = [
    "DEFAULT_GUEST_FOREIGN_KEY",
    "DEFAULT_PRINCIPAL_FOREIGN_KEY",
    "Owner",
    "OwnerKind",
    "OwnershipConfig",
]
