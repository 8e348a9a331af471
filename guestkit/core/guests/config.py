"""Configuration for guest identity tracking."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

DEFAULT_COOKIE_NAME = "guest_token"
DEFAULT_COOKIE_MINUTES = 525600  # 1 year


@dataclass(frozen=True)
class GuestConfig:
    """Settings the guest manager needs from the embedding application."""

    cookie_name: str = DEFAULT_COOKIE_NAME
    cookie_minutes: int = DEFAULT_COOKIE_MINUTES
    store_ip: bool = False
    cookie_secure: bool = False
    cookie_samesite: str = "Lax"

    def __post_init__(self) -> None:
        if not (self.cookie_name or "").strip():
            raise ValueError("cookie_name_required")
        if self.cookie_minutes <= 0:
            raise ValueError("cookie_minutes_must_be_positive")

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "GuestConfig":
        """Build from a Flask config (or any mapping) using GUEST_* keys."""
        return cls(
            cookie_name=config.get("GUEST_COOKIE_NAME", DEFAULT_COOKIE_NAME),
            cookie_minutes=int(config.get("GUEST_COOKIE_MINUTES", DEFAULT_COOKIE_MINUTES)),
            store_ip=bool(config.get("GUEST_STORE_IP", False)),
            cookie_secure=bool(config.get("GUEST_COOKIE_SECURE", False)),
            cookie_samesite=config.get("GUEST_COOKIE_SAMESITE", "Lax"),
        )


__all__ = ["DEFAULT_COOKIE_MINUTES", "DEFAULT_COOKIE_NAME", "GuestConfig"]
