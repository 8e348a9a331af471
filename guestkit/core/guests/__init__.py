"""Guest identities: anonymous visitors tracked by a cookie token."""

from guestkit.core.guests.config import GuestConfig
from guestkit.core.guests.models import GuestIdentity
from guestkit.core.guests.services import GuestIdentityManager, guest_manager
from guestkit.core.guests.transport import CookieTransport

__all__ = [
    "CookieTransport",
    "GuestConfig",
    "GuestIdentity",
    "GuestIdentityManager",
    "guest_manager",
]
