"""Guest identity lifecycle: lookup, creation, renewal, termination and reclamation."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Optional

from flask import Flask, Request, Response

from guestkit.core.auth.context import AuthContext, JWTAuthContext
from guestkit.core.guests.config import GuestConfig
from guestkit.core.guests.models import GuestIdentity
from guestkit.core.guests.repository import GuestRepository
from guestkit.core.guests.transport import CookieTransport
from guestkit.core.request_state import get_request_state, resolve_request

logger = logging.getLogger(__name__)


class GuestIdentityManager:
    """Maps an opaque cookie token to a durable GuestIdentity.

    Resolved identities are memoized on the request state, so every caller in
    one request (ownership checks, assignment, scoping) sees the same identity,
    including one minted earlier in the same request.

    Usable as a Flask extension: construct without a config and call
    ``init_app`` to read GUEST_* settings and register the cookie flush hook.
    """

    def __init__(
        self,
        config: Optional[GuestConfig] = None,
        *,
        auth: Optional[AuthContext] = None,
        transport: Optional[CookieTransport] = None,
        repository: Optional[GuestRepository] = None,
        app: Optional[Flask] = None,
    ) -> None:
        self._explicit_config = config is not None
        self.config = config or GuestConfig()
        self.auth: AuthContext = auth or JWTAuthContext()
        self._explicit_transport = transport is not None
        self.transport = transport or self._build_transport(self.config)
        self.repository = repository or GuestRepository()
        if app is not None:
            self.init_app(app)

    @staticmethod
    def _build_transport(config: GuestConfig) -> CookieTransport:
        return CookieTransport(secure=config.cookie_secure, samesite=config.cookie_samesite)

    @property
    def model(self) -> type:
        return self.repository.model

    def init_app(self, app: Flask) -> None:
        if not self._explicit_config:
            self.config = GuestConfig.from_mapping(app.config)
            if not self._explicit_transport:
                self.transport = self._build_transport(self.config)
        app.extensions["guest_manager"] = self

        @app.after_request
        def _flush_guest_cookies(response: Response) -> Response:
            from flask import request

            return self.transport.apply(request, response)

    # --- resolution ---

    def resolve_principal_or_guest(
        self, request: Optional[Request] = None, create_if_needed: bool = True
    ) -> Optional[Any]:
        """Return the authenticated principal, else the guest identity (maybe created)."""
        req = resolve_request(request)
        principal = self.auth.current_principal(req)
        if principal is not None:
            return principal
        return self.get_or_create_guest(req, create_if_needed)

    def get_or_create_guest(
        self, request: Optional[Request] = None, create_if_needed: bool = True, *, commit: bool = True
    ) -> Optional[GuestIdentity]:
        """Resolve the request's guest identity, creating one if allowed.

        With ``commit=False`` the creation or touch is flushed into the current
        transaction and persists only when the caller commits.
        """
        req = resolve_request(request)
        state = get_request_state(req)
        cookie_name = self.config.cookie_name
        token = self.transport.read(req, cookie_name)

        if token and token in state.guests:
            return state.guests[token]

        guest = self.repository.find_by_token(token) if token else None

        if guest is None:
            if not create_if_needed:
                return None
            guest = self.repository.create(ip_address=self._client_ip(req), commit=commit)
            self.transport.attach(req, cookie_name, guest.token)
            logger.info("Created guest identity %s", guest.id)
        else:
            ip_address = None
            client_ip = self._client_ip(req)
            if client_ip and guest.ip_address != client_ip:
                ip_address = client_ip
            self.repository.touch(guest, ip_address=ip_address, commit=commit)

        # Sliding expiration: every resolution renews the cookie.
        self.transport.issue(req, cookie_name, guest.token, self.config.cookie_minutes)
        state.guests[guest.token] = guest
        return guest

    def get_guest(
        self,
        request: Optional[Request] = None,
        create_if_needed: bool = True,
        ignore_authenticated: bool = False,
    ) -> Optional[GuestIdentity]:
        """Like get_or_create_guest, but None for authenticated requests unless told otherwise."""
        req = resolve_request(request)
        if not ignore_authenticated and not self.is_anonymous(req):
            return None
        return self.get_or_create_guest(req, create_if_needed)

    def is_anonymous(self, request: Optional[Request] = None) -> bool:
        return self.auth.current_principal(resolve_request(request)) is None

    # --- teardown ---

    def terminate(self, request: Optional[Request] = None) -> bool:
        """Delete the request's guest identity and clear its cookie."""
        req = resolve_request(request)
        cookie_name = self.config.cookie_name
        token = self.transport.read(req, cookie_name)
        if not token:
            return False
        guest = self.repository.find_by_token(token)
        if guest is None:
            return False

        guest_id = guest.id
        self.repository.delete(guest)
        get_request_state(req).guests.pop(token, None)
        self.transport.detach(req, cookie_name)
        self.transport.clear(req, cookie_name)
        logger.info("Terminated guest identity %s", guest_id)
        return True

    def reclaim(self, stale_after_minutes: Optional[int] = None, now: Optional[datetime] = None) -> int:
        """Delete guest identities not seen for longer than the threshold.

        Defaults to the cookie lifetime: past it the client no longer holds the
        token anyway. Rows exactly at the cutoff survive.
        """
        minutes = self.config.cookie_minutes if stale_after_minutes is None else stale_after_minutes
        if minutes < 0:
            raise ValueError("stale_after_minutes_must_be_non_negative")
        cutoff = (now or datetime.utcnow()) - timedelta(minutes=minutes)
        deleted = self.repository.delete_seen_before(cutoff)
        logger.info("Reclaimed %d guest identities last seen before %s", deleted, cutoff.isoformat())
        return deleted

    # --- helpers ---

    def _client_ip(self, request: Request) -> Optional[str]:
        if not self.config.store_ip:
            return None
        return request.remote_addr or None


# Shared instance bound to the app in init_extensions
guest_manager = GuestIdentityManager()


__all__ = ["GuestIdentityManager", "guest_manager"]
