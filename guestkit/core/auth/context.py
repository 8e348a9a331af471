"""Auth context: answers "is there an authenticated principal on this request?"."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Protocol

from flask import Request, has_request_context, request as current_request
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from flask_login import current_user
from jwt.exceptions import PyJWTError

from guestkit.core.request_state import get_request_state, resolve_request

logger = logging.getLogger(__name__)

PrincipalLoader = Callable[[Any], Optional[Any]]


class AuthContext(Protocol):
    def current_principal(self, request: Optional[Request] = None) -> Optional[Any]: ...

    def load_principal(self, principal_id: Any) -> Optional[Any]: ...


def load_user(principal_id: Any) -> Optional[Any]:
    from guestkit.core.users.services import get_user  # local import to avoid cycle

    try:
        user_id = int(principal_id)
    except (TypeError, ValueError):
        return None
    return get_user(user_id)


def _is_active_request(request: Request) -> bool:
    return has_request_context() and request is current_request._get_current_object()


class _AttachedPrincipalMixin:
    """A principal attached to the request (e.g. right after login) wins over credentials.

    Credentials are read through Flask's request-bound proxies, so they are
    only consulted for the active request; any other request is anonymous.
    """

    principal_loader: PrincipalLoader

    def load_principal(self, principal_id: Any) -> Optional[Any]:
        if principal_id is None:
            return None
        return self.principal_loader(principal_id)

    def current_principal(self, request: Optional[Request] = None) -> Optional[Any]:
        req = resolve_request(request)
        state = get_request_state(req)
        if state.principal is not None:
            return state.principal
        if not _is_active_request(req):
            logger.debug("Not reading credentials of an inactive request")
            return None
        return self._principal_from_credentials()

    def _principal_from_credentials(self) -> Optional[Any]:
        raise NotImplementedError


class JWTAuthContext(_AttachedPrincipalMixin):
    """Bearer-token principals via flask_jwt_extended; a bad token counts as anonymous."""

    def __init__(self, principal_loader: Optional[PrincipalLoader] = None) -> None:
        self.principal_loader = principal_loader or load_user

    def _principal_from_credentials(self) -> Optional[Any]:
        try:
            verify_jwt_in_request(optional=True)
        except (JWTExtendedException, PyJWTError) as exc:
            logger.debug("Ignoring invalid bearer token: %s", exc)
            return None
        identity = get_jwt_identity()
        return self.load_principal(identity)


class LoginManagerAuthContext(_AttachedPrincipalMixin):
    """Session principals via flask_login's current_user."""

    def __init__(self, principal_loader: Optional[PrincipalLoader] = None) -> None:
        self.principal_loader = principal_loader or load_user

    def _principal_from_credentials(self) -> Optional[Any]:
        if current_user and current_user.is_authenticated:
            return current_user._get_current_object()
        return None


__all__ = [
    "AuthContext",
    "JWTAuthContext",
    "LoginManagerAuthContext",
    "load_user",
]
