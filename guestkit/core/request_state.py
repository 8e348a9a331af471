"""Per-request scratch state shared by the auth context, guest manager and cookie transport."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from flask import Request, request as current_request
from werkzeug.local import LocalProxy

REQUEST_STATE_ENVIRON_KEY = "guestkit.request_state"


@dataclass
class RequestState:
    """Lives in the WSGI environ of one request and dies with it.

    attached_tokens: tokens minted during this request, keyed by cookie name.
    guests: resolved guest identities, keyed by token.
    queued_cookies: cookie name -> (value, minutes), or None for a pending clear.
    principal: a principal authenticated during this request (login flows).
    """

    attached_tokens: Dict[str, str] = field(default_factory=dict)
    guests: Dict[str, Any] = field(default_factory=dict)
    queued_cookies: Dict[str, Optional[Tuple[str, int]]] = field(default_factory=dict)
    principal: Any = None


def resolve_request(request: Optional[Request] = None) -> Request:
    """Return the given request or the one bound to the active request context.

    Proxies are unwrapped, so the result can be compared by identity.
    """
    if request is None:
        request = current_request
    if isinstance(request, LocalProxy):
        return request._get_current_object()  # type: ignore[attr-defined]
    return request


def get_request_state(request: Optional[Request] = None) -> RequestState:
    req = resolve_request(request)
    state = req.environ.get(REQUEST_STATE_ENVIRON_KEY)
    if state is None:
        state = RequestState()
        req.environ[REQUEST_STATE_ENVIRON_KEY] = state
    return state


def attach_principal(principal: Any, request: Optional[Request] = None) -> None:
    """Mark ``principal`` as authenticated for the rest of this request."""
    get_request_state(request).principal = principal


__all__ = [
    "REQUEST_STATE_ENVIRON_KEY",
    "RequestState",
    "attach_principal",
    "get_request_state",
    "resolve_request",
]
