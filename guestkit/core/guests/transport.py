"""Cookie transport for guest tokens.

Cookies cannot be written until a response exists, so issue/clear calls are
queued on the request state and flushed by ``apply`` from an after_request hook.
"""

from __future__ import annotations

from typing import Optional

from flask import Request, Response

from guestkit.core.request_state import get_request_state


class CookieTransport:
    def __init__(self, *, secure: bool = False, samesite: str = "Lax", httponly: bool = True) -> None:
        self.secure = secure
        self.samesite = samesite
        self.httponly = httponly

    def read(self, request: Request, name: str) -> Optional[str]:
        """Token attached earlier in this request wins over the client cookie."""
        state = get_request_state(request)
        attached = state.attached_tokens.get(name)
        if attached:
            return attached
        return request.cookies.get(name) or None

    def attach(self, request: Request, name: str, token: str) -> None:
        get_request_state(request).attached_tokens[name] = token

    def detach(self, request: Request, name: str) -> None:
        get_request_state(request).attached_tokens.pop(name, None)

    def issue(self, request: Request, name: str, token: str, duration_minutes: int) -> None:
        get_request_state(request).queued_cookies[name] = (token, duration_minutes)

    def clear(self, request: Request, name: str) -> None:
        get_request_state(request).queued_cookies[name] = None

    def apply(self, request: Request, response: Response) -> Response:
        state = get_request_state(request)
        for name, entry in state.queued_cookies.items():
            if entry is None:
                response.delete_cookie(
                    name, secure=self.secure, httponly=self.httponly, samesite=self.samesite
                )
                continue
            token, minutes = entry
            response.set_cookie(
                name,
                token,
                max_age=minutes * 60,
                secure=self.secure,
                httponly=self.httponly,
                samesite=self.samesite,
            )
        state.queued_cookies.clear()
        return response


__all__ = ["CookieTransport"]
