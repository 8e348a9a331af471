"""Authentication service layer."""

from __future__ import annotations

import logging
from typing import Optional

from flask import Request
from flask_jwt_extended import create_access_token

from guestkit.core.auth.password import verify_password
from guestkit.core.ownership.registry import claim_guest_resources
from guestkit.core.request_state import attach_principal, resolve_request
from guestkit.core.users.models import User
from guestkit.core.users.services import find_user_by_email

logger = logging.getLogger(__name__)


def authenticate_user(email: str, password: str) -> Optional[User]:
    """Return the user if credentials are valid."""
    user = find_user_by_email(email)
    if not user or not user.is_active:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def issue_tokens(user: User) -> dict[str, str]:
    return {"access_token": create_access_token(identity=str(user.id))}


def login(email: str, password: str, request: Optional[Request] = None) -> Optional[dict]:
    """Authenticate, hand the visitor's guest resources to the user, and issue tokens.

    Returns None on bad credentials.
    """
    req = resolve_request(request)
    user = authenticate_user(email, password)
    if not user:
        return None
    attach_principal(user, req)
    claimed = claim_guest_resources(req)
    if claimed:
        logger.info("User %s claimed guest resources on login", user.id)
    return {"user": user, "claimed_guest_resources": claimed, **issue_tokens(user)}


__all__ = ["authenticate_user", "issue_tokens", "login"]
