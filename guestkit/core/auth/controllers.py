"""Auth HTTP controllers (API only)."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from pydantic import ValidationError

from guestkit.core.auth.auth_service import login
from guestkit.core.guests.services import guest_manager
from guestkit.core.users.schemas import LoginRequest, UserCreateRequest, serialize_user
from guestkit.core.users.services import create_user
from guestkit.extensions import limiter

auth_bp = Blueprint("auth_api", __name__)


def _jsonable_errors(exc: ValidationError) -> list[dict]:
    errors = exc.errors()
    for err in errors:
        if "ctx" in err and isinstance(err["ctx"], dict):
            err["ctx"] = {k: str(v) for k, v in err["ctx"].items()}
    return errors


@auth_bp.post("/register")
@limiter.limit("5/minute")
def register():
    payload = request.get_json(silent=True) or {}
    try:
        data = UserCreateRequest.model_validate(payload)
    except ValidationError as exc:
        return jsonify({"ok": False, "error": "bad_request", "details": _jsonable_errors(exc)}), 400
    try:
        user = create_user(data)
    except ValueError as exc:
        return jsonify({"ok": False, "error": str(exc)}), 400
    return jsonify({"ok": True, "user": serialize_user(user).model_dump()}), 201


@auth_bp.post("/login")
@limiter.limit("10/minute")
def login_route():
    payload = request.get_json(silent=True) or {}
    try:
        data = LoginRequest.model_validate(payload)
    except ValidationError as exc:
        return jsonify({"ok": False, "error": "bad_request", "details": _jsonable_errors(exc)}), 400
    result = login(data.email, data.password)
    if result is None:
        return jsonify({"ok": False, "error": "invalid_credentials"}), 401
    user = result.pop("user")
    return jsonify({"ok": True, **result, "user": serialize_user(user).model_dump()})


@auth_bp.get("/me")
def me():
    user = guest_manager.auth.current_principal(request)
    if user is None:
        return jsonify({"ok": False, "error": "unauthorized"}), 401
    return jsonify({"ok": True, "user": serialize_user(user).model_dump()})

