"""Identity endpoints: who is this request, and ending a guest session."""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from guestkit.core.guests.models import GuestIdentity
from guestkit.core.guests.services import guest_manager

identity_api_bp = Blueprint("identity_api", __name__)


def map_guest(guest: GuestIdentity) -> dict:
    return {
        "id": guest.id,
        "last_seen_at": guest.last_seen_at.isoformat() if guest.last_seen_at else None,
        "created_at": guest.created_at.isoformat() if guest.created_at else None,
    }


@identity_api_bp.get("")
def current_identity():
    owner = guest_manager.resolve_principal_or_guest(request)
    if isinstance(owner, GuestIdentity):
        return jsonify({"ok": True, "kind": "guest", "guest": map_guest(owner)})
    return jsonify({"ok": True, "kind": "user", "user_id": owner.id})


@identity_api_bp.delete("/guest")
def end_guest_session():
    deleted = guest_manager.terminate(request)
    return jsonify({"ok": True, "deleted": deleted})
