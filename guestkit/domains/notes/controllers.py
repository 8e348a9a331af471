"""Notes JSON API. Works for signed-in users and anonymous guests alike."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from pydantic import ValidationError

from guestkit.domains.notes import services as note_service
from guestkit.domains.notes.mappers import map_note
from guestkit.domains.notes.schemas import NoteCreate, NoteUpdate, NoteUpsert

notes_api_bp = Blueprint("notes_api", __name__)


@notes_api_bp.get("")
def list_notes():
    notes = note_service.list_notes(request)
    return jsonify({"ok": True, "items": [map_note(n) for n in notes], "total": len(notes)})


@notes_api_bp.post("")
def create_note():
    payload = request.get_json(silent=True) or {}
    try:
        data = NoteCreate.model_validate(payload)
    except ValidationError as exc:
        return jsonify({"ok": False, "error": "validation_error", "details": exc.errors()}), 400
    try:
        note = note_service.create_note(title=data.title, body=data.body, slug=data.slug, request=request)
    except ValueError:
        return jsonify({"ok": False, "error": "validation_error"}), 400
    return jsonify({"ok": True, "note": map_note(note)}), 201


@notes_api_bp.put("/by-slug/<slug>")
def upsert_note(slug: str):
    payload = request.get_json(silent=True) or {}
    try:
        data = NoteUpsert.model_validate(payload)
    except ValidationError as exc:
        return jsonify({"ok": False, "error": "validation_error", "details": exc.errors()}), 400
    try:
        note = note_service.upsert_note(slug, title=data.title, body=data.body, request=request)
    except ValueError:
        return jsonify({"ok": False, "error": "validation_error"}), 400
    return jsonify({"ok": True, "note": map_note(note)})


@notes_api_bp.get("/<int:note_id>")
def get_note(note_id: int):
    note = note_service.get_note(note_id, request)
    if not note:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True, "note": map_note(note)})


@notes_api_bp.patch("/<int:note_id>")
def update_note(note_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        data = NoteUpdate.model_validate(payload)
    except ValidationError as exc:
        return jsonify({"ok": False, "error": "validation_error", "details": exc.errors()}), 400
    note = note_service.update_note(note_id, request, **data.model_dump(exclude_unset=True))
    if not note:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True, "note": map_note(note)})


@notes_api_bp.delete("/<int:note_id>")
def delete_note(note_id: int):
    if not note_service.delete_note(note_id, request):
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True})


@notes_api_bp.post("/<int:note_id>/release")
def release_note(note_id: int):
    note = note_service.release_note(note_id, request)
    if not note:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True, "note": map_note(note)})


@notes_api_bp.get("/<int:note_id>/owner")
def get_note_owner(note_id: int):
    note = note_service.get_note(note_id, request)
    if not note:
        return jsonify({"ok": False, "error": "not_found"}), 404
    owner = note_service.note_owner(note)
    if owner.is_principal:
        return jsonify({"ok": True, "kind": "user", "user_id": owner.record.id})
    if owner.is_guest:
        return jsonify({"ok": True, "kind": "guest", "guest_id": owner.record.id})
    return jsonify({"ok": True, "kind": "none"})
