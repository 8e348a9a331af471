"""Note services: CRUD scoped to whoever owns the request (user or guest)."""

from __future__ import annotations

from typing import List, Optional

from flask import Request

from guestkit.core.ownership.registry import ownership_registry
from guestkit.core.ownership.resolver import OwnershipResolver
from guestkit.core.ownership.types import Owner
from guestkit.domains.notes.models import Note
from guestkit.extensions import db

note_ownership = ownership_registry.register(OwnershipResolver(Note))


def list_notes(request: Optional[Request] = None) -> List[Note]:
    query = note_ownership.scope_for_current(Note.query, request)
    return query.order_by(Note.created_at.desc(), Note.id.desc()).all()


def create_note(
    *, title: str, body: str = "", slug: Optional[str] = None, request: Optional[Request] = None
) -> Note:
    title_norm = (title or "").strip()
    if not title_norm:
        raise ValueError("validation_error")
    return note_ownership.create_with_ownership(
        {"title": title_norm, "body": body or "", "slug": (slug or "").strip() or None},
        request,
    )


def upsert_note(slug: str, *, title: str, body: str = "", request: Optional[Request] = None) -> Note:
    slug_norm = (slug or "").strip()
    if not slug_norm:
        raise ValueError("validation_error")
    return note_ownership.update_or_create_with_ownership(
        {"slug": slug_norm}, {"title": title.strip(), "body": body or ""}, request
    )


def get_note(note_id: int, request: Optional[Request] = None) -> Optional[Note]:
    """Return the note only if the current request owns it."""
    note = db.session.get(Note, note_id)
    if note is None or not note_ownership.is_owned_by_current(note, request):
        return None
    return note


def update_note(note_id: int, request: Optional[Request] = None, **fields) -> Optional[Note]:
    note = get_note(note_id, request)
    if note is None:
        return None
    for key in ("title", "body"):
        if key in fields and fields[key] is not None:
            setattr(note, key, fields[key].strip() if key == "title" else fields[key])
    db.session.commit()
    return note


def delete_note(note_id: int, request: Optional[Request] = None) -> bool:
    note = get_note(note_id, request)
    if note is None:
        return False
    db.session.delete(note)
    db.session.commit()
    return True


def release_note(note_id: int, request: Optional[Request] = None) -> Optional[Note]:
    """Drop ownership of a note; it stays stored but belongs to nobody."""
    note = get_note(note_id, request)
    if note is None:
        return None
    note_ownership.unassign(note)
    return note


def note_owner(note: Note) -> Owner:
    return note_ownership.owner(note)
