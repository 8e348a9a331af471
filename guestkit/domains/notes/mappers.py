"""Note mappers for DTO responses."""

from __future__ import annotations

from guestkit.domains.notes.models import Note
from guestkit.domains.notes.schemas import NoteResponse


def _owner_kind(note: Note) -> str:
    if note.user_id is not None:
        return "user"
    if note.guest_id is not None:
        return "guest"
    return "none"


def map_note(note: Note) -> dict:
    return NoteResponse(
        id=note.id,
        slug=note.slug,
        title=note.title,
        body=note.body or "",
        owner_kind=_owner_kind(note),
        created_at=note.created_at.isoformat() if note.created_at else "",
        updated_at=note.updated_at.isoformat() if note.updated_at else "",
    ).model_dump()
