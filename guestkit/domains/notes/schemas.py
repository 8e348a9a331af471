"""Note request/response schemas."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class NoteCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    body: str = ""
    slug: Optional[str] = Field(default=None, max_length=128)


class NoteUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    body: Optional[str] = None


class NoteUpsert(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    body: str = ""


class NoteResponse(BaseModel):
    id: int
    slug: Optional[str] = None
    title: str
    body: str
    owner_kind: str
    created_at: str
    updated_at: str
