from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, field_validator

from pastoral.core.timeutils import ensure_aware


class CareNoteCreate(BaseModel):
    content: str


class CareNoteUpdate(BaseModel):
    content: str


class CareNoteHistoryEntry(BaseModel):
    """Content of a note as it was before one edit."""

    content: str
    edited_at: datetime
    edited_by: str
    edited_by_name: str

    @field_validator("edited_at")
    @classmethod
    def make_aware(cls, value: datetime) -> datetime:
        return ensure_aware(value)


class CareNoteRead(BaseModel):
    id: str
    member_id: str
    content: str
    author_id: str
    author_name: str
    created_at: datetime
    updated_at: datetime
    history: List[CareNoteHistoryEntry] = []

    model_config = ConfigDict(from_attributes=True)
