from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from pastoral.core.timeutils import utcnow
from pastoral.models.member import new_document_id
from pastoral.models.types import AwareDateTime


class CareNote(SQLModel, table=True):
    """Pastoral observation about a member with append-only edit history."""

    __tablename__ = "care_notes"

    id: str = Field(default_factory=new_document_id, primary_key=True, max_length=64)
    member_id: str = Field(index=True, max_length=64)
    content: str = Field(max_length=10000)
    author_id: str = Field(max_length=64)
    author_name: str = Field(max_length=255)
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(AwareDateTime(), nullable=False, index=True),
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(AwareDateTime(), nullable=False),
    )
    # [{content, edited_at, edited_by, edited_by_name}], oldest first
    history: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    def touch(self) -> None:
        self.updated_at = utcnow()
