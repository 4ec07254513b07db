from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy import Column
from sqlmodel import Field, SQLModel

from pastoral.core.timeutils import utcnow
from pastoral.models.types import AwareDateTime


def new_document_id() -> str:
    return uuid4().hex


class Member(SQLModel, table=True):
    """Church member in storage shape (name split into parts)."""

    __tablename__ = "members"

    id: str = Field(default_factory=new_document_id, primary_key=True, max_length=64)
    first_name: Optional[str] = Field(default=None, max_length=255)
    last_name: Optional[str] = Field(default=None, max_length=255)
    display_name: Optional[str] = Field(default=None, max_length=255, index=True)
    phone: Optional[str] = Field(default=None, max_length=50)
    email: Optional[str] = Field(default=None, max_length=255)
    city: Optional[str] = Field(default=None, max_length=255)
    # "Member since" is kept in the free-text notes field
    notes: Optional[str] = Field(default=None, max_length=2000)
    birthday: Optional[datetime] = Field(
        default=None, sa_column=Column(AwareDateTime(), nullable=True)
    )
    anniversary_date: Optional[datetime] = Field(
        default=None, sa_column=Column(AwareDateTime(), nullable=True)
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(AwareDateTime(), nullable=False),
    )
    created_by: Optional[str] = Field(default=None, max_length=64)
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(AwareDateTime(), nullable=False),
    )
    updated_by: Optional[str] = Field(default=None, max_length=64)

    def touch(self) -> None:
        self.updated_at = utcnow()
