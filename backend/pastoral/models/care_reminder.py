from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Column
from sqlmodel import Field, SQLModel

from pastoral.core.timeutils import utcnow
from pastoral.models.member import new_document_id
from pastoral.models.types import AwareDateTime


class CareReminder(SQLModel, table=True):
    """Gentle follow-up intention held in mind for a member."""

    __tablename__ = "care_reminders"

    id: str = Field(default_factory=new_document_id, primary_key=True, max_length=64)
    member_id: str = Field(index=True, max_length=64)
    text: str = Field(max_length=2000)
    due_date: Optional[datetime] = Field(
        default=None, sa_column=Column(AwareDateTime(), nullable=True, index=True)
    )
    author_id: str = Field(max_length=64)
    author_name: str = Field(max_length=255)
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(AwareDateTime(), nullable=False),
    )
    # Written as False at creation; readers always recompute expiry
    is_expired: bool = Field(default=False)
