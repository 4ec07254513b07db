from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from pastoral.core.timeutils import utcnow
from pastoral.models.member import new_document_id
from pastoral.models.types import AwareDateTime


class CalendarEvent(SQLModel, table=True):
    """User-created community gathering, including series exceptions."""

    __tablename__ = "calendar_events"

    id: str = Field(default_factory=new_document_id, primary_key=True, max_length=64)
    title: str = Field(max_length=255)
    date: datetime = Field(
        sa_column=Column(AwareDateTime(), nullable=False, index=True)
    )
    description: Optional[str] = Field(default=None, max_length=2000)
    member_id: Optional[str] = Field(default=None, index=True, max_length=64)
    member_name: Optional[str] = Field(default=None, max_length=255)
    all_day: bool = Field(default=True)
    start_time: Optional[datetime] = Field(
        default=None, sa_column=Column(AwareDateTime(), nullable=True)
    )
    end_time: Optional[datetime] = Field(
        default=None, sa_column=Column(AwareDateTime(), nullable=True)
    )
    recurrence: Optional[dict] = Field(
        default=None, sa_column=Column(JSON, nullable=True)
    )
    series_id: Optional[str] = Field(default=None, index=True, max_length=64)
    parent_series_id: Optional[str] = Field(default=None, index=True, max_length=64)
    # Set on series exceptions: the occurrence they replace or cancel
    occurrence_date: Optional[datetime] = Field(
        default=None, sa_column=Column(AwareDateTime(), nullable=True)
    )
    cancelled: bool = Field(default=False)
    created_by: str = Field(max_length=64)
    created_by_name: str = Field(max_length=255)
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(AwareDateTime(), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(AwareDateTime(), nullable=False),
    )

    def touch(self) -> None:
        self.updated_at = utcnow()
