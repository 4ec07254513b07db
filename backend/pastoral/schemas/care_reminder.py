from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

ReminderView = Literal["compact", "all"]


class CareReminderCreate(BaseModel):
    text: str
    due_date: Optional[datetime] = None


class CareReminderUpdate(BaseModel):
    text: str
    due_date: Optional[datetime] = None


class CareReminderRead(BaseModel):
    id: str
    member_id: str
    text: str
    due_date: Optional[datetime] = None
    author_id: str
    author_name: str
    created_at: datetime
    # Always recomputed against today, never taken from storage
    is_expired: bool = False

    model_config = ConfigDict(from_attributes=True)
