"""
Member schemas and the storage <-> application field translation.

Storage keeps the name split (first/last/display) and uses ``phone``,
``city`` and ``notes``; the application sees a single "LAST, FIRST" ``name``
plus ``contact``, ``suburb`` and ``member_since``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

from pastoral.core.timeutils import ensure_aware
from pastoral.models import Member
from pastoral.services.member_names import parse_member_name


class MemberCreate(BaseModel):
    # Server-managed fields (created_at, updated_by, ...) are dropped
    model_config = ConfigDict(extra="ignore")

    name: str
    birthday: Optional[datetime] = None
    anniversary_date: Optional[datetime] = None
    contact: str = ""
    email: str = ""
    suburb: str = ""
    member_since: str = ""


class MemberUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    birthday: Optional[datetime] = None
    anniversary_date: Optional[datetime] = None
    contact: Optional[str] = None
    email: Optional[str] = None
    suburb: Optional[str] = None
    member_since: Optional[str] = None


class MemberRead(BaseModel):
    id: str
    name: str
    birthday: Optional[datetime] = None
    anniversary_date: Optional[datetime] = None
    contact: str = ""
    email: str = ""
    suburb: str = ""
    member_since: str = ""
    created_at: datetime
    created_by: Optional[str] = None
    updated_at: datetime
    updated_by: Optional[str] = None


class MemberCreated(BaseModel):
    success: bool = True
    id: str
    member: MemberRead


def storage_name(record: Member) -> str:
    """Application name for a stored member: "LAST, FIRST" when both parts exist."""
    if record.last_name and record.first_name:
        return f"{record.last_name}, {record.first_name}".upper()
    return record.display_name or ""


def member_to_app(record: Member) -> MemberRead:
    return MemberRead(
        id=record.id,
        name=storage_name(record),
        birthday=ensure_aware(record.birthday),
        anniversary_date=ensure_aware(record.anniversary_date),
        contact=record.phone or "",
        email=record.email or "",
        suburb=record.city or "",
        member_since=record.notes or "",
        created_at=record.created_at,
        created_by=record.created_by,
        updated_at=record.updated_at,
        updated_by=record.updated_by,
    )


def split_name(name: str) -> Dict[str, Optional[str]]:
    name = name.strip()
    if "," not in name:
        return {"first_name": None, "last_name": None, "display_name": name}
    parsed = parse_member_name(name)
    return {
        "first_name": parsed.first_name or None,
        "last_name": parsed.last_name or None,
        "display_name": name,
    }


_APP_TO_STORAGE = {
    "contact": "phone",
    "suburb": "city",
    "member_since": "notes",
    "email": "email",
    "birthday": "birthday",
    "anniversary_date": "anniversary_date",
}


def member_to_storage(data: Dict[str, Any]) -> Dict[str, Any]:
    """Translate application fields (possibly partial) to storage columns."""
    stored: Dict[str, Any] = {}
    for key, value in data.items():
        if key == "name":
            if value is not None:
                stored.update(split_name(value))
        elif key in _APP_TO_STORAGE:
            stored[_APP_TO_STORAGE[key]] = value
    return stored
