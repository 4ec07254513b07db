"""Helpers for the canonical "LASTNAME, FIRSTNAME" member name format."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING, Iterable, List, Sequence

if TYPE_CHECKING:
    from pastoral.schemas.member import MemberRead


@dataclass(frozen=True)
class ParsedName:
    first_name: str
    last_name: str
    full_name: str


def to_proper_case(text: str) -> str:
    if not text:
        return ""
    return text[0].upper() + text[1:].lower()


def parse_member_name(name: str) -> ParsedName:
    """
    Parse "SMITH, JOHN" into ``ParsedName("John", "Smith", "John Smith")``.

    A name without a comma is treated as a bare last name and kept verbatim.
    """
    if not name or "," not in name:
        return ParsedName(first_name="", last_name=name or "", full_name=name or "")

    last, first = (part.strip() for part in name.split(",", 1))
    first_name = to_proper_case(first)
    last_name = to_proper_case(last)
    return ParsedName(
        first_name=first_name,
        last_name=last_name,
        full_name=f"{first_name} {last_name}".strip(),
    )


def format_member_name(first_name: str, last_name: str) -> str:
    return f"{last_name.strip()}, {first_name.strip()}".upper()


def short_display_name(name: str) -> str:
    """Short form used in milestone titles: "SMITH, JOHN" -> "John S."."""
    parsed = parse_member_name(name)
    if not parsed.first_name:
        return parsed.last_name
    short_last = f"{parsed.last_name[0]}." if parsed.last_name else ""
    return f"{parsed.first_name} {short_last}".strip()


def member_initials(name: str) -> str:
    parsed = parse_member_name(name)
    if parsed.first_name and parsed.last_name:
        return f"{parsed.first_name[0]}{parsed.last_name[0]}".upper()
    if parsed.last_name:
        return parsed.last_name[:2].upper()
    return "??"


def sort_members_by_name(members: Iterable[MemberRead]) -> List[MemberRead]:
    """Sort by last name, then first name. Returns a new list."""

    def key(member: MemberRead):
        parsed = parse_member_name(member.name)
        return (parsed.last_name.casefold(), parsed.first_name.casefold())

    return sorted(members, key=key)


def search_members(members: Sequence[MemberRead], query: str) -> List[MemberRead]:
    """Match full name, suburb or contact, case-insensitively."""
    if not query.strip():
        return list(members)
    term = query.lower()
    return [
        member
        for member in members
        if term in parse_member_name(member.name).full_name.lower()
        or term in member.suburb.lower()
        or term in member.contact.lower()
    ]


def calculate_age(birthday: datetime | date | None, today: date | None = None) -> int:
    if birthday is None:
        return 0
    born = birthday.date() if isinstance(birthday, datetime) else birthday
    today = today or date.today()
    age = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        age -= 1
    return age
