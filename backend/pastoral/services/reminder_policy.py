"""
Expiry and ordering of care reminders.

A reminder is expired once its due day (in the local zone) is strictly
before today. Reminders without a due date never expire. The compact member
view shows at most ``REMINDER_COMPACT_LIMIT`` active reminders, soonest
first, with undated reminders after the dated ones.
"""

from __future__ import annotations

from datetime import date, datetime, tzinfo
from typing import Iterable, List, Optional, Protocol, TypeVar

from pastoral.core.config import settings
from pastoral.core.timeutils import local_day, local_today, to_millis


class HasDueDate(Protocol):
    due_date: Optional[datetime]


R = TypeVar("R", bound=HasDueDate)


def is_expired(
    due_date: Optional[datetime],
    today: Optional[date] = None,
    tz: Optional[tzinfo] = None,
) -> bool:
    if due_date is None:
        return False
    today = today or local_today(tz)
    return local_day(due_date, tz) < today


def is_active(
    due_date: Optional[datetime],
    today: Optional[date] = None,
    tz: Optional[tzinfo] = None,
) -> bool:
    return not is_expired(due_date, today, tz)


def order_reminders(
    reminders: Iterable[R],
    today: Optional[date] = None,
    include_expired: bool = False,
    tz: Optional[tzinfo] = None,
) -> List[R]:
    """Dated reminders ascending by due instant, then undated ones."""
    today = today or local_today(tz)
    kept = [
        r for r in reminders if include_expired or not is_expired(r.due_date, today, tz)
    ]
    dated = sorted(
        (r for r in kept if r.due_date is not None),
        key=lambda r: to_millis(r.due_date),
    )
    undated = [r for r in kept if r.due_date is None]
    return dated + undated


def compact_reminders(
    reminders: Iterable[R],
    today: Optional[date] = None,
    include_expired: bool = False,
    limit: Optional[int] = None,
    tz: Optional[tzinfo] = None,
) -> List[R]:
    limit = settings.REMINDER_COMPACT_LIMIT if limit is None else limit
    return order_reminders(reminders, today, include_expired, tz)[:limit]


def calendar_reminders(
    reminders: Iterable[R],
    today: Optional[date] = None,
    include_expired: bool = False,
    tz: Optional[tzinfo] = None,
) -> List[R]:
    """Reminders placeable on a calendar grid: dated only, never truncated."""
    return [
        r
        for r in order_reminders(reminders, today, include_expired, tz)
        if r.due_date is not None
    ]


def with_expiry(reminder, today: Optional[date] = None, tz: Optional[tzinfo] = None):
    """Copy of a reminder read model with ``is_expired`` recomputed for today."""
    return reminder.model_copy(
        update={"is_expired": is_expired(reminder.due_date, today, tz)}
    )
