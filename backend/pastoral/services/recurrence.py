"""
Weekly recurrence expansion for community gatherings.

Expansion sits on top of aggregation: a series master is turned into one
event per matching weekday inside the requested window. Exception documents
reference the series through ``parent_series_id`` and replace (or, when
``cancelled``, remove) the occurrence on their ``occurrence_date``.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, tzinfo
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from pastoral.core.config import settings
from pastoral.core.timeutils import local_day, to_millis
from pastoral.schemas.calendar import CommunityGathering

logger = logging.getLogger(__name__)

MAX_RECURRENCE_OCCURRENCES = 180
OCCURRENCE_SEPARATOR = ":"


def occurrence_id(series_id: str, day: date) -> str:
    return f"{series_id}{OCCURRENCE_SEPARATOR}{day.isoformat()}"


def split_occurrence_id(event_id: str) -> Tuple[str, Optional[date]]:
    """``"abc:2026-10-20"`` -> ``("abc", date(2026, 10, 20))``; plain ids pass through."""
    base, sep, suffix = event_id.rpartition(OCCURRENCE_SEPARATOR)
    if not sep:
        return event_id, None
    try:
        return base, date.fromisoformat(suffix)
    except ValueError:
        return event_id, None


def _supersedes(
    candidate: CommunityGathering, current: Optional[CommunityGathering]
) -> bool:
    """A cancellation always wins; otherwise the newest exception does."""
    if current is None:
        return True
    if candidate.cancelled != current.cancelled:
        return candidate.cancelled
    if candidate.created_at is None or current.created_at is None:
        return True
    return to_millis(candidate.created_at) >= to_millis(current.created_at)


def _occurrence_starts(
    master: CommunityGathering,
    start: datetime,
    end: datetime,
    tz: tzinfo,
) -> Iterator[datetime]:
    rule = master.recurrence
    weekdays = set(rule.weekday_numbers)
    first_day = local_day(master.date, tz)
    time_of_day = master.date.astimezone(tz).time()

    last_day = local_day(end, tz)
    if rule.ends_on is not None:
        last_day = min(last_day, local_day(rule.ends_on, tz))

    day = max(first_day, local_day(start, tz))
    emitted = 0
    while day <= last_day and emitted < MAX_RECURRENCE_OCCURRENCES:
        if day.weekday() in weekdays:
            occurrence = datetime.combine(day, time_of_day, tzinfo=tz)
            if to_millis(start) <= to_millis(occurrence) <= to_millis(end):
                emitted += 1
                yield occurrence
        day += timedelta(days=1)


def expand_occurrences(
    gatherings: Sequence[CommunityGathering],
    start: datetime,
    end: datetime,
    tz: Optional[tzinfo] = None,
) -> List[CommunityGathering]:
    """
    Concrete gatherings between ``start`` and ``end`` (inclusive).

    Non-recurring gatherings pass through when they fall in the window.
    Exceptions are only emitted in place of the occurrence they override.
    """
    tz = tz or settings.local_tz
    exceptions: Dict[str, Dict[date, CommunityGathering]] = {}
    masters: List[CommunityGathering] = []
    expanded: List[CommunityGathering] = []

    for gathering in gatherings:
        if gathering.is_exception:
            day = local_day(gathering.occurrence_date or gathering.date, tz)
            overrides = exceptions.setdefault(gathering.parent_series_id, {})
            if _supersedes(gathering, overrides.get(day)):
                overrides[day] = gathering
        elif gathering.recurrence is not None:
            masters.append(gathering)
        elif to_millis(start) <= to_millis(gathering.date) <= to_millis(end):
            expanded.append(gathering)

    for master in masters:
        series_id = master.series_id or master.id
        overrides = exceptions.get(series_id, {})
        for occurrence in _occurrence_starts(master, start, end, tz):
            day = local_day(occurrence, tz)
            exception = overrides.get(day)
            if exception is None:
                expanded.append(
                    master.model_copy(
                        update={
                            "id": occurrence_id(series_id, day),
                            "date": occurrence,
                            "series_id": series_id,
                        }
                    )
                )
            elif not exception.cancelled:
                expanded.append(exception)

    logger.debug(
        f"Expanded {len(masters)} series into {len(expanded)} gatherings "
        f"between {start.isoformat()} and {end.isoformat()}"
    )
    return expanded
