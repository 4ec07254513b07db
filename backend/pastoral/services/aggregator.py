"""
Calendar event aggregation.

Merges the per-type source lists into one list following the filters:
visibility, member scope, free-text search, inclusive date range, then a
stable sort by date. The result is always a new list derived from the
inputs; nothing here is stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from pastoral.core.timeutils import to_millis
from pastoral.schemas.calendar import (
    EVENT_TYPES,
    BaseCalendarEvent,
    CalendarFilters,
    CareReminderEvent,
    CareUpdateEvent,
    CommunityGathering,
    LiturgicalEvent,
    MemberMilestone,
)
from pastoral.services import reminder_policy


@dataclass(frozen=True)
class DateRange:
    start: datetime
    end: datetime

    def contains(self, value: datetime) -> bool:
        return to_millis(self.start) <= to_millis(value) <= to_millis(self.end)


@dataclass(frozen=True)
class EventSources:
    """Snapshot of every source list feeding the calendar."""

    community_gatherings: Tuple[CommunityGathering, ...] = ()
    member_milestones: Tuple[MemberMilestone, ...] = ()
    care_reminders: Tuple[CareReminderEvent, ...] = ()
    care_updates: Tuple[CareUpdateEvent, ...] = ()
    liturgical_events: Tuple[LiturgicalEvent, ...] = ()

    def for_type(self, event_type: str) -> Sequence[BaseCalendarEvent]:
        if event_type == "community-gathering":
            return self.community_gatherings
        if event_type == "member-milestone":
            return self.member_milestones
        if event_type == "care-reminder":
            return self.care_reminders
        if event_type == "care-update":
            return self.care_updates
        if event_type == "liturgical-event":
            return self.liturgical_events
        raise ValueError(f"Unhandled calendar event type: {event_type}")


def _matches_search(event: BaseCalendarEvent, term: str) -> bool:
    if term in event.title.lower():
        return True
    return bool(event.description) and term in event.description.lower()


def aggregate_events(
    sources: EventSources,
    filters: CalendarFilters,
    date_range: Optional[DateRange] = None,
    today: Optional[date] = None,
) -> List[BaseCalendarEvent]:
    events: List[BaseCalendarEvent] = []

    for event_type in EVENT_TYPES:
        if not filters.visible_types.get(event_type, False):
            continue
        source = sources.for_type(event_type)
        if event_type == "care-reminder" and not filters.show_completed_reminders:
            source = [r for r in source if reminder_policy.is_active(r.date, today)]
        events.extend(source)

    if filters.selected_member_id:
        events = [e for e in events if e.member_id == filters.selected_member_id]

    if filters.search_query.strip():
        term = filters.search_query.lower()
        events = [e for e in events if _matches_search(e, term)]

    if date_range is not None:
        events = [e for e in events if date_range.contains(e.date)]

    # sorted() is stable, so equal dates keep their source order
    return sorted(events, key=lambda e: to_millis(e.date))


def project_member_names(
    events: Iterable[BaseCalendarEvent],
    member_names: Mapping[str, str],
    fallback: str = "Unknown Member",
) -> List[BaseCalendarEvent]:
    """Refresh the display name copied onto events from the member records."""
    projected: List[BaseCalendarEvent] = []
    for event in events:
        if event.member_id is None:
            projected.append(event)
            continue
        name = member_names.get(event.member_id, fallback)
        if name != event.member_name:
            event = event.model_copy(update={"member_name": name})
        projected.append(event)
    return projected
