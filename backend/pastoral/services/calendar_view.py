"""
Live calendar view.

Holds the store subscriptions feeding the calendar (gatherings, reminders
and the member list that milestones and display names come from) together
with the view-local filters. ``all_events`` is recomputed from the latest
snapshots on every access.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pastoral.core.errors import CareError, NotInitializedError
from pastoral.core.timeutils import local_day, local_today
from pastoral.models import Member
from pastoral.schemas.calendar import (
    BaseCalendarEvent,
    CalendarFilters,
    CareReminderEvent,
    CommunityGathering,
    MemberMilestone,
)
from pastoral.services.aggregator import (
    DateRange,
    EventSources,
    aggregate_events,
    project_member_names,
)
from pastoral.services.calendar_events import gathering_source, gatherings_query
from pastoral.services.care_reminders import build_reminder_events, reminders_query
from pastoral.services.filter_state import CalendarFilterState
from pastoral.services.members import member_names, members_query
from pastoral.services.milestones import member_milestones
from pastoral.services.notices import NoticeBoard
from pastoral.services.realtime import Subscription
from pastoral.services.recurrence import expand_occurrences
from pastoral.services.store import DocumentStore

logger = logging.getLogger(__name__)

LOAD_FAILED_NOTICE = "Unable to load calendar. Please try again."


def load_member_milestones(
    members: Sequence[Member],
    years: Sequence[int],
) -> List[MemberMilestone]:
    milestones: List[MemberMilestone] = []
    for year in years:
        milestones.extend(member_milestones(members, year))
    return milestones


class CalendarView:
    def __init__(
        self,
        store: Optional[DocumentStore],
        notices: NoticeBoard,
        filters: Optional[CalendarFilters] = None,
        date_range: Optional[DateRange] = None,
        expand_recurrence: bool = False,
        today: Optional[date] = None,
    ):
        self.store = store
        self.notices = notices
        self.filter_state = CalendarFilterState(filters)
        self.date_range = date_range
        self.expand_recurrence = expand_recurrence
        self._today = today

        self.loading = False
        self.error: Optional[Exception] = None
        self._handles: List[Subscription] = []
        self._members: List[Member] = []
        self._gathering_records: List[Any] = []
        self._reminder_records: List[Any] = []

    @property
    def today(self) -> date:
        return self._today or local_today()

    @property
    def filters(self) -> CalendarFilters:
        return self.filter_state.filters

    def update_filters(self, partial: Mapping[str, Any] | CalendarFilters) -> CalendarFilters:
        return self.filter_state.update_filters(partial)

    def set_date_range(self, start: Optional[datetime], end: Optional[datetime]) -> None:
        self.date_range = DateRange(start, end) if start and end else None

    # Snapshot handlers

    def _on_members(self, records: List[Member]) -> None:
        self._members = list(records)

    def _on_gatherings(self, records: List[Any]) -> None:
        self._gathering_records = list(records)

    def _on_reminders(self, records: List[Any]) -> None:
        self._reminder_records = list(records)

    def _on_source_error(self, exc: Exception) -> None:
        logger.error(f"Calendar source failed: {exc}")
        self.error = exc
        self.loading = False

    # Lifecycle

    def initialize(self) -> None:
        if self._handles:
            return
        self.loading = True
        self.error = None
        try:
            if self.store is None or self.store.engine is None:
                raise NotInitializedError("Store is not initialized")
            for query, handler in (
                (members_query(), self._on_members),
                (gatherings_query(), self._on_gatherings),
                (reminders_query(), self._on_reminders),
            ):
                self._handles.append(
                    self.store.subscribe(query, handler, self._on_source_error)
                )
        except CareError as exc:
            logger.error(f"Error initializing calendar: {exc.message}")
            self.error = exc
        finally:
            self.loading = False
        if self.error is not None:
            self.notices.error(LOAD_FAILED_NOTICE)

    def cleanup(self) -> None:
        for handle in self._handles:
            handle.close()
        self._handles = []

    def refresh(self) -> None:
        self.cleanup()
        self.initialize()

    def clear_error(self) -> None:
        self.error = None

    def __enter__(self) -> "CalendarView":
        self.initialize()
        return self

    def __exit__(self, *exc_info) -> None:
        self.cleanup()

    # Derived state

    def _milestone_years(self) -> List[int]:
        if self.date_range is None:
            return [self.today.year]
        first = local_day(self.date_range.start).year
        last = local_day(self.date_range.end).year
        return list(range(first, last + 1))

    def _gatherings(self, names: Dict[str, str]) -> List[CommunityGathering]:
        expand = self.expand_recurrence and self.date_range is not None
        gatherings = gathering_source(self._gathering_records, include_cancelled=expand)
        if expand:
            gatherings = expand_occurrences(
                gatherings, self.date_range.start, self.date_range.end
            )
        return project_member_names(gatherings, names)

    @property
    def sources(self) -> EventSources:
        names = member_names(self._members)
        milestones = load_member_milestones(self._members, self._milestone_years())
        reminders: List[CareReminderEvent] = build_reminder_events(
            self._reminder_records, names, self.today
        )
        return EventSources(
            community_gatherings=tuple(self._gatherings(names)),
            member_milestones=tuple(project_member_names(milestones, names)),
            care_reminders=tuple(project_member_names(reminders, names)),
        )

    @property
    def all_events(self) -> List[BaseCalendarEvent]:
        return aggregate_events(self.sources, self.filters, self.date_range, self.today)
