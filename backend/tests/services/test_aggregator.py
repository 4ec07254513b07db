"""Calendar event aggregation.

Tests cover:
    - Visibility toggles, including monotonicity when toggled back
    - Expired reminders hidden unless completed reminders are shown
    - Member scope, search and inclusive date range
    - Stable ordering by date
    - Member display names projected from the member lookup
"""

from datetime import date, datetime, timezone

from pastoral.schemas.calendar import (
    CalendarFilters,
    CareReminderEvent,
    CommunityGathering,
    MemberMilestone,
    default_visible_types,
)
from pastoral.services.aggregator import (
    DateRange,
    EventSources,
    aggregate_events,
    project_member_names,
)

TODAY = date(2024, 1, 10)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def gathering(event_id: str, title: str, when: datetime, description=None) -> CommunityGathering:
    return CommunityGathering(
        id=event_id,
        title=title,
        date=when,
        description=description,
        created_by="pastor-1",
        created_by_name="Pastor Jo",
    )


def milestone(event_id: str, title: str, when: datetime, member_id="m1") -> MemberMilestone:
    return MemberMilestone(
        id=event_id,
        title=title,
        date=when,
        member_id=member_id,
        member_name="SMITH, JOHN",
        milestone_type="birthday",
    )


def reminder(event_id: str, title: str, when: datetime, member_id="m1") -> CareReminderEvent:
    return CareReminderEvent(
        id=event_id,
        title=title,
        date=when,
        member_id=member_id,
        member_name="SMITH, JOHN",
        reminder_id=event_id,
        is_expired=False,
    )


def sources() -> EventSources:
    return EventSources(
        community_gatherings=(
            gathering("g1", "Parish Picnic", utc(2024, 1, 20)),
            gathering("g2", "Choir practice", utc(2024, 1, 12), "Bring music for John"),
        ),
        member_milestones=(milestone("b1", "John S. Birthday", utc(2024, 1, 15)),),
        care_reminders=(
            reminder("r-old", "Call about surgery", utc(2024, 1, 5)),
            reminder("r-new", "Visit at home", utc(2024, 1, 11), member_id="m2"),
        ),
    )


def ids(events):
    return [e.id for e in events]


def test_default_filters_show_everything_but_care_updates_in_date_order():
    events = aggregate_events(sources(), CalendarFilters(), today=TODAY)
    assert ids(events) == ["r-new", "g2", "b1", "g1"]


def test_expired_reminders_return_with_show_completed():
    filters = CalendarFilters(show_completed_reminders=True)
    events = aggregate_events(sources(), filters, today=TODAY)
    assert ids(events)[0] == "r-old"


def test_hiding_a_type_removes_exactly_its_events_and_showing_restores_them():
    everything = aggregate_events(sources(), CalendarFilters(), today=TODAY)
    hidden = {**default_visible_types(), "community-gathering": False}
    without = aggregate_events(sources(), CalendarFilters(visible_types=hidden), today=TODAY)
    assert ids(without) == [e.id for e in everything if e.type != "community-gathering"]

    restored = aggregate_events(
        sources(), CalendarFilters(visible_types=default_visible_types()), today=TODAY
    )
    assert restored == everything


def test_member_scope_keeps_only_that_member():
    filters = CalendarFilters(selected_member_id="m2")
    assert ids(aggregate_events(sources(), filters, today=TODAY)) == ["r-new"]


def test_search_matches_title_case_insensitively():
    events = EventSources(
        member_milestones=(milestone("b1", "John's Birthday", utc(2024, 1, 15)),),
        community_gatherings=(gathering("g1", "Parish Picnic", utc(2024, 1, 20)),),
    )
    result = aggregate_events(events, CalendarFilters(search_query="john"), today=TODAY)
    assert ids(result) == ["b1"]


def test_search_matches_description():
    filters = CalendarFilters(search_query="JOHN")
    assert "g2" in ids(aggregate_events(sources(), filters, today=TODAY))


def test_whitespace_search_is_no_filter():
    everything = aggregate_events(sources(), CalendarFilters(), today=TODAY)
    spaced = aggregate_events(sources(), CalendarFilters(search_query="   "), today=TODAY)
    assert spaced == everything


def test_date_range_is_inclusive():
    events = EventSources(
        community_gatherings=(
            gathering("dec", "A", utc(2023, 12, 31)),
            gathering("jan", "B", utc(2024, 1, 15)),
            gathering("feb", "C", utc(2024, 2, 1)),
        )
    )
    date_range = DateRange(utc(2024, 1, 1), utc(2024, 1, 31))
    result = aggregate_events(events, CalendarFilters(), date_range, today=TODAY)
    assert ids(result) == ["jan"]


def test_range_bounds_themselves_are_kept():
    start, end = utc(2024, 1, 1), utc(2024, 1, 31)
    events = EventSources(
        community_gatherings=(gathering("s", "Start", start), gathering("e", "End", end))
    )
    result = aggregate_events(events, CalendarFilters(), DateRange(start, end), today=TODAY)
    assert ids(result) == ["s", "e"]


def test_equal_dates_keep_source_order():
    when = utc(2024, 1, 12)
    events = EventSources(
        community_gatherings=(gathering("g", "Gathering", when),),
        member_milestones=(milestone("m", "Milestone", when),),
    )
    assert ids(aggregate_events(events, CalendarFilters(), today=TODAY)) == ["g", "m"]


def test_aggregation_returns_a_new_list_each_time():
    first = aggregate_events(sources(), CalendarFilters(), today=TODAY)
    first.clear()
    assert aggregate_events(sources(), CalendarFilters(), today=TODAY)


def test_project_member_names_refreshes_stale_copies():
    events = [milestone("b1", "John S. Birthday", utc(2024, 1, 15))]
    projected = project_member_names(events, {"m1": "SMITH, JONATHAN"})
    assert projected[0].member_name == "SMITH, JONATHAN"
    assert events[0].member_name == "SMITH, JOHN"


def test_project_member_names_falls_back_for_missing_member():
    events = [reminder("r", "Visit", utc(2024, 1, 12), member_id="gone")]
    assert project_member_names(events, {})[0].member_name == "Unknown Member"
