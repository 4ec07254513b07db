"""Weekly recurrence expansion with series exceptions."""

from datetime import date, datetime, timezone

from pastoral.schemas.calendar import CommunityGathering, RecurrenceRule
from pastoral.services.recurrence import (
    MAX_RECURRENCE_OCCURRENCES,
    expand_occurrences,
    occurrence_id,
    split_occurrence_id,
)

UTC = timezone.utc


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=UTC)


def series(**rule) -> CommunityGathering:
    # 1 January 2024 is a Monday
    return CommunityGathering(
        id="s1",
        title="Bible study",
        date=utc(2024, 1, 1, 19),
        created_by="pastor-1",
        created_by_name="Pastor Jo",
        recurrence=RecurrenceRule(**{"days_of_week": ["monday", "thu"], **rule}),
        series_id="s1",
    )


def exception(day: int, cancelled: bool = False, title: str = "Moved study") -> CommunityGathering:
    return CommunityGathering(
        id=f"x{day}",
        title=title,
        date=utc(2024, 1, day, 20),
        created_by="pastor-1",
        created_by_name="Pastor Jo",
        parent_series_id="s1",
        occurrence_date=utc(2024, 1, day, 19),
        cancelled=cancelled,
    )


def test_rule_normalizes_weekday_names():
    rule = RecurrenceRule(days_of_week=["Mon", "thursday", "mon"])
    assert rule.days_of_week == ["monday", "thursday"]
    assert rule.weekday_numbers == [0, 3]


def test_weekly_series_expands_on_selected_weekdays():
    result = expand_occurrences([series()], utc(2024, 1, 1), utc(2024, 1, 14, 23), tz=UTC)
    assert [e.date.day for e in result] == [1, 4, 8, 11]
    assert result[0].id == "s1:2024-01-01"
    assert all(e.date.hour == 19 for e in result)


def test_ends_on_stops_the_series():
    rule = {"end_condition": {"ends_on": utc(2024, 1, 5)}}
    result = expand_occurrences([series(**rule)], utc(2024, 1, 1), utc(2024, 1, 31), tz=UTC)
    assert [e.date.day for e in result] == [1, 4]


def test_exception_replaces_its_occurrence():
    result = expand_occurrences(
        [series(), exception(4)], utc(2024, 1, 1), utc(2024, 1, 7), tz=UTC
    )
    assert [(e.id, e.title) for e in result] == [
        ("s1:2024-01-01", "Bible study"),
        ("x4", "Moved study"),
    ]


def test_cancelled_exception_removes_its_occurrence():
    result = expand_occurrences(
        [series(), exception(4, cancelled=True)], utc(2024, 1, 1), utc(2024, 1, 7), tz=UTC
    )
    assert [e.id for e in result] == ["s1:2024-01-01"]


def test_cancellation_wins_over_a_later_sorted_override():
    moved = exception(8).model_copy(update={"id": "late", "date": utc(2024, 1, 8, 21)})
    cancel = exception(8, cancelled=True)
    result = expand_occurrences(
        [series(), cancel, moved], utc(2024, 1, 8), utc(2024, 1, 8, 23), tz=UTC
    )
    assert result == []


def test_plain_gatherings_pass_through_inside_window():
    picnic = CommunityGathering(
        id="p1",
        title="Picnic",
        date=utc(2024, 1, 6, 12),
        created_by="pastor-1",
        created_by_name="Pastor Jo",
    )
    outside = picnic.model_copy(update={"id": "p2", "date": utc(2024, 3, 1)})
    result = expand_occurrences([picnic, outside], utc(2024, 1, 1), utc(2024, 1, 7), tz=UTC)
    assert [e.id for e in result] == ["p1"]


def test_expansion_is_capped():
    result = expand_occurrences([series()], utc(2024, 1, 1), utc(2030, 1, 1), tz=UTC)
    assert len(result) == MAX_RECURRENCE_OCCURRENCES


def test_occurrence_ids_round_trip():
    assert split_occurrence_id(occurrence_id("s1", date(2024, 1, 4))) == ("s1", date(2024, 1, 4))
    assert split_occurrence_id("plain") == ("plain", None)
