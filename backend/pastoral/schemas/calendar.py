from __future__ import annotations

from datetime import datetime
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
)

from pastoral.core.timeutils import ensure_aware

EventType = Literal[
    "community-gathering",
    "member-milestone",
    "care-reminder",
    "care-update",
    "liturgical-event",
]
EVENT_TYPES: tuple[str, ...] = (
    "community-gathering",
    "member-milestone",
    "care-reminder",
    "care-update",
    "liturgical-event",
)
WEEKDAYS: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)
SeriesScope = Literal["this", "future", "all"]


class EndsOn(BaseModel):
    ends_on: datetime

    @field_validator("ends_on")
    @classmethod
    def make_aware(cls, value: datetime) -> datetime:
        return ensure_aware(value)


class RecurrenceRule(BaseModel):
    """Weekly recurrence on an explicit set of weekdays."""

    type: Literal["weekly"] = "weekly"
    days_of_week: List[str]
    end_condition: Union[Literal["never"], EndsOn] = "never"

    @field_validator("days_of_week")
    @classmethod
    def normalize_days(cls, value: List[str]) -> List[str]:
        days: List[str] = []
        for raw in value:
            key = raw.strip().lower()
            match = next((d for d in WEEKDAYS if d == key or d[:3] == key), None)
            if match is None:
                raise ValueError(f"Unknown weekday: {raw}")
            if match not in days:
                days.append(match)
        if not days:
            raise ValueError("days_of_week must not be empty")
        return days

    @property
    def weekday_numbers(self) -> List[int]:
        return sorted(WEEKDAYS.index(day) for day in self.days_of_week)

    @property
    def ends_on(self) -> Optional[datetime]:
        if isinstance(self.end_condition, EndsOn):
            return self.end_condition.ends_on
        return None


class BaseCalendarEvent(BaseModel):
    """Fields shared by every calendar event variant."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    title: str
    date: datetime
    description: Optional[str] = None
    member_id: Optional[str] = None
    member_name: Optional[str] = None

    @field_validator("date")
    @classmethod
    def make_aware(cls, value: datetime) -> datetime:
        return ensure_aware(value)


class CommunityGathering(BaseCalendarEvent):
    type: Literal["community-gathering"] = "community-gathering"
    created_by: str
    created_by_name: str
    created_at: Optional[datetime] = None
    all_day: bool = True
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    recurrence: Optional[RecurrenceRule] = None
    series_id: Optional[str] = None
    parent_series_id: Optional[str] = None
    occurrence_date: Optional[datetime] = None
    cancelled: bool = False

    @property
    def is_series_master(self) -> bool:
        return self.recurrence is not None and self.parent_series_id is None

    @property
    def is_exception(self) -> bool:
        return self.parent_series_id is not None


class MemberMilestone(BaseCalendarEvent):
    type: Literal["member-milestone"] = "member-milestone"
    member_id: str
    member_name: str
    milestone_type: Literal["birthday", "anniversary"]


class CareReminderEvent(BaseCalendarEvent):
    type: Literal["care-reminder"] = "care-reminder"
    member_id: str
    member_name: str
    reminder_id: str
    is_expired: bool


class CareUpdateEvent(BaseCalendarEvent):
    type: Literal["care-update"] = "care-update"
    member_id: str
    member_name: str
    care_note_id: Optional[str] = None


class LiturgicalEvent(BaseCalendarEvent):
    type: Literal["liturgical-event"] = "liturgical-event"
    liturgical_context: Optional[str] = None


CalendarEventItem = Annotated[
    Union[
        CommunityGathering,
        MemberMilestone,
        CareReminderEvent,
        CareUpdateEvent,
        LiturgicalEvent,
    ],
    Field(discriminator="type"),
]


def default_visible_types() -> Dict[str, bool]:
    return {
        "community-gathering": True,
        "member-milestone": True,
        "care-reminder": True,
        "care-update": False,
        "liturgical-event": True,
    }


class CalendarFilters(BaseModel):
    """View-local filter preferences. Never persisted."""

    model_config = ConfigDict(frozen=True)

    selected_member_id: Optional[str] = None
    visible_types: Dict[str, bool] = Field(default_factory=default_visible_types)
    show_completed_reminders: bool = False
    search_query: str = ""

    @field_validator("visible_types")
    @classmethod
    def require_every_type(cls, value: Dict[str, bool]) -> Dict[str, bool]:
        missing = [t for t in EVENT_TYPES if t not in value]
        unknown = [t for t in value if t not in EVENT_TYPES]
        if missing or unknown:
            raise ValueError(
                f"visible_types must list exactly {', '.join(EVENT_TYPES)}"
            )
        return {t: bool(value[t]) for t in EVENT_TYPES}


class GatheringCreate(BaseModel):
    title: str
    date: datetime
    description: Optional[str] = None
    all_day: bool = True
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    recurrence: Optional[RecurrenceRule] = None

    @field_validator("end_time")
    @classmethod
    def check_ends_after_start(
        cls, end_time: Optional[datetime], info: ValidationInfo
    ) -> Optional[datetime]:
        start_time: datetime | None = info.data.get("start_time")
        if start_time and end_time and end_time < start_time:
            raise ValueError("end_time must be greater than or equal to start_time")
        return end_time


class GatheringUpdate(BaseModel):
    title: Optional[str] = None
    date: Optional[datetime] = None
    description: Optional[str] = None
    all_day: Optional[bool] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    recurrence: Optional[RecurrenceRule] = None
    scope: Optional[SeriesScope] = None
    # Which occurrence of a series a scope="this" edit applies to
    occurrence_date: Optional[datetime] = None

    @field_validator("end_time")
    @classmethod
    def check_ends_after_start(
        cls, end_time: Optional[datetime], info: ValidationInfo
    ) -> Optional[datetime]:
        start_time: datetime | None = info.data.get("start_time")
        if start_time and end_time and end_time < start_time:
            raise ValueError("end_time must be greater than or equal to start_time")
        return end_time
