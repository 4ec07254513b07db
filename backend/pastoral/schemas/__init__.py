from .calendar import (
    EVENT_TYPES,
    BaseCalendarEvent,
    CalendarEventItem,
    CalendarFilters,
    CareReminderEvent,
    CareUpdateEvent,
    CommunityGathering,
    EventType,
    GatheringCreate,
    GatheringUpdate,
    LiturgicalEvent,
    MemberMilestone,
    RecurrenceRule,
    SeriesScope,
    default_visible_types,
)
from .care_note import (
    CareNoteCreate,
    CareNoteHistoryEntry,
    CareNoteRead,
    CareNoteUpdate,
)
from .care_reminder import (
    CareReminderCreate,
    CareReminderRead,
    CareReminderUpdate,
    ReminderView,
)
from .member import MemberCreate, MemberCreated, MemberRead, MemberUpdate
from .notice import Notice, NoticeKind
from .user import (
    Identity,
    RefreshTokenRequest,
    TokenPair,
    UserBase,
    UserCreate,
    UserLogin,
    UserRead,
)

__all__ = [
    "EVENT_TYPES",
    "BaseCalendarEvent",
    "CalendarEventItem",
    "CalendarFilters",
    "CareReminderEvent",
    "CareUpdateEvent",
    "CommunityGathering",
    "EventType",
    "GatheringCreate",
    "GatheringUpdate",
    "LiturgicalEvent",
    "MemberMilestone",
    "RecurrenceRule",
    "SeriesScope",
    "default_visible_types",
    "CareNoteCreate",
    "CareNoteHistoryEntry",
    "CareNoteRead",
    "CareNoteUpdate",
    "CareReminderCreate",
    "CareReminderRead",
    "CareReminderUpdate",
    "ReminderView",
    "MemberCreate",
    "MemberCreated",
    "MemberRead",
    "MemberUpdate",
    "Notice",
    "NoticeKind",
    "Identity",
    "RefreshTokenRequest",
    "TokenPair",
    "UserBase",
    "UserCreate",
    "UserLogin",
    "UserRead",
]
