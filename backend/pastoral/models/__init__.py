from .calendar_event import CalendarEvent
from .care_note import CareNote
from .care_reminder import CareReminder
from .member import Member, new_document_id
from .user import User

__all__ = [
    "CalendarEvent",
    "CareNote",
    "CareReminder",
    "Member",
    "User",
    "new_document_id",
]
