from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable, List, Mapping, Optional

from pastoral.core.errors import CareValidationError
from pastoral.core.timeutils import local_today, utcnow
from pastoral.models import CareReminder
from pastoral.schemas.calendar import CareReminderEvent
from pastoral.schemas.care_reminder import CareReminderRead, ReminderView
from pastoral.schemas.user import Identity
from pastoral.services import reminder_policy
from pastoral.services.guards import (
    reported,
    require_identity,
    require_store,
    require_text,
)
from pastoral.services.milestones import UNKNOWN_MEMBER
from pastoral.services.notices import NoticeBoard
from pastoral.services.store import DocumentStore, StoreQuery

logger = logging.getLogger(__name__)

COLLECTION = "careReminders"
EMPTY_REMINDER_NOTICE = "Please share what you'd like to hold in mind"


def reminders_query(member_id: Optional[str] = None) -> StoreQuery:
    if member_id is None:
        return StoreQuery(COLLECTION, order_by=("due_date", "asc"))
    return StoreQuery(COLLECTION, where=("member_id", "==", member_id))


def to_read(record: CareReminder, today: Optional[date] = None) -> CareReminderRead:
    return reminder_policy.with_expiry(CareReminderRead.model_validate(record), today)


def member_reminders(
    records: Iterable[CareReminder],
    view: ReminderView = "compact",
    today: Optional[date] = None,
) -> List[CareReminderRead]:
    """
    Reminders for the member page.

    ``compact`` keeps only active reminders, capped at the compact limit;
    ``all`` keeps every reminder with expiry flagged.
    """
    today = today or local_today()
    reminders = [to_read(r, today) for r in records]
    if view == "compact":
        return reminder_policy.compact_reminders(reminders, today)
    return reminder_policy.order_reminders(reminders, today, include_expired=True)


def list_member_reminders(
    store: DocumentStore,
    member_id: str,
    view: ReminderView = "compact",
    today: Optional[date] = None,
) -> List[CareReminderRead]:
    records = require_store(store).query(reminders_query(member_id))
    return member_reminders(records, view, today)


def build_reminder_events(
    records: Iterable[CareReminder],
    member_names: Mapping[str, str],
    today: Optional[date] = None,
) -> List[CareReminderEvent]:
    """Calendar entries for dated reminders; expired ones are kept but flagged."""
    today = today or local_today()
    reminders = [to_read(r, today) for r in records]
    return [
        CareReminderEvent(
            id=f"care-reminder-{r.id}",
            title=r.text,
            date=r.due_date,
            member_id=r.member_id,
            member_name=member_names.get(r.member_id, UNKNOWN_MEMBER),
            reminder_id=r.id,
            is_expired=r.is_expired,
        )
        for r in reminder_policy.calendar_reminders(reminders, today, include_expired=True)
    ]


def add_reminder(
    store: DocumentStore,
    notices: NoticeBoard,
    identity: Optional[Identity],
    member_id: Optional[str],
    text: str,
    due_date: Optional[datetime] = None,
) -> CareReminder:
    store = require_store(store)
    identity = require_identity(identity, "add care reminders")
    if not member_id:
        raise CareValidationError("No member selected")
    text = require_text(text, notices, EMPTY_REMINDER_NOTICE, "Reminder text")

    with reported(notices, "adding care reminder", "Unable to add care reminder. Please try again."):
        reminder = store.add(
            COLLECTION,
            {
                "member_id": member_id,
                "text": text,
                "due_date": due_date,
                "author_id": identity.id,
                "author_name": identity.label,
                "created_at": utcnow(),
                "is_expired": False,
            },
        )
    notices.success("Care reminder added")
    return reminder


def update_reminder(
    store: DocumentStore,
    notices: NoticeBoard,
    identity: Optional[Identity],
    reminder_id: str,
    text: str,
    due_date: Optional[datetime] = None,
) -> CareReminder:
    store = require_store(store)
    require_identity(identity, "update care reminders")
    text = require_text(text, notices, EMPTY_REMINDER_NOTICE, "Reminder text")

    with reported(notices, "updating care reminder", "Unable to update care reminder. Please try again."):
        reminder = store.update(COLLECTION, reminder_id, {"text": text, "due_date": due_date})
    notices.success("Care reminder updated")
    return reminder


def delete_reminder(
    store: DocumentStore,
    notices: NoticeBoard,
    identity: Optional[Identity],
    reminder_id: str,
) -> None:
    store = require_store(store)
    require_identity(identity, "delete care reminders")
    with reported(notices, "deleting care reminder", "Unable to delete care reminder. Please try again."):
        store.delete(COLLECTION, reminder_id)
    notices.success("Care reminder deleted")
