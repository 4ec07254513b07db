"""
Community gathering operations, including single-occurrence edits of a
weekly series.

An edit or delete with ``scope="this"`` on a recurring gathering writes an
exception document pointing back at the series, or rewrites the one already
written for that occurrence day; every other scope acts on the series master
itself. Deleting an exception cancels it rather than removing it.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from pastoral.core.config import settings
from pastoral.core.errors import NotFoundError
from pastoral.core.timeutils import local_day, utcnow
from pastoral.models import CalendarEvent
from pastoral.schemas.calendar import (
    CommunityGathering,
    GatheringCreate,
    GatheringUpdate,
    SeriesScope,
)
from pastoral.schemas.user import Identity
from pastoral.services.guards import (
    reported,
    require_identity,
    require_store,
    require_text,
)
from pastoral.services.notices import NoticeBoard
from pastoral.services.recurrence import split_occurrence_id
from pastoral.services.store import DocumentStore, StoreQuery

logger = logging.getLogger(__name__)

COLLECTION = "calendarEvents"
EMPTY_TITLE_NOTICE = "Please provide an event name"

# Fields an exception document inherits from its series master
_SERIES_FIELDS = (
    "title",
    "date",
    "description",
    "member_id",
    "member_name",
    "all_day",
    "start_time",
    "end_time",
)


def gatherings_query() -> StoreQuery:
    return StoreQuery(COLLECTION, order_by=("date", "asc"))


def gathering_from_record(record: CalendarEvent) -> CommunityGathering:
    return CommunityGathering.model_validate(record)


def gathering_source(
    records: Iterable[CalendarEvent],
    include_cancelled: bool = False,
) -> List[CommunityGathering]:
    """
    Stored gatherings as calendar events. Cancelled occurrences are only
    kept when the caller expands series, where they mask an occurrence.
    """
    return [
        gathering_from_record(r) for r in records if include_cancelled or not r.cancelled
    ]


def _stored_changes(payload: Dict[str, Any]) -> Dict[str, Any]:
    changes = dict(payload)
    if "title" in changes:
        changes["title"] = changes["title"].strip()
    if "description" in changes:
        changes["description"] = (changes["description"] or "").strip() or None
    return changes


def _dump(payload: GatheringCreate | GatheringUpdate, exclude_unset: bool = False) -> Dict[str, Any]:
    data = payload.model_dump(
        exclude={"recurrence", "scope", "occurrence_date"}, exclude_unset=exclude_unset
    )
    # The rule is stored as JSON; datetimes elsewhere stay native
    if not exclude_unset or "recurrence" in payload.model_fields_set:
        rule = payload.recurrence
        data["recurrence"] = rule.model_dump(mode="json") if rule is not None else None
    return data


def _occurrence_start(master: CalendarEvent, event_id: str, explicit: Optional[datetime]) -> datetime:
    if explicit is not None:
        return explicit
    _, day = split_occurrence_id(event_id)
    if day is None:
        return master.date
    tz = settings.local_tz
    return datetime.combine(day, master.date.astimezone(tz).time(), tzinfo=tz)


def _exception_document(
    master: CalendarEvent,
    identity: Identity,
    occurrence: datetime,
    overrides: Dict[str, Any],
    cancelled: bool = False,
) -> Dict[str, Any]:
    data = {field: getattr(master, field) for field in _SERIES_FIELDS}
    data["date"] = occurrence
    data.update(overrides)
    now = utcnow()
    data.update(
        recurrence=None,
        parent_series_id=master.series_id or master.id,
        occurrence_date=occurrence,
        cancelled=cancelled,
        created_by=identity.id,
        created_by_name=identity.label,
        created_at=now,
        updated_at=now,
    )
    return data


def _existing_exception(
    store: DocumentStore, series_id: str, occurrence: datetime
) -> Optional[CalendarEvent]:
    """The exception document already written for this occurrence day, if any."""
    day = local_day(occurrence)
    for record in store.query(
        StoreQuery(COLLECTION, where=("parent_series_id", "==", series_id))
    ):
        if local_day(record.occurrence_date or record.date) == day:
            return record
    return None


def _lookup(store: DocumentStore, event_id: str) -> CalendarEvent:
    base_id, _ = split_occurrence_id(event_id)
    record = store.get(COLLECTION, base_id) or store.get(COLLECTION, event_id)
    if record is None:
        raise NotFoundError("Event not found")
    return record


def add_gathering(
    store: DocumentStore,
    notices: NoticeBoard,
    identity: Optional[Identity],
    payload: GatheringCreate,
) -> CommunityGathering:
    store = require_store(store)
    identity = require_identity(identity, "add events")
    require_text(payload.title, notices, EMPTY_TITLE_NOTICE, "Event title")

    data = _stored_changes(_dump(payload))
    now = utcnow()
    data.update(
        created_by=identity.id,
        created_by_name=identity.label,
        created_at=now,
        updated_at=now,
    )
    with reported(notices, "adding event", "Unable to add event. Please try again."):
        record = store.add(COLLECTION, data)
        if record.recurrence is not None:
            record = store.update(COLLECTION, record.id, {"series_id": record.id})
    notices.success("Event added to calendar")
    return gathering_from_record(record)


def update_gathering(
    store: DocumentStore,
    notices: NoticeBoard,
    identity: Optional[Identity],
    event_id: str,
    payload: GatheringUpdate,
) -> CommunityGathering:
    store = require_store(store)
    identity = require_identity(identity, "update events")
    if "title" in payload.model_fields_set:
        require_text(payload.title, notices, EMPTY_TITLE_NOTICE, "Event title")

    changes = _stored_changes(_dump(payload, exclude_unset=True))
    scope: SeriesScope = payload.scope or "all"

    with reported(notices, "updating event", "Unable to update event. Please try again."):
        master = _lookup(store, event_id)
        if master.recurrence is not None and scope == "this":
            occurrence = _occurrence_start(master, event_id, payload.occurrence_date)
            changes.pop("recurrence", None)
            existing = _existing_exception(store, master.series_id or master.id, occurrence)
            if existing is not None:
                changes.update(cancelled=False, updated_at=utcnow())
                record = store.update(COLLECTION, existing.id, changes)
            else:
                record = store.add(
                    COLLECTION, _exception_document(master, identity, occurrence, changes)
                )
            logger.info(
                f"Occurrence {local_day(occurrence).isoformat()} of series {master.id} "
                f"overridden by {record.id}"
            )
        else:
            changes["updated_at"] = utcnow()
            record = store.update(COLLECTION, master.id, changes)
    notices.success("Event updated")
    return gathering_from_record(record)


def delete_gathering(
    store: DocumentStore,
    notices: NoticeBoard,
    identity: Optional[Identity],
    event_id: str,
    scope: Optional[SeriesScope] = None,
    occurrence_date: Optional[datetime] = None,
) -> None:
    store = require_store(store)
    identity = require_identity(identity, "delete events")

    with reported(notices, "deleting event", "Unable to delete event. Please try again."):
        master = _lookup(store, event_id)
        if master.parent_series_id is not None:
            # Removing an edited occurrence must not bring the series day back
            store.update(COLLECTION, master.id, {"cancelled": True, "updated_at": utcnow()})
        elif master.recurrence is not None and scope == "this":
            occurrence = _occurrence_start(master, event_id, occurrence_date)
            existing = _existing_exception(store, master.series_id or master.id, occurrence)
            if existing is not None:
                store.update(
                    COLLECTION, existing.id, {"cancelled": True, "updated_at": utcnow()}
                )
            else:
                store.add(
                    COLLECTION,
                    _exception_document(master, identity, occurrence, {}, cancelled=True),
                )
        else:
            store.delete(COLLECTION, master.id)
    notices.success("Event removed from calendar")
