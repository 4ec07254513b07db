from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Query, Response, status

from pastoral.api.deps import CurrentUser, IdentityDep, NoticesDep, StoreDep
from pastoral.core.errors import CareValidationError
from pastoral.schemas import (
    EVENT_TYPES,
    CalendarEventItem,
    CalendarFilters,
    CommunityGathering,
    GatheringCreate,
    GatheringUpdate,
    SeriesScope,
    default_visible_types,
)
from pastoral.services import calendar_events
from pastoral.services.aggregator import DateRange
from pastoral.services.calendar_view import CalendarView

logger = logging.getLogger(__name__)

router = APIRouter()


def _filters(
    member_id: Optional[str],
    types: Optional[List[str]],
    show_completed_reminders: bool,
    q: str,
) -> CalendarFilters:
    visible_types = default_visible_types()
    if types:
        unknown = [t for t in types if t not in EVENT_TYPES]
        if unknown:
            raise CareValidationError(f"Unknown event types: {', '.join(unknown)}")
        visible_types = {t: t in types for t in EVENT_TYPES}
    return CalendarFilters(
        selected_member_id=member_id,
        visible_types=visible_types,
        show_completed_reminders=show_completed_reminders,
        search_query=q,
    )


@router.get(
    "/events",
    response_model=List[CalendarEventItem],
    summary="Aggregated calendar events",
)
def list_calendar_events(
    store: StoreDep,
    notices: NoticesDep,
    current_user: CurrentUser,
    member_id: Optional[str] = Query(default=None),
    types: Optional[List[str]] = Query(default=None, description="Visible event types"),
    show_completed_reminders: bool = Query(default=False),
    q: str = Query(default=""),
    start: Optional[datetime] = Query(default=None, alias="from"),
    end: Optional[datetime] = Query(default=None, alias="to"),
    expand: bool = Query(default=False, description="Expand weekly series in the range"),
):
    if (start is None) != (end is None):
        raise CareValidationError("Both 'from' and 'to' are required for a date range")
    date_range = DateRange(start, end) if start and end else None
    filters = _filters(member_id, types, show_completed_reminders, q)

    with CalendarView(
        store,
        notices,
        filters=filters,
        date_range=date_range,
        expand_recurrence=expand,
    ) as view:
        if view.error is not None:
            raise view.error
        events = view.all_events
    logger.debug(f"Calendar returned {len(events)} events")
    return events


@router.post(
    "/gatherings",
    response_model=CommunityGathering,
    status_code=status.HTTP_201_CREATED,
    summary="Add community gathering",
)
def create_gathering(
    payload: GatheringCreate,
    store: StoreDep,
    notices: NoticesDep,
    identity: IdentityDep,
) -> CommunityGathering:
    return calendar_events.add_gathering(store, notices, identity, payload)


@router.patch(
    "/gatherings/{event_id}",
    response_model=CommunityGathering,
    summary="Update community gathering or one occurrence of a series",
)
def update_gathering(
    event_id: str,
    payload: GatheringUpdate,
    store: StoreDep,
    notices: NoticesDep,
    identity: IdentityDep,
    scope: Optional[SeriesScope] = Query(default=None),
) -> CommunityGathering:
    if scope is not None and payload.scope is None:
        payload = payload.model_copy(update={"scope": scope})
    return calendar_events.update_gathering(store, notices, identity, event_id, payload)


@router.delete(
    "/gatherings/{event_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete community gathering or one occurrence of a series",
)
def delete_gathering(
    event_id: str,
    store: StoreDep,
    notices: NoticesDep,
    identity: IdentityDep,
    scope: Optional[SeriesScope] = Query(default=None),
    occurrence_date: Optional[datetime] = Query(default=None),
) -> Response:
    calendar_events.delete_gathering(
        store, notices, identity, event_id, scope, occurrence_date
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
