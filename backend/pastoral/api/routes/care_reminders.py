from __future__ import annotations

from typing import List

from fastapi import APIRouter, Query, Response, status

from pastoral.api.deps import CurrentUser, IdentityDep, NoticesDep, StoreDep
from pastoral.schemas import (
    CareReminderCreate,
    CareReminderRead,
    CareReminderUpdate,
    ReminderView,
)
from pastoral.services import care_reminders

router = APIRouter()


@router.get(
    "/members/{member_id}/care-reminders",
    response_model=List[CareReminderRead],
    summary="List care reminders for a member",
)
def list_care_reminders(
    member_id: str,
    store: StoreDep,
    current_user: CurrentUser,
    view: ReminderView = Query(default="compact"),
) -> List[CareReminderRead]:
    return care_reminders.list_member_reminders(store, member_id, view)


@router.post(
    "/members/{member_id}/care-reminders",
    response_model=CareReminderRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add care reminder",
)
def add_care_reminder(
    member_id: str,
    payload: CareReminderCreate,
    store: StoreDep,
    notices: NoticesDep,
    identity: IdentityDep,
) -> CareReminderRead:
    reminder = care_reminders.add_reminder(
        store, notices, identity, member_id, payload.text, payload.due_date
    )
    return care_reminders.to_read(reminder)


@router.patch(
    "/care-reminders/{reminder_id}",
    response_model=CareReminderRead,
    summary="Update care reminder",
)
def update_care_reminder(
    reminder_id: str,
    payload: CareReminderUpdate,
    store: StoreDep,
    notices: NoticesDep,
    identity: IdentityDep,
) -> CareReminderRead:
    reminder = care_reminders.update_reminder(
        store, notices, identity, reminder_id, payload.text, payload.due_date
    )
    return care_reminders.to_read(reminder)


@router.delete(
    "/care-reminders/{reminder_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete care reminder",
)
def delete_care_reminder(
    reminder_id: str,
    store: StoreDep,
    notices: NoticesDep,
    identity: IdentityDep,
) -> Response:
    care_reminders.delete_reminder(store, notices, identity, reminder_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
