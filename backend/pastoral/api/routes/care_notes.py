from __future__ import annotations

from typing import List

from fastapi import APIRouter, Response, status

from pastoral.api.deps import CurrentUser, IdentityDep, NoticesDep, StoreDep
from pastoral.models import CareNote
from pastoral.schemas import CareNoteCreate, CareNoteRead, CareNoteUpdate
from pastoral.services import care_notes

router = APIRouter()


@router.get(
    "/members/{member_id}/care-notes",
    response_model=List[CareNoteRead],
    summary="List care notes for a member (newest first)",
)
def list_care_notes(member_id: str, store: StoreDep, current_user: CurrentUser) -> List[CareNote]:
    return care_notes.list_notes(store, member_id)


@router.post(
    "/members/{member_id}/care-notes",
    response_model=CareNoteRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add care note",
)
def add_care_note(
    member_id: str,
    payload: CareNoteCreate,
    store: StoreDep,
    notices: NoticesDep,
    identity: IdentityDep,
) -> CareNote:
    return care_notes.add_note(store, notices, identity, member_id, payload.content)


@router.patch(
    "/care-notes/{note_id}",
    response_model=CareNoteRead,
    summary="Edit care note, keeping the previous content in its history",
)
def update_care_note(
    note_id: str,
    payload: CareNoteUpdate,
    store: StoreDep,
    notices: NoticesDep,
    identity: IdentityDep,
) -> CareNote:
    return care_notes.update_note(store, notices, identity, note_id, payload.content)


@router.delete(
    "/care-notes/{note_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete care note",
)
def delete_care_note(
    note_id: str,
    store: StoreDep,
    notices: NoticesDep,
    identity: IdentityDep,
) -> Response:
    care_notes.delete_note(store, notices, identity, note_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
