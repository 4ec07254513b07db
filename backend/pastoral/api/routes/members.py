from __future__ import annotations

from typing import List

from fastapi import APIRouter, Query, Response, status

from pastoral.api.deps import CurrentUser, IdentityDep, NoticesDep, StoreDep
from pastoral.schemas import MemberCreate, MemberCreated, MemberRead, MemberUpdate
from pastoral.services import members as member_service

router = APIRouter()


@router.get("/", response_model=List[MemberRead], summary="List members")
def list_members(
    store: StoreDep,
    current_user: CurrentUser,
    q: str = Query(default="", description="Match on name, suburb or contact"),
) -> List[MemberRead]:
    return member_service.list_members(store, q)


@router.get("/{member_id}", response_model=MemberRead, summary="Get member")
def read_member(member_id: str, store: StoreDep, current_user: CurrentUser) -> MemberRead:
    return member_service.get_member(store, member_id)


@router.post(
    "/",
    response_model=MemberCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Create member",
)
def create_member(
    payload: MemberCreate,
    store: StoreDep,
    notices: NoticesDep,
    identity: IdentityDep,
) -> MemberCreated:
    member = member_service.create_member(store, notices, identity, payload)
    return MemberCreated(id=member.id, member=member)


@router.patch("/{member_id}", response_model=MemberRead, summary="Update member")
def update_member(
    member_id: str,
    payload: MemberUpdate,
    store: StoreDep,
    notices: NoticesDep,
    identity: IdentityDep,
) -> MemberRead:
    return member_service.update_member(store, notices, identity, member_id, payload)


@router.delete(
    "/{member_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete member",
)
def delete_member(
    member_id: str,
    store: StoreDep,
    notices: NoticesDep,
    identity: IdentityDep,
) -> Response:
    member_service.delete_member(store, notices, identity, member_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
