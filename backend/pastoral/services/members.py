from __future__ import annotations

import logging
from typing import Dict, List, Optional

from pastoral.core.errors import NotFoundError
from pastoral.core.timeutils import utcnow
from pastoral.models import Member
from pastoral.schemas.member import (
    MemberCreate,
    MemberRead,
    MemberUpdate,
    member_to_app,
    member_to_storage,
    storage_name,
)
from pastoral.schemas.user import Identity
from pastoral.services.guards import (
    reported,
    require_identity,
    require_store,
    require_text,
)
from pastoral.services.member_names import search_members, sort_members_by_name
from pastoral.services.notices import NoticeBoard
from pastoral.services.store import DocumentStore, StoreQuery

logger = logging.getLogger(__name__)

COLLECTION = "members"
EMPTY_NAME_NOTICE = "Please provide a member name"


def members_query() -> StoreQuery:
    return StoreQuery(COLLECTION)


def list_members(store: DocumentStore, query: str = "") -> List[MemberRead]:
    """Members in application shape, sorted by last then first name."""
    records = require_store(store).query(members_query())
    members = sort_members_by_name(member_to_app(r) for r in records)
    if query.strip():
        members = search_members(members, query)
    return members


def get_member(store: DocumentStore, member_id: str) -> MemberRead:
    record = require_store(store).get(COLLECTION, member_id)
    if record is None:
        raise NotFoundError("Member not found")
    return member_to_app(record)


def member_names(records: List[Member]) -> Dict[str, str]:
    return {r.id: storage_name(r) for r in records}


def create_member(
    store: DocumentStore,
    notices: NoticeBoard,
    identity: Optional[Identity],
    payload: MemberCreate,
) -> MemberRead:
    store = require_store(store)
    identity = require_identity(identity, "add members")
    require_text(payload.name, notices, EMPTY_NAME_NOTICE, "Member name")

    data = member_to_storage(payload.model_dump())
    now = utcnow()
    data.update(created_at=now, created_by=identity.id, updated_at=now, updated_by=identity.id)

    with reported(notices, "creating member", "Unable to add member. Please try again."):
        record = store.add(COLLECTION, data)
    notices.success("Member added successfully")
    return member_to_app(record)


def update_member(
    store: DocumentStore,
    notices: NoticeBoard,
    identity: Optional[Identity],
    member_id: str,
    payload: MemberUpdate,
) -> MemberRead:
    store = require_store(store)
    identity = require_identity(identity, "update members")
    updates = payload.model_dump(exclude_unset=True)
    if "name" in updates:
        require_text(updates["name"], notices, EMPTY_NAME_NOTICE, "Member name")

    changes = member_to_storage(updates)
    changes.update(updated_at=utcnow(), updated_by=identity.id)

    with reported(notices, "updating member", "Unable to update member. Please try again."):
        record = store.update(COLLECTION, member_id, changes)
    notices.success("Member updated successfully")
    return member_to_app(record)


def delete_member(
    store: DocumentStore,
    notices: NoticeBoard,
    identity: Optional[Identity],
    member_id: str,
) -> bool:
    """Deleting an unknown id is not an error; returns whether a record went away."""
    store = require_store(store)
    require_identity(identity, "delete members")
    with reported(notices, "deleting member", "Unable to delete member. Please try again."):
        removed = store.delete(COLLECTION, member_id)
    notices.success("Member deleted successfully")
    return removed
