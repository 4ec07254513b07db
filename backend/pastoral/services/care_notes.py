from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from pastoral.core.config import settings
from pastoral.core.errors import CareValidationError
from pastoral.core.timeutils import utcnow
from pastoral.models import CareNote
from pastoral.schemas.user import Identity
from pastoral.services.guards import (
    reported,
    require_identity,
    require_store,
    require_text,
)
from pastoral.services.notices import NoticeBoard
from pastoral.services.store import DocumentStore, StoreQuery

logger = logging.getLogger(__name__)

COLLECTION = "careNotes"
EMPTY_NOTE_NOTICE = "Please share a care note"


def notes_query(member_id: str) -> StoreQuery:
    """Newest notes first for one member."""
    return StoreQuery(
        COLLECTION,
        where=("member_id", "==", member_id),
        order_by=("created_at", "desc"),
        limit=settings.CARE_NOTES_PAGE_SIZE,
    )


def list_notes(store: DocumentStore, member_id: str) -> List[CareNote]:
    return require_store(store).query(notes_query(member_id))


def add_note(
    store: DocumentStore,
    notices: NoticeBoard,
    identity: Optional[Identity],
    member_id: Optional[str],
    content: str,
) -> CareNote:
    store = require_store(store)
    identity = require_identity(identity, "add care notes")
    if not member_id:
        raise CareValidationError("No member selected")
    content = require_text(content, notices, EMPTY_NOTE_NOTICE, "Content")

    with reported(notices, "adding care note", "Unable to add care note. Please try again."):
        now = utcnow()
        note = store.add(
            COLLECTION,
            {
                "member_id": member_id,
                "content": content,
                "author_id": identity.id,
                "author_name": identity.label,
                "created_at": now,
                "updated_at": now,
                "history": [],
            },
        )
    notices.success("Care note added")
    return note


def update_note(
    store: DocumentStore,
    notices: NoticeBoard,
    identity: Optional[Identity],
    note_id: str,
    content: str,
    now: Optional[datetime] = None,
) -> CareNote:
    """
    Replace the note content, first appending the previous content to the
    history. History entries are never changed or removed and ``created_at``
    stays as it was.
    """
    store = require_store(store)
    identity = require_identity(identity, "update care notes")
    content = require_text(content, notices, EMPTY_NOTE_NOTICE, "Content")
    edited_at = now or utcnow()

    def apply_edit(note: CareNote) -> None:
        entry = {
            "content": note.content,
            "edited_at": edited_at.isoformat(),
            "edited_by": identity.id,
            "edited_by_name": identity.label,
        }
        note.history = [*(note.history or []), entry]
        note.content = content
        note.updated_at = edited_at

    with reported(notices, "updating care note", "Unable to update care note. Please try again."):
        note = store.modify(COLLECTION, note_id, apply_edit)
    notices.success("Care note updated")
    return note


def delete_note(
    store: DocumentStore,
    notices: NoticeBoard,
    identity: Optional[Identity],
    note_id: str,
) -> None:
    store = require_store(store)
    require_identity(identity, "delete care notes")
    with reported(notices, "deleting care note", "Unable to remove care note. Please try again."):
        store.delete(COLLECTION, note_id)
    notices.success("Care note removed")
