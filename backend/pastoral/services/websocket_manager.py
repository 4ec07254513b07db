"""
WebSocket connection manager for live queries.

Each connection owns a ``LiveSession``: one scoped store subscription per
watched collection plus the notice feed. Store callbacks may fire on any
thread, so outgoing messages go through an asyncio queue drained by the
connection's send loop.
"""

import asyncio
import json
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple
from uuid import UUID

from fastapi import WebSocket

from pastoral.schemas.care_note import CareNoteRead
from pastoral.schemas.member import member_to_app
from pastoral.schemas.notice import Notice
from pastoral.services.calendar_events import gathering_source, gatherings_query
from pastoral.services.care_notes import notes_query
from pastoral.services.care_reminders import member_reminders, reminders_query
from pastoral.services.members import members_query
from pastoral.services.notices import NoticeBoard
from pastoral.services.realtime import ScopedSubscription, Subscription
from pastoral.services.store import DocumentStore, StoreQuery

logger = logging.getLogger(__name__)

# Collections that are always observed per member
MEMBER_SCOPED = {"careNotes", "careReminders"}
ALL = "all"
VIEWS = ("compact", "all")


def _query_for(collection: str, scope: str) -> StoreQuery:
    if collection == "careNotes":
        return notes_query(scope)
    if collection == "careReminders":
        return reminders_query(scope)
    if collection == "calendarEvents":
        return gatherings_query()
    if collection == "members":
        return members_query()
    raise ValueError(f"Unknown collection: {collection}")


def _serialize(collection: str, records: List[Any], view: str) -> List[dict]:
    if collection == "careNotes":
        return [CareNoteRead.model_validate(r).model_dump(mode="json") for r in records]
    if collection == "careReminders":
        return [r.model_dump(mode="json") for r in member_reminders(records, view)]
    if collection == "calendarEvents":
        return [g.model_dump(mode="json") for g in gathering_source(records)]
    return [member_to_app(r).model_dump(mode="json") for r in records]


class LiveSession:
    """Live queries requested by one connected client."""

    def __init__(
        self,
        store: DocumentStore,
        notices: NoticeBoard,
        send: Callable[[dict], None],
    ):
        self.store = store
        self.send = send
        self.views: Dict[str, str] = {}
        self.watches: Dict[str, ScopedSubscription] = {}
        self._notice_feed: Subscription = notices.listen(self._on_notice)

    def _on_notice(self, notice: Notice) -> None:
        self.send({"type": "notice", "data": notice.model_dump(mode="json")})

    def _watch_for(self, collection: str) -> ScopedSubscription:
        watch = self.watches.get(collection)
        if watch is not None:
            return watch

        def opener(scope, on_items, on_error) -> Subscription:
            return self.store.subscribe(_query_for(collection, scope), on_items, on_error)

        def on_items(items: List[Any]) -> None:
            self.send(
                {
                    "type": "snapshot",
                    "collection": collection,
                    "scope": watch.scope,
                    "generation": watch.generation,
                    "items": _serialize(collection, items, self.views.get(collection, "compact")),
                }
            )

        def on_error(exc: Exception) -> None:
            self.send({"type": "error", "collection": collection, "message": str(exc)})

        watch = ScopedSubscription(opener, on_error=on_error, on_items=on_items)
        self.watches[collection] = watch
        return watch

    def watch(self, collection: str, member_id: Optional[str] = None, view: str = "compact") -> None:
        if collection in MEMBER_SCOPED and not member_id:
            raise ValueError(f"'{collection}' is watched per member")
        if collection not in MEMBER_SCOPED and collection not in ("calendarEvents", "members"):
            raise ValueError(f"Unknown collection: {collection}")
        if view not in VIEWS:
            raise ValueError(f"Unknown view: {view}")
        self.views[collection] = view
        self._watch_for(collection).set_scope(member_id if collection in MEMBER_SCOPED else ALL)

    def unwatch(self, collection: str) -> None:
        watch = self.watches.pop(collection, None)
        if watch is not None:
            watch.close()

    def unwatch_all(self) -> None:
        for collection in list(self.watches):
            self.unwatch(collection)

    def handle(self, message: dict) -> None:
        if not isinstance(message, dict):
            raise ValueError("Messages must be JSON objects")
        action = message.get("action")
        if action == "subscribe":
            self.watch(
                message.get("collection", ""),
                message.get("member_id"),
                message.get("view", "compact"),
            )
        elif action == "unsubscribe":
            if message.get("collection"):
                self.unwatch(message["collection"])
            else:
                self.unwatch_all()
        else:
            raise ValueError(f"Unknown action: {action}")

    def close(self) -> None:
        self.unwatch_all()
        self._notice_feed.close()


class ConnectionManager:
    """Accepts WebSocket connections and wires up their live sessions."""

    async def connect(self, websocket: WebSocket, user_id: UUID):
        await websocket.accept()
        logger.info(f"WebSocket connected: user_id={user_id}")

    def open_session(
        self,
        store: DocumentStore,
        notices: NoticeBoard,
    ) -> Tuple[LiveSession, asyncio.Queue]:
        """A live session whose outgoing messages land on the returned queue."""
        loop = asyncio.get_running_loop()
        outbox: asyncio.Queue = asyncio.Queue()

        def send(message: dict) -> None:
            loop.call_soon_threadsafe(outbox.put_nowait, message)

        return LiveSession(store, notices, send), outbox

    @staticmethod
    async def pump(websocket: WebSocket, outbox: asyncio.Queue) -> None:
        while True:
            message = await outbox.get()
            await websocket.send_text(json.dumps(message))


# Global instance
manager = ConnectionManager()
