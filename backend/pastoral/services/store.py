"""
Document store over SQLModel tables.

Collections are addressed by their logical names (``members``,
``careNotes``, ``careReminders``, ``calendarEvents``) and support point
lookup, a single-field filter, one ordering, a limit and live subscriptions.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Type

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, select

from pastoral.core.errors import NotFoundError, NotInitializedError, StoreError
from pastoral.models import CalendarEvent, CareNote, CareReminder, Member
from pastoral.services.realtime import ErrorCallback, Subscription, SubscriptionHub

logger = logging.getLogger(__name__)

COLLECTIONS: Dict[str, Type[SQLModel]] = {
    "members": Member,
    "careNotes": CareNote,
    "careReminders": CareReminder,
    "calendarEvents": CalendarEvent,
}

_OPERATORS = {
    "==": lambda column, value: column == value,
    "!=": lambda column, value: column != value,
    "<": lambda column, value: column < value,
    "<=": lambda column, value: column <= value,
    ">": lambda column, value: column > value,
    ">=": lambda column, value: column >= value,
}


@dataclass(frozen=True)
class StoreQuery:
    collection: str
    where: Optional[Tuple[str, str, Any]] = None
    order_by: Optional[Tuple[str, str]] = None
    limit: Optional[int] = None

    def __post_init__(self) -> None:
        if self.collection not in COLLECTIONS:
            raise ValueError(f"Unknown collection: {self.collection}")
        if self.where and self.where[1] not in _OPERATORS:
            raise ValueError(f"Unsupported operator: {self.where[1]}")
        if self.order_by and self.order_by[1] not in ("asc", "desc"):
            raise ValueError("order_by direction must be 'asc' or 'desc'")
        if self.limit is not None and self.limit < 1:
            raise ValueError("limit must be greater than 0")


class DocumentStore:
    """Store collaborator: CRUD plus push-based query subscriptions."""

    def __init__(self, engine: Optional[Engine], hub: Optional[SubscriptionHub] = None):
        self.engine = engine
        self.hub = hub or SubscriptionHub()
        self._change_listeners: List[Callable[[str], None]] = []

    @contextmanager
    def session(self) -> Iterator[Session]:
        if self.engine is None:
            raise NotInitializedError("Store is not initialized")
        try:
            with Session(self.engine, expire_on_commit=False) as session:
                yield session
        except SQLAlchemyError as exc:
            logger.error(f"Store operation failed: {exc}")
            raise StoreError("Store operation failed") from exc

    def add_change_listener(self, listener: Callable[[str], None]) -> None:
        """Called with the collection name after every local write."""
        self._change_listeners.append(listener)

    def _model(self, collection: str) -> Type[SQLModel]:
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise ValueError(f"Unknown collection: {collection}") from None

    def _changed(self, collection: str) -> None:
        self.hub.notify(collection)
        for listener in self._change_listeners:
            try:
                listener(collection)
            except Exception as exc:
                logger.error(f"Change listener failed for '{collection}': {exc}")

    def get(self, collection: str, doc_id: str) -> Optional[SQLModel]:
        model = self._model(collection)
        with self.session() as session:
            return session.get(model, doc_id)

    def query(self, query: StoreQuery) -> List[SQLModel]:
        model = self._model(query.collection)
        statement = select(model)
        if query.where:
            field, op, value = query.where
            statement = statement.where(_OPERATORS[op](getattr(model, field), value))
        if query.order_by:
            field, direction = query.order_by
            column = getattr(model, field)
            statement = statement.order_by(
                column.asc() if direction == "asc" else column.desc()
            )
        if query.limit:
            statement = statement.limit(query.limit)
        with self.session() as session:
            return list(session.exec(statement).all())

    def add(self, collection: str, data: Dict[str, Any]) -> SQLModel:
        model = self._model(collection)
        record = model(**data)
        with self.session() as session:
            session.add(record)
            session.commit()
            session.refresh(record)
        logger.info(f"Document added to '{collection}': {record.id}")
        self._changed(collection)
        return record

    def update(self, collection: str, doc_id: str, changes: Dict[str, Any]) -> SQLModel:
        """Field-level merge; concurrent writers are last-write-wins per field."""

        def apply(record: SQLModel) -> None:
            for field, value in changes.items():
                setattr(record, field, value)

        return self.modify(collection, doc_id, apply)

    def modify(
        self,
        collection: str,
        doc_id: str,
        mutate: Callable[[SQLModel], Any],
    ) -> SQLModel:
        """Read-modify-write of one document inside a single transaction."""
        model = self._model(collection)
        with self.session() as session:
            record = session.get(model, doc_id)
            if record is None:
                raise NotFoundError(f"Document not found in '{collection}': {doc_id}")
            mutate(record)
            session.add(record)
            session.commit()
            session.refresh(record)
        logger.info(f"Document updated in '{collection}': {doc_id}")
        self._changed(collection)
        return record

    def delete(self, collection: str, doc_id: str) -> bool:
        model = self._model(collection)
        with self.session() as session:
            record = session.get(model, doc_id)
            if record is None:
                return False
            session.delete(record)
            session.commit()
        logger.info(f"Document deleted from '{collection}': {doc_id}")
        self._changed(collection)
        return True

    def subscribe(
        self,
        query: StoreQuery,
        on_snapshot: Callable[[List[SQLModel]], None],
        on_error: Optional[ErrorCallback] = None,
    ) -> Subscription:
        """
        Deliver the query result now and after every write to the collection.

        Failures while running the query are passed to ``on_error``. Refreshes
        of one subscription are serialised, so a snapshot queried later is
        never delivered before an older one.
        """
        refresh_lock = threading.RLock()

        def refresh(_payload: Any = None) -> None:
            with refresh_lock:
                on_snapshot(self.query(query))

        subscription = self.hub.register(query.collection, refresh, on_error)
        subscription.deliver(None)
        return subscription
