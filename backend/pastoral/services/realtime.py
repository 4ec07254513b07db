"""
Push-based live subscriptions.

Every listener is represented by a ``Subscription`` handle. Once ``close()``
returns, the hub never invokes that handle's callbacks again.
"""

from __future__ import annotations

import itertools
import logging
import threading
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[Any], None]
ErrorCallback = Callable[[Exception], None]


class Subscription:
    """Cancelable handle for one listener."""

    _ids = itertools.count(1)

    def __init__(
        self,
        hub: "SubscriptionHub",
        topic: str,
        on_event: SnapshotCallback,
        on_error: Optional[ErrorCallback] = None,
    ):
        self.id = next(self._ids)
        self.topic = topic
        self._hub = hub
        self._on_event = on_event
        self._on_error = on_error
        self._closed = threading.Event()

    @property
    def active(self) -> bool:
        return not self._closed.is_set()

    def close(self) -> None:
        if self._closed.is_set():
            return
        self._closed.set()
        self._hub._remove(self)
        logger.debug(f"Subscription {self.id} on '{self.topic}' closed")

    def deliver(self, payload: Any) -> None:
        if not self.active:
            return
        try:
            self._on_event(payload)
        except Exception as exc:
            self.fail(exc)

    def fail(self, exc: Exception) -> None:
        if not self.active:
            return
        if self._on_error is None:
            logger.error(
                f"Unhandled error in subscription {self.id} on '{self.topic}': {exc}",
                exc_info=exc,
            )
            return
        self._on_error(exc)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class SubscriptionHub:
    """Registry of listeners keyed by topic (a collection name)."""

    def __init__(self):
        # {topic: [subscription, ...]}
        self._subscriptions: Dict[str, List[Subscription]] = {}
        self._lock = threading.Lock()

    def register(
        self,
        topic: str,
        on_event: SnapshotCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> Subscription:
        subscription = Subscription(self, topic, on_event, on_error)
        with self._lock:
            self._subscriptions.setdefault(topic, []).append(subscription)
        logger.debug(f"Subscription {subscription.id} registered on '{topic}'")
        return subscription

    def notify(self, topic: str, payload: Any = None) -> int:
        """Deliver ``payload`` to every active listener of ``topic``."""
        with self._lock:
            listeners = list(self._subscriptions.get(topic, ()))
        for subscription in listeners:
            subscription.deliver(payload)
        return len(listeners)

    def fail(self, topic: str, exc: Exception) -> None:
        with self._lock:
            listeners = list(self._subscriptions.get(topic, ()))
        for subscription in listeners:
            subscription.fail(exc)

    def listener_count(self, topic: str) -> int:
        with self._lock:
            return len(self._subscriptions.get(topic, ()))

    def close_all(self) -> None:
        with self._lock:
            listeners = [s for subs in self._subscriptions.values() for s in subs]
        for subscription in listeners:
            subscription.close()

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            listeners = self._subscriptions.get(subscription.topic)
            if not listeners:
                return
            if subscription in listeners:
                listeners.remove(subscription)
            if not listeners:
                del self._subscriptions[subscription.topic]


Opener = Callable[[Any, SnapshotCallback, ErrorCallback], Subscription]


class ScopedSubscription:
    """
    One live list whose scope (e.g. the observed member) can change.

    Switching scope closes the previous handle, clears the cached items and
    opens a new subscription. Callbacks are tagged with a generation number
    so anything still arriving for an older scope is discarded.
    """

    def __init__(
        self,
        opener: Opener,
        on_error: Optional[ErrorCallback] = None,
        on_items: Optional[SnapshotCallback] = None,
    ):
        self._opener = opener
        self._on_error = on_error
        self._on_items = on_items
        self._handle: Optional[Subscription] = None
        self._generation = 0
        self.scope: Any = None
        self.items: list = []
        self.loading = False
        self.error: Optional[Exception] = None

    @property
    def generation(self) -> int:
        return self._generation

    def set_scope(self, scope: Any) -> None:
        if self._handle is not None and scope == self.scope:
            return
        self.release()
        self.scope = scope
        if scope is None:
            return

        self._generation += 1
        generation = self._generation
        self.loading = True
        self._handle = self._opener(
            scope,
            lambda items: self._receive(generation, items),
            lambda exc: self._fail(generation, exc),
        )

    def release(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
        self.items = []
        self.loading = False
        self.error = None

    def close(self) -> None:
        self.release()
        self.scope = None

    def _receive(self, generation: int, items) -> None:
        if generation != self._generation:
            logger.debug(f"Dropping stale snapshot from generation {generation}")
            return
        self.items = list(items)
        self.loading = False
        self.error = None
        if self._on_items is not None:
            self._on_items(self.items)

    def _fail(self, generation: int, exc: Exception) -> None:
        if generation != self._generation:
            return
        logger.error(f"Live subscription for scope {self.scope!r} failed: {exc}")
        self.error = exc
        self.loading = False
        if self._on_error is not None:
            self._on_error(exc)
