"""
Process-wide notice board (toasts).

Created once at application startup and kept on ``app.state``; it is only
changed through its own methods and never reset mid-session. Notices with a
positive duration disappear once that many milliseconds have passed.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple
from uuid import uuid4

from pastoral.core.config import settings
from pastoral.core.timeutils import utcnow
from pastoral.schemas.notice import Notice, NoticeKind
from pastoral.services.realtime import Subscription, SubscriptionHub

logger = logging.getLogger(__name__)

NOTICE_TOPIC = "notices"


class NoticeBoard:
    def __init__(
        self,
        default_duration: Optional[int] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.default_duration = (
            settings.NOTICE_DURATION_MS if default_duration is None else default_duration
        )
        self._clock = clock
        self._notices: List[Notice] = []
        self._lock = threading.Lock()
        self._hub = SubscriptionHub()

    def _is_live(self, notice: Notice, now: datetime) -> bool:
        if notice.duration <= 0:
            return True
        return now < notice.created_at + timedelta(milliseconds=notice.duration)

    @property
    def notices(self) -> Tuple[Notice, ...]:
        now = self._clock()
        with self._lock:
            self._notices = [n for n in self._notices if self._is_live(n, now)]
            return tuple(self._notices)

    def show(
        self,
        message: str,
        kind: NoticeKind = "info",
        duration: Optional[int] = None,
    ) -> str:
        notice = Notice(
            id=f"notice-{uuid4().hex}",
            message=message,
            kind=kind,
            duration=self.default_duration if duration is None else duration,
            created_at=self._clock(),
        )
        with self._lock:
            self._notices.append(notice)
        log = logger.warning if kind == "error" else logger.info
        log(f"Notice ({kind}): {message}")
        self._hub.notify(NOTICE_TOPIC, notice)
        return notice.id

    def success(self, message: str, duration: Optional[int] = None) -> str:
        return self.show(message, "success", duration)

    def error(self, message: str, duration: Optional[int] = None) -> str:
        return self.show(message, "error", duration)

    def info(self, message: str, duration: Optional[int] = None) -> str:
        return self.show(message, "info", duration)

    def warning(self, message: str, duration: Optional[int] = None) -> str:
        return self.show(message, "warning", duration)

    def dismiss(self, notice_id: str) -> bool:
        with self._lock:
            remaining = [n for n in self._notices if n.id != notice_id]
            found = len(remaining) != len(self._notices)
            self._notices = remaining
        return found

    def clear_all(self) -> None:
        with self._lock:
            self._notices = []

    def listen(self, callback: Callable[[Notice], None]) -> Subscription:
        """Receive every notice posted after this call."""
        return self._hub.register(NOTICE_TOPIC, callback)
