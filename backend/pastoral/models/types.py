from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator

from pastoral.core.timeutils import ensure_aware


class AwareDateTime(TypeDecorator):
    """Timezone-aware instant, stored as UTC; naive values read back as UTC."""

    impl = DateTime
    cache_ok = True

    def __init__(self):
        super().__init__(timezone=True)

    def process_bind_param(self, value: datetime | None, dialect):
        if value is None:
            return None
        return ensure_aware(value).astimezone(timezone.utc)

    def process_result_value(self, value: datetime | None, dialect):
        return ensure_aware(value)
