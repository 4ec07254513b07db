from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo

from pastoral.core.config import settings


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes read back from SQLite."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def local_day(value: datetime, tz: tzinfo | None = None) -> date:
    """Calendar day of an instant in the configured local zone."""
    tz = tz or settings.local_tz
    return ensure_aware(value).astimezone(tz).date()


def local_today(tz: tzinfo | None = None) -> date:
    return datetime.now(tz or settings.local_tz).date()


def to_millis(value: datetime) -> int:
    return int(ensure_aware(value).timestamp() * 1000)
