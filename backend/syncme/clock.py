"""
UTC timestamp helpers shared by the service and the client.

updatedAt must strictly advance on every mutation. Two writes landing in the
same clock tick would otherwise produce equal timestamps, so next_timestamp()
bumps the new value one microsecond past the previous one when needed.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

_TICK = timedelta(microseconds=1)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite returns them without tzinfo)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def next_timestamp(previous: Optional[datetime] = None) -> datetime:
    """Current UTC time, guaranteed later than `previous`."""
    now = utc_now()
    if previous is not None:
        floor = as_utc(previous) + _TICK
        if now < floor:
            return floor
    return now
