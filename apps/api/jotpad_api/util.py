from __future__ import annotations

from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def next_timestamp(previous: datetime) -> datetime:
    """
    Current time, bumped past `previous` when the clock has not advanced
    (coarse clocks, or two writes inside the same tick).
    """
    now = utc_now()
    floor = ensure_utc(previous) + timedelta(microseconds=1)
    return now if now >= floor else floor


def rfc3339(value: datetime) -> str:
    return ensure_utc(value).isoformat().replace("+00:00", "Z")


def rfc3339_now() -> str:
    return rfc3339(utc_now())
