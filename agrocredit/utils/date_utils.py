"""Date manipulation utilities"""

from datetime import date, datetime, time, timezone


def utcnow() -> datetime:
    """Current instant as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def ensure_utc(value: date | datetime) -> datetime:
    """
    Normalize to an aware UTC datetime.

    Plain dates become midnight UTC. Naive datetimes are taken to be UTC
    (SQLite drops tzinfo on round-trip).
    """
    if not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
