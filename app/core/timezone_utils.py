from datetime import datetime, time, timezone, timedelta
from zoneinfo import ZoneInfo

from app.core.config import settings

RESTAURANT_TZ = ZoneInfo(settings.RESTAURANT_TIMEZONE)


def utcnow() -> datetime:
    """Current time as naive UTC, the form every datetime column is stored in."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_storage(dt: datetime) -> datetime:
    """Normalize an incoming datetime to naive UTC.

    Naive values are read as restaurant local time; aware values are
    converted. Comparisons in SQL then work the same on SQLite and MySQL.
    """
    if dt is None:
        return None
    if getattr(dt, 'tzinfo', None) is None:
        dt = dt.replace(tzinfo=RESTAURANT_TZ)
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def to_local(dt: datetime) -> datetime:
    """Convert a stored naive-UTC datetime to restaurant local time for API responses."""
    if dt is None:
        return None
    if getattr(dt, 'tzinfo', None) is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(RESTAURANT_TZ)


def local_day_range_to_utc(date_str: str):
    """Given a local date string (YYYY-MM-DD), return the naive UTC range
    [start, end) covering that calendar day in the restaurant timezone.

    Example (RESTAURANT_TIMEZONE=America/Sao_Paulo):
      '2026-01-11' -> (2026-01-11 03:00, 2026-01-12 03:00)
    Returns (None, None) when the string cannot be parsed.
    """
    if not date_str:
        return None, None
    try:
        day = datetime.fromisoformat(date_str[:10]).date()
    except ValueError:
        return None, None
    start_local = datetime.combine(day, time.min)
    end_local = start_local + timedelta(days=1)
    return to_storage(start_local), to_storage(end_local)
