from datetime import datetime, date, timezone as dt_timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from guthealth.core.config import settings


def get_zoneinfo() -> Optional[ZoneInfo]:
    tz_name = getattr(settings, "DEFAULT_TIMEZONE", None)
    if not tz_name:
        return None
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        return None


def now_local() -> datetime:
    tz = get_zoneinfo()
    return datetime.now(tz) if tz else datetime.now(dt_timezone.utc)


def today_local() -> date:
    return now_local().date()


def utcnow() -> datetime:
    """UTC-naive "now", the form timestamps are stored in."""
    return datetime.now(dt_timezone.utc).replace(tzinfo=None)


def to_utc_naive(dt: datetime | None) -> datetime | None:
    """
    Normalize any datetime to UTC-naive (tzinfo=None) for consistent storage/comparison.
    - Aware datetimes are converted to UTC and tzinfo is stripped
    - Naive datetimes are returned as-is (assumed UTC)
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(dt_timezone.utc).replace(tzinfo=None)


def to_local_date(dt: datetime) -> date:
    """Calendar date of a stored (UTC-naive or aware) timestamp in the configured timezone."""
    tz = get_zoneinfo()
    if tz is None:
        return dt.date()
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=dt_timezone.utc)
    return dt.astimezone(tz).date()


def local_to_utc_naive(dt: datetime | None) -> datetime | None:
    """Client-supplied timestamp to UTC-naive; offset-less input is read in the configured timezone."""
    if dt is not None and dt.tzinfo is None:
        tz = get_zoneinfo()
        if tz is not None:
            dt = dt.replace(tzinfo=tz)
    return to_utc_naive(dt)
