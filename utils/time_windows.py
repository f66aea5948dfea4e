"""Calendar-day windows in the reference timezone.

Every day bucket is computed in a single reference timezone
(``REFERENCE_TIMEZONE``) and converted back to UTC instants for range queries.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import NamedTuple
from zoneinfo import ZoneInfo

from config import Config
from errors import InvalidInputError


class DayRange(NamedTuple):
    start: datetime
    end: datetime
    local_date: date


class RecentWindows(NamedTuple):
    start: datetime
    end: datetime
    days: list[date]
    index: dict[date, int]


def get_reference_timezone(name: str | None = None) -> ZoneInfo:
    """Resolve the reference timezone, defaulting to the configured one."""
    return ZoneInfo(name or Config.REFERENCE_TIMEZONE)


def _utcnow(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def local_midnight_utc(day: date, tz: ZoneInfo) -> datetime:
    """UTC instant of local midnight at the start of ``day``."""
    return datetime.combine(day, time.min, tzinfo=tz).astimezone(timezone.utc)


def local_date(instant: datetime, tz: ZoneInfo | None = None) -> date:
    """Calendar date of a UTC instant in the reference timezone."""
    tz = tz or get_reference_timezone()
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(tz).date()


def today(tz: ZoneInfo | None = None, now: datetime | None = None) -> date:
    return local_date(_utcnow(now), tz)


def day_range(
    reference_date: date | None = None,
    tz: ZoneInfo | None = None,
    now: datetime | None = None,
) -> DayRange:
    """UTC bounds of the local calendar day containing ``reference_date``.

    ``reference_date`` is a plain calendar date in the reference timezone, not
    a UTC instant. When omitted, today's local date is used. The end bound is
    the next local midnight.
    """
    tz = tz or get_reference_timezone()
    if isinstance(reference_date, datetime):
        reference_date = reference_date.date()
    day = reference_date or today(tz, now)
    return DayRange(
        start=local_midnight_utc(day, tz),
        end=local_midnight_utc(day + timedelta(days=1), tz),
        local_date=day,
    )


def recent_windows(
    days: int,
    tz: ZoneInfo | None = None,
    now: datetime | None = None,
) -> RecentWindows:
    """UTC bounds covering the last ``days`` local calendar days, today included.

    Returns the ordered dates (oldest first) and a lookup from date to its
    zero-based position.
    """
    if days < 1:
        raise InvalidInputError(f"days must be at least 1, got {days}")

    tz = tz or get_reference_timezone()
    end_day = today(tz, now)
    start_day = end_day - timedelta(days=days - 1)

    day_list = [start_day + timedelta(days=i) for i in range(days)]
    index = {d: i for i, d in enumerate(day_list)}

    return RecentWindows(
        start=local_midnight_utc(start_day, tz),
        end=local_midnight_utc(end_day + timedelta(days=1), tz),
        days=day_list,
        index=index,
    )


def utc_day_range(reference_date: date | None = None, now: datetime | None = None) -> tuple[datetime, datetime]:
    """UTC bounds of a UTC calendar day (today when omitted)."""
    day = reference_date or _utcnow(now).date()
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


def rolling_cutoff(days: int, now: datetime | None = None) -> datetime:
    """Start of a rolling window reaching ``days`` back from now."""
    if days < 1:
        raise InvalidInputError(f"days must be at least 1, got {days}")
    return _utcnow(now) - timedelta(days=days)
