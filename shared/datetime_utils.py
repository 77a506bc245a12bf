"""
Date/time helpers, framework-agnostic.

MongoDB hands datetimes back naive (UTC) unless the client is tz-aware, so
everything read from a document goes through ``ensure_utc`` before it is
compared with the clock. Calendar days are ``YYYY-MM-DD`` strings in UTC.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Annotated, Any, Optional, Union

from pydantic import AfterValidator


def utc_now() -> datetime:
    """Default clock: the current timezone-aware UTC time."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Return *value* as an aware UTC datetime; naive values are assumed UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _ensure_utc_optional(value: Optional[datetime]) -> Optional[datetime]:
    return None if value is None else ensure_utc(value)


# Pydantic field type for document timestamps
UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]
OptionalUtcDatetime = Annotated[Optional[datetime], AfterValidator(_ensure_utc_optional)]


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse a date/time value into a timezone-aware UTC datetime.

    Accepts ``None``, a ``datetime``, Unix epoch seconds, or an ISO 8601
    string (a trailing ``"Z"`` is accepted). Returns ``None`` when the value
    cannot be parsed.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    try:
        if isinstance(value, (int, float)):
            return datetime.fromtimestamp(int(value), tz=timezone.utc)
        raw = str(value)
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        return ensure_utc(datetime.fromisoformat(raw))
    except (ValueError, OSError, OverflowError):
        return None


def to_calendar_date(value: Union[str, date, datetime]) -> date:
    """Coerce a ``YYYY-MM-DD`` string, date or datetime into a UTC date."""
    if isinstance(value, datetime):
        return ensure_utc(value).date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def iso_day(value: Union[date, datetime]) -> str:
    """Return the ``YYYY-MM-DD`` form of *value* (UTC for datetimes)."""
    return to_calendar_date(value).isoformat()


def day_diff(later: Union[str, date], earlier: Union[str, date]) -> int:
    """Whole calendar days from *earlier* to *later* (negative if reversed)."""
    return (to_calendar_date(later) - to_calendar_date(earlier)).days


def days_back(today: Union[str, date], days: int) -> str:
    """The ``YYYY-MM-DD`` day *days* before *today*."""
    return (to_calendar_date(today) - timedelta(days=days)).isoformat()
