"""
Datetime utility functions for handling timezone-aware datetimes.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional


def utc_now() -> datetime:
    """
    Return the current datetime in UTC timezone.

    This utility provides a consistent, mockable way to get the current UTC time
    throughout the codebase. The adaptive engine and the result aggregator take
    it as their default clock so tests can substitute a fixed one.

    Returns:
        A timezone-aware datetime object representing the current time in UTC.

    Example:
        >>> from placement.core.datetime_utils import utc_now
        >>> current_time = utc_now()
        >>> current_time.tzinfo == timezone.utc
        True
    """
    return datetime.now(timezone.utc)


def ensure_timezone_aware(dt: Optional[datetime]) -> datetime:
    """
    Ensure a datetime object is timezone-aware (UTC).
    Persisted history written by older clients may carry naive ISO strings.

    Args:
        dt: The datetime to ensure is timezone-aware

    Returns:
        A timezone-aware datetime object in UTC

    Raises:
        ValueError: If dt is None
    """
    if dt is None:
        raise ValueError("datetime cannot be None")
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def to_milliseconds(delta: timedelta) -> int:
    """Whole milliseconds in a timedelta, truncated toward zero."""
    return int(delta / timedelta(milliseconds=1))


def format_relative_date(dt: datetime, now: Optional[datetime] = None) -> str:
    """
    Format a timestamp as a short human-readable label.

    Same-day timestamps render as "Today HH:MM", the previous day as
    "Yesterday HH:MM", anything older as "d/m/yy". Calendar days are compared
    in the timezone of ``now``.

    Args:
        dt: Timestamp to describe
        now: Reference time (defaults to utc_now())

    Returns:
        Label such as "Today 09:05", "Yesterday 18:40" or "3/7/25"
    """
    reference = ensure_timezone_aware(now) if now is not None else utc_now()
    local = ensure_timezone_aware(dt).astimezone(reference.tzinfo)

    today = reference.date()
    day = local.date()
    clock = f"{local.hour:02d}:{local.minute:02d}"

    if day == today:
        return f"Today {clock}"
    if day == today - timedelta(days=1):
        return f"Yesterday {clock}"
    return f"{local.day}/{local.month}/{local.year % 100:02d}"
