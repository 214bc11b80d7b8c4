"""Date and time rendering in the platform's fixed en-US convention.

All helpers are total: they accept any :class:`~datetime.datetime`, convert
it to the display timezone (naive values are taken as UTC) and never raise.
Formatting is done by hand rather than with ``%-I`` / ``%-d`` so output does
not depend on the platform's ``strftime``.

Examples (display timezone UTC)::

    >>> dt = datetime(2025, 11, 1, 9, 0, tzinfo=UTC)
    >>> format_long_date(dt)
    'Saturday, November 1, 2025'
    >>> format_time(dt)
    '9:00 AM'
    >>> format_card_datetime(dt)
    'Nov 1, 2025, 9:00 AM'
"""

from __future__ import annotations

from datetime import UTC, datetime, tzinfo

__all__ = [
    "to_display_tz",
    "format_long_date",
    "format_time",
    "format_card_datetime",
    "same_calendar_day",
]

_WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
_MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def to_display_tz(dt: datetime, tz: tzinfo = UTC) -> datetime:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(tz)


def format_long_date(dt: datetime, tz: tzinfo = UTC) -> str:
    local = to_display_tz(dt, tz)
    return f"{_WEEKDAYS[local.weekday()]}, {_MONTHS[local.month - 1]} {local.day}, {local.year}"


def format_time(dt: datetime, tz: tzinfo = UTC) -> str:
    """12-hour clock, e.g. ``"12:05 PM"``, ``"9:00 AM"``."""
    local = to_display_tz(dt, tz)
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return f"{hour}:{local.minute:02d} {meridiem}"


def format_card_datetime(dt: datetime, tz: tzinfo = UTC) -> str:
    """Compact form used on result cards."""
    local = to_display_tz(dt, tz)
    return f"{_MONTHS[local.month - 1][:3]} {local.day}, {local.year}, {format_time(local, tz)}"


def same_calendar_day(a: datetime, b: datetime, tz: tzinfo = UTC) -> bool:
    """``True`` when *a* and *b* render to the same long date in *tz*."""
    return format_long_date(a, tz) == format_long_date(b, tz)
