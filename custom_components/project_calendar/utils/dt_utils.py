"""Date and time utilities for Project Calendar.

Pure Python date/time functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

⚠️ UTILS PURITY: NO `homeassistant.*` imports allowed.
   Uses standard library: datetime, zoneinfo, calendar, plus dateutil.

Calendar policy: stored dates are timezone-less calendar dates. Date
arithmetic never converts through UTC; only timestamps (finishedAt) carry a
timezone, and "today" is the local calendar date of an aware `now`.

Functions:
    - dt_now_local: Current local datetime
    - as_utc: Conversion of timestamps to UTC
    - dt_parse_date / dt_format_date: YYYY-MM-DD parsing and formatting
    - dt_parse_datetime: ISO 8601 timestamp parsing
    - add_days / add_months / add_years: Calendar arithmetic with clamping
    - last_day_of_month / month_end / horizon_end: Month-end resolution
    - weekday_index: Sunday-based weekday number
"""

from __future__ import annotations

from calendar import monthrange
from datetime import UTC, date, datetime, timedelta
import logging
from zoneinfo import ZoneInfo

from dateutil.relativedelta import relativedelta

# Module-level logger (no HA dependency)
_LOGGER = logging.getLogger(__name__)

# Default timezone - can be overridden by caller
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the default timezone for all dt_utils functions.

    Call this during integration setup to configure the user's timezone.
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


def get_default_timezone() -> ZoneInfo:
    """Get the current default timezone."""
    return DEFAULT_TIME_ZONE


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_now_local(tz: ZoneInfo | None = None) -> datetime:
    """Return the current datetime in local timezone (timezone-aware)."""
    return datetime.now(tz or DEFAULT_TIME_ZONE)


# ==============================================================================
# Timezone Conversion
# ==============================================================================


def as_utc(dt_obj: datetime) -> datetime:
    """Convert a datetime to UTC timezone.

    Naive datetimes are taken to be UTC already.
    """
    if dt_obj.tzinfo is None:
        return dt_obj.replace(tzinfo=UTC)
    return dt_obj.astimezone(UTC)


def as_local(dt_obj: datetime) -> datetime:
    """Convert a datetime to the default timezone.

    Naive datetimes are taken to be local wall-clock time already.
    """
    if dt_obj.tzinfo is None:
        return dt_obj.replace(tzinfo=DEFAULT_TIME_ZONE)
    return dt_obj.astimezone(DEFAULT_TIME_ZONE)


# ==============================================================================
# Parsing / Formatting
# ==============================================================================


def dt_parse_date(value: str | date | None) -> date | None:
    """Safely parse a calendar date.

    Accepts:
    - "2025-04-07" (ISO date)
    - "2025-04-07T10:00:00Z" (the date prefix of an ISO datetime is used as-is,
      without timezone conversion)
    - a `date` or `datetime` object

    Returns:
        datetime.date or None if the value is empty or unparseable.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        _LOGGER.debug("dt_parse_date: Unparseable date %r", value)
        return None


def dt_format_date(value: date) -> str:
    """Format a date as YYYY-MM-DD."""
    return value.isoformat()


def dt_parse_datetime(value: str | datetime | None) -> datetime | None:
    """Parse an ISO 8601 timestamp into an aware UTC datetime.

    Naive timestamps are read as UTC. A trailing "Z" is accepted.

    Returns:
        Aware datetime in UTC, or None if the value is empty or unparseable.
    """
    if not value:
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    if not isinstance(value, str):
        return None

    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        _LOGGER.debug("dt_parse_datetime: Unparseable timestamp %r", value)
        return None
    return as_utc(parsed)


# ==============================================================================
# Calendar Arithmetic
# ==============================================================================


def add_days(value: date, days: int) -> date:
    """Return `value` shifted by a number of days (may be negative)."""
    return value + timedelta(days=days)


def add_months(value: date, months: int) -> date:
    """Return `value` shifted by calendar months, clamped to month end.

    Example:
        add_months(date(2024, 1, 31), 1) -> date(2024, 2, 29)
    """
    return value + relativedelta(months=months)


def add_years(value: date, years: int) -> date:
    """Return `value` shifted by years, clamped (Feb 29 -> Feb 28)."""
    return value + relativedelta(years=years)


def last_day_of_month(year: int, month: int) -> int:
    """Return the number of the last day in a month."""
    return monthrange(year, month)[1]


def month_end(value: date) -> date:
    """Return the last calendar day of the month containing `value`."""
    return value.replace(day=last_day_of_month(value.year, value.month))


def horizon_end(today: date, months: int = 2) -> date:
    """Return the last day of the materialization window.

    The window closes the day before the first of the month `months` months
    after the current one. With the default of two this is the last day of
    next month.

    Example:
        horizon_end(date(2024, 11, 5)) -> date(2024, 12, 31)
    """
    first_of_month = today.replace(day=1)
    return first_of_month + relativedelta(months=months) - timedelta(days=1)


def weekday_index(value: date) -> int:
    """Return the weekday number with 0=Sunday .. 6=Saturday."""
    return value.isoweekday() % 7


def days_between(start: date, end: date) -> int:
    """Return the signed number of days from `start` to `end`."""
    return (end - start).days
