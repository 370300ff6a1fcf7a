"""Schedule Engine for Project Calendar.

Resolves the next occurrence of a recurring project or todo using a hybrid
approach:
- `dateutil.rrule` for weekday patterns (WEEKLY with a set of days)
- `dateutil.relativedelta` for month/year clamping (Jan 31 + 1 month = Feb 29)

All dates are timezone-less calendar dates.

IMPORTANT: This module must NOT import from coordinator.py to avoid circular imports.
Only import from const.py, type_defs.py, utils, and standard libraries.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import date, datetime, time
from typing import TYPE_CHECKING, ClassVar

from dateutil.rrule import FR, MO, SA, SU, TH, TU, WE, WEEKLY, rrule

from .. import const
from ..utils.dt_utils import (
    add_days,
    add_months,
    add_years,
    days_between,
    last_day_of_month,
    month_end,
)

if TYPE_CHECKING:
    from ..type_defs import ScheduleConfig

# Sentinel for the "last day of month" monthly option
MONTHLY_LAST_DAY = "last_day"


def normalize_frequency(raw: str | None) -> str:
    """Map a stored frequency tag to its canonical FREQUENCY_* value.

    Korean tags written by the web client ("매주") and English tags in any
    case are recognized. Unknown tags are returned lower-cased so the engine
    can treat them as identity rules.
    """
    if raw is None:
        return const.FREQUENCY_NONE
    tag = str(raw).strip()
    if tag in const.FREQUENCY_ALIASES:
        return const.FREQUENCY_ALIASES[tag]
    return tag.lower()


def normalize_frequency_options(raw: Iterable[str] | str | None) -> list[str]:
    """Return frequency options as a list of non-empty strings.

    Older records store a single option as a bare string.
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        return [raw.strip()] if raw.strip() else []
    return [str(option).strip() for option in raw if str(option).strip()]


def parse_weekdays(options: Iterable[str]) -> list[int]:
    """Resolve weekday names to sorted unique indexes (0=Sunday .. 6=Saturday).

    Unrecognized names are ignored.
    """
    days: set[int] = set()
    for option in options:
        index = const.WEEKDAY_INDEX_BY_NAME.get(option.strip().lower())
        if index is None:
            const.LOGGER.debug("Ignoring unknown weekday option: %s", option)
            continue
        days.add(index)
    return sorted(days)


def parse_monthly_option(options: list[str]) -> int | str | None:
    """Resolve the monthly option to a day number, MONTHLY_LAST_DAY, or None.

    Only the first option is meaningful. Values such as "15" or "15일" are
    read as a day number; anything outside 1..31 is rejected with a warning.
    """
    if not options:
        return None
    option = options[0].strip()
    if option.lower() in const.MONTHLY_LAST_DAY_OPTIONS:
        return MONTHLY_LAST_DAY

    digits = option.removesuffix("일").strip()
    if digits.isdigit() and 1 <= int(digits) <= 31:
        return int(digits)

    const.LOGGER.warning(
        "Invalid monthly frequency option '%s', falling back to same day of month",
        option,
    )
    return None


class RecurrenceEngine:
    """Calendar-date recurrence resolver for projects and todos.

    Handles the frequency tags:
    - DAILY: +1 day
    - WEEKLY: +7 days, or the next selected weekday
    - MONTHLY: +1 month clamped, a fixed day of month, or the last day
    - YEARLY: +1 year clamped
    - NONE / unknown: identity (the caller must not loop on it)
    """

    # Index 0=Sunday to match weekday_index()
    WEEKDAY_TO_RRULE: ClassVar[list] = [SU, MO, TU, WE, TH, FR, SA]

    RRULE_DAY_NAMES: ClassVar[list[str]] = ["SU", "MO", "TU", "WE", "TH", "FR", "SA"]

    def __init__(self, config: ScheduleConfig) -> None:
        """Initialize the recurrence engine with configuration.

        Args:
            config: ScheduleConfig TypedDict containing frequency and options.
        """
        self._frequency = normalize_frequency(config.get("frequency"))
        self._options = normalize_frequency_options(config.get("frequency_options"))

        self._weekdays: list[int] = []
        self._monthly_option: int | str | None = None
        if self._frequency == const.FREQUENCY_WEEKLY:
            self._weekdays = parse_weekdays(self._options)
        elif self._frequency == const.FREQUENCY_MONTHLY:
            self._monthly_option = parse_monthly_option(self._options)

    @property
    def frequency(self) -> str:
        """Return the canonical frequency tag."""
        return self._frequency

    @property
    def is_recurring(self) -> bool:
        """Return True if the rule ever advances a date."""
        return self._frequency in (
            const.FREQUENCY_DAILY,
            const.FREQUENCY_WEEKLY,
            const.FREQUENCY_MONTHLY,
            const.FREQUENCY_YEARLY,
        )

    def get_next_occurrence(self, current: date) -> date:
        """Calculate the occurrence that follows `current`.

        Returns:
            The next date. For NONE or an unknown frequency `current` itself
            is returned unchanged.
        """
        freq = self._frequency

        if freq == const.FREQUENCY_DAILY:
            return add_days(current, 1)
        if freq == const.FREQUENCY_WEEKLY:
            if not self._weekdays:
                return add_days(current, 7)
            return self._calculate_with_rrule(current)
        if freq == const.FREQUENCY_MONTHLY:
            return self._calculate_monthly(current)
        if freq == const.FREQUENCY_YEARLY:
            return add_years(current, 1)

        const.LOGGER.debug(
            "RecurrenceEngine: Frequency '%s' does not advance dates", freq
        )
        return current

    @property
    def counts_from_anchor(self) -> bool:
        """Return True if the k-th occurrence is anchor + k months or years.

        Stepping from the previous occurrence would keep the clamped day
        (Jan 31 -> Feb 29 -> Mar 29), so these rules always count from the
        series anchor instead.
        """
        if self._frequency == const.FREQUENCY_YEARLY:
            return True
        return (
            self._frequency == const.FREQUENCY_MONTHLY and self._monthly_option is None
        )

    def iter_occurrences(self, start: date, until: date) -> Iterator[date]:
        """Yield successive occurrences strictly after `start` up to `until`.

        Every occurrence is at least one day after the previous one, so the
        walk never needs more steps than there are days in the range. Stops
        early if the rule does not move forward.
        """
        current = start
        for step in range(1, days_between(start, until) + 1):
            if self.counts_from_anchor:
                candidate = self._nth_from_anchor(start, step)
            else:
                candidate = self.get_next_occurrence(current)
            if candidate <= current or candidate > until:
                return
            yield candidate
            current = candidate

    def to_rrule_string(self) -> str:
        """Generate RFC 5545 RRULE string for calendar export.

        Returns:
            RRULE string (e.g., "FREQ=WEEKLY;INTERVAL=1;BYDAY=WE,FR")
            or empty string if not representable.
        """
        freq = self._frequency

        if freq == const.FREQUENCY_DAILY:
            return "FREQ=DAILY;INTERVAL=1"
        if freq == const.FREQUENCY_WEEKLY:
            base = "FREQ=WEEKLY;INTERVAL=1"
            if not self._weekdays:
                return base
            days = ",".join(self.RRULE_DAY_NAMES[d] for d in self._weekdays)
            return f"{base};BYDAY={days}"
        if freq == const.FREQUENCY_MONTHLY:
            if self._monthly_option == MONTHLY_LAST_DAY:
                return "FREQ=MONTHLY;BYMONTHDAY=-1"
            if isinstance(self._monthly_option, int):
                return f"FREQ=MONTHLY;BYMONTHDAY={self._monthly_option}"
            return "FREQ=MONTHLY;INTERVAL=1"
        if freq == const.FREQUENCY_YEARLY:
            return "FREQ=YEARLY;INTERVAL=1"
        return ""

    # =========================================================================
    # Private: rrule-based calculation (WEEKLY with selected days)
    # =========================================================================

    def _calculate_with_rrule(self, current: date) -> date:
        """Return the next selected weekday strictly after `current`.

        rrule only yields days on or after dtstart, so the first match is the
        smallest selected weekday later this week, or the smallest one next
        week when none is left.
        """
        start = datetime.combine(current, time.min)
        rule = rrule(
            WEEKLY,
            dtstart=start,
            byweekday=[self.WEEKDAY_TO_RRULE[d] for d in self._weekdays],
        )
        next_occurrence = rule.after(start, inc=False)
        if next_occurrence is None:
            # Unreachable for an unbounded rule
            return add_days(current, 7)
        return next_occurrence.date()

    # =========================================================================
    # Private: relativedelta-based calculation (clamping frequencies)
    # =========================================================================

    def _calculate_monthly(self, current: date) -> date:
        """Calculate the next monthly occurrence with clamping.

        - No option, or the option equals today's day: +1 month, clamped.
        - Day number: that day of next month, clamped to its last day.
        - Last-day option: last day of next month.
        """
        option = self._monthly_option
        if option is None or option == current.day:
            return add_months(current, 1)

        next_month = add_months(current.replace(day=1), 1)
        if option == MONTHLY_LAST_DAY:
            return month_end(next_month)

        last_day = last_day_of_month(next_month.year, next_month.month)
        return next_month.replace(day=min(int(option), last_day))

    def _nth_from_anchor(self, anchor: date, step: int) -> date:
        """Return the `step`-th occurrence of a month or year rule, clamped."""
        if self._frequency == const.FREQUENCY_YEARLY:
            return add_years(anchor, step)
        return add_months(anchor, step)


# =============================================================================
# Module-level convenience functions
# =============================================================================


def next_occurrence(
    current: date,
    frequency: str | None,
    options: Iterable[str] | str | None = None,
) -> date:
    """Calculate the next occurrence date using RecurrenceEngine.

    Example:
        next_occurrence(date(2024, 1, 31), "매월", ["말일"]) -> date(2024, 2, 29)
    """
    config: ScheduleConfig = {
        "frequency": frequency or const.FREQUENCY_NONE,
        "frequency_options": normalize_frequency_options(options),
    }
    return RecurrenceEngine(config).get_next_occurrence(current)
