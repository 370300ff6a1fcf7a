"""Unit tests for schedule_engine.py RecurrenceEngine.

Covers:
- Weekday sets resolved through rrule (next selected day strictly after)
- Monthly clamping, fixed day and last-day options
- Feb 29 yearly handling
- Identity for NONE / unknown frequencies and iterator termination
- RRULE export for calendar events
"""

from datetime import date
from typing import TYPE_CHECKING

import pytest

from custom_components.project_calendar import const
from custom_components.project_calendar.engines.schedule_engine import (
    MONTHLY_LAST_DAY,
    RecurrenceEngine,
    next_occurrence,
    normalize_frequency,
    normalize_frequency_options,
    parse_monthly_option,
    parse_weekdays,
)

if TYPE_CHECKING:
    from custom_components.project_calendar.type_defs import ScheduleConfig


def make_engine(frequency: str, options: list[str] | None = None) -> RecurrenceEngine:
    """Build an engine from a frequency tag and options."""
    config: ScheduleConfig = {
        "frequency": frequency,
        "frequency_options": options or [],
    }
    return RecurrenceEngine(config)


# =============================================================================
# Tag normalization
# =============================================================================


class TestNormalization:
    """Frequency tags and options from stored records."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("매일", const.FREQUENCY_DAILY),
            ("매주", const.FREQUENCY_WEEKLY),
            ("매월", const.FREQUENCY_MONTHLY),
            ("매년", const.FREQUENCY_YEARLY),
            ("설정 안함", const.FREQUENCY_NONE),
            ("", const.FREQUENCY_NONE),
            (None, const.FREQUENCY_NONE),
            ("Weekly", const.FREQUENCY_WEEKLY),
            ("fortnightly", "fortnightly"),
        ],
    )
    def test_normalize_frequency(self, raw, expected) -> None:
        assert normalize_frequency(raw) == expected

    def test_bare_string_option_becomes_list(self) -> None:
        assert normalize_frequency_options("말일") == ["말일"]
        assert normalize_frequency_options(" ") == []
        assert normalize_frequency_options(None) == []
        assert normalize_frequency_options(["수", "", "금"]) == ["수", "금"]

    def test_parse_weekdays_sorted_unique(self) -> None:
        assert parse_weekdays(["금", "수", "wed", "nonsense"]) == [3, 5]

    @pytest.mark.parametrize(
        ("options", "expected"),
        [
            (["말일"], MONTHLY_LAST_DAY),
            (["last"], MONTHLY_LAST_DAY),
            (["15"], 15),
            (["15일"], 15),
            (["0"], None),
            (["32"], None),
            (["soon"], None),
            ([], None),
        ],
    )
    def test_parse_monthly_option(self, options, expected) -> None:
        assert parse_monthly_option(options) == expected


# =============================================================================
# Simple frequencies
# =============================================================================


class TestSimpleFrequencies:
    """Daily, plain weekly and yearly rules."""

    def test_daily(self) -> None:
        assert make_engine("매일").get_next_occurrence(date(2024, 12, 31)) == date(
            2025, 1, 1
        )

    def test_weekly_without_days_adds_seven(self) -> None:
        assert make_engine("매주").get_next_occurrence(date(2024, 11, 4)) == date(
            2024, 11, 11
        )

    def test_yearly_from_feb29_clamps(self) -> None:
        assert make_engine("매년").get_next_occurrence(date(2024, 2, 29)) == date(
            2025, 2, 28
        )

    @pytest.mark.parametrize("frequency", ["설정 안함", "none", "fortnightly"])
    def test_non_advancing_frequency_is_identity(self, frequency: str) -> None:
        engine = make_engine(frequency)
        assert not engine.is_recurring
        assert engine.get_next_occurrence(date(2024, 11, 4)) == date(2024, 11, 4)


# =============================================================================
# Weekly with selected days
# =============================================================================


class TestWeeklyDays:
    """Weekday sets resolve to the next selected day strictly after."""

    def test_wed_fri_from_monday(self) -> None:
        """Monday 2024-11-04 with Wed/Fri gives 11-06 then 11-08."""
        engine = make_engine("매주", ["수", "금"])
        first = engine.get_next_occurrence(date(2024, 11, 4))
        second = engine.get_next_occurrence(first)

        assert first == date(2024, 11, 6)
        assert second == date(2024, 11, 8)

    def test_wraps_to_next_week(self) -> None:
        engine = make_engine("매주", ["수", "금"])
        assert engine.get_next_occurrence(date(2024, 11, 8)) == date(2024, 11, 13)

    def test_same_weekday_is_a_week_later(self) -> None:
        engine = make_engine("매주", ["수"])
        assert engine.get_next_occurrence(date(2024, 11, 6)) == date(2024, 11, 13)

    def test_unknown_day_names_fall_back_to_seven_days(self) -> None:
        engine = make_engine("매주", ["someday"])
        assert engine.get_next_occurrence(date(2024, 11, 4)) == date(2024, 11, 11)


# =============================================================================
# Monthly rules
# =============================================================================


class TestMonthly:
    """Monthly frequency options and clamping."""

    def test_last_day_sequence(self) -> None:
        """말일 from 2024-01-31 gives 02-29 then 03-31."""
        engine = make_engine("매월", ["말일"])
        first = engine.get_next_occurrence(date(2024, 1, 31))
        second = engine.get_next_occurrence(first)

        assert first == date(2024, 2, 29)
        assert second == date(2024, 3, 31)

    def test_no_option_clamps(self) -> None:
        engine = make_engine("매월")
        assert engine.get_next_occurrence(date(2024, 1, 31)) == date(2024, 2, 29)

    def test_fixed_day_is_clamped_to_short_month(self) -> None:
        engine = make_engine("매월", ["31"])
        assert engine.get_next_occurrence(date(2024, 1, 10)) == date(2024, 2, 29)

    def test_fixed_day_equal_to_current_adds_month(self) -> None:
        engine = make_engine("매월", ["15일"])
        assert engine.get_next_occurrence(date(2024, 11, 15)) == date(2024, 12, 15)

    def test_fixed_day_moves_to_next_month(self) -> None:
        engine = make_engine("매월", ["15"])
        assert engine.get_next_occurrence(date(2024, 11, 3)) == date(2024, 12, 15)

    def test_invalid_option_falls_back_to_plain_month(self) -> None:
        engine = make_engine("매월", ["abc"])
        assert engine.get_next_occurrence(date(2024, 11, 3)) == date(2024, 12, 3)

    def test_year_boundary(self) -> None:
        engine = make_engine("매월", ["말일"])
        assert engine.get_next_occurrence(date(2024, 12, 31)) == date(2025, 1, 31)


# =============================================================================
# Iteration
# =============================================================================


class TestIterOccurrences:
    """iter_occurrences yields strictly increasing dates up to the bound."""

    def test_daily_until_inclusive(self) -> None:
        engine = make_engine("매일")
        dates = list(engine.iter_occurrences(date(2024, 11, 28), date(2024, 12, 1)))
        assert dates == [
            date(2024, 11, 29),
            date(2024, 11, 30),
            date(2024, 12, 1),
        ]

    def test_identity_rule_yields_nothing(self) -> None:
        engine = make_engine("fortnightly")
        assert list(engine.iter_occurrences(date(2024, 1, 1), date(2025, 1, 1))) == []

    def test_start_after_until_yields_nothing(self) -> None:
        engine = make_engine("매일")
        assert list(engine.iter_occurrences(date(2025, 1, 1), date(2024, 1, 1))) == []

    def test_monthly_returns_to_anchor_day_after_short_month(self) -> None:
        engine = make_engine("매월")
        dates = list(engine.iter_occurrences(date(2024, 1, 31), date(2024, 5, 31)))
        assert dates == [
            date(2024, 2, 29),
            date(2024, 3, 31),
            date(2024, 4, 30),
            date(2024, 5, 31),
        ]

    def test_yearly_leap_day_anchor(self) -> None:
        engine = make_engine("매년")
        dates = list(engine.iter_occurrences(date(2024, 2, 29), date(2028, 12, 31)))
        assert dates == [
            date(2025, 2, 28),
            date(2026, 2, 28),
            date(2027, 2, 28),
            date(2028, 2, 29),
        ]

    def test_fixed_day_option_walks_from_previous(self) -> None:
        engine = make_engine("매월", ["31"])
        dates = list(engine.iter_occurrences(date(2024, 1, 31), date(2024, 4, 30)))
        assert dates == [date(2024, 2, 29), date(2024, 3, 31), date(2024, 4, 30)]

    def test_old_daily_anchor_reaches_bound(self) -> None:
        engine = make_engine("매일")
        dates = list(engine.iter_occurrences(date(2008, 1, 1), date(2024, 12, 31)))
        assert dates[0] == date(2008, 1, 2)
        assert dates[-1] == date(2024, 12, 31)
        assert len(dates) == (date(2024, 12, 31) - date(2008, 1, 1)).days

    def test_counts_from_anchor(self) -> None:
        assert make_engine("매월").counts_from_anchor
        assert make_engine("매년").counts_from_anchor
        assert not make_engine("매월", ["말일"]).counts_from_anchor
        assert not make_engine("매주").counts_from_anchor


# =============================================================================
# RRULE export
# =============================================================================


@pytest.mark.parametrize(
    ("frequency", "options", "expected"),
    [
        ("매일", None, "FREQ=DAILY;INTERVAL=1"),
        ("매주", None, "FREQ=WEEKLY;INTERVAL=1"),
        ("매주", ["금", "수"], "FREQ=WEEKLY;INTERVAL=1;BYDAY=WE,FR"),
        ("매월", ["말일"], "FREQ=MONTHLY;BYMONTHDAY=-1"),
        ("매월", ["15"], "FREQ=MONTHLY;BYMONTHDAY=15"),
        ("매월", None, "FREQ=MONTHLY;INTERVAL=1"),
        ("매년", None, "FREQ=YEARLY;INTERVAL=1"),
        ("설정 안함", None, ""),
    ],
)
def test_to_rrule_string(frequency, options, expected) -> None:
    """Recurring templates export an RRULE; non-recurring ones do not."""
    assert make_engine(frequency, options).to_rrule_string() == expected


def test_next_occurrence_convenience() -> None:
    """Module helper accepts a bare string option."""
    assert next_occurrence(date(2024, 1, 31), "매월", "말일") == date(2024, 2, 29)
    assert next_occurrence(date(2024, 1, 31), None) == date(2024, 1, 31)
