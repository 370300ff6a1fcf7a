"""Unit tests for instance_engine.py template materialization."""

from datetime import date

from custom_components.project_calendar import const
from custom_components.project_calendar.engines.instance_engine import (
    PROJECT_KIND,
    TODO_KIND,
    build_child,
    get_frequency_options,
    is_child,
    is_template,
    materialize,
)
from tests.helpers import (
    create_mock_project_data,
    create_mock_todo_data,
    sequential_ids,
)

# =============================================================================
# Classification
# =============================================================================


class TestClassification:
    """Template / child / plain classification."""

    def test_template_has_frequency_and_no_parent(self) -> None:
        template = create_mock_todo_data("t1", frequency="매일")
        assert is_template(template)
        assert not is_child(template)

    def test_child_is_never_a_template(self) -> None:
        child = create_mock_todo_data("c1", parentId="t1", frequency="매일")
        assert is_child(child)
        assert not is_template(child)

    def test_plain_entity(self) -> None:
        plain = create_mock_todo_data("p1", frequency="설정 안함")
        assert not is_template(plain)
        assert not is_child(plain)

    def test_plural_options_key_is_accepted(self) -> None:
        todo = create_mock_todo_data("t1", frequency="매주", frequencyOptions=["수"])
        assert get_frequency_options(todo) == ["수"]


# =============================================================================
# build_child
# =============================================================================


class TestBuildChild:
    """Single child construction."""

    def test_project_dates_shift_with_anchor(self) -> None:
        template = create_mock_project_data(
            "p1",
            start="2024-11-01",
            webAppPeriodEnd="2024-11-03",
            fieldWorkPeriodStart="2024-11-05",
            fieldWorkPeriodEnd="2024-11-10",
            endDate="2024-11-12",
            frequency="매주",
            frequencyOption=[],
            recurrenceExcludedDates=["2024-11-15"],
            recurrenceEndDate="2025-01-01",
            status="finished",
            isWebAppFinished=True,
            isFieldWorkStarted=True,
            finishedAt="2024-11-02T00:00:00Z",
            team="A",
        )

        child = build_child(
            template, date(2024, 11, 8), PROJECT_KIND, sequential_ids("new")
        )

        assert child["id"] == "new-1"
        assert child["parentId"] == "p1"
        assert child["webAppPeriodStart"] == "2024-11-08"
        assert child["webAppPeriodEnd"] == "2024-11-10"
        assert child["fieldWorkPeriodStart"] == "2024-11-12"
        assert child["fieldWorkPeriodEnd"] == "2024-11-17"
        assert child["endDate"] == "2024-11-19"
        assert child["team"] == "A"
        # Fresh completion state
        assert child["status"] == "active"
        assert child["isWebAppFinished"] is False
        assert child["isFieldWorkStarted"] is False
        # Recurrence controls never land on children
        for key in const.RECURRENCE_CONTROL_FIELDS:
            assert key not in child
        assert "finishedAt" not in child

    def test_todo_deadline_shifts(self) -> None:
        template = create_mock_todo_data(
            "t1", date="2024-11-05", deadline="2024-11-06", frequency="매일"
        )
        child = build_child(template, date(2024, 11, 9), TODO_KIND, lambda: "c")

        assert child["date"] == "2024-11-09"
        assert child["deadline"] == "2024-11-10"
        assert child["isFinished"] is False

    def test_unparseable_shifted_date_copied_unchanged(self) -> None:
        template = create_mock_todo_data(
            "t1", deadline="someday", frequency="매일"
        )
        child = build_child(template, date(2024, 11, 9), TODO_KIND, lambda: "c")
        assert child["deadline"] == "someday"

    def test_template_is_not_modified(self) -> None:
        template = create_mock_todo_data("t1", frequency="매일")
        snapshot = dict(template)
        build_child(template, date(2024, 11, 9), TODO_KIND, lambda: "c")
        assert template == snapshot


# =============================================================================
# materialize
# =============================================================================


class TestMaterialize:
    """Expansion up to the horizon."""

    def test_daily_todo_until_horizon(self) -> None:
        template = create_mock_todo_data("t1", date="2024-11-28", frequency="매일")

        children = materialize(
            template, [template], date(2024, 12, 1), TODO_KIND, sequential_ids()
        )

        assert [c["date"] for c in children] == [
            "2024-11-29",
            "2024-11-30",
            "2024-12-01",
        ]
        assert all(c["parentId"] == "t1" for c in children)
        assert len({c["id"] for c in children}) == 3

    def test_no_duplicates_with_existing_children(self) -> None:
        """A child already held for a date blocks a second one."""
        template = create_mock_todo_data("t1", date="2024-11-28", frequency="매일")
        existing = [
            template,
            create_mock_todo_data("c0", date="2024-11-30", parentId="t1"),
        ]

        children = materialize(
            template, existing, date(2024, 12, 1), TODO_KIND, sequential_ids()
        )

        assert [c["date"] for c in children] == ["2024-11-29", "2024-12-01"]

    def test_second_pass_creates_nothing(self) -> None:
        template = create_mock_todo_data("t1", date="2024-11-01", frequency="매일")
        first = materialize(
            template, [template], date(2024, 12, 31), TODO_KIND, sequential_ids()
        )
        second = materialize(
            template,
            [template, *first],
            date(2024, 12, 31),
            TODO_KIND,
            sequential_ids(),
        )

        assert len(first) == 60
        assert second == []

    def test_excluded_dates_are_skipped(self) -> None:
        """Daily from 11-05 with 2024-11-07 excluded never produces 11-07."""
        template = create_mock_todo_data(
            "t1",
            date="2024-11-05",
            frequency="매일",
            recurrenceExcludedDates=["2024-11-07"],
        )

        children = materialize(
            template, [template], date(2024, 11, 10), TODO_KIND, sequential_ids()
        )
        dates = [c["date"] for c in children]

        assert "2024-11-07" not in dates
        assert dates == [
            "2024-11-06",
            "2024-11-08",
            "2024-11-09",
            "2024-11-10",
        ]

    def test_recurrence_end_date_caps_expansion(self) -> None:
        template = create_mock_project_data(
            "p1",
            start="2024-11-01",
            frequency="매주",
            recurrenceEndDate="2024-11-20",
        )

        children = materialize(
            template, [template], date(2024, 12, 31), PROJECT_KIND, sequential_ids()
        )

        assert [c["webAppPeriodStart"] for c in children] == [
            "2024-11-08",
            "2024-11-15",
        ]

    def test_monthly_series_keeps_month_end_anchor(self) -> None:
        """A series on the 31st lands on each month's last day, never drifting."""
        template = create_mock_todo_data("t1", date="2024-01-31", frequency="매월")

        children = materialize(
            template, [template], date(2024, 5, 31), TODO_KIND, sequential_ids()
        )

        assert [c["date"] for c in children] == [
            "2024-02-29",
            "2024-03-31",
            "2024-04-30",
            "2024-05-31",
        ]

    def test_old_anchor_expands_through_horizon(self) -> None:
        """Templates anchored years back still reach the horizon."""
        template = create_mock_project_data("p1", start="2008-01-01", frequency="매일")

        children = materialize(
            template, [template], date(2024, 12, 31), PROJECT_KIND, sequential_ids()
        )

        assert children[-1]["webAppPeriodStart"] == "2024-12-31"
        assert len(children) == (date(2024, 12, 31) - date(2008, 1, 1)).days

    def test_other_templates_children_do_not_block(self) -> None:
        template = create_mock_todo_data("t1", date="2024-11-28", frequency="매일")
        foreign = create_mock_todo_data("x", date="2024-11-29", parentId="t2")

        children = materialize(
            template, [template, foreign], date(2024, 11, 29), TODO_KIND
        )

        assert [c["date"] for c in children] == ["2024-11-29"]

    def test_non_template_yields_nothing(self) -> None:
        plain = create_mock_todo_data("p1")
        assert materialize(plain, [plain], date(2025, 1, 1), TODO_KIND) == []

    def test_template_without_anchor_yields_nothing(self) -> None:
        template = create_mock_todo_data("t1", date="", frequency="매일")
        assert materialize(template, [template], date(2025, 1, 1), TODO_KIND) == []

    def test_unknown_frequency_terminates(self) -> None:
        template = create_mock_todo_data("t1", frequency="fortnightly")
        assert materialize(template, [template], date(2025, 1, 1), TODO_KIND) == []
