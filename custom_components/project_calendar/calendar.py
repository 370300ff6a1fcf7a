# pyright: reportIncompatibleVariableOverride=false
"""Calendar platform for Project Calendar integration.

Provides two read-only calendars built from the coordinator's collections:
- projects: one all-day event per project spanning its web-app period
- todos: one all-day event per todo on its date

Materialized instances appear as their own events, so no event carries an
RRULE. The rules of recurring templates are exposed as a state attribute.
"""

from __future__ import annotations

import datetime
from typing import TYPE_CHECKING, Any

from homeassistant.components.calendar import CalendarEntity, CalendarEvent
from homeassistant.helpers.update_coordinator import CoordinatorEntity
from homeassistant.util import dt as dt_util

from . import const
from .engines.instance_engine import (
    PROJECT_KIND,
    TODO_KIND,
    EntityKind,
    is_template,
    schedule_config_from_entity,
)
from .engines.schedule_engine import RecurrenceEngine
from .utils.dt_utils import add_days, dt_parse_date

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import ProjectCalendarCoordinator
    from .type_defs import EntityData

# Coordinator-based entities that don't poll
PARALLEL_UPDATES = 0


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the Project Calendar calendar platform."""
    coordinator: ProjectCalendarCoordinator = hass.data[const.DOMAIN][entry.entry_id][
        const.COORDINATOR
    ]
    async_add_entities(
        [
            ProjectsCalendar(coordinator, entry),
            TodosCalendar(coordinator, entry),
        ]
    )


class ProjectCalendarBase(CoordinatorEntity, CalendarEntity):
    """Read-only calendar over one kind of stored entity."""

    _attr_has_entity_name = True
    _kind: EntityKind
    _uid_suffix: str

    def __init__(
        self, coordinator: ProjectCalendarCoordinator, config_entry: ConfigEntry
    ) -> None:
        """Initialize the calendar entity.

        Args:
            coordinator: ProjectCalendarCoordinator instance for data access.
            config_entry: ConfigEntry for this integration instance.
        """
        super().__init__(coordinator)
        self._config_entry = config_entry
        self._attr_unique_id = f"{config_entry.entry_id}{self._uid_suffix}"

    def _entities(self) -> list[tuple[EntityData, bool]]:
        """Return (entity, is_done) pairs to show on this calendar."""
        raise NotImplementedError

    def _summary(self, entity: EntityData) -> str:
        return entity.get(const.DATA_TITLE) or ""

    def _description(self, entity: EntityData) -> str | None:
        raise NotImplementedError

    def _event_end(self, entity: EntityData, start: datetime.date) -> datetime.date:
        """Return the inclusive last day of the event."""
        return start

    def _build_event(self, entity: EntityData, done: bool) -> CalendarEvent | None:
        start = dt_parse_date(entity.get(self._kind.anchor_field))
        if start is None:
            return None
        last_day = max(self._event_end(entity, start), start)

        description = self._description(entity)
        if done:
            description = " ".join(
                part for part in (const.CALENDAR_DONE_PREFIX, description) if part
            )

        return CalendarEvent(
            summary=self._summary(entity),
            start=start,
            end=add_days(last_day, 1),
            description=description or None,
            uid=entity.get(const.DATA_ID),
        )

    def _recurrence_rules(self) -> dict[str, str]:
        """Return the RRULE of each open recurring template, keyed by template id."""
        rules: dict[str, str] = {}
        for entity, done in self._entities():
            if done or not is_template(entity):
                continue
            rule = RecurrenceEngine(schedule_config_from_entity(entity)).to_rrule_string()
            if rule:
                rules[entity[const.DATA_ID]] = rule
        return rules

    def _event_overlaps_window(
        self,
        event: CalendarEvent,
        window_start: datetime.datetime,
        window_end: datetime.datetime,
    ) -> bool:
        """Check if an all-day event overlaps [window_start, window_end)."""
        tz = dt_util.get_time_zone(self.hass.config.time_zone)
        sdt = datetime.datetime.combine(event.start, datetime.time.min, tzinfo=tz)
        edt = datetime.datetime.combine(event.end, datetime.time.min, tzinfo=tz)
        return (edt > window_start) and (sdt < window_end)

    def _generate_all_events(self) -> list[CalendarEvent]:
        events = []
        for entity, done in self._entities():
            event = self._build_event(entity, done)
            if event is not None:
                events.append(event)
        events.sort(key=lambda e: e.start)
        return events

    async def async_get_events(
        self,
        hass: HomeAssistant,
        start_date: datetime.datetime,
        end_date: datetime.datetime,
    ) -> list[CalendarEvent]:
        """Return events overlapping [start_date, end_date)."""
        local_tz = dt_util.get_time_zone(self.hass.config.time_zone)
        if start_date.tzinfo is None:
            start_date = start_date.replace(tzinfo=local_tz)
        if end_date.tzinfo is None:
            end_date = end_date.replace(tzinfo=local_tz)
        return [
            event
            for event in self._generate_all_events()
            if self._event_overlaps_window(event, start_date, end_date)
        ]

    @property
    def event(self) -> CalendarEvent | None:
        """Return the first event covering today."""
        now = dt_util.as_local(dt_util.now())
        start = dt_util.start_of_local_day(now)
        end = start + datetime.timedelta(days=1)
        for event in self._generate_all_events():
            if self._event_overlaps_window(event, start, end):
                return event
        return None


class ProjectsCalendar(ProjectCalendarBase):
    """Calendar of active and archived projects."""

    _attr_translation_key = const.TRANS_KEY_CALENDAR_PROJECTS
    _kind = PROJECT_KIND
    _uid_suffix = const.CALENDAR_UID_SUFFIX_PROJECTS

    def _entities(self) -> list[tuple[EntityData, bool]]:
        active = [(project, False) for project in self.coordinator.projects]
        archived = [(project, True) for project in self.coordinator.archived_projects]
        return active + archived

    def _summary(self, entity: EntityData) -> str:
        title = entity.get(const.DATA_TITLE) or ""
        number = entity.get(const.DATA_PROJECT_NUMBER)
        return f"[{number}] {title}" if number else title

    def _description(self, entity: EntityData) -> str | None:
        parts = [
            entity.get(const.DATA_PROJECT_TEAM),
            entity.get(const.DATA_PROJECT_REMARKS),
        ]
        return "\n".join(part for part in parts if part) or None

    def _event_end(self, entity: EntityData, start: datetime.date) -> datetime.date:
        return dt_parse_date(entity.get(const.DATA_PROJECT_WEB_APP_PERIOD_END)) or start

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return extra state attributes."""
        return {
            "active_projects": len(self.coordinator.projects),
            "archived_projects": len(self.coordinator.archived_projects),
            const.ATTR_RECURRENCE_RULES: self._recurrence_rules(),
        }


class TodosCalendar(ProjectCalendarBase):
    """Calendar of todos; finished todos are marked done."""

    _attr_translation_key = const.TRANS_KEY_CALENDAR_TODOS
    _kind = TODO_KIND
    _uid_suffix = const.CALENDAR_UID_SUFFIX_TODOS

    def _entities(self) -> list[tuple[EntityData, bool]]:
        return [(todo, TODO_KIND.is_terminal(todo)) for todo in self.coordinator.todos]

    def _description(self, entity: EntityData) -> str | None:
        return entity.get(const.DATA_TODO_CONTENT) or None

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return extra state attributes."""
        todos = self.coordinator.todos
        return {
            "open_todos": sum(1 for todo in todos if not TODO_KIND.is_terminal(todo)),
            "finished_todos": sum(1 for todo in todos if TODO_KIND.is_terminal(todo)),
            const.ATTR_RECURRENCE_RULES: self._recurrence_rules(),
        }
