# File: coordinator.py
"""Coordinator for the Project Calendar integration.

Owns the maintenance run (archive, prune, carry-over, materialize) and every
mutation of the stored collections. A single asyncio.Lock serializes runs and
mutations so two writers never interleave a load with a save.

The coordinator refresh interval is the periodic maintenance timer; services
trigger an extra run after each mutation.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any
import uuid

from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed
from homeassistant.util import dt as dt_util

from . import const
from .engines.deletion_engine import DeletionResult, EntityNotFoundError, resolve_delete
from .engines.instance_engine import PROJECT_KIND, TODO_KIND, EntityKind
from .engines.maintenance_engine import count_orphans, plan_maintenance
from .engines.schedule_engine import normalize_frequency, normalize_frequency_options
from .utils.dt_utils import as_local, dt_now_local

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant

    from .store import ProjectCalendarStore
    from .type_defs import (
        CoordinatorData,
        EntityData,
        ExportData,
        MaintenanceResult,
        MaintenanceSettings,
        ProjectData,
        TodoData,
    )


class ProjectCalendarCoordinator(DataUpdateCoordinator):
    """Coordinator for Project Calendar integration.

    `data` holds the collections as of the last maintenance run or mutation.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        store: ProjectCalendarStore,
    ) -> None:
        """Initialize the ProjectCalendarCoordinator."""
        update_interval_minutes = config_entry.options.get(
            const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL
        )

        super().__init__(
            hass,
            const.LOGGER,
            config_entry=config_entry,
            name=f"{const.DOMAIN}{const.COORDINATOR_SUFFIX}",
            update_interval=timedelta(minutes=update_interval_minutes),
        )
        self.store = store
        self._lock = asyncio.Lock()
        self._collections: CoordinatorData = {
            "projects": [],
            "archived_projects": [],
            "todos": [],
        }

    # -------------------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------------------

    @property
    def settings(self) -> MaintenanceSettings:
        """Return retention and horizon settings from the entry options."""
        options = self.config_entry.options if self.config_entry else {}
        return {
            "project_retention_days": options.get(
                const.CONF_PROJECT_RETENTION_DAYS,
                const.DEFAULT_PROJECT_RETENTION_DAYS,
            ),
            "todo_retention_days": options.get(
                const.CONF_TODO_RETENTION_DAYS, const.DEFAULT_TODO_RETENTION_DAYS
            ),
            "horizon_months": options.get(
                const.CONF_HORIZON_MONTHS, const.DEFAULT_HORIZON_MONTHS
            ),
        }

    @property
    def projects(self) -> list[ProjectData]:
        """Return the active projects as of the last run."""
        return self._collections["projects"]

    @property
    def archived_projects(self) -> list[ProjectData]:
        """Return the archived projects as of the last run."""
        return self._collections["archived_projects"]

    @property
    def todos(self) -> list[TodoData]:
        """Return the todos as of the last run."""
        return self._collections["todos"]

    # -------------------------------------------------------------------------------------
    # Periodic update / maintenance
    # -------------------------------------------------------------------------------------

    async def _async_update_data(self) -> CoordinatorData:
        """Periodic update: one maintenance run."""
        try:
            async with self._lock:
                await self._async_run_maintenance_locked(None)
        except Exception as err:  # pylint: disable=broad-exception-caught
            raise UpdateFailed(f"Error running Project Calendar maintenance: {err}") from err
        return self._snapshot()

    async def async_run_maintenance(
        self, now: datetime | None = None
    ) -> MaintenanceResult:
        """Run maintenance now and notify listeners.

        Args:
            now: Current time; defaults to Home Assistant's local now. A naive
                value is read in Home Assistant's timezone.

        Raises:
            StorageWriteError: A collection could not be persisted. Writes that
                completed before the failure are kept.
        """
        async with self._lock:
            result = await self._async_run_maintenance_locked(now)
        self.async_set_updated_data(self._snapshot())
        return result

    async def _async_run_maintenance_locked(
        self, now: datetime | None
    ) -> MaintenanceResult:
        """Load, plan, and persist. Caller must hold the lock."""
        now = as_local(now) if now is not None else dt_now_local()

        projects = await self.store.async_load_projects()
        archive = await self.store.async_load_archived_projects()
        todos = await self.store.async_load_todos()

        plan = plan_maintenance(projects, archive, todos, now, self.settings)

        # Fixed order: archive, projects, todos
        if plan.archive_changed:
            await self.store.async_save_archived_projects(plan.archive)
        if plan.projects_changed:
            await self.store.async_save_projects(plan.projects)
        if plan.todos_changed:
            await self.store.async_save_todos(plan.todos)

        self._collections = {
            "projects": plan.projects,
            "archived_projects": plan.archive,
            "todos": plan.todos,
        }

        const.LOGGER.info(
            "INFO: Maintenance run at %s: projects_changed=%s, todos_changed=%s, "
            "archive_changed=%s",
            now.isoformat(),
            plan.projects_changed,
            plan.todos_changed,
            plan.archive_changed,
        )
        orphans = count_orphans(plan.projects) + count_orphans(plan.todos)
        if orphans:
            const.LOGGER.debug("DEBUG: %s instance(s) reference a missing template", orphans)

        return plan.as_result()

    def _snapshot(self) -> CoordinatorData:
        return {
            "projects": list(self._collections["projects"]),
            "archived_projects": list(self._collections["archived_projects"]),
            "todos": list(self._collections["todos"]),
        }

    # -------------------------------------------------------------------------------------
    # Projects
    # -------------------------------------------------------------------------------------

    async def async_create_project(self, fields: dict[str, Any]) -> ProjectData:
        """Create a project (plain or recurring template) and run maintenance."""
        project: EntityData = {
            const.DATA_PROJECT_STATUS: const.PROJECT_STATUS_ACTIVE,
            const.DATA_PROJECT_IS_WEB_APP_FINISHED: False,
            const.DATA_PROJECT_IS_FIELD_WORK_STARTED: False,
            **fields,
        }
        created = await self._async_create(PROJECT_KIND, project)
        return created  # type: ignore[return-value]

    async def async_update_project(
        self, project_id: str, fields: dict[str, Any]
    ) -> ProjectData:
        """Merge fields into an active project and run maintenance."""
        updated = await self._async_update(PROJECT_KIND, project_id, fields)
        return updated  # type: ignore[return-value]

    async def async_finish_project(self, project_id: str) -> ProjectData:
        """Mark a project finished; the next run moves it to the archive."""
        return await self.async_update_project(
            project_id, {const.DATA_PROJECT_STATUS: const.PROJECT_STATUS_FINISHED}
        )

    async def async_delete_project(
        self, project_id: str, mode: str = const.DELETE_MODE_SINGLE
    ) -> DeletionResult:
        """Delete a project or part of its series and run maintenance."""
        return await self._async_delete(PROJECT_KIND, project_id, mode)

    # -------------------------------------------------------------------------------------
    # Todos
    # -------------------------------------------------------------------------------------

    async def async_create_todo(self, fields: dict[str, Any]) -> TodoData:
        """Create a todo (plain or recurring template) and run maintenance."""
        todo: EntityData = {
            const.DATA_TODO_IMPORTANCE: const.DEFAULT_TODO_IMPORTANCE,
            const.DATA_TODO_IS_FINISHED: False,
            **fields,
        }
        created = await self._async_create(TODO_KIND, todo)
        return created  # type: ignore[return-value]

    async def async_update_todo(self, todo_id: str, fields: dict[str, Any]) -> TodoData:
        """Merge fields into a todo and run maintenance."""
        updated = await self._async_update(TODO_KIND, todo_id, fields)
        return updated  # type: ignore[return-value]

    async def async_delete_todo(
        self, todo_id: str, mode: str = const.DELETE_MODE_SINGLE
    ) -> DeletionResult:
        """Delete a todo or part of its series and run maintenance."""
        return await self._async_delete(TODO_KIND, todo_id, mode)

    # -------------------------------------------------------------------------------------
    # Backup / restore
    # -------------------------------------------------------------------------------------

    async def async_export_data(self) -> ExportData:
        """Return active projects and todos as stored, with an export timestamp."""
        async with self._lock:
            projects = await self.store.async_load_projects()
            todos = await self.store.async_load_todos()

        const.LOGGER.info(
            "INFO: Exported %s project(s) and %s todo(s)", len(projects), len(todos)
        )
        return {
            const.DATA_EXPORT_PROJECTS: projects,
            const.DATA_EXPORT_TODOS: todos,
            const.DATA_EXPORT_DATE: dt_util.utcnow().isoformat(),
        }

    async def async_import_data(
        self,
        projects: list[EntityData] | None = None,
        todos: list[EntityData] | None = None,
    ) -> MaintenanceResult:
        """Replace the given collections with a backup and run maintenance.

        A collection that is None is left as it is. The archive is never
        touched by a restore.
        """
        async with self._lock:
            if projects is not None:
                await self.store.async_save_projects([dict(p) for p in projects])  # type: ignore[arg-type]
            if todos is not None:
                await self.store.async_save_todos([dict(t) for t in todos])  # type: ignore[arg-type]

        const.LOGGER.info(
            "INFO: Restored backup: projects=%s, todos=%s",
            "replaced" if projects is not None else "kept",
            "replaced" if todos is not None else "kept",
        )
        return await self.async_run_maintenance()

    # -------------------------------------------------------------------------------------
    # Shared mutation helpers
    # -------------------------------------------------------------------------------------

    async def _async_load_kind(self, kind: EntityKind) -> list[EntityData]:
        if kind is PROJECT_KIND:
            return await self.store.async_load_projects()  # type: ignore[return-value]
        return await self.store.async_load_todos()  # type: ignore[return-value]

    async def _async_save_kind(self, kind: EntityKind, items: list[EntityData]) -> None:
        if kind is PROJECT_KIND:
            await self.store.async_save_projects(items)  # type: ignore[arg-type]
        else:
            await self.store.async_save_todos(items)  # type: ignore[arg-type]

    @staticmethod
    def _not_found_message(kind: EntityKind, entity_id: str) -> str:
        if kind is PROJECT_KIND:
            return const.ERROR_PROJECT_NOT_FOUND_FMT.format(entity_id)
        return const.ERROR_TODO_NOT_FOUND_FMT.format(entity_id)

    @staticmethod
    def _normalize_recurrence(entity: EntityData) -> None:
        """Store canonical frequency tags and a list of options, in place."""
        if const.DATA_FREQUENCY in entity:
            frequency = normalize_frequency(entity[const.DATA_FREQUENCY])
            if frequency == const.FREQUENCY_NONE:
                entity.pop(const.DATA_FREQUENCY)
            else:
                entity[const.DATA_FREQUENCY] = frequency
        if const.DATA_FREQUENCY_OPTION in entity:
            entity[const.DATA_FREQUENCY_OPTION] = normalize_frequency_options(
                entity[const.DATA_FREQUENCY_OPTION]
            )

    @staticmethod
    def _stamp_completion(entity: EntityData, kind: EntityKind) -> None:
        """Set finishedAt on a finished entity that lacks it; clear it on reopen."""
        if kind.is_terminal(entity):
            if not entity.get(const.DATA_FINISHED_AT):
                entity[const.DATA_FINISHED_AT] = dt_util.utcnow().isoformat()
        else:
            entity.pop(const.DATA_FINISHED_AT, None)

    async def _async_create(self, kind: EntityKind, entity: EntityData) -> EntityData:
        entity[const.DATA_ID] = str(uuid.uuid4())
        self._normalize_recurrence(entity)
        self._stamp_completion(entity, kind)

        async with self._lock:
            items = await self._async_load_kind(kind)
            items.append(entity)
            await self._async_save_kind(kind, items)

        const.LOGGER.info(
            "INFO: Created %s '%s' (%s)",
            kind.name,
            entity.get(const.DATA_TITLE),
            entity[const.DATA_ID],
        )
        await self.async_run_maintenance()
        return entity

    async def _async_update(
        self, kind: EntityKind, entity_id: str, fields: dict[str, Any]
    ) -> EntityData:
        async with self._lock:
            items = await self._async_load_kind(kind)
            index = next(
                (
                    i
                    for i, item in enumerate(items)
                    if item.get(const.DATA_ID) == entity_id
                ),
                None,
            )
            if index is None:
                raise HomeAssistantError(self._not_found_message(kind, entity_id))

            updated: EntityData = {**items[index], **fields}
            updated[const.DATA_ID] = entity_id
            self._normalize_recurrence(updated)
            self._stamp_completion(updated, kind)
            items[index] = updated
            await self._async_save_kind(kind, items)

        const.LOGGER.info(
            "INFO: Updated %s %s: %s", kind.name, entity_id, ", ".join(sorted(fields))
        )
        await self.async_run_maintenance()
        return updated

    async def _async_delete(
        self, kind: EntityKind, entity_id: str, mode: str
    ) -> DeletionResult:
        async with self._lock:
            items = await self._async_load_kind(kind)
            try:
                result = resolve_delete(items, entity_id, mode, kind)
            except EntityNotFoundError as err:
                raise HomeAssistantError(
                    self._not_found_message(kind, entity_id)
                ) from err
            except ValueError as err:
                raise HomeAssistantError(str(err)) from err
            await self._async_save_kind(kind, result.entities)

        const.LOGGER.info(
            "INFO: Deleted %s %s (mode=%s), removed %s item(s)",
            kind.name,
            entity_id,
            mode,
            len(result.removed_ids),
        )
        await self.async_run_maintenance()
        return result
