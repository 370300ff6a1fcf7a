# File: services.py
"""Defines custom services for the Project Calendar integration.

These services let scripts and automations create, update, finish and delete
projects and todos, back up and restore the collections, and trigger a
maintenance run on demand. Every mutation is followed by a maintenance run
inside the coordinator.
"""

from __future__ import annotations

from datetime import date
from typing import Any

import voluptuous as vol
from homeassistant.core import HomeAssistant, ServiceCall, ServiceResponse, SupportsResponse
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers import config_validation as cv

from . import const
from .coordinator import ProjectCalendarCoordinator
from .utils.dt_utils import dt_format_date

# --- Field validators ---
FREQUENCY_VALIDATOR = vol.All(
    cv.string,
    vol.In(
        [*const.FREQUENCY_OPTIONS, *(tag for tag in const.FREQUENCY_ALIASES if tag)]
    ),
)
FREQUENCY_OPTIONS_VALIDATOR = vol.All(cv.ensure_list, [cv.string])
IMPORTANCE_VALIDATOR = vol.All(vol.Coerce(int), vol.Range(min=1, max=5))
DELETE_MODE_VALIDATOR = vol.In(const.DELETE_MODES)

RECURRENCE_FIELDS = {
    vol.Optional(const.FIELD_FREQUENCY): FREQUENCY_VALIDATOR,
    vol.Optional(const.FIELD_FREQUENCY_OPTIONS): FREQUENCY_OPTIONS_VALIDATOR,
    vol.Optional(const.FIELD_RECURRENCE_END_DATE): cv.date,
    vol.Optional(const.FIELD_NOTIFICATION_ENABLED): cv.boolean,
}

PROJECT_OPTIONAL_FIELDS = {
    vol.Optional(const.FIELD_PROJECT_NUMBER): cv.string,
    vol.Optional(const.FIELD_WEB_APP_PERIOD_END): cv.date,
    vol.Optional(const.FIELD_FIELD_WORK_PERIOD_START): cv.date,
    vol.Optional(const.FIELD_FIELD_WORK_PERIOD_END): cv.date,
    vol.Optional(const.FIELD_END_DATE): cv.date,
    vol.Optional(const.FIELD_REMARKS): cv.string,
    vol.Optional(const.FIELD_TEAM): cv.string,
    **RECURRENCE_FIELDS,
}

TODO_OPTIONAL_FIELDS = {
    vol.Optional(const.FIELD_IMPORTANCE): IMPORTANCE_VALIDATOR,
    vol.Optional(const.FIELD_CONTENT): cv.string,
    vol.Optional(const.FIELD_DEADLINE): cv.date,
    vol.Optional(const.FIELD_CATEGORY): cv.string,
    **RECURRENCE_FIELDS,
}

# --- Service Schemas ---
RUN_MAINTENANCE_SCHEMA = vol.Schema({})

CREATE_PROJECT_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_TITLE): cv.string,
        vol.Required(const.FIELD_WEB_APP_PERIOD_START): cv.date,
        **PROJECT_OPTIONAL_FIELDS,
    }
)

UPDATE_PROJECT_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_PROJECT_ID): cv.string,
        vol.Optional(const.FIELD_TITLE): cv.string,
        vol.Optional(const.FIELD_WEB_APP_PERIOD_START): cv.date,
        vol.Optional(const.FIELD_STATUS): vol.In(
            [const.PROJECT_STATUS_ACTIVE, const.PROJECT_STATUS_FINISHED]
        ),
        vol.Optional(const.FIELD_IS_WEB_APP_FINISHED): cv.boolean,
        vol.Optional(const.FIELD_IS_FIELD_WORK_STARTED): cv.boolean,
        **PROJECT_OPTIONAL_FIELDS,
    }
)

FINISH_PROJECT_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_PROJECT_ID): cv.string,
    }
)

DELETE_PROJECT_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_PROJECT_ID): cv.string,
        vol.Optional(
            const.FIELD_MODE, default=const.DELETE_MODE_SINGLE
        ): DELETE_MODE_VALIDATOR,
    }
)

CREATE_TODO_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_TITLE): cv.string,
        vol.Required(const.FIELD_DATE): cv.date,
        **TODO_OPTIONAL_FIELDS,
    }
)

UPDATE_TODO_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_TODO_ID): cv.string,
        vol.Optional(const.FIELD_TITLE): cv.string,
        vol.Optional(const.FIELD_DATE): cv.date,
        vol.Optional(const.FIELD_IS_FINISHED): cv.boolean,
        **TODO_OPTIONAL_FIELDS,
    }
)

DELETE_TODO_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_TODO_ID): cv.string,
        vol.Optional(
            const.FIELD_MODE, default=const.DELETE_MODE_SINGLE
        ): DELETE_MODE_VALIDATOR,
    }
)

EXPORT_DATA_SCHEMA = vol.Schema({})


def _unique_ids(items: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Reject a backup collection that repeats an id."""
    ids = [item[const.DATA_ID] for item in items]
    if len(ids) != len(set(ids)):
        raise vol.Invalid(const.ERROR_IMPORT_DUPLICATE_IDS)
    return items


BACKUP_COLLECTION_VALIDATOR = vol.All(
    cv.ensure_list,
    [vol.Schema({vol.Required(const.DATA_ID): cv.string}, extra=vol.ALLOW_EXTRA)],
    _unique_ids,
)

IMPORT_DATA_SCHEMA = vol.All(
    vol.Schema(
        {
            vol.Optional(const.FIELD_PROJECTS): BACKUP_COLLECTION_VALIDATOR,
            vol.Optional(const.FIELD_TODOS): BACKUP_COLLECTION_VALIDATOR,
        }
    ),
    cv.has_at_least_one_key(const.FIELD_PROJECTS, const.FIELD_TODOS),
)


def get_first_project_calendar_entry(hass: HomeAssistant) -> str | None:
    """Retrieve the first Project Calendar config entry ID."""
    domain_entries = hass.data.get(const.DOMAIN)
    if not domain_entries:
        return None
    return next(iter(domain_entries.keys()), None)


def _get_coordinator(hass: HomeAssistant, service_name: str) -> ProjectCalendarCoordinator:
    entry_id = get_first_project_calendar_entry(hass)
    if not entry_id:
        const.LOGGER.warning("WARNING: %s: %s", service_name, const.MSG_NO_ENTRY_FOUND)
        raise HomeAssistantError(const.MSG_NO_ENTRY_FOUND)
    return hass.data[const.DOMAIN][entry_id][const.COORDINATOR]


def map_service_fields(
    data: dict[str, Any], field_map: dict[str, str]
) -> dict[str, Any]:
    """Translate snake_case service fields into stored camelCase fields.

    Dates are stored as YYYY-MM-DD strings. Fields not in the map are ignored.
    """
    mapped: dict[str, Any] = {}
    for field_name, data_key in field_map.items():
        if field_name not in data:
            continue
        value = data[field_name]
        if isinstance(value, date):
            value = dt_format_date(value)
        mapped[data_key] = value
    return mapped


def async_setup_services(hass: HomeAssistant) -> None:
    """Register Project Calendar services."""

    async def handle_run_maintenance(call: ServiceCall) -> ServiceResponse:
        """Handle an on-demand maintenance run."""
        coordinator = _get_coordinator(hass, "Run Maintenance")
        result = await coordinator.async_run_maintenance()
        if call.return_response:
            return dict(result)
        return None

    async def handle_create_project(call: ServiceCall) -> ServiceResponse:
        """Handle creating a project."""
        coordinator = _get_coordinator(hass, "Create Project")
        project = await coordinator.async_create_project(
            map_service_fields(call.data, const.PROJECT_FIELD_MAP)
        )
        if call.return_response:
            return {const.DATA_ID: project[const.DATA_ID]}
        return None

    async def handle_update_project(call: ServiceCall) -> None:
        """Handle updating a project."""
        coordinator = _get_coordinator(hass, "Update Project")
        await coordinator.async_update_project(
            call.data[const.FIELD_PROJECT_ID],
            map_service_fields(call.data, const.PROJECT_FIELD_MAP),
        )

    async def handle_finish_project(call: ServiceCall) -> None:
        """Handle finishing a project."""
        coordinator = _get_coordinator(hass, "Finish Project")
        await coordinator.async_finish_project(call.data[const.FIELD_PROJECT_ID])

    async def handle_delete_project(call: ServiceCall) -> None:
        """Handle deleting a project or part of its series."""
        coordinator = _get_coordinator(hass, "Delete Project")
        await coordinator.async_delete_project(
            call.data[const.FIELD_PROJECT_ID], call.data[const.FIELD_MODE]
        )

    async def handle_create_todo(call: ServiceCall) -> ServiceResponse:
        """Handle creating a todo."""
        coordinator = _get_coordinator(hass, "Create Todo")
        todo = await coordinator.async_create_todo(
            map_service_fields(call.data, const.TODO_FIELD_MAP)
        )
        if call.return_response:
            return {const.DATA_ID: todo[const.DATA_ID]}
        return None

    async def handle_update_todo(call: ServiceCall) -> None:
        """Handle updating a todo."""
        coordinator = _get_coordinator(hass, "Update Todo")
        await coordinator.async_update_todo(
            call.data[const.FIELD_TODO_ID],
            map_service_fields(call.data, const.TODO_FIELD_MAP),
        )

    async def handle_delete_todo(call: ServiceCall) -> None:
        """Handle deleting a todo or part of its series."""
        coordinator = _get_coordinator(hass, "Delete Todo")
        await coordinator.async_delete_todo(
            call.data[const.FIELD_TODO_ID], call.data[const.FIELD_MODE]
        )

    async def handle_export_data(call: ServiceCall) -> ServiceResponse:
        """Handle exporting projects and todos as a backup."""
        coordinator = _get_coordinator(hass, "Export Data")
        return dict(await coordinator.async_export_data())

    async def handle_import_data(call: ServiceCall) -> ServiceResponse:
        """Handle restoring projects and/or todos from a backup."""
        coordinator = _get_coordinator(hass, "Import Data")
        result = await coordinator.async_import_data(
            projects=call.data.get(const.FIELD_PROJECTS),
            todos=call.data.get(const.FIELD_TODOS),
        )
        if call.return_response:
            return dict(result)
        return None

    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_RUN_MAINTENANCE,
        handle_run_maintenance,
        schema=RUN_MAINTENANCE_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_CREATE_PROJECT,
        handle_create_project,
        schema=CREATE_PROJECT_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_UPDATE_PROJECT,
        handle_update_project,
        schema=UPDATE_PROJECT_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_FINISH_PROJECT,
        handle_finish_project,
        schema=FINISH_PROJECT_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_DELETE_PROJECT,
        handle_delete_project,
        schema=DELETE_PROJECT_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_CREATE_TODO,
        handle_create_todo,
        schema=CREATE_TODO_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_UPDATE_TODO,
        handle_update_todo,
        schema=UPDATE_TODO_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_DELETE_TODO,
        handle_delete_todo,
        schema=DELETE_TODO_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_EXPORT_DATA,
        handle_export_data,
        schema=EXPORT_DATA_SCHEMA,
        supports_response=SupportsResponse.ONLY,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_IMPORT_DATA,
        handle_import_data,
        schema=IMPORT_DATA_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )

    const.LOGGER.info("INFO: Project Calendar services have been registered successfully")


async def async_unload_services(hass: HomeAssistant) -> None:
    """Unregister Project Calendar services when unloading the integration."""
    services = [
        const.SERVICE_RUN_MAINTENANCE,
        const.SERVICE_CREATE_PROJECT,
        const.SERVICE_UPDATE_PROJECT,
        const.SERVICE_FINISH_PROJECT,
        const.SERVICE_DELETE_PROJECT,
        const.SERVICE_CREATE_TODO,
        const.SERVICE_UPDATE_TODO,
        const.SERVICE_DELETE_TODO,
        const.SERVICE_EXPORT_DATA,
        const.SERVICE_IMPORT_DATA,
    ]

    for service in services:
        if hass.services.has_service(const.DOMAIN, service):
            hass.services.async_remove(const.DOMAIN, service)

    const.LOGGER.info("INFO: Project Calendar services have been unregistered")
