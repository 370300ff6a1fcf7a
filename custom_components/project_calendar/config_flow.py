# File: config_flow.py
"""Config flow for the Project Calendar integration.

Single instance: the collections live in fixed storage files, so a second
entry would only share them. Scheduler settings are edited in the options
flow.
"""

from typing import Any, Optional

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.core import callback

from . import const
from .options_flow import ProjectCalendarOptionsFlowHandler

# pylint: disable=abstract-method


class ProjectCalendarConfigFlow(config_entries.ConfigFlow, domain=const.DOMAIN):
    """Config Flow for Project Calendar."""

    VERSION = 1

    async def async_step_user(self, user_input: Optional[dict[str, Any]] = None):
        """Confirm setup of the single Project Calendar instance."""
        if any(self._async_current_entries()):
            return self.async_abort(reason=const.TRANS_KEY_ERROR_SINGLE_INSTANCE)

        if user_input is not None:
            const.LOGGER.info("INFO: Creating Project Calendar config entry")
            return self.async_create_entry(
                title=const.PROJECT_CALENDAR_TITLE,
                data={},
                options={
                    const.CONF_UPDATE_INTERVAL: const.DEFAULT_UPDATE_INTERVAL,
                    const.CONF_PROJECT_RETENTION_DAYS: const.DEFAULT_PROJECT_RETENTION_DAYS,
                    const.CONF_TODO_RETENTION_DAYS: const.DEFAULT_TODO_RETENTION_DAYS,
                    const.CONF_HORIZON_MONTHS: const.DEFAULT_HORIZON_MONTHS,
                },
            )

        return self.async_show_form(step_id="user", data_schema=vol.Schema({}))

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        """Return the Options Flow."""
        return ProjectCalendarOptionsFlowHandler(config_entry)
