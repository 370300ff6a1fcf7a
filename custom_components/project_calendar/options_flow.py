# File: options_flow.py
"""Options flow for the Project Calendar integration.

Edits the scheduler settings: maintenance interval, retention windows, and
the materialization horizon. Saving the options reloads the entry so the
coordinator picks up the new interval.
"""

import voluptuous as vol
from homeassistant import config_entries

from . import const


def build_general_options_schema(options: dict) -> vol.Schema:
    """Build the options schema with current values as defaults."""
    return vol.Schema(
        {
            vol.Required(
                const.CONF_UPDATE_INTERVAL,
                default=options.get(
                    const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL
                ),
            ): vol.All(vol.Coerce(int), vol.Range(min=1)),
            vol.Required(
                const.CONF_PROJECT_RETENTION_DAYS,
                default=options.get(
                    const.CONF_PROJECT_RETENTION_DAYS,
                    const.DEFAULT_PROJECT_RETENTION_DAYS,
                ),
            ): vol.All(vol.Coerce(int), vol.Range(min=0)),
            vol.Required(
                const.CONF_TODO_RETENTION_DAYS,
                default=options.get(
                    const.CONF_TODO_RETENTION_DAYS, const.DEFAULT_TODO_RETENTION_DAYS
                ),
            ): vol.All(vol.Coerce(int), vol.Range(min=0)),
            vol.Required(
                const.CONF_HORIZON_MONTHS,
                default=options.get(
                    const.CONF_HORIZON_MONTHS, const.DEFAULT_HORIZON_MONTHS
                ),
            ): vol.All(vol.Coerce(int), vol.Range(min=1, max=24)),
        }
    )


class ProjectCalendarOptionsFlowHandler(config_entries.OptionsFlow):
    """Options Flow for the scheduler settings."""

    def __init__(self, _config_entry: config_entries.ConfigEntry):
        """Initialize the options flow."""
        self._entry_options: dict = {}

    async def async_step_init(self, user_input=None):
        """Show and store the general options."""
        self._entry_options = dict(self.config_entry.options)

        if user_input is not None:
            self._entry_options.update(user_input)
            const.LOGGER.debug(
                "DEBUG: Updating Project Calendar options: %s", self._entry_options
            )
            return self.async_create_entry(title="", data=self._entry_options)

        return self.async_show_form(
            step_id="init",
            data_schema=build_general_options_schema(self._entry_options),
        )
