# File: __init__.py
"""Initialization file for the Project Calendar integration.

Handles setting up the integration, including loading configuration entries,
initializing data storage, and preparing the coordinator that runs the
recurrence and maintenance scheduler.

Key Features:
- Config entry setup and unload support.
- Coordinator initialization; the first refresh is the first maintenance run.
- Storage files removed together with the entry.
"""

from __future__ import annotations

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryNotReady
from homeassistant.util import dt as dt_util

from . import const
from .coordinator import ProjectCalendarCoordinator
from .services import async_setup_services, async_unload_services
from .store import ProjectCalendarStore
from .utils import dt_utils


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up the integration from a config entry."""
    const.LOGGER.info(
        "INFO: Starting setup for Project Calendar entry: %s", entry.entry_id
    )

    # Calendar "today" follows the Home Assistant configured timezone
    dt_utils.set_default_timezone(dt_util.get_default_time_zone())

    store = ProjectCalendarStore(hass)
    coordinator = ProjectCalendarCoordinator(hass, entry, store)

    try:
        # First refresh runs maintenance and loads the collections.
        await coordinator.async_config_entry_first_refresh()
    except ConfigEntryNotReady as e:
        const.LOGGER.error("ERROR: Failed to refresh coordinator data: %s", e)
        raise

    hass.data.setdefault(const.DOMAIN, {})[entry.entry_id] = {
        const.COORDINATOR: coordinator,
        const.STORE: store,
    }

    async_setup_services(hass)

    await hass.config_entries.async_forward_entry_setups(entry, const.PLATFORMS)

    # Reload when options change so the new interval and settings apply
    entry.async_on_unload(entry.add_update_listener(async_reload_entry))

    const.LOGGER.info(
        "INFO: Project Calendar setup complete for entry: %s", entry.entry_id
    )
    return True


async def async_reload_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload the entry after an options change."""
    const.LOGGER.debug("DEBUG: Reloading Project Calendar entry: %s", entry.entry_id)
    await hass.config_entries.async_reload(entry.entry_id)


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    const.LOGGER.info("INFO: Unloading Project Calendar entry: %s", entry.entry_id)

    unload_ok = await hass.config_entries.async_unload_platforms(entry, const.PLATFORMS)

    if unload_ok:
        hass.data[const.DOMAIN].pop(entry.entry_id)
        if not hass.data[const.DOMAIN]:
            await async_unload_services(hass)

    return unload_ok


async def async_remove_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Handle removal of a config entry by deleting its storage files."""
    const.LOGGER.info("INFO: Removing Project Calendar entry: %s", entry.entry_id)

    store = ProjectCalendarStore(hass)
    await store.async_delete_storage()

    const.LOGGER.info("INFO: Project Calendar entry data cleared: %s", entry.entry_id)
