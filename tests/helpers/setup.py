"""Setup helpers for Project Calendar test configuration.

Seeds Home Assistant's mocked storage with the three collections and sets up
the config entry, so a test can focus on behavior instead of boilerplate.

Example:
    result = await setup_integration(hass, hass_storage, mock_config_entry, {
        STORAGE_KEY_TODOS: [create_mock_todo_data("t1", date="2024-11-01")],
    })
    # Access: result.config_entry, result.coordinator
"""

from dataclasses import dataclass
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from custom_components.project_calendar import const
from custom_components.project_calendar.coordinator import ProjectCalendarCoordinator
from tests.helpers.factories import seed_storage

# =============================================================================
# DATACLASSES
# =============================================================================


@dataclass
class SetupResult:
    """Result from setup_integration.

    Attributes:
        config_entry: The loaded ConfigEntry
        coordinator: The ProjectCalendarCoordinator instance
    """

    config_entry: ConfigEntry
    coordinator: ProjectCalendarCoordinator


# =============================================================================
# SETUP
# =============================================================================


async def setup_integration(
    hass: HomeAssistant,
    hass_storage: dict[str, Any],
    config_entry: ConfigEntry,
    collections: dict[str, list[dict[str, Any]]] | None = None,
) -> SetupResult:
    """Seed storage, add the entry and set it up.

    The first coordinator refresh runs maintenance with the current (possibly
    frozen) time.
    """
    if collections:
        seed_storage(hass_storage, collections)

    config_entry.add_to_hass(hass)
    assert await hass.config_entries.async_setup(config_entry.entry_id)
    await hass.async_block_till_done()

    coordinator = hass.data[const.DOMAIN][config_entry.entry_id][const.COORDINATOR]
    return SetupResult(config_entry=config_entry, coordinator=coordinator)
