"""Tests for Project Calendar setup, unload and removal."""

# pylint: disable=unused-argument  # Fixtures needed for test setup

from unittest.mock import AsyncMock, patch

from homeassistant.config_entries import ConfigEntryState
from homeassistant.core import HomeAssistant
from homeassistant.helpers.storage import Store
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.project_calendar.const import COORDINATOR, DOMAIN, STORE
from custom_components.project_calendar.coordinator import ProjectCalendarCoordinator
from custom_components.project_calendar.store import ProjectCalendarStore


async def test_setup_and_unload(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Entry loads its coordinator and store, and unloads cleanly."""
    assert init_integration.state is ConfigEntryState.LOADED
    entry_data = hass.data[DOMAIN][init_integration.entry_id]
    assert isinstance(entry_data[COORDINATOR], ProjectCalendarCoordinator)
    assert isinstance(entry_data[STORE], ProjectCalendarStore)

    assert await hass.config_entries.async_unload(init_integration.entry_id)
    await hass.async_block_till_done()

    assert init_integration.state is ConfigEntryState.NOT_LOADED
    assert init_integration.entry_id not in hass.data[DOMAIN]


async def test_first_refresh_failure_retries(
    hass: HomeAssistant, mock_config_entry: MockConfigEntry
) -> None:
    """A failing first maintenance run leaves the entry in setup retry."""
    mock_config_entry.add_to_hass(hass)

    with patch.object(
        ProjectCalendarStore,
        "async_load_projects",
        new=AsyncMock(side_effect=OSError("unreadable")),
    ):
        await hass.config_entries.async_setup(mock_config_entry.entry_id)
        await hass.async_block_till_done()

    assert mock_config_entry.state is ConfigEntryState.SETUP_RETRY


async def test_remove_entry_deletes_storage(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Removing the entry removes all three storage files."""
    with patch.object(Store, "async_remove", new=AsyncMock()) as mock_remove:
        assert await hass.config_entries.async_remove(init_integration.entry_id)
        await hass.async_block_till_done()

    assert mock_remove.await_count == 3
