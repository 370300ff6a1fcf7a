"""Shared fixtures for Project Calendar tests."""

from typing import Any

import pytest
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.project_calendar.const import (
    CONF_HORIZON_MONTHS,
    CONF_PROJECT_RETENTION_DAYS,
    CONF_TODO_RETENTION_DAYS,
    CONF_UPDATE_INTERVAL,
    DEFAULT_HORIZON_MONTHS,
    DEFAULT_PROJECT_RETENTION_DAYS,
    DEFAULT_TODO_RETENTION_DAYS,
    DEFAULT_UPDATE_INTERVAL,
    DOMAIN,
    STORAGE_KEY_FINISHED_PROJECTS,
    STORAGE_KEY_PROJECTS,
    STORAGE_KEY_TODOS,
)
from tests.helpers import setup_integration

# pylint: disable=invalid-name
pytest_plugins = "pytest_homeassistant_custom_component"
# pylint: enable=invalid-name


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations: Any) -> Any:
    """Enable custom integrations in tests."""
    # pylint: disable=unused-argument
    yield


@pytest.fixture
def mock_config_entry() -> MockConfigEntry:
    """Return a mock config entry."""
    return MockConfigEntry(
        domain=DOMAIN,
        title="Project Calendar",
        data={},
        options={
            CONF_UPDATE_INTERVAL: DEFAULT_UPDATE_INTERVAL,
            CONF_PROJECT_RETENTION_DAYS: DEFAULT_PROJECT_RETENTION_DAYS,
            CONF_TODO_RETENTION_DAYS: DEFAULT_TODO_RETENTION_DAYS,
            CONF_HORIZON_MONTHS: DEFAULT_HORIZON_MONTHS,
        },
        entry_id="test_entry_id",
        unique_id="test_unique_id",
    )


@pytest.fixture
def mock_storage_data() -> dict[str, list[dict[str, Any]]]:
    """Return the stored collections keyed by storage key (empty by default)."""
    return {
        STORAGE_KEY_PROJECTS: [],
        STORAGE_KEY_FINISHED_PROJECTS: [],
        STORAGE_KEY_TODOS: [],
    }


@pytest.fixture
async def init_integration(
    hass: HomeAssistant,
    hass_storage: dict[str, Any],
    mock_config_entry: MockConfigEntry,  # pylint: disable=redefined-outer-name
    mock_storage_data: dict[str, list[dict[str, Any]]],  # pylint: disable=redefined-outer-name
) -> MockConfigEntry:
    """Set up the Project Calendar integration with seeded mock storage."""
    await setup_integration(hass, hass_storage, mock_config_entry, mock_storage_data)
    return mock_config_entry
