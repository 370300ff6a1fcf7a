# File: store.py
"""Handles persistent data storage for the Project Calendar integration.

Uses Home Assistant's Storage helper to keep the three collections (active
projects, archived projects, todos) in separate JSON files. Each collection is
a JSON array and every save replaces the whole file; Home Assistant writes
through a temp file and rename, so a crash never leaves a truncated file.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.storage import Store

from . import const

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from .type_defs import EntityData, ProjectData, TodoData


class StorageWriteError(HomeAssistantError):
    """Raised when a collection could not be written to disk."""


class ProjectCalendarStore:
    """Handles persistent storage operations for Project Calendar data.

    Thin wrapper around Home Assistant's Store API. One Store per collection,
    loaded on demand; nothing is cached here so every maintenance run works on
    what is actually on disk.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        projects_key: str = const.STORAGE_KEY_PROJECTS,
        archive_key: str = const.STORAGE_KEY_FINISHED_PROJECTS,
        todos_key: str = const.STORAGE_KEY_TODOS,
    ) -> None:
        """Initialize the store.

        Args:
            hass: Home Assistant core object.
            projects_key: Storage key of the active project collection.
            archive_key: Storage key of the archived project collection.
            todos_key: Storage key of the todo collection.
        """
        self.hass = hass
        self._projects: Store = Store(hass, const.STORAGE_VERSION, projects_key)
        self._archive: Store = Store(hass, const.STORAGE_VERSION, archive_key)
        self._todos: Store = Store(hass, const.STORAGE_VERSION, todos_key)

    def _all_stores(self) -> tuple[Store, ...]:
        return (self._projects, self._archive, self._todos)

    # -------------------------------------------------------------------------------------
    # Collections
    # -------------------------------------------------------------------------------------

    async def async_load_projects(self) -> list[ProjectData]:
        """Load the active project collection."""
        return await self._async_load_collection(self._projects)  # type: ignore[return-value]

    async def async_save_projects(self, projects: list[ProjectData]) -> None:
        """Replace the active project collection."""
        await self._async_save_collection(self._projects, projects)  # type: ignore[arg-type]

    async def async_load_archived_projects(self) -> list[ProjectData]:
        """Load the archived (finished) project collection."""
        return await self._async_load_collection(self._archive)  # type: ignore[return-value]

    async def async_save_archived_projects(self, projects: list[ProjectData]) -> None:
        """Replace the archived project collection."""
        await self._async_save_collection(self._archive, projects)  # type: ignore[arg-type]

    async def async_load_todos(self) -> list[TodoData]:
        """Load the todo collection."""
        return await self._async_load_collection(self._todos)  # type: ignore[return-value]

    async def async_save_todos(self, todos: list[TodoData]) -> None:
        """Replace the todo collection."""
        await self._async_save_collection(self._todos, todos)  # type: ignore[arg-type]

    # -------------------------------------------------------------------------------------
    # Maintenance of the storage files
    # -------------------------------------------------------------------------------------

    async def async_delete_storage(self) -> None:
        """Delete the storage files completely from disk."""
        for store in self._all_stores():
            try:
                await store.async_remove()
                const.LOGGER.info(
                    "INFO: Storage file removed successfully: %s", store.path
                )
            except OSError as err:
                const.LOGGER.error(
                    "ERROR: Failed to remove storage file %s: %s. Check file permissions",
                    store.path,
                    err,
                )

    # -------------------------------------------------------------------------------------
    # Private
    # -------------------------------------------------------------------------------------

    async def _async_load_collection(self, store: Store) -> list[EntityData]:
        """Load one collection, tolerating missing or malformed content.

        A missing file or anything that is not a JSON array loads as empty;
        array items that are not objects are dropped.
        """
        raw: Any = await store.async_load()
        if raw is None:
            const.LOGGER.debug("DEBUG: No stored data for %s", store.key)
            return []

        if not isinstance(raw, list):
            const.LOGGER.warning(
                "WARNING: Stored data for %s is not a list (%s), treating as empty",
                store.key,
                type(raw).__name__,
            )
            return []

        items = [item for item in raw if isinstance(item, dict)]
        if len(items) != len(raw):
            const.LOGGER.warning(
                "WARNING: Dropped %s malformed item(s) from %s",
                len(raw) - len(items),
                store.key,
            )
        const.LOGGER.debug("DEBUG: Loaded %s item(s) from %s", len(items), store.key)
        return items

    async def _async_save_collection(
        self, store: Store, items: list[EntityData]
    ) -> None:
        """Write one collection as a whole-file replace.

        Raises:
            StorageWriteError: The write failed. Failures are logged first.
        """
        try:
            await store.async_save(items)
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to save %s due to file system error: %s. "
                "Check disk space and file permissions for %s",
                store.key,
                err,
                store.path,
            )
            raise StorageWriteError(f"Failed to save {store.key}: {err}") from err
        except (TypeError, ValueError) as err:
            const.LOGGER.error(
                "ERROR: Failed to save %s due to non-serializable data: %s",
                store.key,
                err,
            )
            raise StorageWriteError(f"Failed to save {store.key}: {err}") from err
        except HomeAssistantError as err:
            const.LOGGER.error("ERROR: Failed to save %s: %s", store.key, err)
            raise StorageWriteError(f"Failed to save {store.key}: {err}") from err

        const.LOGGER.debug("DEBUG: Saved %s item(s) to %s", len(items), store.key)
