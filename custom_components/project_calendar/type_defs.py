"""Type definitions for Project Calendar data structures.

Projects and todos are persisted as flat camelCase JSON objects, so their
TypedDicts use the functional syntax to keep the stored key names.

TypedDict is STATIC ANALYSIS ONLY. Runtime code still reads entities with
.get() defaults because stored collections may come from older clients.

IMPORTANT: This file must NOT import from coordinator.py or any module that
imports the coordinator, to avoid circular dependencies.
"""

from typing import Any, NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

EntityId = str  # UUID string
ISODatetime = str  # ISO 8601 datetime string "2026-01-18T12:30:00+00:00"
ISODate = str  # ISO 8601 date string (no time) "2026-01-18"

# Any stored entity, before narrowing to a project or todo
EntityData = dict[str, Any]

# =============================================================================
# Stored entities
# =============================================================================

ProjectData = TypedDict(
    "ProjectData",
    {
        "id": EntityId,
        "title": str,
        "projectNumber": NotRequired[str],
        "webAppPeriodStart": ISODate,
        "webAppPeriodEnd": NotRequired[ISODate],
        "fieldWorkPeriodStart": NotRequired[ISODate],
        "fieldWorkPeriodEnd": NotRequired[ISODate],
        "endDate": NotRequired[ISODate],
        "remarks": NotRequired[str],
        "team": NotRequired[str],
        "isWebAppFinished": NotRequired[bool],
        "isFieldWorkStarted": NotRequired[bool],
        "status": str,
        "finishedAt": NotRequired[ISODatetime],
        "frequency": NotRequired[str],
        "frequencyOption": NotRequired[list[str]],
        "recurrenceExcludedDates": NotRequired[list[ISODate]],
        "recurrenceEndDate": NotRequired[ISODate],
        "parentId": NotRequired[EntityId],
        "notificationEnabled": NotRequired[bool],
    },
)

TodoData = TypedDict(
    "TodoData",
    {
        "id": EntityId,
        "title": str,
        "importance": NotRequired[int],
        "content": NotRequired[str],
        "deadline": NotRequired[ISODate],
        "category": NotRequired[str],
        "date": ISODate,
        "isFinished": bool,
        "finishedAt": NotRequired[ISODatetime],
        "frequency": NotRequired[str],
        "frequencyOption": NotRequired[list[str]],
        "recurrenceExcludedDates": NotRequired[list[ISODate]],
        "recurrenceEndDate": NotRequired[ISODate],
        "parentId": NotRequired[EntityId],
        "notificationEnabled": NotRequired[bool],
    },
)

# =============================================================================
# Engine configuration / results
# =============================================================================


class ScheduleConfig(TypedDict, total=False):
    """Configuration for RecurrenceEngine in schedule_engine.py."""

    frequency: str  # FREQUENCY_* constant or an alias from FREQUENCY_ALIASES
    frequency_options: list[str]  # weekday names or a monthly day / last-day tag


class MaintenanceSettings(TypedDict, total=False):
    """Retention and horizon settings for a maintenance run."""

    project_retention_days: int
    todo_retention_days: int
    horizon_months: int


class MaintenanceResult(TypedDict):
    """Which collections a maintenance run replaced in storage."""

    projects_changed: bool
    todos_changed: bool
    archive_changed: bool


class CoordinatorData(TypedDict):
    """Snapshot the coordinator hands to its listeners (calendar entities)."""

    projects: list[ProjectData]
    archived_projects: list[ProjectData]
    todos: list[TodoData]


ExportData = TypedDict(
    "ExportData",
    {
        "projects": list[ProjectData],
        "todos": list[TodoData],
        "exportDate": ISODatetime,
    },
)
