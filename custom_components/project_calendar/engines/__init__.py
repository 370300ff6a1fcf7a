"""Pure scheduling engines for Project Calendar.

Engines hold the calendar logic and operate on plain dict collections. They
never touch Home Assistant state or storage; the coordinator loads the
collections, hands them to an engine, and persists what comes back.

Modules:
    - schedule_engine: next-occurrence resolution for recurrence rules
    - instance_engine: expansion of templates into dated child instances
    - maintenance_engine: archive, prune, carry-over, and materialize passes
    - deletion_engine: single / future deletion of recurring series
"""

# Use relative imports within package to avoid mypy module resolution issues
from .deletion_engine import DeletionResult, EntityNotFoundError, resolve_delete
from .instance_engine import PROJECT_KIND, TODO_KIND, EntityKind, materialize
from .maintenance_engine import MaintenancePlan, plan_maintenance
from .schedule_engine import RecurrenceEngine, next_occurrence

__all__ = [
    "PROJECT_KIND",
    "TODO_KIND",
    "DeletionResult",
    "EntityKind",
    "EntityNotFoundError",
    "MaintenancePlan",
    "RecurrenceEngine",
    "materialize",
    "next_occurrence",
    "plan_maintenance",
    "resolve_delete",
]
