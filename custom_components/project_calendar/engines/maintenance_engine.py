"""Maintenance Engine - the passes of one scheduler run.

A maintenance run works on in-memory copies of the three collections and
applies, in order:
1. archive   - finished projects move from the active list to the archive
2. prune     - stale finished entities are dropped (projects 3d, todos 14d)
3. carry-over - overdue unfinished todos move to today
4. materialize - templates are expanded up to the horizon

Each pass returns a new list plus a changed flag; the input lists and their
entities are never mutated. `plan_maintenance` chains the passes and reports
which collections must be written back.

Stateless: persistence and the run lock belong to the coordinator.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import dt_format_date, dt_parse_datetime, horizon_end
from .instance_engine import (
    PROJECT_KIND,
    TODO_KIND,
    EntityKind,
    get_anchor,
    is_child,
    is_template,
    materialize,
)

if TYPE_CHECKING:
    from ..type_defs import EntityData, MaintenanceResult, MaintenanceSettings


@dataclass
class MaintenancePlan:
    """Outcome of one maintenance run, ready to be persisted.

    Attributes:
        projects: New active project collection
        archive: New archived project collection
        todos: New todo collection
        projects_changed: Active projects differ from what was loaded
        todos_changed: Todos differ from what was loaded
        archive_changed: Archive gained at least one project
    """

    projects: list[EntityData]
    archive: list[EntityData]
    todos: list[EntityData]
    projects_changed: bool = False
    todos_changed: bool = False
    archive_changed: bool = False

    def as_result(self) -> MaintenanceResult:
        """Return the change flags reported to callers."""
        return {
            "projects_changed": self.projects_changed,
            "todos_changed": self.todos_changed,
            "archive_changed": self.archive_changed,
        }


def _anchor_sort_key(entity: EntityData, kind: EntityKind) -> date:
    # Undated entities sort first
    return get_anchor(entity, kind) or date.min


# =============================================================================
# Pass 1: Archive
# =============================================================================


def archive_finished_projects(
    active: list[EntityData], archive: list[EntityData]
) -> tuple[list[EntityData], list[EntityData], bool, bool]:
    """Move every finished project from the active list into the archive.

    A project already archived (same id) is not added again. The archive is
    kept in ascending anchor order; the sort is stable so equal dates keep
    their insertion order.

    Returns:
        (new_active, new_archive, active_changed, archive_changed)
    """
    archived_ids = {project.get(const.DATA_ID) for project in archive}
    new_active: list[EntityData] = []
    added: list[EntityData] = []

    for project in active:
        if not PROJECT_KIND.is_terminal(project):
            new_active.append(project)
            continue
        project_id = project.get(const.DATA_ID)
        if project_id in archived_ids:
            const.LOGGER.debug("Project %s already archived", project_id)
            continue
        archived_ids.add(project_id)
        added.append(project)

    active_changed = len(new_active) != len(active)
    if not added:
        return new_active, list(archive), active_changed, False

    new_archive = sorted(
        [*archive, *added], key=lambda p: _anchor_sort_key(p, PROJECT_KIND)
    )
    const.LOGGER.debug("Archived %d finished project(s)", len(added))
    return new_active, new_archive, active_changed, True


# =============================================================================
# Pass 2: Prune
# =============================================================================


def prune_finished(
    entities: list[EntityData],
    kind: EntityKind,
    now: datetime,
    retention: timedelta,
) -> tuple[list[EntityData], bool]:
    """Drop finished entities whose finishedAt is strictly before now - retention.

    Entities without a parseable finishedAt are kept.
    """
    cutoff = now - retention
    kept: list[EntityData] = []
    for entity in entities:
        if kind.is_terminal(entity):
            finished_at = dt_parse_datetime(entity.get(const.DATA_FINISHED_AT))
            if finished_at is not None and finished_at < cutoff:
                const.LOGGER.debug(
                    "Pruning %s %s finished at %s",
                    kind.name,
                    entity.get(const.DATA_ID),
                    finished_at,
                )
                continue
        kept.append(entity)
    return kept, len(kept) != len(entities)


# =============================================================================
# Pass 3: Carry-over
# =============================================================================


def _series_id(todo: EntityData) -> str | None:
    """Return the template id a todo belongs to, or None for a plain todo."""
    if is_child(todo):
        return todo.get(const.DATA_PARENT_ID)
    if is_template(todo):
        return todo.get(const.DATA_ID)
    return None


def _is_overdue(todo: EntityData, today: date) -> bool:
    todo_date = get_anchor(todo, TODO_KIND)
    return (
        not TODO_KIND.is_terminal(todo) and todo_date is not None and todo_date < today
    )


def carry_over_todos(
    todos: list[EntityData], today: date
) -> tuple[list[EntityData], bool]:
    """Move every unfinished todo dated before today onto today.

    The original date is overwritten. Todos without a valid date are left
    alone. An overdue child whose series already has a todo on today (a
    sibling, the template, or an earlier carried child) is dropped instead of
    moved, so a series never holds two instances on one date. Templates and
    plain todos are always carried.
    """
    today_str = dt_format_date(today)

    # Series present on today once templates are carried
    occupied: set[str] = set()
    for todo in todos:
        series = _series_id(todo)
        if series is None:
            continue
        if get_anchor(todo, TODO_KIND) == today or (
            is_template(todo) and _is_overdue(todo, today)
        ):
            occupied.add(series)

    changed = False
    result: list[EntityData] = []
    for todo in todos:
        if not _is_overdue(todo, today):
            result.append(todo)
            continue
        changed = True
        if is_child(todo):
            series = todo.get(const.DATA_PARENT_ID)
            if series in occupied:
                const.LOGGER.debug(
                    "Dropping overdue todo %s: series %s already has %s",
                    todo.get(const.DATA_ID),
                    series,
                    today_str,
                )
                continue
            occupied.add(series)
        result.append({**todo, const.DATA_TODO_DATE: today_str})
    return result, changed


# =============================================================================
# Pass 4: Materialize
# =============================================================================


def is_materializable(entity: EntityData, kind: EntityKind) -> bool:
    """Return True for an unfinished template."""
    return is_template(entity) and not kind.is_terminal(entity)


def materialize_all(
    entities: list[EntityData],
    kind: EntityKind,
    until: date,
    existing_extra: Iterable[EntityData] = (),
) -> tuple[list[EntityData], bool]:
    """Append missing children for every eligible template in `entities`.

    Args:
        entities: Collection holding the templates and their children
        kind: PROJECT_KIND or TODO_KIND
        until: Horizon end date (inclusive)
        existing_extra: Further entities whose children count as existing
            (archived projects), so they are not generated again
    """
    extra = list(existing_extra)
    result = list(entities)
    created = 0
    for template in entities:
        if not is_materializable(template, kind):
            continue
        children = materialize(template, [*result, *extra], until, kind)
        result.extend(children)
        created += len(children)

    if created:
        const.LOGGER.debug("Created %d %s instance(s) through %s", created, kind.name, until)
    return result, created > 0


# =============================================================================
# Full run
# =============================================================================


def plan_maintenance(
    projects: list[EntityData],
    archive: list[EntityData],
    todos: list[EntityData],
    now: datetime,
    settings: MaintenanceSettings | None = None,
) -> MaintenancePlan:
    """Run every maintenance pass over the loaded collections.

    Args:
        projects: Active projects as loaded
        archive: Archived projects as loaded
        todos: Todos as loaded
        now: Timezone-aware current time; its calendar date is "today"
        settings: Retention and horizon overrides (defaults from const)

    Returns:
        MaintenancePlan with the new collections and change flags.
    """
    settings = settings or {}
    project_retention = timedelta(
        days=settings.get(
            "project_retention_days", const.DEFAULT_PROJECT_RETENTION_DAYS
        )
    )
    todo_retention = timedelta(
        days=settings.get("todo_retention_days", const.DEFAULT_TODO_RETENTION_DAYS)
    )
    today = now.date()
    until = horizon_end(
        today, settings.get("horizon_months", const.DEFAULT_HORIZON_MONTHS)
    )

    # Projects: archive, prune, materialize
    new_projects, new_archive, projects_changed, archive_changed = (
        archive_finished_projects(projects, archive)
    )
    new_projects, pruned = prune_finished(
        new_projects, PROJECT_KIND, now, project_retention
    )
    projects_changed = projects_changed or pruned
    new_projects, created = materialize_all(
        new_projects, PROJECT_KIND, until, existing_extra=new_archive
    )
    projects_changed = projects_changed or created

    # Todos: prune, carry-over, materialize
    new_todos, todos_changed = prune_finished(todos, TODO_KIND, now, todo_retention)
    new_todos, carried = carry_over_todos(new_todos, today)
    todos_changed = todos_changed or carried
    new_todos, created = materialize_all(new_todos, TODO_KIND, until)
    todos_changed = todos_changed or created

    const.LOGGER.debug(
        "Maintenance plan for %s: projects_changed=%s todos_changed=%s archive_changed=%s",
        today,
        projects_changed,
        todos_changed,
        archive_changed,
    )
    return MaintenancePlan(
        projects=new_projects,
        archive=new_archive,
        todos=new_todos,
        projects_changed=projects_changed,
        todos_changed=todos_changed,
        archive_changed=archive_changed,
    )


def count_orphans(entities: Iterable[EntityData]) -> int:
    """Return how many children reference a template that is not present.

    Orphans are left in place; the count is only reported in logs.
    """
    entity_list = list(entities)
    ids = {entity.get(const.DATA_ID) for entity in entity_list}
    return sum(
        1
        for entity in entity_list
        if is_child(entity) and entity.get(const.DATA_PARENT_ID) not in ids
    )
