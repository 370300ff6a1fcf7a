"""Instance Engine - expands recurring templates into dated child instances.

Projects and todos share one materializer. Everything that differs between
the two lives in an `EntityKind` descriptor:
- which field is the anchor date that recurrence advances
- which other date fields move along with the anchor
- which completion flags a fresh child starts with
- what "finished" means for the kind

Classification of a stored entity (exactly one holds):
- template: has a frequency, no parentId
- child: has a parentId (never a frequency)
- plain: neither

This engine is stateless and never persists anything; callers append the
returned children to their in-memory collection.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Any
import uuid

from .. import const
from ..utils.dt_utils import add_days, days_between, dt_format_date, dt_parse_date
from .schedule_engine import (
    RecurrenceEngine,
    normalize_frequency,
    normalize_frequency_options,
)

if TYPE_CHECKING:
    from ..type_defs import EntityData, ScheduleConfig


# =============================================================================
# Entity kinds
# =============================================================================


@dataclass(frozen=True)
class EntityKind:
    """Describes how one stored entity type takes part in recurrence.

    Attributes:
        name: Human-readable kind name used in log messages
        anchor_field: Date field advanced by the recurrence rule
        shifted_fields: Other date fields moved by the same day offset
        completion_reset: Field values every new child starts with
        is_terminal: Predicate for the kind's finished state
    """

    name: str
    anchor_field: str
    shifted_fields: tuple[str, ...]
    is_terminal: Callable[[EntityData], bool]
    completion_reset: Mapping[str, Any] = field(default_factory=dict)


def _project_is_finished(entity: EntityData) -> bool:
    return entity.get(const.DATA_PROJECT_STATUS) == const.PROJECT_STATUS_FINISHED


def _todo_is_finished(entity: EntityData) -> bool:
    return entity.get(const.DATA_TODO_IS_FINISHED) is True


PROJECT_KIND = EntityKind(
    name="project",
    anchor_field=const.DATA_PROJECT_WEB_APP_PERIOD_START,
    shifted_fields=(
        const.DATA_PROJECT_WEB_APP_PERIOD_END,
        const.DATA_PROJECT_FIELD_WORK_PERIOD_START,
        const.DATA_PROJECT_FIELD_WORK_PERIOD_END,
        const.DATA_PROJECT_END_DATE,
    ),
    is_terminal=_project_is_finished,
    completion_reset={
        const.DATA_PROJECT_STATUS: const.PROJECT_STATUS_ACTIVE,
        const.DATA_PROJECT_IS_WEB_APP_FINISHED: False,
        const.DATA_PROJECT_IS_FIELD_WORK_STARTED: False,
    },
)

TODO_KIND = EntityKind(
    name="todo",
    anchor_field=const.DATA_TODO_DATE,
    shifted_fields=(const.DATA_TODO_DEADLINE,),
    is_terminal=_todo_is_finished,
    completion_reset={const.DATA_TODO_IS_FINISHED: False},
)


# =============================================================================
# Classification helpers
# =============================================================================


def is_child(entity: EntityData) -> bool:
    """Return True if the entity is a materialized instance of a template."""
    return bool(entity.get(const.DATA_PARENT_ID))


def is_template(entity: EntityData) -> bool:
    """Return True if the entity carries a recurrence rule and no parent."""
    if is_child(entity):
        return False
    return normalize_frequency(entity.get(const.DATA_FREQUENCY)) != const.FREQUENCY_NONE


def get_frequency_options(entity: EntityData) -> list[str]:
    """Return the entity's frequency options, honoring the plural key alias."""
    raw = entity.get(const.DATA_FREQUENCY_OPTION)
    if raw is None:
        raw = entity.get(const.DATA_FREQUENCY_OPTIONS_ALIAS)
    return normalize_frequency_options(raw)


def schedule_config_from_entity(entity: EntityData) -> ScheduleConfig:
    """Build a RecurrenceEngine config from a stored template."""
    return {
        "frequency": normalize_frequency(entity.get(const.DATA_FREQUENCY)),
        "frequency_options": get_frequency_options(entity),
    }


def get_anchor(entity: EntityData, kind: EntityKind) -> date | None:
    """Return the parsed anchor date of an entity, or None."""
    return dt_parse_date(entity.get(kind.anchor_field))


def occupied_anchors(
    template_id: str, existing: Iterable[EntityData], kind: EntityKind
) -> set[date]:
    """Return the anchor dates already taken by children of a template."""
    taken: set[date] = set()
    for entity in existing:
        if entity.get(const.DATA_PARENT_ID) != template_id:
            continue
        anchor = get_anchor(entity, kind)
        if anchor is not None:
            taken.add(anchor)
    return taken


# =============================================================================
# Materialization
# =============================================================================


def build_child(
    template: EntityData,
    candidate: date,
    kind: EntityKind,
    id_factory: Callable[[], Any] = uuid.uuid4,
) -> EntityData:
    """Create one child instance of `template` anchored on `candidate`.

    The child copies every template field except the recurrence controls and
    finishedAt, gets a fresh id and the template as parent, and has each
    shifted date field moved by the anchor offset. Unparseable shifted dates
    are copied unchanged.
    """
    origin = get_anchor(template, kind)
    offset = days_between(origin, candidate) if origin is not None else 0

    child: EntityData = {
        key: value
        for key, value in template.items()
        if key not in const.RECURRENCE_CONTROL_FIELDS and key != const.DATA_FINISHED_AT
    }
    child[const.DATA_ID] = str(id_factory())
    child[const.DATA_PARENT_ID] = template[const.DATA_ID]
    child[kind.anchor_field] = dt_format_date(candidate)

    for field_name in kind.shifted_fields:
        shifted = dt_parse_date(template.get(field_name))
        if shifted is not None:
            child[field_name] = dt_format_date(add_days(shifted, offset))

    child.update(kind.completion_reset)
    return child


def materialize(
    template: EntityData,
    existing: Iterable[EntityData],
    horizon_end: date,
    kind: EntityKind,
    id_factory: Callable[[], Any] = uuid.uuid4,
) -> list[EntityData]:
    """Expand a template into the children missing up to the horizon.

    Walks occurrences from the template's anchor until a candidate passes
    min(horizon_end, recurrenceEndDate). Candidates already held by a child of
    this template, or listed in recurrenceExcludedDates, are skipped; the
    cursor still advances past them.

    Args:
        template: The recurring entity (non-templates yield nothing)
        existing: Entities to check for existing children (any collection)
        horizon_end: Last date (inclusive) to materialize into
        kind: PROJECT_KIND or TODO_KIND
        id_factory: Source of new ids (uuid4 by default)

    Returns:
        Newly created children, in date order.
    """
    if not is_template(template):
        return []

    template_id = template.get(const.DATA_ID)
    origin = get_anchor(template, kind)
    if not template_id or origin is None:
        const.LOGGER.warning(
            "Skipping %s template without id or valid %s: %s",
            kind.name,
            kind.anchor_field,
            template_id,
        )
        return []

    until = horizon_end
    recurrence_end = dt_parse_date(template.get(const.DATA_RECURRENCE_END_DATE))
    if recurrence_end is not None and recurrence_end < until:
        until = recurrence_end

    taken = occupied_anchors(template_id, existing, kind)
    excluded = {
        parsed
        for parsed in (
            dt_parse_date(value)
            for value in template.get(const.DATA_RECURRENCE_EXCLUDED_DATES) or []
        )
        if parsed is not None
    }

    engine = RecurrenceEngine(schedule_config_from_entity(template))
    children: list[EntityData] = []
    for candidate in engine.iter_occurrences(origin, until):
        if candidate in taken or candidate in excluded:
            continue
        child = build_child(template, candidate, kind, id_factory)
        children.append(child)
        taken.add(candidate)

    if children:
        const.LOGGER.debug(
            "Materialized %d %s instance(s) for template %s through %s",
            len(children),
            kind.name,
            template_id,
            until,
        )
    return children
