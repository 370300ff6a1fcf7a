"""Deletion Engine - resolves deletes against recurring series.

Modes:
- single: remove only the target. A child also records its anchor date in
  the template's recurrenceExcludedDates so it is never regenerated.
- future: a child caps the template's recurrenceEndDate at the day before its
  anchor and removes itself plus every later sibling. A template removes
  itself and all of its children.

Plain (non-recurring) entities are removed whatever the mode.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import add_days, dt_format_date, dt_parse_date
from .instance_engine import EntityKind, get_anchor, is_child, is_template

if TYPE_CHECKING:
    from ..type_defs import EntityData


class EntityNotFoundError(Exception):
    """Raised when a delete targets an id that is not in the collection.

    Attributes:
        entity_id: The id that was requested
        kind: Entity kind name ("project" or "todo")
    """

    def __init__(self, entity_id: str, kind: str) -> None:
        """Initialize EntityNotFoundError."""
        self.entity_id = entity_id
        self.kind = kind
        super().__init__(f"{kind.capitalize()} '{entity_id}' not found")


@dataclass
class DeletionResult:
    """New collection after a delete, plus what happened.

    Attributes:
        entities: Collection without the removed entities
        removed_ids: Ids removed, target first
        parent_updated: The template's exclusions or end date were changed
    """

    entities: list[EntityData]
    removed_ids: list[str] = field(default_factory=list)
    parent_updated: bool = False


def resolve_delete(
    entities: list[EntityData],
    target_id: str,
    mode: str,
    kind: EntityKind,
) -> DeletionResult:
    """Apply a single or future delete to a collection.

    The input list and its entities are not mutated; the template, when
    changed, is replaced by an updated copy.

    Args:
        entities: The full collection holding the target
        target_id: Id of the entity to delete
        mode: DELETE_MODE_SINGLE or DELETE_MODE_FUTURE
        kind: PROJECT_KIND or TODO_KIND

    Raises:
        ValueError: mode is not a known delete mode
        EntityNotFoundError: no entity has target_id
    """
    if mode not in const.DELETE_MODES:
        raise ValueError(const.ERROR_INVALID_DELETE_MODE_FMT.format(mode))

    target = next(
        (entity for entity in entities if entity.get(const.DATA_ID) == target_id),
        None,
    )
    if target is None:
        raise EntityNotFoundError(target_id, kind.name)

    if is_child(target):
        if mode == const.DELETE_MODE_SINGLE:
            result = _delete_child_single(entities, target, kind)
        else:
            result = _delete_child_future(entities, target, kind)
    elif is_template(target) and mode == const.DELETE_MODE_FUTURE:
        removed = [
            entity.get(const.DATA_ID)
            for entity in entities
            if entity.get(const.DATA_ID) == target_id
            or entity.get(const.DATA_PARENT_ID) == target_id
        ]
        result = DeletionResult(
            entities=[
                entity
                for entity in entities
                if entity.get(const.DATA_ID) not in removed
            ],
            removed_ids=removed,
        )
    else:
        # Plain entity, or a template deleted on its own
        result = _remove_ids(entities, [target_id])

    const.LOGGER.debug(
        "Deleted %s %s (mode=%s): removed %d, parent_updated=%s",
        kind.name,
        target_id,
        mode,
        len(result.removed_ids),
        result.parent_updated,
    )
    return result


# =============================================================================
# Private helpers
# =============================================================================


def _remove_ids(entities: list[EntityData], ids: list[str]) -> DeletionResult:
    drop = set(ids)
    return DeletionResult(
        entities=[e for e in entities if e.get(const.DATA_ID) not in drop],
        removed_ids=list(ids),
    )


def _replace_entity(
    entities: list[EntityData], replacement: EntityData
) -> list[EntityData]:
    replacement_id = replacement.get(const.DATA_ID)
    return [
        replacement if entity.get(const.DATA_ID) == replacement_id else entity
        for entity in entities
    ]


def _find_parent(entities: list[EntityData], child: EntityData) -> EntityData | None:
    parent_id = child.get(const.DATA_PARENT_ID)
    return next(
        (entity for entity in entities if entity.get(const.DATA_ID) == parent_id),
        None,
    )


def _delete_child_single(
    entities: list[EntityData], target: EntityData, kind: EntityKind
) -> DeletionResult:
    """Exclude the child's date on its template, then remove the child."""
    parent = _find_parent(entities, target)
    anchor_value = target.get(kind.anchor_field)
    parent_updated = False

    if parent is None:
        const.LOGGER.debug(
            "Template of %s %s no longer exists; removing orphan",
            kind.name,
            target.get(const.DATA_ID),
        )
    elif anchor_value:
        excluded = list(parent.get(const.DATA_RECURRENCE_EXCLUDED_DATES) or [])
        if anchor_value not in excluded:
            excluded.append(anchor_value)
            entities = _replace_entity(
                entities,
                {**parent, const.DATA_RECURRENCE_EXCLUDED_DATES: excluded},
            )
            parent_updated = True

    result = _remove_ids(entities, [target[const.DATA_ID]])
    result.parent_updated = parent_updated
    return result


def _delete_child_future(
    entities: list[EntityData], target: EntityData, kind: EntityKind
) -> DeletionResult:
    """Cap the template before the child's date and drop it and later siblings."""
    parent_id = target.get(const.DATA_PARENT_ID)
    target_id = target[const.DATA_ID]
    target_anchor = get_anchor(target, kind)
    parent = _find_parent(entities, target)
    parent_updated = False

    if parent is not None and target_anchor is not None:
        # Only ever moves the end earlier
        end_date = add_days(target_anchor, -1)
        existing_end = dt_parse_date(parent.get(const.DATA_RECURRENCE_END_DATE))
        if existing_end is None or end_date < existing_end:
            entities = _replace_entity(
                entities,
                {**parent, const.DATA_RECURRENCE_END_DATE: dt_format_date(end_date)},
            )
            parent_updated = True

    removed = [target_id]
    if target_anchor is not None:
        for entity in entities:
            if entity.get(const.DATA_ID) == target_id:
                continue
            if entity.get(const.DATA_PARENT_ID) != parent_id:
                continue
            sibling_anchor = dt_parse_date(entity.get(kind.anchor_field))
            if sibling_anchor is not None and sibling_anchor >= target_anchor:
                removed.append(entity[const.DATA_ID])

    result = _remove_ids(entities, removed)
    result.parent_updated = parent_updated
    return result
