"""
Exercise reconciliation for partial workout updates.

Applies a caller-supplied list of :class:`ExerciseDirective` against the
exercises already persisted for one workout. Every write goes through the
``exercises`` store of the unit of work handed in, one call at a time, so the
caller's transaction boundary decides whether the whole batch lands or none
of it does.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

from gym_buddy.models.exercise import UNTITLED_EXERCISE
from gym_buddy.services._shared.errors import NotFoundError
from gym_buddy.uow.base import ExerciseStore

from .dto import ExerciseDirective

logger = logging.getLogger(__name__)

ReconcileMode = Literal["patch", "replace"]


class HasExercises(Protocol):
    exercises: ExerciseStore


@dataclass(slots=True)
class ReconcileResult:
    """
    Outcome of one reconciliation pass.

    :param created: Ids of inserted exercises, in directive order.
    :param updated: Ids patched in place.
    :param deleted: Ids removed, explicit deletes first then replaced leftovers.
    :param mode: ``replace`` when unreferenced exercises were swept.
    """

    created: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    mode: ReconcileMode = "patch"

    def as_log_extra(self) -> dict[str, Any]:
        return {
            "exercises_created": len(self.created),
            "exercises_updated": len(self.updated),
            "exercises_deleted": len(self.deleted),
            "reconcile_mode": self.mode,
        }


def replacement_requested(directives: Iterable[ExerciseDirective]) -> bool:
    """Return ``True`` when any directive lacks an id or is tagged ``create``."""
    return any(d.signals_replacement for d in directives)


def _creation_fields(directive: ExerciseDirective) -> dict[str, Any]:
    values = dict(directive.fields)
    if values.get("name") is None:
        values["name"] = UNTITLED_EXERCISE
    if values.get("order") is None:
        values["order"] = 0
    return values


def reconcile_exercises(
    uow: HasExercises,
    workout_id: str,
    directives: Sequence[ExerciseDirective],
    *,
    existing_ids: Iterable[str] | None = None,
) -> ReconcileResult:
    """
    Dispatch directives against the workout's persisted exercises.

    Parameters
    ----------
    uow:
        Open unit of work; only its ``exercises`` store is used.
    workout_id:
        Owning workout.
    directives:
        Changes in caller order. Each one is handled as follows:

        * ``_action == "delete"`` with an id deletes that exercise.
        * an id matching an existing exercise patches only the supplied fields.
        * anything else inserts a new exercise (name ``"Untitled Exercise"``
          and order ``0`` when missing). A client id that matches nothing is
          not reused.
    existing_ids:
        Ids persisted before the call. Loaded from the store when omitted.

    Returns
    -------
    ReconcileResult
        Ids touched per operation.

    Raises
    ------
    NotFoundError
        When a delete (or update) targets an id the workout does not own,
        including one already removed or belonging to another workout. Earlier
        writes of the batch are left for the caller's rollback to discard.

    Notes
    -----
    Pre-existing exercises never referenced by an update or delete are swept
    only when :func:`replacement_requested` holds for the batch. Directive
    order never reorders the list; only explicit ``order`` values do.
    """
    store = uow.exercises
    if existing_ids is None:
        existing_ids = [row.id for row in store.list_for_workout(workout_id)]
    existing = list(existing_ids)
    known = set(existing)

    result = ReconcileResult()
    resolved: set[str] = set()
    explicitly_deleted: set[str] = set()

    for directive in directives:
        if directive.is_delete and directive.id is not None:
            store.delete_by_id(workout_id, directive.id)
            explicitly_deleted.add(directive.id)
            result.deleted.append(directive.id)
            continue

        if directive.id is not None and directive.id in known:
            if directive.id in explicitly_deleted:
                raise NotFoundError("Exercise", directive.id)
            if directive.fields:
                store.update_fields(workout_id, directive.id, directive.fields)
            resolved.add(directive.id)
            result.updated.append(directive.id)
            continue

        created = store.create_for_workout(workout_id, _creation_fields(directive))
        resolved.add(created.id)
        result.created.append(created.id)

    if replacement_requested(directives):
        result.mode = "replace"
        leftovers = [
            ex_id for ex_id in existing if ex_id not in resolved and ex_id not in explicitly_deleted
        ]
        if leftovers:
            store.delete_many(workout_id, leftovers)
            result.deleted.extend(leftovers)

    logger.debug(
        "exercises.reconciled",
        extra={"workout_id": workout_id, **result.as_log_extra()},
    )
    return result
