"""Pure transitions of the per-unit progress embedded in a mission.

Every function returns a new list. Entries that are not touched are passed
through as the same objects.
"""

from datetime import datetime

from pydantic import BaseModel

from app.models.mission import (
    FULFILLED,
    PENDING,
    MissionStatus,
    SubmittedFile,
    UnitMissionProgress,
)


class StatusChange(BaseModel):
    status: MissionStatus


class FileAttached(BaseModel):
    file: SubmittedFile


class FileCleared(BaseModel):
    pass


UnitEvent = StatusChange | FileAttached | FileCleared


def initial_unit_progress(
    target_unit_ids: list[str], user_id: str, user_name: str, now: datetime
) -> list[UnitMissionProgress]:
    return [
        UnitMissionProgress(
            unit_id=unit_id,
            status=PENDING,
            last_updated_by_id=user_id,
            last_updated_by_name=user_name,
            updated_at=now,
        )
        for unit_id in target_unit_ids
    ]


def _next_progress(
    current: UnitMissionProgress, event: UnitEvent, user_id: str, user_name: str, now: datetime
) -> UnitMissionProgress:
    changes = {
        "last_updated_by_id": user_id,
        "last_updated_by_name": user_name,
        "updated_at": now,
    }

    if isinstance(event, StatusChange):
        changes["status"] = event.status
        # submitted_at keeps the first fulfillment
        if event.status == FULFILLED and current.submitted_at is None:
            changes["submitted_at"] = now
    elif isinstance(event, FileAttached):
        changes["status"] = FULFILLED
        changes["submitted_file"] = event.file
        # Uploads always restamp submitted_at, unlike status changes
        changes["submitted_at"] = now
    elif isinstance(event, FileCleared):
        changes["status"] = PENDING
        changes["submitted_file"] = None
    else:
        raise TypeError(f"Unknown unit event: {type(event).__name__}")

    return current.model_copy(update=changes)


def apply_unit_event(
    progress: list[UnitMissionProgress],
    unit_id: str,
    event: UnitEvent,
    user_id: str,
    user_name: str,
    now: datetime,
) -> list[UnitMissionProgress]:
    """Replace the entry of ``unit_id`` with its next state after ``event``."""
    return [
        _next_progress(entry, event, user_id, user_name, now) if entry.unit_id == unit_id else entry
        for entry in progress
    ]


def reconcile_unit_progress(
    progress: list[UnitMissionProgress],
    target_unit_ids: list[str],
    user_id: str,
    user_name: str,
    now: datetime,
) -> list[UnitMissionProgress]:
    """Align progress with the target units.

    Units that were added get a fresh ``Pendente`` entry stamped with the
    acting user; entries of units that are no longer targeted are dropped.
    Entries of units that stay keep their order and identity.
    """
    targets = set(target_unit_ids)
    kept = [entry for entry in progress if entry.unit_id in targets]
    known = {entry.unit_id for entry in kept}
    added = initial_unit_progress(
        [unit_id for unit_id in target_unit_ids if unit_id not in known], user_id, user_name, now
    )
    return kept + added


def with_unit_entry(
    progress: list[UnitMissionProgress], unit_id: str, user_id: str, user_name: str, now: datetime
) -> list[UnitMissionProgress]:
    """Progress with a ``Pendente`` entry for ``unit_id`` appended when it has none.

    Missions targeting every unit start with a single shared entry; a unit
    gets its own entry the first time its progress changes.
    """
    if any(entry.unit_id == unit_id for entry in progress):
        return progress
    return [*progress, *initial_unit_progress([unit_id], user_id, user_name, now)]
