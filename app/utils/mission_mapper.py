"""Translation between Firestore mission documents and Mission models.

Documents are flat snake_case dicts with the per-unit progress embedded as a
list of dicts. Older documents predate two things and are read leniently:
``requires_file_submission`` (defaults to True) and per-unit progress, where
a single mission-level ``status`` applied to every target unit.

A document missing a required field, or holding a value the models reject,
does not map to a mission; ``row_to_mission`` raises and callers that read
many documents skip it.
"""

from typing import Any

from app.models.mission import FULFILLED, PENDING, Mission, UnitMissionProgress


IMMUTABLE_FIELDS = ("id", "created_by", "created_by_name", "creation_date")


def _migrate_legacy_progress(row: dict[str, Any]) -> list[dict[str, Any]]:
    status = row.get("status") or PENDING
    last_updated_by_id = row.get("last_updated_by_id") or row.get("created_by")
    last_updated_by_name = row.get("last_updated_by_name") or row.get("created_by_name")
    updated_at = row.get("updated_at") or row.get("creation_date")

    return [
        {
            "unit_id": unit_id,
            "status": status,
            "submitted_file": row.get("submitted_file"),
            "submitted_at": updated_at if status == FULFILLED else None,
            "last_updated_by_id": last_updated_by_id,
            "last_updated_by_name": last_updated_by_name,
            "updated_at": updated_at,
        }
        for unit_id in row.get("target_unit_ids") or []
    ]


def row_to_mission(row: dict[str, Any]) -> Mission:
    unit_progress = row.get("unit_progress")
    if unit_progress is None and "status" in row:
        unit_progress = _migrate_legacy_progress(row)

    requires_file_submission = row.get("requires_file_submission")

    return Mission(
        id=row["id"],
        title=row["title"],
        description=row.get("description"),
        day_of_week=row["day_of_week"],
        target_unit_ids=row.get("target_unit_ids") or [],
        unit_progress=[UnitMissionProgress(**p) for p in unit_progress or []],
        requires_file_submission=(
            True if requires_file_submission is None else requires_file_submission
        ),
        created_by=row["created_by"],
        created_by_name=row["created_by_name"],
        creation_date=row["creation_date"],
        last_updated_by_id=row.get("last_updated_by_id"),
        last_updated_by_name=row.get("last_updated_by_name"),
        updated_at=row.get("updated_at"),
    )


def mission_to_row(
    mission: Mission, last_updated_by_id: str, last_updated_by_name: str
) -> dict[str, Any]:
    """Flatten a mission for storage, stamped with the identity of the writer."""
    row = mission.model_dump(mode="python")
    row["last_updated_by_id"] = last_updated_by_id
    row["last_updated_by_name"] = last_updated_by_name
    return row


def update_payload(row: dict[str, Any]) -> dict[str, Any]:
    """Row without the fields that are written once at creation."""
    return {k: v for k, v in row.items() if k not in IMMUTABLE_FIELDS}
