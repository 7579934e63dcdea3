"""Mission endpoints for the weekly mission board and per-unit progress."""

from fastapi import APIRouter, Depends, HTTPException, status

from app.dependencies.auth import get_current_user, require_admin
from app.dependencies.missions import get_mission_context
from app.models.mission import (
    FULFILLED,
    LATE,
    NOT_FULFILLED,
    PENDING,
    DayOfWeek,
    Mission,
    MissionCreate,
    MissionUpdate,
    UnitFileSubmission,
    UnitStatusUpdate,
)
from app.models.store_result import StoreErrorKind, StoreResult
from app.models.user import User
from app.services.mission_context import MissionContext
from app.utils.schedule import current_day_of_week

router = APIRouter()

ERROR_STATUS_CODES = {
    StoreErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    StoreErrorKind.PERMISSION_DENIED: status.HTTP_403_FORBIDDEN,
    StoreErrorKind.TRANSIENT_FAILURE: status.HTTP_503_SERVICE_UNAVAILABLE,
}

# Statuses only administrators set or override
ADMIN_VERDICTS = {NOT_FULFILLED, LATE}
UNIT_STATUSES = {PENDING, FULFILLED}


def _raise_for_result(result: StoreResult, detail: str) -> None:
    if result:
        return
    status_code = ERROR_STATUS_CODES.get(
        result.error_kind, status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    message = result.error.message if result.error and result.error.message else detail
    raise HTTPException(status_code=status_code, detail=message)


def _get_cached_mission(missions: MissionContext, mission_id: str) -> Mission:
    mission = missions.get_mission_by_id(mission_id)
    if mission is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Mission with ID '{mission_id}' not found.",
        )
    return mission


def _check_unit_access(current_user: User, unit_id: str) -> None:
    if not current_user.is_admin and current_user.unit_id != unit_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only members of the unit can change its progress",
        )


def _check_no_admin_verdict(missions: MissionContext, mission_id: str, unit_id: str) -> None:
    progress = _get_cached_mission(missions, mission_id).progress_for(unit_id)
    if progress is not None and progress.status in ADMIN_VERDICTS:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Mission was marked '{progress.status}' by an administrator",
        )


@router.get("", response_model=list[Mission])
async def list_missions(
    unit_id: str | None = None,
    missions: MissionContext = Depends(get_mission_context),
    current_user: User = Depends(get_current_user),
):
    """
    List cached missions, newest first.

    Args:
        unit_id: Only missions targeting this unit
    """
    if unit_id:
        return missions.get_missions_by_unit_id(unit_id)
    return missions.missions


@router.get("/daily", response_model=list[Mission])
async def list_daily_missions(
    day: DayOfWeek | None = None,
    missions: MissionContext = Depends(get_mission_context),
    current_user: User = Depends(get_current_user),
):
    """
    Missions on the current user's board for one weekday.

    Args:
        day: Weekday label, defaults to today (Monday on weekends)
    """
    return missions.get_daily_missions(current_user, day or current_day_of_week())


@router.get("/{mission_id}", response_model=Mission)
async def get_mission(
    mission_id: str,
    missions: MissionContext = Depends(get_mission_context),
    current_user: User = Depends(get_current_user),
):
    """
    Get a mission by ID.

    Raises:
        404: Mission not found
    """
    return _get_cached_mission(missions, mission_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_mission(
    mission_data: MissionCreate,
    missions: MissionContext = Depends(get_mission_context),
    current_user: User = Depends(require_admin),
):
    """
    Create a mission with every target unit pending.

    The mission shows up in listings once the realtime channel delivers it.
    """
    result = missions.add_mission(mission_data, current_user)
    _raise_for_result(result, "Could not create mission")
    return {"id": result.value.id}


@router.patch("/{mission_id}")
async def update_mission(
    mission_id: str,
    mission_update: MissionUpdate,
    missions: MissionContext = Depends(get_mission_context),
    current_user: User = Depends(require_admin),
):
    """
    Update mission fields. Changing the target units adds or drops unit progress.

    Raises:
        404: Mission not found
        403: User is not an administrator
    """
    result = missions.update_mission(mission_id, mission_update, current_user)
    _raise_for_result(result, "Could not update mission")
    return {"id": mission_id}


@router.delete("/{mission_id}")
async def delete_mission(
    mission_id: str,
    missions: MissionContext = Depends(get_mission_context),
    current_user: User = Depends(require_admin),
):
    result = missions.delete_mission(mission_id, current_user)
    _raise_for_result(result, "Could not delete mission")
    return {"message": f"Mission '{mission_id}' deleted successfully."}


@router.patch("/{mission_id}/units/{unit_id}/status")
async def update_unit_status(
    mission_id: str,
    unit_id: str,
    status_update: UnitStatusUpdate,
    missions: MissionContext = Depends(get_mission_context),
    current_user: User = Depends(get_current_user),
):
    """
    Set the status of one unit.

    Administrators may set any status. Unit members may only mark their own
    unit pending or fulfilled, and only on missions that do not require a file.
    """
    if not current_user.is_admin:
        _check_unit_access(current_user, unit_id)
        if status_update.status not in UNIT_STATUSES:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Only administrators can set status '{status_update.status}'",
            )
        mission = _get_cached_mission(missions, mission_id)
        if mission.requires_file_submission:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="This mission is fulfilled by submitting a file",
            )

    result = missions.update_unit_mission_status(
        mission_id, unit_id, status_update.status, current_user
    )
    _raise_for_result(result, "Could not update mission status")
    return {"id": mission_id, "unit_id": unit_id, "status": status_update.status}


@router.put("/{mission_id}/units/{unit_id}/file")
async def set_unit_file(
    mission_id: str,
    unit_id: str,
    file: UnitFileSubmission,
    missions: MissionContext = Depends(get_mission_context),
    current_user: User = Depends(get_current_user),
):
    """Record an uploaded file for a unit, fulfilling the mission for it."""
    _check_unit_access(current_user, unit_id)
    if not current_user.is_admin:
        _check_no_admin_verdict(missions, mission_id, unit_id)
    result = missions.set_unit_mission_file(mission_id, unit_id, file, current_user)
    _raise_for_result(result, "Could not attach file")
    return {"id": mission_id, "unit_id": unit_id, "file": file.name}


@router.delete("/{mission_id}/units/{unit_id}/file")
async def clear_unit_file(
    mission_id: str,
    unit_id: str,
    missions: MissionContext = Depends(get_mission_context),
    current_user: User = Depends(get_current_user),
):
    """Remove a unit's file and set it back to pending."""
    _check_unit_access(current_user, unit_id)
    if not current_user.is_admin:
        _check_no_admin_verdict(missions, mission_id, unit_id)
    result = missions.clear_unit_mission_file(mission_id, unit_id, current_user)
    _raise_for_result(result, "Could not remove file")
    return {"id": mission_id, "unit_id": unit_id}
