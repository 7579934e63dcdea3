from collections.abc import Callable, Iterable
from datetime import datetime, timezone
import logging
import threading
import uuid

from app.models.mission import (
    ALL_UNITS,
    FULFILLED,
    PENDING,
    DayOfWeek,
    Mission,
    MissionCreate,
    MissionStatus,
    MissionUpdate,
    SubmittedFile,
    UnitFileSubmission,
)
from app.models.store_result import StoreErrorKind, StoreResult
from app.models.user import User
from app.services.mission_channel import MissionChangeEvent, MissionChannel
from app.services.mission_store import MissionStore
from app.services.unit_progress import (
    FileAttached,
    FileCleared,
    StatusChange,
    UnitEvent,
    apply_unit_event,
    initial_unit_progress,
    reconcile_unit_progress,
    with_unit_entry,
)
from app.utils.mission_mapper import row_to_mission


logger = logging.getLogger(__name__)

# MissionUpdate fields where None means "not given" rather than "clear it"
_NON_NULLABLE_UPDATES = {"title", "day_of_week", "target_unit_ids", "requires_file_submission"}


def _sorted_newest_first(missions: Iterable[Mission]) -> list[Mission]:
    return sorted(missions, key=lambda m: m.creation_date, reverse=True)


def _last_change(mission: Mission) -> datetime:
    return mission.updated_at or mission.creation_date


class MissionContext:
    """In-memory cache of every mission, kept current by the realtime channel.

    Mutations compute the next mission from the cached one and persist it
    through the store, but never write the cache themselves: the cache only
    changes when the channel echoes the write back. Each mutation rewrites
    the whole mission, so two writers working from the same cached mission
    overwrite each other's unit changes (last write wins).
    """

    def __init__(
        self,
        store: MissionStore,
        unit_name_resolver: Callable[[str], str | None] | None = None,
    ):
        self.store = store
        self.unit_name_resolver = unit_name_resolver
        self._missions: list[Mission] = []
        self._loading = False
        self._channel: MissionChannel | None = None
        self._lock = threading.RLock()

    # Lifecycle

    def start(self) -> None:
        """Open the realtime subscription, then run the initial load."""
        try:
            self._channel = self.store.subscribe(self.handle_change)
        except Exception as e:
            logger.error(
                f"Realtime subscription failed, missions will not update live: {e}",
                exc_info=True,
            )
        self.load()

    def close(self) -> None:
        if self._channel is not None:
            self._channel.close()
            self._channel = None

    def load(self) -> StoreResult:
        with self._lock:
            self._loading = True
        try:
            result = self.store.get_all()
            if result:
                self._merge_loaded(result.value)
                logger.info(f"Loaded {len(result.value)} missions")
            else:
                logger.error(f"Failed to load missions: {result.error}")
            return result
        finally:
            with self._lock:
                self._loading = False

    def _merge_loaded(self, loaded: list[Mission]) -> None:
        with self._lock:
            merged = {mission.id: mission for mission in loaded}
            for cached in self._missions:
                current = merged.get(cached.id)
                # Changes the channel already delivered are at least as new
                if current is None or _last_change(cached) >= _last_change(current):
                    merged[cached.id] = cached
            self._missions = _sorted_newest_first(merged.values())

    # Queries

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def missions(self) -> list[Mission]:
        with self._lock:
            return list(self._missions)

    def get_mission_by_id(self, mission_id: str) -> Mission | None:
        with self._lock:
            return next((m for m in self._missions if m.id == mission_id), None)

    def get_missions_by_unit_id(self, unit_id: str) -> list[Mission]:
        with self._lock:
            return [m for m in self._missions if unit_id in m.target_unit_ids]

    def get_daily_missions(self, user: User, day: DayOfWeek) -> list[Mission]:
        """Missions of ``day`` still relevant on the user's daily board."""
        of_day = [m for m in self.missions if m.day_of_week == day]

        if user.is_admin:
            return [
                m
                for m in of_day
                if any(p.status == PENDING or p.submitted_file for p in m.unit_progress)
            ]

        if not user.unit_id:
            return []

        board = []
        for mission in of_day:
            if user.unit_id not in mission.target_unit_ids and ALL_UNITS not in mission.target_unit_ids:
                continue
            progress = mission.progress_for(user.unit_id) or mission.progress_for(ALL_UNITS)
            if progress is None or progress.status == PENDING:
                board.append(mission)
            elif (
                progress.status == FULFILLED
                and progress.submitted_file is not None
                and progress.submitted_file.uploaded_by_id == user.id
            ):
                board.append(mission)
        return board

    # Realtime merge

    def handle_change(self, event: MissionChangeEvent) -> None:
        if event.type == "INSERT":
            self._apply_insert(row_to_mission(event.new))
        elif event.type == "UPDATE":
            self._apply_update(row_to_mission(event.new))
        elif event.type == "DELETE":
            self._apply_delete(event.mission_id)

    def _apply_insert(self, mission: Mission) -> None:
        with self._lock:
            if any(m.id == mission.id for m in self._missions):
                return
            self._missions = _sorted_newest_first([*self._missions, mission])

    def _apply_update(self, mission: Mission) -> None:
        # Append when absent, an UPDATE can arrive before its INSERT
        with self._lock:
            others = [m for m in self._missions if m.id != mission.id]
            self._missions = _sorted_newest_first([*others, mission])

    def _apply_delete(self, mission_id: str | None) -> None:
        if not mission_id:
            logger.warning("Mission delete event without an id, skipping")
            return
        with self._lock:
            self._missions = [m for m in self._missions if m.id != mission_id]

    # Mutations

    def _denied(self, action: str) -> StoreResult:
        logger.error(f"Unauthenticated user cannot {action}")
        return StoreResult.failure(StoreErrorKind.PERMISSION_DENIED, "Not authenticated")

    def _missing_mission(self, mission_id: str) -> StoreResult:
        logger.error(f"Mission '{mission_id}' is not loaded")
        return StoreResult.not_found(f"Mission with ID '{mission_id}' not found.")

    def _unit_label(self, unit_id: str) -> str:
        name = self.unit_name_resolver(unit_id) if self.unit_name_resolver else None
        return f"{name} ({unit_id})" if name else unit_id

    def _persist(self, mission: Mission, user: User) -> StoreResult:
        result = self.store.save(mission, user)
        if not result:
            return result
        return StoreResult.success(mission)

    def add_mission(self, definition: MissionCreate, user: User | None) -> StoreResult:
        if user is None:
            return self._denied("create a mission")

        now = datetime.now(timezone.utc)
        mission = Mission(
            id=str(uuid.uuid4()),
            **definition.model_dump(),
            unit_progress=initial_unit_progress(
                definition.target_unit_ids, user.id, user.display_name, now
            ),
            created_by=user.id,
            created_by_name=user.display_name,
            creation_date=now,
            last_updated_by_id=user.id,
            last_updated_by_name=user.display_name,
            updated_at=now,
        )
        return self._persist(mission, user)

    def update_mission(
        self, mission_id: str, changes: MissionUpdate, user: User | None
    ) -> StoreResult:
        if user is None:
            return self._denied("update a mission")

        mission = self.get_mission_by_id(mission_id)
        if mission is None:
            return self._missing_mission(mission_id)

        now = datetime.now(timezone.utc)
        fields = {
            key: value
            for key, value in changes.model_dump(exclude_unset=True).items()
            if value is not None or key not in _NON_NULLABLE_UPDATES
        }
        if "target_unit_ids" in fields:
            fields["unit_progress"] = reconcile_unit_progress(
                mission.unit_progress, fields["target_unit_ids"], user.id, user.display_name, now
            )

        updated = mission.model_copy(
            update={
                **fields,
                "last_updated_by_id": user.id,
                "last_updated_by_name": user.display_name,
                "updated_at": now,
            }
        )
        return self._persist(updated, user)

    def _update_unit(
        self, mission_id: str, unit_id: str, event: UnitEvent, user: User | None, action: str
    ) -> StoreResult:
        if user is None:
            return self._denied(action)

        mission = self.get_mission_by_id(mission_id)
        if mission is None:
            return self._missing_mission(mission_id)

        now = datetime.now(timezone.utc)
        progress = mission.unit_progress
        if mission.progress_for(unit_id) is None:
            if ALL_UNITS not in mission.target_unit_ids or unit_id == ALL_UNITS:
                logger.error(f"Mission '{mission_id}' has no progress for unit {self._unit_label(unit_id)}")
                return StoreResult.not_found(
                    f"Unit '{unit_id}' is not a target of mission '{mission_id}'."
                )
            progress = with_unit_entry(progress, unit_id, user.id, user.display_name, now)

        updated = mission.model_copy(
            update={
                "unit_progress": apply_unit_event(
                    progress, unit_id, event, user.id, user.display_name, now
                ),
                "last_updated_by_id": user.id,
                "last_updated_by_name": user.display_name,
                "updated_at": now,
            }
        )
        result = self._persist(updated, user)
        if result:
            logger.info(
                f"Mission '{mission_id}' progress of unit {self._unit_label(unit_id)} "
                f"changed by '{user.id}': {action}"
            )
        return result

    def update_unit_mission_status(
        self, mission_id: str, unit_id: str, new_status: MissionStatus, user: User | None
    ) -> StoreResult:
        return self._update_unit(
            mission_id, unit_id, StatusChange(status=new_status), user, f"set status {new_status}"
        )

    def set_unit_mission_file(
        self, mission_id: str, unit_id: str, file: UnitFileSubmission, user: User | None
    ) -> StoreResult:
        if user is None:
            return self._denied("attach a mission file")

        submitted = SubmittedFile(
            name=file.name,
            type=file.type,
            size=file.size,
            uploaded_by_id=user.id,
            uploaded_by_name=user.display_name,
            uploaded_at=datetime.now(timezone.utc),
        )
        return self._update_unit(
            mission_id, unit_id, FileAttached(file=submitted), user, f"attach file {file.name}"
        )

    def clear_unit_mission_file(
        self, mission_id: str, unit_id: str, user: User | None
    ) -> StoreResult:
        return self._update_unit(mission_id, unit_id, FileCleared(), user, "remove file")

    def delete_mission(self, mission_id: str, user: User | None) -> StoreResult:
        if user is None:
            return self._denied("delete a mission")
        return self.store.delete(mission_id)
