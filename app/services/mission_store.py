import logging

from google.api_core import exceptions as gcp_exceptions
from google.cloud.firestore import Query

from app.models.mission import Mission
from app.models.store_result import StoreResult
from app.models.user import User
from app.services.mission_channel import ChangeHandler, MissionChannel
from app.utils.firestore_exception import handle_store_exceptions
from app.utils.mission_mapper import mission_to_row, row_to_mission, update_payload


logger = logging.getLogger(__name__)


class MissionStore:
    """Only writer of mission documents. Never raises; every call returns a StoreResult."""

    def __init__(self, db, collection_name: str = "missions"):
        self.db = db
        self.collection = db.collection(collection_name)

    def _exists(self, doc_ref) -> bool:
        try:
            return doc_ref.get().exists
        except gcp_exceptions.NotFound:
            return False
        except Exception as e:
            # Falls through to the insert path, which fails if the id is taken
            logger.error(f"Existence check failed for mission '{doc_ref.id}': {e}")
            return False

    @handle_store_exceptions
    def save(self, mission: Mission, acting_user: User) -> StoreResult:
        doc_ref = self.collection.document(mission.id)
        row = mission_to_row(mission, acting_user.id, acting_user.display_name)

        if self._exists(doc_ref):
            doc_ref.update(update_payload(row))
            logger.info(f"Mission '{mission.id}' updated by '{acting_user.id}'")
        else:
            doc_ref.create(row)
            logger.info(f"Mission '{mission.id}' inserted by '{acting_user.id}'")
        return StoreResult.success(mission.id)

    @handle_store_exceptions
    def get_by_id(self, mission_id: str) -> StoreResult[Mission]:
        doc = self.collection.document(mission_id).get()
        if not doc.exists:
            logger.info(f"Mission '{mission_id}' not found")
            return StoreResult.not_found(f"Mission with ID '{mission_id}' not found.")
        return StoreResult.success(row_to_mission(doc.to_dict()))

    @handle_store_exceptions
    def get_all(self) -> StoreResult[list[Mission]]:
        """All readable missions, newest first. Documents that do not map to a mission are skipped."""
        docs = self.collection.order_by("creation_date", direction=Query.DESCENDING).get()
        missions = []
        for doc in docs:
            try:
                missions.append(row_to_mission(doc.to_dict()))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping unreadable mission document '{doc.id}': {e}")
        return StoreResult.success(missions)

    @handle_store_exceptions
    def delete(self, mission_id: str) -> StoreResult:
        self.collection.document(mission_id).delete()
        logger.info(f"Mission '{mission_id}' deleted")
        return StoreResult.success(mission_id)

    def subscribe(self, handler: ChangeHandler) -> MissionChannel:
        return MissionChannel(self.collection, handler).open()
