import logging
import threading


logger = logging.getLogger(__name__)


class UnitService:
    """Read-only lookup of organizational unit names.

    Units are managed elsewhere; names are read once from the units
    collection and served from memory afterwards. A failed read is retried
    on the next lookup.
    """

    def __init__(self, db, collection_name: str = "units"):
        self.db = db
        self.collection = db.collection(collection_name)
        self._names: dict[str, str] | None = None
        self._lock = threading.Lock()

    def _load(self) -> dict[str, str] | None:
        try:
            names = {}
            for doc in self.collection.get():
                data = doc.to_dict() or {}
                names[doc.id] = data.get("name") or doc.id
        except Exception as e:
            logger.error(f"Failed to load unit names: {e}")
            return None

        logger.info(f"Loaded {len(names)} unit names")
        return names

    def get_unit_name(self, unit_id: str) -> str | None:
        with self._lock:
            if self._names is None:
                self._names = self._load()
            if self._names is None:
                return None
            return self._names.get(unit_id)
