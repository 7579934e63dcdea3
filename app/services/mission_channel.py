"""Realtime channel over the missions collection.

Firestore snapshot listeners report document changes as ADDED, MODIFIED and
REMOVED; the channel turns each of them into a MissionChangeEvent and hands
it to a single handler. Snapshot callbacks run on a Firestore background
thread.
"""

from collections.abc import Callable
import logging
from typing import Any, Literal

from pydantic import BaseModel


logger = logging.getLogger(__name__)

ChangeType = Literal["INSERT", "UPDATE", "DELETE"]

FIRESTORE_CHANGE_TYPES: dict[str, ChangeType] = {
    "ADDED": "INSERT",
    "MODIFIED": "UPDATE",
    "REMOVED": "DELETE",
}


class MissionChangeEvent(BaseModel):
    type: ChangeType
    # Row after the change; absent for deletions
    new: dict[str, Any] | None = None
    # Id of the changed row, only when the backend reports it
    old_id: str | None = None

    @property
    def mission_id(self) -> str | None:
        if self.new and self.new.get("id"):
            return self.new["id"]
        return self.old_id


ChangeHandler = Callable[[MissionChangeEvent], None]


def to_change_event(change) -> MissionChangeEvent | None:
    """Build an event from a Firestore DocumentChange, or None if it can't be read."""
    change_type = FIRESTORE_CHANGE_TYPES.get(getattr(change.type, "name", str(change.type)))
    if change_type is None:
        logger.warning(f"Ignoring mission change of unknown type: {change.type}")
        return None

    document = change.document
    doc_id = getattr(document, "id", None)

    if change_type == "DELETE":
        return MissionChangeEvent(type=change_type, old_id=doc_id)

    row = document.to_dict() or {}
    if doc_id and not row.get("id"):
        row["id"] = doc_id
    return MissionChangeEvent(type=change_type, new=row, old_id=doc_id)


class MissionChannel:
    def __init__(self, collection, handler: ChangeHandler, name: str = "missions-changes"):
        self.collection = collection
        self.handler = handler
        self.name = name
        self._watch = None

    @property
    def is_open(self) -> bool:
        return self._watch is not None

    def open(self) -> "MissionChannel":
        if self._watch is None:
            self._watch = self.collection.on_snapshot(self._on_snapshot)
            logger.info(f"Realtime channel '{self.name}' subscribed")
        return self

    def close(self) -> None:
        """Remove the channel. Safe to call more than once."""
        watch, self._watch = self._watch, None
        if watch is None:
            return
        try:
            watch.unsubscribe()
            logger.info(f"Realtime channel '{self.name}' removed")
        except Exception as e:
            logger.error(f"Error removing realtime channel '{self.name}': {e}")

    def _on_snapshot(self, docs, changes, read_time) -> None:
        for change in changes:
            try:
                event = to_change_event(change)
                if event is not None:
                    self.handler(event)
            except Exception as e:
                logger.error(
                    f"Failed to apply mission change on channel '{self.name}': {e}",
                    exc_info=True,
                )
