import json
import logging
import os
from tempfile import NamedTemporaryFile

from fastapi import FastAPI

from app.core.config import settings
from app.initializers.cloud_logging import setup_logging
from app.initializers.firebase import initialize_firebase
from app.initializers.firestore import initialize_firestore
from app.services.mission_context import MissionContext
from app.services.mission_store import MissionStore
from app.services.unit_service import UnitService


logger = logging.getLogger(__name__)


async def startup_handler(app: FastAPI):
    # Normalize GOOGLE_APPLICATION_CREDENTIALS for libraries that expect a file path
    # If the env var contains inline JSON, write it to a temp file and point the env var to it
    creds_value = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
    if creds_value and not os.path.exists(creds_value):
        try:
            json.loads(creds_value)
        except ValueError:
            pass
        else:
            with NamedTemporaryFile(mode="w", delete=False, prefix="gcp-sa-", suffix=".json") as tf:
                tf.write(creds_value)
                tf.flush()
                os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = tf.name

    setup_logging()
    initialize_firebase()
    app.state.db = initialize_firestore()

    units = UnitService(app.state.db, settings.UNITS_COLLECTION)
    store = MissionStore(app.state.db, settings.MISSIONS_COLLECTION)
    app.state.mission_context = MissionContext(store, unit_name_resolver=units.get_unit_name)
    app.state.mission_context.start()
    logger.info("Mission context started")


async def shutdown_handler(app: FastAPI):
    mission_context = getattr(app.state, "mission_context", None)
    if mission_context is not None:
        mission_context.close()
        logger.info("Mission context closed")
