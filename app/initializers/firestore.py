import json
import logging
import os

from google.cloud.firestore import Client
from google.oauth2 import service_account

from app.core.config import settings


logger = logging.getLogger(__name__)


def _service_account_credentials():
    """Service account credentials from a key file or inline JSON, None for the runtime account"""
    cred_value = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
    if not cred_value:
        return None

    if os.path.exists(cred_value):
        return service_account.Credentials.from_service_account_file(cred_value)

    try:
        return service_account.Credentials.from_service_account_info(json.loads(cred_value))
    except ValueError:
        logger.warning("GOOGLE_APPLICATION_CREDENTIALS is neither a file nor JSON, ignoring it")
        return None


def initialize_firestore() -> Client:
    """Firestore client for the configured database.

    The missions collection's snapshot listener and every store call share it.
    """
    credentials = _service_account_credentials()
    if credentials is None:
        return Client(database=settings.FIRESTORE_DATABASE_ID)
    return Client(database=settings.FIRESTORE_DATABASE_ID, credentials=credentials)
