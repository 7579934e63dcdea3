import json
import logging
import os

import firebase_admin
from firebase_admin import credentials

from app.core.config import settings


logger = logging.getLogger(__name__)


def _load_credentials():
    cred_value = os.getenv("GOOGLE_APPLICATION_CREDENTIALS", settings.GOOGLE_APPLICATION_CREDENTIALS)

    if cred_value and os.path.exists(cred_value):
        return credentials.Certificate(cred_value)

    try:
        return credentials.Certificate(json.loads(cred_value))
    except (TypeError, ValueError):
        # Neither a file nor inline JSON: use the runtime service account
        logger.info("Using application default credentials for Firebase")
        return credentials.ApplicationDefault()


def initialize_firebase():
    """Initializes the Firebase app used to verify ID tokens, once per process"""
    try:
        firebase_admin.get_app()
    except ValueError:
        firebase_admin.initialize_app(_load_credentials())
