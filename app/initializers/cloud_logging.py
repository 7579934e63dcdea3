import logging
import sys

from google.cloud import logging as gcp_logging

from app.core.config import settings


def setup_logging():
    """Setup logging with Cloud Logging fallback to console"""
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    try:
        # Try to setup Google Cloud Logging
        client = gcp_logging.Client()
        client.setup_logging()
        logging.getLogger().setLevel(level)

        logging.debug(f"Allowed CORS origins: {settings.cors_origins}")
    except Exception:
        logging.basicConfig(
            level=level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            handlers=[logging.StreamHandler(sys.stdout)],
        )
        logging.getLogger().setLevel(level)
