from functools import wraps
import logging

from google.api_core import exceptions as gcp_exceptions

from app.models.store_result import StoreErrorKind, StoreResult


logger = logging.getLogger(__name__)


def classify_firestore_error(error: Exception) -> StoreErrorKind:
    if isinstance(error, gcp_exceptions.NotFound):
        return StoreErrorKind.NOT_FOUND
    if isinstance(error, (gcp_exceptions.PermissionDenied, gcp_exceptions.Unauthenticated)):
        return StoreErrorKind.PERMISSION_DENIED
    return StoreErrorKind.TRANSIENT_FAILURE


def handle_store_exceptions(func):
    """
    Decorator to catch Firestore exceptions and turn them into failed StoreResults.
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            logger.exception(
                f"Unhandled exception in {func.__name__}: {e}",
                exc_info=True,
            )
            return StoreResult.failure(classify_firestore_error(e), str(e))

    return wrapper
