from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel


T = TypeVar("T")


class StoreErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    TRANSIENT_FAILURE = "transient_failure"
    PERMISSION_DENIED = "permission_denied"


class StoreError(BaseModel):
    kind: StoreErrorKind
    message: str = ""


class StoreResult(BaseModel, Generic[T]):
    """Outcome of a mission store or context operation.

    Truthy exactly when the operation succeeded, so callers that only care
    about success can use it as a boolean. Failures carry an error kind that
    tells "not found" apart from backend failures and missing permissions.
    """

    ok: bool
    value: T | None = None
    error: StoreError | None = None

    def __bool__(self) -> bool:
        return self.ok

    @property
    def error_kind(self) -> StoreErrorKind | None:
        return self.error.kind if self.error else None

    @classmethod
    def success(cls, value: Any = None) -> "StoreResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, kind: StoreErrorKind, message: str = "") -> "StoreResult":
        return cls(ok=False, error=StoreError(kind=kind, message=message))

    @classmethod
    def not_found(cls, message: str = "") -> "StoreResult":
        return cls.failure(StoreErrorKind.NOT_FOUND, message)
