"""Error types shared by the data layer and the HTTP layer."""
from typing import Any, Dict, Optional


class DataAccessError(Exception):
    """Base class for failures raised by the data layer."""


class UnsupportedOperation(DataAccessError):
    """A mutating call was made against a read-only data source."""

    def __init__(self, collection: str, operation: str):
        self.collection = collection
        self.operation = operation
        super().__init__(f"Cannot {operation} '{collection}': static snapshot data is read-only")


class BackendIOError(DataAccessError):
    """Wraps a file-system failure while reading, seeding or writing a collection."""

    def __init__(self, collection: str, operation: str, cause: Optional[BaseException] = None):
        self.collection = collection
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation} failed for collection '{collection}': {cause}")


class DuplicateKeyError(DataAccessError):
    """A write would violate a unique index."""

    def __init__(self, collection: str, field: str, value: Any):
        self.collection = collection
        self.field = field
        self.value = value
        super().__init__(f"Duplicate value {value!r} for unique field '{field}' in '{collection}'")


# HTTP status per error code
HTTP_STATUS = {
    "BAD_REQUEST": 400,
    "UNAUTHORIZED": 401,
    "FORBIDDEN": 403,
    "NOT_FOUND": 404,
    "METHOD_NOT_ALLOWED": 405,
    "INTERNAL_SERVER_ERROR": 500,
    "VALIDATION_ERROR": 400,
    "WRITE_NOT_ENABLED": 400,
    "RESOURCE_EXISTS": 409,
}


def status_for(code: str) -> int:
    if code.endswith("_NOT_FOUND"):
        return 404
    return HTTP_STATUS.get(code, 500)


class ApiError(Exception):
    """Raised by route handlers; rendered as the JSON error envelope."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details

    @property
    def status(self) -> int:
        return status_for(self.code)
