"""Infrastructure exceptions for remote store operations.

Store errors extend SchoolSyncException. The sync layer catches them at
its boundary and publishes a permission-error event instead.
"""

from schoolsync.domain.exceptions import SchoolSyncException


class StoreException(SchoolSyncException):
    """Base exception for remote store operations."""


class StoreRequestError(StoreException):
    """Raised when the store answers with an unexpected status."""

    def __init__(self, status_code: int, message: str = "") -> None:
        """Initialize with HTTP status and the store's error message."""
        self.status_code = status_code
        super().__init__(
            message or f"Store request failed with status {status_code}",
            "STORE_REQUEST_FAILED",
            {"status_code": status_code},
        )


class StorePermissionError(StoreRequestError):
    """Raised when the store rejects a request (401/403 or a row-level policy)."""

    def __init__(self, status_code: int = 403, message: str = "") -> None:
        super().__init__(status_code, message or "Store rejected the request")
        self.error_code = "STORE_PERMISSION_DENIED"


class StoreUnavailableError(StoreException):
    """Raised when the store cannot be reached (DNS, connect, timeout)."""

    def __init__(self, message: str = "Store is unreachable") -> None:
        super().__init__(message, "STORE_UNAVAILABLE")


class RecordExistsError(StoreException):
    """Raised when an insert targets an id that already exists (409)."""

    def __init__(self, collection: str, record_id: str | None = None) -> None:
        super().__init__(
            f"Record already exists in {collection}",
            "RECORD_EXISTS",
            {"collection": collection, "record_id": record_id},
        )
