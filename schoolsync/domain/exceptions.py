"""Domain exceptions for schoolsync.

The sync layer never raises these into caller code: store failures are
converted to PermissionErrorEvent values and published on the error
channel. The exception types exist so consumers of the channel (and
callers that want to raise) share one taxonomy.
"""

from typing import Any

from schoolsync.domain.enums import OperationKind


class SchoolSyncException(Exception):
    """Base exception for all schoolsync errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. path, operation).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class StoreNotConfiguredException(SchoolSyncException):
    """Raised when the remote store settings are missing or invalid."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            f"Remote store is not configured: {reason}",
            "STORE_NOT_CONFIGURED",
            {"reason": reason},
        )


class PermissionDeniedException(SchoolSyncException):
    """A store operation on a resource path was rejected.

    Subclasses pin the operation kind; build one from an event with
    PermissionErrorEvent.as_exception().
    """

    operation: OperationKind | None = None

    def __init__(
        self,
        path: str,
        operation: OperationKind | None = None,
        request_resource_data: Any = None,
    ) -> None:
        """Initialize with the target path and attempted operation.

        Args:
            path: Collection name or "table/id" record path.
            operation: Operation kind; defaults to the subclass's kind.
            request_resource_data: Payload of the attempted write, if any.
        """
        op = operation or self.operation
        if op is None:
            raise ValueError("operation is required for PermissionDeniedException")
        self.path = path
        self.operation = op
        self.request_resource_data = request_resource_data
        details: dict[str, Any] = {"path": path, "operation": op.value}
        if request_resource_data is not None:
            details["request_resource_data"] = request_resource_data
        super().__init__(
            f"Permission denied for {op.value} on {path}",
            "PERMISSION_DENIED",
            details,
        )


class FetchDeniedException(PermissionDeniedException):
    """Bulk list read was rejected."""

    operation = OperationKind.LIST


class GetDeniedException(PermissionDeniedException):
    """Point read was rejected (not-found is not an error)."""

    operation = OperationKind.GET


class CreateDeniedException(PermissionDeniedException):
    """Insert or upsert was rejected."""

    operation = OperationKind.CREATE


class UpdateDeniedException(PermissionDeniedException):
    """Partial update was rejected."""

    operation = OperationKind.UPDATE


class DeleteDeniedException(PermissionDeniedException):
    """Delete was rejected."""

    operation = OperationKind.DELETE


_DENIED_BY_OPERATION: dict[OperationKind, type[PermissionDeniedException]] = {
    OperationKind.LIST: FetchDeniedException,
    OperationKind.GET: GetDeniedException,
    OperationKind.CREATE: CreateDeniedException,
    OperationKind.UPDATE: UpdateDeniedException,
    OperationKind.DELETE: DeleteDeniedException,
}


def permission_denied_for(
    operation: OperationKind, path: str, request_resource_data: Any = None
) -> PermissionDeniedException:
    """Return the PermissionDeniedException subclass instance for an operation."""
    exc_cls = _DENIED_BY_OPERATION[OperationKind(operation)]
    return exc_cls(path, request_resource_data=request_resource_data)
