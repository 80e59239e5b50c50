"""Domain enumerations for schoolsync."""

from enum import Enum


class OperationKind(str, Enum):
    """Store operation named in a permission-error event."""

    LIST = "list"
    GET = "get"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid operation values as strings."""
        return [op.value for op in cls]
