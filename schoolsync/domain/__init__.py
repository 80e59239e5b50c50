"""Domain layer: enums and exceptions.

No dependencies on infrastructure. Used by application and
infrastructure layers.
"""

from schoolsync.domain.enums import OperationKind
from schoolsync.domain.exceptions import (
    CreateDeniedException,
    DeleteDeniedException,
    FetchDeniedException,
    GetDeniedException,
    PermissionDeniedException,
    SchoolSyncException,
    StoreNotConfiguredException,
    UpdateDeniedException,
)

__all__ = [
    "CreateDeniedException",
    "DeleteDeniedException",
    "FetchDeniedException",
    "GetDeniedException",
    "OperationKind",
    "PermissionDeniedException",
    "SchoolSyncException",
    "StoreNotConfiguredException",
    "UpdateDeniedException",
]
