"""Tests for domain exceptions (error_code, message, details)."""

import pytest

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
    permission_denied_for,
)
from schoolsync.infrastructure.exceptions import (
    StorePermissionError,
    StoreRequestError,
)


def test_base_exception_default_error_code() -> None:
    """Base SchoolSyncException uses class name as error_code when not provided."""
    exc = SchoolSyncException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "SchoolSyncException"
    assert exc.details == {}


def test_base_exception_custom_error_code_and_details() -> None:
    exc = SchoolSyncException("Oops", error_code="CUSTOM", details={"key": "value"})
    assert exc.error_code == "CUSTOM"
    assert exc.details == {"key": "value"}


def test_store_not_configured() -> None:
    exc = StoreNotConfiguredException("STORE_URL missing")
    assert exc.error_code == "STORE_NOT_CONFIGURED"
    assert exc.details == {"reason": "STORE_URL missing"}
    assert "STORE_URL missing" in exc.message


@pytest.mark.parametrize(
    ("operation", "exc_cls"),
    [
        (OperationKind.LIST, FetchDeniedException),
        (OperationKind.GET, GetDeniedException),
        (OperationKind.CREATE, CreateDeniedException),
        (OperationKind.UPDATE, UpdateDeniedException),
        (OperationKind.DELETE, DeleteDeniedException),
    ],
)
def test_permission_denied_for_each_operation(operation, exc_cls) -> None:
    exc = permission_denied_for(operation, "fees")
    assert type(exc) is exc_cls
    assert isinstance(exc, PermissionDeniedException)
    assert exc.operation is operation
    assert exc.error_code == "PERMISSION_DENIED"
    assert exc.message == f"Permission denied for {operation.value} on fees"
    assert exc.details == {"path": "fees", "operation": operation.value}


def test_write_denial_carries_payload() -> None:
    exc = CreateDeniedException("hostels/h1", request_resource_data={"name": "North"})
    assert exc.details["request_resource_data"] == {"name": "North"}


def test_base_permission_denied_requires_operation() -> None:
    with pytest.raises(ValueError):
        PermissionDeniedException("fees")


def test_store_permission_error_is_request_error() -> None:
    exc = StorePermissionError(401, "JWT expired")
    assert isinstance(exc, StoreRequestError)
    assert exc.status_code == 401
    assert exc.error_code == "STORE_PERMISSION_DENIED"
    assert exc.message == "JWT expired"
