"""Tests for the permission-error channel (best-effort broadcast)."""

import logging

import pytest

from schoolsync.domain.enums import OperationKind
from schoolsync.domain.exceptions import (
    FetchDeniedException,
    UpdateDeniedException,
)
from schoolsync.infrastructure.messaging.error_channel import (
    ErrorChannel,
    PermissionErrorEvent,
    log_permission_errors,
)


def _event(operation: OperationKind = OperationKind.LIST) -> PermissionErrorEvent:
    return PermissionErrorEvent("fees", operation)


def test_publish_without_subscribers_drops_event() -> None:
    channel = ErrorChannel()
    assert channel.publish(_event()) == 0

    received: list[PermissionErrorEvent] = []
    channel.subscribe(received.append)
    assert received == []


def test_every_subscriber_receives_event_in_order() -> None:
    channel = ErrorChannel()
    calls: list[str] = []
    channel.subscribe(lambda e: calls.append("first"))
    channel.subscribe(lambda e: calls.append("second"))

    assert channel.publish(_event()) == 2
    assert calls == ["first", "second"]


def test_raising_handler_does_not_block_others(caplog: pytest.LogCaptureFixture) -> None:
    channel = ErrorChannel()
    received: list[PermissionErrorEvent] = []

    def broken(event: PermissionErrorEvent) -> None:
        raise RuntimeError("toast failed")

    channel.subscribe(broken)
    channel.subscribe(received.append)
    event = _event()

    with caplog.at_level(logging.ERROR):
        delivered = channel.publish(event)

    assert received == [event]
    assert delivered == 1
    assert "failed" in caplog.text


def test_unsubscribe_stops_delivery() -> None:
    channel = ErrorChannel()
    received: list[PermissionErrorEvent] = []
    token = channel.subscribe(received.append)

    assert channel.unsubscribe(token) is True
    assert channel.unsubscribe(token) is False
    channel.publish(_event())
    assert received == []
    assert channel.subscriber_count == 0


def test_handler_unsubscribing_during_delivery_is_safe() -> None:
    channel = ErrorChannel()
    received: list[str] = []
    tokens = {}

    def once(event: PermissionErrorEvent) -> None:
        received.append("once")
        channel.unsubscribe(tokens["once"])

    tokens["once"] = channel.subscribe(once)
    channel.subscribe(lambda e: received.append("always"))

    channel.publish(_event())
    channel.publish(_event())
    assert received == ["once", "always", "always"]


def test_event_maps_onto_exception_taxonomy() -> None:
    exc = PermissionErrorEvent("students/s1", OperationKind.UPDATE, {"name": "X"}).as_exception()
    assert isinstance(exc, UpdateDeniedException)
    assert exc.path == "students/s1"
    assert exc.request_resource_data == {"name": "X"}
    assert isinstance(_event().as_exception(), FetchDeniedException)


def test_log_permission_errors_logs_warning(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        log_permission_errors(PermissionErrorEvent("notices", OperationKind.CREATE, detail="rls"))
    assert "cannot create notices (rls)" in caplog.text
