"""In-process publish/subscribe channel for permission-error events.

The sync layer publishes a PermissionErrorEvent whenever the store denies
an operation; whatever presents errors subscribes. Delivery is
synchronous and best-effort:

- every handler subscribed at publish time is called, in subscription order;
- nothing is buffered, so an event published with no subscribers is dropped;
- a handler that raises is logged and the remaining handlers still run.

Example:
    channel = ErrorChannel()
    token = channel.subscribe(log_permission_errors)
    channel.publish(PermissionErrorEvent("fees", OperationKind.LIST))
    channel.unsubscribe(token)
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, NewType

from schoolsync.domain.enums import OperationKind
from schoolsync.domain.exceptions import (
    PermissionDeniedException,
    permission_denied_for,
)

logger = logging.getLogger(__name__)

SubscriptionToken = NewType("SubscriptionToken", int)


@dataclass(frozen=True)
class PermissionErrorEvent:
    """Denied store operation, broadcast on the error channel.

    Attributes:
        resource_path: Collection name or "table/id" record path.
        operation: Operation that was denied.
        request_resource_data: Attempted write payload (writes only), for diagnosis.
        detail: Store error message, if one was available.
    """

    resource_path: str
    operation: OperationKind
    request_resource_data: Any = None
    detail: str | None = None

    @property
    def message(self) -> str:
        return f"Permission denied for {self.operation.value} on {self.resource_path}"

    def as_exception(self) -> PermissionDeniedException:
        """Return the matching exception from the permission-denied taxonomy."""
        return permission_denied_for(
            self.operation, self.resource_path, self.request_resource_data
        )


PermissionErrorHandler = Callable[[PermissionErrorEvent], None]


class ErrorChannel:
    """Many-producer, many-consumer broadcast bus for PermissionErrorEvent."""

    def __init__(self) -> None:
        self._handlers: dict[SubscriptionToken, PermissionErrorHandler] = {}
        self._tokens = itertools.count(1)

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)

    def subscribe(self, handler: PermissionErrorHandler) -> SubscriptionToken:
        """Register handler; keep the returned token to unsubscribe."""
        token = SubscriptionToken(next(self._tokens))
        self._handlers[token] = handler
        return token

    def unsubscribe(self, token: SubscriptionToken) -> bool:
        """Remove a handler. Returns False if the token was unknown."""
        return self._handlers.pop(token, None) is not None

    def publish(self, event: PermissionErrorEvent) -> int:
        """Deliver event to current subscribers.

        Returns:
            Number of handlers that completed without raising.
        """
        handlers = list(self._handlers.values())
        if not handlers:
            logger.debug("No error channel subscribers; dropping %s", event.message)
            return 0
        delivered = 0
        for handler in handlers:
            try:
                handler(event)
                delivered += 1
            except Exception:
                logger.exception("Permission error handler %r failed", handler)
        return delivered


def log_permission_errors(event: PermissionErrorEvent) -> None:
    """Stock handler: log a generic denial notice for the event."""
    logger.warning(
        "Permission denied: cannot %s %s%s",
        event.operation.value,
        event.resource_path,
        f" ({event.detail})" if event.detail else "",
    )
