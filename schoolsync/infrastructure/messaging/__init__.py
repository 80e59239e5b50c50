"""Messaging: in-process error channel for permission-error events."""

from schoolsync.infrastructure.messaging.error_channel import (
    ErrorChannel,
    PermissionErrorEvent,
    PermissionErrorHandler,
    SubscriptionToken,
    log_permission_errors,
)

__all__ = [
    "ErrorChannel",
    "PermissionErrorEvent",
    "PermissionErrorHandler",
    "SubscriptionToken",
    "log_permission_errors",
]
