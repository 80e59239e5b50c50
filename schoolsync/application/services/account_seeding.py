"""Bootstrap of default administrative accounts.

Runs once per store connection. Each account is only created when no
user with its role exists yet, so repeated starts never add duplicates.
"""

from __future__ import annotations

import weakref
from collections.abc import Sequence

from schoolsync.core.constants import DEFAULT_ACCOUNTS
from schoolsync.domain.enums import OperationKind
from schoolsync.infrastructure.messaging.error_channel import (
    ErrorChannel,
    PermissionErrorEvent,
)
from schoolsync.infrastructure.store.client import StoreConnection
from schoolsync.infrastructure.store.collections import COLLECTION_USERS
from schoolsync.infrastructure.store.protocol import RemoteStore
from schoolsync.infrastructure.store.types import FilterOperator, QueryFilter
from schoolsync.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class DefaultAccountSeeder:
    """Creates the default Admin and Finance accounts if missing."""

    def __init__(
        self,
        error_channel: ErrorChannel,
        password: str,
        accounts: Sequence[tuple[str, str]] = DEFAULT_ACCOUNTS,
    ) -> None:
        self._errors = error_channel
        self._password = password
        self._accounts = tuple(accounts)
        self._seeded: weakref.WeakSet = weakref.WeakSet()

    def has_seeded(self, connection: StoreConnection) -> bool:
        store = connection.get()
        return store is not None and store in self._seeded

    async def seed(self, connection: StoreConnection) -> list[str]:
        """Create missing default accounts once for this connection's store.

        Returns:
            user_ids of the accounts created by this call.
        """
        store = connection.get()
        if store is None or store in self._seeded:
            return []
        self._seeded.add(store)
        created: list[str] = []
        for user_id, role in self._accounts:
            if await self._ensure_account(store, user_id, role):
                created.append(user_id)
        return created

    async def _ensure_account(self, store: RemoteStore, user_id: str, role: str) -> bool:
        try:
            existing = await store.query(
                COLLECTION_USERS,
                [QueryFilter("role", FilterOperator.EQ, role)],
                limit=1,
            )
        except Exception as e:
            self._report(OperationKind.LIST, e)
            return False
        if existing:
            return False

        logger.info("No %s user found, creating %r", role, user_id)
        record = {"user_id": user_id, "password": self._password, "role": role}
        try:
            await store.insert(COLLECTION_USERS, record)
        except Exception as e:
            self._report(OperationKind.CREATE, e, {"user_id": user_id, "role": role})
            return False
        return True

    def _report(self, operation: OperationKind, exc: Exception, payload=None) -> None:
        logger.warning("Default account bootstrap: %s on users failed: %s", operation.value, exc)
        self._errors.publish(
            PermissionErrorEvent(
                resource_path=COLLECTION_USERS,
                operation=operation,
                request_resource_data=payload,
                detail=str(exc) or None,
            )
        )
