"""Store setup check: is the store reachable and is the users table readable?"""

from __future__ import annotations

from dataclasses import dataclass

from schoolsync.infrastructure.store.client import StoreConnection
from schoolsync.infrastructure.store.collections import COLLECTION_USERS
from schoolsync.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SetupStatus:
    configured: bool
    detail: str = ""


async def check_store_setup(connection: StoreConnection) -> SetupStatus:
    """Query one row of users to confirm the store is configured. Never raises."""
    store = connection.get()
    if store is None:
        reason = connection.error.message if connection.error else "no store connection"
        return SetupStatus(False, reason)
    try:
        await store.query(COLLECTION_USERS, limit=1)
    except Exception as e:
        logger.error("Store setup check failed: %s", e)
        return SetupStatus(False, str(e))
    return SetupStatus(True, "ok")
