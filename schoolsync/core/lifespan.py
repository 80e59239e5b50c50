"""Dashboard lifespan: startup and shutdown of the sync layer.

Single place that owns the store connection, the error channel and the
aggregate store. No business logic here, only wiring.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from schoolsync.application.services.account_seeding import DefaultAccountSeeder
from schoolsync.application.services.aggregate_store import AggregateStore
from schoolsync.core.config import Settings, get_settings
from schoolsync.infrastructure.messaging.error_channel import (
    ErrorChannel,
    log_permission_errors,
)
from schoolsync.infrastructure.store.client import StoreConnection
from schoolsync.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


@dataclass
class Dashboard:
    """Handles the rest of the application reads from and writes through."""

    connection: StoreConnection
    error_channel: ErrorChannel
    store: AggregateStore


@asynccontextmanager
async def open_dashboard(
    settings: Settings | None = None,
    *,
    connection: StoreConnection | None = None,
    seed_accounts: bool | None = None,
) -> AsyncIterator[Dashboard]:
    """Open the dashboard mirrors, yield, then shut everything down.

    Startup order: store connection, error channel with the logging
    listener, aggregate store (mirrors and account bootstrap). Shutdown
    runs in reverse. Settings are loaded lazily; if they are invalid the
    connection reports it once and every mirror stays unloaded.
    """
    if connection is None:
        connection = StoreConnection(settings)
    error_channel = ErrorChannel()
    listener = error_channel.subscribe(log_permission_errors)

    seeder = None
    if seed_accounts is None:
        seed_accounts = _seed_enabled(settings)
    if seed_accounts:
        seeder = DefaultAccountSeeder(error_channel, _account_password(settings))

    store = AggregateStore(connection, error_channel, seeder=seeder)
    await store.open()
    try:
        yield Dashboard(connection=connection, error_channel=error_channel, store=store)
    finally:
        await store.close()
        error_channel.unsubscribe(listener)
        await connection.aclose()
        logger.info("Dashboard closed")


def _resolve(settings: Settings | None) -> Settings | None:
    if settings is not None:
        return settings
    try:
        return get_settings()
    except ValueError:
        return None


def _seed_enabled(settings: Settings | None) -> bool:
    resolved = _resolve(settings)
    return resolved is not None and resolved.seed_default_accounts


def _account_password(settings: Settings | None) -> str:
    resolved = _resolve(settings)
    if resolved is None:
        return ""
    return resolved.default_account_password.get_secret_value()
