"""Dashboard data: one live mirror per domain collection, read as one snapshot.

Mirrors load independently. A snapshot taken while some of them are
still loading (or failed) simply has None for those fields; that is a
normal state, not an error.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

from schoolsync.application.services.account_seeding import DefaultAccountSeeder
from schoolsync.application.sync.collection_sync import CollectionSync
from schoolsync.core.constants import DASHBOARD_COLLECTIONS
from schoolsync.infrastructure.messaging.error_channel import ErrorChannel
from schoolsync.infrastructure.store.client import StoreConnection
from schoolsync.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

Records = tuple[dict[str, Any], ...] | None


@dataclass(frozen=True)
class DashboardSnapshot:
    """Read-only view of every dashboard mirror at one instant.

    Each field is a tuple of application-model records, or None while that
    mirror has not loaded. Treat the records as read-only.
    """

    students: Records = None
    teachers: Records = None
    fees: Records = None
    hostel_fees: Records = None
    student_attendance: Records = None
    hostels: Records = None
    hostel_rooms: Records = None
    homeworks: Records = None
    admissions: Records = None
    admission_applications: Records = None
    job_applications: Records = None
    users: Records = None
    notices: Records = None

    @property
    def loaded(self) -> frozenset[str]:
        """Names of the fields whose mirror has data."""
        return frozenset(f.name for f in fields(self) if getattr(self, f.name) is not None)


class AggregateStore:
    """Composes the dashboard's CollectionSync mirrors.

    open() starts every mirror (and the account bootstrap) as its own task
    and returns at once; snapshot() can be called at any time.
    """

    def __init__(
        self,
        connection: StoreConnection,
        error_channel: ErrorChannel,
        *,
        collections: Mapping[str, str] = DASHBOARD_COLLECTIONS,
        seeder: DefaultAccountSeeder | None = None,
    ) -> None:
        unknown = set(collections) - {f.name for f in fields(DashboardSnapshot)}
        if unknown:
            raise ValueError(f"Not DashboardSnapshot fields: {sorted(unknown)}")
        self._connection = connection
        self._errors = error_channel
        self._seeder = seeder
        self._mirrors: dict[str, CollectionSync] = {
            name: CollectionSync(connection, error_channel, collection)
            for name, collection in collections.items()
        }
        self._tasks: list[asyncio.Task] = []

    def mirror(self, name: str) -> CollectionSync:
        """Return the CollectionSync behind snapshot field name."""
        return self._mirrors[name]

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._mirrors)

    async def open(self) -> AggregateStore:
        """Start every mirror and the bootstrap without waiting for them."""
        if self._tasks:
            return self
        if self._seeder is not None:
            self._tasks.append(
                asyncio.create_task(self._seeder.seed(self._connection), name="seed-accounts")
            )
        for name, mirror in self._mirrors.items():
            self._tasks.append(asyncio.create_task(mirror.open(), name=f"mirror:{name}"))
        logger.info("Opening %s dashboard mirrors", len(self._mirrors))
        return self

    async def wait_until_settled(self) -> None:
        """Wait until every started mirror has finished its initial read."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def snapshot(self) -> DashboardSnapshot:
        """Return every mirror's current records as one immutable value."""
        values: dict[str, Records] = {}
        for name, mirror in self._mirrors.items():
            data = mirror.data
            values[name] = tuple(data) if data is not None else None
        return DashboardSnapshot(**values)

    @property
    def loading(self) -> bool:
        """True while any mirror still waits for its first read."""
        return any(m.loading for m in self._mirrors.values())

    async def close(self) -> None:
        """Cancel unfinished activations and close every mirror."""
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            if not task.done():
                task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        for mirror in self._mirrors.values():
            mirror.close()

    async def __aenter__(self) -> AggregateStore:
        return await self.open()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
