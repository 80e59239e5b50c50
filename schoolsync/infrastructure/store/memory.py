"""Process-local store backend (implements RemoteStore).

Keeps every collection in insertion-ordered dicts and broadcasts change
events synchronously to open subscriptions, in the same tick as the
write. Used for local development (STORE_BACKEND=memory) and tests.
deny() models row-level policies that reject an operation.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Sequence

from schoolsync.domain.enums import OperationKind
from schoolsync.infrastructure.exceptions import RecordExistsError, StorePermissionError
from schoolsync.infrastructure.store.types import (
    ChangeEvent,
    ChangeHandler,
    ChangeKind,
    QueryFilter,
    Record,
)
from schoolsync.shared.utils.generators import generate_cuid

logger = logging.getLogger(__name__)


class MemorySubscription:
    """Subscription handle returned by InMemoryStore.subscribe."""

    def __init__(
        self,
        store: InMemoryStore,
        collection: str,
        handler: ChangeHandler,
        record_id: str | None,
    ) -> None:
        self.collection = collection
        self.record_id = record_id
        self._store = store
        self._handler = handler
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._store._subscriptions.remove(self)

    def wants(self, event: ChangeEvent) -> bool:
        if self._closed or event.collection != self.collection:
            return False
        if self.record_id is None:
            return True
        record = event.new or event.old
        return str(record.get("id")) == self.record_id

    def deliver(self, event: ChangeEvent) -> None:
        if not self._closed:
            self._handler(event)


class InMemoryStore:
    """Dict-backed store with synchronous change broadcast."""

    def __init__(self, seed: dict[str, Iterable[Record]] | None = None) -> None:
        self._tables: dict[str, dict[str, Record]] = {}
        self._subscriptions: list[MemorySubscription] = []
        self._denied: set[tuple[str, OperationKind]] = set()
        for collection, records in (seed or {}).items():
            table = self._table(collection)
            for record in records:
                stored = copy.deepcopy(record)
                stored.setdefault("id", generate_cuid())
                table[str(stored["id"])] = stored

    def _table(self, collection: str) -> dict[str, Record]:
        return self._tables.setdefault(collection, {})

    def _check(self, collection: str, operation: OperationKind) -> None:
        if (collection, operation) in self._denied:
            raise StorePermissionError(
                403, f"Policy denies {operation.value} on {collection}"
            )

    def deny(self, collection: str, *operations: OperationKind) -> None:
        """Reject the given operations on collection until allow() is called."""
        for op in operations:
            if op not in OperationKind.values():
                raise ValueError(
                    f"Unknown operation {op!r}; expected one of {OperationKind.values()}"
                )
            self._denied.add((collection, OperationKind(op)))

    def allow(self, collection: str, *operations: OperationKind) -> None:
        """Lift rejections added by deny(); no operations lifts all of them."""
        ops = operations or tuple(OperationKind)
        for op in ops:
            self._denied.discard((collection, OperationKind(op)))

    @property
    def subscription_count(self) -> int:
        """Number of open subscriptions across all collections."""
        return len(self._subscriptions)

    def broadcast(self, event: ChangeEvent) -> None:
        """Deliver event to every matching open subscription, in subscription order."""
        for sub in list(self._subscriptions):
            if sub.wants(event):
                sub.deliver(event)

    async def query(
        self,
        collection: str,
        filters: Sequence[QueryFilter] = (),
        *,
        limit: int | None = None,
    ) -> list[Record]:
        self._check(collection, OperationKind.LIST)
        out = [
            copy.deepcopy(r)
            for r in self._table(collection).values()
            if all(f.matches(r) for f in filters)
        ]
        return out[:limit] if limit is not None else out

    async def get(self, collection: str, record_id: str) -> Record | None:
        self._check(collection, OperationKind.GET)
        record = self._table(collection).get(str(record_id))
        return copy.deepcopy(record) if record is not None else None

    async def insert(self, collection: str, record: Record) -> Record:
        self._check(collection, OperationKind.CREATE)
        stored = copy.deepcopy(record)
        stored.setdefault("id", generate_cuid())
        key = str(stored["id"])
        table = self._table(collection)
        if key in table:
            raise RecordExistsError(collection, key)
        table[key] = stored
        self.broadcast(
            ChangeEvent(ChangeKind.INSERT.value, collection, new=copy.deepcopy(stored))
        )
        return copy.deepcopy(stored)

    async def update(self, collection: str, record_id: str, changes: Record) -> None:
        self._check(collection, OperationKind.UPDATE)
        table = self._table(collection)
        key = str(record_id)
        if key not in table:
            return
        old = table[key]
        new = {**old, **copy.deepcopy(changes), "id": old["id"]}
        table[key] = new
        self.broadcast(
            ChangeEvent(
                ChangeKind.UPDATE.value,
                collection,
                new=copy.deepcopy(new),
                old=copy.deepcopy(old),
            )
        )

    async def upsert(self, collection: str, record: Record) -> None:
        self._check(collection, OperationKind.CREATE)
        stored = copy.deepcopy(record)
        stored.setdefault("id", generate_cuid())
        key = str(stored["id"])
        table = self._table(collection)
        old = table.get(key)
        table[key] = stored
        if old is None:
            event = ChangeEvent(ChangeKind.INSERT.value, collection, new=copy.deepcopy(stored))
        else:
            event = ChangeEvent(
                ChangeKind.UPDATE.value,
                collection,
                new=copy.deepcopy(stored),
                old=copy.deepcopy(old),
            )
        self.broadcast(event)

    async def delete(self, collection: str, record_id: str) -> None:
        self._check(collection, OperationKind.DELETE)
        old = self._table(collection).pop(str(record_id), None)
        if old is None:
            return
        self.broadcast(
            ChangeEvent(ChangeKind.DELETE.value, collection, old=copy.deepcopy(old))
        )

    async def subscribe(
        self,
        collection: str,
        handler: ChangeHandler,
        *,
        record_id: str | None = None,
    ) -> MemorySubscription:
        sub = MemorySubscription(
            self,
            collection,
            handler,
            str(record_id) if record_id is not None else None,
        )
        self._subscriptions.append(sub)
        logger.debug("Subscribed to %s (record %s)", collection, record_id)
        return sub

    async def aclose(self) -> None:
        for sub in list(self._subscriptions):
            sub.close()
