"""Live mirror of one store collection."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from schoolsync.application.sync.base import MirrorState, SyncBase
from schoolsync.domain.enums import OperationKind
from schoolsync.infrastructure.messaging.error_channel import ErrorChannel
from schoolsync.infrastructure.store.client import StoreConnection
from schoolsync.infrastructure.store.protocol import RemoteStore
from schoolsync.infrastructure.store.types import (
    ChangeEvent,
    ChangeHandler,
    ChangeKind,
    FilterOperator,
    QueryFilter,
    Record,
    Subscription,
)
from schoolsync.shared.telemetry.logging import get_logger
from schoolsync.shared.utils.keys import (
    to_application_model,
    to_snake_case,
    to_wire_format,
)

logger = get_logger(__name__)

FilterSpec = QueryFilter | tuple[str, str, Any]


def parse_filters(filters: Iterable[FilterSpec] | None) -> tuple[QueryFilter, ...]:
    """Return the supported filters from ``(field, op, value)`` triples.

    Unsupported operators and malformed entries are dropped, not rejected.
    Field names are sent in wire format.
    """
    parsed: list[QueryFilter] = []
    for entry in filters or ():
        if isinstance(entry, QueryFilter):
            parsed.append(entry)
            continue
        if not isinstance(entry, (tuple, list)) or len(entry) != 3:
            logger.debug("Ignoring malformed filter %r", entry)
            continue
        field, op, value = entry
        operator = FilterOperator.parse(op)
        if operator is None or not isinstance(field, str):
            logger.debug("Ignoring unsupported filter %r", entry)
            continue
        parsed.append(QueryFilter(to_snake_case(field), operator, value))
    return tuple(parsed)


class CollectionSync(SyncBase):
    """Ordered in-memory mirror of a collection, kept live by change events.

    Records are application-model dicts unique by ``id``, in arrival order:
    INSERT appends, UPDATE replaces in place (or appends if the record was
    never seen), DELETE removes. Unknown event kinds are ignored.

    Example:
        async with CollectionSync(connection, channel, "fees", [("status", "==", "due")]) as fees:
            state = fees.state  # MirrorState(data=[...], loading=False)
    """

    fetch_operation = OperationKind.LIST

    def __init__(
        self,
        connection: StoreConnection,
        error_channel: ErrorChannel,
        collection: str,
        filters: Iterable[FilterSpec] | None = None,
    ) -> None:
        super().__init__(connection, error_channel)
        self.collection = collection
        self._filters = parse_filters(filters)
        self._data: list[Record] | None = None

    @property
    def resource_path(self) -> str:
        return self.collection

    @property
    def filters(self) -> tuple[QueryFilter, ...]:
        return self._filters

    @property
    def data(self) -> list[Record] | None:
        """Copy of the mirrored records, or None before the first successful read."""
        return list(self._data) if self._data is not None else None

    @property
    def state(self) -> MirrorState:
        return MirrorState(self.data, self.loading)

    async def retarget(
        self,
        collection: str | None = None,
        filters: Iterable[FilterSpec] | None = None,
    ) -> CollectionSync:
        """Tear down, switch collection and/or filters, and reopen."""
        self.close()
        if collection is not None:
            self.collection = collection
        if filters is not None:
            self._filters = parse_filters(filters)
        return await self.open()

    async def add(self, record: Record) -> Record | None:
        """Insert record into the collection.

        The mirror is not touched; the insert event delivers the new state.
        Returns the stored record (application model), or None when there is
        no connection or the store denied the insert.
        """
        store = self._connection.get()
        if store is None:
            return None
        try:
            stored = await store.insert(self.collection, to_wire_format(record))
        except Exception as e:
            self._publish_denied(OperationKind.CREATE, e, record)
            return None
        return to_application_model(stored)

    async def _subscribe(self, store: RemoteStore, handler: ChangeHandler) -> Subscription:
        return await store.subscribe(self.collection, handler)

    async def _fetch(self, store: RemoteStore) -> list[Record]:
        rows = await store.query(self.collection, self._filters)
        return [to_application_model(row) for row in rows]

    def _accept(self, result: list[Record]) -> None:
        self._data = list(result)

    def _clear(self) -> None:
        self._data = None

    def _apply(self, event: ChangeEvent) -> None:
        if self._data is None:
            return
        if event.kind in (ChangeKind.INSERT, ChangeKind.UPDATE):
            self._put(to_application_model(event.new))
        elif event.kind == ChangeKind.DELETE:
            self._remove(to_application_model(event.old or event.new).get("id"))
        else:
            logger.debug("Ignoring %r event on %s", event.kind, self.collection)

    def _index_of(self, record_id: Any) -> int | None:
        if record_id is None or self._data is None:
            return None
        for i, item in enumerate(self._data):
            if item.get("id") == record_id:
                return i
        return None

    def _put(self, record: Record) -> None:
        if record.get("id") is None:
            logger.debug("Ignoring record without id on %s", self.collection)
            return
        idx = self._index_of(record.get("id"))
        if idx is None:
            self._data.append(record)
        else:
            self._data[idx] = record

    def _remove(self, record_id: Any) -> None:
        idx = self._index_of(record_id)
        if idx is not None:
            del self._data[idx]
