"""Live mirror of one store record, addressed as ``table/id``."""

from __future__ import annotations

from schoolsync.application.sync.base import MirrorState, SyncBase
from schoolsync.domain.enums import OperationKind
from schoolsync.infrastructure.messaging.error_channel import ErrorChannel
from schoolsync.infrastructure.store.client import StoreConnection
from schoolsync.infrastructure.store.protocol import RemoteStore
from schoolsync.infrastructure.store.types import (
    ChangeEvent,
    ChangeHandler,
    ChangeKind,
    Record,
    Subscription,
)
from schoolsync.shared.telemetry.logging import get_logger
from schoolsync.shared.utils.keys import to_application_model, to_wire_format

logger = get_logger(__name__)


def split_path(path: str) -> tuple[str, str | None]:
    """Split ``table/id`` into its parts; a missing or empty id is None."""
    table, _, record_id = path.partition("/")
    return table, (record_id or None)


class DocumentSync(SyncBase):
    """Mirror of a single record with update/set/delete mutations.

    A missing record is a valid state (data None, loading False) and
    publishes nothing. Mutations never touch data directly; the change
    event from the store is the only source of new state. Without a
    connection or an id, mutations return immediately.
    """

    fetch_operation = OperationKind.GET

    def __init__(
        self,
        connection: StoreConnection,
        error_channel: ErrorChannel,
        path: str,
    ) -> None:
        super().__init__(connection, error_channel)
        self.path = path
        self.table, self.record_id = split_path(path)
        self._data: Record | None = None

    @property
    def resource_path(self) -> str:
        return self.path

    @property
    def data(self) -> Record | None:
        return dict(self._data) if self._data is not None else None

    @property
    def state(self) -> MirrorState:
        return MirrorState(self.data, self.loading)

    async def retarget(self, path: str) -> DocumentSync:
        """Tear down, switch to another record path, and reopen."""
        self.close()
        self.path = path
        self.table, self.record_id = split_path(path)
        return await self.open()

    def _writable_store(self) -> RemoteStore | None:
        if not self.record_id:
            return None
        return self._connection.get()

    async def update(self, changes: Record) -> None:
        """Send a partial write for this record."""
        store = self._writable_store()
        if store is None:
            return
        try:
            await store.update(self.table, self.record_id, to_wire_format(changes))
        except Exception as e:
            self._publish_denied(OperationKind.UPDATE, e, changes)

    async def set(self, record: Record) -> None:
        """Insert or replace this record with record (id forced to this path's id)."""
        store = self._writable_store()
        if store is None:
            return
        payload = {**to_wire_format(record), "id": self.record_id}
        try:
            await store.upsert(self.table, payload)
        except Exception as e:
            self._publish_denied(OperationKind.CREATE, e, record)

    async def delete(self) -> None:
        """Delete this record."""
        store = self._writable_store()
        if store is None:
            return
        try:
            await store.delete(self.table, self.record_id)
        except Exception as e:
            self._publish_denied(OperationKind.DELETE, e)

    def _addressable(self) -> bool:
        return bool(self.table and self.record_id)

    async def _subscribe(self, store: RemoteStore, handler: ChangeHandler) -> Subscription:
        return await store.subscribe(self.table, handler, record_id=self.record_id)

    async def _fetch(self, store: RemoteStore) -> Record | None:
        record = await store.get(self.table, self.record_id)
        return to_application_model(record) if record is not None else None

    def _accept(self, result: Record | None) -> None:
        self._data = result

    def _clear(self) -> None:
        self._data = None

    def _concerns(self, record: Record) -> bool:
        record_id = record.get("id")
        return record_id is None or str(record_id) == self.record_id

    def _apply(self, event: ChangeEvent) -> None:
        if event.kind in (ChangeKind.INSERT, ChangeKind.UPDATE):
            if event.new and self._concerns(event.new):
                self._data = to_application_model(event.new)
        elif event.kind == ChangeKind.DELETE:
            if self._concerns(event.old or event.new):
                self._data = None
        else:
            logger.debug("Ignoring %r event on %s", event.kind, self.path)
