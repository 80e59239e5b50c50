"""Mirror lifecycle shared by CollectionSync and DocumentSync.

An activation (open) registers the live subscription, then runs the
initial read. Change events that arrive while the read is in flight are
buffered and replayed in delivery order once the read result is in place.
Every activation gets a generation number; close() bumps it and closes
the subscription, so a retired handler can never write into the mirror.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from schoolsync.domain.enums import OperationKind
from schoolsync.infrastructure.messaging.error_channel import (
    ErrorChannel,
    PermissionErrorEvent,
)
from schoolsync.infrastructure.store.client import StoreConnection
from schoolsync.infrastructure.store.protocol import RemoteStore
from schoolsync.infrastructure.store.types import (
    ChangeEvent,
    ChangeHandler,
    Subscription,
)
from schoolsync.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class MirrorState:
    """What a consumer reads from a mirror: current data and whether the first read is pending."""

    data: Any
    loading: bool


class SyncBase:
    """Base for mirrors kept live by one store subscription."""

    fetch_operation: OperationKind = OperationKind.LIST

    def __init__(self, connection: StoreConnection, error_channel: ErrorChannel) -> None:
        self._connection = connection
        self._errors = error_channel
        self._subscription: Subscription | None = None
        self._generation = 0
        self._pending: list[ChangeEvent] = []
        self._ready = False
        self.loading = True

    # ---- Subclass hooks ----

    @property
    def resource_path(self) -> str:
        raise NotImplementedError

    def _addressable(self) -> bool:
        return True

    async def _subscribe(self, store: RemoteStore, handler: ChangeHandler) -> Subscription:
        raise NotImplementedError

    async def _fetch(self, store: RemoteStore) -> Any:
        raise NotImplementedError

    def _accept(self, result: Any) -> None:
        raise NotImplementedError

    def _apply(self, event: ChangeEvent) -> None:
        raise NotImplementedError

    def _clear(self) -> None:
        raise NotImplementedError

    # ---- Lifecycle ----

    @property
    def is_open(self) -> bool:
        """Return True while a live subscription feeds this mirror."""
        return self._subscription is not None

    async def open(self):
        """Activate: subscribe, run the initial read, then apply buffered events.

        Any previous activation is torn down first. Without a store
        connection (or an address) this is a no-op and the mirror stays
        loading. Read failures publish a permission-error event and leave
        the mirror empty; they are not retried.
        """
        self.close()
        store = self._connection.get()
        if store is None:
            logger.debug("No store connection; %s stays unloaded", self.resource_path)
            return self
        if not self._addressable():
            return self

        self._generation += 1
        generation = self._generation
        try:
            subscription = await self._subscribe(store, self._handler_for(generation))
        except Exception as e:
            if generation == self._generation:
                self._fail(e)
            return self
        if generation != self._generation:
            subscription.close()
            return self
        self._subscription = subscription

        try:
            result = await self._fetch(store)
        except Exception as e:
            if generation == self._generation:
                self._release()
                self._fail(e)
            return self
        if generation != self._generation:
            return self

        self._accept(result)
        self._ready = True
        self.loading = False
        pending, self._pending = self._pending, []
        for event in pending:
            self._apply_safely(event)
        return self

    def close(self) -> None:
        """Deactivate: stop event delivery now and discard the mirror."""
        self._release()
        self.loading = True
        self._clear()

    async def __aenter__(self):
        return await self.open()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _release(self) -> None:
        self._generation += 1
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None
        self._pending.clear()
        self._ready = False

    def _fail(self, exc: Exception) -> None:
        self.loading = False
        self._publish_denied(self.fetch_operation, exc)

    # ---- Events ----

    def _handler_for(self, generation: int) -> ChangeHandler:
        def handle(event: ChangeEvent) -> None:
            if generation != self._generation:
                return
            if not self._ready:
                self._pending.append(event)
                return
            self._apply_safely(event)

        return handle

    def _apply_safely(self, event: ChangeEvent) -> None:
        try:
            self._apply(event)
        except Exception:
            logger.exception(
                "Failed to apply %s event to %s", event.kind, self.resource_path
            )

    # ---- Errors ----

    def _publish_denied(
        self,
        operation: OperationKind,
        exc: Exception,
        request_resource_data: Any = None,
    ) -> None:
        logger.warning(
            "Store denied %s on %s: %s", operation.value, self.resource_path, exc
        )
        self._errors.publish(
            PermissionErrorEvent(
                resource_path=self.resource_path,
                operation=operation,
                request_resource_data=request_resource_data,
                detail=str(exc) or None,
            )
        )
