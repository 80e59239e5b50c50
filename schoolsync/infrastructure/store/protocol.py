"""Remote store protocol (DIP). Implementations: StoreRESTClient, InMemoryStore."""

from collections.abc import Sequence
from typing import Protocol

from schoolsync.infrastructure.store.types import (
    ChangeHandler,
    QueryFilter,
    Record,
    Subscription,
)


class RemoteStore(Protocol):
    """Operations the sync layer needs from the remote relational store.

    Records in and out are wire-format (snake_case). Failures raise
    StoreException subclasses; a missing record on get() is None, not an
    error.
    """

    async def query(
        self,
        collection: str,
        filters: Sequence[QueryFilter] = (),
        *,
        limit: int | None = None,
    ) -> list[Record]:
        """Return every record in collection matching all filters."""
        ...

    async def get(self, collection: str, record_id: str) -> Record | None:
        """Return the record with id record_id, or None if it does not exist."""
        ...

    async def insert(self, collection: str, record: Record) -> Record:
        """Insert record and return it as stored (with its id)."""
        ...

    async def update(self, collection: str, record_id: str, changes: Record) -> None:
        """Apply a partial write to the record with id record_id."""
        ...

    async def upsert(self, collection: str, record: Record) -> None:
        """Insert record or replace the existing record with the same id."""
        ...

    async def delete(self, collection: str, record_id: str) -> None:
        """Delete the record with id record_id. Missing records are not an error."""
        ...

    async def subscribe(
        self,
        collection: str,
        handler: ChangeHandler,
        *,
        record_id: str | None = None,
    ) -> Subscription:
        """Open a live change channel for collection (or one record of it)."""
        ...

    async def aclose(self) -> None:
        """Release connections held by the store client."""
        ...
