"""Remote store boundary: protocol, adapters, and the connection handle."""

from schoolsync.infrastructure.store.client import (
    StoreConnection,
    build_store,
)
from schoolsync.infrastructure.store.memory import InMemoryStore
from schoolsync.infrastructure.store.protocol import RemoteStore
from schoolsync.infrastructure.store._rest_client import StoreRESTClient
from schoolsync.infrastructure.store.types import (
    ChangeEvent,
    ChangeKind,
    FilterOperator,
    QueryFilter,
    Record,
    Subscription,
)

__all__ = [
    "ChangeEvent",
    "ChangeKind",
    "FilterOperator",
    "InMemoryStore",
    "QueryFilter",
    "Record",
    "RemoteStore",
    "StoreConnection",
    "StoreRESTClient",
    "Subscription",
    "build_store",
]
