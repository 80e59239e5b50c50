"""Store connection handle.

One StoreConnection is created by the composition root and passed to
every component that needs the remote store. The store client is built
lazily on the first get() from Settings (endpoint URL, access key) and
reused for the rest of the connection's lifetime.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from schoolsync.core.config import Settings, get_settings
from schoolsync.domain.exceptions import StoreNotConfiguredException
from schoolsync.infrastructure.store._rest_client import StoreRESTClient
from schoolsync.infrastructure.store.memory import InMemoryStore
from schoolsync.infrastructure.store.protocol import RemoteStore

logger = logging.getLogger(__name__)

StoreFactory = Callable[[Settings], RemoteStore]


def build_store(settings: Settings) -> RemoteStore:
    """Build the store client for settings.store_backend."""
    if settings.store_backend == "memory":
        return InMemoryStore()
    return StoreRESTClient(
        settings.store_url,
        settings.store_api_key.get_secret_value(),
        schema=settings.store_schema,
        realtime_path=settings.realtime_path,
        reconnect_seconds=settings.realtime_reconnect_seconds,
        timeout=settings.store_timeout_seconds,
    )


class StoreConnection:
    """Lazily built, shared handle to the remote store.

    get() constructs the client exactly once. If construction fails
    (missing or invalid settings, factory error) the failure is logged once
    and remembered; later get() calls return None without retrying until
    reset() is called.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        factory: StoreFactory | None = None,
    ) -> None:
        """Initialize without touching settings or the network.

        Args:
            settings: Settings to build from; loaded via get_settings() on first get() if omitted.
            factory: Builds the store from settings; defaults to build_store.
        """
        self._settings = settings
        self._factory = factory or build_store
        self._store: RemoteStore | None = None
        self._error: StoreNotConfiguredException | None = None

    @classmethod
    def for_store(cls, store: RemoteStore) -> StoreConnection:
        """Return a connection that hands out an already built store."""
        conn = cls(factory=lambda _settings: store)
        conn._store = store
        return conn

    @property
    def error(self) -> StoreNotConfiguredException | None:
        """Construction failure remembered from the last attempt, if any."""
        return self._error

    @property
    def available(self) -> bool:
        """Return True if get() yields a store."""
        return self.get() is not None

    def get(self) -> RemoteStore | None:
        """Return the shared store client, or None if it could not be built."""
        if self._store is not None:
            return self._store
        if self._error is not None:
            return None
        try:
            settings = self._settings if self._settings is not None else get_settings()
            self._store = self._factory(settings)
        except ValueError as e:
            self._error = StoreNotConfiguredException(str(e))
            logger.error("Remote store configuration invalid: %s", e)
            return None
        except Exception as e:
            self._error = StoreNotConfiguredException(str(e))
            logger.exception("Remote store initialization failed")
            return None
        logger.info("Remote store client initialized (%s)", type(self._store).__name__)
        return self._store

    def reset(self) -> None:
        """Forget the built store and any remembered failure so get() retries.

        Does not close the previous store; call aclose() first if needed.
        """
        self._store = None
        self._error = None

    async def aclose(self) -> None:
        """Close the store client's connections. Call from shutdown."""
        if self._store is not None:
            await self._store.aclose()
            self._store = None
            logger.info("Remote store client closed")
