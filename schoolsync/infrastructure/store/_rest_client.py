"""Thin REST client for the remote relational store.

Table endpoints follow PostgREST conventions (``/rest/v1/<table>`` with
``field=op.value`` filters and ``Prefer`` headers). Live changes come from
a server-sent-events feed; each ``data:`` line is one JSON change payload.
All HTTP calls use httpx.AsyncClient so they do not block the event loop.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Sequence
from typing import Any
from urllib.parse import quote

import httpx

from schoolsync.infrastructure.exceptions import (
    RecordExistsError,
    StorePermissionError,
    StoreRequestError,
    StoreUnavailableError,
)
from schoolsync.infrastructure.store._rest_encoding import (
    decode_change,
    encode_filters,
    id_param,
)
from schoolsync.infrastructure.store.types import (
    ChangeHandler,
    QueryFilter,
    Record,
)

logger = logging.getLogger(__name__)

_REST_PREFIX = "/rest/v1"


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body)
    return str(body)


async def _request_async(
    client: httpx.AsyncClient,
    url: str,
    method: str = "GET",
    *,
    params: Sequence[tuple[str, str]] | None = None,
    body: Any = None,
    headers: dict[str, str] | None = None,
    collection: str = "",
) -> Any:
    """Perform an HTTP request against the store. 404 returns None."""
    try:
        resp = await client.request(
            method, url, params=list(params or []), json=body, headers=headers
        )
    except httpx.RequestError as e:
        raise StoreUnavailableError(f"{method} {url} failed: {e}") from e
    if resp.status_code == 404:
        return None
    if resp.status_code in (401, 403):
        raise StorePermissionError(resp.status_code, _error_message(resp))
    if resp.status_code == 409:
        raise RecordExistsError(collection)
    if resp.status_code >= 400:
        raise StoreRequestError(resp.status_code, _error_message(resp))
    raw = resp.content
    return json.loads(raw.decode()) if raw else None


class ChangeFeed:
    """Live subscription reading the server-sent-events change feed.

    connected() resolves once the first feed response is in: it returns
    when the stream is open and raises when the store rejected or could
    not serve it. close() is synchronous: once it returns, the handler is
    never called again, even if the reader task has a line buffered.
    """

    def __init__(
        self,
        client: StoreRESTClient,
        collection: str,
        handler: ChangeHandler,
        record_id: str | None = None,
    ) -> None:
        self._client = client
        self._collection = collection
        self._handler = handler
        self._record_id = record_id
        self._closed = False
        self._task: asyncio.Task | None = None
        self._connected: asyncio.Future[None] = asyncio.get_running_loop().create_future()

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        """Start the reader task on the running loop."""
        if self._task is None and not self._closed:
            self._task = asyncio.create_task(
                self._run(), name=f"change-feed:{self._collection}"
            )

    async def connected(self) -> None:
        """Wait until the feed is streaming; raise if it was refused."""
        await self._connected

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._resolve(StoreUnavailableError(f"Change feed for {self._collection} closed"))
        task = self._task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
        self._client._feeds.discard(self)

    async def wait_closed(self) -> None:
        """Wait for the reader task to finish after close()."""
        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            pass

    def _resolve(self, exc: Exception | None = None) -> None:
        if self._connected.done():
            return
        if exc is None:
            self._connected.set_result(None)
        else:
            self._connected.set_exception(exc)

    def _params(self) -> list[tuple[str, str]]:
        params = [("table", self._collection), ("schema", self._client.schema)]
        if self._record_id is not None:
            params.append(("filter", f"id=eq.{self._record_id}"))
        return params

    def _dispatch(self, data: str) -> None:
        if self._closed or not data:
            return
        try:
            payload = json.loads(data)
        except json.JSONDecodeError:
            logger.warning("Ignoring malformed change payload on %s", self._collection)
            return
        if not isinstance(payload, dict):
            return
        try:
            self._handler(decode_change(payload, self._collection))
        except Exception:
            logger.exception("Change handler failed on %s", self._collection)

    async def _run(self) -> None:
        headers = {**self._client.headers, "Accept": "text/event-stream"}
        while not self._closed:
            try:
                async with self._client._http.stream(
                    "GET",
                    self._client.realtime_url,
                    params=self._params(),
                    headers=headers,
                    timeout=None,
                ) as resp:
                    if resp.status_code >= 400:
                        await resp.aread()
                        if resp.status_code in (401, 403):
                            error: StoreRequestError = StorePermissionError(
                                resp.status_code, _error_message(resp)
                            )
                        else:
                            error = StoreRequestError(resp.status_code, _error_message(resp))
                        # Denials are final; other statuses are retried once streaming worked.
                        if isinstance(error, StorePermissionError) or not self._connected.done():
                            logger.warning(
                                "Change feed for %s rejected (%s); not reconnecting",
                                self._collection,
                                resp.status_code,
                            )
                            self._resolve(error)
                            self.close()
                            return
                        raise httpx.HTTPStatusError(
                            error.message, request=resp.request, response=resp
                        )
                    self._resolve()
                    data_lines: list[str] = []
                    async for line in resp.aiter_lines():
                        if self._closed:
                            return
                        if line.startswith("data:"):
                            data_lines.append(line[5:].lstrip())
                        elif not line.strip() and data_lines:
                            self._dispatch("\n".join(data_lines))
                            data_lines = []
                    if data_lines:
                        self._dispatch("\n".join(data_lines))
            except httpx.HTTPError as e:
                if not self._connected.done():
                    self._resolve(
                        StoreUnavailableError(f"Change feed for {self._collection} failed: {e}")
                    )
                    self.close()
                    return
                logger.warning("Change feed for %s dropped: %s", self._collection, e)
            if self._closed:
                return
            await asyncio.sleep(self._client.reconnect_seconds)


class StoreRESTClient:
    """Remote store client over the REST API (implements RemoteStore)."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        schema: str = "public",
        realtime_path: str = "/realtime/v1/changes",
        reconnect_seconds: float = 5.0,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base = base_url.rstrip("/")
        self._api_key = api_key
        self.schema = schema
        self.realtime_url = f"{self._base}/{realtime_path.lstrip('/')}"
        self.reconnect_seconds = reconnect_seconds
        self._http = http_client if http_client is not None else httpx.AsyncClient(timeout=timeout)
        self._owns_http = http_client is None
        self._feeds: set[ChangeFeed] = set()

    @property
    def headers(self) -> dict[str, str]:
        return {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._api_key}",
            "Accept-Profile": self.schema,
            "Content-Profile": self.schema,
        }

    def _table_url(self, collection: str) -> str:
        return f"{self._base}{_REST_PREFIX}/{quote(collection, safe='')}"

    async def query(
        self,
        collection: str,
        filters: Sequence[QueryFilter] = (),
        *,
        limit: int | None = None,
    ) -> list[Record]:
        """Bulk read with server-side filters."""
        params = [("select", "*"), *encode_filters(filters)]
        if limit is not None:
            params.append(("limit", str(limit)))
        out = await _request_async(
            self._http,
            self._table_url(collection),
            params=params,
            headers=self.headers,
            collection=collection,
        )
        if out is None:
            raise StoreRequestError(404, f"Collection {collection!r} not found")
        return list(out) if isinstance(out, list) else [out]

    async def get(self, collection: str, record_id: str) -> Record | None:
        """Point read by id; None when no such record (or table) exists."""
        out = await _request_async(
            self._http,
            self._table_url(collection),
            params=[("select", "*"), id_param(record_id), ("limit", "1")],
            headers=self.headers,
            collection=collection,
        )
        if not out:
            return None
        return out[0] if isinstance(out, list) else out

    async def insert(self, collection: str, record: Record) -> Record:
        """Insert and return the stored representation."""
        out = await _request_async(
            self._http,
            self._table_url(collection),
            method="POST",
            body=record,
            headers={**self.headers, "Prefer": "return=representation"},
            collection=collection,
        )
        if isinstance(out, list):
            return out[0] if out else dict(record)
        return out or dict(record)

    async def update(self, collection: str, record_id: str, changes: Record) -> None:
        """Partial write scoped to one id."""
        await _request_async(
            self._http,
            self._table_url(collection),
            method="PATCH",
            params=[id_param(record_id)],
            body=changes,
            headers={**self.headers, "Prefer": "return=minimal"},
            collection=collection,
        )

    async def upsert(self, collection: str, record: Record) -> None:
        """Insert-or-replace on the id primary key."""
        await _request_async(
            self._http,
            self._table_url(collection),
            method="POST",
            body=record,
            headers={
                **self.headers,
                "Prefer": "resolution=merge-duplicates,return=minimal",
            },
            collection=collection,
        )

    async def delete(self, collection: str, record_id: str) -> None:
        """Delete by id. Idempotent if the record is already missing."""
        await _request_async(
            self._http,
            self._table_url(collection),
            method="DELETE",
            params=[id_param(record_id)],
            headers=self.headers,
            collection=collection,
        )

    async def subscribe(
        self,
        collection: str,
        handler: ChangeHandler,
        *,
        record_id: str | None = None,
    ) -> ChangeFeed:
        """Open the change feed for a collection or one record of it.

        Returns once the feed is streaming, so changes committed after this
        call are delivered. Raises StorePermissionError when the store
        refuses the feed and StoreUnavailableError when it cannot be reached.
        """
        feed = ChangeFeed(self, collection, handler, record_id)
        self._feeds.add(feed)
        feed.start()
        try:
            await feed.connected()
        except BaseException:
            feed.close()
            raise
        return feed

    async def aclose(self) -> None:
        """Close open feeds, then the HTTP client if we created it."""
        feeds = list(self._feeds)
        for feed in feeds:
            feed.close()
        for feed in feeds:
            await feed.wait_closed()
        if self._owns_http:
            await self._http.aclose()
