"""PostgREST (Supabase REST) client implementing the remote store interface"""

import httpx
from datetime import date, datetime
from typing import Any, List, Optional, Sequence, Tuple
from coop_notify.config import settings
from coop_notify.domain.exceptions import TransientRemoteError
from coop_notify.infrastructure.observability.metrics import remote_store_failures_counter
from coop_notify.infrastructure.store.base import LOANS, Filter, Order, RemoteStore, Row


def _encode_value(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _filter_literal(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(_encode_value(value))


def _encode_row(row: Row) -> Row:
    return {key: _encode_value(value) for key, value in row.items()}


def _filter_params(filters: Sequence[Filter]) -> List[Tuple[str, str]]:
    params = []
    for flt in filters:
        if flt.op == "in":
            values = ",".join(_filter_literal(v) for v in flt.value)
            params.append((flt.column, f"in.({values})"))
        elif flt.op == "eq" and flt.value is None:
            params.append((flt.column, "is.null"))
        else:
            params.append((flt.column, f"{flt.op}.{_filter_literal(flt.value)}"))
    return params


class PostgrestStore(RemoteStore):
    """Client for the hosted relational store's REST endpoint"""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.postgrest_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.postgrest_api_key
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    def _headers(self) -> dict:
        headers = {"Accept": "application/json", "Prefer": "return=representation"}
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    @staticmethod
    def _table(collection: str) -> str:
        return collection.replace("-", "_")

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        params: Optional[List[Tuple[str, str]]] = None,
        json: Any = None,
    ) -> List[Row]:
        """
        Send one request and return the decoded row list.

        Raises:
            TransientRemoteError: On timeout, network or HTTP errors, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.request(
                    method,
                    f"{self.base_url}/{path}",
                    params=params,
                    json=json,
                    headers=self._headers(),
                )
                response.raise_for_status()
                if not response.content:
                    return []
                data = response.json()

            except httpx.TimeoutException as e:
                remote_store_failures_counter.labels(operation=operation).inc()
                raise TransientRemoteError(f"Remote store timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                remote_store_failures_counter.labels(operation=operation).inc()
                raise TransientRemoteError(f"Remote store error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                remote_store_failures_counter.labels(operation=operation).inc()
                raise TransientRemoteError(f"Remote store unreachable: {e}") from e
            except ValueError as e:
                remote_store_failures_counter.labels(operation=operation).inc()
                raise TransientRemoteError(f"Invalid response from remote store: {e}") from e

        if isinstance(data, dict):
            return [data]
        if not isinstance(data, list):
            raise TransientRemoteError(f"Unexpected response shape from remote store: {type(data).__name__}")
        return data

    async def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order: Optional[Order] = None,
        limit: Optional[int] = None,
    ) -> List[Row]:
        params = [("select", "*")] + _filter_params(filters)
        if order is not None:
            params.append(("order", f"{order.column}.{'desc' if order.descending else 'asc'}"))
        if limit is not None:
            params.append(("limit", str(limit)))
        return await self._request("query", "GET", self._table(collection), params=params)

    async def insert(self, collection: str, row: Row) -> Row:
        rows = await self._request("insert", "POST", self._table(collection), json=[_encode_row(row)])
        if not rows:
            raise TransientRemoteError(f"Insert into {collection} returned no row")
        return rows[0]

    async def update(self, collection: str, filters: Sequence[Filter], patch: Row) -> List[Row]:
        return await self._request(
            "update",
            "PATCH",
            self._table(collection),
            params=_filter_params(filters),
            json=_encode_row(patch),
        )

    async def call_server_function(self, name: str, args: Row) -> List[Row]:
        return await self._request("rpc", "POST", f"rpc/{name}", json=_encode_row(args))

    async def ping(self) -> None:
        await self._request("ping", "GET", self._table(LOANS), params=[("select", "id"), ("limit", "1")])
