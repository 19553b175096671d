"""Record store HTTP client for the hosted PostgREST-style backend"""

from typing import Any, Dict, List, Optional, Sequence

import httpx
from pydantic_core import to_jsonable_python

from wallet_gateway.config import settings
from wallet_gateway.domain.exceptions import RecordStoreError
from wallet_gateway.infrastructure.store import Filter, Order, Record


def encode_value(value: Any) -> str:
    """Render a filter value in PostgREST query syntax"""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    jsonable = to_jsonable_python(value)
    return str(jsonable)


def build_params(
    filters: Sequence[Filter] = (),
    order: Optional[Order] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
) -> List[tuple]:
    params = [(f.column, f"{f.op}.{encode_value(f.value)}") for f in filters]
    if order is not None:
        params.append(("order", f"{order.column}.{'asc' if order.ascending else 'desc'}"))
    if limit is not None:
        params.append(("limit", str(limit)))
    if offset:
        params.append(("offset", str(offset)))
    return params


class RecordStoreClient:
    """Client for the hosted record store (tables exposed under /rest/v1)"""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        access_token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.record_store_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.record_store_api_key
        self.access_token = access_token or self.api_key
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }

    async def _request(
        self,
        method: str,
        collection: str,
        params: Sequence[tuple] = (),
        json: Any = None,
    ) -> Any:
        """
        Issue one request against a collection.

        Raises:
            RecordStoreError: On timeout, network failure, HTTP errors, or an
                undecodable response
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.request(
                    method,
                    f"{self.base_url}/rest/v1/{collection}",
                    params=list(params),
                    json=to_jsonable_python(json) if json is not None else None,
                    headers=self._headers(),
                )
                response.raise_for_status()
                if not response.content:
                    return []
                return response.json()

            except httpx.TimeoutException as e:
                raise RecordStoreError(f"Record store timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise RecordStoreError(
                    f"Record store error on {method} {collection}: "
                    f"{e.response.status_code} {e.response.text}"
                ) from e
            except httpx.RequestError as e:
                raise RecordStoreError(f"Record store unreachable: {e}") from e
            except ValueError as e:
                raise RecordStoreError(f"Invalid response from record store: {e}") from e

    async def select(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order: Optional[Order] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Record]:
        params = [("select", "*")] + build_params(filters, order, limit, offset)
        return await self._request("GET", collection, params)

    async def insert(self, collection: str, records: Sequence[Record]) -> List[Record]:
        return await self._request("POST", collection, json=list(records))

    async def update(self, collection: str, filters: Sequence[Filter], patch: Record) -> List[Record]:
        if not filters:
            raise RecordStoreError("Refusing to update a whole collection without filters")
        return await self._request("PATCH", collection, build_params(filters), json=patch)

    async def delete(self, collection: str, filters: Sequence[Filter]) -> None:
        if not filters:
            raise RecordStoreError("Refusing to delete a whole collection without filters")
        await self._request("DELETE", collection, build_params(filters))
