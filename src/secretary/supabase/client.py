import asyncio
import logging
from typing import Any

import httpx

from secretary.config import settings

logger = logging.getLogger(__name__)

REST_PATH = "/rest/v1"


class SupabaseError(Exception):
    """A PostgREST request failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class SupabaseClient:
    """Thin async client for the Supabase PostgREST API.

    Only GET requests are retried. Writes are sent exactly once so that a
    timed-out insert is never replayed into a duplicate row.
    """

    def __init__(
        self,
        url: str | None = None,
        api_key: str | None = None,
        max_retries: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = (url or settings.supabase_url).rstrip("/")
        self.api_key = api_key or settings.supabase_key
        self.max_retries = max_retries or settings.supabase_max_retries
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def headers(self) -> dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=f"{self.url}{REST_PATH}",
                headers=self.headers,
                timeout=30.0,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        table: str,
        params: dict[str, str] | None = None,
        json_data: Any = None,
    ) -> Any:
        client = await self._get_client()
        attempts = self.max_retries if method == "GET" else 1
        last_error: Exception | None = None

        for attempt in range(attempts):
            try:
                response = await client.request(
                    method, f"/{table}", params=params, json=json_data
                )

                if response.status_code == 429 and attempt + 1 < attempts:
                    retry_after = int(response.headers.get("Retry-After", "1"))
                    await asyncio.sleep(retry_after)
                    continue

                response.raise_for_status()
                if not response.content:
                    return None
                return response.json()

            except httpx.HTTPStatusError as e:
                last_error = e
                if e.response.status_code >= 500 and attempt + 1 < attempts:
                    await asyncio.sleep(2**attempt)
                    continue
                raise SupabaseError(
                    f"{method} {table} failed: {_error_detail(e.response)}",
                    status_code=e.response.status_code,
                ) from e

            except httpx.RequestError as e:
                last_error = e
                logger.warning(f"Supabase request error on {method} {table}: {e}")
                if attempt + 1 < attempts:
                    await asyncio.sleep(2**attempt)
                    continue
                raise SupabaseError(f"{method} {table} failed: {e}") from e

        raise SupabaseError(f"{method} {table} failed: {last_error}")

    async def select(
        self,
        table: str,
        order: str | None = None,
        filters: dict[str, str] | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Fetch rows. `order` uses PostgREST syntax, e.g. ``start_date.asc``."""
        params = {"select": "*"}
        if order:
            params["order"] = order
        if filters:
            params.update(filters)
        if limit is not None:
            params["limit"] = str(limit)
        return await self._request("GET", table, params=params) or []

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        rows = await self._request("POST", table, json_data=[row])
        if not rows:
            raise SupabaseError(f"POST {table} returned no row")
        return rows[0]

    async def update(self, table: str, row_id: int, values: dict[str, Any]) -> dict[str, Any]:
        rows = await self._request(
            "PATCH", table, params={"id": f"eq.{row_id}"}, json_data=values
        )
        if not rows:
            raise SupabaseError(f"PATCH {table} matched no row with id {row_id}")
        return rows[0]

    async def delete(self, table: str, row_id: int) -> None:
        await self._request("DELETE", table, params={"id": f"eq.{row_id}"})


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(body, dict) and body.get("message"):
        return f"HTTP {response.status_code}: {body['message']}"
    return f"HTTP {response.status_code}"
