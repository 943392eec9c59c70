"""PostgREST (Supabase) table client for parking spot rows."""

import logging
from typing import Any, Optional

import httpx

from ..exceptions import StoreError
from ..state.models import SpotScope
from .base import SpotStore

logger = logging.getLogger(__name__)


class RestSpotStore(SpotStore):
    """
    Spot store backed by a PostgREST-compatible REST table API.

    Rows are filtered with `column=eq.value` query parameters and the
    anon/service key is sent both as `apikey` and as a bearer token.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        table: str = "parking_spots",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the store.

        Args:
            base_url: Project URL, e.g. https://xyz.supabase.co
            api_key: API key sent with every request
            table: Table holding the spot rows
            timeout: Request timeout in seconds
            client: Pre-built client (mainly for tests)
        """
        self.base_url = base_url.rstrip("/")
        self.table = table
        self._owns_client = client is None

        headers = {
            "apikey": api_key,
            "Content-Type": "application/json",
        }
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"

        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
        )
        if client is not None:
            self._client.headers.update(headers)

    @property
    def table_path(self) -> str:
        return f"/rest/v1/{self.table}"

    @staticmethod
    def _scope_params(scope: SpotScope) -> dict[str, str]:
        return {
            "camera_id": f"eq.{scope.camera_id}",
            "area_id": f"eq.{scope.area_id}",
        }

    async def _request(self, method: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, self.table_path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise StoreError(
                f"{method} {self.table} failed with status {e.response.status_code}: "
                f"{e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise StoreError(f"{method} {self.table} failed: {e}") from e
        return response

    def _json(self, method: str, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise StoreError(f"{method} {self.table} returned a non-JSON body: {e}") from e

    async def fetch(self, scope: SpotScope) -> list[dict[str, Any]]:
        params = {"select": "*", **self._scope_params(scope)}
        response = await self._request("GET", params=params)
        rows = self._json("GET", response)
        if not isinstance(rows, list):
            raise StoreError(f"GET {self.table} returned {type(rows).__name__}, expected a list")
        logger.debug(f"Fetched {len(rows)} row(s) from {self.table}")
        return rows

    async def delete_where(self, scope: SpotScope) -> None:
        await self._request("DELETE", params=self._scope_params(scope))

    async def insert_many(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        response = await self._request(
            "POST",
            json=rows,
            headers={"Prefer": "return=representation"},
        )
        inserted = self._json("POST", response) if response.content else []
        logger.debug(f"Inserted {len(inserted)} row(s) into {self.table}")
        return inserted

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
