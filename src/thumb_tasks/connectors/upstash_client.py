# src/thumb_tasks/connectors/upstash_client.py

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from ..core.errors import LedgerError

logger = logging.getLogger(__name__)


def _seg(value: str) -> str:
    # Path segments must be fully encoded ("/" and ":" included) for the REST API.
    return quote(str(value), safe="")


class UpstashKV:
    """
    Minimal Upstash Redis REST client implementing the KeyValueStore port.

    Endpoints (bearer auth):
      GET /get/<key>                      -> {"result": "<value>" | null}
      GET /set/<key>/<value>              -> {"result": "OK"}
      GET /scan/<cursor>?match=&count=    -> {"result": ["<next cursor>", ["k1", ...]]}
    """

    def __init__(
        self,
        url: str,
        token: str,
        *,
        timeout: float = 15.0,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        if not url or not token:
            raise ValueError("Upstash URL and token are required")
        self._url = url.rstrip("/")
        self._headers = {"Authorization": f"Bearer {token}"}
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=httpx.Timeout(timeout, connect=min(5.0, timeout)))

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> UpstashKV:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _request(self, op: str, path: str, params: dict[str, str] | None = None) -> Any:
        try:
            resp = await self._http.get(f"{self._url}/{path}", headers=self._headers, params=params)
        except httpx.HTTPError as e:
            raise LedgerError(f"Redis {op} failed: {e.__class__.__name__}") from e
        if resp.status_code >= 400:
            raise LedgerError(f"Redis {op} failed: {resp.status_code}")
        try:
            data = resp.json()
        except ValueError as e:
            raise LedgerError(f"Redis {op} failed: invalid JSON") from e
        return data.get("result") if isinstance(data, dict) else None

    async def get(self, key: str) -> str | None:
        result = await self._request("GET", f"get/{_seg(key)}")
        if result is None:
            return None
        return result if isinstance(result, str) else str(result)

    async def set(self, key: str, value: str) -> bool:
        result = await self._request("SET", f"set/{_seg(key)}/{_seg(value)}")
        return result == "OK"

    async def scan(self, cursor: str, match: str, count: int) -> tuple[str, list[str]]:
        params: dict[str, str] = {}
        if match:
            params["match"] = match
        if count:
            params["count"] = str(count)
        result = await self._request("SCAN", f"scan/{_seg(cursor)}", params or None)

        if isinstance(result, list) and len(result) == 2:
            next_cursor, keys = result
            keys_out = [str(k) for k in keys] if isinstance(keys, list) else []
            return str(next_cursor or "0"), keys_out

        logger.warning("Unexpected SCAN response shape; treating as end of scan")
        return "0", []
