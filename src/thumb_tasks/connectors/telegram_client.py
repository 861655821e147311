# src/thumb_tasks/connectors/telegram_client.py

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from ..core.errors import FeedError, SendError
from ..core.updates import Update
from .telegram_updates import parse_update

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.telegram.org"

# Reactions must be requested explicitly; Telegram omits them by default.
TASK_UPDATE_KINDS = ["message", "message_reaction"]
WHOAMI_UPDATE_KINDS = ["message", "channel_post"]


class TelegramClient:
    """
    Thin async Bot API client (httpx).

    Implements the UpdateFeed and OutboundMessenger ports. Every call is a JSON
    POST to <api_base>/bot<token>/<method>. The token never appears in raised
    error messages.
    """

    def __init__(
        self,
        token: str,
        *,
        api_base: str = DEFAULT_API_BASE,
        timeout: float = 15.0,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        if not token or not token.strip():
            raise ValueError("Telegram bot token is required")
        self._token = token.strip()
        self._api_base = (api_base or DEFAULT_API_BASE).rstrip("/")
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=httpx.Timeout(timeout, connect=min(5.0, timeout)))

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> TelegramClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def _redact(self, text: str) -> str:
        return text.replace(self._token, "<token>")

    async def call(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Call a Bot API method and return the decoded JSON body.

        Telegram answers errors with a JSON body as well ({"ok": false, ...}), so
        HTTP status codes are not treated as failures here; callers check "ok".
        """
        url = f"{self._api_base}/bot{self._token}/{method}"
        resp = await self._http.post(url, json=params)
        try:
            data = resp.json()
        except json.JSONDecodeError as e:
            raise ValueError(f"{method}: non-JSON response (HTTP {resp.status_code})") from e
        if not isinstance(data, dict):
            raise ValueError(f"{method}: unexpected response shape")
        return data

    async def get_updates(
        self,
        offset: int | None,
        *,
        allowed_updates: list[str] | None = None,
    ) -> list[Update]:
        params: dict[str, Any] = {
            "allowed_updates": list(allowed_updates or TASK_UPDATE_KINDS),
            "timeout": 0,
        }
        if offset is not None:
            params["offset"] = offset

        try:
            data = await self.call("getUpdates", params)
        except (httpx.HTTPError, ValueError) as e:
            raise FeedError(self._redact(f"getUpdates failed: {e}")) from e

        if data.get("ok") is not True:
            raise FeedError(f"getUpdates error: {json.dumps(data, ensure_ascii=False)}")

        raw_updates = data.get("result") or []
        if not isinstance(raw_updates, list):
            raise FeedError("getUpdates error: result is not a list")

        updates: list[Update] = []
        for raw in raw_updates:
            u = parse_update(raw)
            if u is not None:
                updates.append(u)
        return updates

    async def send_text(self, *, chat_id: int | str, text: str) -> None:
        params = {
            "chat_id": chat_id,
            "text": text,
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
        }
        try:
            data = await self.call("sendMessage", params)
        except (httpx.HTTPError, ValueError) as e:
            raise SendError(self._redact(f"sendMessage failed: {e}")) from e

        if data.get("ok") is not True:
            raise SendError(f"sendMessage error: {data.get('description') or data}")

    async def get_me(self) -> dict[str, Any] | None:
        try:
            data = await self.call("getMe")
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("getMe failed: %s", self._redact(str(e)))
            return None
        result = data.get("result")
        return result if data.get("ok") is True and isinstance(result, dict) else None
