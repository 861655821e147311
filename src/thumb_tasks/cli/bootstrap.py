# src/thumb_tasks/cli/bootstrap.py

"""
Composition root.

Builds concrete collaborators (Telegram client, Upstash client) from Settings
and hands them to the core. Both the CLI and the web app go through here, so
there is exactly one place that knows about httpx clients and their lifetimes.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any

from ..config import Settings
from ..connectors.telegram_client import TelegramClient
from ..connectors.upstash_client import UpstashKV
from ..core.errors import ConfigError
from ..core.run import RunController, RunResult
from ..core.whoami import collect_whoami

logger = logging.getLogger(__name__)


def build_telegram(settings: Settings) -> TelegramClient:
    if not settings.telegram_bot_token:
        raise ConfigError(["TELEGRAM_BOT_TOKEN"])
    return TelegramClient(
        settings.telegram_bot_token,
        api_base=settings.telegram_api_base,
        timeout=settings.http_timeout_seconds,
    )


def build_kv(settings: Settings) -> UpstashKV | None:
    if not settings.ledger_enabled:
        return None
    return UpstashKV(
        settings.upstash_url,
        settings.upstash_token,
        timeout=settings.http_timeout_seconds,
    )


@asynccontextmanager
async def open_controller(settings: Settings) -> AsyncIterator[RunController]:
    """Yield a wired RunController; HTTP clients are closed on exit."""
    missing = settings.missing_required()
    if missing:
        raise ConfigError(missing)

    async with AsyncExitStack() as stack:
        telegram = await stack.enter_async_context(build_telegram(settings))
        kv = build_kv(settings)
        if kv is not None:
            await stack.enter_async_context(kv)
        yield RunController(settings, feed=telegram, messenger=telegram, kv=kv)


async def run_once(settings: Settings) -> RunResult:
    async with open_controller(settings) as controller:
        return await controller.run()


async def whoami(settings: Settings) -> dict[str, Any]:
    async with build_telegram(settings) as telegram:
        return await collect_whoami(telegram)
