# src/thumb_tasks/web/app.py

"""
HTTP trigger surface.

GET /api/cron   - one run (called by the scheduler); optional ?key=<CRON_SECRET>
GET /api/whoami - setup helper listing chat ids seen by the bot
GET /           - health
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from ..cli import bootstrap
from ..config import Settings, get_settings
from ..core.run import RunResult

logger = logging.getLogger(__name__)

RunOnce = Callable[[Settings], Awaitable[RunResult]]
WhoAmI = Callable[[Settings], Awaitable[dict[str, Any]]]


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "error": message})


def create_app(
    settings: Settings | None = None,
    *,
    run_once: RunOnce = bootstrap.run_once,
    whoami: WhoAmI = bootstrap.whoami,
) -> FastAPI:
    """
    Build the app. Settings are resolved per request when not given, so the
    dev server picks up .env without a restart of the module.
    """
    app = FastAPI(
        title="thumb-tasks",
        description="Turns a private Telegram chat into a task list and reports open tasks.",
        version="0.1.0",
    )

    def _settings() -> Settings:
        return settings if settings is not None else get_settings()

    @app.get("/", summary="Health Check", tags=["health"])
    def health_check() -> dict[str, Any]:
        s = _settings()
        return {"ok": True, "app": s.app_name, "ledger": s.ledger_enabled}

    @app.get("/api/cron", summary="Run once", tags=["cron"])
    async def cron(key: str = "") -> JSONResponse:
        s = _settings()

        if s.cron_secret and not secrets.compare_digest(key.encode(), s.cron_secret.encode()):
            logger.warning("Rejected /api/cron call with a bad or missing key")
            return _error(401, "Unauthorized")

        missing = s.missing_required()
        if missing:
            return _error(500, f"Missing env vars: {', '.join(missing)}")

        try:
            result = await run_once(s)
        except Exception as e:
            logger.exception("Cron run crashed")
            return _error(500, str(e) or e.__class__.__name__)

        return JSONResponse(status_code=200 if result.ok else 500, content=result.to_dict())

    @app.get("/api/whoami", summary="List chat ids seen by the bot", tags=["setup"])
    async def whoami_route() -> JSONResponse:
        s = _settings()
        if not s.telegram_bot_token:
            return _error(500, "Missing env var: TELEGRAM_BOT_TOKEN")
        try:
            payload = await whoami(s)
        except Exception as e:
            logger.exception("whoami failed")
            return _error(500, str(e) or e.__class__.__name__)
        return JSONResponse(status_code=200, content=payload)

    return app


app = create_app()
