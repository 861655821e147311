# src/thumb_tasks/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object passed explicitly into the run controller and web app.
- No secrets required at import time.
- Every variable accepts a THUMB_-prefixed name first, then the bare legacy name
  (TELEGRAM_BOT_TOKEN, ADMIN_CHAT_ID, ...), so existing deployments keep working.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "THUMB"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str) -> Path | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    log_dir: Path | None

    # ---- Telegram ----
    telegram_bot_token: str
    telegram_api_base: str
    admin_chat_id: str

    # ---- Trigger surface ----
    cron_secret: str
    port: int

    # ---- Upstash Redis REST ----
    upstash_url: str
    upstash_token: str

    # ---- Tuning ----
    http_timeout_seconds: float = 15.0
    drain_max_updates: int = 2000
    scan_max_keys: int = 5000
    scan_page_size: int = 200
    report_max_chunk_len: int = 3800
    fetch_concurrency: int = 8

    @property
    def ledger_enabled(self) -> bool:
        return bool(self.upstash_url and self.upstash_token)

    def missing_required(self) -> list[str]:
        """Names of identity/credential variables a cron run cannot do without."""
        missing: list[str] = []
        if not self.telegram_bot_token:
            missing.append("TELEGRAM_BOT_TOKEN")
        if not self.admin_chat_id:
            missing.append("ADMIN_CHAT_ID")
        return missing

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "thumb-tasks")
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        log_dir = _env_path(_k("LOG_DIR"))

        telegram_bot_token = (
            _first_env(_k("TELEGRAM_BOT_TOKEN"), "TELEGRAM_BOT_TOKEN", default="") or ""
        ).strip()
        telegram_api_base = _env(_k("TELEGRAM_API_BASE"), "https://api.telegram.org").rstrip("/")
        admin_chat_id = (_first_env(_k("ADMIN_CHAT_ID"), "ADMIN_CHAT_ID", default="") or "").strip()

        cron_secret = (_first_env(_k("CRON_SECRET"), "CRON_SECRET", default="") or "").strip()
        port = _env_int(_k("PORT"), _env_int("PORT", 3000))

        upstash_url = (
            _first_env(_k("UPSTASH_REDIS_REST_URL"), "UPSTASH_REDIS_REST_URL", default="") or ""
        ).strip().rstrip("/")
        upstash_token = (
            _first_env(_k("UPSTASH_REDIS_REST_TOKEN"), "UPSTASH_REDIS_REST_TOKEN", default="") or ""
        ).strip()

        return Settings(
            app_name=app_name,
            log_level=log_level,
            log_dir=log_dir,
            telegram_bot_token=telegram_bot_token,
            telegram_api_base=telegram_api_base,
            admin_chat_id=admin_chat_id,
            cron_secret=cron_secret,
            port=port,
            upstash_url=upstash_url,
            upstash_token=upstash_token,
            http_timeout_seconds=_env_float(_k("HTTP_TIMEOUT_SECONDS"), 15.0),
            drain_max_updates=_env_int(_k("DRAIN_MAX_UPDATES"), 2000),
            scan_max_keys=_env_int(_k("SCAN_MAX_KEYS"), 5000),
            scan_page_size=_env_int(_k("SCAN_PAGE_SIZE"), 200),
            report_max_chunk_len=_env_int(_k("REPORT_MAX_CHUNK_LEN"), 3800),
            fetch_concurrency=_env_int(_k("FETCH_CONCURRENCY"), 8),
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    """Load .env once and return the cached Settings."""
    global _SETTINGS
    if _SETTINGS is None:
        load_dotenv(override=False)
        _SETTINGS = Settings.from_env()
    return _SETTINGS


def reset_settings() -> None:
    """Drop the cached Settings (tests and the dev server reload use this)."""
    global _SETTINGS
    _SETTINGS = None
