# tests/conftest.py

from __future__ import annotations

import pytest

from thumb_tasks.config import Settings
from thumb_tasks.tasks.task_store import TaskStore

from .fakes import OWNER_ID, FakeKV, FakeMessenger


@pytest.fixture()
def settings() -> Settings:
    """
    Fully populated Settings built directly (no env reads), so tests stay
    deterministic regardless of the developer's .env.
    """
    return Settings(
        app_name="thumb-tasks-test",
        log_level="DEBUG",
        log_dir=None,
        telegram_bot_token="123:TEST",
        telegram_api_base="https://telegram.test",
        admin_chat_id=str(OWNER_ID),
        cron_secret="",
        port=3000,
        upstash_url="https://kv.test",
        upstash_token="kv-token",
    )


@pytest.fixture()
def kv() -> FakeKV:
    return FakeKV()


@pytest.fixture()
def store(kv: FakeKV) -> TaskStore:
    return TaskStore(kv, scan_page_size=3, max_keys=5000)


@pytest.fixture()
def messenger() -> FakeMessenger:
    return FakeMessenger()
