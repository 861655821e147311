# src/thumb_tasks/tasks/task_store.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from ..core.errors import LedgerError
from ..core.ports import KeyValueStore
from .task_models import Task

logger = logging.getLogger(__name__)


class TaskStore:
    """
    Task ledger on top of an opaque string key-value store.

    One key per task (task:<chat_id>:<message_id>), value = JSON record.

    Semantics:
    - get(): missing and corrupt records both read as None
    - put(): whole-record overwrite, last writer wins (no CAS; one run at a time is assumed)
    - list_keys(): SCAN pagination until cursor "0" or max_keys collected

    Transport failures surface as LedgerError; callers decide how best-effort to be.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        *,
        scan_page_size: int = 200,
        max_keys: int = 5000,
    ) -> None:
        self._kv = kv
        self._scan_page_size = max(1, int(scan_page_size))
        self._max_keys = max(1, int(max_keys))

    async def get(self, key: str) -> Task | None:
        raw = await self._kv.get(key)
        if not raw:
            return None
        try:
            return Task.from_json(raw)
        except Exception:
            logger.warning("Corrupt task record at %s; treating as absent", key)
            return None

    async def put(self, task: Task) -> None:
        ok = await self._kv.set(task.key, task.to_json())
        if not ok:
            raise LedgerError(f"SET {task.key} was not acknowledged")
        logger.debug("Task stored key=%s done=%s", task.key, task.done)

    async def list_keys(self, prefix: str) -> list[str]:
        """
        Enumerate keys starting with prefix.

        A SCAN failure mid-way keeps the keys collected so far (logged), so a
        flaky store shortens the report instead of aborting it.
        """
        keys: list[str] = []
        seen: set[str] = set()
        cursor = "0"
        match = f"{prefix}*"

        try:
            while True:
                cursor, page = await self._kv.scan(cursor, match, self._scan_page_size)
                for k in page:
                    # SCAN may return a key more than once across pages.
                    if k not in seen:
                        seen.add(k)
                        keys.append(k)
                if cursor == "0":
                    break
                if len(keys) >= self._max_keys:
                    logger.warning("Ledger scan cap hit: keys=%d cap=%d", len(keys), self._max_keys)
                    break
        except LedgerError:
            logger.exception("Ledger scan failed after %d keys; continuing with partial list", len(keys))

        return keys

    async def get_many(self, keys: Iterable[str], *, concurrency: int = 8) -> list[Task]:
        """
        Read several records in small parallel groups.

        Unreadable keys (transport error, corrupt JSON, vanished) are skipped.
        Returned order follows the input order.
        """
        key_list = list(keys)
        group = max(1, int(concurrency))
        out: list[Task] = []

        for start in range(0, len(key_list), group):
            chunk = key_list[start : start + group]
            results = await asyncio.gather(*(self.get(k) for k in chunk), return_exceptions=True)
            for key, res in zip(chunk, results):
                if isinstance(res, BaseException):
                    if not isinstance(res, Exception):
                        raise res
                    logger.warning("Failed to read task %s: %s", key, res)
                    continue
                if res is not None:
                    out.append(res)

        return out
