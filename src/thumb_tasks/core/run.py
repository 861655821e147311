# src/thumb_tasks/core/run.py

"""
Run controller.

One invocation = drain the feed, fold updates into the ledger, report open
tasks to the owner. Everything happens sequentially in one coroutine.

Failure policy:
- missing identity/credentials -> ConfigError at construction, nothing is sent
- feed/report/send failure     -> one best-effort "Cron error" message, ok=False
- single ledger failures       -> handled below (applier / ledger scan), run continues
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ..tasks.applier import apply_updates
from ..tasks.drainer import drain_updates
from ..tasks.report import Report, build_open_tasks_report, render_recent_messages
from ..tasks.task_store import TaskStore
from ..tasks.text import html_escape
from .errors import ConfigError
from .ports import KeyValueStore, OutboundMessenger, UpdateFeed

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RunResult:
    ok: bool
    checked: int = 0
    reported: int = 0
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        if self.ok:
            return {"ok": True, "checked": self.checked, "reported": self.reported}
        return {"ok": False, "error": self.error or "unknown error"}


class RunController:
    def __init__(
        self,
        settings: Any,
        *,
        feed: UpdateFeed,
        messenger: OutboundMessenger,
        kv: KeyValueStore | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        missing = settings.missing_required()
        if missing:
            raise ConfigError(missing)

        self.settings = settings
        self.owner_id = str(settings.admin_chat_id)
        self.feed = feed
        self.messenger = messenger
        self.clock = clock
        self.store: TaskStore | None = None
        if kv is not None:
            self.store = TaskStore(
                kv,
                scan_page_size=settings.scan_page_size,
                max_keys=settings.scan_max_keys,
            )

    async def run(self) -> RunResult:
        try:
            return await self._run()
        except Exception as e:
            logger.exception("Run failed")
            await self._notify_error(e)
            return RunResult(ok=False, error=str(e) or e.__class__.__name__)

    async def _run(self) -> RunResult:
        drained = await drain_updates(self.feed, max_updates=self.settings.drain_max_updates)
        updates = drained.updates

        if self.store is not None:
            await apply_updates(self.store, updates, owner_id=self.owner_id, clock=self.clock)
            report = await build_open_tasks_report(
                self.store,
                self.owner_id,
                now_ts=self.clock(),
                max_len=self.settings.report_max_chunk_len,
                concurrency=self.settings.fetch_concurrency,
            )
        else:
            logger.info("No ledger configured; sending recent-messages digest instead")
            report = render_recent_messages(
                updates,
                now_ts=self.clock(),
                max_len=self.settings.report_max_chunk_len,
            )

        await self._send_report(report)
        logger.info("Run finished: checked=%d reported=%d chunks=%d", len(updates), report.count, len(report.chunks))
        return RunResult(ok=True, checked=len(updates), reported=report.count)

    async def _send_report(self, report: Report) -> None:
        for chunk in report.chunks:
            await self.messenger.send_text(chat_id=self.owner_id, text=chunk)

    async def _notify_error(self, err: Exception) -> None:
        """Best-effort: a failure here is logged and dropped."""
        text = f"Cron error: {html_escape(str(err) or err.__class__.__name__)}"
        try:
            await self.messenger.send_text(chat_id=self.owner_id, text=text)
        except Exception:
            logger.warning("Failed to deliver error notification", exc_info=True)
