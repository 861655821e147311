# src/thumb_tasks/tasks/report.py

"""
Report rendering.

Open tasks are listed oldest first as single HTML lines, then packed into
chunks that stay below Telegram's 4096-char message limit. Every chunk is
wrapped in RLE/PDF so Hebrew task text with digits and brackets renders in
one coherent right-to-left paragraph; the age tag carries an LRM so "[3d]"
never flips.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone

from ..core.updates import Update
from .task_models import Task, chat_key_prefix
from .task_store import TaskStore
from .text import LRM, PDF, RLE, first_line_title, has_emoji, html_escape, snippet

logger = logging.getLogger(__name__)

DAY_SECONDS = 24 * 60 * 60
DEFAULT_MAX_CHUNK_LEN = 3800
TITLE_MAX_LEN = 200
DIGEST_SNIPPET_LEN = 140


@dataclass(slots=True)
class Report:
    header: str
    lines: list[str] = field(default_factory=list)
    chunks: list[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.lines)


def age_days(created_at: float | None, now_ts: float) -> int:
    """Whole days since created_at; 0 for missing or future timestamps."""
    if not created_at or created_at > now_ts:
        return 0
    return int((now_ts - created_at) // DAY_SECONDS)


def format_date(ts: float) -> str:
    try:
        return datetime.fromtimestamp(ts, tz=timezone.utc).strftime("%Y-%m-%d")
    except (OverflowError, OSError, ValueError):
        return ""


def format_task_line(task: Task, now_ts: float) -> str:
    days = age_days(task.created_at, now_ts)
    title = first_line_title(task.text, TITLE_MAX_LEN)
    return f"• {html_escape(title)} <b>{LRM}[{days}d]</b>"


def chunk_lines(lines: Iterable[str], max_len: int = DEFAULT_MAX_CHUNK_LEN) -> list[str]:
    """
    Pack newline-terminated lines into chunks of at most max_len chars.

    A line is never split: if it does not fit into the current chunk, it opens
    a new one. A single line longer than max_len becomes its own chunk.
    """
    chunks: list[str] = []
    cur = ""
    for line in lines:
        add = (line or "") + "\n"
        if cur and len(cur) + len(add) > max_len:
            chunks.append(cur)
            cur = ""
        cur += add
    if cur:
        chunks.append(cur)
    return chunks


def wrap_rtl(chunk: str) -> str:
    return f"{RLE}{chunk}{PDF}"


def build_report(header: str, lines: Sequence[str], *, max_len: int = DEFAULT_MAX_CHUNK_LEN) -> Report:
    payload = [header]
    if lines:
        payload.extend(["", *lines])
    chunks = [wrap_rtl(c) for c in chunk_lines(payload, max_len)]
    return Report(header=header, lines=list(lines), chunks=chunks)


def render_open_tasks(
    tasks: Iterable[Task],
    *,
    now_ts: float,
    max_len: int = DEFAULT_MAX_CHUNK_LEN,
) -> Report:
    """Pure part of the report: filter done tasks, sort oldest first, format and chunk."""
    open_tasks = sorted((t for t in tasks if not t.done), key=lambda t: t.created_at)
    lines = [format_task_line(t, now_ts) for t in open_tasks]
    header = f"<b>\U0001F7E2 Open tasks: {len(lines)}</b>"
    return build_report(header, lines, max_len=max_len)


async def load_open_tasks(
    store: TaskStore,
    chat_id: int | str,
    *,
    concurrency: int = 8,
) -> list[Task]:
    """Enumerate the chat's ledger keys, then read them; corrupt/unreadable/done records are dropped."""
    keys = await store.list_keys(chat_key_prefix(chat_id))
    tasks = await store.get_many(keys, concurrency=concurrency)
    open_tasks = [t for t in tasks if not t.done]
    logger.info("Ledger scan: keys=%d readable=%d open=%d", len(keys), len(tasks), len(open_tasks))
    return open_tasks


async def build_open_tasks_report(
    store: TaskStore,
    chat_id: int | str,
    *,
    now_ts: float,
    max_len: int = DEFAULT_MAX_CHUNK_LEN,
    concurrency: int = 8,
) -> Report:
    tasks = await load_open_tasks(store, chat_id, concurrency=concurrency)
    return render_open_tasks(tasks, now_ts=now_ts, max_len=max_len)


def render_recent_messages(
    updates: Iterable[Update],
    *,
    now_ts: float,
    window_seconds: float = DAY_SECONDS,
    max_len: int = DEFAULT_MAX_CHUNK_LEN,
) -> Report:
    """
    Digest used when no ledger is configured: every message or channel post from
    the last window_seconds that has text and no emoji, in feed order.
    """
    since = now_ts - window_seconds
    lines: list[str] = []
    for u in updates:
        m = u.message
        if m is None or not m.date or m.date < since:
            continue
        if not m.text or has_emoji(m.text):
            continue
        label = m.chat_label or f"chat:{m.chat_id}"
        lines.append(
            f"• <b>{html_escape(label)}</b> <i>{LRM}[{format_date(m.date)}]</i>: "
            f"{html_escape(snippet(m.text, DIGEST_SNIPPET_LEN))}"
        )
    header = f"<b>No-emoji messages in last 24h: {len(lines)}</b>"
    return build_report(header, lines, max_len=max_len)
