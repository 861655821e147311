# tests/test_report.py

from __future__ import annotations

import pytest

from thumb_tasks.tasks.report import (
    DAY_SECONDS,
    age_days,
    build_open_tasks_report,
    chunk_lines,
    format_task_line,
    render_open_tasks,
    render_recent_messages,
)
from thumb_tasks.tasks.task_models import Task, task_key
from thumb_tasks.tasks.task_store import TaskStore
from thumb_tasks.tasks.text import LRM, PDF, RLE

from .fakes import OWNER_ID, FakeKV, message_update

NOW = 1_700_000_000.0


def _task(message_id: int, text: str, *, days_old: float, done: bool = False) -> Task:
    created = NOW - days_old * DAY_SECONDS
    return Task(
        chat_id=OWNER_ID,
        message_id=message_id,
        created_at=created,
        text=text,
        done=done,
        done_at=NOW if done else None,
    )


def _unwrap(chunk: str) -> str:
    assert chunk.startswith(RLE) and chunk.endswith(PDF)
    return chunk[len(RLE) : -len(PDF)]


def test_age_days() -> None:
    assert age_days(NOW - 2.9 * DAY_SECONDS, NOW) == 2
    assert age_days(NOW - 10, NOW) == 0
    assert age_days(NOW + 500, NOW) == 0
    assert age_days(0, NOW) == 0


def test_task_line_escapes_html_and_pins_age_direction() -> None:
    line = format_task_line(_task(1, "a <b> & c", days_old=3), NOW)
    assert line == f"• a &lt;b&gt; &amp; c <b>{LRM}[3d]</b>"


def test_task_line_uses_first_line_only() -> None:
    line = format_task_line(_task(1, "title\nmore details", days_old=0), NOW)
    assert line.startswith("• title <b>")


def test_zero_open_tasks_still_has_header() -> None:
    report = render_open_tasks([_task(1, "closed", days_old=1, done=True)], now_ts=NOW)
    assert report.count == 0
    assert len(report.chunks) == 1
    assert "Open tasks: 0" in _unwrap(report.chunks[0])


def test_open_tasks_sorted_oldest_first_and_done_excluded() -> None:
    tasks = [
        _task(1, "Pay rent", days_old=1),
        _task(2, "Call Sam", days_old=5),
        _task(3, "Already done", days_old=9, done=True),
    ]
    report = render_open_tasks(tasks, now_ts=NOW)

    body = _unwrap(report.chunks[0])
    lines = body.split("\n")
    assert lines[0] == "<b>\U0001F7E2 Open tasks: 2</b>"
    assert lines[1] == ""
    assert lines[2].startswith("• Call Sam") and lines[2].endswith("[5d]</b>")
    assert lines[3].startswith("• Pay rent") and lines[3].endswith("[1d]</b>")
    assert "Already done" not in body


@pytest.mark.parametrize("max_len", [20, 35, 64, 200])
def test_chunks_never_split_lines_and_respect_bound(max_len: int) -> None:
    lines = [f"line {i} " + "x" * (i % 11) for i in range(40)]

    chunks = chunk_lines(lines, max_len)

    assert all(len(c) <= max_len for c in chunks)
    assert "".join(chunks) == "".join(line + "\n" for line in lines)
    for c in chunks:
        assert c.endswith("\n")


def test_oversized_line_gets_its_own_chunk() -> None:
    chunks = chunk_lines(["short", "y" * 50, "tail"], 20)
    assert chunks == ["short\n", "y" * 50 + "\n", "tail\n"]


def test_long_report_is_split_into_wrapped_chunks() -> None:
    tasks = [_task(i, f"task number {i} " + "z" * 150, days_old=i) for i in range(60)]
    report = render_open_tasks(tasks, now_ts=NOW, max_len=3800)

    assert len(report.chunks) > 1
    bodies = [_unwrap(c) for c in report.chunks]
    assert all(len(b) <= 3800 for b in bodies)
    assert "".join(bodies).count("\n• ") == 60


@pytest.mark.asyncio
async def test_build_report_from_ledger_skips_corrupt_records() -> None:
    kv = FakeKV()
    store = TaskStore(kv, scan_page_size=2)
    await store.put(_task(1, "Call Sam", days_old=2))
    await store.put(_task(2, "Pay rent", days_old=1))
    await store.put(_task(3, "Closed", days_old=3, done=True))
    kv.data[task_key(OWNER_ID, 4)] = "{broken"
    kv.data[task_key(999, 5)] = _task(5, "Other chat", days_old=1).to_json()

    report = await build_open_tasks_report(store, OWNER_ID, now_ts=NOW)

    assert report.count == 2
    body = _unwrap(report.chunks[0])
    assert body.index("Call Sam") < body.index("Pay rent")
    assert "Other chat" not in body


def test_recent_messages_digest_filters_emoji_and_old_messages() -> None:
    updates = [
        message_update(1, 1, "plain text", date=NOW - 3600, chat_label="Alice"),
        message_update(2, 2, "with emoji \U0001F600", date=NOW - 3600),
        message_update(3, 3, "too old", date=NOW - 2 * DAY_SECONDS),
        message_update(4, 4, "no label <tag>", date=NOW - 60, chat_id=-77, chat_type="group"),
    ]

    report = render_recent_messages(updates, now_ts=NOW)

    assert report.count == 2
    body = _unwrap(report.chunks[0])
    assert "No-emoji messages in last 24h: 2" in body
    assert f"• <b>Alice</b> <i>{LRM}[2023-11-14]</i>: plain text" in body
    assert "<b>chat:-77</b>" in body
    assert "no label &lt;tag&gt;" in body
