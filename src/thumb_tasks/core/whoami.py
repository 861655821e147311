# src/thumb_tasks/core/whoami.py

"""Setup helper: show the bot identity and the chat ids seen in pending updates."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from ..connectors.telegram_client import WHOAMI_UPDATE_KINDS, TelegramClient
from .updates import Update

HINT = (
    "Send a message to the bot or in a group it is in, then refresh to see chat IDs. "
    "Use your ID as ADMIN_CHAT_ID."
)


def extract_chats(updates: Iterable[Update]) -> list[dict[str, Any]]:
    """Distinct chats in first-seen order."""
    seen: dict[int, dict[str, Any]] = {}
    for u in updates:
        m = u.message
        if m is None or m.chat_id in seen:
            continue
        chat: dict[str, Any] = {"id": m.chat_id, "type": m.chat_type}
        if m.chat_label:
            chat["title"] = m.chat_label
        seen[m.chat_id] = chat
    return list(seen.values())


async def collect_whoami(telegram: TelegramClient) -> dict[str, Any]:
    """
    Peek at pending updates without an offset, so nothing is acknowledged and
    the next cron run still sees them.
    """
    me = await telegram.get_me()
    updates = await telegram.get_updates(None, allowed_updates=WHOAMI_UPDATE_KINDS)
    out: dict[str, Any] = {"ok": True, "hint": HINT, "chats": extract_chats(updates)}
    if me is not None:
        out["bot"] = {"id": me.get("id"), "username": me.get("username")}
    return out
