# src/thumb_tasks/connectors/telegram_updates.py

"""
Normalize raw Telegram Bot API update JSON into core Update objects.

Reaction payloads have been seen under several shapes (new_reaction,
new_reactions, reaction, reactions; items as plain strings, {"emoji": ...}
or {"value": ...}); all of them collapse into ReactionEvent.emojis here.
"""

from __future__ import annotations

import logging
from typing import Any

from ..core.updates import MessageEvent, ReactionEvent, Update

logger = logging.getLogger(__name__)

_REACTION_LIST_FIELDS = ("new_reaction", "new_reactions", "reaction", "reactions")


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def extract_reaction_emojis(reaction: dict[str, Any]) -> frozenset[str]:
    items: Any = []
    for name in _REACTION_LIST_FIELDS:
        if reaction.get(name):
            items = reaction[name]
            break
    if not isinstance(items, list):
        items = [items]

    out: set[str] = set()
    for it in items:
        if isinstance(it, str):
            out.add(it)
        elif isinstance(it, dict):
            if isinstance(it.get("emoji"), str):
                out.add(it["emoji"])
            elif isinstance(it.get("value"), str):
                out.add(it["value"])
    return frozenset(out)


def parse_reaction(raw_update: dict[str, Any], reaction: dict[str, Any]) -> ReactionEvent:
    chat = _as_dict(reaction.get("chat"))
    actor_id = (
        _as_int(_as_dict(reaction.get("user")).get("id"))
        or _as_int(_as_dict(reaction.get("from")).get("id"))
        or _as_int(_as_dict(raw_update.get("user")).get("id"))
        or _as_int(_as_dict(raw_update.get("from")).get("id"))
    )
    message_id = (
        _as_int(reaction.get("message_id"))
        or _as_int(_as_dict(reaction.get("message")).get("message_id"))
        or _as_int(reaction.get("msg_id"))
    )
    return ReactionEvent(
        actor_id=actor_id,
        chat_id=_as_int(chat.get("id")),
        chat_type=chat.get("type") if isinstance(chat.get("type"), str) else None,
        message_id=message_id,
        emojis=extract_reaction_emojis(reaction),
    )


def parse_message(message: dict[str, Any], *, channel_post: bool = False) -> MessageEvent | None:
    chat = _as_dict(message.get("chat"))
    chat_id = _as_int(chat.get("id"))
    message_id = _as_int(message.get("message_id"))
    if chat_id is None or message_id is None:
        return None

    text = message.get("text") or message.get("caption") or ""
    reply = message.get("reply_to_message")
    label = chat.get("title") or chat.get("username")

    return MessageEvent(
        chat_id=chat_id,
        chat_type=str(chat.get("type") or ""),
        message_id=message_id,
        date=float(_as_int(message.get("date")) or 0),
        text=text if isinstance(text, str) else "",
        sender_id=_as_int(_as_dict(message.get("from")).get("id")),
        reply_to_message_id=_as_int(reply.get("message_id")) if isinstance(reply, dict) else None,
        chat_label=str(label) if label else None,
        channel_post=channel_post,
    )


def parse_update(raw: Any) -> Update | None:
    """Return None for payloads without a usable update_id."""
    if not isinstance(raw, dict):
        return None
    update_id = _as_int(raw.get("update_id"))
    if update_id is None:
        logger.warning("Dropping update without update_id: keys=%s", sorted(raw))
        return None

    reaction = raw.get("message_reaction") or raw.get("messageReaction")
    if isinstance(reaction, dict):
        return Update(update_id=update_id, reaction=parse_reaction(raw, reaction))

    if isinstance(raw.get("message"), dict):
        return Update(update_id=update_id, message=parse_message(raw["message"]))
    if isinstance(raw.get("channel_post"), dict):
        return Update(update_id=update_id, message=parse_message(raw["channel_post"], channel_post=True))

    return Update(update_id=update_id)
