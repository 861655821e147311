# src/thumb_tasks/core/updates.py

"""
Canonical update shapes seen by the core.

The Telegram connector normalizes raw JSON into these types, so the classifier
never has to sniff field names (new_reaction vs reaction, emoji vs value, ...).
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True, frozen=True)
class ReactionEvent:
    actor_id: int | None
    chat_id: int | None
    chat_type: str | None
    message_id: int | None
    emojis: frozenset[str] = field(default_factory=frozenset)


@dataclass(slots=True, frozen=True)
class MessageEvent:
    chat_id: int
    chat_type: str
    message_id: int
    date: float  # unix seconds, as sent by the platform
    text: str = ""
    sender_id: int | None = None
    reply_to_message_id: int | None = None
    chat_label: str | None = None  # title or username, used by the fallback digest
    channel_post: bool = False

    @property
    def is_reply(self) -> bool:
        return self.reply_to_message_id is not None


@dataclass(slots=True, frozen=True)
class Update:
    update_id: int
    reaction: ReactionEvent | None = None
    message: MessageEvent | None = None
