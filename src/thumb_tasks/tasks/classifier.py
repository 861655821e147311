# src/thumb_tasks/tasks/classifier.py

"""
Update classifier.

Decides, for one update, which ledger action it represents. Rules are evaluated
in order and the first match wins:

1. owner's thumbs-up reaction in the private chat    -> reaction close
2. message outside a private chat / not by the owner -> ignore
3. reply containing a thumbs-up                      -> reply close (replied-to message)
4. any other reply                                   -> ignore
5. non-empty text without a thumbs-up                -> create task
6. everything else                                   -> ignore

A bare thumbs-up that is not a reply falls through to rule 6 and is dropped.
"""

from __future__ import annotations

import logging

from ..core.updates import MessageEvent, ReactionEvent, Update
from .task_models import ActionKind, Task, TaskAction, task_key
from .text import is_thumbs_up, snippet

logger = logging.getLogger(__name__)

PRIVATE_CHAT = "private"
TASK_TEXT_MAX_LEN = 400


def _is_owner(actor_id: int | None, owner_id: str) -> bool:
    return actor_id is not None and str(actor_id) == str(owner_id)


def classify_reaction(reaction: ReactionEvent, owner_id: str) -> TaskAction:
    if reaction.chat_type != PRIVATE_CHAT or reaction.chat_id is None:
        return TaskAction.ignore("reaction outside private chat")
    if not _is_owner(reaction.actor_id, owner_id):
        return TaskAction.ignore("reaction not by owner")
    if not any(is_thumbs_up(e) for e in reaction.emojis):
        return TaskAction.ignore("reaction without thumbs-up")
    if not reaction.message_id:
        return TaskAction.ignore("reaction without target message")
    return TaskAction(
        kind=ActionKind.REACTION_CLOSE,
        target_key=task_key(reaction.chat_id, reaction.message_id),
    )


def classify_message(message: MessageEvent, owner_id: str) -> TaskAction:
    if message.chat_type != PRIVATE_CHAT:
        return TaskAction.ignore("message outside private chat")
    if not _is_owner(message.sender_id, owner_id):
        return TaskAction.ignore("message not by owner")

    text = message.text or ""
    thumb = is_thumbs_up(text)

    if message.is_reply:
        if thumb:
            return TaskAction(
                kind=ActionKind.REPLY_CLOSE,
                target_key=task_key(message.chat_id, message.reply_to_message_id),
            )
        return TaskAction.ignore("reply without thumbs-up")

    if text and not thumb:
        return TaskAction(
            kind=ActionKind.CREATE_TASK,
            task=Task(
                chat_id=message.chat_id,
                message_id=message.message_id,
                created_at=float(message.date or 0),
                text=snippet(text, TASK_TEXT_MAX_LEN),
            ),
        )

    # TODO: product decision pending on whether a bare 👍 should close the newest open task.
    return TaskAction.ignore("bare thumbs-up" if thumb else "empty message")


def classify_update(update: Update, owner_id: str) -> TaskAction:
    if update.reaction is not None:
        return classify_reaction(update.reaction, owner_id)
    if update.message is not None:
        return classify_message(update.message, owner_id)
    return TaskAction.ignore("unsupported update kind")
