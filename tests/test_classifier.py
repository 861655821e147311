# tests/test_classifier.py

from __future__ import annotations

import pytest

from thumb_tasks.core.updates import Update
from thumb_tasks.tasks.classifier import classify_update
from thumb_tasks.tasks.task_models import ActionKind, task_key
from thumb_tasks.tasks.text import is_thumbs_up

from .fakes import OWNER_ID, STRANGER_ID, message_update, reaction_update

OWNER = str(OWNER_ID)
THUMB = "\U0001F44D"
SKIN_TONES = ["\U0001F3FB", "\U0001F3FC", "\U0001F3FD", "\U0001F3FE", "\U0001F3FF"]


@pytest.mark.parametrize("glyph", [THUMB] + [THUMB + tone for tone in SKIN_TONES])
def test_thumbs_up_variants_are_recognised(glyph: str) -> None:
    assert is_thumbs_up(glyph)
    action = classify_update(reaction_update(1, 42, (glyph,)), OWNER)
    assert action.kind == ActionKind.REACTION_CLOSE
    assert action.target_key == task_key(OWNER_ID, 42)


@pytest.mark.parametrize("glyph", ["\U0001F44E", "❤️", "\U0001F525", "\U0001F389", "ok"])
def test_other_emoji_are_not_close_signals(glyph: str) -> None:
    assert not is_thumbs_up(glyph)
    action = classify_update(reaction_update(1, 42, (glyph,)), OWNER)
    assert action.kind == ActionKind.IGNORE


def test_reaction_with_mixed_set_containing_thumb_closes() -> None:
    action = classify_update(reaction_update(1, 7, ("\U0001F525", THUMB + SKIN_TONES[2])), OWNER)
    assert action.kind == ActionKind.REACTION_CLOSE


def test_reaction_by_someone_else_is_ignored() -> None:
    action = classify_update(reaction_update(1, 7, actor_id=STRANGER_ID), OWNER)
    assert action.kind == ActionKind.IGNORE


def test_reaction_outside_private_chat_is_ignored() -> None:
    action = classify_update(reaction_update(1, 7, chat_id=-100, chat_type="group"), OWNER)
    assert action.kind == ActionKind.IGNORE


def test_reaction_without_target_is_ignored() -> None:
    action = classify_update(reaction_update(1, None), OWNER)
    assert action.kind == ActionKind.IGNORE


def test_owner_message_creates_task_with_snippet() -> None:
    action = classify_update(message_update(1, 10, "  Buy\n\nmilk  ", date=1_700_000_123), OWNER)
    assert action.kind == ActionKind.CREATE_TASK
    assert action.task is not None
    assert action.task.key == task_key(OWNER_ID, 10)
    assert action.task.text == "Buy milk"
    assert action.task.created_at == 1_700_000_123
    assert action.task.done is False


def test_long_message_is_truncated_to_400_chars() -> None:
    action = classify_update(message_update(1, 10, "x" * 1000), OWNER)
    assert action.task is not None
    assert len(action.task.text) == 400
    assert action.task.text.endswith("…")


def test_message_from_stranger_is_ignored() -> None:
    action = classify_update(message_update(1, 10, "hi", sender_id=STRANGER_ID), OWNER)
    assert action.kind == ActionKind.IGNORE


def test_group_message_from_owner_is_ignored() -> None:
    action = classify_update(message_update(1, 10, "hi", chat_id=-5, chat_type="group"), OWNER)
    assert action.kind == ActionKind.IGNORE


def test_reply_with_thumb_closes_replied_message() -> None:
    action = classify_update(message_update(2, 11, "done " + THUMB, reply_to=10), OWNER)
    assert action.kind == ActionKind.REPLY_CLOSE
    assert action.target_key == task_key(OWNER_ID, 10)


def test_reply_without_thumb_is_neither_task_nor_close() -> None:
    action = classify_update(message_update(2, 11, "not yet", reply_to=10), OWNER)
    assert action.kind == ActionKind.IGNORE


def test_bare_thumb_without_reply_is_discarded() -> None:
    action = classify_update(message_update(2, 11, THUMB), OWNER)
    assert action.kind == ActionKind.IGNORE


def test_text_containing_thumb_is_not_a_task() -> None:
    action = classify_update(message_update(2, 11, "great " + THUMB), OWNER)
    assert action.kind == ActionKind.IGNORE


def test_empty_message_is_ignored() -> None:
    action = classify_update(message_update(2, 11, ""), OWNER)
    assert action.kind == ActionKind.IGNORE


def test_update_without_payload_is_ignored() -> None:
    assert classify_update(Update(update_id=5), OWNER).kind == ActionKind.IGNORE
