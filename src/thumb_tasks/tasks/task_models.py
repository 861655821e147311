# src/thumb_tasks/tasks/task_models.py

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

KEY_PREFIX = "task"


def task_key(chat_id: int | str, message_id: int | str) -> str:
    """Ledger key for a task: task:<conversation id>:<source message id>."""
    return f"{KEY_PREFIX}:{chat_id}:{message_id}"


def chat_key_prefix(chat_id: int | str) -> str:
    return f"{KEY_PREFIX}:{chat_id}:"


@dataclass(slots=True, frozen=True)
class Task:
    """
    One open-or-closed unit of work, created from one owner message.

    Timestamps are unix seconds in memory; the stored record keeps epoch
    milliseconds (createdAt/doneAt) so existing ledgers stay readable.
    """

    chat_id: int
    message_id: int
    created_at: float
    text: str
    done: bool = False
    done_at: float | None = None

    @property
    def key(self) -> str:
        return task_key(self.chat_id, self.message_id)

    @property
    def identity(self) -> str:
        return f"{self.chat_id}:{self.message_id}"

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {
            "id": self.identity,
            "chat_id": self.chat_id,
            "message_id": self.message_id,
            "createdAt": int(round(self.created_at * 1000)),
            "text": self.text,
            "done": self.done,
        }
        if self.done and self.done_at is not None:
            record["doneAt"] = int(round(self.done_at * 1000))
        return record

    def to_json(self) -> str:
        return json.dumps(self.to_record(), ensure_ascii=False)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Task:
        """Raises KeyError/TypeError/ValueError on malformed records."""
        done = record.get("done") is True
        raw_done_at = record.get("doneAt")
        done_at = float(raw_done_at) / 1000.0 if done and raw_done_at is not None else None
        return cls(
            chat_id=int(record["chat_id"]),
            message_id=int(record["message_id"]),
            created_at=float(record.get("createdAt") or 0) / 1000.0,
            text=str(record.get("text") or ""),
            done=done,
            done_at=done_at,
        )

    @classmethod
    def from_json(cls, raw: str) -> Task:
        val = json.loads(raw)
        if not isinstance(val, dict):
            raise ValueError("Expected JSON object")
        return cls.from_record(val)


class ActionKind(StrEnum):
    CREATE_TASK = "create_task"
    REACTION_CLOSE = "reaction_close"
    REPLY_CLOSE = "reply_close"
    IGNORE = "ignore"


@dataclass(slots=True, frozen=True)
class TaskAction:
    """
    Classifier verdict for one update.

    - CREATE_TASK carries the new task.
    - REACTION_CLOSE / REPLY_CLOSE carry the ledger key of the task to close.
    - IGNORE carries only a reason (for debug logs).
    """

    kind: ActionKind
    task: Task | None = None
    target_key: str | None = None
    reason: str = ""

    @property
    def is_close(self) -> bool:
        return self.kind in (ActionKind.REACTION_CLOSE, ActionKind.REPLY_CLOSE)

    @classmethod
    def ignore(cls, reason: str) -> TaskAction:
        return cls(kind=ActionKind.IGNORE, reason=reason)
