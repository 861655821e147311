# src/thumb_tasks/tasks/applier.py

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace

from ..core.updates import Update
from .classifier import classify_update
from .task_models import ActionKind, TaskAction
from .task_store import TaskStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ApplyStats:
    created: int = 0
    closed: int = 0
    ignored: int = 0
    noop: int = 0
    failed: int = 0


async def apply_action(store: TaskStore, action: TaskAction, *, now_ts: float) -> bool:
    """
    Apply one classified action. Returns True if the ledger changed.

    - create: write only if nothing is stored under the key yet
    - close:  read first; open task -> done=True, done_at=now; done or missing -> no-op

    A second close never touches done_at.
    """
    if action.kind == ActionKind.CREATE_TASK and action.task is not None:
        existing = await store.get(action.task.key)
        if existing is not None:
            logger.debug("Task already recorded key=%s", action.task.key)
            return False
        await store.put(action.task)
        logger.info("Task created key=%s", action.task.key)
        return True

    if action.is_close and action.target_key:
        task = await store.get(action.target_key)
        if task is None:
            logger.debug("Close for unknown task key=%s", action.target_key)
            return False
        if task.done:
            logger.debug("Task already done key=%s", action.target_key)
            return False
        await store.put(replace(task, done=True, done_at=now_ts))
        logger.info("Task closed key=%s via=%s", action.target_key, action.kind.value)
        return True

    return False


async def apply_updates(
    store: TaskStore,
    updates: Iterable[Update],
    *,
    owner_id: str,
    clock: Callable[[], float] = time.time,
) -> ApplyStats:
    """
    Fold updates over the ledger strictly in feed order.

    Each update is isolated: a ledger failure is logged and the update is
    treated as having had no effect; later updates still apply.
    """
    stats = ApplyStats()

    for update in updates:
        action = classify_update(update, owner_id)
        if action.kind == ActionKind.IGNORE:
            stats.ignored += 1
            logger.debug("update_id=%s ignored: %s", update.update_id, action.reason)
            continue

        try:
            changed = await apply_action(store, action, now_ts=clock())
        except Exception:
            stats.failed += 1
            logger.exception("Failed to apply update_id=%s action=%s", update.update_id, action.kind.value)
            continue

        if not changed:
            stats.noop += 1
        elif action.kind == ActionKind.CREATE_TASK:
            stats.created += 1
        else:
            stats.closed += 1

    logger.info(
        "Applied updates: created=%d closed=%d noop=%d ignored=%d failed=%d",
        stats.created,
        stats.closed,
        stats.noop,
        stats.ignored,
        stats.failed,
    )
    return stats
