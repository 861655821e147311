# src/thumb_tasks/tasks/drainer.py

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..core.ports import UpdateFeed
from ..core.updates import Update

logger = logging.getLogger(__name__)

DEFAULT_MAX_UPDATES = 2000


@dataclass(slots=True)
class DrainResult:
    updates: list[Update] = field(default_factory=list)
    next_offset: int | None = None


async def drain_updates(
    feed: UpdateFeed,
    *,
    start_offset: int | None = None,
    max_updates: int = DEFAULT_MAX_UPDATES,
) -> DrainResult:
    """
    Fetch batches until the feed is empty or more than max_updates were drained.

    Each request passes offset=<cursor>, which also acknowledges everything
    before it on the platform side. The final cursor is returned but not persisted.
    Feed errors propagate to the caller.
    """
    offset = start_offset
    result = DrainResult(next_offset=offset)

    while True:
        batch = await feed.get_updates(offset)
        if not batch:
            break

        result.updates.extend(batch)
        offset = max(u.update_id for u in batch) + 1
        result.next_offset = offset

        if len(result.updates) > max_updates:
            logger.warning(
                "Drain safety cap hit: drained=%d cap=%d next_offset=%s",
                len(result.updates),
                max_updates,
                offset,
            )
            break

    logger.info("Drained %d updates (next_offset=%s)", len(result.updates), result.next_offset)
    return result
