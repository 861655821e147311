# src/thumb_tasks/core/errors.py

from __future__ import annotations


class ThumbTasksError(RuntimeError):
    """Base class for errors raised by thumb_tasks."""


class ConfigError(ThumbTasksError):
    """Required identity/credential configuration is missing."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Missing env vars: {', '.join(self.missing)}")


class FeedError(ThumbTasksError):
    """The update feed returned a non-ok response or could not be reached."""


class LedgerError(ThumbTasksError):
    """A single key-value operation against the ledger failed."""


class SendError(ThumbTasksError):
    """The outbound chat platform rejected or failed to deliver a message."""
