# src/thumb_tasks/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the Telegram/Upstash clients swappable and makes testing easier.
"""

from typing import Awaitable, Protocol

from .updates import Update


class UpdateFeed(Protocol):
    """
    Long-poll update source.

    offset=None means "from the current head". Implementations raise FeedError
    on a non-ok response or a transport failure.
    """

    def get_updates(self, offset: int | None) -> Awaitable[list[Update]]: ...


class KeyValueStore(Protocol):
    """
    Opaque string key-value store (Upstash Redis REST in production).

    scan() returns (next_cursor, keys); a next_cursor of "0" means pagination is complete.
    Implementations raise LedgerError on failure.
    """

    def get(self, key: str) -> Awaitable[str | None]: ...
    def set(self, key: str, value: str) -> Awaitable[bool]: ...
    def scan(self, cursor: str, match: str, count: int) -> Awaitable[tuple[str, list[str]]]: ...


class OutboundMessenger(Protocol):
    """
    How the run controller talks back to the owner.

    Reports are always sent as HTML with link previews disabled; the connector
    decides how that maps onto its transport.
    """

    def send_text(self, *, chat_id: int | str, text: str) -> Awaitable[None]: ...
