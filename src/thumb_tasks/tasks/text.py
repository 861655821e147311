# src/thumb_tasks/tasks/text.py

from __future__ import annotations

import re

# 👍 optionally followed by one skin-tone modifier (U+1F3FB..U+1F3FF).
THUMBS_UP_RE = re.compile("\U0001F44D[\U0001F3FB-\U0001F3FF]?")

# Common pictographic blocks; used only by the no-ledger digest.
EMOJI_RE = re.compile(
    "["
    "\U0001F1E6-\U0001F1FF"
    "\U0001F300-\U0001F5FF"
    "\U0001F600-\U0001F64F"
    "\U0001F680-\U0001F6FF"
    "\u2600-\u26FF"
    "\u2700-\u27BF"
    "\U0001F900-\U0001F9FF"
    "\U0001FA70-\U0001FAFF"
    "]"
)

_WS_RE = re.compile(r"\s+")

ELLIPSIS = "\u2026"

# Directional formatting marks for RTL (Hebrew) clients.
RLE = "\u202B"  # right-to-left embedding
PDF = "\u202C"  # pop directional formatting
LRM = "\u200E"  # left-to-right mark


def is_thumbs_up(text: str | None) -> bool:
    """True if the text contains a thumbs-up glyph anywhere."""
    if not text:
        return False
    return THUMBS_UP_RE.search(text) is not None


def has_emoji(text: str | None) -> bool:
    if not text:
        return False
    return EMOJI_RE.search(text) is not None


def html_escape(value: object) -> str:
    # Telegram's HTML subset only needs these three; quotes stay readable.
    return str(value).replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def snippet(text: str | None, max_len: int = 140) -> str:
    """Whitespace-normalized prefix of text, at most max_len chars (ellipsis included)."""
    if not text:
        return ""
    clean = _WS_RE.sub(" ", str(text)).strip()
    if len(clean) > max_len:
        return clean[: max_len - 1] + ELLIPSIS
    return clean


def first_line_title(text: str | None, max_len: int = 200) -> str:
    first = re.split(r"\r?\n", str(text or ""), maxsplit=1)[0].strip()
    return snippet(first, max_len)
