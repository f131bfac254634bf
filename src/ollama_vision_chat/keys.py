"""Keyboard submission rule for the message composer."""

from __future__ import annotations

from typing import Literal

KeyAction = Literal["send", "newline"]

SEND_KEYS: frozenset[str] = frozenset({"enter"})
NEWLINE_KEYS: frozenset[str] = frozenset({"shift+enter", "ctrl+j"})


def classify_key(key: str) -> KeyAction | None:
    """Map a Textual key name to a composer action.

    Plain enter sends. Shift+enter inserts a newline; ``ctrl+j`` is accepted
    too because many terminals cannot report shift+enter.
    """
    normalized = key.strip().lower()
    if normalized in SEND_KEYS:
        return "send"
    if normalized in NEWLINE_KEYS:
        return "newline"
    return None
