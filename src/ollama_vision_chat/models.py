"""Immutable transcript and draft value types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    """Author of a transcript entry."""

    USER = "user"
    ASSISTANT = "assistant"


class ConversationState(str, Enum):
    """Per-turn lifecycle of the conversation."""

    IDLE = "IDLE"
    COMPOSING = "COMPOSING"
    SENDING = "SENDING"


@dataclass(frozen=True)
class ImagePayload:
    """Self-contained image staged for sending, encoded as a data URL."""

    data_url: str
    mime_type: str
    name: str = ""
    size: int = 0

    @property
    def base64_data(self) -> str:
        """Return the base64 body without the ``data:<type>;base64,`` prefix."""
        _, _, body = self.data_url.partition(",")
        return body

    def describe(self) -> str:
        """Return a short human-readable label for the image."""
        label = self.name or "image"
        if self.size >= 1024 * 1024:
            return f"{label} ({self.size / (1024 * 1024):.1f} MB)"
        if self.size >= 1024:
            return f"{label} ({self.size / 1024:.1f} KB)"
        return f"{label} ({self.size} B)"


@dataclass(frozen=True)
class Message:
    """A transcript entry. Never mutated after creation."""

    id: int
    role: Role
    text: str = ""
    image: ImagePayload | None = None

    def __post_init__(self) -> None:
        if not self.text.strip() and self.image is None:
            raise ValueError("A message needs non-empty text or an image.")
        if self.image is not None and self.role is not Role.USER:
            raise ValueError("Only user messages may carry an image.")


@dataclass(frozen=True)
class Draft:
    """Snapshot of the pending input and the busy flag."""

    text: str = ""
    image: ImagePayload | None = None
    busy: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.text.strip() and self.image is None
