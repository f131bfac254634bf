"""Scrollable transcript view widget."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.widgets import Static

from ..models import Message, Role
from .message import MessageBubble

WELCOME_TEXT = (
    "[b]Welcome to Ollama Chat[/b]\n\n"
    "Start a conversation with your local Ollama instance. "
    "You can send text messages or upload images for analysis."
)


class ConversationView(VerticalScroll):
    """A scrollable container that mirrors the transcript as message bubbles."""

    DEFAULT_CSS = """
    ConversationView > #welcome {
        width: 100%;
        height: 1fr;
        content-align: center middle;
        text-align: center;
        color: $text-muted;
    }
    """

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._rendered_count = 0

    @property
    def rendered_count(self) -> int:
        return self._rendered_count

    def compose(self) -> ComposeResult:
        yield Static(WELCOME_TEXT, id="welcome")

    async def add_message(self, message: Message, timestamp: str = "") -> MessageBubble:
        """Create, mount, and scroll to a new message bubble."""
        self._rendered_count += 1
        for welcome in self.query("#welcome"):
            welcome.display = False
        bubble = MessageBubble(message, timestamp=timestamp)
        bubble.add_class(f"message-{message.role.value}")
        bubble.styles.align_horizontal = "right" if message.role is Role.USER else "left"
        await self.mount(bubble)
        self.scroll_end(animate=True)
        return bubble

    async def sync(self, messages: Sequence[Message], timestamp: str = "") -> int:
        """Mount bubbles for messages appended since the last sync.

        The transcript is append-only, so only the tail past the rendered
        count is new. Returns the number of bubbles mounted.
        """
        mounted = 0
        while self._rendered_count < len(messages):
            await self.add_message(messages[self._rendered_count], timestamp=timestamp)
            mounted += 1
        return mounted
