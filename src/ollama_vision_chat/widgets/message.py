"""Message bubble widget for transcript rendering."""

from __future__ import annotations

from typing import Any

from rich.markdown import Markdown
from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Static

from ..models import Message, Role


class MessageBubble(Vertical):
    """Render one transcript entry with role, timestamp, image caption, and text."""

    DEFAULT_CSS = """
    MessageBubble {
        height: auto;
    }
    MessageBubble > #header-block {
        padding: 0;
    }
    MessageBubble > #image-block {
        color: $text-muted;
        padding: 0 1;
        border-left: solid $accent;
        margin-bottom: 1;
    }
    MessageBubble > #content-block {
        height: auto;
    }
    """

    def __init__(self, message: Message, timestamp: str = "", **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.message = message
        self.timestamp = timestamp
        self.add_class(f"role-{message.role.value}")

    @property
    def role_prefix(self) -> str:
        """Return a human-friendly role label."""
        return "You" if self.message.role is Role.USER else "Assistant"

    def _compose_header(self) -> str:
        if self.timestamp:
            return f"**{self.role_prefix}**  _{self.timestamp}_"
        return f"**{self.role_prefix}**"

    def _render_body(self) -> Markdown | Text:
        text = self.message.text.rstrip()
        if self.message.role is Role.ASSISTANT:
            return Markdown(text)
        # User text is shown verbatim, newlines included.
        return Text(text)

    def compose(self) -> ComposeResult:
        yield Static(Markdown(self._compose_header()), id="header-block")
        if self.message.image is not None:
            yield Static(
                Text(f"[image] {self.message.image.describe()}", style="italic"),
                id="image-block",
            )
        if self.message.text.strip():
            yield Static(self._render_body(), id="content-block")
