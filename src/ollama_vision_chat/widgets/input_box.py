"""Composer row: multi-line message field, staged image preview, and buttons."""

from __future__ import annotations

from textual import events
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.widgets import Button, Static, TextArea

from ..keys import classify_key
from ..models import Draft


class Composer(TextArea):
    """Message field where enter sends and shift+enter inserts a newline."""

    class Submitted(Message):
        """Posted when the user presses the plain confirm key."""

        def __init__(self, composer: Composer) -> None:
            super().__init__()
            self.composer = composer

        @property
        def control(self) -> Composer:
            return self.composer

    async def _on_key(self, event: events.Key) -> None:
        action = classify_key(event.key)
        if action == "send":
            event.stop()
            event.prevent_default()
            self.post_message(self.Submitted(self))
            return
        if action == "newline":
            event.stop()
            event.prevent_default()
            self.insert("\n")
            return
        await super()._on_key(event)


class InputBox(Vertical):
    """Input region with image preview, composer, upload and send buttons."""

    DEFAULT_CSS = """
    InputBox #image_preview_row {
        height: auto;
        margin-bottom: 1;
    }
    InputBox #image_preview_row.hidden {
        display: none;
    }
    InputBox #image_preview {
        width: 1fr;
        padding: 0 1;
        border: round $panel;
    }
    InputBox #input_row {
        height: auto;
    }
    InputBox #message_input {
        width: 1fr;
        min-height: 3;
        max-height: 10;
        height: auto;
    }
    InputBox #button_column {
        width: auto;
        height: auto;
    }
    InputBox Button {
        margin-left: 1;
        min-width: 10;
    }
    """

    class AttachRequested(Message):
        """Posted when the user clicks the upload image button."""

    class RemoveImageRequested(Message):
        """Posted when the user removes the staged image."""

    class SendRequested(Message):
        """Posted when the user clicks the send button."""

    def compose(self) -> ComposeResult:
        with Horizontal(id="image_preview_row", classes="hidden"):
            yield Static("", id="image_preview")
            yield Button("x", id="remove_image_button", variant="error")
        with Horizontal(id="input_row"):
            yield Composer(id="message_input", soft_wrap=True)
            with Vertical(id="button_column"):
                yield Button("Upload", id="attach_button", variant="default")
                yield Button("Send", id="send_button", variant="success", disabled=True)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Forward button clicks as typed messages."""
        if event.button.id == "attach_button":
            event.stop()
            self.post_message(self.AttachRequested())
        elif event.button.id == "remove_image_button":
            event.stop()
            self.post_message(self.RemoveImageRequested())
        elif event.button.id == "send_button":
            event.stop()
            self.post_message(self.SendRequested())

    def show_draft(self, draft: Draft) -> None:
        """Reflect draft text, staged image, and busy flag in the controls."""
        composer = self.query_one("#message_input", Composer)
        if composer.text != draft.text:
            composer.load_text(draft.text)
        composer.disabled = draft.busy
        self.query_one("#attach_button", Button).disabled = draft.busy
        self.query_one("#send_button", Button).disabled = draft.busy or draft.is_empty

        preview_row = self.query_one("#image_preview_row", Horizontal)
        if draft.image is None:
            preview_row.add_class("hidden")
            self.query_one("#image_preview", Static).update("")
        else:
            preview_row.remove_class("hidden")
            self.query_one("#image_preview", Static).update(
                f"Preview: {draft.image.describe()}"
            )
        self.query_one("#remove_image_button", Button).disabled = draft.busy
