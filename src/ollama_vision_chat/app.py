"""Main Textual application for chatting with Ollama using text and images."""

from __future__ import annotations

from datetime import datetime
import logging
import sys
from typing import Any

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.widgets import Header, TextArea
from textual.worker import Worker

from .attachments import AttachmentManager
from .backend import ReplyBackend, build_backend
from .config import load_config
from .logging_utils import configure_logging
from .models import Role
from .notifier import AppNotifier, Notifier
from .picker import FilePicker
from .pipeline import SendPipeline
from .screens import ImageAttachScreen
from .store import ConversationStore
from .widgets.activity_bar import ActivityBar
from .widgets.conversation import ConversationView
from .widgets.input_box import Composer, InputBox

LOGGER = logging.getLogger(__name__)


class VisionChatApp(App[None]):
    """Single-screen chat with a local Ollama instance."""

    CSS = """
    Screen {
        layout: vertical;
        background: $background;
    }

    #app-root {
        layout: vertical;
        width: 100%;
        height: 1fr;
        background: $background;
    }

    #conversation {
        height: 1fr;
        padding: 1;
    }

    InputBox {
        height: auto;
        padding: 1 1 0 1;
        border-top: solid $panel;
        background: $surface;
    }

    #activity_bar {
        height: 2;
        border-top: dashed $panel;
        background: $surface;
    }

    MessageBubble {
        width: 80%;
        margin: 1 0;
        padding: 1 2;
        border: round $panel;
    }

    .message-user {
        background: $primary;
        margin-left: 4;
    }

    .message-assistant {
        background: $surface;
        margin-right: 4;
    }
    """

    DEFAULT_ACTION_DESCRIPTIONS: dict[str, str] = {
        "attach_image": "Upload image",
        "remove_image": "Remove image",
        "copy_last_reply": "Copy reply",
        "quit": "Quit",
    }

    def __init__(
        self,
        config: dict[str, dict[str, Any]] | None = None,
        backend: ReplyBackend | None = None,
        notifier: Notifier | None = None,
        picker: FilePicker | None = None,
    ) -> None:
        self.config = config if config is not None else load_config()
        configure_logging(self.config["logging"])
        LOGGER.info(
            "app.python",
            extra={
                "event": "app.python",
                "executable": sys.executable,
                "version": sys.version.split()[0],
            },
        )
        super().__init__()

        self.store = ConversationStore()
        self.notifier: Notifier = notifier or AppNotifier(
            self, timeout=float(self.config["ui"]["notification_timeout_seconds"])
        )
        self.picker = picker or FilePicker()
        self.picker.set_modal_prompt(self._prompt_image_path)
        self.attachment_manager = AttachmentManager(
            self.store,
            self.notifier,
            self.picker,
            max_image_bytes=int(self.config["attachments"]["max_image_bytes"]),
        )
        self.pipeline = SendPipeline(
            self.store,
            backend if backend is not None else build_backend(self.config),
            self.notifier,
        )
        self._binding_specs = self._binding_specs_from_config(self.config)

    @classmethod
    def _binding_specs_from_config(
        cls, config: dict[str, dict[str, Any]]
    ) -> list[Binding]:
        keybinds = config.get("keybinds", {})
        bindings: list[Binding] = []
        for action_name, description in cls.DEFAULT_ACTION_DESCRIPTIONS.items():
            binding_key = keybinds.get(action_name)
            if isinstance(binding_key, str) and binding_key.strip():
                bindings.append(
                    Binding(
                        key=binding_key.strip(),
                        action=action_name,
                        description=description,
                        show=True,
                    )
                )
        return bindings

    @property
    def show_timestamps(self) -> bool:
        return bool(self.config["ui"]["show_timestamps"])

    def _timestamp(self) -> str:
        if not self.show_timestamps:
            return ""
        return datetime.now().strftime("%H:%M:%S")

    def _backend_label(self) -> str:
        if self.config["backend"]["kind"] == "ollama":
            return f"Ollama ({self.config['ollama']['model']})"
        return "placeholder reply"

    def compose(self) -> ComposeResult:
        yield Header()
        with Container(id="app-root"):
            yield ConversationView(id="conversation")
            yield InputBox(id="input_box")
            yield ActivityBar(backend_label=self._backend_label(), id="activity_bar")

    async def on_mount(self) -> None:
        self.title = str(self.config["app"]["title"])
        self.sub_title = str(self.config["app"]["sub_title"])
        for binding in self._binding_specs:
            self.bind(
                binding.key,
                binding.action,
                description=binding.description,
                show=binding.show,
            )
        self.store.subscribe(self._on_store_changed)
        self._on_store_changed(self.store)
        self.query_one("#message_input", Composer).focus()

    async def on_unmount(self) -> None:
        self.store.unsubscribe(self._on_store_changed)

    def _on_store_changed(self, store: ConversationStore) -> None:
        """Re-render draft controls now and schedule new transcript bubbles."""
        draft = store.current_draft()
        self.query_one(InputBox).show_draft(draft)

        self.query_one("#activity_bar", ActivityBar).busy = draft.busy

        conversation = self.query_one(ConversationView)
        if store.message_count > conversation.rendered_count:
            self.call_later(self._sync_transcript)

    async def _sync_transcript(self) -> None:
        conversation = self.query_one(ConversationView)
        await conversation.sync(self.store.messages, timestamp=self._timestamp())

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        if event.text_area.id != "message_input":
            return
        self.store.set_draft_text(event.text_area.text)

    def on_composer_submitted(self, event: Composer.Submitted) -> None:
        event.stop()
        self.action_send_message()

    def on_input_box_send_requested(self, event: InputBox.SendRequested) -> None:
        event.stop()
        self.action_send_message()

    def on_input_box_attach_requested(self, event: InputBox.AttachRequested) -> None:
        event.stop()
        self.action_attach_image()

    def on_input_box_remove_image_requested(
        self, event: InputBox.RemoveImageRequested
    ) -> None:
        event.stop()
        self.action_remove_image()

    def action_send_message(self) -> Worker[None] | None:
        """Dispatch the draft in a worker so the UI keeps rendering meanwhile."""
        if not self.pipeline.can_send():
            return None
        return self.run_worker(self.pipeline.send(), group="send", exit_on_error=False)

    def action_attach_image(self) -> Worker[None] | None:
        if self.store.busy:
            return None
        return self.run_worker(
            self._attach_image(), group="attach", exclusive=True, exit_on_error=False
        )

    def action_remove_image(self) -> None:
        if self.store.busy:
            return
        self.attachment_manager.clear()
        self.query_one("#message_input", Composer).focus()

    def action_copy_last_reply(self) -> None:
        message = self.store.last_message(Role.ASSISTANT)
        if message is None:
            self.sub_title = "No assistant message available to copy."
            return
        self.copy_to_clipboard(message.text)
        self.sub_title = "Copied latest assistant message."

    async def _attach_image(self) -> None:
        path = await self.picker.pick()
        if path is None:
            return
        await self.attachment_manager.stage_path(path)

    async def _prompt_image_path(self) -> str | None:
        return await self.push_screen_wait(
            ImageAttachScreen(
                start_dir=self.picker.last_directory,
                max_bytes=self.attachment_manager.max_image_bytes,
            )
        )
