"""Modal path prompt used when no native file dialog is available."""

from __future__ import annotations

from fnmatch import fnmatch
import os
from pathlib import Path

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Input, Static

from .attachments import MAX_IMAGE_BYTES
from .picker import IMAGE_PATTERNS


class ImageAttachScreen(ModalScreen[str | None]):
    """Ask for an image path, rejecting paths that are missing or not images.

    The size limit is only displayed here; it is enforced when the file is
    staged, so the rejection toast stays the same for every picker.
    """

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    DEFAULT_CSS = """
    ImageAttachScreen {
        align: center middle;
    }
    ImageAttachScreen > #image-attach-dialog {
        width: 64;
        height: auto;
        padding: 1 2;
        border: round $accent;
        background: $surface;
    }
    ImageAttachScreen #image-attach-limits {
        color: $text-muted;
    }
    ImageAttachScreen #image-attach-error {
        color: $error;
        height: auto;
    }
    """

    def __init__(
        self,
        start_dir: Path | None = None,
        max_bytes: int = MAX_IMAGE_BYTES,
        patterns: tuple[str, ...] = IMAGE_PATTERNS,
    ) -> None:
        super().__init__()
        self.start_dir = start_dir
        self.max_bytes = max_bytes
        self.patterns = patterns
        self.error_text = ""

    def _limits_line(self) -> str:
        kinds = ", ".join(pattern.removeprefix("*.") for pattern in self.patterns)
        return f"Accepted: {kinds}  |  up to {self.max_bytes / (1024 * 1024):g}MB"

    def compose(self) -> ComposeResult:
        prefill = os.path.join(str(self.start_dir), "") if self.start_dir is not None else ""
        with Vertical(id="image-attach-dialog"):
            yield Static("[b]Upload image[/b]")
            yield Static(self._limits_line(), id="image-attach-limits")
            yield Input(value=prefill, placeholder="~/Pictures/photo.png", id="image-attach-input")
            yield Static("", id="image-attach-error")

    def on_mount(self) -> None:
        self.query_one("#image-attach-input", Input).focus()

    def check_path(self, raw: str) -> str | None:
        """Return an error for ``raw``, or None when it names an image file."""
        path = Path(raw).expanduser()
        if not path.is_file():
            return f"No such file: {path}"
        if not any(fnmatch(path.name.lower(), pattern) for pattern in self.patterns):
            return "Please choose an image file"
        return None

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        value = event.value.strip()
        if not value:
            self.dismiss(None)
            return
        error = self.check_path(value)
        if error is not None:
            self.error_text = error
            self.query_one("#image-attach-error", Static).update(error)
            return
        self.dismiss(str(Path(value).expanduser()))

    def action_cancel(self) -> None:
        self.dismiss(None)
