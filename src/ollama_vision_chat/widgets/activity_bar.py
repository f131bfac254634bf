"""Footer strip: reply-wait indicator on the left, connection note on the right."""

from __future__ import annotations

import time
from typing import Any

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.reactive import reactive
from textual.timer import Timer
from textual.widgets import Label

_SPINNER = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"

FOOTER_TEXT = "This chat connects to your locally running Ollama instance"


class ActivityBar(Horizontal):
    """Mirror the draft's busy flag as a spinner with the time spent waiting."""

    DEFAULT_CSS = """
    ActivityBar {
        height: 1;
        padding: 0 1;
    }
    ActivityBar #activity_left {
        width: 1fr;
        color: $accent;
    }
    ActivityBar #activity_right {
        width: auto;
        color: $text-muted;
    }
    """

    busy: reactive[bool] = reactive(False, init=False)

    def __init__(
        self, backend_label: str = "Ollama", note: str = FOOTER_TEXT, **kwargs: Any
    ) -> None:
        super().__init__(**kwargs)
        self.backend_label = backend_label
        self._note = note
        self._spinner_timer: Timer | None = None
        self._waiting_since: float | None = None
        self._tick = 0
        self.status_text = ""

    @property
    def running(self) -> bool:
        """True while the wait spinner is animating."""
        return self._spinner_timer is not None

    @property
    def waited_seconds(self) -> float:
        if self._waiting_since is None:
            return 0.0
        return time.monotonic() - self._waiting_since

    def compose(self) -> ComposeResult:
        yield Label("", id="activity_left")
        yield Label(self._note, id="activity_right")

    def watch_busy(self, busy: bool) -> None:
        if busy:
            self._waiting_since = time.monotonic()
            self._tick = 0
            self._spinner_timer = self.set_interval(0.1, self._refresh_wait)
            self._refresh_wait()
            return
        if self._spinner_timer is not None:
            self._spinner_timer.stop()
            self._spinner_timer = None
        self._waiting_since = None
        self._show("")

    def _refresh_wait(self) -> None:
        frame = _SPINNER[self._tick % len(_SPINNER)]
        self._tick += 1
        self._show(
            f"{frame} Waiting for {self.backend_label} ({self.waited_seconds:.0f}s)"
        )

    def _show(self, text: str) -> None:
        self.status_text = text
        self.query_one("#activity_left", Label).update(text)
