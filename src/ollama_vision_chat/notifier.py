"""User-facing notification sinks."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Literal, Protocol

if TYPE_CHECKING:
    from textual.app import App

LOGGER = logging.getLogger(__name__)

NotificationKind = Literal["error"]


class Notifier(Protocol):
    """Anything that can show a titled notification to the user."""

    def notify(self, kind: NotificationKind, title: str, description: str) -> None: ...


class AppNotifier:
    """Show notifications as Textual toasts."""

    def __init__(self, app: App, timeout: float = 5.0) -> None:
        self.app = app
        self.timeout = timeout

    def notify(self, kind: NotificationKind, title: str, description: str) -> None:
        LOGGER.info(
            "notifier.notify",
            extra={"event": "notifier.notify", "kind": kind, "title": title},
        )
        self.app.notify(
            description,
            title=title,
            severity="error" if kind == "error" else "information",
            timeout=self.timeout,
        )
