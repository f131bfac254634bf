"""Append-only transcript storage and the single ephemeral draft."""

from __future__ import annotations

from collections.abc import Callable
import logging
import time

from .models import ConversationState, Draft, ImagePayload, Message, Role

LOGGER = logging.getLogger(__name__)

StoreObserver = Callable[["ConversationStore"], None]


class ConversationStore:
    """Own the ordered transcript and the draft/busy state for one session."""

    def __init__(self) -> None:
        self._messages: list[Message] = []
        self._draft = Draft()
        self._observers: list[StoreObserver] = []
        self._last_id = 0

    @property
    def messages(self) -> tuple[Message, ...]:
        """Return an immutable snapshot of the transcript in append order."""
        return tuple(self._messages)

    @property
    def message_count(self) -> int:
        return len(self._messages)

    @property
    def busy(self) -> bool:
        return self._draft.busy

    @property
    def state(self) -> ConversationState:
        """Derive the per-turn lifecycle state from the draft."""
        if self._draft.busy:
            return ConversationState.SENDING
        if not self._draft.is_empty:
            return ConversationState.COMPOSING
        return ConversationState.IDLE

    def subscribe(self, observer: StoreObserver) -> None:
        """Register a callback invoked after every state change."""
        if observer not in self._observers:
            self._observers.append(observer)

    def unsubscribe(self, observer: StoreObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def next_message_id(self) -> int:
        """Return a creation-time id strictly greater than any issued before."""
        candidate = time.time_ns()
        if candidate <= self._last_id:
            candidate = self._last_id + 1
        self._last_id = candidate
        return candidate

    def append(self, message: Message) -> None:
        """Add a message to the end of the transcript."""
        self._messages.append(message)
        LOGGER.debug(
            "store.append",
            extra={
                "event": "store.append",
                "role": message.role.value,
                "has_image": message.image is not None,
                "count": len(self._messages),
            },
        )
        self._notify()

    def current_draft(self) -> Draft:
        return self._draft

    def set_draft_text(self, text: str) -> None:
        if text == self._draft.text:
            return
        self._draft = Draft(text=text, image=self._draft.image, busy=self._draft.busy)
        self._notify()

    def set_draft_image(self, payload: ImagePayload | None) -> None:
        if payload == self._draft.image:
            return
        self._draft = Draft(text=self._draft.text, image=payload, busy=self._draft.busy)
        self._notify()

    def set_busy(self, busy: bool) -> None:
        if busy == self._draft.busy:
            return
        self._draft = Draft(text=self._draft.text, image=self._draft.image, busy=busy)
        self._notify()

    def clear_draft(self) -> None:
        """Reset text and image in one change, leaving busy untouched."""
        if not self._draft.text and self._draft.image is None:
            return
        self._draft = Draft(busy=self._draft.busy)
        self._notify()

    def last_message(self, role: Role) -> Message | None:
        """Return the newest message written by ``role``."""
        for message in reversed(self._messages):
            if message.role is role:
                return message
        return None

    def _notify(self) -> None:
        for observer in list(self._observers):
            observer(self)
