"""One conversational turn: draft -> user message -> backend -> reply."""

from __future__ import annotations

import logging
import time

from .backend import ReplyBackend
from .exceptions import BackendUnreachableError
from .models import Message, Role
from .notifier import Notifier
from .store import ConversationStore

LOGGER = logging.getLogger(__name__)


class SendPipeline:
    """Dispatch the current draft to the backend and reconcile the transcript.

    The busy flag is the only gate against overlapping sends. No timeout,
    retry, or cancellation is applied to the backend call.
    """

    def __init__(
        self,
        store: ConversationStore,
        backend: ReplyBackend,
        notifier: Notifier,
    ) -> None:
        self.store = store
        self.backend = backend
        self.notifier = notifier

    def can_send(self) -> bool:
        """Return True when the draft is non-empty and nothing is in flight."""
        draft = self.store.current_draft()
        return not draft.is_empty and not draft.busy

    async def send(self) -> None:
        """Send the current draft. A no-op when empty or already busy."""
        draft = self.store.current_draft()
        if draft.is_empty or draft.busy:
            LOGGER.debug(
                "pipeline.send.skipped",
                extra={
                    "event": "pipeline.send.skipped",
                    "busy": draft.busy,
                    "empty": draft.is_empty,
                },
            )
            return

        user_message = Message(
            id=self.store.next_message_id(),
            role=Role.USER,
            text=draft.text,
            image=draft.image,
        )
        self.store.append(user_message)
        self.store.clear_draft()
        self.store.set_busy(True)

        started = time.monotonic()
        LOGGER.info(
            "pipeline.send.start",
            extra={
                "event": "pipeline.send.start",
                "message_id": user_message.id,
                "has_image": user_message.image is not None,
            },
        )
        try:
            reply = await self.backend.request_reply(draft.text, draft.image)
            self.store.append(
                Message(
                    id=self.store.next_message_id(),
                    role=Role.ASSISTANT,
                    text=reply,
                )
            )
            LOGGER.info(
                "pipeline.send.complete",
                extra={
                    "event": "pipeline.send.complete",
                    "message_id": user_message.id,
                    "elapsed_ms": int((time.monotonic() - started) * 1000),
                },
            )
        except Exception as exc:  # noqa: BLE001 - any backend failure is recoverable.
            LOGGER.warning(
                "pipeline.send.failed",
                extra={
                    "event": "pipeline.send.failed",
                    "message_id": user_message.id,
                    "error_type": exc.__class__.__name__,
                    "error": str(exc),
                },
            )
            self.notifier.notify(
                "error",
                BackendUnreachableError.title,
                BackendUnreachableError.description,
            )
        finally:
            self.store.set_busy(False)
