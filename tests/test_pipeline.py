"""Tests for the send pipeline turn lifecycle."""

from __future__ import annotations

import asyncio
import unittest

from ollama_vision_chat.exceptions import BackendUnreachableError
from ollama_vision_chat.models import ConversationState, ImagePayload, Role
from ollama_vision_chat.pipeline import SendPipeline
from ollama_vision_chat.store import ConversationStore


class RecordingNotifier:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str, str]] = []

    def notify(self, kind: str, title: str, description: str) -> None:
        self.calls.append((kind, title, description))


class FakeBackend:
    """Deterministic backend that records calls and can fail or block."""

    def __init__(self, replies: list[str] | None = None, fail: bool = False) -> None:
        self.replies = replies or ["Hi there"]
        self.fail = fail
        self.calls: list[tuple[str, ImagePayload | None]] = []
        self.release: asyncio.Event | None = None

    async def request_reply(self, text: str, image: ImagePayload | None) -> str:
        self.calls.append((text, image))
        if self.release is not None:
            await self.release.wait()
        if self.fail:
            raise ConnectionRefusedError("connection refused")
        return self.replies[min(len(self.calls) - 1, len(self.replies) - 1)]


def _payload() -> ImagePayload:
    return ImagePayload(
        data_url="data:image/png;base64,AAAA", mime_type="image/png", name="a.png", size=3
    )


class SendPipelineTests(unittest.IsolatedAsyncioTestCase):
    """Validate ordering, gating, and recovery for one turn."""

    def _build(
        self, backend: FakeBackend | None = None
    ) -> tuple[SendPipeline, ConversationStore, FakeBackend, RecordingNotifier]:
        store = ConversationStore()
        backend = backend or FakeBackend()
        notifier = RecordingNotifier()
        return SendPipeline(store, backend, notifier), store, backend, notifier

    async def test_hello_scenario(self) -> None:
        pipeline, store, backend, notifier = self._build()
        store.set_draft_text("Hello")

        await pipeline.send()

        messages = store.messages
        self.assertEqual(len(messages), 2)
        self.assertEqual(messages[0].role, Role.USER)
        self.assertEqual(messages[0].text, "Hello")
        self.assertIsNone(messages[0].image)
        self.assertEqual(messages[1].role, Role.ASSISTANT)
        self.assertEqual(messages[1].text, "Hi there")
        self.assertLess(messages[0].id, messages[1].id)
        self.assertEqual(backend.calls, [("Hello", None)])
        self.assertEqual(notifier.calls, [])

    async def test_successful_turns_alternate_user_assistant(self) -> None:
        pipeline, store, _, _ = self._build(FakeBackend(replies=["a", "b", "c"]))
        for text in ("one", "two", "three"):
            store.set_draft_text(text)
            await pipeline.send()

        roles = [message.role for message in store.messages]
        self.assertEqual(len(roles), 6)
        self.assertEqual(roles, [Role.USER, Role.ASSISTANT] * 3)
        ids = [message.id for message in store.messages]
        self.assertEqual(ids, sorted(ids))
        self.assertEqual(len(set(ids)), 6)

    async def test_empty_draft_is_noop(self) -> None:
        pipeline, store, backend, notifier = self._build()
        changes: list[int] = []
        store.subscribe(lambda _store: changes.append(1))
        store.set_draft_text("   ")
        changes.clear()

        await pipeline.send()

        self.assertEqual(store.messages, ())
        self.assertFalse(store.busy)
        self.assertEqual(backend.calls, [])
        self.assertEqual(changes, [])
        self.assertEqual(notifier.calls, [])

    async def test_image_only_draft_is_sent(self) -> None:
        pipeline, store, backend, _ = self._build()
        store.set_draft_image(_payload())

        await pipeline.send()

        user_message = store.messages[0]
        self.assertEqual(user_message.text, "")
        self.assertEqual(user_message.image, _payload())
        self.assertEqual(backend.calls, [("", _payload())])
        self.assertEqual(store.messages[1].role, Role.ASSISTANT)

    async def test_busy_gate_blocks_second_send(self) -> None:
        backend = FakeBackend()
        backend.release = asyncio.Event()
        pipeline, store, backend, _ = self._build(backend)

        store.set_draft_text("first")
        first = asyncio.create_task(pipeline.send())
        await asyncio.sleep(0)

        self.assertTrue(store.busy)
        self.assertEqual(store.state, ConversationState.SENDING)
        self.assertFalse(pipeline.can_send())
        # Draft was cleared and the user message appended before the await.
        self.assertEqual(store.current_draft().text, "")
        self.assertEqual(len(store.messages), 1)

        store.set_draft_text("second")
        await pipeline.send()
        self.assertEqual(len(store.messages), 1)
        self.assertEqual(len(backend.calls), 1)

        backend.release.set()
        await first

        self.assertFalse(store.busy)
        self.assertEqual(len(store.messages), 2)
        # The blocked draft is still there for the user to send next.
        self.assertEqual(store.current_draft().text, "second")

    async def test_backend_failure_keeps_user_message_and_notifies_once(self) -> None:
        pipeline, store, _, notifier = self._build(FakeBackend(fail=True))
        store.set_draft_text("Hello")
        store.set_draft_image(_payload())

        await pipeline.send()

        self.assertEqual(len(store.messages), 1)
        self.assertEqual(store.messages[0].role, Role.USER)
        self.assertFalse(store.busy)
        self.assertEqual(store.current_draft().text, "")
        self.assertIsNone(store.current_draft().image)
        self.assertEqual(
            notifier.calls,
            [
                (
                    "error",
                    "Error",
                    "Failed to connect to Ollama. Is it running locally?",
                )
            ],
        )
        self.assertEqual(
            notifier.calls[0][2], BackendUnreachableError.description
        )

    async def test_empty_reply_is_treated_as_failure(self) -> None:
        pipeline, store, _, notifier = self._build(FakeBackend(replies=["  "]))
        store.set_draft_text("Hello")

        await pipeline.send()

        self.assertEqual(len(store.messages), 1)
        self.assertEqual(len(notifier.calls), 1)
        self.assertFalse(store.busy)

    async def test_retry_after_failure_succeeds(self) -> None:
        backend = FakeBackend(fail=True)
        pipeline, store, _, notifier = self._build(backend)
        store.set_draft_text("Hello")
        await pipeline.send()

        backend.fail = False
        store.set_draft_text("Hello again")
        await pipeline.send()

        self.assertEqual(
            [m.role for m in store.messages], [Role.USER, Role.USER, Role.ASSISTANT]
        )
        self.assertEqual(len(notifier.calls), 1)

    async def test_busy_cleared_when_send_is_cancelled(self) -> None:
        backend = FakeBackend()
        backend.release = asyncio.Event()
        pipeline, store, _, notifier = self._build(backend)
        store.set_draft_text("Hello")

        task = asyncio.create_task(pipeline.send())
        await asyncio.sleep(0)
        task.cancel()
        with self.assertRaises(asyncio.CancelledError):
            await task

        self.assertFalse(store.busy)
        self.assertEqual(notifier.calls, [])

    async def test_failure_is_logged(self) -> None:
        pipeline, store, _, _ = self._build(FakeBackend(fail=True))
        store.set_draft_text("Hello")
        with self.assertLogs("ollama_vision_chat.pipeline", level="WARNING") as logs:
            await pipeline.send()
        self.assertTrue(any("pipeline.send.failed" in line for line in logs.output))


if __name__ == "__main__":
    unittest.main()
