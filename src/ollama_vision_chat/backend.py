"""Reply backends: the placeholder stand-in and the Ollama SDK client."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

import httpx
from ollama import AsyncClient

from .exceptions import BackendUnreachableError, VisionChatError
from .models import ImagePayload

LOGGER = logging.getLogger(__name__)


class ReplyBackend(Protocol):
    """Produce one assistant reply for one user turn."""

    async def request_reply(self, text: str, image: ImagePayload | None) -> str: ...


class PlaceholderBackend:
    """Canned replies after a simulated network delay."""

    def __init__(self, simulated_delay_seconds: float = 1.0) -> None:
        self.simulated_delay_seconds = max(0.0, simulated_delay_seconds)

    async def request_reply(self, text: str, image: ImagePayload | None) -> str:
        await asyncio.sleep(self.simulated_delay_seconds)

        if image is not None:
            regarding = f'Regarding your message "{text}": ' if text else ""
            return (
                f"I've analyzed the image you sent. {regarding} This appears to be an "
                "image. In a real implementation, Ollama would process this image "
                "and provide a relevant response."
            )

        return (
            f'You said: "{text}". This is a placeholder response. In a real '
            "implementation, this would be the response from your local Ollama "
            "instance."
        )


class OllamaBackend:
    """Single-turn, non-streaming chat request through the Ollama SDK."""

    def __init__(
        self,
        host: str,
        model: str,
        system_prompt: str = "",
        client: Any | None = None,
    ) -> None:
        self.host = host
        self.model = model
        self.system_prompt = system_prompt.strip()
        self._client = client if client is not None else AsyncClient(host=host)

    def _build_messages(
        self, text: str, image: ImagePayload | None
    ) -> list[dict[str, Any]]:
        messages: list[dict[str, Any]] = []
        if self.system_prompt:
            messages.append({"role": "system", "content": self.system_prompt})
        user_msg: dict[str, Any] = {"role": "user", "content": text}
        if image is not None:
            user_msg["images"] = [image.base64_data]
        messages.append(user_msg)
        return messages

    @staticmethod
    def _extract_content(response: Any) -> str:
        """Read message.content from an SDK object or a plain dict response."""
        message_obj = getattr(response, "message", None)
        if message_obj is not None:
            value = getattr(message_obj, "content", None)
            if isinstance(value, str):
                return value
        if isinstance(response, dict):
            message = response.get("message")
            if isinstance(message, dict):
                value = message.get("content")
                if isinstance(value, str):
                    return value
        return ""

    def _map_exception(self, exc: Exception) -> VisionChatError:
        if isinstance(exc, VisionChatError):
            return exc

        if isinstance(
            exc,
            (
                httpx.ConnectError,
                httpx.ConnectTimeout,
                httpx.ReadTimeout,
                httpx.NetworkError,
            ),
        ):
            return BackendUnreachableError(
                f"Unable to connect to Ollama host {self.host}."
            )
        return BackendUnreachableError(
            f"Ollama request to {self.host} failed: {exc}"
        )

    async def request_reply(self, text: str, image: ImagePayload | None) -> str:
        try:
            response = await self._client.chat(
                model=self.model,
                messages=self._build_messages(text, image),
                stream=False,
            )
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001 - external API can fail in many ways.
            raise self._map_exception(exc) from exc

        content = self._extract_content(response).strip()
        if not content:
            raise BackendUnreachableError(
                f"Ollama at {self.host} returned an empty reply."
            )
        return content


def build_backend(config: dict[str, Any]) -> ReplyBackend:
    """Build the reply backend selected by ``backend.kind``."""
    backend_cfg = config.get("backend", {})
    kind = str(backend_cfg.get("kind", "placeholder"))
    if kind == "ollama":
        ollama_cfg = config.get("ollama", {})
        backend: ReplyBackend = OllamaBackend(
            host=str(ollama_cfg.get("host", "http://localhost:11434")),
            model=str(ollama_cfg.get("model", "llava")),
            system_prompt=str(ollama_cfg.get("system_prompt", "")),
        )
    else:
        backend = PlaceholderBackend(
            simulated_delay_seconds=float(
                backend_cfg.get("simulated_delay_seconds", 1.0)
            )
        )
    LOGGER.info(
        "backend.selected",
        extra={"event": "backend.selected", "kind": kind},
    )
    return backend
