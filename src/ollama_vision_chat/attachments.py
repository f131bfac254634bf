"""Image attachment validation, encoding, and staging.

``validate_image`` is pure: it checks a selected file against the size and
type limits and returns an embeddable data-URL payload. ``AttachmentManager``
wires that check to the conversation draft, the notifier, and the file
picker.
"""

from __future__ import annotations

import asyncio
import base64
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
import logging
import mimetypes
from pathlib import Path
from typing import TYPE_CHECKING

from .exceptions import (
    AttachmentError,
    AttachmentNotImageError,
    AttachmentReadError,
    AttachmentTooLargeError,
)
from .models import ImagePayload

if TYPE_CHECKING:
    from .notifier import Notifier
    from .picker import FilePicker
    from .store import ConversationStore

LOGGER = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 5 * 1024 * 1024


@dataclass(frozen=True)
class SelectedFile:
    """A file yielded by the picker: name, byte size, declared type, reader."""

    name: str
    size: int
    content_type: str
    reader: Callable[[], Awaitable[bytes]]

    async def read(self) -> bytes:
        return await self.reader()

    @classmethod
    def from_path(cls, path: str | Path) -> SelectedFile:
        """Describe a file on disk, guessing its content type from the name."""
        resolved = Path(path).expanduser()
        size = resolved.stat().st_size
        content_type, _ = mimetypes.guess_type(resolved.name)

        async def _read() -> bytes:
            return await asyncio.to_thread(resolved.read_bytes)

        return cls(
            name=resolved.name,
            size=size,
            content_type=content_type or "application/octet-stream",
            reader=_read,
        )


def _too_large_description(max_bytes: int) -> str:
    return f"Please upload an image smaller than {max_bytes / (1024 * 1024):g}MB"


async def validate_image(
    file: SelectedFile, max_bytes: int = MAX_IMAGE_BYTES
) -> ImagePayload:
    """Check ``file`` and encode it as a ``data:`` URL payload.

    Raises AttachmentTooLargeError, AttachmentNotImageError, or
    AttachmentReadError. The size bound is inclusive.
    """
    if file.size > max_bytes:
        raise AttachmentTooLargeError(_too_large_description(max_bytes))

    content_type = (file.content_type or "").strip().lower()
    if not content_type.startswith("image/"):
        raise AttachmentNotImageError()

    try:
        data = await file.read()
    except Exception as exc:  # noqa: BLE001 - readers fail in many ways.
        raise AttachmentReadError() from exc

    encoded = base64.b64encode(data).decode("ascii")
    return ImagePayload(
        data_url=f"data:{content_type};base64,{encoded}",
        mime_type=content_type,
        name=file.name,
        size=len(data),
    )


class AttachmentManager:
    """Stage a validated image into the draft, or report why it was rejected."""

    def __init__(
        self,
        store: ConversationStore,
        notifier: Notifier,
        picker: FilePicker | None = None,
        *,
        max_image_bytes: int = MAX_IMAGE_BYTES,
    ) -> None:
        self.store = store
        self.notifier = notifier
        self.picker = picker
        self.max_image_bytes = max_image_bytes
        self._staged = store.current_draft().image
        store.subscribe(self._on_store_changed)

    def _on_store_changed(self, store: ConversationStore) -> None:
        # A staged image that leaves the draft (removed or sent) frees the
        # picker, otherwise choosing the same file for the next turn is ignored.
        image = store.current_draft().image
        if self._staged is not None and image is None and self.picker is not None:
            self.picker.reset()
            LOGGER.debug(
                "attachment.picker_reset",
                extra={"event": "attachment.picker_reset", "file_name": self._staged.name},
            )
        self._staged = image

    async def stage(self, file: SelectedFile) -> ImagePayload | None:
        """Validate ``file`` and stage it. Returns None when it was rejected."""
        try:
            payload = await validate_image(file, self.max_image_bytes)
        except AttachmentError as exc:
            LOGGER.warning(
                "attachment.rejected",
                extra={
                    "event": "attachment.rejected",
                    "error_type": exc.__class__.__name__,
                    "file_name": file.name,
                    "size": file.size,
                    "content_type": file.content_type,
                },
            )
            self.notifier.notify("error", exc.title, str(exc))
            return None

        self.store.set_draft_image(payload)
        LOGGER.info(
            "attachment.staged",
            extra={
                "event": "attachment.staged",
                "file_name": payload.name,
                "size": payload.size,
                "mime_type": payload.mime_type,
            },
        )
        return payload

    async def stage_path(self, path: str) -> ImagePayload | None:
        """Describe ``path`` on disk and stage it."""
        try:
            selected = SelectedFile.from_path(path)
        except OSError as exc:
            LOGGER.warning(
                "attachment.rejected",
                extra={
                    "event": "attachment.rejected",
                    "error_type": AttachmentReadError.__name__,
                    "path": path,
                    "reason": str(exc),
                },
            )
            self.notifier.notify(
                "error", AttachmentReadError.title, AttachmentReadError.description
            )
            return None
        return await self.stage(selected)

    def clear(self) -> None:
        """Discard the staged image and let the picker re-select the same file."""
        self.store.set_draft_image(None)
        if self.picker is not None:
            self.picker.reset()
