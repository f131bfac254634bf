"""Top-level package for ollama-vision-chat."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .app import VisionChatApp
    from .attachments import AttachmentManager, SelectedFile, validate_image
    from .backend import OllamaBackend, PlaceholderBackend, ReplyBackend
    from .config import ensure_config_dir, load_config
    from .exceptions import (
        AttachmentError,
        AttachmentNotImageError,
        AttachmentReadError,
        AttachmentTooLargeError,
        BackendUnreachableError,
        ConfigValidationError,
        VisionChatError,
    )
    from .models import ConversationState, Draft, ImagePayload, Message, Role
    from .pipeline import SendPipeline
    from .store import ConversationStore

_LAZY_EXPORTS: dict[str, str] = {
    "VisionChatApp": ".app",
    "AttachmentManager": ".attachments",
    "SelectedFile": ".attachments",
    "validate_image": ".attachments",
    "OllamaBackend": ".backend",
    "PlaceholderBackend": ".backend",
    "ReplyBackend": ".backend",
    "ensure_config_dir": ".config",
    "load_config": ".config",
    "AttachmentError": ".exceptions",
    "AttachmentNotImageError": ".exceptions",
    "AttachmentReadError": ".exceptions",
    "AttachmentTooLargeError": ".exceptions",
    "BackendUnreachableError": ".exceptions",
    "ConfigValidationError": ".exceptions",
    "VisionChatError": ".exceptions",
    "ConversationState": ".models",
    "Draft": ".models",
    "ImagePayload": ".models",
    "Message": ".models",
    "Role": ".models",
    "SendPipeline": ".pipeline",
    "ConversationStore": ".store",
}

__all__ = sorted(_LAZY_EXPORTS)


def __getattr__(name: str) -> Any:
    """Lazily import symbols to keep UI dependencies out of plain imports."""
    module_name = _LAZY_EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    from importlib import import_module

    return getattr(import_module(module_name, __name__), name)
