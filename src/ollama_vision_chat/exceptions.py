"""Domain exception hierarchy for the vision chat application."""

from __future__ import annotations


class VisionChatError(RuntimeError):
    """Base class for all domain-level chat errors."""

    title = "Error"
    description = "Something went wrong."

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.description)


class AttachmentError(VisionChatError):
    """Raised when a selected file cannot be staged as an image."""


class AttachmentTooLargeError(AttachmentError):
    """Raised when an attachment exceeds the configured byte limit."""

    title = "File too large"
    description = "Please upload an image smaller than 5MB"


class AttachmentNotImageError(AttachmentError):
    """Raised when the declared content type is not an image type."""

    title = "Invalid file type"
    description = "Please upload an image file"


class AttachmentReadError(AttachmentError):
    """Raised when the attachment contents cannot be read."""

    title = "Unable to read file"
    description = "The selected image could not be read"


class BackendUnreachableError(VisionChatError):
    """Raised when the reply backend rejects or cannot be reached."""

    title = "Error"
    description = "Failed to connect to Ollama. Is it running locally?"


class ConfigValidationError(VisionChatError):
    """Raised when configuration cannot be validated safely."""
