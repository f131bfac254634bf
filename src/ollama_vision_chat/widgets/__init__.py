"""Textual widgets for the vision chat screen."""

from .activity_bar import ActivityBar
from .conversation import ConversationView
from .input_box import Composer, InputBox
from .message import MessageBubble

__all__ = ["ActivityBar", "Composer", "ConversationView", "InputBox", "MessageBubble"]
