"""Widget components for gran-chat."""

from .chat_input import ChatInput
from .message import MessageWidget, TypingIndicator

__all__ = [
    "ChatInput",
    "MessageWidget",
    "TypingIndicator",
]
