"""A terminal chat client for Gemini, built on Textual.

    from textual.app import App, ComposeResult
    from gran_chat import ChatContainer, Settings, get_chat_model

    class MyApp(App):
        def compose(self) -> ComposeResult:
            yield ChatContainer(model=get_chat_model(Settings.from_env()))

    MyApp().run()

Or just run `gran-chat`.
"""

from .app import GranChatApp, main
from .chat import ChatContainer
from .config import ConfigurationError, Settings
from .llm import ChatModel, fallback_reply, generate_reply, get_chat_model
from .storage import ChatHistory, ChatMessage, LocalStorage, get_local_storage
from .widgets import MessageWidget

__version__ = "0.1.0"
__all__ = [
    "ChatContainer",
    "ChatHistory",
    "ChatMessage",
    "ChatModel",
    "ConfigurationError",
    "GranChatApp",
    "LocalStorage",
    "MessageWidget",
    "Settings",
    "fallback_reply",
    "generate_reply",
    "get_chat_model",
    "get_local_storage",
    "main",
]
