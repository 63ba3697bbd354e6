"""The chat container: message log, loading state and the send loop.

    from gran_chat import ChatContainer

    class MyApp(App):
        def compose(self) -> ComposeResult:
            yield ChatContainer(model=get_chat_model(Settings.from_env()))

Each submitted message is appended to the log, sent along with everything
before it, and answered by exactly one reply (or a fallback message).
"""

from __future__ import annotations

import asyncio
import logging
import os

# Setup logging to file (controlled by GRAN_CHAT_LOGGING_LEVEL env var)
_log_level = os.environ.get("GRAN_CHAT_LOGGING_LEVEL", "").upper()
if _log_level:
    logging.basicConfig(
        filename="gran_chat.log",
        level=getattr(logging, _log_level, logging.DEBUG),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
log = logging.getLogger(__name__)

# Separate logger for raw prompts and replies (controlled by GRAN_CHAT_LOG_LLM env var)
llm_log = logging.getLogger("gran_chat.llm_content")
llm_log.setLevel(logging.DEBUG)
llm_log.propagate = False  # Don't propagate to root logger
if os.environ.get("GRAN_CHAT_LOG_LLM"):
    _llm_handler = logging.FileHandler("llm_content.log", mode="w")
    _llm_handler.setLevel(logging.DEBUG)
    _llm_handler.setFormatter(logging.Formatter("%(asctime)s\n%(message)s\n"))
    llm_log.addHandler(_llm_handler)

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, ScrollableContainer
from textual.css.query import NoMatches
from textual.message import Message
from textual.widget import Widget
from textual.widgets import Button, Static, TextArea

from .llm import ChatModel, generate_reply
from .slash_command import SlashCommandManager, create_default_manager, parse_command_name
from .storage import ChatHistory, ChatMessage
from .widgets import ChatInput, MessageWidget, TypingIndicator

TITLE = "Gran AI Chat Assistant"


class ChatContainer(Widget):
    """Chat widget holding the ordered message log.

    Only one request is in flight at a time: while a reply is pending the
    input and Send button are disabled and further submissions are ignored.
    """

    DEFAULT_CSS = """
    ChatContainer {
        width: 100%;
        height: 100%;
        layout: vertical;
    }
    ChatContainer #chat-header {
        width: 100%;
        height: 3;
        content-align: center middle;
        text-style: bold;
        background: $primary;
        color: $text;
    }
    ChatContainer #chat-messages {
        height: 1fr;
        padding: 1;
    }
    ChatContainer #chat-form {
        height: auto;
        padding: 0 1 1 1;
        border-top: solid $surface-lighten-1;
    }
    ChatContainer #chat-input {
        width: 1fr;
        height: auto;
        min-height: 3;
        max-height: 8;
        border: round $surface-lighten-1;
    }
    ChatContainer #chat-input:focus {
        border: round $primary;
    }
    ChatContainer #chat-send {
        margin-left: 1;
        min-width: 10;
    }
    """

    BINDINGS = [
        Binding("ctrl+l", "clear", "Clear", show=True),
    ]

    class Sent(Message):
        """User sent a message."""

        def __init__(self, content: str) -> None:
            super().__init__()
            self.content = content

    class Responded(Message):
        """A reply (or fallback message) was added to the log."""

        def __init__(self, content: str) -> None:
            super().__init__()
            self.content = content

    class ProcessingStarted(Message):
        """The outbound request for a message has started."""

        def __init__(self, prompt: str) -> None:
            super().__init__()
            self.prompt = prompt

    class ProcessingCompleted(Message):
        """The outbound request finished and loading is over."""

        def __init__(self, response: str) -> None:
            super().__init__()
            self.response = response

    def __init__(
        self,
        model: ChatModel | None = None,
        *,
        history: ChatHistory | None = None,
        title: str = TITLE,
        placeholder: str = "Type your message...",
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        """Create a chat container.

        Args:
            model: Configured chat model; None makes every reply a configuration notice
            history: Persistent store for the message log (in-memory only if None)
            title: Header text
            placeholder: Input placeholder text
        """
        super().__init__(name=name, id=id, classes=classes)
        self._model = model
        self._history = history
        self.title = title
        self.placeholder = placeholder

        self.messages: list[ChatMessage] = []
        self.is_loading = False
        self._response_task: asyncio.Task[None] | None = None

        self.slash_commands: SlashCommandManager = create_default_manager()

    def compose(self) -> ComposeResult:
        yield Static(self.title, id="chat-header")
        yield ScrollableContainer(id="chat-messages")
        with Horizontal(id="chat-form"):
            yield ChatInput(placeholder=self.placeholder, id="chat-input")
            yield Button("Send", id="chat-send", variant="primary", disabled=True)

    async def on_mount(self) -> None:
        """Restore saved history, scroll to the end and focus the input."""
        if self._history:
            self.messages = self._history.load()
            log.info(f"Restored {len(self.messages)} message(s) from history")

        container = self._messages_container()
        if self.messages:
            await container.mount_all(MessageWidget(m.text, m.from_user) for m in self.messages)
        container.scroll_end(animate=False)
        self.query_one("#chat-input", ChatInput).focus()

    def _messages_container(self) -> ScrollableContainer:
        return self.query_one("#chat-messages", ScrollableContainer)

    def _typing_indicator(self) -> TypingIndicator | None:
        try:
            return self.query_one("#typing-indicator", TypingIndicator)
        except NoMatches:
            return None

    def _update_send_button(self) -> None:
        text = self.query_one("#chat-input", ChatInput).text
        self.query_one("#chat-send", Button).disabled = self.is_loading or not text.strip()

    async def _set_loading(self, loading: bool) -> None:
        """Toggle the loading state, its indicator and the input controls."""
        self.is_loading = loading
        chat_input = self.query_one("#chat-input", ChatInput)
        chat_input.disabled = loading
        self._update_send_button()

        container = self._messages_container()
        indicator = self._typing_indicator()
        if loading and indicator is None:
            await container.mount(TypingIndicator(id="typing-indicator"))
            container.scroll_end(animate=False)
        elif not loading:
            if indicator is not None:
                await indicator.remove()
            chat_input.focus()

    async def _append(self, message: ChatMessage) -> None:
        """Add a message to the log, persist it and render it."""
        self.messages.append(message)
        if self._history:
            self._history.save(self.messages)

        container = self._messages_container()
        widget = MessageWidget(message.text, message.from_user)
        # Keep the typing indicator at the bottom
        await container.mount(widget, before=self._typing_indicator())
        container.scroll_end(animate=False)

    async def submit(self, text: str) -> None:
        """Send a message and wait for its reply.

        Blank text, and anything submitted while a reply is pending, is ignored.
        """
        content = text.strip()
        if not content:
            return
        if self.is_loading:
            log.debug("Ignoring submission while a reply is pending")
            return

        # Claim the in-flight slot before the first await
        self.is_loading = True
        try:
            history = list(self.messages)
            await self._append(ChatMessage(content, from_user=True))
            self.post_message(self.Sent(content))

            await self._set_loading(True)
            self.post_message(self.ProcessingStarted(content))
            reply = await generate_reply(self._model, history, content)
            await self._append(ChatMessage(reply, from_user=False))
        finally:
            await self._set_loading(False)

        self.post_message(self.Responded(reply))
        self.post_message(self.ProcessingCompleted(reply))

    async def on_chat_input_submitted(self, event: ChatInput.Submitted) -> None:
        """Handle message submission."""
        event.stop()
        content = event.content

        # Slash commands never reach the model
        if self._is_slash_command(content):
            await self._handle_slash_command(content)
            return

        if self.is_loading:
            return

        # Run in background so the UI keeps repainting while waiting
        self._response_task = asyncio.create_task(self.submit(content))
        self._response_task.add_done_callback(self._on_response_done)

    def _is_slash_command(self, content: str) -> bool:
        """True for a registered command, or a lone "/word" that looks like one.

        Anything else starting with "/" (e.g. "/usr/bin is missing") is a prompt.
        """
        if not content.startswith("/"):
            return False
        cmd_name = parse_command_name(content)
        if self.slash_commands.get(cmd_name) is not None:
            return True
        return len(content.split()) == 1 and cmd_name.isidentifier()

    def _on_response_done(self, task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            log.error("Error while sending message", exc_info=error)
            self.notify(f"Error: {error}", severity="error")

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        self._update_send_button()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "chat-send":
            event.stop()
            self.query_one("#chat-input", ChatInput).submit()

    async def _handle_slash_command(self, command: str) -> None:
        cmd_name = parse_command_name(command)
        if not await self.slash_commands.execute(cmd_name, self):
            self.notify(
                f"Unknown command: /{cmd_name}. Type /help for available commands.",
                severity="warning",
            )

    async def clear_history(self) -> None:
        """Empty the conversation, on screen and in storage."""
        if self.is_loading:
            self.notify("Wait for the current reply before clearing", severity="warning")
            return
        self.messages.clear()
        if self._history:
            self._history.clear()
        await self._messages_container().query(MessageWidget).remove()
        log.info("Chat history cleared")

    async def action_clear(self) -> None:
        """Clear the chat."""
        await self.clear_history()
