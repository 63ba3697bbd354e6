"""Chat input widget with Enter to submit, Shift+Enter for newlines."""

from __future__ import annotations

from textual import events
from textual.css.query import NoMatches
from textual.message import Message
from textual.widgets import TextArea


class ChatInput(TextArea):
    """Multiline input with Enter to submit, Shift+Enter for newlines."""

    class Submitted(Message):
        """User submitted their message."""

        def __init__(self, content: str) -> None:
            super().__init__()
            self.content = content

    def __init__(
        self,
        placeholder: str = "Type your message...",
        *,
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        super().__init__(name=name, id=id, classes=classes)
        self.show_line_numbers = False
        self._placeholder = placeholder

    def on_mount(self) -> None:
        self.placeholder = self._placeholder

    def submit(self) -> None:
        """Post the trimmed text as Submitted and clear the input."""
        content = self.text.strip()
        if content:
            self.post_message(self.Submitted(content))
            self.clear()

    async def _on_key(self, event: events.Key) -> None:
        """Handle key presses."""
        # Shift+Enter (comes through as ctrl+j) - insert newline
        if event.key in ("shift+enter", "ctrl+j"):
            self.insert("\n")
            event.prevent_default()
            event.stop()
            return

        if event.key in ("enter", "ctrl+m"):
            self.submit()
            event.prevent_default()
            event.stop()
            return

        # Page Up/Down - scroll chat messages
        if event.key in ("pageup", "pagedown"):
            try:
                container = self.app.query_one("#chat-messages")
            except NoMatches:
                pass
            else:
                if event.key == "pageup":
                    container.scroll_page_up(animate=False)
                else:
                    container.scroll_page_down(animate=False)
                event.prevent_default()
                event.stop()
                return

        # Let TextArea handle everything else
        await super()._on_key(event)
