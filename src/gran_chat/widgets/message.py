"""Message widgets for chat display."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import ScrollableContainer, Vertical
from textual.widget import Widget
from textual.widgets import Markdown
from textual_golden import Golden

USER_TITLE = "You"
BOT_TITLE = "Gran AI"


class MessageWidget(Widget):
    """One chat message rendered as markdown.

    The widget spans the row; its bubble sits on the right with a filled
    background for user messages and on the left with a transparent one
    for bot replies.
    """

    DEFAULT_CSS = """
    MessageWidget {
        height: auto;
        width: 100%;
        margin: 0 0 1 0;
    }
    MessageWidget.user {
        align-horizontal: right;
    }
    MessageWidget.bot {
        align-horizontal: left;
    }
    MessageWidget .bubble {
        width: 80%;
        height: auto;
        padding: 0 1;
    }
    MessageWidget.user .bubble {
        border: round $primary;
        background: $panel;
    }
    MessageWidget.bot .bubble {
        border: round $accent;
        background: transparent;
    }
    MessageWidget Markdown {
        margin: 0;
        padding: 0;
        background: transparent;
    }
    """

    def __init__(self, text: str, from_user: bool) -> None:
        role = "user" if from_user else "bot"
        super().__init__(classes=f"message {role}")
        self.text = text
        self.from_user = from_user

    def compose(self) -> ComposeResult:
        bubble = Vertical(classes="bubble")
        bubble.border_title = USER_TITLE if self.from_user else BOT_TITLE
        with bubble:
            yield Markdown(self.text, classes="content")

    def on_mount(self) -> None:
        self.call_after_refresh(self._scroll_parent)

    def _scroll_parent(self) -> None:
        """Scroll parent container to show this message."""
        if isinstance(self.parent, ScrollableContainer):
            self.parent.scroll_end(animate=False)


class TypingIndicator(Widget):
    """Animated placeholder shown while waiting for a reply."""

    DEFAULT_CSS = """
    TypingIndicator {
        height: auto;
        width: 100%;
    }
    TypingIndicator Golden {
        width: auto;
        padding: 0 1;
        border: round $accent 50%;
    }
    """

    def compose(self) -> ComposeResult:
        yield Golden("Typing...")
