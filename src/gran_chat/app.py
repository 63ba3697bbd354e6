"""The gran-chat application shell."""

from __future__ import annotations

import logging
import sqlite3
import sys

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer

from .chat import TITLE, ChatContainer
from .config import ConfigurationError, Settings
from .llm import get_chat_model
from .storage import ChatHistory, LocalStorage, get_local_storage

log = logging.getLogger(__name__)


class GranChatApp(App):
    """Full-screen chat with persisted history."""

    TITLE = TITLE

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        storage: LocalStorage | None = None,
    ) -> None:
        super().__init__()
        self.settings = settings if settings is not None else Settings.from_env()
        self._storage = storage
        self._storage_error: str | None = None

    def _open_history(self) -> ChatHistory | None:
        """Open the persisted history, or None if the store is unusable."""
        try:
            storage = self._storage or get_local_storage(self.settings.storage_path)
        except (sqlite3.Error, OSError) as e:
            log.error(f"Local storage unavailable, history will not be saved: {e}")
            self._storage_error = str(e)
            return None
        return ChatHistory(storage)

    def compose(self) -> ComposeResult:
        yield ChatContainer(
            model=get_chat_model(self.settings),
            history=self._open_history(),
            id="chat",
        )
        yield Footer()

    def on_mount(self) -> None:
        if self._storage_error:
            self.notify(
                f"Chat history will not be saved: {self._storage_error}",
                severity="warning",
            )


def main() -> None:
    """Console entry point."""
    try:
        settings = Settings.from_env()
    except ConfigurationError as e:
        print(f"gran-chat: {e}", file=sys.stderr)
        sys.exit(2)
    GranChatApp(settings).run()


if __name__ == "__main__":
    main()
