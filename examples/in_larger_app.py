"""Add chat to an existing app as a sidebar, with saved history."""

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Footer, Header, Static

from gran_chat import ChatContainer, ChatHistory, Settings, get_chat_model, get_local_storage

settings = Settings.from_env()
chat = ChatContainer(
    model=get_chat_model(settings),
    history=ChatHistory(get_local_storage(settings.storage_path), key="sidebarChatHistory"),
    title="Assistant",
)


class MyApp(App):
    CSS = """
    #content { width: 1fr; padding: 2; }
    #sidebar { width: 60; border-left: solid $primary; }
    """

    BINDINGS = [
        Binding("ctrl+b", "toggle_sidebar", "Toggle Chat"),
        Binding("ctrl+q", "quit", "Quit"),
    ]

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal():
            with Vertical(id="content"):
                yield Static(
                    "[bold]My App[/bold]\n\nYour content here.\n\nPress Ctrl+B to toggle the assistant."
                )
            with Vertical(id="sidebar"):
                yield chat
        yield Footer()

    def action_toggle_sidebar(self) -> None:
        sidebar = self.query_one("#sidebar")
        sidebar.display = not sidebar.display

    def on_chat_container_responded(self, event: ChatContainer.Responded) -> None:
        self.notify("New reply", timeout=2)


if __name__ == "__main__":
    MyApp().run()
