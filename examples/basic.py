"""The simplest possible chat app: one ChatContainer filling the screen."""

from textual.app import App, ComposeResult

from gran_chat import ChatContainer, Settings, get_chat_model


class ChatApp(App):
    def compose(self) -> ComposeResult:
        yield ChatContainer(model=get_chat_model(Settings.from_env()))


if __name__ == "__main__":
    ChatApp().run()
