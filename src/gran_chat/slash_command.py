"""Slash command registry with decorator support."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .chat import ChatContainer

# Type alias for command handlers
CommandHandler = Callable[["ChatContainer"], Awaitable[None]]


@dataclass
class SlashCommand:
    """A slash command definition."""

    name: str
    """The command name (without the leading /)."""

    description: str
    """A description of what the command does."""

    handler: CommandHandler | None = None
    """Async handler function for the command. Receives the ChatContainer."""


@dataclass
class SlashCommandManager:
    """Manages slash commands - registration, lookup, and execution."""

    _commands: dict[str, SlashCommand] = field(default_factory=dict)

    def add(self, command: SlashCommand) -> None:
        self._commands[command.name.lower()] = command

    def get(self, name: str) -> SlashCommand | None:
        return self._commands.get(name.lower())

    def all(self) -> list[SlashCommand]:
        """Get all registered commands sorted by name."""
        return sorted(self._commands.values(), key=lambda c: c.name)

    async def execute(self, name: str, chat: ChatContainer) -> bool:
        """Execute a slash command. Returns True if command was found and executed."""
        command = self.get(name)
        if command and command.handler:
            await command.handler(chat)
            return True
        return False

    def help_text(self) -> str:
        """Markdown help listing every command."""
        lines = ["**Available slash commands:**", ""]
        for cmd in self.all():
            lines.append(f"- `/{cmd.name}` - {cmd.description}")
        return "\n".join(lines)

    def slash_command(self, fn: CommandHandler) -> CommandHandler:
        """Decorator to register a slash command named after the function.

        Usage:
            @manager.slash_command
            async def help(chat: ChatContainer) -> None:
                '''Show available commands.'''
                ...
        """
        self.add(
            SlashCommand(
                name=fn.__name__,
                description=(fn.__doc__ or "").strip(),
                handler=fn,
            )
        )
        return fn


def parse_command_name(text: str) -> str:
    """Extract the command name from "/name args..."."""
    parts = text.strip().lstrip("/").split()
    return parts[0].lower() if parts else ""


# =============================================================================
# Default manager with built-in commands
# =============================================================================

_default_manager = SlashCommandManager()


@_default_manager.slash_command
async def help(chat: ChatContainer) -> None:
    """Show available slash commands."""
    chat.notify(chat.slash_commands.help_text(), title="Help", timeout=10)


@_default_manager.slash_command
async def clear(chat: ChatContainer) -> None:
    """Clear the conversation and its saved history."""
    await chat.clear_history()


@_default_manager.slash_command
async def quit(chat: ChatContainer) -> None:
    """Exit the application."""
    chat.app.exit()


def create_default_manager() -> SlashCommandManager:
    """Create a new SlashCommandManager with all built-in commands registered."""
    manager = SlashCommandManager()
    for cmd in _default_manager.all():
        manager.add(cmd)
    return manager
