"""Environment-driven settings for gran-chat."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_MODEL = "gemini/gemini-1.5-flash"
DEFAULT_MAX_OUTPUT_TOKENS = 300


class ConfigurationError(Exception):
    """Raised when gran-chat is misconfigured."""

    pass


def default_storage_path() -> Path:
    """Default location of the local key/value store (~/.cache/gran-chat)."""
    return Path.home() / ".cache" / "gran-chat" / "local_storage.db"


@dataclass
class Settings:
    """Runtime settings for the chat client."""

    api_key: str | None = None
    model: str = DEFAULT_MODEL
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS
    storage_path: Path | None = None

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Settings:
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Raises:
            ConfigurationError: If GRAN_CHAT_MAX_OUTPUT_TOKENS is not a positive integer
        """
        env = os.environ if environ is None else environ

        api_key = env.get("GRAN_CHAT_GEMINI_API_KEY") or env.get("GEMINI_API_KEY") or None

        raw_tokens = env.get("GRAN_CHAT_MAX_OUTPUT_TOKENS")
        max_output_tokens = DEFAULT_MAX_OUTPUT_TOKENS
        if raw_tokens:
            try:
                max_output_tokens = int(raw_tokens)
            except ValueError:
                raise ConfigurationError(
                    f"GRAN_CHAT_MAX_OUTPUT_TOKENS must be an integer, got {raw_tokens!r}"
                ) from None
            if max_output_tokens <= 0:
                raise ConfigurationError(
                    f"GRAN_CHAT_MAX_OUTPUT_TOKENS must be positive, got {max_output_tokens}"
                )

        storage = env.get("GRAN_CHAT_STORAGE_PATH")

        return cls(
            api_key=api_key,
            model=env.get("GRAN_CHAT_MODEL") or DEFAULT_MODEL,
            max_output_tokens=max_output_tokens,
            storage_path=Path(storage).expanduser() if storage else None,
        )
