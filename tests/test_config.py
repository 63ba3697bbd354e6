"""Tests for environment-driven settings."""

from pathlib import Path

import pytest

from gran_chat.config import DEFAULT_MAX_OUTPUT_TOKENS, DEFAULT_MODEL, ConfigurationError, Settings


class TestSettingsFromEnv:
    """Unit tests for Settings.from_env."""

    def test_defaults(self) -> None:
        """An empty environment gives the defaults and no API key."""
        settings = Settings.from_env({})
        assert settings.api_key is None
        assert settings.model == DEFAULT_MODEL == "gemini/gemini-1.5-flash"
        assert settings.max_output_tokens == DEFAULT_MAX_OUTPUT_TOKENS == 300
        assert settings.storage_path is None

    def test_prefers_gran_chat_key(self) -> None:
        """GRAN_CHAT_GEMINI_API_KEY wins over GEMINI_API_KEY."""
        settings = Settings.from_env(
            {"GRAN_CHAT_GEMINI_API_KEY": "primary", "GEMINI_API_KEY": "fallback"}
        )
        assert settings.api_key == "primary"

    def test_falls_back_to_gemini_key(self) -> None:
        settings = Settings.from_env({"GEMINI_API_KEY": "fallback"})
        assert settings.api_key == "fallback"

    def test_overrides(self) -> None:
        """Model, token cap and storage path can be overridden."""
        settings = Settings.from_env(
            {
                "GRAN_CHAT_MODEL": "gemini/gemini-1.5-pro",
                "GRAN_CHAT_MAX_OUTPUT_TOKENS": "512",
                "GRAN_CHAT_STORAGE_PATH": "/tmp/chat.db",
            }
        )
        assert settings.model == "gemini/gemini-1.5-pro"
        assert settings.max_output_tokens == 512
        assert settings.storage_path == Path("/tmp/chat.db")

    @pytest.mark.parametrize("value", ["lots", "0", "-5"])
    def test_rejects_bad_token_cap(self, value: str) -> None:
        """A non-integer or non-positive token cap is a configuration error."""
        with pytest.raises(ConfigurationError):
            Settings.from_env({"GRAN_CHAT_MAX_OUTPUT_TOKENS": value})
