"""Tests for the outbound chat call and its error mapping."""

import asyncio

import pytest

from gran_chat.config import Settings
from gran_chat.llm import (
    FORBIDDEN_REPLY,
    NOT_FOUND_REPLY,
    NOT_INITIALIZED_REPLY,
    RATE_LIMITED_REPLY,
    UNEXPECTED_REPLY,
    ChatModel,
    fallback_reply,
    generate_reply,
    get_chat_model,
    to_llm_history,
)
from gran_chat.storage import ChatMessage


class StatusError(Exception):
    """Error carrying an HTTP-like status code, like litellm's exceptions."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class TestFallbackReply:
    """Error text maps to a fixed user-facing reply."""

    @pytest.mark.parametrize(
        ("message", "expected"),
        [
            ("[403 Forbidden] API key not valid", FORBIDDEN_REPLY),
            ("Error 429: Resource has been exhausted", RATE_LIMITED_REPLY),
            ("models/gemini-9 is not found (404)", NOT_FOUND_REPLY),
            ("connection reset by peer", UNEXPECTED_REPLY),
        ],
    )
    def test_substring_matching(self, message: str, expected: str) -> None:
        assert fallback_reply(Exception(message)) == expected

    def test_status_code_attribute(self) -> None:
        """A status_code attribute counts even when the text lacks it."""
        assert fallback_reply(StatusError("RateLimitError", 429)) == RATE_LIMITED_REPLY

    def test_first_match_wins(self) -> None:
        """403 is checked before 429 and 404."""
        assert fallback_reply(Exception("404 after 403")) == FORBIDDEN_REPLY

    def test_fallback_texts(self) -> None:
        assert "403 Forbidden" in FORBIDDEN_REPLY
        assert "429 Too Many Requests" in RATE_LIMITED_REPLY
        assert "404 Not Found" in NOT_FOUND_REPLY
        assert UNEXPECTED_REPLY == "There was an unexpected error. Please try again later."


class TestHistoryMapping:
    def test_roles(self) -> None:
        """User messages become "user", bot replies "assistant"."""
        messages = [ChatMessage("Hi", True), ChatMessage("Hello", False)]
        assert to_llm_history(messages) == [
            {"role": "user", "content": "Hi"},
            {"role": "assistant", "content": "Hello"},
        ]


class TestGetChatModel:
    def test_none_without_api_key(self) -> None:
        """No API key means no model."""
        assert get_chat_model(Settings()) is None

    def test_uses_settings(self) -> None:
        model = get_chat_model(
            Settings(api_key="k", model="gemini/gemini-1.5-pro", max_output_tokens=42)
        )
        assert model is not None
        assert model.model_id == "gemini/gemini-1.5-pro"
        assert model.api_key == "k"
        assert model.max_output_tokens == 42


class TestGenerateReply:
    """Tests for generate_reply against a patched litellm call."""

    def test_not_initialized(self, completion) -> None:
        """Without a model no request is made."""
        reply = asyncio.run(generate_reply(None, [], "Hello"))
        assert reply == NOT_INITIALIZED_REPLY
        assert completion.calls == []

    def test_sends_history_then_prompt(self, completion) -> None:
        """One call carries model id, full history, prompt and token cap."""
        model = ChatModel("gemini/gemini-1.5-flash", api_key="k", max_output_tokens=300)
        history = [ChatMessage("Hi", True), ChatMessage("Hello!", False)]

        reply = asyncio.run(generate_reply(model, history, "How are you?"))

        assert reply == "Hello from Gemini"
        assert len(completion.calls) == 1
        call = completion.calls[0]
        assert call["model"] == "gemini/gemini-1.5-flash"
        assert call["api_key"] == "k"
        assert call["max_tokens"] == 300
        assert call["messages"] == [
            {"role": "user", "content": "Hi"},
            {"role": "assistant", "content": "Hello!"},
            {"role": "user", "content": "How are you?"},
        ]

    def test_empty_content(self, completion) -> None:
        """A None content comes back as an empty string."""
        completion.reply = None
        reply = asyncio.run(generate_reply(ChatModel(api_key="k"), [], "Hi"))
        assert reply == ""

    def test_error_becomes_fallback(self, completion) -> None:
        """Failures are returned as fallback text, never raised."""
        completion.error = StatusError("quota exceeded", 429)
        reply = asyncio.run(generate_reply(ChatModel(api_key="k"), [], "Hi"))
        assert reply == RATE_LIMITED_REPLY

    def test_unknown_error(self, completion) -> None:
        completion.error = RuntimeError("boom")
        reply = asyncio.run(generate_reply(ChatModel(api_key="k"), [], "Hi"))
        assert reply == UNEXPECTED_REPLY
