"""Pytest configuration and shared fixtures for gran-chat tests."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import Any

import pytest

from gran_chat import ChatHistory, LocalStorage, Settings, llm


class FakeCompletion:
    """Stand-in for litellm.acompletion that records every call.

    Set `reply` for a successful answer, `error` to raise instead, or
    `gate` to hold the call open until the event is set.
    """

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.reply: str | None = "Hello from Gemini"
        self.error: Exception | None = None
        self.gate: asyncio.Event | None = None

    async def __call__(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(kwargs)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def completion(monkeypatch: pytest.MonkeyPatch) -> FakeCompletion:
    """Patch the outbound litellm call."""
    fake = FakeCompletion()
    monkeypatch.setattr(llm, "acompletion", fake)
    return fake


@pytest.fixture
def storage(tmp_path) -> LocalStorage:
    """A LocalStorage backed by a throwaway SQLite file."""
    return LocalStorage(tmp_path / "local_storage.db")


@pytest.fixture
def history(storage: LocalStorage) -> ChatHistory:
    return ChatHistory(storage)


@pytest.fixture
def settings() -> Settings:
    """Settings with a dummy API key."""
    return Settings(api_key="test-key")
