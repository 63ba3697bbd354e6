"""LiteLLM integration for the Gemini chat call.

One request per user message: the prior conversation goes along as history,
the new text as the final user turn, and exactly one reply string comes back.
Failures never escape; they are mapped to user-facing fallback replies.

Usage:
    model = get_chat_model(Settings.from_env())
    reply = await generate_reply(model, history, "Hello")
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import litellm
from litellm import acompletion

from .config import DEFAULT_MAX_OUTPUT_TOKENS, DEFAULT_MODEL

if TYPE_CHECKING:
    from .config import Settings
    from .storage import ChatMessage

# Suppress litellm's noisy logging
litellm.suppress_debug_info = True
logging.getLogger("LiteLLM").setLevel(logging.CRITICAL)
logging.getLogger("litellm").setLevel(logging.CRITICAL)
logging.getLogger("httpx").setLevel(logging.CRITICAL)
logging.getLogger("httpcore").setLevel(logging.CRITICAL)

log = logging.getLogger(__name__)

# Separate logger for raw prompts and replies (enabled via GRAN_CHAT_LOG_LLM)
llm_log = logging.getLogger("gran_chat.llm_content")

NOT_INITIALIZED_REPLY = (
    "AI model not initialized. Please check your API configuration and API key."
)
FORBIDDEN_REPLY = "Access denied. Please check your API key or usage limits (403 Forbidden)."
RATE_LIMITED_REPLY = (
    "Too many requests. Please wait a moment and try again (429 Too Many Requests)."
)
NOT_FOUND_REPLY = (
    "Model not found or unavailable. Please check the model name or API version (404 Not Found)."
)
UNEXPECTED_REPLY = "There was an unexpected error. Please try again later."

# Checked in order; first substring found in the error text wins
_STATUS_REPLIES: list[tuple[str, str]] = [
    ("403", FORBIDDEN_REPLY),
    ("429", RATE_LIMITED_REPLY),
    ("404", NOT_FOUND_REPLY),
]


class ChatModel:
    """A configured chat-completion model."""

    def __init__(
        self,
        model_id: str = DEFAULT_MODEL,
        *,
        api_key: str | None = None,
        max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS,
        **kwargs: Any,
    ) -> None:
        """Initialize the model.

        Args:
            model_id: litellm model identifier (e.g., "gemini/gemini-1.5-flash")
            api_key: API key sent with every request
            max_output_tokens: Cap on the length of each reply
            **kwargs: Additional arguments passed to litellm
        """
        self.model_id = model_id
        self.api_key = api_key
        self.max_output_tokens = max_output_tokens
        self.extra_kwargs = kwargs

    def __repr__(self) -> str:
        return f"ChatModel({self.model_id!r}, max_output_tokens={self.max_output_tokens})"

    def build_kwargs(self, history: list[ChatMessage], prompt: str) -> dict[str, Any]:
        """Build kwargs for litellm acompletion."""
        messages = to_llm_history(history)
        messages.append({"role": "user", "content": prompt})

        kwargs: dict[str, Any] = {
            "model": self.model_id,
            "messages": messages,
            "max_tokens": self.max_output_tokens,
            **self.extra_kwargs,
        }
        if self.api_key:
            kwargs["api_key"] = self.api_key
        return kwargs

    async def complete(self, history: list[ChatMessage], prompt: str) -> str:
        """Send prompt with history and return the reply text.

        Raises whatever litellm raises; callers wanting a reply string in
        every case should use generate_reply().
        """
        response = await acompletion(**self.build_kwargs(history, prompt))
        return response.choices[0].message.content or ""


def get_chat_model(settings: Settings) -> ChatModel | None:
    """Create the chat model, or None when no API key is configured."""
    if not settings.api_key:
        log.error("Missing Gemini API Key. Please set GRAN_CHAT_GEMINI_API_KEY in your environment.")
        return None
    return ChatModel(
        settings.model,
        api_key=settings.api_key,
        max_output_tokens=settings.max_output_tokens,
    )


def to_llm_history(messages: list[ChatMessage]) -> list[dict[str, str]]:
    """Map stored messages to chat-completion role/content dicts."""
    return [
        {"role": "user" if m.from_user else "assistant", "content": m.text}
        for m in messages
    ]


def fallback_reply(error: BaseException) -> str:
    """Pick the user-facing reply for a failed request."""
    text = str(error)
    status_code = getattr(error, "status_code", None)
    if status_code is not None:
        text = f"{status_code} {text}"

    for needle, reply in _STATUS_REPLIES:
        if needle in text:
            return reply
    return UNEXPECTED_REPLY


async def generate_reply(
    model: ChatModel | None,
    history: list[ChatMessage],
    prompt: str,
) -> str:
    """Get one reply for prompt. Always returns a string.

    Args:
        model: The configured model, or None if not initialized
        history: Conversation so far, not including prompt
        prompt: The user's new message

    Returns:
        The model's reply, or a fallback message describing the failure
    """
    if model is None:
        return NOT_INITIALIZED_REPLY

    llm_log.debug(f"=== Prompt ({len(history)} prior messages) ===\n{prompt}")
    try:
        text = await model.complete(history, prompt)
    except Exception as e:
        log.exception(f"Error communicating with {model.model_id}: {e}")
        return fallback_reply(e)

    llm_log.debug(f"=== Reply ===\n{text}")
    return text
