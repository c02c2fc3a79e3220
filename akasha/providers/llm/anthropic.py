"""
Anthropic LLM Provider (LangChain-based)

Implements LLMProvider using LangChain's ChatAnthropic. Anthropic has no
embedding models; pair it with an OpenAI embedding provider.

Models:
    - claude-sonnet-4-5: Default, best quality
    - claude-haiku-4-5: Fast and cheap

Example:
    >>> provider = AnthropicLLMProvider(api_key="sk-ant-...")
    >>> answer = await provider.generate(
    ...     "Where does Alice work?",
    ...     context="Alice works for Acme Corp.",
    ... )
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from akasha.providers.base import LLMProvider, compose_prompt

if TYPE_CHECKING:
    from langchain_anthropic import ChatAnthropic

logger = logging.getLogger(__name__)

ANTHROPIC_DEFAULT_MODEL = "claude-sonnet-4-5"
ANTHROPIC_KNOWN_MODELS = (
    "claude-sonnet-4-5",
    "claude-haiku-4-5",
    "claude-opus-4-1",
    "claude-3-5-haiku-latest",
)


def _get_chat_anthropic(
    api_key: str,
    model: str = ANTHROPIC_DEFAULT_MODEL,
    temperature: float = 0.0,
    max_tokens: int = 4096,
) -> "ChatAnthropic":
    """
    Get a ChatAnthropic instance.

    Uses lazy import to avoid requiring langchain-anthropic unless actually used.

    Raises:
        ImportError: If langchain-anthropic package is not installed
    """
    try:
        from langchain_anthropic import ChatAnthropic
    except ImportError:
        raise ImportError(
            "Anthropic provider requires the 'langchain-anthropic' package. "
            "Install with: pip install akasha"
        )

    kwargs: dict[str, Any] = {
        "model": model,
        "temperature": temperature,
        "max_tokens": max_tokens,
        "api_key": api_key,
    }
    return ChatAnthropic(**kwargs)


def _message_text(content: Any) -> str:
    """Join the text blocks of a Claude reply (content may be a string or a block list)."""
    if isinstance(content, str):
        return content
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif block.get("type") == "text":
            parts.append(block.get("text", ""))
    if not parts:
        raise ValueError("Anthropic returned no text content")
    return "".join(parts)


class AnthropicLLMProvider(LLMProvider):
    """
    Anthropic LLM provider implementation using LangChain.

    Args:
        api_key: Anthropic API key
        model: Claude model to use (default: "claude-sonnet-4-5")
    """

    provider_name = "anthropic"

    def __init__(self, api_key: str | None = None, model: str = ANTHROPIC_DEFAULT_MODEL) -> None:
        if not api_key or not api_key.strip():
            raise ValueError("Anthropic API key is required for LLM provider")
        if not model or not model.strip():
            raise ValueError("Anthropic LLM model is required")
        if model not in ANTHROPIC_KNOWN_MODELS:
            logger.warning(
                f"Unknown Anthropic model '{model}'. Known models: "
                f"{', '.join(ANTHROPIC_KNOWN_MODELS)}. This may work if it's a newer model."
            )
        self._api_key = api_key
        self._model = model

    @property
    def model_name(self) -> str:
        """Current model name."""
        return self._model

    async def generate(
        self,
        prompt: str,
        *,
        context: str = "",
        system: str | None = None,
        temperature: float = 0.0,
        max_tokens: int = 4096,
    ) -> str:
        """
        Generate a text completion.

        Anthropic accepts temperatures between 0 and 1 only.
        """
        if not prompt or not prompt.strip():
            raise ValueError("Prompt cannot be empty for LLM generation")
        if not 0.0 <= temperature <= 1.0:
            raise ValueError(f"Invalid temperature: {temperature}. Anthropic models accept 0-1.")

        from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

        client = _get_chat_anthropic(
            api_key=self._api_key,
            model=self._model,
            temperature=temperature,
            max_tokens=max_tokens,
        )

        messages: list[BaseMessage] = []
        if system:
            messages.append(SystemMessage(content=system))
        messages.append(HumanMessage(content=compose_prompt(prompt, context)))

        response = await client.ainvoke(messages)
        return _message_text(response.content)

    def with_model(self, model: str) -> "AnthropicLLMProvider":
        """Return a new provider instance with a different model."""
        return type(self)(api_key=self._api_key, model=model)
