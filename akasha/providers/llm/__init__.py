"""
LLM Provider Implementations

Modules:
    openai: OpenAI provider, also used for OpenAI-compatible endpoints
            (DeepSeek)
    anthropic: Anthropic provider (Claude)

Example:
    >>> from akasha.providers.llm import OpenAILLMProvider
    >>> provider = OpenAILLMProvider(model="gpt-4o-mini")
    >>> response = await provider.generate("Hello!")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from akasha.providers.llm.anthropic import AnthropicLLMProvider
    from akasha.providers.llm.openai import DeepSeekLLMProvider, OpenAILLMProvider


def __getattr__(name: str):
    """Lazy import of providers to avoid requiring all dependencies."""
    if name == "OpenAILLMProvider":
        from akasha.providers.llm.openai import OpenAILLMProvider
        return OpenAILLMProvider
    if name == "DeepSeekLLMProvider":
        from akasha.providers.llm.openai import DeepSeekLLMProvider
        return DeepSeekLLMProvider
    if name == "AnthropicLLMProvider":
        from akasha.providers.llm.anthropic import AnthropicLLMProvider
        return AnthropicLLMProvider
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["OpenAILLMProvider", "DeepSeekLLMProvider", "AnthropicLLMProvider"]
