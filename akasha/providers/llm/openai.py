"""
OpenAI LLM Provider (LangChain-based)

Implements LLMProvider using LangChain's ChatOpenAI. DeepSeek exposes an
OpenAI-compatible API, so DeepSeekLLMProvider is the same client pointed
at DeepSeek's base URL.

Models:
    - gpt-4o-mini: Fast and cheap, default for extraction and answers
    - gpt-4o: Best quality
    - deepseek-chat / deepseek-reasoner (DeepSeek)

Example:
    >>> provider = OpenAILLMProvider(api_key="sk-...", model="gpt-4o-mini")
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
    from langchain_openai import ChatOpenAI

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"

DEEPSEEK_BASE_URL = "https://api.deepseek.com"
DEEPSEEK_DEFAULT_MODEL = "deepseek-chat"
DEEPSEEK_KNOWN_MODELS = ("deepseek-chat", "deepseek-reasoner")


def _get_chat_openai(
    api_key: str | None = None,
    model: str = DEFAULT_MODEL,
    temperature: float = 0.0,
    base_url: str | None = None,
) -> "ChatOpenAI":
    """
    Get a ChatOpenAI instance.

    Uses lazy import to avoid requiring langchain-openai unless actually used.

    Raises:
        ImportError: If langchain-openai package is not installed
    """
    try:
        from langchain_openai import ChatOpenAI
    except ImportError:
        raise ImportError(
            "OpenAI provider requires the 'langchain-openai' package. "
            "Install with: pip install akasha"
        )

    kwargs: dict[str, Any] = {"model": model, "temperature": temperature}
    if api_key:
        kwargs["api_key"] = api_key
    if base_url:
        kwargs["base_url"] = base_url

    return ChatOpenAI(**kwargs)


class OpenAILLMProvider(LLMProvider):
    """
    OpenAI LLM provider implementation using LangChain.

    Args:
        api_key: OpenAI API key. If None, uses OPENAI_API_KEY environment variable.
        model: Model to use (default: "gpt-4o-mini")
        base_url: Optional OpenAI-compatible endpoint
    """

    provider_name = "openai"

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        base_url: str | None = None,
    ) -> None:
        if not model or not model.strip():
            raise ValueError("LLM model is required")
        self._api_key = api_key
        self._model = model
        self._base_url = base_url

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

        Args:
            prompt: User prompt/question
            context: Retrieved knowledge; when non-empty the prompt becomes
                "Context:\\n{context}\\n\\nQuestion: {prompt}"
            system: Optional system message
            temperature: Sampling temperature (0.0 = deterministic)
            max_tokens: Maximum tokens in response

        Returns:
            Generated text response
        """
        if not prompt or not prompt.strip():
            raise ValueError("Prompt cannot be empty for LLM generation")

        from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

        client = _get_chat_openai(
            api_key=self._api_key,
            model=self._model,
            temperature=temperature,
            base_url=self._base_url,
        ).bind(max_tokens=max_tokens)

        messages: list[BaseMessage] = []
        if system:
            messages.append(SystemMessage(content=system))
        messages.append(HumanMessage(content=compose_prompt(prompt, context)))

        response = await client.ainvoke(messages)
        return str(response.content)

    def with_model(self, model: str) -> "OpenAILLMProvider":
        """Return a new provider instance with a different model."""
        return type(self)(api_key=self._api_key, model=model, base_url=self._base_url)


class DeepSeekLLMProvider(OpenAILLMProvider):
    """
    DeepSeek LLM provider (OpenAI-compatible API).

    DeepSeek has no embedding models; pair it with an OpenAI embedding
    provider.
    """

    provider_name = "deepseek"

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEEPSEEK_DEFAULT_MODEL,
        base_url: str | None = None,
    ) -> None:
        if not api_key or not api_key.strip():
            raise ValueError("DeepSeek API key is required for LLM provider")
        if model not in DEEPSEEK_KNOWN_MODELS:
            logger.warning(
                f"Unknown DeepSeek model '{model}'. Known models: "
                f"{', '.join(DEEPSEEK_KNOWN_MODELS)}. This may work if it's a newer model."
            )
        super().__init__(api_key=api_key, model=model, base_url=base_url or DEEPSEEK_BASE_URL)
