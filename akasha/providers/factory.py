"""
Provider Factory

Builds LLM and embedding providers from an AkashaConfig.
"""

from __future__ import annotations

from akasha.config.settings import AkashaConfig
from akasha.errors import ConfigurationError
from akasha.providers.base import EmbeddingProvider, LLMProvider


def create_llm_provider(config: AkashaConfig) -> LLMProvider:
    """
    Create the configured LLM provider.

    Raises:
        ConfigurationError: Unknown provider or missing API key
    """
    provider = config.llm_provider
    api_key = config.api_key_for(provider)

    if provider == "openai":
        if not api_key:
            raise ConfigurationError("OpenAI API key is required (set OPENAI_API_KEY)")
        from akasha.providers.llm.openai import OpenAILLMProvider

        return OpenAILLMProvider(
            api_key=api_key, model=config.llm_model, base_url=config.llm_base_url
        )

    if provider == "deepseek":
        if not api_key:
            raise ConfigurationError("DeepSeek API key is required (set DEEPSEEK_API_KEY)")
        from akasha.providers.llm.openai import DEEPSEEK_DEFAULT_MODEL, DeepSeekLLMProvider

        model = config.llm_model
        if model == AkashaConfig.llm_model:
            model = DEEPSEEK_DEFAULT_MODEL
        return DeepSeekLLMProvider(api_key=api_key, model=model, base_url=config.llm_base_url)

    if provider == "anthropic":
        if not api_key:
            raise ConfigurationError("Anthropic API key is required (set ANTHROPIC_API_KEY)")
        from akasha.providers.llm.anthropic import ANTHROPIC_DEFAULT_MODEL, AnthropicLLMProvider

        model = config.llm_model
        if model == AkashaConfig.llm_model:
            model = ANTHROPIC_DEFAULT_MODEL
        return AnthropicLLMProvider(api_key=api_key, model=model)

    raise ConfigurationError(
        f"Unknown LLM provider type: '{provider}'. "
        "Supported providers: 'openai', 'deepseek', 'anthropic'."
    )


def create_embedding_provider(config: AkashaConfig) -> EmbeddingProvider:
    """
    Create the configured embedding provider.

    Raises:
        ConfigurationError: Unknown provider or missing API key
    """
    provider = config.embedding_provider

    if provider == "openai":
        api_key = config.api_key_for("openai")
        if not api_key:
            raise ConfigurationError(
                "OpenAI API key is required for embeddings (set OPENAI_API_KEY)"
            )
        from akasha.providers.embedding.openai import OpenAIEmbeddingProvider

        return OpenAIEmbeddingProvider(api_key=api_key, model=config.embedding_model)

    raise ConfigurationError(
        f"Unknown embedding provider type: '{provider}'. Supported providers: 'openai'."
    )
