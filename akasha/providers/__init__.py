"""
LLM and Embedding Providers

Provider-agnostic interfaces for LLM and embedding operations.

Modules:
    base: Abstract provider interfaces
    factory: Build providers from AkashaConfig
    llm/: LLM provider implementations
    embedding/: Embedding provider implementations

Supported LLM Providers:
    - OpenAI (gpt-4o, gpt-4o-mini) via LangChain
    - DeepSeek (deepseek-chat, deepseek-reasoner) via LangChain's
      OpenAI-compatible client

Supported Embedding Providers:
    - OpenAI (text-embedding-3-small / -large) via LangChain

Example:
    >>> from akasha.providers import LLMProvider, EmbeddingProvider
    >>> from akasha.providers.llm import OpenAILLMProvider
    >>> from akasha.providers.embedding import OpenAIEmbeddingProvider
"""

from akasha.providers.base import EmbeddingProvider, LLMProvider, compose_prompt

__all__ = ["LLMProvider", "EmbeddingProvider", "compose_prompt"]
