"""
Embedding Provider Implementations

Modules:
    openai: OpenAI embeddings (text-embedding-3-small / -large)

Sync LangChain embedding calls run in asyncio.to_thread.

Example:
    >>> from akasha.providers.embedding import OpenAIEmbeddingProvider
    >>> provider = OpenAIEmbeddingProvider(model="text-embedding-3-small")
    >>> vectors = await provider.embed(["Hello", "World"])
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from akasha.providers.embedding.openai import OpenAIEmbeddingProvider


def __getattr__(name: str):
    """Lazy import of providers to avoid requiring all dependencies."""
    if name == "OpenAIEmbeddingProvider":
        from akasha.providers.embedding.openai import OpenAIEmbeddingProvider
        return OpenAIEmbeddingProvider
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["OpenAIEmbeddingProvider"]
