"""
Abstract Provider Interfaces

Base classes for LLM and embedding providers. The pipelines depend only on
these interfaces; concrete providers are injected by the facade.
"""

from abc import ABC, abstractmethod


def compose_prompt(prompt: str, context: str = "") -> str:
    """Prepend retrieved context to a question, when there is any."""
    if not context:
        return prompt
    return f"Context:\n{context}\n\nQuestion: {prompt}"


class LLMProvider(ABC):
    """Abstract interface for LLM providers."""

    provider_name: str = "unknown"

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        *,
        context: str = "",
        system: str | None = None,
        temperature: float = 0.0,
        max_tokens: int = 4096,
    ) -> str:
        """Generate a completion, optionally grounded in ``context``."""
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Current model name."""
        ...


class EmbeddingProvider(ABC):
    """Abstract interface for embedding providers."""

    provider_name: str = "unknown"

    @abstractmethod
    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings for texts."""
        ...

    @abstractmethod
    async def embed_single(self, text: str) -> list[float]:
        """Generate embedding for a single text."""
        ...

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Embedding dimensions."""
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Current model name."""
        ...
