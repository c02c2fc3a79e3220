"""
AkashaConfig - Configuration Management

Sensible defaults with full override capability.

Example:
    >>> # Use defaults (reads from environment)
    >>> akasha = Akasha()

    >>> # Explicit configuration
    >>> config = AkashaConfig(
    ...     scope_id="tenant-1",
    ...     scope_name="Tenant One",
    ...     storage_backend="duckdb",
    ... )
    >>> akasha = Akasha(config)

    >>> # From config file
    >>> config = AkashaConfig.from_file("./akasha.toml")

Environment Variables:
    AKASHA_SCOPE_ID / AKASHA_SCOPE_TYPE / AKASHA_SCOPE_NAME - Active scope
    AKASHA_LLM_PROVIDER - LLM provider name
    AKASHA_LLM_MODEL - Model for extraction and answers
    AKASHA_LLM_BASE_URL - OpenAI-compatible endpoint override
    AKASHA_EMBEDDING_PROVIDER / AKASHA_EMBEDDING_MODEL - Embeddings
    AKASHA_STORAGE_BACKEND / AKASHA_STORAGE_PATH - Graph store
    AKASHA_SIMILARITY_THRESHOLD - Default ask() similarity threshold
    OPENAI_API_KEY - OpenAI API key (standard name)
    DEEPSEEK_API_KEY - DeepSeek API key
    ANTHROPIC_API_KEY - Anthropic API key
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from akasha.types.graph import Scope
from akasha.types.results import ConfigValidationResult, ValidationIssue

LLM_PROVIDERS = ("openai", "deepseek", "anthropic")
EMBEDDING_PROVIDERS = ("openai",)
STORAGE_BACKENDS = ("memory", "duckdb")

_PROVIDER_KEY_FIELDS = {
    "openai": "openai_api_key",
    "deepseek": "deepseek_api_key",
    "anthropic": "anthropic_api_key",
}


class AkashaConfig:
    """Configuration for Akasha."""

    # === Scope ===

    scope_id: str | None = None
    """Isolation boundary every learned fact is stamped with"""

    scope_type: str = "workspace"
    """Free-form scope kind (tenant, workspace, project, ...)"""

    scope_name: str | None = None
    """Human-readable scope name"""

    # === LLM Configuration ===

    llm_provider: str = "openai"
    """LLM provider: "openai", "deepseek" or "anthropic" """

    llm_model: str = "gpt-4o-mini"
    """Model for extraction and answer generation"""

    llm_base_url: str | None = None
    """Custom OpenAI-compatible endpoint"""

    # === Embedding Configuration ===

    embedding_provider: str = "openai"
    """Embedding provider: "openai" """

    embedding_model: str = "text-embedding-3-small"
    """Embedding model name"""

    # === API Keys ===

    openai_api_key: str | None = None
    deepseek_api_key: str | None = None
    anthropic_api_key: str | None = None

    # === Storage Configuration ===

    storage_backend: str = "memory"
    """Graph store: "memory" or "duckdb" """

    storage_path: str | None = "./akasha.duckdb"
    """Database file for the duckdb backend"""

    # === Extraction Configuration ===

    extraction_temperature: float = 0.3
    """Sampling temperature for the extraction call"""

    # === Query Configuration ===

    query_similarity_threshold: float = 0.7
    """Default minimum similarity for seed documents/entities"""

    query_seed_limit: int = 10
    """Result limit of each seed vector search"""

    query_limit: int = 50
    """Default cap on entities in the assembled subgraph"""

    query_max_depth: int = 2
    """Default traversal depth from seed entities"""

    # === Batch Configuration ===

    batch_preview_chars: int = 200
    """Characters of item text kept in progress/error previews"""

    def __init__(self, **kwargs: Any) -> None:
        """
        Initialize configuration.

        Args:
            **kwargs: Override any configuration option

        Raises:
            ValueError: If a keyword is not a configuration option
        """
        self._load_from_env()
        self._apply(kwargs)

    @classmethod
    def option_names(cls) -> list[str]:
        """Names of all configuration options, in declaration order."""
        return [
            key
            for key, value in vars(cls).items()
            if not key.startswith("_")
            and not callable(value)
            and not isinstance(value, (property, classmethod, staticmethod))
        ]

    def _apply(self, values: dict[str, Any]) -> None:
        options = self.option_names()
        for key, value in values.items():
            if key not in options:
                raise ValueError(f"Unknown configuration option: {key}")
            setattr(self, key, value)

    def _load_from_env(self) -> None:
        """Load configuration from environment variables."""
        if key := os.getenv("OPENAI_API_KEY"):
            self.openai_api_key = key
        if key := os.getenv("DEEPSEEK_API_KEY"):
            self.deepseek_api_key = key
        if key := os.getenv("ANTHROPIC_API_KEY"):
            self.anthropic_api_key = key

        if scope_id := os.getenv("AKASHA_SCOPE_ID"):
            self.scope_id = scope_id
        if scope_type := os.getenv("AKASHA_SCOPE_TYPE"):
            self.scope_type = scope_type
        if scope_name := os.getenv("AKASHA_SCOPE_NAME"):
            self.scope_name = scope_name

        if provider := os.getenv("AKASHA_LLM_PROVIDER"):
            self.llm_provider = provider
        if model := os.getenv("AKASHA_LLM_MODEL"):
            self.llm_model = model
        if base_url := os.getenv("AKASHA_LLM_BASE_URL"):
            self.llm_base_url = base_url
        if provider := os.getenv("AKASHA_EMBEDDING_PROVIDER"):
            self.embedding_provider = provider
        if model := os.getenv("AKASHA_EMBEDDING_MODEL"):
            self.embedding_model = model

        if backend := os.getenv("AKASHA_STORAGE_BACKEND"):
            self.storage_backend = backend
        if path := os.getenv("AKASHA_STORAGE_PATH"):
            self.storage_path = path
        if threshold := os.getenv("AKASHA_SIMILARITY_THRESHOLD"):
            self.query_similarity_threshold = float(threshold)

    @classmethod
    def from_file(cls, path: str | Path, **overrides: Any) -> "AkashaConfig":
        """
        Load configuration from TOML file.

        Nested sections are flattened with their prefix. Environment
        variables win over file values; ``overrides`` win over both.

        Example TOML:
            [scope]
            id = "tenant-1"
            name = "Tenant One"

            [llm]
            provider = "deepseek"
            model = "deepseek-chat"

            [storage]
            backend = "duckdb"
            path = "./graph.duckdb"

            [api_keys]
            openai = "sk-..."

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If the file contains an unknown option
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "rb") as f:
            data = tomllib.load(f)

        flat_config: dict[str, Any] = {}

        section_mapping = {
            "scope": "scope_",
            "llm": "llm_",
            "embedding": "embedding_",
            "storage": "storage_",
            "query": "query_",
            "api_keys": "",
        }

        for section, prefix in section_mapping.items():
            if section in data:
                for key, value in data[section].items():
                    if section == "api_keys":
                        # api_keys.openai -> openai_api_key
                        flat_config[f"{key}_api_key"] = value
                    else:
                        flat_config[f"{prefix}{key}"] = value

        for key, value in data.items():
            if key not in section_mapping and not isinstance(value, dict):
                flat_config[key] = value

        config = cls.__new__(cls)
        config._apply(flat_config)
        config._load_from_env()
        config._apply(overrides)
        return config

    @classmethod
    def from_env(cls) -> "AkashaConfig":
        """Load configuration from environment variables only."""
        return cls()

    def with_overrides(self, **kwargs: Any) -> "AkashaConfig":
        """Return new config with specified overrides."""
        new_config = AkashaConfig.__new__(AkashaConfig)
        for key in self.option_names():
            setattr(new_config, key, getattr(self, key))
        new_config._apply(kwargs)
        return new_config

    # -------------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------------

    @property
    def scope(self) -> Scope | None:
        """The configured scope, or None when scope fields are incomplete."""
        if not self.scope_id:
            return None
        return Scope(
            id=self.scope_id,
            type=self.scope_type or "workspace",
            name=self.scope_name or self.scope_id,
        )

    def api_key_for(self, provider: str) -> str | None:
        field = _PROVIDER_KEY_FIELDS.get(provider)
        return getattr(self, field) if field else None

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate(self) -> ConfigValidationResult:
        """
        Check the configuration without touching any external service.

        Returns:
            ConfigValidationResult; ``valid`` is False when any error exists
        """
        errors: list[ValidationIssue] = []
        warnings: list[ValidationIssue] = []

        def error(field: str, message: str) -> None:
            errors.append(ValidationIssue(field=field, message=message))

        def warn(field: str, message: str) -> None:
            warnings.append(ValidationIssue(field=field, message=message))

        scope_fields = {
            "scope_id": self.scope_id,
            "scope_type": self.scope_type,
            "scope_name": self.scope_name,
        }
        if self.scope_id or self.scope_name:
            for name, value in scope_fields.items():
                if not value:
                    error(name, f"{name} is required when a scope is configured")
        elif not self.scope_id:
            warn("scope_id", "No scope configured; learn() will be unavailable")

        if self.llm_provider not in LLM_PROVIDERS:
            error(
                "llm_provider",
                f"Unknown LLM provider '{self.llm_provider}' "
                f"(expected one of {', '.join(LLM_PROVIDERS)})",
            )
        if self.llm_provider in _PROVIDER_KEY_FIELDS and not self.api_key_for(
            self.llm_provider
        ):
            error(
                _PROVIDER_KEY_FIELDS[self.llm_provider],
                f"API key is required for LLM provider '{self.llm_provider}'",
            )

        if self.embedding_provider not in EMBEDDING_PROVIDERS:
            error(
                "embedding_provider",
                f"Unknown embedding provider '{self.embedding_provider}'",
            )
        elif not self.api_key_for(self.embedding_provider):
            error(
                _PROVIDER_KEY_FIELDS[self.embedding_provider],
                f"API key is required for embedding provider '{self.embedding_provider}'",
            )

        if self.storage_backend not in STORAGE_BACKENDS:
            error(
                "storage_backend",
                f"Unknown storage backend '{self.storage_backend}' "
                f"(expected one of {', '.join(STORAGE_BACKENDS)})",
            )
        elif self.storage_backend == "duckdb" and not self.storage_path:
            error("storage_path", "storage_path is required for the duckdb backend")

        if not 0.0 <= self.query_similarity_threshold <= 1.0:
            error(
                "query_similarity_threshold",
                "Similarity threshold must be between 0 and 1",
            )
        for name in ("query_seed_limit", "query_limit", "batch_preview_chars"):
            if getattr(self, name) < 1:
                error(name, f"{name} must be a positive integer")
        if not 1 <= self.query_max_depth <= 10:
            error("query_max_depth", "query_max_depth must be between 1 and 10")

        return ConfigValidationResult(
            valid=not errors, errors=errors, warnings=warnings
        )

    def __repr__(self) -> str:
        return (
            f"AkashaConfig(scope_id={self.scope_id!r}, "
            f"llm={self.llm_provider}/{self.llm_model}, "
            f"embedding={self.embedding_provider}/{self.embedding_model}, "
            f"storage={self.storage_backend})"
        )
