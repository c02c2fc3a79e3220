"""
Exceptions

Error taxonomy for Akasha operations.

    AkashaError
    ├── ConfigurationError   Missing scope, unknown provider/backend, missing API key
    └── ExtractionError      LLM output that is not JSON or not schema-valid

Provider and store failures are not wrapped; they propagate unchanged.
Not-found conditions are returned as values (None / DeleteResult), never raised.
"""


class AkashaError(Exception):
    """Base class for Akasha errors."""


class ConfigurationError(AkashaError, ValueError):
    """Configuration is missing or invalid for the requested operation."""


class ExtractionError(AkashaError, ValueError):
    """The LLM returned a payload that could not be parsed or validated."""

    def __init__(self, message: str, raw_response: str | None = None) -> None:
        super().__init__(message)
        self.raw_response = raw_response


__all__ = ["AkashaError", "ConfigurationError", "ExtractionError"]
