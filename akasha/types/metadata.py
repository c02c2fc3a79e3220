"""
System Metadata Types

Temporal/provenance fields stamped on every document, entity and
relationship. System metadata describes when a fact was recorded and when
it is considered true; it is separate from domain data extracted from text.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, field_validator

# Property keys owned by the system. User-supplied property bags may never
# set these (see akasha.utils.properties.sanitize_properties).
RECORDED_AT_KEY = "_recordedAt"
VALID_FROM_KEY = "_validFrom"
VALID_TO_KEY = "_validTo"
SIMILARITY_KEY = "_similarity"


def to_utc(value: datetime | str) -> datetime:
    """Parse an ISO-8601 string or datetime into an aware UTC datetime."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def isoformat(value: datetime) -> str:
    """Render a UTC datetime with millisecond precision and a Z suffix."""
    return to_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class SystemMetadata(BaseModel):
    """
    Temporal fields of a fact.

    Attributes:
        recorded_at: When the fact entered the system (always ingestion time)
        valid_from: When the fact becomes true (defaults to recorded_at)
        valid_to: When the fact stops being true (None = ongoing)
    """

    recorded_at: datetime
    valid_from: datetime
    valid_to: datetime | None = None

    @field_validator("recorded_at", "valid_from", "valid_to", mode="before")
    @classmethod
    def _coerce_utc(cls, value: Any) -> Any:
        if value is None:
            return None
        return to_utc(value)

    def as_properties(self) -> dict[str, str]:
        """
        Flatten to stored property keys.

        ``_validTo`` is omitted entirely (not set to null) for ongoing facts.
        """
        props = {
            RECORDED_AT_KEY: isoformat(self.recorded_at),
            VALID_FROM_KEY: isoformat(self.valid_from),
        }
        if self.valid_to is not None:
            props[VALID_TO_KEY] = isoformat(self.valid_to)
        return props
