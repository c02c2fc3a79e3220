"""
System Metadata Generator

Stamps temporal/provenance fields onto every fact created by learn().

    recorded_at  always the ingestion timestamp
    valid_from   caller-supplied, else recorded_at
    valid_to     caller-supplied, else absent (ongoing)

One SystemMetadata is generated per learn() call and shared by every
document, entity and relationship that call creates.
"""

from __future__ import annotations

from datetime import datetime, timezone

from akasha.types.metadata import SystemMetadata, to_utc


def utc_now() -> datetime:
    """Current time as an aware UTC datetime, truncated to milliseconds."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def generate_system_metadata(
    timestamp: datetime | None = None,
    valid_from: datetime | str | None = None,
    valid_to: datetime | str | None = None,
) -> SystemMetadata:
    """
    Build the system metadata for one ingestion call.

    Args:
        timestamp: Ingestion time (default: now)
        valid_from: When the facts become true (default: ``timestamp``)
        valid_to: When the facts stop being true (default: ongoing)

    Returns:
        SystemMetadata

    Example:
        >>> meta = generate_system_metadata(valid_from="2024-01-01T00:00:00Z")
        >>> "_validTo" in meta.as_properties()
        False
    """
    recorded_at = to_utc(timestamp) if timestamp is not None else utc_now()
    return SystemMetadata(
        recorded_at=recorded_at,
        valid_from=to_utc(valid_from) if valid_from else recorded_at,
        valid_to=to_utc(valid_to) if valid_to else None,
    )
