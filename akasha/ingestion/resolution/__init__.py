"""
Identity Resolution

Exact-match create-or-reuse decisions for documents and entities.

Modules:
    identity: IdentityResolver
"""

from akasha.ingestion.resolution.identity import IdentityResolver

__all__ = ["IdentityResolver"]
