"""
Ingestion

Modules:
    metadata: System metadata (recordedAt / validFrom / validTo) stamps
    resolution/: Exact-match identity resolution for documents and entities
    extraction/: LLM entity/relationship extraction
    pipeline: learn() orchestration
    batch: Sequential learn_batch() with per-item isolation
"""


def __getattr__(name: str):
    """Lazy import of pipeline classes."""
    if name == "IngestionPipeline":
        from akasha.ingestion.pipeline import IngestionPipeline
        return IngestionPipeline
    if name == "BatchCoordinator":
        from akasha.ingestion.batch import BatchCoordinator
        return BatchCoordinator
    if name == "generate_system_metadata":
        from akasha.ingestion.metadata import generate_system_metadata
        return generate_system_metadata
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["IngestionPipeline", "BatchCoordinator", "generate_system_metadata"]
