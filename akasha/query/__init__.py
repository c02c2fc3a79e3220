"""
Retrieval

Modules:
    planner: Over-fetch size and post-search filter predicate
    subgraph: Bounded breadth-first subgraph assembly
    context_builder: LLM context formatting (documents first)
    pipeline: ask() orchestration

Pipeline Phases:
    1. Embed the question
    2. Seed search (documents, entities or both)
    3. Subgraph assembly
    4. Context formatting
    5. Answer generation

Example:
    >>> from akasha.query import RetrievalPipeline
    >>> pipeline = RetrievalPipeline(store, llm, embeddings, scope=scope)
    >>> result = await pipeline.ask("Who works for Acme Corp?")
"""

from akasha.query.planner import SearchPlan, plan_search


def __getattr__(name: str):
    """Lazy import of components that depend on the storage layer."""
    if name == "RetrievalPipeline":
        from akasha.query.pipeline import RetrievalPipeline
        return RetrievalPipeline
    if name == "SubgraphAssembler":
        from akasha.query.subgraph import SubgraphAssembler
        return SubgraphAssembler
    if name == "format_context":
        from akasha.query.context_builder import format_context
        return format_context
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["plan_search", "SearchPlan", "RetrievalPipeline", "SubgraphAssembler", "format_context"]
