"""
Retrieval Pipeline ("ask")

Answers a question from the knowledge graph:
    1. Embed the question
    2. Seed search: documents and/or entities by vector, filtered by scope,
       contexts and validity time, cut at the similarity threshold
    3. Assemble the subgraph around the seeds
    4. Format the context (documents first)
    5. Generate the answer

When the seed search finds nothing the pipeline short-circuits with a
fixed "no relevant information" answer; neither the assembler nor the LLM
is called. That outcome is a normal result, not an error.

Example:
    >>> pipeline = RetrievalPipeline(store, llm, embeddings, scope=scope)
    >>> result = await pipeline.ask("Who works for Acme Corp?")
    >>> print(result.answer)
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from akasha.events.types import AkashaEvent, EventType
from akasha.query.context_builder import format_context
from akasha.query.subgraph import SubgraphAssembler
from akasha.types.graph import Document, Entity, Scope
from akasha.types.options import QueryOptions
from akasha.types.results import AskResult, QueryContext, QueryStatistics
from akasha.utils.properties import scrub_embeddings

if TYPE_CHECKING:
    from akasha.events.emitter import EventEmitter
    from akasha.providers.base import EmbeddingProvider, LLMProvider
    from akasha.storage.base import GraphStore

logger = logging.getLogger(__name__)

DEFAULT_SEED_LIMIT = 10

ANSWER_SYSTEM_PROMPT = (
    "You are a helpful assistant that answers questions based on knowledge graph "
    "context. Use the provided graph structure to give accurate, contextual answers."
)
NO_INFORMATION_ANSWER = (
    "I could not find any relevant information in the knowledge graph "
    "to answer your question."
)
NO_INFORMATION_SUMMARY = "No relevant information found."


def _elapsed_ms(start: int) -> int:
    return (time.perf_counter_ns() - start) // 1_000_000


class RetrievalPipeline:
    """
    ask() orchestration.

    Args:
        store: Graph store to search
        llm: LLM provider for answer generation
        embeddings: Embedding provider for the question
        scope: Restrict search and traversal to this scope (None = all)
        events: Optional emitter for query.started / query.completed
        seed_limit: Result limit of each seed vector search
    """

    def __init__(
        self,
        store: "GraphStore",
        llm: "LLMProvider",
        embeddings: "EmbeddingProvider",
        scope: Scope | None = None,
        events: "EventEmitter | None" = None,
        seed_limit: int = DEFAULT_SEED_LIMIT,
    ) -> None:
        self.store = store
        self.llm = llm
        self.embeddings = embeddings
        self.scope = scope
        self.events = events
        self.seed_limit = seed_limit
        self.assembler = SubgraphAssembler(store)

    def _emit(self, event_type: EventType, **payload) -> None:
        if self.events is not None:
            scope_id = self.scope.id if self.scope else None
            self.events.emit(AkashaEvent(type=event_type, scope_id=scope_id, **payload))

    async def ask(self, query: str, options: QueryOptions | None = None) -> AskResult:
        """
        Answer ``query`` from the graph.

        Args:
            query: Natural-language question
            options: Strategy, limits, filters, threshold, stats flag

        Returns:
            AskResult; ``statistics`` is set only when include_stats is True
        """
        options = options or QueryOptions()
        strategy = options.strategy
        scope_id = self.scope.id if self.scope else None
        self._emit(EventType.QUERY_STARTED, query=query)
        start = time.perf_counter_ns()

        # Seed search
        search_start = time.perf_counter_ns()
        embedding = await self.embeddings.embed_single(query)
        documents, entities = await self._search(embedding, options, scope_id)
        search_ms = _elapsed_ms(search_start)
        logger.info(
            f"Seed search ({strategy.value}): {len(documents)} documents, "
            f"{len(entities)} entities, {search_ms}ms"
        )

        if not documents and not entities:
            result = AskResult(
                context=QueryContext(
                    documents=[] if strategy.searches_documents else None,
                    entities=[],
                    relationships=[],
                    summary=NO_INFORMATION_SUMMARY,
                ),
                answer=NO_INFORMATION_ANSWER,
                statistics=(
                    QueryStatistics(
                        search_time_ms=search_ms,
                        total_time_ms=_elapsed_ms(start),
                        strategy=strategy,
                    )
                    if options.include_stats
                    else None
                ),
            )
            self._emit(EventType.QUERY_COMPLETED, query=query, result=result)
            return result

        # Subgraph
        subgraph_start = time.perf_counter_ns()
        subgraph = await self.assembler.assemble(
            [document.id for document in documents],
            [entity.id for entity in entities],
            max_depth=options.max_depth,
            limit=options.limit,
            scope_id=scope_id,
            seed_entities=entities,
        )
        subgraph_ms = _elapsed_ms(subgraph_start)
        logger.info(
            f"Subgraph: {len(subgraph.entities)} entities, "
            f"{len(subgraph.relationships)} relationships, {subgraph_ms}ms"
        )

        # Answer
        summary = format_context(subgraph.entities, subgraph.relationships, documents)
        llm_start = time.perf_counter_ns()
        answer = await self.llm.generate(query, context=summary, system=ANSWER_SYSTEM_PROMPT)
        llm_ms = _elapsed_ms(llm_start)
        logger.info(f"Answer generation: {llm_ms}ms")

        result_entities = subgraph.entities
        if not options.include_embeddings:
            documents = scrub_embeddings(documents)
            result_entities = scrub_embeddings(result_entities)

        statistics = None
        if options.include_stats:
            statistics = QueryStatistics(
                search_time_ms=search_ms,
                subgraph_retrieval_time_ms=subgraph_ms,
                llm_generation_time_ms=llm_ms,
                total_time_ms=_elapsed_ms(start),
                documents_found=len(documents),
                entities_found=len(result_entities),
                relationships_found=len(subgraph.relationships),
                strategy=strategy,
            )

        result = AskResult(
            context=QueryContext(
                documents=documents if strategy.searches_documents else None,
                entities=result_entities,
                relationships=subgraph.relationships,
                summary=summary,
            ),
            answer=answer,
            statistics=statistics,
        )
        self._emit(EventType.QUERY_COMPLETED, query=query, result=result)
        return result

    async def _search(
        self,
        embedding: list[float],
        options: QueryOptions,
        scope_id: str | None,
    ) -> tuple[list[Document], list[Entity]]:
        """Run the seed searches the strategy asks for, documents first."""
        strategy = options.strategy
        search_kwargs = {
            "limit": self.seed_limit,
            "similarity_threshold": options.similarity_threshold,
            "scope_id": scope_id,
            "contexts": options.contexts,
            "valid_at": options.valid_at,
        }

        documents: list[Document] = []
        entities: list[Entity] = []
        if strategy.searches_documents:
            documents = await self.store.find_documents_by_vector(embedding, **search_kwargs)
        if strategy.searches_entities:
            entities = await self.store.find_entities_by_vector(embedding, **search_kwargs)
        return documents, entities
