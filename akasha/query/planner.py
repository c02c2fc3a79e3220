"""
Retrieval Filter Planner

Shapes a vector search so post-search filtering does not starve recall.

Filtering (scope, contexts, validity time) runs *after* nearest-neighbour
search. Asking the index for only ``limit`` candidates would silently
under-return once filters remove some of them, so whenever a filter is
present the planner over-fetches:

    no filters:   k = limit
    any filter:   k = max(limit * 5, 50)

Candidates are then filtered by the predicate, truncated to ``limit`` and
finally dropped entirely when their score is below the similarity
threshold. An empty result is a valid outcome, never a fallback trigger.

Example:
    >>> plan = plan_search(limit=10, scope_id="tenant-1")
    >>> plan.k
    50
    >>> hits = plan.apply(await store._nearest_entities(vector, plan.k))
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import TypeVar

from akasha.types.graph import Document, Entity
from akasha.types.metadata import to_utc

logger = logging.getLogger(__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.7
OVERFETCH_FACTOR = 5
MIN_FILTERED_K = 50

R = TypeVar("R", Document, Entity)


@dataclass(frozen=True)
class SearchFilters:
    """Post-search constraints on candidate records."""

    scope_id: str | None = None
    contexts: tuple[str, ...] = ()
    valid_at: datetime | None = None

    @property
    def active(self) -> bool:
        return bool(self.scope_id or self.contexts or self.valid_at is not None)

    def matches(self, record: Document | Entity) -> bool:
        """AND of every configured constraint."""
        if self.scope_id is not None and record.scope_id != self.scope_id:
            return False
        if self.contexts:
            if not record.context_ids or not record.context_ids.intersects(self.contexts):
                return False
        if self.valid_at is not None and not record.is_valid_at(self.valid_at):
            return False
        return True


@dataclass(frozen=True)
class SearchPlan:
    """
    Result of plan_search().

    Attributes:
        k: Number of nearest neighbours to request from the index
        limit: Maximum results after filtering
        similarity_threshold: Minimum score of a returned result
        filters: Post-search constraints
    """

    k: int
    limit: int
    similarity_threshold: float
    filters: SearchFilters = field(default_factory=SearchFilters)

    @property
    def predicate(self) -> Callable[[Document | Entity], bool]:
        return self.filters.matches

    def apply(self, candidates: Iterable[tuple[R, float]]) -> list[R]:
        """
        Filter, truncate, then threshold nearest-neighbour candidates.

        Args:
            candidates: ``(record, score)`` pairs, best score first

        Returns:
            Copies of the surviving records with ``similarity`` set
        """
        kept: list[tuple[R, float]] = []
        for record, score in candidates:
            if not self.filters.matches(record):
                continue
            kept.append((record, score))
            if len(kept) == self.limit:
                break

        results = [
            record.model_copy(update={"similarity": score})
            for record, score in kept
            if score >= self.similarity_threshold
        ]
        logger.debug(
            f"Search plan k={self.k} limit={self.limit}: {len(kept)} after filters, "
            f"{len(results)} above threshold {self.similarity_threshold}"
        )
        return results


def plan_search(
    limit: int,
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    scope_id: str | None = None,
    contexts: Sequence[str] | None = None,
    valid_at: datetime | str | None = None,
) -> SearchPlan:
    """
    Compute the over-fetch size and filter predicate for a vector search.

    Args:
        limit: Maximum results the caller wants
        similarity_threshold: Minimum score in [0, 1]
        scope_id: Only records of this scope
        contexts: Only records sharing at least one of these context ids
        valid_at: Only records whose validity window contains this instant

    Returns:
        SearchPlan

    Raises:
        ValueError: If limit < 1 or the threshold is outside [0, 1]
    """
    if limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")
    if not 0.0 <= similarity_threshold <= 1.0:
        raise ValueError(
            f"similarity_threshold must be between 0 and 1, got {similarity_threshold}"
        )

    filters = SearchFilters(
        scope_id=scope_id or None,
        contexts=tuple(contexts or ()),
        valid_at=to_utc(valid_at) if valid_at is not None else None,
    )
    k = max(limit * OVERFETCH_FACTOR, MIN_FILTERED_K) if filters.active else limit
    if k != limit:
        logger.debug(f"Filters present, over-fetching k={k} for limit={limit}")

    return SearchPlan(
        k=k,
        limit=limit,
        similarity_threshold=similarity_threshold,
        filters=filters,
    )
