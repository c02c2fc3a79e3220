"""
Subgraph Assembler

Expands seed documents/entities into a bounded neighbourhood.

Algorithm:
    1. Seeds: direct entity seeds first, then the entities linked to the
       seed documents (CONTAINS_ENTITY), deduplicated by id
    2. Breadth-first expansion, one hop per round, via
       ``get_relationships_for_entities``
    3. ``limit`` caps the total entity count. Neighbours are fetched no
       more than the remaining room at a time, and no entity is fetched
       once the cap is reached
    4. Relationships are accumulated hop by hop and kept when both
       endpoints are returned. After the cap is reached the newest
       frontier's edges are still read, so edges among returned entities
       within ``max_depth`` hops are kept

Example:
    >>> assembler = SubgraphAssembler(store)
    >>> subgraph = await assembler.assemble([doc.id], [alice.id], max_depth=2, limit=50)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from akasha.types.graph import Entity, Relationship, Subgraph

if TYPE_CHECKING:
    from akasha.storage.base import GraphStore

logger = logging.getLogger(__name__)

MAX_DEPTH = 10


class SubgraphAssembler:
    """Bounded breadth-first traversal over a GraphStore."""

    def __init__(self, store: "GraphStore") -> None:
        self.store = store

    async def assemble(
        self,
        seed_document_ids: Sequence[str],
        seed_entity_ids: Sequence[str],
        max_depth: int,
        limit: int,
        scope_id: str | None = None,
        seed_entities: Sequence[Entity] | None = None,
    ) -> Subgraph:
        """
        Collect entities and relationships around the seeds.

        Args:
            seed_document_ids: Documents whose linked entities seed traversal
            seed_entity_ids: Entities that seed traversal directly
            max_depth: Hops from the seeds (1-10)
            limit: Maximum number of entities returned
            scope_id: Restrict every lookup to this scope
            seed_entities: Already-loaded records for ``seed_entity_ids``

        Returns:
            Subgraph with deduplicated entities and relationships

        Raises:
            ValueError: If max_depth is outside 1-10 or limit < 1
        """
        if not 1 <= max_depth <= MAX_DEPTH:
            raise ValueError(f"max_depth must be between 1 and {MAX_DEPTH}, got {max_depth}")
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")

        included: dict[str, Entity] = {}

        def admit(entities: Sequence[Entity]) -> list[str]:
            admitted = []
            for entity in entities:
                if len(included) >= limit:
                    break
                if entity.id not in included:
                    included[entity.id] = entity
                    admitted.append(entity.id)
            return admitted

        async def admit_neighbours(candidate_ids: list[str]) -> list[str]:
            # Fetch no more than the remaining room at a time
            admitted = []
            position = 0
            while position < len(candidate_ids) and len(included) < limit:
                batch = candidate_ids[position : position + limit - len(included)]
                position += len(batch)
                admitted.extend(admit(await self.store.get_entities(batch, scope_id)))
            return admitted

        # Seeds
        loaded = {entity.id: entity for entity in seed_entities or ()}
        missing = [entity_id for entity_id in seed_entity_ids if entity_id not in loaded]
        if missing:
            for entity in await self.store.get_entities(missing, scope_id):
                loaded[entity.id] = entity
        admit([loaded[entity_id] for entity_id in seed_entity_ids if entity_id in loaded])

        if seed_document_ids and len(included) < limit:
            admit(await self.store.get_entities_from_documents(seed_document_ids, scope_id))

        # Expansion
        collected: dict[str, Relationship] = {}
        frontier = list(included)
        depth = 0
        while frontier and depth < max_depth:
            depth += 1
            candidates: dict[str, None] = {}
            for rel in await self.store.get_relationships_for_entities(frontier, scope_id):
                collected.setdefault(rel.id, rel)
                for endpoint in (rel.from_id, rel.to_id):
                    if endpoint not in included:
                        candidates[endpoint] = None
            frontier = await admit_neighbours(list(candidates))

        relationships = [
            rel
            for rel in collected.values()
            if rel.from_id in included and rel.to_id in included
        ]
        logger.debug(
            f"Assembled subgraph: {len(included)} entities, {len(relationships)} "
            f"relationships, depth {depth}/{max_depth}"
        )
        return Subgraph(entities=list(included.values()), relationships=relationships)

