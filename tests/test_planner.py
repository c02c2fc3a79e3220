"""
Tests for the retrieval filter planner.
"""

from datetime import datetime, timezone

import pytest

from akasha.query.planner import SearchFilters, plan_search
from akasha.types.graph import ContextIds, Entity

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_entity(
    entity_id: str,
    scope_id: str = "S1",
    context_ids: tuple[str, ...] = ("ctx-1",),
    valid_from: datetime = T0,
    valid_to: datetime | None = None,
) -> Entity:
    return Entity(
        id=entity_id,
        scope_id=scope_id,
        label="Person",
        properties={"name": entity_id},
        context_ids=ContextIds(context_ids),
        recorded_at=T0,
        valid_from=valid_from,
        valid_to=valid_to,
    )


class TestOverFetch:
    """k-expansion rules."""

    def test_no_filters_uses_limit(self):
        plan = plan_search(limit=10)
        assert plan.k == 10
        assert not plan.filters.active

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"scope_id": "S1"},
            {"contexts": ["ctx-1"]},
            {"valid_at": "2024-06-01T00:00:00Z"},
        ],
    )
    def test_any_filter_expands_k(self, kwargs):
        plan = plan_search(limit=3, **kwargs)
        assert plan.k == 50
        assert plan.limit == 3

    def test_large_limit_expands_by_factor(self):
        assert plan_search(limit=20, scope_id="S1").k == 100

    def test_empty_contexts_is_not_a_filter(self):
        assert plan_search(limit=4, contexts=[]).k == 4

    @pytest.mark.parametrize("limit", [1, 5, 10, 11, 50, 200])
    def test_filtered_k_never_below_recall_floor(self, limit):
        k = plan_search(limit=limit, scope_id="S1").k
        assert k >= limit * 5 and k >= 50

    def test_rejects_invalid_arguments(self):
        with pytest.raises(ValueError):
            plan_search(limit=0)
        with pytest.raises(ValueError):
            plan_search(limit=5, similarity_threshold=1.5)
        with pytest.raises(ValueError):
            plan_search(limit=5, similarity_threshold=-0.1)


class TestPredicate:
    """Post-search filter semantics."""

    def test_scope_equality(self):
        plan = plan_search(limit=5, scope_id="S1")
        assert plan.predicate(make_entity("a", scope_id="S1"))
        assert not plan.predicate(make_entity("b", scope_id="S2"))

    def test_contexts_must_intersect(self):
        plan = plan_search(limit=5, contexts=["ctx-2", "ctx-9"])
        assert plan.predicate(make_entity("a", context_ids=("ctx-1", "ctx-2")))
        assert not plan.predicate(make_entity("b", context_ids=("ctx-1",)))
        assert not plan.predicate(make_entity("c", context_ids=()))

    def test_temporal_containment(self):
        plan = plan_search(limit=5, valid_at="2024-06-01T00:00:00Z")
        assert plan.predicate(make_entity("open"))
        assert plan.predicate(
            make_entity("closed", valid_to=datetime(2024, 6, 1, tzinfo=timezone.utc))
        )
        assert not plan.predicate(
            make_entity("expired", valid_to=datetime(2024, 3, 1, tzinfo=timezone.utc))
        )
        assert not plan.predicate(
            make_entity("future", valid_from=datetime(2025, 1, 1, tzinfo=timezone.utc))
        )

    def test_filters_combine_with_and(self):
        filters = SearchFilters(scope_id="S1", contexts=("ctx-1",))
        assert filters.matches(make_entity("a"))
        assert not filters.matches(make_entity("b", scope_id="S2"))
        assert not filters.matches(make_entity("c", context_ids=("ctx-3",)))


class TestApply:
    """Filter, truncate, then threshold."""

    def test_threshold_drops_low_scores(self):
        plan = plan_search(limit=5, similarity_threshold=0.7)
        candidates = [(make_entity("a"), 0.95), (make_entity("b"), 0.7), (make_entity("c"), 0.69)]
        results = plan.apply(candidates)
        assert [e.id for e in results] == ["a", "b"]
        assert [e.similarity for e in results] == [0.95, 0.7]

    def test_truncates_before_threshold(self):
        plan = plan_search(limit=2, similarity_threshold=0.5)
        candidates = [(make_entity("a"), 0.9), (make_entity("b"), 0.4), (make_entity("c"), 0.8)]
        # Truncation keeps a and b; b is then below threshold; c never considered
        assert [e.id for e in plan.apply(candidates)] == ["a"]

    def test_filters_before_truncation(self):
        plan = plan_search(limit=2, scope_id="S1", similarity_threshold=0.0)
        candidates = [
            (make_entity("x", scope_id="S2"), 0.99),
            (make_entity("a"), 0.9),
            (make_entity("y", scope_id="S2"), 0.85),
            (make_entity("b"), 0.8),
            (make_entity("c"), 0.7),
        ]
        assert [e.id for e in plan.apply(candidates)] == ["a", "b"]

    def test_empty_result_is_not_an_error(self):
        plan = plan_search(limit=5, similarity_threshold=0.99)
        assert plan.apply([(make_entity("a"), 0.5)]) == []

    def test_does_not_mutate_candidates(self):
        entity = make_entity("a")
        plan_search(limit=1, similarity_threshold=0.0).apply([(entity, 0.9)])
        assert entity.similarity is None
