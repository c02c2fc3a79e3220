"""
Tests for system metadata, graph types and property helpers.
"""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import BaseModel

from akasha.ingestion.metadata import generate_system_metadata
from akasha.types.graph import ContextIds, Document, Entity
from akasha.types.metadata import isoformat, to_utc
from akasha.utils.properties import (
    entity_embedding_text,
    sanitize_properties,
    truncate_preview,
)


class TestSystemMetadata:
    """recordedAt / validFrom / validTo defaulting."""

    def test_valid_from_defaults_to_recorded_at(self):
        meta = generate_system_metadata()
        props = meta.as_properties()
        assert props["_validFrom"] == props["_recordedAt"]
        assert "_validTo" not in props

    def test_explicit_valid_from_without_valid_to(self):
        meta = generate_system_metadata(valid_from="2020-05-01T00:00:00Z")
        props = meta.as_properties()
        assert props["_validFrom"] == "2020-05-01T00:00:00.000Z"
        assert props["_validFrom"] != props["_recordedAt"]
        assert "_validTo" not in props

    def test_valid_to_is_forwarded(self):
        meta = generate_system_metadata(
            valid_from="2020-01-01T00:00:00Z", valid_to="2021-01-01T00:00:00Z"
        )
        assert meta.as_properties()["_validTo"] == "2021-01-01T00:00:00.000Z"

    def test_explicit_timestamp(self):
        ts = datetime(2024, 2, 3, 4, 5, 6, tzinfo=timezone.utc)
        meta = generate_system_metadata(timestamp=ts)
        assert meta.recorded_at == ts
        assert meta.valid_from == ts

    def test_recorded_at_is_now(self):
        before = datetime.now(timezone.utc) - timedelta(seconds=1)
        meta = generate_system_metadata()
        assert before <= meta.recorded_at <= datetime.now(timezone.utc)


class TestTimestamps:
    def test_to_utc_accepts_z_suffix(self):
        assert to_utc("2024-01-01T12:00:00Z") == datetime(2024, 1, 1, 12, tzinfo=timezone.utc)

    def test_to_utc_converts_offsets(self):
        assert to_utc("2024-01-01T12:00:00+02:00").hour == 10

    def test_naive_is_treated_as_utc(self):
        assert to_utc(datetime(2024, 1, 1)).tzinfo == timezone.utc

    def test_isoformat_milliseconds(self):
        value = datetime(2024, 1, 1, 0, 0, 0, 123456, tzinfo=timezone.utc)
        assert isoformat(value) == "2024-01-01T00:00:00.123Z"


class TestContextIds:
    def test_deduplicates_in_order(self):
        assert ContextIds(["b", "a", "b"]) == ("b", "a")

    def test_add_returns_new_instance(self):
        ids = ContextIds(["a"])
        grown = ids.add("b")
        assert ids == ("a",)
        assert grown == ("a", "b")
        assert isinstance(grown, ContextIds)

    def test_add_existing_returns_self(self):
        ids = ContextIds(["a"])
        assert ids.add("a") is ids

    def test_pydantic_round_trip(self):
        class Holder(BaseModel):
            ids: ContextIds

        holder = Holder.model_validate({"ids": ["x", "y", "x"]})
        assert isinstance(holder.ids, ContextIds)
        assert holder.model_dump()["ids"] == ["x", "y"]


class TestFactProperties:
    def test_document_property_view(self):
        doc = Document(
            id="d1",
            scope_id="S1",
            text="hello",
            context_ids=ContextIds(["c1"]),
            recorded_at="2024-01-01T00:00:00Z",
            valid_from="2024-01-01T00:00:00Z",
            similarity=0.8,
        )
        props = doc.to_properties()
        assert props["scopeId"] == "S1"
        assert props["contextIds"] == ["c1"]
        assert props["_similarity"] == 0.8
        assert "_validTo" not in props

    def test_entity_name_falls_back_to_title(self):
        entity = Entity(
            id="e1",
            scope_id="S1",
            label="Book",
            properties={"title": "Dune"},
            recorded_at="2024-01-01T00:00:00Z",
            valid_from="2024-01-01T00:00:00Z",
        )
        assert entity.name == "Dune"


class TestPropertyHelpers:
    def test_sanitize_drops_reserved_and_underscored(self):
        clean = sanitize_properties(
            {
                "name": "Alice",
                "scopeId": "evil",
                "contextIds": [],
                "_validTo": "2000-01-01",
                "_custom": 1,
                "embedding": [1.0],
                "id": "x",
                "age": 30,
            }
        )
        assert clean == {"name": "Alice", "age": 30}

    def test_sanitize_none(self):
        assert sanitize_properties(None) == {}

    def test_entity_embedding_text(self):
        text = entity_embedding_text(
            "Person",
            {"name": "Alice", "description": "An engineer", "age": 30, "active": True},
        )
        assert text == "Person Alice An engineer age: 30 active: true"

    @pytest.mark.parametrize(
        "text,expected",
        [("short", "short"), ("x" * 200, "x" * 200), ("x" * 201, "x" * 200 + "...")],
    )
    def test_truncate_preview(self, text, expected):
        assert truncate_preview(text) == expected
