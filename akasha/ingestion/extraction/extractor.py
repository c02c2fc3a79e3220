"""
Entity/Relationship Extractor

Single LLM call per text: the ontology-template system prompt plus the
text, expecting

    {"entities": [{"label", "properties"}],
     "relationships": [{"from", "to", "type", "properties"}]}

Parsing:
    1. Strip Markdown code fences
    2. Take the outermost {...} span
    3. json.loads + pydantic validation

Malformed JSON, missing arrays or invalid entities raise ExtractionError
(fatal for the learn() call). Invalid relationships are only dropped:
missing endpoint/type, a type that is not UPPER_SNAKE_CASE, self-references
and duplicate (from, to, type) triples.

Example:
    >>> extractor = Extractor(llm)
    >>> output = await extractor.extract("Alice works for Acme Corp.")
    >>> [e.name for e in output.entities]
    ['Alice', 'Acme Corp']
"""

from __future__ import annotations

import json
import logging
import re
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from akasha.errors import ExtractionError
from akasha.ingestion.extraction.prompt import generate_extraction_prompt
from akasha.types.extraction import (
    ExtractedEntity,
    ExtractedRelationship,
    ExtractionOutput,
    ExtractionPromptTemplate,
)

if TYPE_CHECKING:
    from akasha.providers.base import LLMProvider

logger = logging.getLogger(__name__)

RELATIONSHIP_TYPE_PATTERN = re.compile(r"^[A-Z][A-Z0-9_]*$")
_FENCE_PATTERN = re.compile(r"^```[a-zA-Z0-9_-]*\s*\n(.*?)\n?```\s*$", re.DOTALL)
_OBJECT_PATTERN = re.compile(r"\{.*\}", re.DOTALL)

DEFAULT_EXTRACTION_TEMPERATURE = 0.3


def _strip_fences(text: str) -> str:
    text = text.strip()
    match = _FENCE_PATTERN.match(text)
    return match.group(1) if match else text


def _filter_relationships(raw: list[Any]) -> list[ExtractedRelationship]:
    relationships: list[ExtractedRelationship] = []
    seen: set[tuple[str, str, str]] = set()

    for entry in raw:
        if not isinstance(entry, dict) or not (
            entry.get("from") and entry.get("to") and entry.get("type")
        ):
            logger.warning("Skipping invalid relationship: missing from, to, or type")
            continue
        rel_type = entry["type"]
        if not isinstance(rel_type, str) or not RELATIONSHIP_TYPE_PATTERN.match(rel_type):
            logger.warning(f"Skipping invalid relationship type: {rel_type}")
            continue
        try:
            relationship = ExtractedRelationship.model_validate(entry)
        except ValidationError as e:
            logger.warning(f"Skipping invalid relationship {entry!r}: {e.error_count()} errors")
            continue
        if relationship.from_name == relationship.to_name:
            logger.warning(
                f"Skipping self-referential relationship: "
                f"{relationship.from_name} --[{rel_type}]--> {relationship.to_name}"
            )
            continue
        if relationship.key in seen:
            logger.warning(
                f"Skipping duplicate relationship: "
                f"{relationship.from_name} --[{rel_type}]--> {relationship.to_name}"
            )
            continue
        seen.add(relationship.key)
        relationships.append(relationship)

    return relationships


def parse_extraction_response(response: str) -> ExtractionOutput:
    """
    Parse and validate the raw LLM extraction response.

    Raises:
        ExtractionError: Not JSON, missing arrays, or an invalid entity
    """
    json_text = _strip_fences(response)
    match = _OBJECT_PATTERN.search(json_text)
    if match:
        json_text = match.group(0)

    try:
        payload = json.loads(json_text)
    except json.JSONDecodeError as e:
        raise ExtractionError(
            f"Failed to extract graph structure: invalid JSON ({e.msg})",
            raw_response=response,
        ) from e

    if not isinstance(payload, dict) or not isinstance(payload.get("entities"), list):
        raise ExtractionError(
            "Failed to extract graph structure: missing entities array",
            raw_response=response,
        )
    if not isinstance(payload.get("relationships"), list):
        raise ExtractionError(
            "Failed to extract graph structure: missing relationships array",
            raw_response=response,
        )

    entities: list[ExtractedEntity] = []
    for entry in payload["entities"]:
        try:
            entities.append(ExtractedEntity.model_validate(entry))
        except ValidationError as e:
            raise ExtractionError(
                f"Failed to extract graph structure: invalid entity {entry!r}",
                raw_response=response,
            ) from e

    return ExtractionOutput(
        entities=entities,
        relationships=_filter_relationships(payload["relationships"]),
    )


class Extractor:
    """
    LLM-backed extractor.

    Args:
        llm: LLM provider for the extraction call
        template: Optional partial prompt template (merged over defaults)
        temperature: Sampling temperature for the extraction call
    """

    def __init__(
        self,
        llm: "LLMProvider",
        template: ExtractionPromptTemplate | None = None,
        temperature: float = DEFAULT_EXTRACTION_TEMPERATURE,
    ) -> None:
        self.llm = llm
        self.template = template
        self.temperature = temperature
        self.system_prompt = generate_extraction_prompt(template)

    async def extract(self, text: str) -> ExtractionOutput:
        """Extract entities and relationships from ``text``."""
        prompt = f"Extract all entities and relationships from the following text:\n\n{text}"
        response = await self.llm.generate(
            prompt,
            system=self.system_prompt,
            temperature=self.temperature,
        )
        try:
            return parse_extraction_response(response)
        except ExtractionError:
            logger.error(f"Failed to parse LLM extraction response: {response[:500]}")
            raise
