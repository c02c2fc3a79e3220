"""
LLM-Based Extraction

Modules:
    prompt: Extraction prompt templates (defaults + partial overrides)
    extractor: LLM call and lenient/strict response parsing
"""

from akasha.ingestion.extraction.extractor import Extractor, parse_extraction_response
from akasha.ingestion.extraction.prompt import (
    DEFAULT_EXTRACTION_TEMPLATE,
    generate_extraction_prompt,
)

__all__ = [
    "Extractor",
    "parse_extraction_response",
    "DEFAULT_EXTRACTION_TEMPLATE",
    "generate_extraction_prompt",
]
