"""
Enrichment stages.

normalizer -> type_classifier -> fact_extractors -> tag_generator
-> suggestion_engine -> consistency_validator, orchestrated by pipeline.
"""

from .exceptions import EnrichmentError, InvalidPayloadError, PatternLearningError
from .normalizer import normalize_place
from .type_classifier import TypeClassifier, classify_by_rules
from .keywords import extract_keywords
from .fact_extractors import extract_all_facts
from .tag_generator import generate_tags
from .suggestion_engine import build_suggestions, merge_facts
from .consistency_validator import validate_record
from .description import generate_description, group_facts_for_display
from .pipeline import EnrichmentPipeline

__all__ = [
    "EnrichmentError",
    "InvalidPayloadError",
    "PatternLearningError",
    "normalize_place",
    "TypeClassifier",
    "classify_by_rules",
    "extract_keywords",
    "extract_all_facts",
    "generate_tags",
    "build_suggestions",
    "merge_facts",
    "validate_record",
    "generate_description",
    "group_facts_for_display",
    "EnrichmentPipeline",
]
