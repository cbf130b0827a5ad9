"""
Enrichment pipeline.

Single entry point of the engine:

    raw payload -> normalize -> classify -> extract facts -> tags
                -> suggestions (merged with manual facts) -> validation

It also owns the record lifecycle. Re-enrichment replaces automatic facts
and keeps manual ones. Promoting a fact makes it manual, and manual facts
stay until explicitly cleared.
"""
import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from venue_enrichment.config import settings
from venue_enrichment.enrichment.consistency_validator import validate_record
from venue_enrichment.enrichment.description import generate_description
from venue_enrichment.enrichment.exceptions import EnrichmentError, InvalidPayloadError
from venue_enrichment.enrichment.fact_extractors import extract_all_facts
from venue_enrichment.enrichment.normalizer import normalize_place
from venue_enrichment.enrichment.suggestion_engine import (
    build_suggestions,
    manual_completeness,
    merge_facts,
)
from venue_enrichment.enrichment.tag_generator import generate_tags
from venue_enrichment.enrichment.type_classifier import TypeClassifier
from venue_enrichment.models.enrichment import (
    ClassificationResult,
    EnrichmentMetadata,
    EnrichmentRecord,
    Fact,
    FactSource,
    WeightedTag,
)
from venue_enrichment.models.places import NormalizedPlace, RawPlacePayload
from venue_enrichment.services.pattern_learning import PatternLearner

logger = logging.getLogger(__name__)


def _group(facts: Iterable[Fact]) -> Dict[str, List[Fact]]:
    grouped: Dict[str, List[Fact]] = {}
    for fact in facts:
        grouped.setdefault(fact.category, []).append(fact)
    return grouped


def _as_manual(fact: Fact) -> Fact:
    return fact.model_copy(update={"source": FactSource.MANUAL, "confidence": 1.0})


class EnrichmentPipeline:
    """Orchestrates the enrichment stages and the record lifecycle."""

    def __init__(
        self,
        learner: Optional[PatternLearner] = None,
        classifier: Optional[TypeClassifier] = None,
    ):
        self.classifier = classifier or TypeClassifier(learner)

    async def enrich(
        self,
        raw: RawPlacePayload,
        manual_facts: Optional[Iterable[Fact]] = None,
        previous: Optional[EnrichmentRecord] = None,
    ) -> EnrichmentRecord:
        """
        Enrich a provider payload.

        Args:
            raw: Provider payload
            manual_facts: Operator-entered facts to merge (stored as manual)
            previous: Earlier record of the same venue, its manual facts are kept

        Returns:
            EnrichmentRecord

        Raises:
            InvalidPayloadError: when the payload has no place identifier
        """
        place = normalize_place(raw)
        if previous is not None and previous.place_id != place.place_id:
            raise InvalidPayloadError(
                f"Payload {place.place_id} does not match record {previous.place_id}"
            )

        logger.info(f"Enriching place {place.place_id} ({place.name})")

        classification = await self.classifier.classify(place.name, place.category_tags, place.description)
        establishment_type = classification.establishment_type

        automatic = extract_all_facts(place, establishment_type)
        tags = generate_tags(place, establishment_type)

        manual: List[Fact] = previous.manual_facts() if previous is not None else []
        manual.extend(_as_manual(fact) for fact in manual_facts or [])

        record = self._assemble(place, classification, automatic, _group(manual), tags)
        logger.info(
            f"Enriched place {place.place_id}: type={establishment_type}, "
            f"{sum(len(v) for v in record.facts.values())} facts, {len(record.tags)} tags, "
            f"valid={record.validation.is_valid}"
        )
        return record

    async def re_enrich(self, record: EnrichmentRecord, raw: RawPlacePayload) -> EnrichmentRecord:
        """Re-run the pipeline on fresh provider data, keeping manual facts."""
        return await self.enrich(raw, previous=record)

    def promote_fact(self, record: EnrichmentRecord, category: str, value: str) -> EnrichmentRecord:
        """
        Make a suggested or automatic fact manual.

        Returns an updated copy of the record.

        Raises:
            EnrichmentError: when no fact or suggestion matches category/value
        """
        target = _find_fact(record, category, value)
        if target is None:
            raise EnrichmentError(f"No fact '{value}' in category '{category}' for {record.place_id}")

        manual = record.manual_facts()
        if target.source != FactSource.MANUAL:
            manual.append(_as_manual(target).model_copy(update={"rationale": "Validé par l'exploitant"}))
        logger.info(f"Promoted '{target.value}' ({category}) to manual for {record.place_id}")
        return self._rebuild(record, manual)

    def clear_manual_fact(self, record: EnrichmentRecord, category: str, value: str) -> EnrichmentRecord:
        """
        Remove a manual fact. Returns an updated copy of the record.

        An automatic fact with the same value comes back on the next re-enrichment.
        """
        key = value.casefold()
        manual = [
            fact
            for fact in record.manual_facts()
            if not (fact.category == category and fact.value.casefold() == key)
        ]
        if len(manual) == len(record.manual_facts()):
            logger.warning(f"No manual fact '{value}' in category '{category}' for {record.place_id}")
            return record
        logger.info(f"Cleared manual fact '{value}' ({category}) for {record.place_id}")
        return self._rebuild(record, manual)

    async def drain(self) -> None:
        """Wait for background learning write-backs."""
        await self.classifier.drain()

    def _rebuild(self, record: EnrichmentRecord, manual: List[Fact]) -> EnrichmentRecord:
        automatic: Dict[str, List[Fact]] = {category: [] for category in record.facts}
        for facts in record.facts.values():
            for fact in facts:
                if fact.source == FactSource.AUTOMATIC:
                    automatic[fact.category].append(fact)

        manual_map = _group(manual)
        suggestions = build_suggestions(automatic, record.establishment_type, manual_map)
        updated = record.model_copy(
            update={
                "facts": merge_facts(automatic, manual_map),
                "suggestions": suggestions,
                "metadata": record.metadata.model_copy(
                    update={
                        "manual_completeness": manual_completeness(manual_map),
                        "total_suggestions": suggestions.total_suggestions,
                        "last_updated": datetime.now(timezone.utc),
                    }
                ),
            }
        )
        updated.validation = validate_record(updated)
        return updated

    def _assemble(
        self,
        place: NormalizedPlace,
        classification: ClassificationResult,
        automatic: Dict[str, List[Fact]],
        manual: Dict[str, List[Fact]],
        tags: List[WeightedTag],
    ) -> EnrichmentRecord:
        establishment_type = classification.establishment_type
        suggestions = build_suggestions(automatic, establishment_type, manual)

        record = EnrichmentRecord(
            place_id=place.place_id,
            name=place.name,
            description=place.description or generate_description(place, establishment_type),
            establishment_type=establishment_type,
            classification=classification,
            price_level=place.price_level,
            rating=place.rating,
            opening_periods=place.opening_periods,
            facts=merge_facts(automatic, manual),
            tags=tags,
            suggestions=suggestions,
            metadata=EnrichmentMetadata(
                provider_confidence=settings.provider_confidence,
                manual_completeness=manual_completeness(manual),
                total_suggestions=suggestions.total_suggestions,
            ),
        )
        record.validation = validate_record(record)
        return record


def _find_fact(record: EnrichmentRecord, category: str, value: str) -> Optional[Fact]:
    key = value.casefold()
    bucket = record.suggestions
    candidates = (
        record.facts_for(category)
        + bucket.recommended
        + bucket.optional
        + bucket.to_verify
        + bucket.already_found
    )
    for fact in candidates:
        if fact.category == category and fact.value.casefold() == key:
            return fact
    return None
