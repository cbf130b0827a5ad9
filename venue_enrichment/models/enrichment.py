"""Pydantic models for enrichment output."""
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from venue_enrichment.models.places import OpeningDay, closed_week


class FactSource(str, Enum):
    """Where a fact comes from, in increasing precedence order."""
    SUGGESTED = "suggested"
    AUTOMATIC = "automatic"
    MANUAL = "manual"


# manual > automatic > suggested
SOURCE_PRECEDENCE = {
    FactSource.SUGGESTED: 0,
    FactSource.AUTOMATIC: 1,
    FactSource.MANUAL: 2,
}


class FactCategory(str, Enum):
    """Fact categories produced by the extractor family."""
    ACCESSIBILITY = "accessibility"
    SERVICES = "services"
    PAYMENTS = "payments"
    CLIENTELE = "clientele"
    CHILDREN = "children"
    PARKING = "parking"
    AMBIANCE = "ambiance"
    PLANNING = "planning"
    HIGHLIGHTS = "highlights"
    POPULAR_FOR = "popular_for"
    OFFERS = "offers"
    SPECIALTIES = "specialties"


class Fact(BaseModel):
    """A single human-readable statement about a venue."""
    category: str
    value: str
    source: FactSource = FactSource.AUTOMATIC
    confidence: float = Field(1.0, ge=0, le=1)
    rationale: str = ""

    @property
    def key(self) -> str:
        """Case-insensitive identity of the fact within its category."""
        return f"{self.category}:{self.value.casefold()}"


def manual_fact(category: str, value: str, rationale: str = "Saisie manuelle") -> Fact:
    """Build an operator-entered fact. Manual facts always carry confidence 1.0."""
    return Fact(
        category=category,
        value=value,
        source=FactSource.MANUAL,
        confidence=1.0,
        rationale=rationale,
    )


class TagOrigin(str, Enum):
    """Which rule table produced a discovery tag."""
    TYPE = "type"
    PRICE = "price"
    RATING = "rating"
    CATEGORY = "category"


class WeightedTag(BaseModel):
    """Discovery tag with its search weight (10 primary, 7 secondary, 5 related)."""
    tag: str
    weight: int
    origin: TagOrigin


class ClassificationSource(str, Enum):
    """Resolution step that produced the establishment type."""
    LEARNING = "learning"
    KEYWORDS = "keywords"
    CATEGORY = "category"
    DEFAULT = "default"


class ClassificationResult(BaseModel):
    """Outcome of type classification."""
    establishment_type: str
    source: ClassificationSource
    confidence: float = Field(..., ge=0, le=1)
    keywords: List[str] = Field(default_factory=list)


class TypeSuggestion(BaseModel):
    """Type proposed by the pattern-learning service."""
    establishment_type: str
    confidence: float = Field(..., ge=0, le=1)
    reason: str = ""
    keywords: List[str] = Field(default_factory=list)


class SuggestionBucket(BaseModel):
    """Catalog suggestions offered to the operator review step."""
    recommended: List[Fact] = Field(default_factory=list)
    optional: List[Fact] = Field(default_factory=list)
    to_verify: List[Fact] = Field(default_factory=list)
    already_found: List[Fact] = Field(default_factory=list)

    @property
    def total_suggestions(self) -> int:
        return len(self.recommended) + len(self.optional)


class ValidationResult(BaseModel):
    """Soft consistency findings. Never blocks persistence."""
    is_valid: bool = True
    warnings: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)


class EnrichmentMetadata(BaseModel):
    """Bookkeeping about an enrichment run."""
    provider_confidence: float = Field(..., ge=0, le=1)
    manual_completeness: float = Field(..., ge=0, le=1)
    total_suggestions: int = 0
    last_updated: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class EnrichmentRecord(BaseModel):
    """Merged enrichment result handed to persistence and presentation."""
    place_id: str
    name: str = ""
    description: str = ""
    establishment_type: str
    classification: Optional[ClassificationResult] = None
    price_level: int = 2
    rating: float = 0.0
    opening_periods: Dict[str, OpeningDay] = Field(default_factory=closed_week)
    facts: Dict[str, List[Fact]] = Field(default_factory=dict)
    tags: List[WeightedTag] = Field(default_factory=list)
    suggestions: SuggestionBucket = Field(default_factory=SuggestionBucket)
    validation: ValidationResult = Field(default_factory=ValidationResult)
    metadata: EnrichmentMetadata

    def facts_for(self, category: str) -> List[Fact]:
        """Facts of one category, empty list when absent."""
        return self.facts.get(category, [])

    def values_for(self, category: str) -> List[str]:
        return [fact.value for fact in self.facts_for(category)]

    def manual_facts(self) -> List[Fact]:
        """All operator-entered facts across categories."""
        return [
            fact
            for facts in self.facts.values()
            for fact in facts
            if fact.source == FactSource.MANUAL
        ]
