"""
Suggestion engine.

Compares what extraction and the operator already know about a venue with
the amenity catalogs, and sorts every catalog entry into one bucket:

- already_found: equivalent to any manual or automatic fact
- recommended: mandatory entries and type-recommended entries not found
- optional: type-optional entries not found

to_verify only holds low-confidence automatic facts (type defaults) that no
catalog entry covers. An entry lands in at most one bucket.
"""
import logging
from typing import Dict, Iterable, List, Mapping, NamedTuple, Optional, Set, Tuple

from venue_enrichment.config import settings
from venue_enrichment.models.enrichment import (
    SOURCE_PRECEDENCE,
    Fact,
    FactCategory,
    FactSource,
    SuggestionBucket,
)

logger = logging.getLogger(__name__)

FactMap = Mapping[str, List[Fact]]


class CatalogEntry(NamedTuple):
    category: str
    value: str
    confidence: float


def _entries(category: str, *values: Tuple[str, float]) -> Tuple[CatalogEntry, ...]:
    return tuple(CatalogEntry(category, value, confidence) for value, confidence in values)


SERVICES = FactCategory.SERVICES.value
CHILDREN = FactCategory.CHILDREN.value
ACCESSIBILITY = FactCategory.ACCESSIBILITY.value

# Baseline amenities expected from any establishment
MANDATORY_CATALOG = (
    *_entries(FactCategory.PAYMENTS.value, ("Carte bancaire", 0.95), ("Espèces", 0.9), ("Tickets restaurant", 0.8)),
    *_entries(ACCESSIBILITY, ("Accessible PMR", 0.7), ("Toilettes handicapées", 0.6)),
    *_entries(SERVICES, ("Toilettes homme/femme", 0.9), ("Climatisation", 0.8), ("Chauffage", 0.8)),
    *_entries(SERVICES, ("WiFi gratuit", 0.9)),
    *_entries(FactCategory.PARKING.value, ("Parking", 0.7)),
)

# type -> (recommended, optional)
TYPE_CATALOGS: Dict[str, Tuple[Tuple[CatalogEntry, ...], Tuple[CatalogEntry, ...]]] = {
    "vr_experience": (
        (
            *_entries(SERVICES, ("Casques VR", 0.95), ("Sessions privées", 0.9), ("Équipements dernier cri", 0.85),
                      ("Réservations obligatoires", 0.9), ("Événements d'entreprise", 0.8)),
            *_entries(CHILDREN, ("Sessions enfants", 0.8)),
        ),
        (
            *_entries(SERVICES, ("Formation VR", 0.7), ("Location d'équipements", 0.6)),
            *_entries(ACCESSIBILITY, ("Casques adaptés", 0.6)),
        ),
    ),
    "escape_game": (
        (
            *_entries(SERVICES, ("Réservations obligatoires", 0.95), ("Sessions d'équipe", 0.9),
                      ("Thèmes variés", 0.85), ("Événements d'entreprise", 0.8)),
            *_entries(CHILDREN, ("Sessions enfants", 0.8)),
        ),
        _entries(SERVICES, ("Sessions privées", 0.7), ("Anniversaires", 0.75), ("Team building", 0.8)),
    ),
    "laser_game": (
        _entries(SERVICES, ("Équipements laser", 0.95), ("Sessions tactiques", 0.9), ("Équipes", 0.85),
                 ("Réservations obligatoires", 0.9)),
        _entries(SERVICES, ("Événements d'entreprise", 0.7), ("Anniversaires", 0.75)),
    ),
    "bowling": (
        _entries(SERVICES, ("Pistes de bowling", 0.95), ("Chaussures", 0.9), ("Snacks", 0.8), ("Réservations", 0.85)),
        _entries(SERVICES, ("Événements privés", 0.7), ("Anniversaires", 0.75)),
    ),
    "billard_americain": (
        _entries(SERVICES, ("Tables de billard", 0.95), ("Queues", 0.9), ("Snacks", 0.8)),
        _entries(SERVICES, ("Tournois", 0.7), ("Cours", 0.6)),
    ),
    "billard_francais": (
        _entries(SERVICES, ("Tables de billard", 0.95), ("Queues", 0.9), ("Réservations", 0.8)),
        _entries(SERVICES, ("Tournois", 0.7), ("Cours", 0.6)),
    ),
    "karting": (
        _entries(SERVICES, ("Karts", 0.95), ("Casques", 0.9), ("Réservations obligatoires", 0.9)),
        _entries(SERVICES, ("Événements d'entreprise", 0.7), ("Anniversaires", 0.75)),
    ),
    "quiz_room": (
        _entries(SERVICES, ("Buzzers", 0.9), ("Animateur", 0.85), ("Réservations obligatoires", 0.9)),
        _entries(SERVICES, ("Événements d'entreprise", 0.7), ("Anniversaires", 0.75)),
    ),
    "karaoke": (
        _entries(SERVICES, ("Cabines privées", 0.9), ("Micros", 0.85), ("Réservations", 0.8)),
        _entries(SERVICES, ("Anniversaires", 0.75), ("Privatisation", 0.7)),
    ),
    "restaurant": (
        _entries(SERVICES, ("Repas sur place", 0.9), ("Réservations acceptées", 0.85), ("Vente à emporter", 0.7)),
        (
            *_entries(SERVICES, ("Livraison", 0.6), ("Terrasse", 0.6)),
            *_entries(CHILDREN, ("Menu enfant", 0.6)),
        ),
    ),
    "bar": (
        _entries(SERVICES, ("Terrasse", 0.75)),
        _entries(SERVICES, ("Privatisation", 0.6), ("Happy hour", 0.6)),
    ),
    "spa": (
        _entries(SERVICES, ("Réservations obligatoires", 0.9), ("Vestiaire", 0.85)),
        _entries(SERVICES, ("Bons cadeaux", 0.7), ("Soins en duo", 0.6)),
    ),
    "hotel": (
        _entries(SERVICES, ("Réservations acceptées", 0.95), ("Petit-déjeuner", 0.8)),
        _entries(SERVICES, ("Bagagerie", 0.6), ("Navette", 0.5)),
    ),
    "cinema": (
        _entries(SERVICES, ("Réservations en ligne", 0.8)),
        _entries(SERVICES, ("Confiseries", 0.6)),
    ),
}


def catalog_for_type(establishment_type: str) -> Tuple[Tuple[CatalogEntry, ...], Tuple[CatalogEntry, ...]]:
    """(recommended, optional) entries for a type, falling back to its family."""
    if establishment_type in TYPE_CATALOGS:
        return TYPE_CATALOGS[establishment_type]
    for family in ("restaurant", "bar"):
        if establishment_type.startswith(family):
            return TYPE_CATALOGS[family]
    return (), ()


def is_equivalent(a: str, b: str) -> bool:
    """Case-insensitive substring match in either direction."""
    a, b = a.casefold().strip(), b.casefold().strip()
    if not a or not b:
        return False
    return a in b or b in a


def _flatten(facts: Optional[FactMap]) -> List[Fact]:
    if not facts:
        return []
    return [fact for values in facts.values() for fact in values]


def _find_equivalents(entry: CatalogEntry, facts: Iterable[Fact]) -> List[Fact]:
    return [
        fact
        for fact in facts
        if fact.category == entry.category and is_equivalent(entry.value, fact.value)
    ]


def build_suggestions(
    automatic: Optional[FactMap],
    establishment_type: str,
    manual: Optional[FactMap] = None,
) -> SuggestionBucket:
    """
    Build catalog suggestions for a venue.

    Args:
        automatic: Automatic facts per category
        establishment_type: Classified establishment type
        manual: Operator-entered facts per category

    Returns:
        SuggestionBucket with every catalog entry in exactly one bucket
    """
    threshold = settings.to_verify_threshold
    manual_facts = _flatten(manual)
    automatic_facts = _flatten(automatic)
    known = manual_facts + automatic_facts

    bucket = SuggestionBucket()
    placed: Set[str] = set()
    covered_automatic: Set[str] = set()

    recommended, optional = catalog_for_type(establishment_type)
    plan = (
        [(entry, bucket.recommended, f"Commodité obligatoire ({entry.category})") for entry in MANDATORY_CATALOG]
        + [(entry, bucket.recommended, "Recommandé pour ce type d'établissement") for entry in recommended]
        + [(entry, bucket.optional, "Optionnel pour ce type d'établissement") for entry in optional]
    )

    for entry, target, rationale in plan:
        key = f"{entry.category}:{entry.value.casefold()}"
        if key in placed:
            continue
        placed.add(key)

        equivalents = _find_equivalents(entry, known)
        covered_automatic.update(fact.key for fact in equivalents if fact.source == FactSource.AUTOMATIC)

        if equivalents:
            # manual facts come first in `known`
            bucket.already_found.append(_suggested(entry, f"Déjà renseigné : {equivalents[0].value}"))
        else:
            target.append(_suggested(entry, rationale))

    for fact in automatic_facts:
        if fact.confidence >= threshold or fact.key in covered_automatic or fact.key in placed:
            continue
        placed.add(fact.key)
        bucket.to_verify.append(fact)

    logger.debug(
        f"Suggestions for {establishment_type}: {len(bucket.recommended)} recommended, "
        f"{len(bucket.optional)} optional, {len(bucket.to_verify)} to verify, "
        f"{len(bucket.already_found)} already found"
    )
    return bucket


def _suggested(entry: CatalogEntry, rationale: str) -> Fact:
    return Fact(
        category=entry.category,
        value=entry.value,
        source=FactSource.SUGGESTED,
        confidence=entry.confidence,
        rationale=rationale,
    )


def merge_facts(
    automatic: Optional[FactMap],
    manual: Optional[FactMap] = None,
    suggested: Optional[FactMap] = None,
) -> Dict[str, List[Fact]]:
    """
    Merge fact maps, resolving same-value conflicts by source precedence
    (manual > automatic > suggested). Values compare case-insensitively
    within a category.
    """
    merged: Dict[str, Dict[str, Fact]] = {}
    for facts in (manual, automatic, suggested):
        for fact in _flatten(facts):
            category = merged.setdefault(fact.category, {})
            key = fact.value.casefold()
            existing = category.get(key)
            if existing is None or SOURCE_PRECEDENCE[fact.source] > SOURCE_PRECEDENCE[existing.source]:
                category[key] = fact

    for category in (automatic or {}):
        merged.setdefault(category, {})
    return {category: list(values.values()) for category, values in merged.items()}


def manual_completeness(manual: Optional[FactMap]) -> float:
    """Share of mandatory catalog entries covered by manual facts."""
    manual_facts = _flatten(manual)
    if not MANDATORY_CATALOG:
        return 0.0
    covered = sum(1 for entry in MANDATORY_CATALOG if _find_equivalents(entry, manual_facts))
    return round(covered / len(MANDATORY_CATALOG), 3)
