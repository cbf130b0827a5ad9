"""
Presentation helpers: generated descriptions and display grouping of facts.
"""
import re
from typing import Dict, List, Mapping

from venue_enrichment.models.enrichment import Fact, FactCategory
from venue_enrichment.models.places import NormalizedPlace

# Opening words of a generated description, per establishment type
TYPE_OPENERS = {
    "restaurant": "Restaurant",
    "restaurant_gastronomique": "Restaurant gastronomique",
    "restaurant_francais": "Restaurant français",
    "restaurant_italien": "Restaurant italien",
    "restaurant_japonais": "Restaurant japonais",
    "pizzeria": "Pizzeria",
    "brasserie": "Brasserie",
    "bistrot": "Bistrot",
    "cafe": "Café",
    "bar": "Bar convivial",
    "bar_a_cocktails": "Bar à cocktails",
    "bar_a_vin": "Bar à vins",
    "pub": "Pub",
    "discotheque": "Boîte de nuit",
    "boite_de_nuit": "Boîte de nuit",
    "escape_game": "Escape game",
    "vr_experience": "Salle de réalité virtuelle",
    "laser_game": "Laser game",
    "karaoke": "Karaoké",
    "quiz_room": "Quiz room",
    "bowling": "Bowling",
    "billard_americain": "Salle de billard",
    "billard_francais": "Salle de billard",
    "karting": "Karting",
    "cinema": "Cinéma",
    "spa": "Spa",
    "hotel": "Hôtel",
}

POSITIVE_WORDS = re.compile(r"\b(convivial|sympa|top|génial|super|excellent|parfait)e?\b")
# "ambiance" is feminine; invariable words are absent
FEMININE_FORMS = {
    "convivial": "conviviale",
    "génial": "géniale",
    "excellent": "excellente",
    "parfait": "parfaite",
}

# section id -> (label, fact categories)
DISPLAY_SECTIONS = (
    ("ambiance_specialties", "Ambiance & Spécialités", (
        FactCategory.AMBIANCE, FactCategory.SPECIALTIES, FactCategory.HIGHLIGHTS,
        FactCategory.OFFERS, FactCategory.POPULAR_FOR,
    )),
    ("equipment_services", "Équipements & Services", (
        FactCategory.SERVICES, FactCategory.PARKING, FactCategory.ACCESSIBILITY, FactCategory.CHILDREN,
    )),
    ("practical_info", "Informations pratiques", (
        FactCategory.PAYMENTS, FactCategory.PLANNING, FactCategory.CLIENTELE,
    )),
)
DEFAULT_SECTION = "practical_info"


def generate_description(place: NormalizedPlace, establishment_type: str) -> str:
    """
    Build a short description for venues without an editorial summary.

    Example: "Bowling avec une super ambiance. Ouvert 6 jours par semaine."
    """
    opener = TYPE_OPENERS.get(establishment_type)
    match = POSITIVE_WORDS.search(place.review_corpus)
    open_days = len(place.open_days)

    if not (opener or match or open_days):
        return f"{place.name} - Établissement de qualité" if place.name else "Établissement de qualité"

    sentence = opener or place.name or "Établissement"
    if match:
        word = match.group(1)
        sentence += f" avec une {FEMININE_FORMS.get(word, word)} ambiance"

    parts = [f"{sentence}."]
    if open_days:
        parts.append(f"Ouvert {open_days} jours par semaine.")
    return " ".join(parts)


def _section_for(category: str) -> str:
    for section_id, _, categories in DISPLAY_SECTIONS:
        if category in categories:
            return section_id
    return DEFAULT_SECTION


def group_facts_for_display(facts: Mapping[str, List[Fact]]) -> Dict[str, List[Fact]]:
    """
    Group facts into display sections, in section order. Empty sections are omitted.
    """
    grouped: Dict[str, List[Fact]] = {section_id: [] for section_id, _, _ in DISPLAY_SECTIONS}
    for category, values in facts.items():
        grouped[_section_for(category)].extend(values)
    return {section_id: values for section_id, values in grouped.items() if values}
