"""
Fact extractors.

Each extractor maps provider flags, the review corpus and provider category
tags to French, human-readable fact labels. Rules are data:

    Rule(label, keywords, flags, excludes, categories)

- an explicit boolean flag wins over text: True adds the label, False
  suppresses it even when reviews mention it
- keywords match case-insensitively on whole words
- excludes are blanked out of the corpus before matching the rule
  (e.g. "petit-déjeuner" must not count as "déjeuner")
- categories are provider tags implying the label; children and clientele
  tables never use them

Each label is emitted at most once per extractor.
"""
import logging
from typing import Dict, Iterable, List, Mapping, NamedTuple, Optional, Tuple

from venue_enrichment.config import settings
from venue_enrichment.enrichment.establishment_types import (
    FOOD_AND_DRINK_TYPES,
    LARGE_VENUE_TYPES,
)
from venue_enrichment.models.enrichment import Fact, FactCategory, FactSource
from venue_enrichment.models.places import NormalizedPlace
from venue_enrichment.utils.text import contains_keyword, dedupe, matching_keywords, scrub

logger = logging.getLogger(__name__)


class Rule(NamedTuple):
    label: str
    keywords: Tuple[str, ...] = ()
    flags: Tuple[str, ...] = ()
    excludes: Tuple[str, ...] = ()
    categories: Tuple[str, ...] = ()


RATIONALE_FLAG = "Attribut Google Places"
RATIONALE_TEXT = "Mentionné dans les avis"
RATIONALE_CATEGORY = "Catégorie Google Places"
RATIONALE_FALLBACK = "Valeur par défaut pour ce type d'établissement"

MEAL_EXCLUDES = ("petit déjeuner", "petit-déjeuner", "petits déjeuners", "petits-déjeuners")

ACCESSIBILITY_RULES = (
    Rule("Entrée accessible en fauteuil roulant", ("entrée accessible", "entrée de plain-pied", "plain-pied"),
         flags=("wheelchair_accessible_entrance",)),
    Rule("Accessible en fauteuil roulant", ("accessible en fauteuil", "accessibles en fauteuil",
                                            "fauteuil roulant", "fauteuils roulants", "wheelchair")),
    Rule("Places assises accessibles en fauteuil roulant", ("places assises accessibles",),
         flags=("wheelchair_accessible_seating",)),
    Rule("Toilettes accessibles en fauteuil roulant", ("toilettes handicapés", "toilettes handicapées",
                                                       "toilettes adaptées", "toilettes pmr"),
         flags=("wheelchair_accessible_restroom",)),
    Rule("Accessible PMR", ("pmr", "mobilité réduite", "accès handicapé", "accessible aux handicapés",
                            "ascenseur"), excludes=("toilettes pmr", "parking pmr", "places pmr")),
    Rule("Boucle magnétique", ("boucle magnétique", "malentendant", "malentendants")),
)

# Parking mentions are left to the dedicated parking extractor
SERVICES_RULES = (
    Rule("Repas sur place", ("sur place",), flags=("dine_in",), categories=("restaurant",)),
    Rule("Vente à emporter", ("à emporter", "a emporter", "vente à emporter", "take away", "takeaway"),
         flags=("takeout",), categories=("meal_takeaway",)),
    Rule("Livraison", ("livraison", "livraisons", "uber eats", "deliveroo"),
         flags=("delivery",), categories=("meal_delivery",)),
    Rule("Retrait en bordure de trottoir", flags=("curbside_pickup",)),
    Rule("Réservations acceptées", ("réservation", "réservations", "réserver", "réservé", "réservée",
                                    "reservation", "booking"), flags=("reservable",)),
    Rule("Service à table", ("service à table", "servi à table")),
    Rule("Traiteur", ("traiteur",)),
    Rule("Desserts", ("dessert", "desserts"), flags=("serves_dessert",)),
    Rule("Toilettes", ("toilettes", "wc", "sanitaires"), flags=("restroom",)),
    Rule("WiFi gratuit", ("wifi gratuit", "wi-fi gratuit", "free wifi")),
    Rule("WiFi", ("wifi", "wi-fi"), excludes=("wifi gratuit", "wi-fi gratuit", "free wifi")),
    Rule("Climatisation", ("climatisation", "climatisé", "climatisée", "clim")),
    Rule("Chauffage", ("chauffage", "chauffé", "chauffée", "chauffés")),
    Rule("Terrasse", ("terrasse", "terrasses", "en extérieur"), flags=("outdoor_seating",)),
    Rule("Animaux acceptés", ("chiens acceptés", "animaux acceptés", "dog friendly"), flags=("allows_dogs",)),
    Rule("Vestiaire", ("vestiaire", "vestiaires", "casiers")),
    Rule("Location de chaussures", ("location de chaussures", "chaussures de bowling")),
    Rule("Snacks", ("snack", "snacks", "grignoter")),
    Rule("Privatisation", ("privatisation", "privatiser", "privatisable", "soirée privée")),
    Rule("Anniversaires", ("anniversaire", "anniversaires")),
    Rule("Événements d'entreprise", ("team building", "séminaire", "séminaires", "événement d'entreprise",
                                      "événements d'entreprise")),
)

PAYMENTS_RULES = (
    Rule("Carte bancaire", ("carte bancaire", "cartes bancaires", "cb", "paiement par carte", "carte bleue")),
    Rule("Cartes de crédit", ("carte de crédit", "cartes de crédit", "visa", "mastercard", "amex",
                              "american express"), flags=("accepts_credit_cards",)),
    Rule("Cartes de débit", ("carte de débit", "cartes de débit"), flags=("accepts_debit_cards",)),
    Rule("Espèces uniquement", ("espèces uniquement", "cash only", "que du liquide", "que des espèces"),
         flags=("accepts_cash_only",)),
    Rule("Espèces", ("espèces", "liquide", "cash"),
         excludes=("espèces uniquement", "cash only", "que du liquide", "que des espèces")),
    Rule("Paiements mobiles NFC", ("sans contact", "apple pay", "google pay", "nfc"), flags=("accepts_nfc",)),
    Rule("Titres restaurant", ("ticket restaurant", "tickets restaurant", "titre restaurant",
                               "titres restaurant", "ticket resto", "tickets resto", "swile", "pluxee")),
    Rule("Chèques vacances", ("chèques vacances", "chèque vacances", "ancv")),
    Rule("Chèques", ("chèque", "chèques"), excludes=("chèques vacances", "chèque vacances")),
)

CLIENTELE_RULES = (
    Rule("Étudiants", ("étudiant", "étudiants", "étudiante", "étudiantes")),
    Rule("Groupes", ("groupe", "groupes", "entre amis", "en bande"), flags=("good_for_groups",),
         excludes=("groupe live",)),
    Rule("Touristes", ("touriste", "touristes")),
    Rule("Familles", ("famille", "familles", "familial", "familiale")),
    Rule("Couples", ("couple", "couples", "en amoureux")),
    Rule("Professionnels", ("afterwork", "collègues", "déjeuner d'affaires", "repas d'affaires")),
    Rule("Jeunes", ("jeunes",)),
)

CHILDREN_RULES = (
    Rule("Convient aux enfants", ("enfant", "enfants", "kids"), flags=("good_for_children",)),
    Rule("Menu enfant", ("menu enfant", "menu enfants", "menus enfants"), flags=("menu_for_children",)),
    Rule("Chaise haute", ("chaise haute", "chaises hautes")),
    Rule("Espace de jeux pour enfants", ("aire de jeux", "espace enfants", "coin enfants")),
    Rule("Anniversaires enfants", ("anniversaire enfant", "anniversaires enfants", "anniversaire d'enfant")),
)

PARKING_RULES = (
    Rule("Parking gratuit", ("parking gratuit", "stationnement gratuit", "parking offert"),
         flags=("free_parking_lot", "free_garage_parking")),
    Rule("Stationnement gratuit dans la rue", flags=("free_street_parking",)),
    Rule("Parking couvert payant", ("parking couvert", "parking souterrain"), flags=("paid_garage_parking",)),
    Rule("Parking payant", ("parking payant", "stationnement payant"),
         flags=("paid_parking_lot", "paid_street_parking")),
    Rule("Voiturier", ("voiturier", "valet"), flags=("valet_parking",)),
    Rule("Parking accessible PMR", ("parking pmr", "places pmr", "place handicapé", "places handicapés"),
         flags=("wheelchair_accessible_parking",)),
)

# Emitted only when no specific parking rule matched
GENERIC_PARKING = Rule("Parking à proximité", ("parking", "parkings", "stationnement", "se garer"))

AMBIANCE_RULES = (
    Rule("Ambiance décontractée", ("décontracté", "décontractée", "détendu", "détendue")),
    Rule("Cadre agréable", ("cadre agréable", "beau cadre", "joli cadre", "cadre magnifique")),
    Rule("Calme", ("calme", "tranquille", "paisible")),
    Rule("Cosy", ("cosy", "chaleureux", "chaleureuse")),
    Rule("Convivial", ("convivial", "conviviale", "sympa", "sympathique")),
    Rule("Festif", ("festif", "festive", "soirée", "soirées")),
    Rule("Romantique", ("romantique", "en amoureux")),
    Rule("Musique live", ("concert", "concerts", "musique live", "live music", "groupe live"),
         flags=("live_music",)),
    Rule("Animé", ("animé", "animée", "bruyant", "bruyante")),
    Rule("Chic", ("chic", "élégant", "élégante", "raffiné", "raffinée")),
)

PLANNING_RULES = (
    Rule("Réservation recommandée", ("réservation conseillée", "réservation recommandée", "réserver à l'avance",
                                     "pensez à réserver", "complet")),
    Rule("Sans réservation", ("sans réservation", "sans rendez-vous")),
    Rule("Temps d'attente", ("attente", "file d'attente")),
    Rule("Ouvert tard", ("ouvert tard", "jusqu'à tard", "tard le soir")),
)

HIGHLIGHTS_RULES = (
    Rule("Excellent café", ("excellent café", "très bon café", "café excellent", "bon café")),
    Rule("Grand choix de thés", ("choix de thés", "thés")),
    Rule("Cuisine de qualité", ("délicieux", "délicieuse", "succulent", "cuisine excellente", "excellent repas")),
    Rule("Ambiance conviviale", ("ambiance conviviale", "ambiance sympa")),
    Rule("Service rapide", ("service rapide", "rapide", "rapidement")),
    Rule("Personnel accueillant", ("accueillant", "accueillante", "accueil chaleureux", "personnel sympa")),
    Rule("Bon rapport qualité-prix", ("rapport qualité prix", "rapport qualité-prix", "pas cher",
                                      "prix raisonnables", "prix raisonnable")),
    Rule("Belle vue", ("vue", "panorama", "vue imprenable")),
)

POPULAR_FOR_RULES = (
    Rule("Petit-déjeuner", MEAL_EXCLUDES, flags=("serves_breakfast",)),
    Rule("Brunch", ("brunch",), flags=("serves_brunch",)),
    Rule("Déjeuner", ("déjeuner", "déjeuners", "midi", "lunch"), flags=("serves_lunch",), excludes=MEAL_EXCLUDES),
    Rule("Dîner", ("dîner", "diner", "dîners"), flags=("serves_dinner",)),
    Rule("Dîner en solo", ("en solo", "seul", "seule")),
    Rule("Apéritif", ("apéro", "apéritif", "afterwork")),
    Rule("Soirée entre amis", ("entre amis", "entre potes")),
    Rule("Regarder le sport", ("match", "matchs", "retransmission"), flags=("good_for_watching_sports",)),
)

OFFERS_RULES = (
    Rule("Alcools", ("alcool", "alcools"), flags=("serves_beer", "serves_wine", "serves_cocktails")),
    Rule("Bière", ("bière", "bières", "pression"), flags=("serves_beer",)),
    Rule("Vin", ("vin", "vins"), flags=("serves_wine",)),
    Rule("Cocktails et apéritifs", ("cocktail", "cocktails", "apéritif", "apéritifs"), flags=("serves_cocktails",)),
    Rule("Spiritueux", ("spiritueux", "whisky", "rhum", "gin", "vodka")),
    Rule("Cafés", ("café", "cafés", "expresso", "espresso"), flags=("serves_coffee",)),
    Rule("Convient aux végétariens", ("végétarien", "végétarienne", "végétariens", "vegan", "végan", "végétalien"),
         flags=("serves_vegetarian_food",)),
    Rule("Petites portions à partager", ("tapas", "à partager", "planche", "planches")),
    Rule("Produits sains", ("healthy", "bio", "produits frais")),
    Rule("Happy hour", ("happy hour",)),
)

DISH_KEYWORDS = (
    "escargots", "coq au vin", "bouillabaisse", "ratatouille", "moules frites",
    "steak tartare", "crème brûlée", "tarte tatin", "burger", "pizza", "sushi",
    "pasta", "risotto", "paella", "couscous", "tajine", "curry", "pad thai",
    "ramen", "galette", "crêpes", "raclette", "fondue", "tartiflette",
)

PAYMENTS_FALLBACK = ("Carte bancaire", "Espèces")
SERVICES_FALLBACK = ("Toilettes",)
ACCESSIBILITY_FALLBACK = ("Accessible PMR",)


def _match_rules(
    rules: Iterable[Rule],
    flags: Mapping[str, bool],
    corpus: str,
    category_tags: Iterable[str],
) -> List[Tuple[str, str]]:
    """Return (label, rationale) pairs for every matching rule, labels unique."""
    tags = {tag.lower() for tag in category_tags or []}
    corpus = (corpus or "").lower()
    matches: List[Tuple[str, str]] = []
    seen = set()

    for rule in rules:
        if rule.label.casefold() in seen:
            continue

        explicit = [flags[name] for name in rule.flags if name in flags]
        if explicit:
            # Explicit flags override any text evidence
            if any(explicit):
                matches.append((rule.label, RATIONALE_FLAG))
                seen.add(rule.label.casefold())
            continue

        text = scrub(corpus, rule.excludes) if rule.excludes else corpus
        if matching_keywords(text, rule.keywords):
            matches.append((rule.label, RATIONALE_TEXT))
            seen.add(rule.label.casefold())
        elif tags.intersection(rule.categories):
            matches.append((rule.label, RATIONALE_CATEGORY))
            seen.add(rule.label.casefold())

    return matches


def _labels(matches: List[Tuple[str, str]]) -> List[str]:
    return [label for label, _ in matches]


def fallback_values(category: str, establishment_type: Optional[str]) -> List[str]:
    """Type-appropriate defaults used when an extractor found no evidence."""
    if category == FactCategory.PAYMENTS:
        return list(PAYMENTS_FALLBACK)
    if category == FactCategory.SERVICES and establishment_type in FOOD_AND_DRINK_TYPES:
        return list(SERVICES_FALLBACK)
    if category == FactCategory.ACCESSIBILITY and establishment_type in LARGE_VENUE_TYPES:
        return list(ACCESSIBILITY_FALLBACK)
    return []


def _with_fallback(
    labels: List[str], category: str, establishment_type: Optional[str], fallback: bool
) -> List[str]:
    if labels or not fallback:
        return labels
    return fallback_values(category, establishment_type)


def extract_accessibility(
    flags: Mapping[str, bool],
    review_corpus: str,
    category_tags: Iterable[str] = (),
    establishment_type: Optional[str] = None,
    fallback: bool = True,
) -> List[str]:
    """Accessibility facts (step-free access, adapted restrooms...)."""
    labels = _labels(_match_rules(ACCESSIBILITY_RULES, flags, review_corpus, category_tags))
    return _with_fallback(labels, FactCategory.ACCESSIBILITY, establishment_type, fallback)


def extract_services(
    flags: Mapping[str, bool],
    review_corpus: str,
    category_tags: Iterable[str] = (),
    establishment_type: Optional[str] = None,
    fallback: bool = True,
) -> List[str]:
    """General services and amenities. Parking is not reported here."""
    labels = _labels(_match_rules(SERVICES_RULES, flags, review_corpus, category_tags))
    return _with_fallback(labels, FactCategory.SERVICES, establishment_type, fallback)


def extract_payments(
    flags: Mapping[str, bool],
    review_corpus: str,
    category_tags: Iterable[str] = (),
    establishment_type: Optional[str] = None,
    fallback: bool = True,
) -> List[str]:
    """Accepted payment methods."""
    labels = _labels(_match_rules(PAYMENTS_RULES, flags, review_corpus, category_tags))
    return _with_fallback(labels, FactCategory.PAYMENTS, establishment_type, fallback)


def extract_clientele(flags: Mapping[str, bool], review_corpus: str, category_tags: Iterable[str] = ()) -> List[str]:
    # Category tags are ignored on purpose: a "bar" says nothing about who goes there
    return _labels(_match_rules(CLIENTELE_RULES, flags, review_corpus, ()))


def extract_children(flags: Mapping[str, bool], review_corpus: str, category_tags: Iterable[str] = ()) -> List[str]:
    return _labels(_match_rules(CHILDREN_RULES, flags, review_corpus, ()))


def _parking_matches(
    flags: Mapping[str, bool], review_corpus: str, category_tags: Iterable[str]
) -> List[Tuple[str, str]]:
    matches = _match_rules(PARKING_RULES, flags, review_corpus, category_tags)
    if matches:
        return matches
    # A False flag on every specific option still allows a generic mention
    return _match_rules((GENERIC_PARKING,), flags, review_corpus, category_tags)


def extract_parking(flags: Mapping[str, bool], review_corpus: str, category_tags: Iterable[str] = ()) -> List[str]:
    """Parking options. The generic "Parking à proximité" only when nothing specific matched."""
    return _labels(_parking_matches(flags, review_corpus, category_tags))


def extract_ambiance(flags: Mapping[str, bool], review_corpus: str, category_tags: Iterable[str] = ()) -> List[str]:
    return _labels(_match_rules(AMBIANCE_RULES, flags, review_corpus, category_tags))


def extract_planning(flags: Mapping[str, bool], review_corpus: str, category_tags: Iterable[str] = ()) -> List[str]:
    return _labels(_match_rules(PLANNING_RULES, flags, review_corpus, category_tags))


def extract_highlights(flags: Mapping[str, bool], review_corpus: str, category_tags: Iterable[str] = ()) -> List[str]:
    return _labels(_match_rules(HIGHLIGHTS_RULES, flags, review_corpus, category_tags))


def extract_popular_for(flags: Mapping[str, bool], review_corpus: str, category_tags: Iterable[str] = ()) -> List[str]:
    return _labels(_match_rules(POPULAR_FOR_RULES, flags, review_corpus, category_tags))


def extract_offers(flags: Mapping[str, bool], review_corpus: str, category_tags: Iterable[str] = ()) -> List[str]:
    return _labels(_match_rules(OFFERS_RULES, flags, review_corpus, category_tags))


def extract_specialties(flags: Mapping[str, bool], review_corpus: str, category_tags: Iterable[str] = ()) -> List[str]:
    """Dishes mentioned in reviews, e.g. "Moules frites"."""
    corpus = (review_corpus or "").lower()
    return dedupe(dish.capitalize() for dish in DISH_KEYWORDS if contains_keyword(corpus, dish))


# (category, rules) for the table-driven extractors
RULE_TABLES = (
    (FactCategory.ACCESSIBILITY, ACCESSIBILITY_RULES),
    (FactCategory.SERVICES, SERVICES_RULES),
    (FactCategory.PAYMENTS, PAYMENTS_RULES),
    (FactCategory.CLIENTELE, CLIENTELE_RULES),
    (FactCategory.CHILDREN, CHILDREN_RULES),
    (FactCategory.AMBIANCE, AMBIANCE_RULES),
    (FactCategory.PLANNING, PLANNING_RULES),
    (FactCategory.HIGHLIGHTS, HIGHLIGHTS_RULES),
    (FactCategory.POPULAR_FOR, POPULAR_FOR_RULES),
    (FactCategory.OFFERS, OFFERS_RULES),
)

# Categories whose rules must not look at provider category tags
TEXT_ONLY_CATEGORIES = (FactCategory.CLIENTELE, FactCategory.CHILDREN)


def extract_all_facts(place: NormalizedPlace, establishment_type: str) -> Dict[str, List[Fact]]:
    """
    Run every extractor and wrap the labels into automatic facts.

    Evidence-backed facts carry the provider confidence. Fallback defaults are
    added only for categories with no evidence, at a lower confidence.

    Args:
        place: Normalized place
        establishment_type: Classified type, drives the fallback defaults

    Returns:
        Dict of fact category -> facts, every category present
    """
    provider_confidence = settings.provider_confidence
    facts: Dict[str, List[Fact]] = {}

    for category, rules in RULE_TABLES:
        tags = () if category in TEXT_ONLY_CATEGORIES else place.category_tags
        matches = _match_rules(rules, place.flags, place.review_corpus, tags)
        facts[category.value] = [
            Fact(
                category=category.value,
                value=label,
                source=FactSource.AUTOMATIC,
                confidence=provider_confidence,
                rationale=rationale,
            )
            for label, rationale in matches
        ]

    facts[FactCategory.PARKING.value] = [
        Fact(
            category=FactCategory.PARKING.value,
            value=label,
            source=FactSource.AUTOMATIC,
            confidence=provider_confidence,
            rationale=rationale,
        )
        for label, rationale in _parking_matches(place.flags, place.review_corpus, place.category_tags)
    ]

    facts[FactCategory.SPECIALTIES.value] = [
        Fact(
            category=FactCategory.SPECIALTIES.value,
            value=label,
            source=FactSource.AUTOMATIC,
            confidence=provider_confidence,
            rationale=RATIONALE_TEXT,
        )
        for label in extract_specialties(place.flags, place.review_corpus, place.category_tags)
    ]

    for category in (FactCategory.PAYMENTS, FactCategory.SERVICES, FactCategory.ACCESSIBILITY):
        if facts[category.value]:
            continue
        defaults = fallback_values(category, establishment_type)
        if defaults:
            logger.debug(f"Place {place.place_id}: no {category.value} evidence, using defaults {defaults}")
        facts[category.value] = [
            Fact(
                category=category.value,
                value=label,
                source=FactSource.AUTOMATIC,
                confidence=settings.fallback_fact_confidence,
                rationale=RATIONALE_FALLBACK,
            )
            for label in defaults
        ]

    return facts
