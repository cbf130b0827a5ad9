"""
Discovery ("envie") tag generation.

Tags come from four tables:
- TYPE_TAG_TIERS: primary / secondary / related tags per establishment type
  (weights 10 / 7 / 5)
- PRICE_LEVEL_TAGS: price tier (1-4)
- rating tiers (>= 4.5 excellence, >= 4.0 reliability)
- PROVIDER_CATEGORY_TAGS: bonuses for fine-grained provider categories
"""
import logging
from types import MappingProxyType
from typing import Dict, List, Mapping, Tuple

from venue_enrichment.enrichment.normalizer import clamp_price_level
from venue_enrichment.models.enrichment import TagOrigin, WeightedTag
from venue_enrichment.models.places import NormalizedPlace

logger = logging.getLogger(__name__)

PRIMARY_WEIGHT = 10
SECONDARY_WEIGHT = 7
RELATED_WEIGHT = 5
PRICE_WEIGHT = 7
EXCELLENCE_WEIGHT = 7
RELIABILITY_WEIGHT = 5
CATEGORY_BONUS_WEIGHT = 7

EXCELLENCE_RATING = 4.5
RELIABILITY_RATING = 4.0

TagTiers = Tuple[Tuple[str, ...], Tuple[str, ...], Tuple[str, ...]]

TYPE_TAG_TIERS: Mapping[str, TagTiers] = MappingProxyType({
    # Bars & drinks
    "bar": (
        ("bar", "boire un verre", "apéro", "soirée"),
        ("cocktails", "bière", "terrasse", "convivial"),
        ("entre amis", "after-work", "détente", "festif"),
    ),
    "bar_lounge": (
        ("bar", "ambiance", "cocktails", "lounge"),
        ("apéro", "terrasse", "musique", "chic", "élégant"),
        ("soirée", "romantique", "after-work", "sophistiqué"),
    ),
    "pub": (
        ("pub", "bière", "traditionnel", "sport"),
        ("pression", "fish", "chips", "écrans", "convivial"),
        ("anglaise", "décontracté", "entre potes", "sportif"),
    ),
    "brasserie_artisanale": (
        ("brasserie", "artisanale", "bière", "craft"),
        ("dégustation", "locale", "visite", "produits"),
        ("authentique", "découverte", "artisanal", "terroir"),
    ),
    "bar_a_cocktails": (
        ("bar", "cocktails", "mixologie", "spécialisé"),
        ("signature", "bartender", "happy hour", "expert"),
        ("sophistiqué", "créatif", "festif", "trendy"),
    ),
    "bar_a_vin": (
        ("bar", "vins", "cave", "œnologie"),
        ("dégustation", "accords", "mets-vins", "sommelier"),
        ("raffiné", "culturel", "conviviale", "sélection"),
    ),
    "rooftop": (
        ("rooftop", "terrasse", "panoramique", "bar"),
        ("vue", "coucher", "soleil", "premium"),
        ("romantique", "exclusive", "instagram", "haut"),
    ),
    "bar_a_bieres": (
        ("bar", "bières", "pression", "belge"),
        ("tapas", "planches", "happy hour", "terrasse"),
        ("amusant", "décontracté", "festif", "entre amis"),
    ),
    "discotheque": (
        ("discothèque", "danse", "dj", "piste"),
        ("bar", "vestiaire", "nocturne", "énergique"),
        ("festive", "dansante", "club", "musique"),
    ),
    "karaoke": (
        ("karaoké", "bar", "chanson", "cabines"),
        ("privées", "playlist", "festive", "musique"),
        ("amusant", "décontracté", "entre amis", "divertissement"),
    ),
    # Restaurants
    "restaurant": (
        ("restaurant", "cuisine", "repas", "bien manger"),
        ("déjeuner", "dîner", "menu", "plats"),
        ("découverte", "convivial", "gourmand", "se régaler"),
    ),
    "restaurant_gastronomique": (
        ("restaurant", "gastronomique", "chef", "étoilé"),
        ("menu", "dégustation", "premium", "exceptionnel"),
        ("raffiné", "étoilée", "exceptionnelle", "haute cuisine"),
    ),
    "restaurant_francais": (
        ("restaurant", "traditionnel", "français", "terroir"),
        ("cuisine", "traditionnelle", "produits", "régionaux"),
        ("authentique", "familiale", "classique"),
    ),
    "bistrot": (
        ("bistrot", "quartier", "plat", "jour"),
        ("ardoise", "prix", "doux", "locale"),
        ("authentique", "simplicité", "traditionnel", "convivial"),
    ),
    "restaurant_italien": (
        ("restaurant", "italien", "pizza", "pâtes"),
        ("fraîches", "feu", "bois", "antipasti"),
        ("famiglia", "méditerranéenne", "conviviale", "italienne"),
    ),
    "restaurant_japonais": (
        ("restaurant", "asiatique", "sushi", "japonais"),
        ("frais", "ramen", "thé", "premium"),
        ("zen", "exotique", "moderne", "épurée"),
    ),
    "restaurant_chinois": (
        ("restaurant", "asiatique", "chinois", "wok"),
        ("dim sum", "thé", "nouilles", "canard laqué"),
        ("exotique", "partage", "familial", "épices"),
    ),
    "restaurant_marocain": (
        ("restaurant", "oriental", "couscous", "tajines"),
        ("menthe", "pâtisseries", "orientales", "épices"),
        ("chaleureuse", "conviviale", "orientale", "traditionnel"),
    ),
    "restaurant_mexicain": (
        ("tacos", "mexicain", "guacamole", "sauces"),
        ("piquantes", "emporter", "authentiques", "épicé"),
        ("street food", "décontracté", "mexicaine", "rapide"),
    ),
    "kebab": (
        ("kebab", "sandwich", "viande", "grillée"),
        ("livraison", "accessible", "rapide", "pratique"),
        ("décontracté", "entre potes", "street food", "turc"),
    ),
    "burger": (
        ("burger", "house", "frites", "artisanales"),
        ("maison", "milkshakes", "ingrédients", "frais"),
        ("américaine", "gourmande", "moderne", "trendy"),
    ),
    "pizzeria": (
        ("pizzeria", "pizza", "feu", "bois"),
        ("pâte", "maison", "livraison", "emporter"),
        ("italienne", "conviviale", "rapide", "familiale"),
    ),
    "cafe": (
        ("café", "pause", "boissons chaudes", "cosy"),
        ("pâtisseries", "petit-déjeuner", "thé", "wifi"),
        ("détente", "lecture", "travail", "rencontre"),
    ),
    # Activities
    "bowling": (
        ("bowling", "pistes", "chaussures", "location"),
        ("snack", "anniversaires", "compétition", "famille"),
        ("amusant", "décontracté", "sport", "loisir"),
    ),
    "billard_americain": (
        ("billard", "américain", "billes", "queue"),
        ("tables", "tournois", "compétition", "sport"),
        ("précision", "stratégie", "décontracté", "loisir"),
    ),
    "billard_francais": (
        ("billard", "français", "carambole", "blanche"),
        ("tables", "tournois", "compétition", "sport"),
        ("précision", "stratégie", "traditionnel", "loisir"),
    ),
    "escape_game": (
        ("escape game", "énigmes", "salles", "thématiques"),
        ("team building", "réservation", "challenge", "équipe"),
        ("adrénaline", "immersive", "aventure", "groupe"),
    ),
    "karting": (
        ("karting", "circuit", "vitesse", "course"),
        ("karts", "chronométrage", "compétition", "adrénaline"),
        ("sport", "mécanique", "loisir"),
    ),
    "laser_game": (
        ("laser game", "laser", "tactique", "équipe"),
        ("salles", "thématiques", "réservation", "challenge"),
        ("stratégie", "groupe", "amusant", "compétitif"),
    ),
    "vr_experience": (
        ("vr", "réalité", "virtuelle", "casque"),
        ("expérience", "immersive", "technologie", "nouveau"),
        ("futuriste", "découverte", "original", "innovant"),
    ),
    "quiz_room": (
        ("quiz", "culture générale", "buzzers", "équipe"),
        ("animateur", "réservation", "challenge", "rires"),
        ("entre amis", "compétitif", "amusant", "soirée"),
    ),
    # Culture & wellness
    "cinema": (
        ("cinéma", "films", "séances", "grand écran"),
        ("popcorn", "avant-première", "3d", "vo"),
        ("détente", "culture", "sortie", "couple"),
    ),
    "spa": (
        ("spa", "bien-être", "massage", "détente"),
        ("hammam", "sauna", "soins", "relaxation"),
        ("se ressourcer", "zen", "cocooning", "évasion"),
    ),
    "hotel": (
        ("hôtel", "chambres", "séjour", "hébergement"),
        ("petit-déjeuner", "réception", "confort", "nuit"),
        ("voyage", "week-end", "escapade", "repos"),
    ),
    "other": (
        ("autre", "activité", "spécialité", "unique"),
        ("définir", "original", "insolite", "créatif"),
        ("surprenant", "différent", "nouveau", "découverte"),
    ),
})

PRICE_LEVEL_TAGS = MappingProxyType({
    1: ("Envie d'économique", "Envie d'accessible"),
    2: ("Envie de bon rapport qualité-prix",),
    3: ("Envie de standing", "Envie de se faire plaisir"),
    4: ("Envie de luxe", "Envie d'exception"),
})

EXCELLENCE_TAGS = ("Envie d'excellence", "Envie de qualité")
RELIABILITY_TAGS = ("Envie de fiabilité",)

PROVIDER_CATEGORY_TAGS = MappingProxyType({
    "french_restaurant": ("Envie de français", "Envie de tradition"),
    "italian_restaurant": ("Envie d'italien", "Envie de convivial"),
    "japanese_restaurant": ("Envie de japonais", "Envie de raffinement"),
    "fast_food_restaurant": ("Envie de rapide", "Envie de casual"),
    "fine_dining_restaurant": ("Envie de gastronomie", "Envie de prestige"),
    "seafood_restaurant": ("Envie de fruits de mer", "Envie de fraîcheur"),
    "steak_house": ("Envie de viande", "Envie de grillade"),
    "pizza_place": ("Envie de pizza", "Envie de partage"),
    "pizza_restaurant": ("Envie de pizza", "Envie de partage"),
    "cafe": ("Envie de café", "Envie de pause"),
    "bakery": ("Envie de pâtisserie", "Envie de douceur"),
})


def tiers_for_type(establishment_type: str) -> TagTiers:
    """Tag tiers for a type, falling back to its family, then to "other"."""
    if establishment_type in TYPE_TAG_TIERS:
        return TYPE_TAG_TIERS[establishment_type]
    for family in ("restaurant", "bar"):
        if establishment_type.startswith(family):
            return TYPE_TAG_TIERS[family]
    return TYPE_TAG_TIERS["other"]


def generate_tags(place: NormalizedPlace, establishment_type: str) -> List[WeightedTag]:
    """
    Generate weighted discovery tags.

    Duplicates are merged case-insensitively: the first spelling and position
    are kept, the weight is the highest seen.
    """
    candidates: List[WeightedTag] = []

    primary, secondary, related = tiers_for_type(establishment_type)
    for tags, weight in ((primary, PRIMARY_WEIGHT), (secondary, SECONDARY_WEIGHT), (related, RELATED_WEIGHT)):
        candidates.extend(WeightedTag(tag=tag, weight=weight, origin=TagOrigin.TYPE) for tag in tags)

    price_level = clamp_price_level(place.price_level)
    candidates.extend(
        WeightedTag(tag=tag, weight=PRICE_WEIGHT, origin=TagOrigin.PRICE)
        for tag in PRICE_LEVEL_TAGS[price_level]
    )

    if place.rating >= EXCELLENCE_RATING:
        candidates.extend(
            WeightedTag(tag=tag, weight=EXCELLENCE_WEIGHT, origin=TagOrigin.RATING) for tag in EXCELLENCE_TAGS
        )
    elif place.rating >= RELIABILITY_RATING:
        candidates.extend(
            WeightedTag(tag=tag, weight=RELIABILITY_WEIGHT, origin=TagOrigin.RATING) for tag in RELIABILITY_TAGS
        )

    for category in place.category_tags:
        candidates.extend(
            WeightedTag(tag=tag, weight=CATEGORY_BONUS_WEIGHT, origin=TagOrigin.CATEGORY)
            for tag in PROVIDER_CATEGORY_TAGS.get(category, ())
        )

    return merge_tags(candidates)


def merge_tags(candidates: List[WeightedTag]) -> List[WeightedTag]:
    merged: Dict[str, WeightedTag] = {}
    for candidate in candidates:
        key = candidate.tag.casefold()
        existing = merged.get(key)
        if existing is None:
            merged[key] = candidate
        elif candidate.weight > existing.weight:
            merged[key] = existing.model_copy(update={"weight": candidate.weight})
    return list(merged.values())
