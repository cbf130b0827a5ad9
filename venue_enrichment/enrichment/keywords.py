"""Keyword extraction used as the pattern-learning payload."""
import re
from collections import Counter
from typing import List

from venue_enrichment.utils.text import contains_keyword, dedupe

# Vocabulary hinting at a type, reported to the learning service with the name
LEARNING_KEYWORDS = {
    "parc_loisir_indoor": ["parc", "loisir", "indoor", "intérieur", "jeux", "games", "factory", "ludique", "famille", "enfants"],
    "escape_game": ["escape", "room", "énigme", "mystère", "puzzle", "défi", "challenge", "aventure", "donjon"],
    "vr_experience": ["vr", "virtual", "réalité", "virtuelle", "casque", "immersion", "simulation"],
    "karaoke": ["karaoké", "karaoke", "chanson", "micro", "cabine", "singing"],
    "bowling": ["bowling", "pistes", "quilles", "strike"],
    "restaurant": ["restaurant", "resto", "cuisine", "manger", "repas", "table"],
    "bar": ["bar", "boisson", "alcool", "cocktail", "bière", "vin"],
    "cinema": ["cinéma", "cinema", "film", "movie", "salle", "projection"],
}

WORD_PATTERN = re.compile(r"\w+")


def extract_keywords(text: str) -> List[str]:
    """
    Extract learning keywords from free text.

    Returns the type-vocabulary words present in the text, followed by any
    word longer than three characters that occurs more than once.
    """
    if not text:
        return []

    lowered = text.lower()
    keywords = []
    for vocabulary in LEARNING_KEYWORDS.values():
        keywords.extend(word for word in vocabulary if contains_keyword(lowered, word))

    counts = Counter(WORD_PATTERN.findall(lowered))
    keywords.extend(word for word, count in counts.items() if count > 1 and len(word) > 3)

    return dedupe(keywords)
