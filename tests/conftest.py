import asyncio
from typing import List

import pytest

from venue_enrichment.models.enrichment import TypeSuggestion


class RecordingLearner:
    """Learner returning canned suggestions and remembering write-backs."""

    def __init__(self, suggestions: List[TypeSuggestion] = None):
        self.suggestions = suggestions or []
        self.recorded = []
        self.lookups = 0

    async def suggest_type(self, name, category_tags, text):
        self.lookups += 1
        return list(self.suggestions)

    async def record_pattern(self, name, detected_type, category_tags, keywords, confidence):
        self.recorded.append(
            {
                "name": name,
                "detected_type": detected_type,
                "category_tags": category_tags,
                "keywords": keywords,
                "confidence": confidence,
            }
        )


class FailingLearner:
    """Learner whose every call fails."""

    def __init__(self):
        self.record_calls = 0

    async def suggest_type(self, name, category_tags, text):
        raise ConnectionError("learning service unreachable")

    async def record_pattern(self, name, detected_type, category_tags, keywords, confidence):
        self.record_calls += 1
        raise ConnectionError("learning service unreachable")


class SlowLearner(RecordingLearner):
    """Learner that answers after `delay` seconds."""

    def __init__(self, delay: float, suggestions: List[TypeSuggestion] = None):
        super().__init__(suggestions)
        self.delay = delay

    async def suggest_type(self, name, category_tags, text):
        await asyncio.sleep(self.delay)
        return await super().suggest_type(name, category_tags, text)


@pytest.fixture
def bowling_payload():
    return {
        "place_id": "ChIJ-bowling-du-parc",
        "name": "Le Bowling du Parc",
        "types": ["bowling_alley", "point_of_interest", "establishment"],
        "reviews": [{"text": "Super soirée, parking gratuit et accessible en fauteuil"}],
    }


@pytest.fixture
def monday_payload():
    return {
        "place_id": "ChIJ-monday-only",
        "name": "Chez Paulette",
        "types": ["restaurant"],
        "opening_hours": {
            "periods": [{"open": {"day": 1, "time": "0900"}, "close": {"day": 1, "time": "1800"}}]
        },
    }


@pytest.fixture
def escape_payload():
    return {
        "place_id": "ChIJ-escape",
        "name": "Lock Academy Escape Game",
        "types": ["tourist_attraction"],
        "price_level": 2,
        "rating": 4.7,
        "user_ratings_total": 812,
        "payment_options": {"accepts_credit_cards": True, "accepts_nfc": True},
        "wheelchair_accessible_entrance": True,
        "reviews": [
            {"text": "Énigmes géniales, parfait pour un team building entre collègues."},
            {"text": "Le game master était top, réservation en ligne très simple."},
        ],
    }


@pytest.fixture
def recording_learner():
    return RecordingLearner()


@pytest.fixture
def failing_learner():
    return FailingLearner()
