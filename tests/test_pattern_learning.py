import asyncio
import json
import logging

import httpx
import pytest
import redis

from venue_enrichment.config import settings
from venue_enrichment.enrichment.exceptions import PatternLearningError
from venue_enrichment.enrichment.type_classifier import TypeClassifier
from venue_enrichment.services.pattern_learning import (
    LocalPatternStore,
    PatternLearningClient,
    build_pattern_learner,
    calculate_similarity,
)
from venue_enrichment.services.redis_client import RedisClient


class FakeRedis:
    """In-memory stand-in for redis.Redis."""

    def __init__(self):
        self.store = {}
        self.ttls = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value):
        self.store[key] = value

    async def setex(self, key, ttl, value):
        self.store[key] = value
        self.ttls[key] = ttl

    async def delete(self, key):
        self.store.pop(key, None)


class BrokenRedis:
    async def get(self, key):
        raise redis.ConnectionError("connection refused")

    async def set(self, key, value):
        raise redis.ConnectionError("connection refused")

    async def setex(self, key, ttl, value):
        raise redis.ConnectionError("connection refused")

    async def delete(self, key):
        raise redis.ConnectionError("connection refused")


def make_client(handler, **kwargs):
    return PatternLearningClient(
        base_url="http://learning.test/",
        api_key="secret",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def test_suggest_type_posts_venue_and_sorts_suggestions():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "suggestions": [
                    {"type": "bowling", "confidence": 0.7, "reason": "Nom proche"},
                    {"type": "karaoke", "confidence": 0.9, "keywords": ["micro", 3]},
                    {"confidence": 0.5},
                    "garbage",
                ]
            },
        )

    client = make_client(handler)
    suggestions = asyncio.run(client.suggest_type("Le Bowling du Parc", ["bowling_alley"], ""))

    assert [s.establishment_type for s in suggestions] == ["karaoke", "bowling"]
    assert suggestions[0].keywords == ["micro"]
    assert suggestions[1].reason == "Nom proche"

    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/patterns/suggest"
    assert request.headers["Authorization"] == "Bearer secret"
    assert json.loads(request.content) == {
        "name": "Le Bowling du Parc",
        "google_types": ["bowling_alley"],
        "description": "",
    }


def test_suggest_type_accepts_bare_list():
    def handler(request):
        return httpx.Response(200, json=[{"establishment_type": "bar", "confidence": 1.4}])

    suggestions = asyncio.run(make_client(handler).suggest_type("Le Zinc", ["bar"], ""))

    assert len(suggestions) == 1
    assert suggestions[0].establishment_type == "bar"
    assert suggestions[0].confidence == 1.0


def test_record_pattern_posts_classification():
    seen = []

    def handler(request):
        seen.append(json.loads(request.content))
        return httpx.Response(201)

    asyncio.run(make_client(handler).record_pattern("Le Zinc", "bar", ["bar"], ["zinc"], 0.75))

    assert seen == [
        {
            "name": "Le Zinc",
            "detected_type": "bar",
            "google_types": ["bar"],
            "keywords": ["zinc"],
            "confidence": 0.75,
        }
    ]


def test_http_error_status_raises_pattern_learning_error():
    def handler(request):
        return httpx.Response(503, json={"detail": "unavailable"})

    with pytest.raises(PatternLearningError) as exc_info:
        asyncio.run(make_client(handler).suggest_type("Le Zinc", [], ""))

    assert exc_info.value.status_code == 503


def test_transport_error_raises_pattern_learning_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(PatternLearningError) as exc_info:
        asyncio.run(make_client(handler).suggest_type("Le Zinc", [], ""))

    assert exc_info.value.status_code is None


def test_invalid_json_raises_pattern_learning_error():
    def handler(request):
        return httpx.Response(200, content=b"<html>oops</html>")

    with pytest.raises(PatternLearningError):
        asyncio.run(make_client(handler).suggest_type("Le Zinc", [], ""))


def test_suggestions_are_cached_in_redis():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=[{"type": "bar", "confidence": 0.8}])

    fake = FakeRedis()
    client = make_client(handler, cache=RedisClient(client=fake))

    async def scenario():
        first = await client.suggest_type("Le Zinc", ["bar"], "Bar de quartier")
        second = await client.suggest_type("le zinc ", ["bar"], "bar de quartier")
        return first, second

    first, second = asyncio.run(scenario())

    assert len(calls) == 1
    assert first == second
    [key] = fake.store
    assert key.startswith("pattern-learning:suggest:")
    assert fake.ttls[key] == settings.learning_cache_ttl_seconds


def test_redis_failures_are_logged_not_raised(caplog):
    cache = RedisClient(client=BrokenRedis())

    async def scenario():
        assert await cache.get("k") is None
        assert await cache.set("k", {"a": 1}, ttl=10) is False
        assert await cache.delete("k") is False

    with caplog.at_level(logging.WARNING):
        asyncio.run(scenario())

    assert "Redis GET error" in caplog.text


def test_slow_cache_cannot_delay_classification_past_timeout():
    class HangingRedis(FakeRedis):
        async def get(self, key):
            await asyncio.sleep(5)

    def handler(request):
        return httpx.Response(200, json=[{"type": "karaoke", "confidence": 0.9}])

    client = make_client(handler, cache=RedisClient(client=HangingRedis()))

    async def scenario():
        classifier = TypeClassifier(client, timeout=0.05)
        loop = asyncio.get_running_loop()
        started = loop.time()
        result = await classifier.classify("Le Bowling du Parc", ["bowling_alley"])
        elapsed = loop.time() - started
        await classifier.drain()
        return result, elapsed

    result, elapsed = asyncio.run(scenario())

    assert result.establishment_type == "bowling"
    assert elapsed < 1


def test_client_requires_a_url(monkeypatch):
    monkeypatch.setattr(settings, "pattern_learning_url", None)

    with pytest.raises(ValueError):
        PatternLearningClient()


def test_build_pattern_learner_follows_settings(monkeypatch):
    monkeypatch.setattr(settings, "pattern_learning_url", None)
    assert build_pattern_learner() is None

    monkeypatch.setattr(settings, "pattern_learning_url", "http://learning.test")
    monkeypatch.setattr(settings, "learning_cache_enabled", False)
    learner = build_pattern_learner()
    assert isinstance(learner, PatternLearningClient)
    assert learner.cache is None


def test_similarity_weights_keywords_and_categories():
    assert calculate_similarity("bowling du parc", ["bowling", "parc"], ["bowling_alley"], ["bowling_alley"]) == 1.0
    assert calculate_similarity("parc des expositions", ["bowling", "parc"], [], ["bowling_alley"]) == pytest.approx(0.2)
    assert calculate_similarity("chez toto", [], ["bar"], ["bar", "restaurant"]) == pytest.approx(0.3)
    assert calculate_similarity("chez toto", [], [], []) == 0.0


def test_local_store_suggests_only_corrected_patterns():
    store = LocalPatternStore()

    async def scenario():
        await store.record_pattern("Le Bowling du Parc", "other", ["bowling_alley"], ["bowling", "parc"], 0.3)
        before = await store.suggest_type("Bowling du Parc Nord", ["bowling_alley"], "")
        store.correct_type("Bowling du Parc", "bowling", corrected_by="operator-1")
        after = await store.suggest_type("Bowling du Parc Nord", ["bowling_alley"], "")
        unrelated = await store.suggest_type("Chez Toto", ["restaurant"], "")
        return before, after, unrelated

    before, after, unrelated = asyncio.run(scenario())

    assert before == []
    assert [s.establishment_type for s in after] == ["bowling"]
    assert after[0].confidence == 1.0
    assert after[0].reason == 'Basé sur "Le Bowling du Parc" (100% de similarité)'
    assert unrelated == []
    assert store.patterns[0].corrected_by == "operator-1"


def test_correction_without_recorded_pattern_creates_one():
    store = LocalPatternStore()

    pattern = store.correct_type("Mystery Escape Room", "escape_game")

    assert pattern.detected_type == "unknown"
    assert pattern.resolved_type == "escape_game"
    assert "escape" in pattern.keywords
    assert store.patterns == [pattern]
