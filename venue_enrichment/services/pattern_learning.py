"""
Pattern-learning collaborators.

The classifier only depends on the two-operation PatternLearner protocol:
`suggest_type` proposes types learned from previously confirmed
classifications, `record_pattern` reports a new classification.

Two implementations:
- PatternLearningClient talks to the remote learning service over HTTP,
  optionally caching suggestions in Redis.
- LocalPatternStore keeps patterns in process and scores operator-corrected
  ones by keyword and provider-category similarity.
"""
import hashlib
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol

import httpx
from pydantic import BaseModel, Field

from venue_enrichment.config import settings
from venue_enrichment.enrichment.exceptions import PatternLearningError
from venue_enrichment.enrichment.keywords import extract_keywords
from venue_enrichment.models.enrichment import TypeSuggestion
from venue_enrichment.services.redis_client import RedisClient

logger = logging.getLogger(__name__)

KEYWORD_WEIGHT = 0.4
CATEGORY_WEIGHT = 0.6


class PatternLearner(Protocol):
    """Interface of the pattern-learning collaborator."""

    async def suggest_type(
        self, name: str, category_tags: List[str], text: str
    ) -> List[TypeSuggestion]:
        ...

    async def record_pattern(
        self,
        name: str,
        detected_type: str,
        category_tags: List[str],
        keywords: List[str],
        confidence: float,
    ) -> None:
        ...


class PatternLearningClient:
    """HTTP client for the remote pattern-learning service."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        cache: Optional[RedisClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        base_url = base_url or settings.pattern_learning_url
        if not base_url:
            raise ValueError("Pattern-learning service URL is not configured")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key if api_key is not None else settings.pattern_learning_api_key
        self.timeout = timeout or settings.pattern_learning_timeout
        self.cache = cache
        self.cache_ttl = settings.learning_cache_ttl_seconds
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=self._headers(),
            transport=self._transport,
        )

    async def _post(self, path: str, payload: Dict[str, Any]) -> Any:
        try:
            async with self._client() as client:
                response = await client.post(path, json=payload)
                response.raise_for_status()
                if not response.content:
                    return None
                return response.json()
        except httpx.HTTPStatusError as exc:
            raise PatternLearningError(
                f"Pattern-learning service returned {exc.response.status_code} for {path}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise PatternLearningError(f"Pattern-learning request to {path} failed: {exc}") from exc
        except ValueError as exc:
            raise PatternLearningError(f"Pattern-learning service sent invalid JSON for {path}") from exc

    async def suggest_type(
        self, name: str, category_tags: List[str], text: str
    ) -> List[TypeSuggestion]:
        """
        Ask the service for type suggestions, best first.

        Raises:
            PatternLearningError: on HTTP or transport failure.
        """
        cache_key = _suggestion_cache_key(name, category_tags, text)
        if self.cache is not None:
            cached = await self.cache.get(cache_key)
            if cached is not None:
                logger.debug(f"Pattern suggestions for '{name}' served from cache")
                return [TypeSuggestion(**item) for item in cached]

        data = await self._post(
            "/patterns/suggest",
            {"name": name, "google_types": list(category_tags), "description": text},
        )
        suggestions = _parse_suggestions(data)

        if self.cache is not None:
            await self.cache.set(
                cache_key,
                [suggestion.model_dump() for suggestion in suggestions],
                ttl=self.cache_ttl,
            )
        return suggestions

    async def record_pattern(
        self,
        name: str,
        detected_type: str,
        category_tags: List[str],
        keywords: List[str],
        confidence: float,
    ) -> None:
        """
        Report a classification to the service.

        Raises:
            PatternLearningError: on HTTP or transport failure.
        """
        await self._post(
            "/patterns",
            {
                "name": name,
                "detected_type": detected_type,
                "google_types": list(category_tags),
                "keywords": list(keywords),
                "confidence": confidence,
            },
        )


def _suggestion_cache_key(name: str, category_tags: List[str], text: str) -> str:
    payload = json.dumps(
        [name.strip().lower(), sorted(category_tags), (text or "").strip().lower()],
        ensure_ascii=False,
    )
    digest = hashlib.sha1(payload.encode("utf-8")).hexdigest()
    return f"pattern-learning:suggest:{digest}"


def _parse_suggestions(data: Any) -> List[TypeSuggestion]:
    """Accept either a bare list or {"suggestions": [...]}; skip malformed items."""
    if isinstance(data, dict):
        data = data.get("suggestions")
    if not isinstance(data, list):
        return []

    suggestions = []
    for item in data:
        if not isinstance(item, dict):
            continue
        establishment_type = item.get("type") or item.get("establishment_type")
        try:
            confidence = float(item.get("confidence", 0))
        except (TypeError, ValueError):
            continue
        if not establishment_type:
            continue
        suggestions.append(
            TypeSuggestion(
                establishment_type=establishment_type,
                confidence=max(0.0, min(1.0, confidence)),
                reason=item.get("reason") or "",
                keywords=[k for k in item.get("keywords") or [] if isinstance(k, str)],
            )
        )

    suggestions.sort(key=lambda s: s.confidence, reverse=True)
    return suggestions


class LearningPattern(BaseModel):
    """A recorded classification, possibly corrected by an operator."""
    name: str
    detected_type: str
    corrected_type: Optional[str] = None
    category_tags: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    confidence: float = 0.0
    corrected_by: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_corrected(self) -> bool:
        return self.corrected_type is not None

    @property
    def resolved_type(self) -> str:
        return self.corrected_type or self.detected_type


class LocalPatternStore:
    """In-process pattern store. Only operator-corrected patterns feed suggestions."""

    def __init__(self, similarity_threshold: Optional[float] = None):
        self.similarity_threshold = (
            similarity_threshold
            if similarity_threshold is not None
            else settings.learning_similarity_threshold
        )
        self.patterns: List[LearningPattern] = []

    async def record_pattern(
        self,
        name: str,
        detected_type: str,
        category_tags: List[str],
        keywords: List[str],
        confidence: float,
    ) -> None:
        self.patterns.append(
            LearningPattern(
                name=name,
                detected_type=detected_type,
                category_tags=list(category_tags),
                keywords=list(keywords),
                confidence=confidence,
            )
        )
        logger.debug(f"Learning pattern recorded: {name} -> {detected_type}")

    def correct_type(self, name: str, corrected_type: str, corrected_by: Optional[str] = None) -> LearningPattern:
        """
        Record an operator correction for a venue name.

        Updates the first pattern whose name contains `name` (case-insensitive),
        or creates a new corrected pattern when none exists.
        """
        needle = name.lower()
        for pattern in self.patterns:
            if needle in pattern.name.lower():
                pattern.corrected_type = corrected_type
                pattern.corrected_by = corrected_by
                pattern.updated_at = datetime.now(timezone.utc)
                logger.info(f"Learning pattern corrected: {pattern.name} -> {corrected_type}")
                return pattern

        pattern = LearningPattern(
            name=name,
            detected_type="unknown",
            corrected_type=corrected_type,
            keywords=extract_keywords(name),
            confidence=1.0,
            corrected_by=corrected_by,
        )
        self.patterns.append(pattern)
        logger.info(f"Learning pattern created from correction: {name} -> {corrected_type}")
        return pattern

    async def suggest_type(
        self, name: str, category_tags: List[str], text: str
    ) -> List[TypeSuggestion]:
        full_text = f"{name} {text or ''}".lower()
        suggestions = []

        for pattern in self.patterns:
            if not pattern.is_corrected:
                continue
            similarity = calculate_similarity(full_text, pattern.keywords, category_tags, pattern.category_tags)
            if similarity > self.similarity_threshold:
                suggestions.append(
                    TypeSuggestion(
                        establishment_type=pattern.resolved_type,
                        confidence=similarity,
                        reason=f'Basé sur "{pattern.name}" ({round(similarity * 100)}% de similarité)',
                        keywords=pattern.keywords,
                    )
                )

        suggestions.sort(key=lambda s: s.confidence, reverse=True)
        return suggestions


def calculate_similarity(
    text: str,
    pattern_keywords: List[str],
    category_tags: List[str],
    pattern_category_tags: List[str],
) -> float:
    """
    Score how close a venue is to a stored pattern.

    40% share of the pattern keywords found in the text, plus 60% share of the
    pattern's provider categories also carried by the venue. Capped at 1.
    """
    similarity = 0.0

    if pattern_keywords:
        lowered = text.lower()
        hits = sum(1 for keyword in pattern_keywords if keyword.lower() in lowered)
        similarity += hits / len(pattern_keywords) * KEYWORD_WEIGHT

    if pattern_category_tags:
        hits = sum(1 for tag in category_tags if tag in pattern_category_tags)
        similarity += hits / len(pattern_category_tags) * CATEGORY_WEIGHT

    return min(similarity, 1.0)


def build_pattern_learner(cache: Optional[RedisClient] = None) -> Optional[PatternLearningClient]:
    """Remote client from settings, or None when no service URL is configured."""
    if not settings.pattern_learning_url:
        return None
    if cache is None and settings.learning_cache_enabled:
        cache = RedisClient()
    return PatternLearningClient(cache=cache)
