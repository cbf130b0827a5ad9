"""
Establishment type classifier.

Resolution order:
1. pattern-learning suggestion (bounded by a timeout, accepted above a
   confidence threshold and only for catalog types)
2. keyword scan of the name and description
3. provider category table
4. "other"

Successful classifications are reported back to the learning service in a
background task that never blocks or fails the caller.
"""
import asyncio
import logging
from typing import List, Optional, Set

from venue_enrichment.config import settings
from venue_enrichment.enrichment.establishment_types import (
    CATEGORY_TO_TYPE,
    OTHER,
    TYPE_KEYWORDS,
    is_known_type,
)
from venue_enrichment.enrichment.keywords import extract_keywords
from venue_enrichment.models.enrichment import ClassificationResult, ClassificationSource
from venue_enrichment.services.pattern_learning import PatternLearner
from venue_enrichment.utils.text import dedupe, first_keyword

logger = logging.getLogger(__name__)


def classify_by_rules(
    name: str, category_tags: List[str], description: str = ""
) -> ClassificationResult:
    """
    Deterministic classification from keywords, then provider categories.

    Args:
        name: Venue name
        category_tags: Provider category tags (e.g. "bowling_alley")
        description: Free text describing the venue

    Returns:
        ClassificationResult, "other" when nothing matches
    """
    text = f"{name or ''} {description or ''}".lower()
    keywords = extract_keywords(text)

    for establishment_type, type_keywords in TYPE_KEYWORDS:
        hit = first_keyword(text, type_keywords)
        if hit:
            logger.debug(f"Keyword '{hit}' classified '{name}' as {establishment_type}")
            return ClassificationResult(
                establishment_type=establishment_type,
                source=ClassificationSource.KEYWORDS,
                confidence=settings.keyword_match_confidence,
                keywords=dedupe([hit] + keywords),
            )

    tags = {tag.lower() for tag in category_tags or []}
    for category, establishment_type in CATEGORY_TO_TYPE:
        if category in tags:
            logger.debug(f"Category '{category}' classified '{name}' as {establishment_type}")
            return ClassificationResult(
                establishment_type=establishment_type,
                source=ClassificationSource.CATEGORY,
                confidence=settings.category_match_confidence,
                keywords=keywords,
            )

    return ClassificationResult(
        establishment_type=OTHER,
        source=ClassificationSource.DEFAULT,
        confidence=settings.default_type_confidence,
        keywords=keywords,
    )


class TypeClassifier:
    """Classifies venues, consulting the pattern-learning collaborator first when there is one."""

    def __init__(
        self,
        learner: Optional[PatternLearner] = None,
        timeout: Optional[float] = None,
        acceptance_threshold: Optional[float] = None,
    ):
        self.learner = learner
        self.timeout = timeout if timeout is not None else settings.pattern_learning_timeout
        self.acceptance_threshold = (
            acceptance_threshold
            if acceptance_threshold is not None
            else settings.learning_acceptance_threshold
        )
        self._pending: Set[asyncio.Task] = set()

    async def classify(
        self, name: str, category_tags: List[str], description: str = ""
    ) -> ClassificationResult:
        """Classify a venue. Never raises because of the learning collaborator."""
        result = await self._classify_from_learning(name, category_tags, description)
        if result is None:
            result = classify_by_rules(name, category_tags, description)

        if result.source != ClassificationSource.DEFAULT:
            self._report(name, result, category_tags)

        logger.info(
            f"Classified '{name}' as {result.establishment_type} "
            f"(source={result.source.value}, confidence={result.confidence:.2f})"
        )
        return result

    async def _classify_from_learning(
        self, name: str, category_tags: List[str], description: str
    ) -> Optional[ClassificationResult]:
        if self.learner is None:
            return None

        try:
            suggestions = await asyncio.wait_for(
                self.learner.suggest_type(name, list(category_tags), description),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Pattern-learning lookup for '{name}' timed out after {self.timeout}s")
            return None
        except Exception as exc:
            logger.warning(f"Pattern-learning lookup for '{name}' failed: {exc}")
            return None

        if not suggestions:
            return None

        best = max(suggestions, key=lambda s: s.confidence)
        if best.confidence <= self.acceptance_threshold:
            logger.debug(f"Learning suggestion {best.establishment_type} ({best.confidence:.2f}) below threshold")
            return None
        if not is_known_type(best.establishment_type):
            logger.warning(f"Learning suggested unknown type '{best.establishment_type}' for '{name}'")
            return None

        return ClassificationResult(
            establishment_type=best.establishment_type,
            source=ClassificationSource.LEARNING,
            confidence=best.confidence,
            keywords=dedupe(best.keywords + extract_keywords(f"{name} {description}")),
        )

    def _report(self, name: str, result: ClassificationResult, category_tags: List[str]) -> None:
        """Fire-and-forget write-back to the learning service."""
        if self.learner is None:
            return
        try:
            task = asyncio.get_running_loop().create_task(
                self._record(name, result, list(category_tags))
            )
        except RuntimeError:
            logger.warning("No running event loop, learning write-back skipped")
            return
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _record(self, name: str, result: ClassificationResult, category_tags: List[str]) -> None:
        try:
            await self.learner.record_pattern(
                name,
                result.establishment_type,
                category_tags,
                result.keywords,
                result.confidence,
            )
        except Exception as exc:
            logger.warning(f"Learning write-back for '{name}' failed: {exc}")

    @property
    def pending_reports(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for outstanding learning write-backs."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
