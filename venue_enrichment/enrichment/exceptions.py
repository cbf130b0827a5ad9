"""Exceptions raised by the enrichment engine."""
from typing import Optional


class EnrichmentError(Exception):
    """Base class for enrichment failures."""


class InvalidPayloadError(EnrichmentError):
    """The provider payload cannot be enriched (no place identifier)."""


class PatternLearningError(EnrichmentError):
    """The pattern-learning service answered with an error or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
