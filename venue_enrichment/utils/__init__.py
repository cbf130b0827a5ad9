"""Utility functions for the enrichment engine."""

from venue_enrichment.utils.text import contains_keyword, dedupe

__all__ = ["contains_keyword", "dedupe"]
