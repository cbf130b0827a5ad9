"""Venue enrichment engine: turns provider place payloads into enrichment records."""

from venue_enrichment.enrichment.pipeline import EnrichmentPipeline

__version__ = "1.0.0"

__all__ = ["EnrichmentPipeline", "__version__"]
