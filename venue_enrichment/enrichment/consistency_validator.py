"""Soft consistency checks on enrichment records. Findings are data, never exceptions."""
import logging

from venue_enrichment.enrichment.establishment_types import RESERVATION_CENTRIC_TYPES
from venue_enrichment.models.enrichment import EnrichmentRecord, FactCategory, ValidationResult

logger = logging.getLogger(__name__)

RESERVATION_MARKERS = ("réservation", "reservation", "booking")


def has_reservation_info(record: EnrichmentRecord) -> bool:
    return any(
        marker in value.lower()
        for value in record.values_for(FactCategory.SERVICES.value)
        for marker in RESERVATION_MARKERS
    )


def validate_record(record: EnrichmentRecord) -> ValidationResult:
    """Check that the record carries what its type makes essential."""
    warnings = []
    suggestions = []

    if record.establishment_type in RESERVATION_CENTRIC_TYPES and not has_reservation_info(record):
        warnings.append(
            f"Aucune information de réservation pour un établissement de type {record.establishment_type}"
        )
        suggestions.append("Ajouter les modalités de réservation (ex. « Réservations obligatoires »)")

    if not record.facts_for(FactCategory.PAYMENTS.value):
        warnings.append("Aucun moyen de paiement renseigné")
        suggestions.append("Ajouter au moins un moyen de paiement (ex. « Carte bancaire »)")

    if not record.facts_for(FactCategory.ACCESSIBILITY.value):
        warnings.append("Aucune information d'accessibilité renseignée")
        suggestions.append("Préciser l'accessibilité de l'établissement (ex. « Accessible PMR »)")

    if warnings:
        logger.debug(f"Record {record.place_id} has {len(warnings)} consistency warnings")

    return ValidationResult(is_valid=not warnings, warnings=warnings, suggestions=suggestions)
