from venue_enrichment.enrichment.consistency_validator import has_reservation_info, validate_record
from venue_enrichment.models.enrichment import EnrichmentMetadata, EnrichmentRecord, Fact


def make_record(establishment_type, **facts):
    return EnrichmentRecord(
        place_id="p1",
        establishment_type=establishment_type,
        facts={
            category: [Fact(category=category, value=value) for value in values]
            for category, values in facts.items()
        },
        metadata=EnrichmentMetadata(provider_confidence=0.8, manual_completeness=0.0),
    )


def test_escape_game_without_reservation_info_is_flagged():
    record = make_record(
        "escape_game",
        services=["Toilettes"],
        payments=["Carte bancaire"],
        accessibility=["Accessible PMR"],
    )

    result = validate_record(record)

    assert result.is_valid is False
    assert result.warnings == ["Aucune information de réservation pour un établissement de type escape_game"]
    assert len(result.suggestions) == 1


def test_reservation_fact_satisfies_reservation_centric_type():
    record = make_record(
        "escape_game",
        services=["Réservations obligatoires"],
        payments=["Carte bancaire"],
        accessibility=["Accessible PMR"],
    )

    assert has_reservation_info(record)
    assert validate_record(record).is_valid is True


def test_bar_needs_no_reservation_info():
    record = make_record("bar", payments=["Espèces"], accessibility=["Accessible PMR"])
    result = validate_record(record)

    assert result.is_valid is True
    assert result.warnings == []


def test_missing_payments_and_accessibility_are_reported():
    result = validate_record(make_record("bar"))

    assert result.warnings == [
        "Aucun moyen de paiement renseigné",
        "Aucune information d'accessibilité renseignée",
    ]
    assert result.is_valid is False
