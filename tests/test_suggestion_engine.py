import pytest

from venue_enrichment.enrichment.establishment_types import ESTABLISHMENT_TYPES, OTHER
from venue_enrichment.enrichment.suggestion_engine import (
    MANDATORY_CATALOG,
    build_suggestions,
    catalog_for_type,
    is_equivalent,
    manual_completeness,
    merge_facts,
)
from venue_enrichment.models.enrichment import Fact, FactSource, manual_fact


def automatic(category, value, confidence=0.8):
    return Fact(category=category, value=value, source=FactSource.AUTOMATIC, confidence=confidence)


def bucket_values(facts):
    return [(fact.category, fact.value) for fact in facts]


def all_placed(bucket):
    return (
        bucket_values(bucket.recommended)
        + bucket_values(bucket.optional)
        + bucket_values(bucket.to_verify)
        + bucket_values(bucket.already_found)
    )


@pytest.mark.parametrize("establishment_type", ESTABLISHMENT_TYPES + (OTHER,))
def test_every_mandatory_entry_is_placed_exactly_once(establishment_type):
    bucket = build_suggestions({}, establishment_type)
    placed = all_placed(bucket)

    for entry in MANDATORY_CATALOG:
        assert placed.count((entry.category, entry.value)) == 1
        assert (entry.category, entry.value) in bucket_values(bucket.recommended)
    assert bucket.already_found == []
    assert len(placed) == len(set(placed))


def test_confident_automatic_fact_is_already_found():
    bucket = build_suggestions({"payments": [automatic("payments", "Carte bancaire")]}, "bar")

    assert ("payments", "Carte bancaire") in bucket_values(bucket.already_found)
    assert ("payments", "Carte bancaire") not in bucket_values(bucket.recommended)
    found = next(f for f in bucket.already_found if f.value == "Carte bancaire")
    assert found.source == FactSource.SUGGESTED
    assert found.rationale == "Déjà renseigné : Carte bancaire"


def test_equivalence_is_substring_in_either_direction():
    assert is_equivalent("Parking", "Parking gratuit")
    assert is_equivalent("toilettes homme/femme", "Toilettes")
    assert not is_equivalent("Chauffage", "Climatisation")
    assert not is_equivalent("", "Parking")


def test_specific_parking_fact_covers_mandatory_parking():
    bucket = build_suggestions({"parking": [automatic("parking", "Parking gratuit")]}, "bowling")
    assert ("parking", "Parking") in bucket_values(bucket.already_found)


def test_low_confidence_match_is_already_found():
    fact = automatic("payments", "Espèces", confidence=0.5)
    bucket = build_suggestions({"payments": [fact]}, "bar")

    assert ("payments", "Espèces") in bucket_values(bucket.already_found)
    assert ("payments", "Espèces") not in bucket_values(bucket.recommended)
    assert bucket.to_verify == []
    assert fact.confidence == 0.5


def test_manual_card_payment_is_not_recommended_again():
    bucket = build_suggestions({}, "bar", manual={"payments": [manual_fact("payments", "Carte bancaire")]})

    assert ("payments", "Carte bancaire") in bucket_values(bucket.already_found)
    assert ("payments", "Carte bancaire") not in bucket_values(bucket.recommended)
    assert ("payments", "Espèces") in bucket_values(bucket.recommended)


def test_unmatched_low_confidence_fact_goes_to_verify():
    fact = automatic("services", "Desserts", confidence=0.4)
    bucket = build_suggestions({"services": [fact]}, "bar")

    assert fact in bucket.to_verify


def test_manual_fact_always_counts_as_found():
    bucket = build_suggestions(
        {"payments": [automatic("payments", "Espèces", confidence=0.5)]},
        "bar",
        manual={"payments": [manual_fact("payments", "Espèces")]},
    )

    assert ("payments", "Espèces") in bucket_values(bucket.already_found)
    assert ("payments", "Espèces") not in bucket_values(bucket.to_verify)


def test_type_catalog_feeds_recommended_and_optional():
    bucket = build_suggestions({}, "escape_game")

    assert ("services", "Réservations obligatoires") in bucket_values(bucket.recommended)
    assert ("services", "Team building") in bucket_values(bucket.optional)
    assert bucket.total_suggestions == len(bucket.recommended) + len(bucket.optional)


def test_entry_shared_by_recommended_and_optional_lists_is_placed_once():
    bucket = build_suggestions({}, "vr_experience")
    placed = all_placed(bucket)
    assert len(placed) == len(set(placed))


def test_catalog_falls_back_to_family():
    assert catalog_for_type("restaurant_thai") == catalog_for_type("restaurant")
    assert catalog_for_type("bar_a_vin") == catalog_for_type("bar")
    assert catalog_for_type("musee") == ((), ())


def test_merge_prefers_manual_over_automatic_over_suggested():
    merged = merge_facts(
        {"services": [automatic("services", "Terrasse"), automatic("services", "Snacks")]},
        {"services": [manual_fact("services", "terrasse")]},
        {"services": [Fact(category="services", value="Snacks", source=FactSource.SUGGESTED, confidence=0.8),
                      Fact(category="services", value="Vestiaire", source=FactSource.SUGGESTED, confidence=0.8)]},
    )

    by_value = {fact.value.casefold(): fact for fact in merged["services"]}
    assert by_value["terrasse"].source == FactSource.MANUAL
    assert by_value["snacks"].source == FactSource.AUTOMATIC
    assert by_value["vestiaire"].source == FactSource.SUGGESTED
    assert len(merged["services"]) == 3


def test_merge_keeps_empty_automatic_categories():
    merged = merge_facts({"children": [], "payments": [automatic("payments", "Espèces")]})
    assert merged["children"] == []


def test_manual_completeness_is_share_of_mandatory_entries():
    assert manual_completeness(None) == 0.0
    manual = {
        "payments": [manual_fact("payments", "Carte bancaire"), manual_fact("payments", "Espèces")],
        "parking": [manual_fact("parking", "Parking gratuit")],
    }
    assert manual_completeness(manual) == round(3 / len(MANDATORY_CATALOG), 3)
