from venue_enrichment.enrichment.fact_extractors import (
    RATIONALE_CATEGORY,
    RATIONALE_FALLBACK,
    RATIONALE_FLAG,
    extract_accessibility,
    extract_all_facts,
    extract_children,
    extract_clientele,
    extract_parking,
    extract_payments,
    extract_popular_for,
    extract_services,
    extract_specialties,
    fallback_values,
)
from venue_enrichment.enrichment.normalizer import normalize_place
from venue_enrichment.models.enrichment import FactCategory


def test_keyword_repeated_many_times_yields_one_fact():
    corpus = "terrasse au soleil. " * 5
    assert extract_services({}, corpus, fallback=False) == ["Terrasse"]


def test_explicit_false_flag_suppresses_review_evidence():
    assert extract_services({"outdoor_seating": False}, "belle terrasse", fallback=False) == []


def test_explicit_true_flag_adds_label_without_text():
    assert extract_services({"takeout": True}, "", fallback=False) == ["Vente à emporter"]


def test_keywords_match_whole_words_only():
    assert extract_payments({}, "paiement cb accepté", fallback=False) == ["Carte bancaire"]
    assert extract_payments({}, "boutique cbd", fallback=False) == []


def test_cash_only_does_not_also_report_cash():
    assert extract_payments({}, "attention, cash only", fallback=False) == ["Espèces uniquement"]


def test_breakfast_mention_is_not_lunch():
    assert extract_popular_for({}, "petit-déjeuner copieux") == ["Petit-déjeuner"]
    assert extract_popular_for({}, "parfait pour le déjeuner") == ["Déjeuner"]


def test_specific_parking_hides_generic_mention():
    assert extract_parking({}, "parking gratuit juste devant") == ["Parking gratuit"]
    assert extract_parking({}, "difficile de se garer le soir") == ["Parking à proximité"]
    assert extract_parking({"valet_parking": True}, "") == ["Voiturier"]
    assert extract_parking({}, "") == []


def test_parking_is_not_a_service():
    assert extract_services({}, "parking gratuit et grand parking", fallback=False) == []


def test_category_tags_imply_services_but_not_clientele_or_children():
    assert extract_services({}, "", ["meal_takeaway"], fallback=False) == ["Vente à emporter"]
    assert extract_clientele({}, "", ["family_restaurant"]) == []
    assert extract_children({}, "", ["playground"]) == []


def test_clientele_and_children_from_reviews():
    corpus = "idéal en famille, les enfants ont adoré. menu enfant très correct"
    assert extract_clientele({}, corpus) == ["Familles"]
    assert extract_children({}, corpus) == ["Convient aux enfants", "Menu enfant"]


def test_accessibility_from_reviews():
    labels = extract_accessibility({}, "super soirée, parking gratuit et accessible en fauteuil")
    assert labels == ["Accessible en fauteuil roulant"]


def test_specialties_are_capitalized_dishes():
    assert extract_specialties({}, "les moules frites et la crème brûlée, une tuerie") == [
        "Moules frites",
        "Crème brûlée",
    ]


def test_fallbacks_depend_on_type():
    assert extract_payments({}, "") == ["Carte bancaire", "Espèces"]
    assert extract_payments({}, "", fallback=False) == []
    assert extract_services({}, "", establishment_type="restaurant") == ["Toilettes"]
    assert extract_services({}, "", establishment_type="bowling") == []
    assert extract_accessibility({}, "", establishment_type="bowling") == ["Accessible PMR"]
    assert fallback_values(FactCategory.ACCESSIBILITY, "bar") == []


def test_extract_all_facts_covers_every_category(bowling_payload):
    place = normalize_place(bowling_payload)
    facts = extract_all_facts(place, "bowling")

    assert set(facts) == {category.value for category in FactCategory}
    assert [f.value for f in facts["parking"]] == ["Parking gratuit"]
    assert [f.value for f in facts["accessibility"]] == ["Accessible en fauteuil roulant"]
    assert facts["specialties"] == []
    for fact in facts["accessibility"] + facts["parking"]:
        assert fact.source == "automatic"
        assert fact.confidence == 0.8


def test_extract_all_facts_marks_fallbacks_with_lower_confidence(bowling_payload):
    facts = extract_all_facts(normalize_place(bowling_payload), "bowling")

    payments = facts["payments"]
    assert [f.value for f in payments] == ["Carte bancaire", "Espèces"]
    assert all(f.confidence == 0.5 and f.rationale == RATIONALE_FALLBACK for f in payments)


def test_extract_all_facts_records_evidence_rationale(escape_payload):
    place = normalize_place(dict(escape_payload, types=["tourist_attraction", "meal_takeaway"]))
    facts = extract_all_facts(place, "escape_game")

    by_value = {f.value: f for f in facts["payments"] + facts["services"]}
    assert by_value["Cartes de crédit"].rationale == RATIONALE_FLAG
    assert by_value["Paiements mobiles NFC"].rationale == RATIONALE_FLAG
    assert by_value["Vente à emporter"].rationale == RATIONALE_CATEGORY
    assert by_value["Réservations acceptées"].rationale == "Mentionné dans les avis"
