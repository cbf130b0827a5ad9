from venue_enrichment.enrichment.tag_generator import (
    PRIMARY_WEIGHT,
    TYPE_TAG_TIERS,
    generate_tags,
    merge_tags,
    tiers_for_type,
)
from venue_enrichment.models.enrichment import TagOrigin, WeightedTag
from venue_enrichment.models.places import NormalizedPlace


def tag_weights(tags):
    return {tag.tag: tag.weight for tag in tags}


def test_bowling_primary_tags_have_top_weight():
    tags = tag_weights(generate_tags(NormalizedPlace(place_id="p1"), "bowling"))

    for tag in ("bowling", "pistes", "chaussures", "location"):
        assert tags[tag] == PRIMARY_WEIGHT
    assert tags["snack"] == 7
    assert tags["loisir"] == 5


def test_out_of_range_price_behaves_like_nearest_bound():
    high = generate_tags(NormalizedPlace(place_id="p1", price_level=7), "bar")
    top = generate_tags(NormalizedPlace(place_id="p1", price_level=4), "bar")
    low = generate_tags(NormalizedPlace(place_id="p1", price_level=0), "bar")
    bottom = generate_tags(NormalizedPlace(place_id="p1", price_level=1), "bar")

    assert high == top
    assert low == bottom
    assert "Envie de luxe" in tag_weights(high)


def test_rating_tiers():
    excellent = tag_weights(generate_tags(NormalizedPlace(place_id="p1", rating=4.6), "bar"))
    reliable = tag_weights(generate_tags(NormalizedPlace(place_id="p1", rating=4.2), "bar"))
    average = tag_weights(generate_tags(NormalizedPlace(place_id="p1", rating=3.9), "bar"))

    assert excellent["Envie d'excellence"] == 7
    assert "Envie de fiabilité" not in excellent
    assert reliable["Envie de fiabilité"] == 5
    assert "Envie d'excellence" not in reliable
    assert not any(tag.startswith(("Envie d'excellence", "Envie de fiabilité")) for tag in average)


def test_provider_category_bonus():
    place = NormalizedPlace(place_id="p1", category_tags=["italian_restaurant", "restaurant"])
    tags = generate_tags(place, "restaurant_italien")

    bonus = [tag for tag in tags if tag.origin == TagOrigin.CATEGORY]
    assert [tag.tag for tag in bonus] == ["Envie d'italien", "Envie de convivial"]


def test_unknown_type_falls_back_to_family_then_other():
    assert tiers_for_type("restaurant_marocain_inconnu") == TYPE_TAG_TIERS["restaurant"]
    assert tiers_for_type("zeppelin") == TYPE_TAG_TIERS["other"]


def test_tags_are_unique_case_insensitively():
    tags = generate_tags(NormalizedPlace(place_id="p1", rating=4.8, price_level=3), "bar")
    keys = [tag.tag.casefold() for tag in tags]
    assert len(keys) == len(set(keys))


def test_merge_keeps_first_position_and_highest_weight():
    merged = merge_tags(
        [
            WeightedTag(tag="Terrasse", weight=5, origin=TagOrigin.TYPE),
            WeightedTag(tag="cocktails", weight=7, origin=TagOrigin.TYPE),
            WeightedTag(tag="terrasse", weight=10, origin=TagOrigin.CATEGORY),
        ]
    )

    assert [(tag.tag, tag.weight) for tag in merged] == [("Terrasse", 10), ("cocktails", 7)]
    assert merged[0].origin == TagOrigin.TYPE


def test_tags_are_deterministic():
    place = NormalizedPlace(place_id="p1", rating=4.5, price_level=2, category_tags=["cafe"])
    assert generate_tags(place, "cafe") == generate_tags(place, "cafe")
