"""
Establishment type catalog and classification tables.

ESTABLISHMENT_TYPES is the closed catalog every classification resolves to.
TYPE_KEYWORDS and CATEGORY_TO_TYPE are ordered: the first matching entry wins,
so specific entries must come before generic ones.
"""
from typing import Tuple

OTHER = "other"

ESTABLISHMENT_TYPES: Tuple[str, ...] = (
    # Restaurants
    "restaurant",
    "restaurant_francais",
    "restaurant_italien",
    "restaurant_japonais",
    "restaurant_chinois",
    "restaurant_indien",
    "restaurant_thai",
    "restaurant_vietnamien",
    "restaurant_libanais",
    "restaurant_marocain",
    "restaurant_mexicain",
    "restaurant_espagnol",
    "restaurant_grec",
    "restaurant_americain",
    "restaurant_gastronomique",
    "restaurant_vegetarien",
    "fruits_de_mer",
    "steakhouse",
    "pizzeria",
    "creperie",
    "burger",
    "sushi",
    "kebab",
    "fast_food",
    "brasserie",
    "bistrot",
    "traiteur",
    "food_truck",
    "brunch",
    # Cafés & sweets
    "cafe",
    "salon_de_the",
    "boulangerie",
    "patisserie",
    "glacier",
    "chocolaterie",
    # Drinks & nightlife
    "bar",
    "bar_a_cocktails",
    "bar_a_vin",
    "pub",
    "brasserie_artisanale",
    "bar_a_bieres",
    "rooftop",
    "bar_dansant",
    "discotheque",
    "boite_de_nuit",
    "bar_lounge",
    "bar_a_jeux",
    "cave_a_vin",
    # Activities
    "escape_game",
    "vr_experience",
    "laser_game",
    "karaoke",
    "quiz_room",
    "bowling",
    "billard_americain",
    "billard_francais",
    "karting",
    "paintball",
    "trampoline_park",
    "parc_loisir_indoor",
    "mini_golf",
    "accrobranche",
    "salle_d_arcade",
    "simulateur",
    "axe_throwing",
    "blind_test",
    "jeux_de_societe",
    "patinoire",
    "piscine",
    "climbing",
    "golf",
    "parc_d_attractions",
    "zoo",
    # Culture & entertainment
    "cinema",
    "theatre",
    "salle_de_concert",
    "musee",
    "galerie_d_art",
    "casino",
    "cabaret",
    # Wellness & sport
    "spa",
    "hammam",
    "institut_de_beaute",
    "salle_de_sport",
    "sport",
    # Lodging & misc
    "hotel",
    "camping",
    "shopping",
    OTHER,
)

# Ordered keyword sets scanned against lowercased "name description".
# Bowling deliberately has no entry: "piste" and "parc" are too ambiguous in
# names, so bowling alleys resolve through the provider category instead.
TYPE_KEYWORDS = (
    ("vr_experience", ("réalité virtuelle", "virtual reality", "vr experience", "casque vr", "casques vr",
                       "immersion vr", "escape vr", "vr")),
    ("escape_game", ("escape game", "escape games", "escape room", "escape rooms", "salles thématiques",
                     "escape", "énigme", "énigmes")),
    ("laser_game", ("laser game", "laser games", "laser tag", "lasergame")),
    ("karaoke", ("karaoké", "karaoke", "box karaoké", "cabine karaoké")),
    ("quiz_room", ("quiz room", "quizz room", "salle de quiz")),
    ("blind_test", ("blind test",)),
    ("axe_throwing", ("lancer de hache", "lancer de haches", "axe throwing")),
    ("billard_francais", ("billard français", "billard francais", "carambole")),
    ("billard_americain", ("billard", "billards", "snooker", "billard américain")),
    ("karting", ("karting", "kart indoor", "karts")),
    ("paintball", ("paintball", "airsoft")),
    ("trampoline_park", ("trampoline", "trampolines", "trampoline park")),
    ("parc_loisir_indoor", ("parc indoor", "parc de loisirs indoor", "aire de jeux indoor", "parc de jeux couvert")),
    ("mini_golf", ("mini golf", "mini-golf", "minigolf", "golf indoor")),
    ("accrobranche", ("accrobranche", "parcours aventure")),
    ("salle_d_arcade", ("arcade", "salle d'arcade", "jeux d'arcade")),
    ("simulateur", ("simulateur", "simulateurs", "simulation de course")),
    ("bar_a_jeux", ("bar à jeux", "bar a jeux", "jeux de société")),
    ("climbing", ("escalade", "bloc", "climbing")),
    ("patinoire", ("patinoire",)),
    ("cabaret", ("cabaret",)),
)

# Ordered provider category table. Specific restaurant/bar tags come before
# the generic "restaurant" and "bar" tags they usually accompany.
CATEGORY_TO_TYPE = (
    ("bowling_alley", "bowling"),
    ("escape_room", "escape_game"),
    ("karaoke", "karaoke"),
    ("go_karting_venue", "karting"),
    ("amusement_center", "salle_d_arcade"),
    ("video_arcade", "salle_d_arcade"),
    ("miniature_golf_course", "mini_golf"),
    ("ice_skating_rink", "patinoire"),
    ("swimming_pool", "piscine"),
    ("golf_course", "golf"),
    ("amusement_park", "parc_d_attractions"),
    ("zoo", "zoo"),
    ("aquarium", "zoo"),
    ("casino", "casino"),
    ("movie_theater", "cinema"),
    ("performing_arts_theater", "theatre"),
    ("concert_hall", "salle_de_concert"),
    ("museum", "musee"),
    ("art_gallery", "galerie_d_art"),
    ("fine_dining_restaurant", "restaurant_gastronomique"),
    ("french_restaurant", "restaurant_francais"),
    ("italian_restaurant", "restaurant_italien"),
    ("japanese_restaurant", "restaurant_japonais"),
    ("sushi_restaurant", "sushi"),
    ("ramen_restaurant", "restaurant_japonais"),
    ("chinese_restaurant", "restaurant_chinois"),
    ("indian_restaurant", "restaurant_indien"),
    ("thai_restaurant", "restaurant_thai"),
    ("vietnamese_restaurant", "restaurant_vietnamien"),
    ("lebanese_restaurant", "restaurant_libanais"),
    ("middle_eastern_restaurant", "restaurant_libanais"),
    ("mexican_restaurant", "restaurant_mexicain"),
    ("spanish_restaurant", "restaurant_espagnol"),
    ("greek_restaurant", "restaurant_grec"),
    ("american_restaurant", "restaurant_americain"),
    ("vegetarian_restaurant", "restaurant_vegetarien"),
    ("vegan_restaurant", "restaurant_vegetarien"),
    ("seafood_restaurant", "fruits_de_mer"),
    ("steak_house", "steakhouse"),
    ("pizza_restaurant", "pizzeria"),
    ("pizza_place", "pizzeria"),
    ("hamburger_restaurant", "burger"),
    ("fast_food_restaurant", "fast_food"),
    ("brunch_restaurant", "brunch"),
    ("breakfast_restaurant", "brunch"),
    ("ice_cream_shop", "glacier"),
    ("bakery", "boulangerie"),
    ("coffee_shop", "cafe"),
    ("cafe", "cafe"),
    ("wine_bar", "bar_a_vin"),
    ("pub", "pub"),
    ("night_club", "bar"),
    ("bar", "bar"),
    ("liquor_store", "bar"),
    ("restaurant", "restaurant"),
    ("meal_takeaway", "restaurant"),
    ("meal_delivery", "restaurant"),
    ("food", "restaurant"),
    ("lodging", "hotel"),
    ("hotel", "hotel"),
    ("campground", "camping"),
    ("spa", "spa"),
    ("beauty_salon", "spa"),
    ("gym", "salle_de_sport"),
    ("stadium", "sport"),
    ("shopping_mall", "shopping"),
    ("store", "shopping"),
)

# Types that serve food or drink
FOOD_AND_DRINK_TYPES = frozenset(
    t
    for t in ESTABLISHMENT_TYPES
    if t.startswith(("restaurant", "bar", "cafe"))
) | frozenset({
    "fruits_de_mer", "steakhouse", "pizzeria", "creperie", "burger", "sushi",
    "kebab", "fast_food", "brasserie", "bistrot", "traiteur", "food_truck",
    "brunch", "salon_de_the", "boulangerie", "patisserie", "glacier",
    "chocolaterie", "pub", "brasserie_artisanale", "rooftop", "discotheque",
    "boite_de_nuit", "cave_a_vin",
})

# Venues large enough to be expected to offer step-free access
LARGE_VENUE_TYPES = frozenset({
    "bowling", "cinema", "theatre", "salle_de_concert", "musee", "casino",
    "hotel", "patinoire", "piscine", "parc_d_attractions", "zoo", "shopping",
    "trampoline_park", "parc_loisir_indoor", "karting", "salle_de_sport",
})

# Activity venues that normally work by booking only
RESERVATION_CENTRIC_TYPES = frozenset({
    "escape_game", "vr_experience", "karting", "laser_game", "spa", "hammam",
    "hotel", "bowling", "billard_americain", "billard_francais", "quiz_room",
    "karaoke", "paintball", "axe_throwing", "simulateur", "restaurant_gastronomique",
})


def is_known_type(establishment_type: str) -> bool:
    return establishment_type in ESTABLISHMENT_TYPES
