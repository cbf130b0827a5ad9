"""
Place data normalizer.

Turns a loosely-typed provider payload (Google Places shape) into a
NormalizedPlace. This is the only place where defaults are applied: every
downstream stage can rely on a complete, typed structure.

Only a missing place identifier is fatal. Every other malformed field falls
back to a safe default and logs a warning.
"""
import logging
import re
from typing import Any, Dict, List, Optional

from venue_enrichment.enrichment.exceptions import InvalidPayloadError
from venue_enrichment.models.places import (
    NormalizedPlace,
    OpeningDay,
    RawPlacePayload,
    TimeSlot,
    closed_week,
)

logger = logging.getLogger(__name__)

DEFAULT_PRICE_LEVEL = 2

# Google day index: 0 = Sunday
GOOGLE_DAY_INDEX = (
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
)

PRICE_LEVEL_STRINGS = {
    "PRICE_LEVEL_FREE": 1,
    "PRICE_LEVEL_INEXPENSIVE": 1,
    "PRICE_LEVEL_MODERATE": 2,
    "PRICE_LEVEL_EXPENSIVE": 3,
    "PRICE_LEVEL_VERY_EXPENSIVE": 4,
}

# Day names accepted at the start of a weekday_text line
WEEKDAY_NAMES = {
    "monday": "monday",
    "tuesday": "tuesday",
    "wednesday": "wednesday",
    "thursday": "thursday",
    "friday": "friday",
    "saturday": "saturday",
    "sunday": "sunday",
    "lundi": "monday",
    "mardi": "tuesday",
    "mercredi": "wednesday",
    "jeudi": "thursday",
    "vendredi": "friday",
    "samedi": "saturday",
    "dimanche": "sunday",
}

# Top-level boolean attributes of the provider payload
FLAG_FIELDS = (
    "wheelchair_accessible_entrance",
    "takeout",
    "delivery",
    "dine_in",
    "curbside_pickup",
    "reservable",
    "serves_breakfast",
    "serves_brunch",
    "serves_lunch",
    "serves_dinner",
    "serves_beer",
    "serves_wine",
    "serves_cocktails",
    "serves_coffee",
    "serves_dessert",
    "serves_vegetarian_food",
    "good_for_children",
    "good_for_groups",
    "good_for_watching_sports",
    "menu_for_children",
    "outdoor_seating",
    "restroom",
    "live_music",
    "allows_dogs",
)

# Nested option groups whose booleans are flattened into flags
OPTION_GROUPS = ("accessibility_options", "parking_options", "payment_options")

TIME_RANGE_PATTERN = re.compile(r"(\d{1,2}):(\d{2})\s*[–-]\s*(\d{1,2}):(\d{2})")
ALWAYS_OPEN_PATTERN = re.compile(r"open 24 hours|ouvert 24h/24|24h/24|24 ?h ?sur ?24", re.IGNORECASE)
FULL_DAY = ("00:00", "23:59")


def normalize_place(raw: RawPlacePayload) -> NormalizedPlace:
    """
    Normalize a provider payload.

    Args:
        raw: Provider payload. `place_id` (or `id`) is required.

    Returns:
        NormalizedPlace with every field defaulted.

    Raises:
        InvalidPayloadError: when the payload is not a mapping or has no identifier.
    """
    if not isinstance(raw, dict):
        raise InvalidPayloadError("Place payload must be a mapping")

    place_id = raw.get("place_id") or raw.get("id")
    if not place_id:
        raise InvalidPayloadError("Place payload has no place_id")
    place_id = str(place_id)

    name = raw.get("name") or ""
    if not isinstance(name, str):
        logger.warning(f"Place {place_id}: ignoring non-string name {name!r}")
        name = ""

    return NormalizedPlace(
        place_id=place_id,
        name=name.strip(),
        description=_extract_description(raw),
        category_tags=_extract_category_tags(raw, place_id),
        price_level=normalize_price_level(raw.get("price_level"), place_id),
        rating=_normalize_rating(raw.get("rating"), place_id),
        review_count=_normalize_review_count(raw.get("user_ratings_total"), place_id),
        review_corpus=_build_review_corpus(raw.get("reviews")),
        flags=_extract_flags(raw, place_id),
        opening_periods=normalize_opening_hours(raw.get("opening_hours"), place_id),
        address=raw.get("formatted_address") or raw.get("vicinity") or raw.get("address"),
        phone=raw.get("formatted_phone_number") or raw.get("international_phone_number") or raw.get("phone"),
        website=raw.get("website"),
        location=_extract_location(raw),
    )


def normalize_price_level(value: Any, place_id: str = "?") -> int:
    """Map a provider price level to the 1-4 scale (default 2)."""
    if value is None:
        return DEFAULT_PRICE_LEVEL

    if isinstance(value, str):
        if value in PRICE_LEVEL_STRINGS:
            return PRICE_LEVEL_STRINGS[value]
        if value.strip().isdigit():
            value = int(value.strip())
        else:
            if value != "PRICE_LEVEL_UNSPECIFIED":
                logger.warning(f"Place {place_id}: unknown price level {value!r}, using default")
            return DEFAULT_PRICE_LEVEL

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        logger.warning(f"Place {place_id}: unparseable price level {value!r}, using default")
        return DEFAULT_PRICE_LEVEL

    return clamp_price_level(int(value))


def clamp_price_level(price_level: int) -> int:
    """Clamp a price level to [1, 4]. Google's 0 (free) becomes 1."""
    return max(1, min(4, price_level))


def _normalize_rating(value: Any, place_id: str) -> float:
    if value is None:
        return 0.0
    try:
        rating = float(value)
    except (TypeError, ValueError):
        logger.warning(f"Place {place_id}: unparseable rating {value!r}, using 0")
        return 0.0
    if rating != rating:  # NaN
        return 0.0
    return max(0.0, min(5.0, rating))


def _normalize_review_count(value: Any, place_id: str) -> int:
    if value is None:
        return 0
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        logger.warning(f"Place {place_id}: unparseable review count {value!r}, using 0")
        return 0


def _extract_description(raw: Dict[str, Any]) -> str:
    summary = raw.get("editorial_summary")
    if isinstance(summary, dict):
        overview = summary.get("overview") or summary.get("text")
        if isinstance(overview, str) and overview.strip():
            return overview.strip()
    elif isinstance(summary, str) and summary.strip():
        return summary.strip()

    description = raw.get("description")
    if isinstance(description, str):
        return description.strip()
    return ""


def _extract_category_tags(raw: Dict[str, Any], place_id: str) -> List[str]:
    types = raw.get("types")
    if types is None:
        return []
    if not isinstance(types, list):
        logger.warning(f"Place {place_id}: 'types' is not a list, ignoring")
        return []
    return [t.strip().lower() for t in types if isinstance(t, str) and t.strip()]


def _build_review_corpus(reviews: Any) -> str:
    """Lowercase concatenation of every review text."""
    if not isinstance(reviews, list):
        return ""

    texts = []
    for review in reviews:
        if isinstance(review, dict):
            text = review.get("text")
            # Places API (New) nests the text: {"text": {"text": "..."}}
            if isinstance(text, dict):
                text = text.get("text")
        elif isinstance(review, str):
            text = review
        else:
            text = None
        if isinstance(text, str) and text.strip():
            texts.append(text.strip())

    return " ".join(texts).lower()


def _extract_flags(raw: Dict[str, Any], place_id: str) -> Dict[str, bool]:
    flags: Dict[str, bool] = {}

    for field in FLAG_FIELDS:
        if field not in raw or raw[field] is None:
            continue
        if isinstance(raw[field], bool):
            flags[field] = raw[field]
        else:
            logger.warning(f"Place {place_id}: dropping non-boolean flag {field}={raw[field]!r}")

    for group in OPTION_GROUPS:
        options = raw.get(group)
        if options is None:
            continue
        if not isinstance(options, dict):
            logger.warning(f"Place {place_id}: '{group}' is not a mapping, ignoring")
            continue
        for key, value in options.items():
            if isinstance(value, bool):
                flags[key] = value
            elif value is not None:
                logger.warning(f"Place {place_id}: dropping non-boolean flag {group}.{key}={value!r}")

    return flags


def _extract_location(raw: Dict[str, Any]) -> Optional[Dict[str, float]]:
    location = None
    geometry = raw.get("geometry")
    if isinstance(geometry, dict):
        location = geometry.get("location")
    if location is None:
        location = raw.get("location")
    if not isinstance(location, dict):
        return None

    lat = location.get("lat", location.get("latitude"))
    lng = location.get("lng", location.get("longitude", location.get("lon")))
    try:
        return {"lat": float(lat), "lng": float(lng)}
    except (TypeError, ValueError):
        return None


def normalize_opening_hours(opening_hours: Any, place_id: str = "?") -> Dict[str, OpeningDay]:
    """
    Build the weekly opening map (monday..sunday, all days present).

    Structured periods win; weekday_text is parsed only when there are none.
    """
    week = closed_week()
    if not isinstance(opening_hours, dict):
        return week

    periods = opening_hours.get("periods")
    if isinstance(periods, list) and periods:
        _apply_periods(week, periods, place_id)
        return week

    weekday_text = opening_hours.get("weekday_text")
    if isinstance(weekday_text, list):
        _apply_weekday_text(week, weekday_text, place_id)

    return week


def _apply_periods(week: Dict[str, OpeningDay], periods: List[Any], place_id: str) -> None:
    for period in periods:
        if not isinstance(period, dict):
            continue
        opening = period.get("open")
        if not isinstance(opening, dict):
            continue

        day = _day_from_index(opening.get("day"))
        if day is None:
            logger.warning(f"Place {place_id}: invalid period day {opening.get('day')!r}")
            continue

        closing = period.get("close")
        if not closing:
            # An open without close means the venue never closes that day
            _add_slot(week, day, *FULL_DAY)
            continue

        open_time = format_time(opening.get("time"))
        close_time = format_time(closing.get("time")) if isinstance(closing, dict) else None
        if open_time is None or close_time is None:
            logger.warning(f"Place {place_id}: skipping malformed period {period!r}")
            continue
        _add_slot(week, day, open_time, close_time)


def _apply_weekday_text(week: Dict[str, OpeningDay], lines: List[Any], place_id: str) -> None:
    for line in lines:
        if not isinstance(line, str) or ":" not in line:
            continue
        label, _, hours = line.partition(":")
        day = WEEKDAY_NAMES.get(label.strip().lower())
        if day is None:
            logger.warning(f"Place {place_id}: unknown weekday in {line!r}")
            continue

        if ALWAYS_OPEN_PATTERN.search(hours):
            _add_slot(week, day, *FULL_DAY)
            continue

        for match in TIME_RANGE_PATTERN.finditer(hours):
            oh, om, ch, cm = match.groups()
            open_time = _hhmm(int(oh), int(om))
            close_time = _hhmm(int(ch), int(cm))
            if open_time and close_time:
                _add_slot(week, day, open_time, close_time)


def _day_from_index(value: Any) -> Optional[str]:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    if 0 <= value < len(GOOGLE_DAY_INDEX):
        return GOOGLE_DAY_INDEX[value]
    return None


def format_time(value: Any) -> Optional[str]:
    """Format a provider "HHMM" time as "HH:MM". Returns None when malformed."""
    if isinstance(value, int) and not isinstance(value, bool):
        value = f"{value:04d}"
    if not isinstance(value, str):
        return None
    value = value.strip().replace(":", "")
    if len(value) != 4 or not value.isdigit():
        return None
    return _hhmm(int(value[:2]), int(value[2:]))


def _hhmm(hours: int, minutes: int) -> Optional[str]:
    # 24:00 is a legitimate closing time in provider data
    if not (0 <= hours <= 24 and 0 <= minutes < 60) or (hours == 24 and minutes):
        return None
    return f"{hours:02d}:{minutes:02d}"


def _add_slot(week: Dict[str, OpeningDay], day: str, open_time: str, close_time: str) -> None:
    opening_day = week[day]
    opening_day.is_open = True
    opening_day.slots.append(TimeSlot(open=open_time, close=close_time))
