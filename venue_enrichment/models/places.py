"""Pydantic models for normalized place data."""
from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any


# Provider payload as fetched by the place-data collaborator (Google Places shape).
# Kept as a plain mapping: every field is optional except the place identifier,
# and defaulting happens once in `normalize_place`.
RawPlacePayload = Dict[str, Any]

WEEKDAYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


class TimeSlot(BaseModel):
    """A single opening slot, times formatted as HH:MM."""
    open: str
    close: str


class OpeningDay(BaseModel):
    """Opening state for one weekday."""
    is_open: bool = False
    slots: List[TimeSlot] = Field(default_factory=list)


def closed_week() -> Dict[str, OpeningDay]:
    """Return a week where every day is closed."""
    return {day: OpeningDay() for day in WEEKDAYS}


class NormalizedPlace(BaseModel):
    """Typed, fully defaulted view of a provider payload."""
    place_id: str
    name: str = ""
    description: str = ""
    category_tags: List[str] = Field(default_factory=list)
    # Not range-checked here: stages that depend on the range clamp it themselves.
    price_level: int = 2
    rating: float = 0.0
    review_count: int = 0
    review_corpus: str = ""
    flags: Dict[str, bool] = Field(default_factory=dict)
    opening_periods: Dict[str, OpeningDay] = Field(default_factory=closed_week)
    address: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    location: Optional[Dict[str, float]] = None

    @property
    def open_days(self) -> List[str]:
        """Weekdays with at least one opening slot."""
        return [day for day in WEEKDAYS if self.opening_periods.get(day, OpeningDay()).is_open]
