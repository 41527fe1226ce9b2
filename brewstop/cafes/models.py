from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AmenityTag(str, Enum):
    bike_racks = "bikeRacks"
    water_refill = "waterRefill"
    outdoor_seating = "outdoorSeating"


# Tag -> café attribute it filters on.
AMENITY_FIELDS: dict[AmenityTag, str] = {
    AmenityTag.bike_racks: "has_bike_racks",
    AmenityTag.water_refill: "has_water_refill",
    AmenityTag.outdoor_seating: "has_outdoor_seating",
}

AMENITY_LABELS: dict[AmenityTag, str] = {
    AmenityTag.bike_racks: "Bike Racks",
    AmenityTag.water_refill: "Water Refill",
    AmenityTag.outdoor_seating: "Outdoor Seating",
}


class OpeningHours(CamelModel):
    open: str | None = Field(default=None, pattern=r"^\d{2}:\d{2}$")
    close: str | None = Field(default=None, pattern=r"^\d{2}:\d{2}$")
    closed: bool = False


class CafeCreate(CamelModel):
    # Basic info
    name: str = Field(..., min_length=1)
    description: str | None = Field(default=None, max_length=160)
    phone: str | None = None
    website: str | None = None
    email: str | None = None

    # Location
    latitude: float = Field(..., ge=-90.0, le=90.0, allow_inf_nan=False)
    longitude: float = Field(..., ge=-180.0, le=180.0, allow_inf_nan=False)
    address: str = Field(..., min_length=1)
    town: str | None = None
    postcode: str | None = None
    country: str | None = "UK"
    plus_code: str | None = None

    # Opening hours, keyed by lowercase weekday
    hours: dict[str, OpeningHours] | None = None
    holiday_notes: str | None = None
    opens_early: bool = False
    opens_late: bool = False

    # Group capacity
    max_indoor_seats: int | None = Field(default=None, ge=0)
    max_outdoor_seats: int | None = Field(default=None, ge=0)
    max_rider_group: int | None = Field(default=None, ge=0)
    can_book_groups: bool = False
    booking_link: str | None = None
    queue_tolerant: bool = False

    # Bike parking
    bike_parking_type: Literal["covered", "open", "inside", "none"] | None = None
    bike_parking_count: int | None = Field(default=None, ge=0)
    bike_parking_visible: bool = False
    bike_parking_secure: bool = False
    bike_parking_cctv: bool = False
    bike_parking_lockable: bool = False

    # Amenities
    has_toilets: bool = False
    has_baby_change: bool = False
    has_repair_stand: bool = False
    has_track_pump: bool = False
    has_basic_tools: bool = False
    has_power_sockets: bool = False
    has_wifi: bool = False
    has_water_refill: bool = False
    water_refill_free: bool = True
    has_outdoor_seating: bool = False
    outdoor_seating_heated: bool = False
    outdoor_seating_sheltered: bool = False

    # Service
    service_type: Literal["quick_counter", "table_service", "preorder_friendly"] | None = None
    average_serve_time: int | None = Field(default=None, ge=0, description="Minutes")
    can_pre_order_groups: bool = False

    # Payment
    accepts_card: bool = True
    accepts_cash: bool = True
    splits_bill: bool = False
    has_tap_to_pay: bool = True

    # Dietary
    gluten_free_friendly: bool = False
    vegan_options: bool = False
    vegetarian_options: bool = False
    dairy_free_options: bool = False
    nut_aware: bool = False
    dietary_notes: str | None = None

    # Menu
    menu_focus: Literal["big_breakfasts", "cakes_bakes", "light_bites", "proper_meals"] | None = None
    menu_highlights: list[str] = Field(default_factory=list)
    coffee_quality: Literal["specialty", "good", "basic"] | None = None
    price_level: int = Field(default=2, ge=1, le=3)

    # Accessibility & friendliness
    step_free: bool = False
    accessible_toilet: bool = False
    dog_friendly: bool = False
    kids_friendly: bool = False
    rain_plan: bool = False

    # Photos
    hero_image: str | None = None
    gallery_images: list[str] = Field(default_factory=list)

    # Legacy
    image_url: str | None = None
    has_bike_racks: bool = False
    seating_capacity: int | None = Field(default=None, ge=0)
    is_open: bool = True
    menu_items: list[str] = Field(default_factory=list)


class RatingSummary(CamelModel):
    rating_coffee: float = 0.0
    rating_food: float = 0.0
    rating_value: float = 0.0
    rating_bike_friendly: float = 0.0
    rating_group_friendly: float = 0.0
    rating_overall: float = 0.0
    rating_count: int = 0


class Cafe(CafeCreate, RatingSummary):
    id: str
    user_id: str | None = None
    verified: bool = False
    last_updated: datetime = Field(default_factory=_utcnow)


class CafeWithDistance(Cafe):
    distance: float | None = None
    distance_label: str


class ReviewCreate(CamelModel):
    cafe_id: str = Field(..., min_length=1)
    # Optional for logged-in riders; filled from their profile
    user_name: str | None = Field(default=None, min_length=1)
    user_avatar: str | None = None
    rating_overall: int = Field(..., ge=1, le=5)
    rating_coffee: int | None = Field(default=None, ge=1, le=5)
    rating_food: int | None = Field(default=None, ge=1, le=5)
    rating_value: int | None = Field(default=None, ge=1, le=5)
    rating_bike_friendly: int | None = Field(default=None, ge=1, le=5)
    rating_group_friendly: int | None = Field(default=None, ge=1, le=5)
    comment: str = Field(..., min_length=1, max_length=500)
    photos: list[str] = Field(default_factory=list)


class Review(ReviewCreate):
    id: str
    user_name: str = Field(..., min_length=1)
    user_id: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)


class AmenityOut(BaseModel):
    id: AmenityTag
    label: str


class FavoriteStatus(BaseModel):
    id: str
    favorite: bool


class FavoritesOut(BaseModel):
    ids: list[str]


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
