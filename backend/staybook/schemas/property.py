"""Pydantic v2 request/response schemas for property, image and availability endpoints."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

_POLICY_PATTERN = "^(Flexible|Moderate|Strict)$"

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PropertyCreate(BaseModel):
    """Schema for creating a new listing."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    property_type: str = Field(..., min_length=1, max_length=100)
    daily_price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    address: str | None = Field(None, max_length=500)
    latitude: Decimal | None = Field(None, ge=-90, le=90)
    longitude: Decimal | None = Field(None, ge=-180, le=180)
    check_in_instructions: str | None = Field(None, max_length=1000)
    amenities: str | None = Field(None, max_length=1000)
    max_guests: int | None = Field(None, ge=1)
    is_instant_book: bool = False
    cancellation_policy: str = Field("Flexible", pattern=_POLICY_PATTERN)


class PropertyUpdate(BaseModel):
    """Schema for partially updating a listing. All fields optional."""

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    property_type: str | None = Field(None, min_length=1, max_length=100)
    daily_price: Decimal | None = Field(None, gt=0, max_digits=12, decimal_places=2)
    address: str | None = Field(None, max_length=500)
    latitude: Decimal | None = Field(None, ge=-90, le=90)
    longitude: Decimal | None = Field(None, ge=-180, le=180)
    check_in_instructions: str | None = Field(None, max_length=1000)
    amenities: str | None = Field(None, max_length=1000)
    max_guests: int | None = Field(None, ge=1)
    is_instant_book: bool | None = None
    cancellation_policy: str | None = Field(None, pattern=_POLICY_PATTERN)
    is_active: bool | None = None


class ImageCreate(BaseModel):
    image_urls: list[str] = Field(..., min_length=1)
    is_primary: bool = False


class ImageOrder(BaseModel):
    image_id: uuid.UUID
    display_order: int = Field(..., ge=0)


class ImageReorder(BaseModel):
    image_order_pairs: list[ImageOrder]


class ImageDelete(BaseModel):
    image_ids: list[uuid.UUID] = Field(..., min_length=1)


class AvailabilityEntry(BaseModel):
    date: date
    is_available: bool


class AvailabilityUpdate(BaseModel):
    dates: list[AvailabilityEntry] = Field(..., min_length=1)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ImageResponse(BaseModel):
    id: uuid.UUID
    property_id: uuid.UUID
    image_url: str
    is_primary: bool
    display_order: int

    model_config = ConfigDict(from_attributes=True)


class PropertyResponse(BaseModel):
    """Listing information returned from the API."""

    id: uuid.UUID
    host_id: uuid.UUID
    title: str
    description: str | None = None
    property_type: str
    daily_price: Decimal
    address: str | None = None
    latitude: Decimal | None = None
    longitude: Decimal | None = None
    amenities: str | None = None
    max_guests: int | None = None
    is_instant_book: bool
    cancellation_policy: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PropertyDetailResponse(PropertyResponse):
    """Single-listing view with images, host check-in notes and rating summary."""

    check_in_instructions: str | None = None
    images: list[ImageResponse] = []
    average_rating: float = 0.0
    review_count: int = 0


class PropertySearchItem(PropertyResponse):
    average_rating: float = 0.0
    review_count: int = 0


class PropertyListResponse(BaseModel):
    """Paginated list of listings."""

    items: list[PropertySearchItem]
    total: int


class AvailabilityOverrideResponse(BaseModel):
    date: date
    is_available: bool

    model_config = ConfigDict(from_attributes=True)


class AvailabilityCheckResponse(BaseModel):
    available: bool
    reason: str | None = None
    conflict_date: date | None = None
    conflicting_booking_id: uuid.UUID | None = None

    model_config = ConfigDict(from_attributes=True)


class CalendarDayResponse(BaseModel):
    date: date
    status: str
    booking_id: uuid.UUID | None = None

    model_config = ConfigDict(from_attributes=True)
