"""Pydantic v2 request/response schemas for booking endpoints."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from staybook.schemas.property import PropertyResponse

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BookingQuoteRequest(BaseModel):
    """Schema for pricing a stay without booking it."""

    property_id: uuid.UUID
    check_in: date
    check_out: date


class BookingCreate(BaseModel):
    """Schema for creating a new booking.

    ``total_amount`` is optional. When sent, it must equal the server-computed total.
    """

    property_id: uuid.UUID
    check_in: date
    check_out: date
    guests_count: int = Field(1, ge=1)
    total_amount: Decimal | None = Field(None, ge=0)


class BookingCancel(BaseModel):
    reason: str = Field(..., max_length=1000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PriceQuoteResponse(BaseModel):
    """Breakdown of a stay's price."""

    nights: int
    nightly_rate: Decimal
    base_amount: Decimal
    service_fee: Decimal
    cleaning_fee: Decimal
    total_amount: Decimal

    model_config = ConfigDict(from_attributes=True)


class BookingResponse(BaseModel):
    """Standard booking response.

    ``status`` is the status as of today, so a confirmed stay whose check-out has
    passed reads as ``completed``.
    """

    id: uuid.UUID
    property_id: uuid.UUID
    guest_id: uuid.UUID
    check_in: date
    check_out: date
    guests_count: int
    total_amount: Decimal
    status: str
    cancellation_reason: str | None = None
    cancelled_by_id: uuid.UUID | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @model_validator(mode="wrap")
    @classmethod
    def derive_status(cls, data, handler):
        model = handler(data)
        current = getattr(data, "current_status", None)
        if current is not None:
            model.status = current
        return model


class BookingDetailResponse(BookingResponse):
    """Single-booking view with the nested listing."""

    listing: PropertyResponse | None = None


class BookingListResponse(BaseModel):
    """Paginated list of bookings."""

    items: list[BookingResponse]
    total: int
