"""Bookings API router.

Visibility rule: a booking is visible to its guest and to the host of its
property. Everyone else gets 404, so booking ids do not leak.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.api.deps import get_current_active_user, get_db
from staybook.models.booking import Booking
from staybook.models.user import User
from staybook.schemas.booking import (
    BookingCancel,
    BookingCreate,
    BookingDetailResponse,
    BookingListResponse,
    BookingQuoteRequest,
    BookingResponse,
    PriceQuoteResponse,
)
from staybook.services import booking_service
from staybook.services.availability import get_property
from staybook.services.pricing import count_nights

router = APIRouter(prefix="/api/v1/bookings", tags=["bookings"])


@router.post(
    "/quote",
    response_model=PriceQuoteResponse,
    summary="Price a stay without booking it",
)
async def quote_booking(
    body: BookingQuoteRequest,
    db: AsyncSession = Depends(get_db),
) -> PriceQuoteResponse:
    count_nights(body.check_in, body.check_out)
    prop = await get_property(db, body.property_id)
    quote = booking_service.quote_for(prop, body.check_in, body.check_out)
    return PriceQuoteResponse.model_validate(quote)


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new booking",
)
async def create_booking(
    body: BookingCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Booking:
    """Book a property for the current user.

    Instant-book listings are confirmed straight away; the rest wait for the host.
    """
    return await booking_service.create_booking(
        db,
        property_id=body.property_id,
        guest_id=current_user.id,
        check_in=body.check_in,
        check_out=body.check_out,
        guests_count=body.guests_count,
        expected_total=body.total_amount,
    )


@router.get(
    "",
    response_model=BookingListResponse,
    summary="List the current user's bookings",
)
async def list_bookings(
    role: str | None = Query(None, pattern="^(guest|host)$", description="Trips made or bookings received"),
    status_filter: str | None = Query(None, alias="status", description="Filter by booking status"),
    property_id: uuid.UUID | None = Query(None, description="Filter by property"),
    skip: int = Query(0, ge=0, description="Pagination offset"),
    limit: int = Query(20, ge=1, le=100, description="Pagination limit"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> dict:
    items, total = await booking_service.list_bookings(
        db,
        current_user.id,
        role=role,
        status=status_filter,
        property_id=property_id,
        skip=skip,
        limit=limit,
    )
    return {"items": items, "total": total}


@router.get(
    "/{booking_id}",
    response_model=BookingDetailResponse,
    summary="Get booking detail with the nested listing",
)
async def get_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Booking:
    return await booking_service.get_booking(db, booking_id, current_user.id)


@router.post(
    "/{booking_id}/cancel",
    response_model=BookingResponse,
    summary="Cancel a booking",
)
async def cancel_booking(
    booking_id: uuid.UUID,
    body: BookingCancel,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Booking:
    """Cancel as the guest or the host. The dates become bookable again immediately."""
    return await booking_service.cancel_booking(db, booking_id, current_user.id, body.reason)


@router.post(
    "/{booking_id}/confirm",
    response_model=BookingResponse,
    summary="Confirm a pending booking",
)
async def confirm_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Booking:
    return await booking_service.confirm_booking(db, booking_id, current_user.id)
