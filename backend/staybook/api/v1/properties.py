"""Properties API routes: public search and detail, host-scoped management.

Listing, image and availability writes are only allowed for the owning host.
"""

import uuid
from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.api.deps import get_current_active_user, get_db
from staybook.errors import NotAuthorized
from staybook.models.property import Property, PropertyImage
from staybook.models.user import User
from staybook.schemas.auth import MessageResponse
from staybook.schemas.property import (
    AvailabilityCheckResponse,
    AvailabilityOverrideResponse,
    AvailabilityUpdate,
    CalendarDayResponse,
    ImageCreate,
    ImageDelete,
    ImageReorder,
    ImageResponse,
    PropertyCreate,
    PropertyDetailResponse,
    PropertyListResponse,
    PropertyResponse,
    PropertySearchItem,
    PropertyUpdate,
)
from staybook.services import availability, property_service, review_service

router = APIRouter(prefix="/api/v1/properties", tags=["properties"])


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------


@router.post(
    "",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new property",
)
async def create_property(
    body: PropertyCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Property:
    """Create a listing hosted by the authenticated user."""
    if not current_user.is_host:
        raise NotAuthorized("Only hosts can create properties")

    prop = Property(host_id=current_user.id, **body.model_dump())
    db.add(prop)
    await db.flush()
    await db.refresh(prop)
    return prop


@router.get(
    "",
    response_model=PropertyListResponse,
    summary="Search active properties",
)
async def search_properties(
    query: str | None = Query(None, description="Text in title or description"),
    location: str | None = Query(None, description="Text in the address"),
    property_type: str | None = Query(None),
    price_min: Decimal | None = Query(None, ge=0),
    price_max: Decimal | None = Query(None, ge=0),
    guests: int | None = Query(None, ge=1),
    check_in: date | None = Query(None),
    check_out: date | None = Query(None),
    sort_by: str = Query("created_at"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    skip: int = Query(0, ge=0),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
) -> PropertyListResponse:
    """Return a page of active listings, optionally only those free for ``[check_in, check_out)``."""
    filters = property_service.SearchFilters(
        query=query,
        location=location,
        property_type=property_type,
        price_min=price_min,
        price_max=price_max,
        guests=guests,
        check_in=check_in,
        check_out=check_out,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    rows, total = await property_service.search_properties(db, filters, skip=skip, limit=limit)
    items = [
        PropertySearchItem.model_validate(prop).model_copy(update={"average_rating": avg, "review_count": count})
        for prop, avg, count in rows
    ]
    return PropertyListResponse(items=items, total=total)


@router.get(
    "/{property_id}",
    response_model=PropertyDetailResponse,
    summary="Get a property by ID",
)
async def get_property(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> PropertyDetailResponse:
    """Retrieve a listing with its images and rating summary. Inactive listings return 404."""
    prop = await availability.get_property(db, property_id)
    if not prop.is_active:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Property not found",
        )
    images = await property_service.list_images(db, prop.id)
    average, count = await review_service.rating_summary(db, prop.id)
    return PropertyDetailResponse(
        **PropertyResponse.model_validate(prop).model_dump(),
        check_in_instructions=prop.check_in_instructions,
        images=[ImageResponse.model_validate(image) for image in images],
        average_rating=average,
        review_count=count,
    )


@router.patch(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Update a property",
)
async def update_property(
    property_id: uuid.UUID,
    body: PropertyUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Property:
    """Partially update a listing. Only explicitly set fields are changed."""
    prop = await property_service.get_owned_property(db, property_id, current_user.id)

    update_data = body.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(prop, field, value)

    db.add(prop)
    await db.flush()
    await db.refresh(prop)
    return prop


@router.delete(
    "/{property_id}",
    response_model=MessageResponse,
    summary="Deactivate a property",
)
async def delete_property(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> MessageResponse:
    """Hide a listing from search and new bookings. Existing bookings are kept."""
    prop = await property_service.get_owned_property(db, property_id, current_user.id)
    prop.is_active = False
    await db.flush()
    return MessageResponse(message="Property deactivated")


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------


@router.get("/{property_id}/images", response_model=list[ImageResponse], summary="List property images")
async def list_images(property_id: uuid.UUID, db: AsyncSession = Depends(get_db)) -> list[PropertyImage]:
    await availability.get_property(db, property_id)
    return await property_service.list_images(db, property_id)


@router.post(
    "/{property_id}/images",
    response_model=list[ImageResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Add property images",
)
async def add_images(
    property_id: uuid.UUID,
    body: ImageCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[PropertyImage]:
    return await property_service.add_images(db, property_id, current_user.id, body.image_urls, body.is_primary)


@router.patch("/{property_id}/images", response_model=list[ImageResponse], summary="Reorder property images")
async def reorder_images(
    property_id: uuid.UUID,
    body: ImageReorder,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[PropertyImage]:
    order = {pair.image_id: pair.display_order for pair in body.image_order_pairs}
    return await property_service.reorder_images(db, property_id, current_user.id, order)


@router.post(
    "/{property_id}/images/{image_id}/primary",
    response_model=ImageResponse,
    summary="Make an image the primary one",
)
async def set_primary_image(
    property_id: uuid.UUID,
    image_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> PropertyImage:
    return await property_service.set_primary_image(db, property_id, current_user.id, image_id)


@router.delete("/{property_id}/images", response_model=MessageResponse, summary="Delete property images")
async def delete_images(
    property_id: uuid.UUID,
    body: ImageDelete,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> MessageResponse:
    removed = await property_service.delete_images(db, property_id, current_user.id, body.image_ids)
    return MessageResponse(message=f"Deleted {removed} image(s)")


# ---------------------------------------------------------------------------
# Availability
# ---------------------------------------------------------------------------


@router.get(
    "/{property_id}/availability",
    response_model=list[AvailabilityOverrideResponse],
    summary="List host availability overrides",
)
async def list_availability(
    property_id: uuid.UUID,
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    db: AsyncSession = Depends(get_db),
) -> list:
    return await availability.list_overrides(db, property_id, start_date, end_date)


@router.post(
    "/{property_id}/availability",
    response_model=list[AvailabilityOverrideResponse],
    summary="Open or block dates",
)
async def set_availability(
    property_id: uuid.UUID,
    body: AvailabilityUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list:
    """Upsert one override per date. Bookings are unaffected; a blocked date only stops new ones."""
    entries = [(entry.date, entry.is_available) for entry in body.dates]
    return await availability.set_overrides(db, property_id, current_user.id, entries)


@router.get(
    "/{property_id}/availability/check",
    response_model=AvailabilityCheckResponse,
    summary="Check whether dates can be booked",
)
async def check_availability(
    property_id: uuid.UUID,
    check_in: date = Query(...),
    check_out: date = Query(...),
    guests: int = Query(1),
    db: AsyncSession = Depends(get_db),
) -> AvailabilityCheckResponse:
    result = await availability.is_available(db, property_id, check_in, check_out, guests)
    return AvailabilityCheckResponse.model_validate(result)


@router.get(
    "/{property_id}/calendar",
    response_model=list[CalendarDayResponse],
    summary="Per-date availability calendar",
)
async def get_calendar(
    property_id: uuid.UUID,
    start: date = Query(...),
    end: date = Query(..., description="Exclusive"),
    db: AsyncSession = Depends(get_db),
) -> list[CalendarDayResponse]:
    days = await availability.get_calendar(db, property_id, start, end)
    return [CalendarDayResponse.model_validate(day) for day in days]
