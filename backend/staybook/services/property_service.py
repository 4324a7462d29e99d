"""Property images and listing search."""

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import exists, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.errors import InvalidInput, InvalidRange, NotAuthorized, NotFound, store_errors
from staybook.models.booking import ACTIVE_STATUSES, Booking
from staybook.models.property import AvailabilityOverride, Property, PropertyImage
from staybook.models.review import Review
from staybook.services.availability import get_property

logger = logging.getLogger(__name__)

SORT_FIELDS = ("created_at", "daily_price", "title", "average_rating")


async def get_owned_property(
    db: AsyncSession, property_id: uuid.UUID, host_id: uuid.UUID, for_update: bool = False
) -> Property:
    prop = await get_property(db, property_id, for_update=for_update)
    if prop.host_id != host_id:
        raise NotAuthorized("Not authorized to modify this property")
    return prop


async def _clear_primary(db: AsyncSession, property_id: uuid.UUID) -> None:
    await db.execute(
        update(PropertyImage)
        .where(PropertyImage.property_id == property_id, PropertyImage.is_primary.is_(True))
        .values(is_primary=False)
        .execution_options(synchronize_session="fetch")
    )


async def list_images(db: AsyncSession, property_id: uuid.UUID) -> list[PropertyImage]:
    with store_errors("list images"):
        result = await db.execute(
            select(PropertyImage)
            .where(PropertyImage.property_id == property_id)
            .order_by(PropertyImage.display_order, PropertyImage.created_at)
        )
    return list(result.scalars().all())


async def add_images(
    db: AsyncSession,
    property_id: uuid.UUID,
    host_id: uuid.UUID,
    image_urls: list[str],
    is_primary: bool = False,
) -> list[PropertyImage]:
    """Append images after the current last ``display_order``.

    With ``is_primary`` the first new image becomes the property's only primary image.
    """
    if not image_urls:
        raise InvalidInput("image_urls must not be empty")
    # Image writers serialize on the property row.
    prop = await get_owned_property(db, property_id, host_id, for_update=True)

    with store_errors("add images"):
        max_order = (
            await db.execute(
                select(func.coalesce(func.max(PropertyImage.display_order), -1)).where(
                    PropertyImage.property_id == prop.id
                )
            )
        ).scalar_one()

        if is_primary:
            await _clear_primary(db, prop.id)

        images = []
        for offset, url in enumerate(image_urls, start=1):
            image = PropertyImage(
                property_id=prop.id,
                image_url=url,
                is_primary=is_primary and offset == 1,
                display_order=max_order + offset,
            )
            db.add(image)
            images.append(image)
        await db.flush()
        for image in images:
            await db.refresh(image)

    return images


async def set_primary_image(
    db: AsyncSession,
    property_id: uuid.UUID,
    host_id: uuid.UUID,
    image_id: uuid.UUID,
) -> PropertyImage:
    """Make ``image_id`` the single primary image of the property."""
    prop = await get_owned_property(db, property_id, host_id, for_update=True)
    with store_errors("set primary image"):
        image = await db.get(PropertyImage, image_id)
        if image is None or image.property_id != prop.id:
            raise NotFound("Image not found")
        await _clear_primary(db, prop.id)
        image.is_primary = True
        await db.flush()
    return image


async def reorder_images(
    db: AsyncSession,
    property_id: uuid.UUID,
    host_id: uuid.UUID,
    order: dict[uuid.UUID, int],
) -> list[PropertyImage]:
    prop = await get_owned_property(db, property_id, host_id)
    with store_errors("reorder images"):
        for image in await list_images(db, prop.id):
            if image.id in order:
                image.display_order = order[image.id]
        await db.flush()
    return await list_images(db, prop.id)


async def delete_images(
    db: AsyncSession,
    property_id: uuid.UUID,
    host_id: uuid.UUID,
    image_ids: list[uuid.UUID],
) -> int:
    prop = await get_owned_property(db, property_id, host_id)
    removed = 0
    with store_errors("delete images"):
        for image in await list_images(db, prop.id):
            if image.id in image_ids:
                await db.delete(image)
                removed += 1
        await db.flush()
    return removed


@dataclass
class SearchFilters:
    query: str | None = None
    location: str | None = None
    property_type: str | None = None
    price_min: Decimal | None = None
    price_max: Decimal | None = None
    guests: int | None = None
    check_in: date | None = None
    check_out: date | None = None
    sort_by: str = "created_at"
    sort_order: str = "desc"


async def search_properties(
    db: AsyncSession,
    filters: SearchFilters,
    skip: int = 0,
    limit: int = 10,
) -> tuple[list[tuple[Property, float, int]], int]:
    """Active listings matching the filters, with ``(average_rating, review_count)``.

    When both dates are given, listings with a blocked override or an active booking
    overlapping ``[check_in, check_out)`` are excluded.
    """
    conditions = [Property.is_active.is_(True)]

    if filters.query:
        pattern = f"%{filters.query}%"
        conditions.append(or_(Property.title.ilike(pattern), Property.description.ilike(pattern)))
    if filters.location:
        conditions.append(Property.address.ilike(f"%{filters.location}%"))
    if filters.property_type:
        conditions.append(Property.property_type == filters.property_type)
    if filters.price_min is not None:
        conditions.append(Property.daily_price >= filters.price_min)
    if filters.price_max is not None:
        conditions.append(Property.daily_price <= filters.price_max)
    if filters.guests is not None:
        conditions.append(or_(Property.max_guests.is_(None), Property.max_guests >= filters.guests))

    if (filters.check_in is None) != (filters.check_out is None):
        raise InvalidInput("check_in and check_out must be given together")
    if filters.check_in is not None and filters.check_out is not None:
        if filters.check_out <= filters.check_in:
            raise InvalidRange()
        conditions.append(
            ~exists().where(
                AvailabilityOverride.property_id == Property.id,
                AvailabilityOverride.is_available.is_(False),
                AvailabilityOverride.date >= filters.check_in,
                AvailabilityOverride.date < filters.check_out,
            )
        )
        conditions.append(
            ~exists().where(
                Booking.property_id == Property.id,
                Booking.status.in_(ACTIVE_STATUSES),
                Booking.check_in < filters.check_out,
                Booking.check_out > filters.check_in,
            )
        )

    if filters.sort_by not in SORT_FIELDS:
        raise InvalidInput(f"sort_by must be one of: {', '.join(SORT_FIELDS)}")

    ratings = (
        select(
            Review.property_id,
            func.avg(Review.rating).label("average_rating"),
            func.count(Review.id).label("review_count"),
        )
        .where(Review.is_flagged.is_(False))
        .group_by(Review.property_id)
        .subquery()
    )
    average = func.coalesce(ratings.c.average_rating, 0)
    sort_column = average if filters.sort_by == "average_rating" else getattr(Property, filters.sort_by)
    ordering = sort_column.asc() if filters.sort_order == "asc" else sort_column.desc()

    query = (
        select(Property, average, func.coalesce(ratings.c.review_count, 0))
        .outerjoin(ratings, ratings.c.property_id == Property.id)
        .where(*conditions)
        .order_by(ordering, Property.id)
        .offset(skip)
        .limit(limit)
    )
    count_query = select(func.count()).select_from(Property).where(*conditions)

    with store_errors("search properties"):
        total = (await db.execute(count_query)).scalar_one()
        rows = (await db.execute(query)).all()

    return [(prop, round(float(avg), 2), int(count)) for prop, avg, count in rows], total
