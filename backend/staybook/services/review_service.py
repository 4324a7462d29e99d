"""Review service: one review per completed stay, written by the booking's guest."""

import logging
import uuid
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.errors import Conflict, InvalidInput, InvalidTransition, NotAuthorized, NotFound, store_errors
from staybook.models.booking import COMPLETED, Booking
from staybook.models.review import Review

logger = logging.getLogger(__name__)


async def create_review(
    db: AsyncSession,
    booking_id: uuid.UUID,
    reviewer_id: uuid.UUID,
    rating: int,
    comment: str | None = None,
    is_anonymous: bool = False,
    today: date | None = None,
) -> Review:
    """Record the guest's rating of a completed booking."""
    if not 1 <= rating <= 5:
        raise InvalidInput("rating must be between 1 and 5")

    with store_errors("create review"):
        booking = await db.get(Booking, booking_id)
    if booking is None:
        raise NotFound("Booking not found")
    if booking.guest_id != reviewer_id:
        raise NotAuthorized("Only the booking's guest can review it")
    if booking.status_on(today or date.today()) != COMPLETED:
        raise InvalidTransition("Only completed stays can be reviewed")

    with store_errors("create review"):
        existing = await db.execute(select(Review.id).where(Review.booking_id == booking.id))
        if existing.scalar_one_or_none() is not None:
            raise Conflict("Review already exists for this booking")

        review = Review(
            property_id=booking.property_id,
            booking_id=booking.id,
            reviewer_id=reviewer_id,
            rating=rating,
            comment=comment,
            is_anonymous=is_anonymous,
        )
        db.add(review)
        await db.flush()
        await db.refresh(review)
        await db.refresh(review, ["reviewer"])

    logger.info("Review %s (rating %d) added for booking %s", review.id, rating, booking.id)
    return review


async def flag_review(db: AsyncSession, review_id: uuid.UUID) -> Review:
    """Hide a review from public listings pending moderation."""
    with store_errors("flag review"):
        review = await db.get(Review, review_id)
        if review is None:
            raise NotFound("Review not found")
        review.is_flagged = True
        await db.flush()
        await db.refresh(review)
    logger.info("Review %s flagged", review.id)
    return review


async def list_reviews(
    db: AsyncSession,
    property_id: uuid.UUID,
    skip: int = 0,
    limit: int = 20,
) -> list[Review]:
    """Unflagged reviews for a property, newest first."""
    with store_errors("list reviews"):
        result = await db.execute(
            select(Review)
            .where(Review.property_id == property_id, Review.is_flagged.is_(False))
            .order_by(Review.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
    return list(result.scalars().all())


async def rating_summary(db: AsyncSession, property_id: uuid.UUID) -> tuple[float, int]:
    """``(average_rating, review_count)`` over unflagged reviews; ``(0.0, 0)`` when none."""
    with store_errors("rating summary"):
        result = await db.execute(
            select(func.avg(Review.rating), func.count(Review.id)).where(
                Review.property_id == property_id,
                Review.is_flagged.is_(False),
            )
        )
    average, count = result.one()
    return (round(float(average), 2) if average is not None else 0.0), count
