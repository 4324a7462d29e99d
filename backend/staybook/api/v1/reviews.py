"""Reviews API router."""

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.api.deps import get_current_active_user, get_db
from staybook.models.review import Review
from staybook.models.user import User
from staybook.schemas.auth import MessageResponse
from staybook.schemas.review import ReviewCreate, ReviewListResponse, ReviewResponse
from staybook.services import review_service
from staybook.services.availability import get_property

router = APIRouter(prefix="/api/v1/reviews", tags=["reviews"])


@router.post(
    "",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Review a completed stay",
)
async def create_review(
    body: ReviewCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Review:
    return await review_service.create_review(
        db,
        booking_id=body.booking_id,
        reviewer_id=current_user.id,
        rating=body.rating,
        comment=body.comment,
        is_anonymous=body.is_anonymous,
    )


@router.get("", response_model=ReviewListResponse, summary="List a property's reviews")
async def list_reviews(
    property_id: uuid.UUID = Query(...),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
) -> ReviewListResponse:
    """Unflagged reviews, newest first, with the property's rating summary."""
    await get_property(db, property_id)
    reviews = await review_service.list_reviews(db, property_id, skip=skip, limit=limit)
    average, count = await review_service.rating_summary(db, property_id)
    return ReviewListResponse(
        items=[ReviewResponse.model_validate(review) for review in reviews],
        average_rating=average,
        review_count=count,
    )


@router.post("/{review_id}/flag", response_model=MessageResponse, summary="Flag a review for moderation")
async def flag_review(
    review_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> MessageResponse:
    await review_service.flag_review(db, review_id)
    return MessageResponse(message="Review flagged")
