"""Pydantic v2 request/response schemas for review endpoints."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ReviewCreate(BaseModel):
    booking_id: uuid.UUID
    rating: int = Field(..., ge=1, le=5)
    comment: str | None = Field(None, max_length=5000)
    is_anonymous: bool = False


class ReviewResponse(BaseModel):
    """A public review. Anonymous reviews carry no reviewer identity."""

    id: uuid.UUID
    property_id: uuid.UUID
    booking_id: uuid.UUID
    reviewer_id: uuid.UUID | None = None
    reviewer_name: str | None = None
    rating: int
    comment: str | None = None
    is_anonymous: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @model_validator(mode="wrap")
    @classmethod
    def hide_anonymous_reviewer(cls, data, handler):
        model = handler(data)
        reviewer = getattr(data, "reviewer", None)
        if reviewer is not None and model.reviewer_name is None:
            model.reviewer_name = reviewer.full_name or reviewer.username
        if model.is_anonymous:
            model.reviewer_id = None
            model.reviewer_name = None
        return model


class ReviewListResponse(BaseModel):
    items: list[ReviewResponse]
    average_rating: float
    review_count: int
