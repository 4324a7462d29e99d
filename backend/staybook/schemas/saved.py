"""Pydantic v2 schemas for the wishlist and compare list."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from staybook.schemas.property import PropertyResponse


class SavedPropertyCreate(BaseModel):
    property_id: uuid.UUID


class SavedPropertyResponse(BaseModel):
    id: uuid.UUID
    property_id: uuid.UUID
    added_at: datetime
    property: PropertyResponse

    model_config = ConfigDict(from_attributes=True)
