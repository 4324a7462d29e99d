"""Pydantic v2 request/response schemas for messaging endpoints."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ThreadCreate(BaseModel):
    """Open (or fetch) a guest/host conversation, optionally about a listing.

    The caller must be the guest or the host.
    """

    guest_id: uuid.UUID
    host_id: uuid.UUID
    property_id: uuid.UUID | None = None


class MessageCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)


class ThreadResponse(BaseModel):
    id: uuid.UUID
    property_id: uuid.UUID | None = None
    guest_id: uuid.UUID
    host_id: uuid.UUID
    last_message_at: datetime | None = None
    created_at: datetime
    unread_count: int = 0

    model_config = ConfigDict(from_attributes=True)


class MessageOut(BaseModel):
    id: uuid.UUID
    thread_id: uuid.UUID
    sender_id: uuid.UUID
    recipient_id: uuid.UUID
    content: str
    is_read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MarkReadResponse(BaseModel):
    marked_read: int
