"""Messaging API router: guest/host threads and the messages inside them."""

import uuid

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.api.deps import get_current_active_user, get_db
from staybook.errors import NotParticipant
from staybook.models.messaging import Message
from staybook.models.user import User
from staybook.schemas.message import MarkReadResponse, MessageCreate, MessageOut, ThreadCreate, ThreadResponse
from staybook.services import messaging_service

router = APIRouter(prefix="/api/v1/messages", tags=["messages"])


@router.get("/threads", response_model=list[ThreadResponse], summary="List the current user's threads")
async def list_threads(
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[ThreadResponse]:
    rows = await messaging_service.list_threads(db, current_user.id, skip=skip, limit=limit)
    return [ThreadResponse.model_validate(thread).model_copy(update={"unread_count": unread}) for thread, unread in rows]


@router.post(
    "/threads",
    response_model=ThreadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open a thread, or return the existing one",
)
async def open_thread(
    body: ThreadCreate,
    response: Response,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> ThreadResponse:
    """Return the one thread for ``(property_id, guest_id, host_id)``.

    Responds 201 when the thread was created and 200 when it already existed.
    """
    if current_user.id not in (body.guest_id, body.host_id):
        raise NotParticipant("User must be a participant in the thread")

    thread, created = await messaging_service.get_or_create_thread(
        db, body.property_id, body.guest_id, body.host_id
    )
    if not created:
        response.status_code = status.HTTP_200_OK
    return ThreadResponse.model_validate(thread)


@router.get(
    "/threads/{thread_id}/messages",
    response_model=list[MessageOut],
    summary="List the messages of a thread",
)
async def list_messages(
    thread_id: uuid.UUID,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[Message]:
    return await messaging_service.list_messages(db, thread_id, current_user.id, skip=skip, limit=limit)


@router.patch(
    "/threads/{thread_id}",
    response_model=MarkReadResponse,
    summary="Mark the thread's messages to the current user as read",
)
async def mark_read(
    thread_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> MarkReadResponse:
    changed = await messaging_service.mark_thread_read(db, thread_id, current_user.id)
    return MarkReadResponse(marked_read=changed)


@router.post(
    "/threads/{thread_id}/messages",
    response_model=MessageOut,
    status_code=status.HTTP_201_CREATED,
    summary="Send a message in a thread",
)
async def send_message(
    thread_id: uuid.UUID,
    body: MessageCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Message:
    """Send to the other participant of the thread."""
    thread = await messaging_service.get_thread(db, thread_id)
    recipient_id = messaging_service.other_participant(thread, current_user.id)
    return await messaging_service.post_message(db, thread.id, current_user.id, recipient_id, body.content)
