"""Messaging thread resolver: one canonical thread per (property, guest, host)."""

import logging
import uuid

from sqlalchemy import case, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.errors import InvalidInput, NotFound, NotParticipant, StoreError, store_errors
from staybook.models.messaging import Message, MessageThread
from staybook.models.property import Property
from staybook.models.user import User

logger = logging.getLogger(__name__)


async def _find_thread(
    db: AsyncSession,
    property_id: uuid.UUID | None,
    guest_id: uuid.UUID,
    host_id: uuid.UUID,
) -> MessageThread | None:
    # NULL only matches NULL: general threads are distinct from listing threads.
    property_clause = MessageThread.property_id.is_(None) if property_id is None else MessageThread.property_id == property_id
    result = await db.execute(
        select(MessageThread).where(
            property_clause,
            MessageThread.guest_id == guest_id,
            MessageThread.host_id == host_id,
        )
    )
    return result.scalar_one_or_none()


async def get_thread(db: AsyncSession, thread_id: uuid.UUID) -> MessageThread:
    with store_errors("thread lookup"):
        thread = await db.get(MessageThread, thread_id)
    if thread is None:
        raise NotFound("Thread not found")
    return thread


async def get_or_create_thread(
    db: AsyncSession,
    property_id: uuid.UUID | None,
    guest_id: uuid.UUID,
    host_id: uuid.UUID,
) -> tuple[MessageThread, bool]:
    """Return the canonical thread for the key, creating it when absent.

    Returns ``(thread, created)``. A concurrent insert of the same key is caught by the
    unique constraints and resolved by re-reading the winner's row.

    Raises:
        InvalidInput: guest and host are the same user.
        NotFound: a participant or the property does not exist.
    """
    if guest_id == host_id:
        raise InvalidInput("A thread needs two different participants")

    with store_errors("get or create thread"):
        thread = await _find_thread(db, property_id, guest_id, host_id)
        if thread is not None:
            return thread, False

        for user_id in (guest_id, host_id):
            if await db.get(User, user_id) is None:
                raise NotFound("User not found")
        if property_id is not None and await db.get(Property, property_id) is None:
            raise NotFound("Property not found")

        thread = MessageThread(property_id=property_id, guest_id=guest_id, host_id=host_id, last_message_at=None)
        try:
            async with db.begin_nested():
                db.add(thread)
                await db.flush()
        except IntegrityError:
            existing = await _find_thread(db, property_id, guest_id, host_id)
            if existing is None:
                raise StoreError("Could not create message thread") from None
            return existing, False

        await db.refresh(thread)

    logger.info("Created thread %s (property=%s, guest=%s, host=%s)", thread.id, property_id, guest_id, host_id)
    return thread, True


async def post_message(
    db: AsyncSession,
    thread_id: uuid.UUID,
    sender_id: uuid.UUID,
    recipient_id: uuid.UUID,
    content: str,
) -> Message:
    """Append a message and move the thread's ``last_message_at`` to its timestamp.

    Raises:
        NotFound: no such thread.
        NotParticipant: sender and recipient are not exactly the thread's two parties.
        InvalidInput: blank content.
    """
    thread = await get_thread(db, thread_id)

    if sender_id == recipient_id or {sender_id, recipient_id} != thread.participants():
        raise NotParticipant()
    if content is None or not content.strip():
        raise InvalidInput("Message content must not be empty")

    with store_errors("post message"):
        message = Message(
            thread_id=thread.id,
            sender_id=sender_id,
            recipient_id=recipient_id,
            content=content,
            is_read=False,
        )
        db.add(message)
        await db.flush()
        thread.last_message_at = message.created_at
        await db.flush()

    return message


def other_participant(thread: MessageThread, user_id: uuid.UUID) -> uuid.UUID:
    """The participant who is not ``user_id``; raises ``NotParticipant`` for outsiders."""
    if user_id == thread.guest_id:
        return thread.host_id
    if user_id == thread.host_id:
        return thread.guest_id
    raise NotParticipant("User is not a participant in this thread")


async def mark_thread_read(db: AsyncSession, thread_id: uuid.UUID, reader_id: uuid.UUID) -> int:
    """Mark every message addressed to ``reader_id`` in the thread as read.

    Idempotent; returns how many messages changed.
    """
    thread = await get_thread(db, thread_id)
    other_participant(thread, reader_id)

    with store_errors("mark thread read"):
        result = await db.execute(
            select(Message).where(
                Message.thread_id == thread.id,
                Message.recipient_id == reader_id,
                Message.is_read.is_(False),
            )
        )
        unread = result.scalars().all()
        for message in unread:
            message.is_read = True
        await db.flush()
    return len(unread)


async def list_threads(
    db: AsyncSession,
    user_id: uuid.UUID,
    skip: int = 0,
    limit: int = 20,
) -> list[tuple[MessageThread, int]]:
    """Threads the user takes part in, most recent activity first, with unread counts."""
    unread = (
        select(
            Message.thread_id,
            func.sum(case((Message.is_read.is_(False), 1), else_=0)).label("unread"),
        )
        .where(Message.recipient_id == user_id)
        .group_by(Message.thread_id)
        .subquery()
    )
    query = (
        select(MessageThread, func.coalesce(unread.c.unread, 0))
        .outerjoin(unread, unread.c.thread_id == MessageThread.id)
        .where((MessageThread.guest_id == user_id) | (MessageThread.host_id == user_id))
        .order_by(func.coalesce(MessageThread.last_message_at, MessageThread.created_at).desc())
        .offset(skip)
        .limit(limit)
    )
    with store_errors("list threads"):
        result = await db.execute(query)
    return [(thread, int(count)) for thread, count in result.all()]


async def list_messages(
    db: AsyncSession,
    thread_id: uuid.UUID,
    reader_id: uuid.UUID,
    skip: int = 0,
    limit: int = 50,
) -> list[Message]:
    """Messages of a thread in posting order. Only participants may read them."""
    thread = await get_thread(db, thread_id)
    other_participant(thread, reader_id)

    with store_errors("list messages"):
        result = await db.execute(
            select(Message)
            .where(Message.thread_id == thread.id)
            .order_by(Message.created_at, Message.id)
            .offset(skip)
            .limit(limit)
        )
    return list(result.scalars().all())
