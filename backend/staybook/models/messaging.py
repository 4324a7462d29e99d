"""Message threads between a guest and a host, and the messages inside them."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Index, Text, UniqueConstraint, func, text
from sqlalchemy.orm import Mapped, mapped_column

from staybook.database import Base, UUIDPrimaryKeyMixin, utcnow


class MessageThread(UUIDPrimaryKeyMixin, Base):
    """Canonical conversation for one (property, guest, host) key.

    ``property_id`` is NULL for conversations not tied to a listing. Those are unique
    per (guest, host) through a partial index, since NULLs never collide in the
    ordinary unique constraint.
    """

    __tablename__ = "message_threads"

    property_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("properties.id", ondelete="RESTRICT"),
        nullable=True,
    )
    guest_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    host_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    last_message_at: Mapped[datetime | None] = mapped_column(nullable=True, default=None)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    __table_args__ = (
        UniqueConstraint("property_id", "guest_id", "host_id", name="uq_threads_property_guest_host"),
        Index(
            "uq_threads_general_guest_host",
            "guest_id",
            "host_id",
            unique=True,
            postgresql_where=text("property_id IS NULL"),
            sqlite_where=text("property_id IS NULL"),
        ),
    )

    def participants(self) -> set[uuid.UUID]:
        return {self.guest_id, self.host_id}

    def __repr__(self) -> str:
        return f"<MessageThread(id={self.id}, property_id={self.property_id}, guest={self.guest_id}, host={self.host_id})>"


class Message(UUIDPrimaryKeyMixin, Base):
    """A single message. Only ``is_read`` changes after insert."""

    __tablename__ = "messages"

    thread_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("message_threads.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    sender_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    recipient_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Message(id={self.id}, thread_id={self.thread_id}, sender_id={self.sender_id})>"
