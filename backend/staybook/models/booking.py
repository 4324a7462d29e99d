"""Booking model: a guest's reservation of a property for a half-open date range."""

import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from staybook.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

PENDING = "pending"
CONFIRMED = "confirmed"
CANCELLED = "cancelled"
COMPLETED = "completed"

# Statuses that occupy the property's calendar.
ACTIVE_STATUSES = (PENDING, CONFIRMED)


class Booking(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A reservation of ``[check_in, check_out)``.

    Only ``pending``, ``confirmed`` and ``cancelled`` are ever stored. ``completed``
    is derived on read for confirmed stays whose check-out date has passed.
    """

    __tablename__ = "bookings"

    property_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    guest_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    check_in: Mapped[date] = mapped_column(Date, nullable=False)
    check_out: Mapped[date] = mapped_column(Date, nullable=False)
    guests_count: Mapped[int] = mapped_column(Integer, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=PENDING, nullable=False, index=True)
    cancellation_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    cancelled_by_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=True,
    )

    # Relationships
    listing: Mapped["Property"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (
        CheckConstraint("check_out > check_in", name="ck_bookings_date_order"),
        CheckConstraint("guests_count >= 1", name="ck_bookings_guests_count"),
        Index("ix_bookings_property_dates", "property_id", "check_in", "check_out"),
    )

    def status_on(self, today: date) -> str:
        """Status as seen on ``today``, with ``completed`` derived from the check-out date."""
        if self.status == CONFIRMED and self.check_out <= today:
            return COMPLETED
        return self.status

    @property
    def current_status(self) -> str:
        return self.status_on(date.today())

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, property_id={self.property_id}, guest_id={self.guest_id}, status={self.status})>"
        )
