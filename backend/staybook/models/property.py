"""Property listings, their images, and host-set availability overrides."""

import datetime as dt
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from staybook.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

CANCELLATION_POLICIES = ("Flexible", "Moderate", "Strict")


class Property(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A listing owned by exactly one host. Deactivated, never deleted."""

    __tablename__ = "properties"

    host_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    property_type: Mapped[str] = mapped_column(String(100), nullable=False)
    daily_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    address: Mapped[str | None] = mapped_column(String(500), default=None)
    latitude: Mapped[Decimal | None] = mapped_column(Numeric(9, 6), default=None)
    longitude: Mapped[Decimal | None] = mapped_column(Numeric(9, 6), default=None)
    check_in_instructions: Mapped[str | None] = mapped_column(Text, default=None)
    amenities: Mapped[str | None] = mapped_column(String(1000), default=None)
    max_guests: Mapped[int | None] = mapped_column(Integer, default=None)
    is_instant_book: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    cancellation_policy: Mapped[str] = mapped_column(String(20), default="Flexible", nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)

    # Relationships
    host: Mapped["User"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    images: Mapped[list["PropertyImage"]] = relationship(
        lazy="selectin",
        order_by="PropertyImage.display_order",
    )

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, title={self.title!r}, type={self.property_type!r})>"


class PropertyImage(UUIDPrimaryKeyMixin, Base):
    """An image URL attached to a property. At most one per property is primary."""

    __tablename__ = "property_images"
    __table_args__ = (
        Index(
            "uq_property_images_primary",
            "property_id",
            unique=True,
            postgresql_where=text("is_primary"),
            sqlite_where=text("is_primary"),
        ),
    )

    property_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    image_url: Mapped[str] = mapped_column(String(500), nullable=False)
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    def __repr__(self) -> str:
        return f"<PropertyImage(id={self.id}, property_id={self.property_id}, primary={self.is_primary})>"


class AvailabilityOverride(UUIDPrimaryKeyMixin, Base):
    """Host-set open/blocked flag for one calendar date, independent of bookings."""

    __tablename__ = "availability_overrides"

    property_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    __table_args__ = (UniqueConstraint("property_id", "date", name="uq_availability_property_date"),)

    def __repr__(self) -> str:
        return f"<AvailabilityOverride(property_id={self.property_id}, date={self.date}, available={self.is_available})>"
