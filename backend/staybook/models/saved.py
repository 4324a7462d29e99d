"""Per-user saved property sets: wishlist and compare list."""

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from staybook.database import Base, UUIDPrimaryKeyMixin


class WishlistEntry(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "wishlist_entries"

    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    property_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("properties.id", ondelete="RESTRICT"), nullable=False)
    added_at: Mapped[datetime] = mapped_column(server_default=func.now())

    property: Mapped["Property"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (UniqueConstraint("user_id", "property_id", name="uq_wishlist_user_property"),)


class CompareListEntry(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "compare_list_entries"

    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    property_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("properties.id", ondelete="RESTRICT"), nullable=False)
    added_at: Mapped[datetime] = mapped_column(server_default=func.now())

    property: Mapped["Property"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (UniqueConstraint("user_id", "property_id", name="uq_compare_user_property"),)
