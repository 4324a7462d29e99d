"""Wishlist and compare list: per-user sets of saved properties."""

import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.errors import Conflict, LimitExceeded, NotFound, store_errors
from staybook.models.saved import CompareListEntry, WishlistEntry
from staybook.models.user import User
from staybook.services.availability import get_property

logger = logging.getLogger(__name__)

SavedEntry = type[WishlistEntry] | type[CompareListEntry]


async def list_saved(db: AsyncSession, model: SavedEntry, user_id: uuid.UUID) -> list:
    with store_errors("list saved properties"):
        result = await db.execute(select(model).where(model.user_id == user_id).order_by(model.added_at, model.id))
    return list(result.scalars().all())


async def add_saved(
    db: AsyncSession,
    model: SavedEntry,
    user_id: uuid.UUID,
    property_id: uuid.UUID,
    limit: int | None = None,
):
    """Add a property to the user's list.

    Raises:
        NotFound: the user or the property does not exist.
        Conflict: the property is already on the list.
        LimitExceeded: the list already holds ``limit`` entries.
    """
    prop = await get_property(db, property_id)

    with store_errors("add saved property"):
        # Writes to one user's lists serialize on the user row.
        owner = await db.execute(select(User.id).where(User.id == user_id).with_for_update())
        if owner.scalar_one_or_none() is None:
            raise NotFound("User not found")

        if limit is not None:
            count = (await db.execute(select(func.count()).select_from(model).where(model.user_id == user_id))).scalar_one()
            if count >= limit:
                raise LimitExceeded(f"You can save at most {limit} properties here")

        entry = model(user_id=user_id, property_id=prop.id)
        try:
            async with db.begin_nested():
                db.add(entry)
                await db.flush()
        except IntegrityError:
            raise Conflict("Property already saved") from None
        await db.refresh(entry)
        await db.refresh(entry, ["property"])

    logger.info("User %s saved property %s to %s", user_id, prop.id, model.__tablename__)
    return entry


async def remove_saved(db: AsyncSession, model: SavedEntry, user_id: uuid.UUID, property_id: uuid.UUID) -> None:
    with store_errors("remove saved property"):
        result = await db.execute(select(model).where(model.user_id == user_id, model.property_id == property_id))
        entry = result.scalar_one_or_none()
        if entry is None:
            raise NotFound("Property is not on this list")
        await db.delete(entry)
        await db.flush()
