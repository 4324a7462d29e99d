"""Wishlist and compare list API routers."""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.api.deps import get_current_active_user, get_db
from staybook.config import settings
from staybook.models.saved import CompareListEntry, WishlistEntry
from staybook.models.user import User
from staybook.schemas.auth import MessageResponse
from staybook.schemas.saved import SavedPropertyCreate, SavedPropertyResponse
from staybook.services import saved_service

wishlist_router = APIRouter(prefix="/api/v1/wishlist", tags=["wishlist"])
compare_router = APIRouter(prefix="/api/v1/compare-list", tags=["compare-list"])


# ---------------------------------------------------------------------------
# Wishlist
# ---------------------------------------------------------------------------


@wishlist_router.get("", response_model=list[SavedPropertyResponse], summary="List wishlist")
async def list_wishlist(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[WishlistEntry]:
    return await saved_service.list_saved(db, WishlistEntry, current_user.id)


@wishlist_router.post(
    "",
    response_model=SavedPropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a property to the wishlist",
)
async def add_to_wishlist(
    body: SavedPropertyCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> WishlistEntry:
    return await saved_service.add_saved(db, WishlistEntry, current_user.id, body.property_id)


@wishlist_router.delete("/{property_id}", response_model=MessageResponse, summary="Remove from the wishlist")
async def remove_from_wishlist(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> MessageResponse:
    await saved_service.remove_saved(db, WishlistEntry, current_user.id, property_id)
    return MessageResponse(message="Removed from wishlist")


# ---------------------------------------------------------------------------
# Compare list
# ---------------------------------------------------------------------------


@compare_router.get("", response_model=list[SavedPropertyResponse], summary="List compare list")
async def list_compare(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[CompareListEntry]:
    return await saved_service.list_saved(db, CompareListEntry, current_user.id)


@compare_router.post(
    "",
    response_model=SavedPropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a property to the compare list",
)
async def add_to_compare(
    body: SavedPropertyCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> CompareListEntry:
    return await saved_service.add_saved(
        db, CompareListEntry, current_user.id, body.property_id, limit=settings.compare_list_limit
    )


@compare_router.delete("/{property_id}", response_model=MessageResponse, summary="Remove from the compare list")
async def remove_from_compare(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> MessageResponse:
    await saved_service.remove_saved(db, CompareListEntry, current_user.id, property_id)
    return MessageResponse(message="Removed from compare list")
