"""Row factories shared by the fixtures and the tests."""

import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from staybook.auth.jwt import create_token_pair
from staybook.auth.passwords import hash_password
from staybook.models.booking import Booking
from staybook.models.property import Property
from staybook.models.user import User

# Hashing is slow; every factory user shares one hash.
TEST_PASSWORD = "testpass123"
_TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)


async def make_user(db: AsyncSession, *, is_host: bool = False, is_active: bool = True, prefix: str = "user") -> User:
    unique = uuid.uuid4().hex[:8]
    user = User(
        email=f"{prefix}-{unique}@test.com",
        username=f"{prefix}_{unique}",
        hashed_password=_TEST_PASSWORD_HASH,
        full_name=f"{prefix.title()} {unique}",
        is_host=is_host,
        is_active=is_active,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


async def make_property(
    db: AsyncSession,
    host: User,
    *,
    daily_price: str = "150.00",
    max_guests: int | None = 4,
    is_instant_book: bool = False,
    title: str = "Test Villa",
    address: str = "Riyadh, Saudi Arabia",
    property_type: str = "villa",
) -> Property:
    prop = Property(
        host_id=host.id,
        title=title,
        description="A test listing for automated tests.",
        property_type=property_type,
        daily_price=Decimal(daily_price),
        address=address,
        max_guests=max_guests,
        is_instant_book=is_instant_book,
    )
    db.add(prop)
    await db.flush()
    await db.refresh(prop)
    return prop


async def make_booking(
    db: AsyncSession,
    prop: Property,
    guest: User,
    check_in: date,
    check_out: date,
    *,
    status: str = "confirmed",
    total_amount: str = "100.00",
) -> Booking:
    """Insert a booking row directly, bypassing the availability check."""
    booking = Booking(
        property_id=prop.id,
        guest_id=guest.id,
        check_in=check_in,
        check_out=check_out,
        guests_count=1,
        total_amount=Decimal(total_amount),
        status=status,
    )
    db.add(booking)
    await db.flush()
    await db.refresh(booking)
    return booking


def headers_for(user: User) -> dict[str, str]:
    tokens = create_token_pair(str(user.id))
    return {"Authorization": f"Bearer {tokens['access_token']}"}

