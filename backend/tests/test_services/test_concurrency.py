"""Concurrent writers against one property.

These tests use independent, committing sessions on the per-test engine rather
than the rolled-back ``db_session``, so the requests really race.
"""

import asyncio
import uuid
from datetime import date

import pytest
from factories import make_property, make_user
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from staybook.errors import Conflict, LimitExceeded, Unavailable
from staybook.models.booking import ACTIVE_STATUSES, Booking
from staybook.models.property import PropertyImage
from staybook.models.saved import CompareListEntry, WishlistEntry
from staybook.services.booking_service import create_booking
from staybook.services.messaging_service import get_or_create_thread
from staybook.services.property_service import add_images, set_primary_image
from staybook.services.saved_service import add_saved, list_saved


async def _seed(factory, racers: int):
    async with factory() as session:
        host = await make_user(session, is_host=True, prefix="host")
        guests = [await make_user(session, prefix=f"racer{n}") for n in range(racers)]
        prop = await make_property(session, host, max_guests=None)
        await session.commit()
    return host, guests, prop


async def _attempt(factory, property_id: uuid.UUID, guest_id: uuid.UUID, check_in: date, check_out: date):
    async with factory() as session:
        try:
            async with session.begin():
                booking = await create_booking(session, property_id, guest_id, check_in, check_out, 1)
        except Unavailable:
            return None
        return booking.id


async def _active_bookings(factory, property_id: uuid.UUID) -> int:
    async with factory() as session:
        result = await session.execute(
            select(func.count())
            .select_from(Booking)
            .where(Booking.property_id == property_id, Booking.status.in_(ACTIVE_STATUSES))
        )
        return result.scalar_one()


async def test_two_identical_requests_one_wins(test_engine: AsyncEngine):
    factory = async_sessionmaker(test_engine, expire_on_commit=False)
    _, guests, prop = await _seed(factory, 2)

    results = await asyncio.gather(
        *(_attempt(factory, prop.id, guest.id, date(2023, 6, 1), date(2023, 6, 3)) for guest in guests)
    )

    assert sum(result is not None for result in results) == 1
    assert await _active_bookings(factory, prop.id) == 1


async def test_overlapping_ranges_one_wins(test_engine: AsyncEngine):
    racers = 4
    factory = async_sessionmaker(test_engine, expire_on_commit=False)
    _, guests, prop = await _seed(factory, racers)

    # Every range shares 2023-06-04 with every other.
    ranges = [(date(2023, 6, 1 + n), date(2023, 6, 5 + n)) for n in range(racers)]
    results = await asyncio.gather(
        *(_attempt(factory, prop.id, guest.id, *stay) for guest, stay in zip(guests, ranges, strict=True))
    )

    assert sum(result is not None for result in results) == 1
    assert await _active_bookings(factory, prop.id) == 1


async def test_disjoint_ranges_all_succeed(test_engine: AsyncEngine):
    factory = async_sessionmaker(test_engine, expire_on_commit=False)
    _, guests, prop = await _seed(factory, 3)

    ranges = [(date(2023, 6, 1 + 2 * n), date(2023, 6, 3 + 2 * n)) for n in range(3)]
    results = await asyncio.gather(
        *(_attempt(factory, prop.id, guest.id, *stay) for guest, stay in zip(guests, ranges, strict=True))
    )

    assert all(result is not None for result in results)
    assert await _active_bookings(factory, prop.id) == 3


async def test_concurrent_thread_creation_resolves_to_one(test_engine: AsyncEngine):
    factory = async_sessionmaker(test_engine, expire_on_commit=False)
    host, guests, prop = await _seed(factory, 1)

    async def open_thread():
        async with factory() as session:
            async with session.begin():
                thread, _ = await get_or_create_thread(session, prop.id, guests[0].id, host.id)
            return thread.id

    ids = await asyncio.gather(open_thread(), open_thread())
    assert ids[0] == ids[1]


async def _primary_images(factory, property_id: uuid.UUID) -> list[uuid.UUID]:
    async with factory() as session:
        result = await session.execute(
            select(PropertyImage.id).where(PropertyImage.property_id == property_id, PropertyImage.is_primary.is_(True))
        )
        return list(result.scalars().all())


async def test_concurrent_set_primary_leaves_one(test_engine: AsyncEngine):
    factory = async_sessionmaker(test_engine, expire_on_commit=False)
    host, _, prop = await _seed(factory, 0)
    async with factory() as session:
        async with session.begin():
            images = await add_images(session, prop.id, host.id, ["a.jpg", "b.jpg", "c.jpg"])

    async def promote(image_id: uuid.UUID):
        async with factory() as session:
            async with session.begin():
                await set_primary_image(session, prop.id, host.id, image_id)

    await asyncio.gather(*(promote(image.id) for image in images))

    primaries = await _primary_images(factory, prop.id)
    assert len(primaries) == 1
    assert primaries[0] in {image.id for image in images}


async def test_concurrent_primary_uploads_leave_one(test_engine: AsyncEngine):
    factory = async_sessionmaker(test_engine, expire_on_commit=False)
    host, _, prop = await _seed(factory, 0)

    async def upload(url: str):
        async with factory() as session:
            async with session.begin():
                await add_images(session, prop.id, host.id, [url], is_primary=True)

    await asyncio.gather(upload("a.jpg"), upload("b.jpg"))

    assert len(await _primary_images(factory, prop.id)) == 1


async def test_store_rejects_second_primary(test_engine: AsyncEngine):
    factory = async_sessionmaker(test_engine, expire_on_commit=False)
    _, _, prop = await _seed(factory, 0)

    async with factory() as session:
        session.add_all(
            [
                PropertyImage(property_id=prop.id, image_url="a.jpg", is_primary=True, display_order=0),
                PropertyImage(property_id=prop.id, image_url="b.jpg", is_primary=True, display_order=1),
            ]
        )
        with pytest.raises(IntegrityError):
            await session.commit()


async def test_concurrent_duplicate_save_conflicts(test_engine: AsyncEngine):
    factory = async_sessionmaker(test_engine, expire_on_commit=False)
    _, guests, prop = await _seed(factory, 1)

    async def save():
        async with factory() as session:
            try:
                async with session.begin():
                    await add_saved(session, WishlistEntry, guests[0].id, prop.id)
            except Conflict:
                return False
            return True

    results = await asyncio.gather(save(), save())

    assert sorted(results) == [False, True]
    async with factory() as session:
        assert len(await list_saved(session, WishlistEntry, guests[0].id)) == 1


async def test_concurrent_compare_adds_respect_cap(test_engine: AsyncEngine):
    factory = async_sessionmaker(test_engine, expire_on_commit=False)
    host, guests, _ = await _seed(factory, 1)
    async with factory() as session:
        props = [await make_property(session, host, title=f"Racer Villa {n}") for n in range(4)]
        await session.commit()

    async def compare(property_id: uuid.UUID):
        async with factory() as session:
            async with session.begin():
                await add_saved(session, CompareListEntry, guests[0].id, property_id, limit=2)

    results = await asyncio.gather(*(compare(prop.id) for prop in props), return_exceptions=True)

    assert sum(result is None for result in results) == 2
    assert all(isinstance(result, LimitExceeded) for result in results if result is not None)
    async with factory() as session:
        assert len(await list_saved(session, CompareListEntry, guests[0].id)) == 2
