"""Availability ledger: derives per-date occupancy from bookings and host overrides.

A date is unavailable when the host blocked it with an override, or when a
``pending``/``confirmed`` booking covers it. Ranges are half-open: a booking for
``[2023-06-01, 2023-06-03)`` frees the property again on the 3rd.
"""

import logging
import uuid
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.errors import InvalidGuests, InvalidInput, InvalidRange, NotAuthorized, NotFound, store_errors
from staybook.models.booking import ACTIVE_STATUSES, Booking
from staybook.models.property import AvailabilityOverride, Property

logger = logging.getLogger(__name__)

MAX_CALENDAR_DAYS = 366

AVAILABLE = "available"
BLOCKED = "blocked"
BOOKED = "booked"


@dataclass(frozen=True)
class Availability:
    """Answer to "can this property be booked for these dates?".

    ``conflict_date`` is the earliest date inside the requested range that is
    blocked or booked; ``conflicting_booking_id`` is set when a booking caused it.
    """

    available: bool
    reason: str | None = None  # blocked, booked, capacity
    conflict_date: date | None = None
    conflicting_booking_id: uuid.UUID | None = None


@dataclass(frozen=True)
class CalendarDay:
    date: date
    status: str
    booking_id: uuid.UUID | None = None


def overlaps(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    """True when ``[start_a, end_a)`` and ``[start_b, end_b)`` share at least one date."""
    return start_a < end_b and start_b < end_a


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Yield every date in ``[start, end)``."""
    day = start
    while day < end:
        yield day
        day += timedelta(days=1)


def _validate_range(check_in: date, check_out: date) -> None:
    if check_out <= check_in:
        raise InvalidRange()


async def get_property(db: AsyncSession, property_id: uuid.UUID, for_update: bool = False) -> Property:
    """Fetch a property or raise ``NotFound``.

    With ``for_update`` the row stays locked until the transaction ends.
    """
    stmt = select(Property).where(Property.id == property_id)
    if for_update:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    with store_errors("property lookup"):
        result = await db.execute(stmt)
    prop = result.scalar_one_or_none()
    if prop is None:
        raise NotFound("Property not found")
    return prop


async def check_dates(
    db: AsyncSession,
    property_id: uuid.UUID,
    check_in: date,
    check_out: date,
    exclude_booking_id: uuid.UUID | None = None,
) -> Availability:
    """Look for blocked overrides and overlapping active bookings in the range."""
    _validate_range(check_in, check_out)

    blocked_query = (
        select(AvailabilityOverride.date)
        .where(
            AvailabilityOverride.property_id == property_id,
            AvailabilityOverride.is_available.is_(False),
            AvailabilityOverride.date >= check_in,
            AvailabilityOverride.date < check_out,
        )
        .order_by(AvailabilityOverride.date)
        .limit(1)
    )
    booking_query = (
        select(Booking.id, Booking.check_in)
        .where(
            Booking.property_id == property_id,
            Booking.status.in_(ACTIVE_STATUSES),
            Booking.check_in < check_out,
            Booking.check_out > check_in,
        )
        .order_by(Booking.check_in)
        .limit(1)
    )
    if exclude_booking_id is not None:
        booking_query = booking_query.where(Booking.id != exclude_booking_id)

    with store_errors("availability check"):
        blocked_date = (await db.execute(blocked_query)).scalar_one_or_none()
        booking_row = (await db.execute(booking_query)).first()

    booked_date = max(check_in, booking_row.check_in) if booking_row is not None else None

    if booked_date is not None and (blocked_date is None or booked_date <= blocked_date):
        return Availability(
            available=False,
            reason=BOOKED,
            conflict_date=booked_date,
            conflicting_booking_id=booking_row.id,
        )
    if blocked_date is not None:
        return Availability(available=False, reason=BLOCKED, conflict_date=blocked_date)
    return Availability(available=True)


async def is_available(
    db: AsyncSession,
    property_id: uuid.UUID,
    check_in: date,
    check_out: date,
    guests_count: int = 1,
) -> Availability:
    """Read-only availability check for a guest party over ``[check_in, check_out)``.

    Raises:
        InvalidRange: ``check_out`` is not after ``check_in``.
        InvalidGuests: ``guests_count`` is below one.
        NotFound: the property does not exist or is inactive.
    """
    _validate_range(check_in, check_out)
    if guests_count < 1:
        raise InvalidGuests("guests_count must be at least 1")

    prop = await get_property(db, property_id)
    if not prop.is_active:
        raise NotFound("Property not found or inactive")
    if prop.max_guests is not None and guests_count > prop.max_guests:
        return Availability(available=False, reason="capacity")

    return await check_dates(db, prop.id, check_in, check_out)


async def set_overrides(
    db: AsyncSession,
    property_id: uuid.UUID,
    host_id: uuid.UUID,
    entries: Iterable[tuple[date, bool]],
) -> list[AvailabilityOverride]:
    """Upsert host overrides, one per date. The last entry for a repeated date wins."""
    prop = await get_property(db, property_id)
    if prop.host_id != host_id:
        raise NotAuthorized("Not authorized to set availability for this property")

    wanted = dict(entries)
    if not wanted:
        return []

    with store_errors("set availability"):
        result = await db.execute(
            select(AvailabilityOverride).where(
                AvailabilityOverride.property_id == property_id,
                AvailabilityOverride.date.in_(list(wanted)),
            )
        )
        existing = {o.date: o for o in result.scalars().all()}

        for day, flag in wanted.items():
            override = existing.get(day)
            if override is None:
                override = AvailabilityOverride(property_id=property_id, date=day, is_available=flag)
                db.add(override)
                existing[day] = override
            else:
                override.is_available = flag
        await db.flush()

    logger.info("Host %s set %d availability overrides on property %s", host_id, len(wanted), property_id)
    return [existing[day] for day in sorted(wanted)]


async def list_overrides(
    db: AsyncSession,
    property_id: uuid.UUID,
    start: date | None = None,
    end: date | None = None,
) -> list[AvailabilityOverride]:
    """Overrides for a property, optionally limited to ``start <= date <= end``."""
    await get_property(db, property_id)
    query = select(AvailabilityOverride).where(AvailabilityOverride.property_id == property_id)
    if start is not None:
        query = query.where(AvailabilityOverride.date >= start)
    if end is not None:
        query = query.where(AvailabilityOverride.date <= end)
    with store_errors("list availability"):
        result = await db.execute(query.order_by(AvailabilityOverride.date))
    return list(result.scalars().all())


async def get_calendar(
    db: AsyncSession,
    property_id: uuid.UUID,
    start: date,
    end: date,
) -> list[CalendarDay]:
    """Per-date status for ``[start, end)``. A booking outranks a blocked override."""
    _validate_range(start, end)
    if (end - start).days > MAX_CALENDAR_DAYS:
        raise InvalidInput(f"Calendar range is limited to {MAX_CALENDAR_DAYS} days")
    await get_property(db, property_id)

    with store_errors("calendar"):
        overrides = await db.execute(
            select(AvailabilityOverride.date).where(
                AvailabilityOverride.property_id == property_id,
                AvailabilityOverride.is_available.is_(False),
                AvailabilityOverride.date >= start,
                AvailabilityOverride.date < end,
            )
        )
        blocked = set(overrides.scalars().all())

        bookings = await db.execute(
            select(Booking.id, Booking.check_in, Booking.check_out).where(
                Booking.property_id == property_id,
                Booking.status.in_(ACTIVE_STATUSES),
                Booking.check_in < end,
                Booking.check_out > start,
            )
        )
        booked: dict[date, uuid.UUID] = {}
        for row in bookings.all():
            for day in iter_dates(max(row.check_in, start), min(row.check_out, end)):
                booked[day] = row.id

    days = []
    for day in iter_dates(start, end):
        if day in booked:
            days.append(CalendarDay(date=day, status=BOOKED, booking_id=booked[day]))
        elif day in blocked:
            days.append(CalendarDay(date=day, status=BLOCKED))
        else:
            days.append(CalendarDay(date=day, status=AVAILABLE))
    return days
