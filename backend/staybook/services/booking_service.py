"""Booking transaction manager: create, confirm and cancel bookings.

``create_booking`` is the only place where a read-then-write race could produce a
double booking. It takes a row lock on the property (``SELECT ... FOR UPDATE``) before
checking availability, so concurrent requests for the same property queue behind
each other until the first one commits. SQLite has no row locks; there every
transaction is opened with ``BEGIN IMMEDIATE`` (see ``staybook.database``), which
serialises writers for the whole database.
"""

import logging
import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.config import settings
from staybook.errors import (
    AlreadyCancelled,
    InvalidGuests,
    InvalidInput,
    InvalidRange,
    InvalidTransition,
    NotAuthorized,
    NotFound,
    PriceMismatch,
    ReasonRequired,
    Unavailable,
    store_errors,
)
from staybook.models.booking import CANCELLED, COMPLETED, CONFIRMED, PENDING, Booking
from staybook.models.property import Property
from staybook.models.user import User
from staybook.services.availability import check_dates
from staybook.services.pricing import PriceQuote, quote_price

logger = logging.getLogger(__name__)

BOOKING_STATUSES = (PENDING, CONFIRMED, CANCELLED, COMPLETED)


def quote_for(
    prop: Property,
    check_in: date,
    check_out: date,
    service_fee_rate: Decimal | None = None,
    cleaning_fee: Decimal | None = None,
) -> PriceQuote:
    """Price a stay at ``prop`` using the configured fees unless overridden."""
    return quote_price(
        prop.daily_price,
        check_in,
        check_out,
        settings.service_fee_rate if service_fee_rate is None else service_fee_rate,
        settings.cleaning_fee if cleaning_fee is None else cleaning_fee,
    )


async def _lock_property(db: AsyncSession, property_id: uuid.UUID) -> Property | None:
    result = await db.execute(
        select(Property)
        .where(Property.id == property_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _lock_booking(db: AsyncSession, booking_id: uuid.UUID) -> Booking:
    with store_errors("booking lookup"):
        result = await db.execute(
            select(Booking)
            .where(Booking.id == booking_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
    booking = result.scalar_one_or_none()
    if booking is None:
        raise NotFound("Booking not found")
    return booking


async def create_booking(
    db: AsyncSession,
    property_id: uuid.UUID,
    guest_id: uuid.UUID,
    check_in: date,
    check_out: date,
    guests_count: int,
    expected_total: Decimal | None = None,
    service_fee_rate: Decimal | None = None,
    cleaning_fee: Decimal | None = None,
) -> Booking:
    """Validate and insert a booking atomically.

    The booking is ``confirmed`` for instant-book properties and ``pending``
    otherwise. ``expected_total`` is the client's view of the price; it is only
    compared, never stored.

    Raises:
        InvalidRange: ``check_out`` is not after ``check_in``.
        InvalidGuests: fewer than one guest, or more than the property's capacity.
        NotFound: the property is missing or inactive, or the guest does not exist.
        PriceMismatch: ``expected_total`` differs from the computed total.
        Unavailable: the dates are blocked or overlap an active booking.
    """
    if check_out <= check_in:
        raise InvalidRange()
    if guests_count < 1:
        raise InvalidGuests("guests_count must be at least 1")

    with store_errors("create booking"):
        prop = await _lock_property(db, property_id)
        if prop is None or not prop.is_active:
            raise NotFound("Property not found or inactive")

        guest = await db.get(User, guest_id)
        if guest is None:
            raise NotFound("Guest not found")

        if prop.max_guests is not None and guests_count > prop.max_guests:
            raise InvalidGuests(f"This property accommodates at most {prop.max_guests} guests")

        quote = quote_for(prop, check_in, check_out, service_fee_rate, cleaning_fee)
        if expected_total is not None and Decimal(expected_total) != quote.total_amount:
            raise PriceMismatch(
                f"Submitted total {expected_total} does not match computed total {quote.total_amount}"
            )

        availability = await check_dates(db, prop.id, check_in, check_out)
        if not availability.available:
            raise Unavailable(
                conflict_date=availability.conflict_date,
                conflicting_booking_id=availability.conflicting_booking_id,
            )

        booking = Booking(
            property_id=prop.id,
            guest_id=guest.id,
            check_in=check_in,
            check_out=check_out,
            guests_count=guests_count,
            total_amount=quote.total_amount,
            status=CONFIRMED if prop.is_instant_book else PENDING,
        )
        db.add(booking)
        await db.flush()
        await db.refresh(booking)

    logger.info(
        "Booking %s created for property %s by guest %s (%s, total=%s)",
        booking.id,
        prop.id,
        guest.id,
        booking.status,
        booking.total_amount,
    )
    return booking


async def cancel_booking(
    db: AsyncSession,
    booking_id: uuid.UUID,
    actor_id: uuid.UUID,
    reason: str | None,
    today: date | None = None,
) -> Booking:
    """Move a pending or confirmed booking to ``cancelled``.

    Either the guest or the property's host may cancel. The reason is stored verbatim.

    Raises:
        NotFound: no such booking.
        NotAuthorized: the actor is neither the guest nor the host.
        AlreadyCancelled: the booking was cancelled before.
        InvalidTransition: the stay is already completed.
        ReasonRequired: ``reason`` is missing or blank.
    """
    today = today or date.today()
    booking = await _lock_booking(db, booking_id)

    if actor_id not in (booking.guest_id, booking.listing.host_id):
        raise NotAuthorized("Only the guest or the host can cancel this booking")

    current = booking.status_on(today)
    if current == CANCELLED:
        raise AlreadyCancelled()
    if current == COMPLETED:
        raise InvalidTransition("Completed bookings cannot be cancelled")
    if reason is None or not reason.strip():
        raise ReasonRequired()

    with store_errors("cancel booking"):
        booking.status = CANCELLED
        booking.cancellation_reason = reason
        booking.cancelled_by_id = actor_id
        await db.flush()
        await db.refresh(booking)

    logger.info("Booking %s cancelled by %s", booking.id, actor_id)
    return booking


async def confirm_booking(db: AsyncSession, booking_id: uuid.UUID, actor_id: uuid.UUID) -> Booking:
    """Host approval: ``pending`` → ``confirmed``.

    The pending booking already holds its dates, so no availability re-check is needed.
    """
    booking = await _lock_booking(db, booking_id)

    if actor_id != booking.listing.host_id:
        raise NotAuthorized("Only the host can confirm this booking")
    if booking.status == CANCELLED:
        raise AlreadyCancelled()
    if booking.status != PENDING:
        raise InvalidTransition(f"Cannot confirm a booking that is {booking.current_status}")

    with store_errors("confirm booking"):
        booking.status = CONFIRMED
        await db.flush()
        await db.refresh(booking)

    logger.info("Booking %s confirmed by host %s", booking.id, actor_id)
    return booking


async def get_booking(db: AsyncSession, booking_id: uuid.UUID, actor_id: uuid.UUID) -> Booking:
    """Return a booking visible to its guest or its host; anyone else gets ``NotFound``."""
    with store_errors("booking lookup"):
        result = await db.execute(
            select(Booking)
            .join(Property, Booking.property_id == Property.id)
            .where(
                Booking.id == booking_id,
                or_(Booking.guest_id == actor_id, Property.host_id == actor_id),
            )
            .execution_options(populate_existing=True)
        )
    booking = result.scalar_one_or_none()
    if booking is None:
        raise NotFound("Booking not found")
    return booking


async def list_bookings(
    db: AsyncSession,
    actor_id: uuid.UUID,
    role: str | None = None,
    status: str | None = None,
    property_id: uuid.UUID | None = None,
    skip: int = 0,
    limit: int = 20,
    today: date | None = None,
) -> tuple[list[Booking], int]:
    """Bookings the actor made (``role="guest"``), received (``"host"``), or both."""
    today = today or date.today()

    if role == "guest":
        filters = [Booking.guest_id == actor_id]
    elif role == "host":
        filters = [Property.host_id == actor_id]
    elif role is None:
        filters = [or_(Booking.guest_id == actor_id, Property.host_id == actor_id)]
    else:
        raise InvalidInput("role must be 'guest' or 'host'")

    if property_id is not None:
        filters.append(Booking.property_id == property_id)

    if status == COMPLETED:
        filters.append(and_(Booking.status == CONFIRMED, Booking.check_out <= today))
    elif status == CONFIRMED:
        filters.append(and_(Booking.status == CONFIRMED, Booking.check_out > today))
    elif status is not None:
        if status not in BOOKING_STATUSES:
            raise InvalidInput(f"Unknown booking status '{status}'")
        filters.append(Booking.status == status)

    base = select(Booking).join(Property, Booking.property_id == Property.id).where(*filters)
    count_query = (
        select(func.count())
        .select_from(Booking)
        .join(Property, Booking.property_id == Property.id)
        .where(*filters)
    )

    with store_errors("list bookings"):
        total = (await db.execute(count_query)).scalar_one()
        result = await db.execute(base.order_by(Booking.created_at.desc()).offset(skip).limit(limit))
    return list(result.scalars().all()), total
