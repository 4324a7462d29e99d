"""Seed the database with a small Saudi rental marketplace.

Five users (three hosts, two guests), five listings in Riyadh, Jeddah, Al Ula and
Dammam, plus bookings, reviews, message threads, wishlists and compare lists.
Booking dates are relative to today so past stays read as completed and can
carry reviews.

Run from the backend directory:
    python -m scripts.seed_data
"""

import asyncio
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

# Add backend to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import delete, select

from staybook.auth.passwords import hash_password
from staybook.database import async_session_factory, engine, utcnow
from staybook.models import (
    AvailabilityOverride,
    Booking,
    CompareListEntry,
    Message,
    MessageThread,
    Property,
    PropertyImage,
    Review,
    User,
    WishlistEntry,
)
from staybook.services.booking_service import quote_for

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

USERS = {
    "ahmed": {
        "email": "ahmed.ali@example.com",
        "username": "ahmedali",
        "password": "password123",
        "full_name": "Ahmed Ali",
        "phone_number": "+966501234567",
        "bio": "Experienced host in Riyadh",
        "language_preference": "ar",
        "is_host": True,
        "is_verified": True,
    },
    "fatima": {
        "email": "fatima.khalid@example.com",
        "username": "fatimak",
        "password": "user1234",
        "full_name": "Fatima Khalid",
        "phone_number": "+966551234567",
        "bio": "Travel enthusiast",
        "language_preference": "ar",
        "is_host": False,
        "is_verified": True,
    },
    "mohammed": {
        "email": "mohammed.saud@example.com",
        "username": "mohammeds",
        "password": "host1234",
        "full_name": "Mohammed Saud",
        "phone_number": "+966561234567",
        "bio": "Property manager with multiple listings",
        "language_preference": "ar",
        "is_host": True,
        "is_verified": True,
    },
    "noura": {
        "email": "noura.ahmed@example.com",
        "username": "nouraahmed",
        "password": "guest1234",
        "full_name": "Noura Ahmed",
        "phone_number": "+966541234567",
        "bio": "Frequent traveler",
        "language_preference": "ar",
        "is_host": False,
        "is_verified": False,
    },
    "khalid": {
        "email": "khalid.faisal@example.com",
        "username": "khalidf",
        "password": "admin1234",
        "full_name": "Khalid Faisal",
        "phone_number": "+966531234567",
        "bio": "Luxury property host",
        "language_preference": "en",
        "is_host": True,
        "is_verified": True,
    },
}

PROPERTIES = {
    "riyadh_apartment": {
        "host": "ahmed",
        "title": "Modern Apartment in Riyadh",
        "description": "Beautiful modern apartment in the heart of Riyadh with all amenities",
        "property_type": "Apartment",
        "daily_price": Decimal("150.00"),
        "address": "King Fahd Road, Riyadh",
        "latitude": Decimal("24.7136"),
        "longitude": Decimal("46.6753"),
        "check_in_instructions": "Check in after 3 PM. Key is in the lockbox with code 1234.",
        "amenities": "WiFi, Air Conditioning, Kitchen, Parking",
        "max_guests": 4,
        "is_instant_book": True,
        "cancellation_policy": "Flexible",
        "images": 3,
    },
    "jeddah_villa": {
        "host": "mohammed",
        "title": "Luxury Villa in Jeddah",
        "description": "Spacious villa with private pool and sea view",
        "property_type": "Villa",
        "daily_price": Decimal("350.00"),
        "address": "Corniche Road, Jeddah",
        "latitude": Decimal("21.5435"),
        "longitude": Decimal("39.1989"),
        "check_in_instructions": "Check in after 4 PM. The villa manager will meet you at the gate.",
        "amenities": "Pool, WiFi, Air Conditioning, Kitchen, Garden",
        "max_guests": 8,
        "is_instant_book": False,
        "cancellation_policy": "Moderate",
        "images": 3,
    },
    "alula_house": {
        "host": "khalid",
        "title": "Traditional House in Al Ula",
        "description": "Authentic traditional Saudi house in the historic area of Al Ula",
        "property_type": "House",
        "daily_price": Decimal("120.00"),
        "address": "Heritage Area, Al Ula",
        "latitude": Decimal("26.6025"),
        "longitude": Decimal("37.9250"),
        "check_in_instructions": "Check in after 2 PM. Key is with the caretaker next to the entrance.",
        "amenities": "WiFi, Heating, Traditional Decor, Courtyard",
        "max_guests": 5,
        "is_instant_book": True,
        "cancellation_policy": "Strict",
        "images": 2,
    },
    "riyadh_studio": {
        "host": "ahmed",
        "title": "Studio Apartment Near King Saud University",
        "description": "Cozy studio perfect for students or business travelers",
        "property_type": "Studio",
        "daily_price": Decimal("80.00"),
        "address": "King Saud University Area, Riyadh",
        "latitude": Decimal("24.7233"),
        "longitude": Decimal("46.6213"),
        "check_in_instructions": "Check in after 1 PM. Code for the door is 5678.",
        "amenities": "WiFi, Air Conditioning, Mini Kitchen",
        "max_guests": 2,
        "is_instant_book": True,
        "cancellation_policy": "Flexible",
        "images": 1,
    },
    "dammam_beachfront": {
        "host": "mohammed",
        "title": "Beachfront Apartment in Dammam",
        "description": "Modern apartment with direct beach access",
        "property_type": "Apartment",
        "daily_price": Decimal("200.00"),
        "address": "Beach Road, Dammam",
        "latitude": Decimal("26.4207"),
        "longitude": Decimal("50.0883"),
        "check_in_instructions": "Check in after 3 PM. The building manager will give you the keys.",
        "amenities": "Beach Access, WiFi, Air Conditioning, Kitchen, Gym",
        "max_guests": 6,
        "is_instant_book": False,
        "cancellation_policy": "Moderate",
        "images": 1,
    },
}

# (property, guest, days from today to check-in, nights, guests, status, cancellation reason)
BOOKINGS = [
    ("riyadh_apartment", "fatima", -40, 2, 2, "confirmed", None),
    ("jeddah_villa", "noura", -30, 5, 4, "confirmed", None),
    ("riyadh_studio", "fatima", 14, 2, 1, "pending", None),
    ("riyadh_apartment", "noura", 21, 2, 2, "cancelled", "Changed travel plans"),
    ("dammam_beachfront", "fatima", -20, 5, 3, "confirmed", None),
]

# Reviews reference BOOKINGS by index; only completed stays are reviewable.
REVIEWS = [
    (0, 5, "Amazing place! Clean, comfortable and great location.", False),
    (1, 4, "Beautiful villa with great amenities. The pool was perfect.", False),
    (4, 5, "Perfect beachfront location. The apartment was exactly as described.", False),
]

# (property or None, guest, host, [(sender, text), ...])
THREADS = [
    (
        "riyadh_apartment",
        "fatima",
        "ahmed",
        [
            ("fatima", "Hi, I'm interested in booking your apartment. Is it still available?"),
            ("ahmed", "Yes, it's still available! The price is 150 SAR per night."),
            ("fatima", "Great! I'd like to proceed with the booking."),
        ],
    ),
    (
        "jeddah_villa",
        "noura",
        "mohammed",
        [
            ("noura", "Could you provide more details about the pool facilities?"),
            ("mohammed", "Certainly! The pool is 10x5 meters, heated, and maintained daily."),
        ],
    ),
    (
        "dammam_beachfront",
        "fatima",
        "mohammed",
        [
            ("fatima", "Is the beach access private or shared?"),
            ("mohammed", "It's shared with other residents, but there's plenty of space."),
        ],
    ),
    (None, "ahmed", "mohammed", [("ahmed", "Let's discuss the new property management partnership.")]),
]

WISHLISTS = [
    ("fatima", "riyadh_apartment"),
    ("fatima", "jeddah_villa"),
    ("fatima", "dammam_beachfront"),
    ("noura", "dammam_beachfront"),
    ("noura", "alula_house"),
]

COMPARE_LISTS = [
    ("fatima", "riyadh_apartment"),
    ("fatima", "riyadh_studio"),
    ("fatima", "alula_house"),
    ("noura", "jeddah_villa"),
    ("noura", "dammam_beachfront"),
]

# Deleted children first so foreign keys never dangle.
_TABLES_IN_DELETE_ORDER = (
    Message,
    MessageThread,
    Review,
    CompareListEntry,
    WishlistEntry,
    Booking,
    AvailabilityOverride,
    PropertyImage,
    Property,
    User,
)


async def seed() -> None:
    """Populate the database with the sample marketplace.

    Idempotent: when the sample hosts already exist, every table is cleared and
    re-seeded to ensure a clean state.
    """
    today = date.today()

    async with async_session_factory() as session:
        result = await session.execute(select(User).where(User.email == USERS["ahmed"]["email"]))
        if result.scalar_one_or_none() is not None:
            print("Sample data already present. Clearing and re-seeding...")
            for model in _TABLES_IN_DELETE_ORDER:
                await session.execute(delete(model))
            await session.flush()

        # ------------------------------------------------------------------
        # 1. Users
        # ------------------------------------------------------------------
        users: dict[str, User] = {}
        for key, data in USERS.items():
            fields = {k: v for k, v in data.items() if k != "password"}
            user = User(hashed_password=hash_password(data["password"]), **fields)
            session.add(user)
            users[key] = user
        await session.flush()
        print(f"Created {len(users)} users")

        # ------------------------------------------------------------------
        # 2. Properties and images
        # ------------------------------------------------------------------
        properties: dict[str, Property] = {}
        for key, data in PROPERTIES.items():
            fields = {k: v for k, v in data.items() if k not in ("host", "images")}
            prop = Property(host_id=users[data["host"]].id, **fields)
            session.add(prop)
            await session.flush()
            properties[key] = prop

            for order in range(data["images"]):
                session.add(
                    PropertyImage(
                        property_id=prop.id,
                        image_url=f"https://picsum.photos/seed/{key}-{order}/600/400",
                        is_primary=order == 0,
                        display_order=order,
                    )
                )
            print(f"   {prop.title} ({prop.daily_price} SAR/night)")
        await session.flush()

        # Host blocks a maintenance day on the Riyadh apartment.
        session.add(
            AvailabilityOverride(
                property_id=properties["riyadh_apartment"].id,
                date=today + timedelta(days=45),
                is_available=False,
            )
        )

        # ------------------------------------------------------------------
        # 3. Bookings and reviews
        # ------------------------------------------------------------------
        bookings: list[Booking] = []
        for prop_key, guest_key, offset, nights, guests, status, reason in BOOKINGS:
            prop = properties[prop_key]
            check_in = today + timedelta(days=offset)
            check_out = check_in + timedelta(days=nights)
            booking = Booking(
                property_id=prop.id,
                guest_id=users[guest_key].id,
                check_in=check_in,
                check_out=check_out,
                guests_count=guests,
                total_amount=quote_for(prop, check_in, check_out).total_amount,
                status=status,
                cancellation_reason=reason,
                cancelled_by_id=users[guest_key].id if reason else None,
            )
            session.add(booking)
            bookings.append(booking)
        await session.flush()
        print(f"Created {len(bookings)} bookings")

        for index, rating, comment, anonymous in REVIEWS:
            booking = bookings[index]
            session.add(
                Review(
                    property_id=booking.property_id,
                    booking_id=booking.id,
                    reviewer_id=booking.guest_id,
                    rating=rating,
                    comment=comment,
                    is_anonymous=anonymous,
                )
            )
        await session.flush()
        print(f"Created {len(REVIEWS)} reviews")

        # ------------------------------------------------------------------
        # 4. Messaging
        # ------------------------------------------------------------------
        for prop_key, guest_key, host_key, messages in THREADS:
            guest, host = users[guest_key], users[host_key]
            thread = MessageThread(
                property_id=properties[prop_key].id if prop_key else None,
                guest_id=guest.id,
                host_id=host.id,
            )
            session.add(thread)
            await session.flush()

            for position, (sender_key, content) in enumerate(messages):
                sender = users[sender_key]
                recipient = host if sender is guest else guest
                # Everything but the last message has been read.
                message = Message(
                    thread_id=thread.id,
                    sender_id=sender.id,
                    recipient_id=recipient.id,
                    content=content,
                    is_read=position < len(messages) - 1,
                    created_at=utcnow(),
                )
                session.add(message)
                thread.last_message_at = message.created_at
            await session.flush()
        print(f"Created {len(THREADS)} message threads")

        # ------------------------------------------------------------------
        # 5. Wishlists and compare lists
        # ------------------------------------------------------------------
        for model, entries in ((WishlistEntry, WISHLISTS), (CompareListEntry, COMPARE_LISTS)):
            for user_key, prop_key in entries:
                session.add(model(user_id=users[user_key].id, property_id=properties[prop_key].id))
        await session.flush()

        await session.commit()

    await engine.dispose()

    print()
    print("=" * 60)
    print("Seed Summary")
    print("=" * 60)
    print(f"   Users:       {len(USERS)} (e.g. {USERS['ahmed']['email']} / {USERS['ahmed']['password']})")
    print(f"   Properties:  {len(PROPERTIES)}")
    print(f"   Bookings:    {len(BOOKINGS)}")
    print(f"   Reviews:     {len(REVIEWS)}")
    print(f"   Threads:     {len(THREADS)}")
    print("=" * 60)
    print("Done! You can now log in at /api/v1/auth/login")


if __name__ == "__main__":
    asyncio.run(seed())
