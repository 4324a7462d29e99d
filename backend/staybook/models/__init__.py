"""SQLAlchemy models for Staybook.

All models are imported here so that Alembic's autogenerate can discover
them via Base.metadata. If you add a new model, import it in this file.
"""

from staybook.models.booking import Booking
from staybook.models.messaging import Message, MessageThread
from staybook.models.property import AvailabilityOverride, Property, PropertyImage
from staybook.models.review import Review
from staybook.models.saved import CompareListEntry, WishlistEntry
from staybook.models.user import User

__all__ = [
    "AvailabilityOverride",
    "Booking",
    "CompareListEntry",
    "Message",
    "MessageThread",
    "Property",
    "PropertyImage",
    "Review",
    "User",
    "WishlistEntry",
]
