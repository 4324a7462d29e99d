"""Typed failures raised by the core booking, availability and messaging operations.

The core never builds HTTP responses. Each error carries a stable ``code`` and a
human-readable ``message``; ``staybook.api.errors`` maps the classes to status codes.
"""

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class StaybookError(Exception):
    """Base class for all domain errors."""

    code = "STAYBOOK_ERROR"
    default_message = "Operation failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRange(StaybookError):
    code = "INVALID_DATE_RANGE"
    default_message = "check_out must be after check_in"


class NotFound(StaybookError):
    code = "NOT_FOUND"
    default_message = "Resource not found"


class Unavailable(StaybookError):
    """The property cannot be booked for the requested dates."""

    code = "DATES_UNAVAILABLE"
    default_message = "Property not available for selected dates"

    def __init__(
        self,
        message: str | None = None,
        conflict_date: date | None = None,
        conflicting_booking_id: uuid.UUID | None = None,
    ) -> None:
        super().__init__(message)
        self.conflict_date = conflict_date
        self.conflicting_booking_id = conflicting_booking_id


class InvalidGuests(StaybookError):
    code = "INVALID_GUESTS_COUNT"
    default_message = "Invalid number of guests"


class ReasonRequired(StaybookError):
    code = "CANCELLATION_REASON_REQUIRED"
    default_message = "A cancellation reason is required"


class AlreadyCancelled(StaybookError):
    code = "BOOKING_ALREADY_CANCELLED"
    default_message = "Booking is already cancelled"


class InvalidTransition(StaybookError):
    code = "INVALID_STATUS_TRANSITION"
    default_message = "Status change not allowed"


class NotParticipant(StaybookError):
    code = "NOT_THREAD_PARTICIPANT"
    default_message = "Sender and recipient must be the thread's participants"


class NotAuthorized(StaybookError):
    code = "NOT_AUTHORIZED"
    default_message = "Not allowed to act on this resource"


class PriceMismatch(StaybookError):
    code = "TOTAL_AMOUNT_MISMATCH"
    default_message = "Submitted total does not match the computed total"


class InvalidInput(StaybookError):
    code = "INVALID_INPUT"
    default_message = "Invalid input"


class Conflict(StaybookError):
    code = "CONFLICT"
    default_message = "Resource already exists"


class LimitExceeded(StaybookError):
    code = "LIMIT_EXCEEDED"
    default_message = "Limit exceeded"


class StoreError(StaybookError):
    code = "STORE_ERROR"
    default_message = "Persistence failure"


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    """Re-raise any SQLAlchemy failure inside the block as ``StoreError``."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.exception("Store failure during %s", operation)
        raise StoreError(f"Persistence failure during {operation}") from exc
