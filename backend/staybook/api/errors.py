"""Translate domain errors into JSON HTTP responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from staybook.errors import (
    AlreadyCancelled,
    Conflict,
    InvalidGuests,
    InvalidInput,
    InvalidRange,
    InvalidTransition,
    LimitExceeded,
    NotAuthorized,
    NotFound,
    NotParticipant,
    PriceMismatch,
    ReasonRequired,
    StaybookError,
    StoreError,
    Unavailable,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR: dict[type[StaybookError], int] = {
    NotFound: status.HTTP_404_NOT_FOUND,
    Unavailable: status.HTTP_409_CONFLICT,
    AlreadyCancelled: status.HTTP_409_CONFLICT,
    InvalidTransition: status.HTTP_409_CONFLICT,
    Conflict: status.HTTP_409_CONFLICT,
    InvalidRange: 422,
    InvalidGuests: 422,
    ReasonRequired: 422,
    PriceMismatch: 422,
    InvalidInput: 422,
    LimitExceeded: 422,
    NotParticipant: status.HTTP_403_FORBIDDEN,
    NotAuthorized: status.HTTP_403_FORBIDDEN,
    StoreError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(exc: StaybookError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[cls]
    return status.HTTP_400_BAD_REQUEST


async def staybook_error_handler(request: Request, exc: StaybookError) -> JSONResponse:
    """Render ``{"detail", "code"}``; unavailability also names the first conflict."""
    body: dict = {"detail": exc.message, "code": exc.code}
    if isinstance(exc, Unavailable):
        body["conflict_date"] = exc.conflict_date.isoformat() if exc.conflict_date else None
        body["conflicting_booking_id"] = str(exc.conflicting_booking_id) if exc.conflicting_booking_id else None

    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status_code, content=body)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StaybookError, staybook_error_handler)
