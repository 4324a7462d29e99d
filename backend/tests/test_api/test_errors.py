"""Tests for the domain error to HTTP response mapping."""

import importlib
import uuid
import warnings
from datetime import date

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from staybook.api.errors import register_error_handlers, status_for
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
    StoreError,
    Unavailable,
)


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (NotFound(), 404),
        (Unavailable(), 409),
        (AlreadyCancelled(), 409),
        (InvalidTransition(), 409),
        (Conflict(), 409),
        (InvalidRange(), 422),
        (InvalidGuests(), 422),
        (ReasonRequired(), 422),
        (PriceMismatch(), 422),
        (InvalidInput(), 422),
        (LimitExceeded(), 422),
        (NotParticipant(), 403),
        (NotAuthorized(), 403),
        (StoreError(), 503),
    ],
)
def test_status_for(error, expected):
    assert status_for(error) == expected


async def _raise_from_route(error: Exception):
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/boom")
    async def boom():
        raise error

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        return await ac.get("/boom")


async def test_store_error_is_503():
    response = await _raise_from_route(StoreError("Persistence failure during create booking"))
    assert response.status_code == 503
    assert response.json() == {"detail": "Persistence failure during create booking", "code": "STORE_ERROR"}


async def test_unavailable_body_names_conflict():
    booking_id = uuid.uuid4()
    response = await _raise_from_route(
        Unavailable(conflict_date=date(2023, 6, 2), conflicting_booking_id=booking_id)
    )
    assert response.status_code == 409
    assert response.json() == {
        "detail": "Property not available for selected dates",
        "code": "DATES_UNAVAILABLE",
        "conflict_date": "2023-06-02",
        "conflicting_booking_id": str(booking_id),
    }


def test_status_map_uses_no_deprecated_constants():
    import staybook.api.errors as api_errors

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        importlib.reload(api_errors)

    assert not [w for w in caught if issubclass(w.category, DeprecationWarning)]
    assert api_errors.status_for(InvalidInput()) == 422
