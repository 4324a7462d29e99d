"""Tests for review endpoints."""

import uuid
from datetime import date, timedelta

import pytest_asyncio
from factories import make_booking
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.models.booking import Booking
from staybook.models.property import Property
from staybook.models.user import User


@pytest_asyncio.fixture
async def finished_stay(db_session: AsyncSession, test_property: Property, guest_user: User) -> Booking:
    check_in = date.today() - timedelta(days=7)
    return await make_booking(db_session, test_property, guest_user, check_in, check_in + timedelta(days=3))


class TestCreateReview:
    async def test_review_completed_stay(
        self, client: AsyncClient, guest_headers: dict, guest_user: User, finished_stay: Booking
    ) -> None:
        response = await client.post(
            "/api/v1/reviews",
            json={"booking_id": str(finished_stay.id), "rating": 5, "comment": "Lovely"},
            headers=guest_headers,
        )
        assert response.status_code == 201
        data = response.json()
        assert data["rating"] == 5
        assert data["property_id"] == str(finished_stay.property_id)
        assert data["reviewer_id"] == str(guest_user.id)
        assert data["reviewer_name"] == guest_user.full_name

    async def test_anonymous_hides_reviewer(
        self, client: AsyncClient, guest_headers: dict, finished_stay: Booking
    ) -> None:
        response = await client.post(
            "/api/v1/reviews",
            json={"booking_id": str(finished_stay.id), "rating": 4, "is_anonymous": True},
            headers=guest_headers,
        )
        assert response.status_code == 201
        assert response.json()["reviewer_id"] is None
        assert response.json()["reviewer_name"] is None

    async def test_second_review_conflicts(
        self, client: AsyncClient, guest_headers: dict, finished_stay: Booking
    ) -> None:
        body = {"booking_id": str(finished_stay.id), "rating": 4}
        await client.post("/api/v1/reviews", json=body, headers=guest_headers)

        response = await client.post("/api/v1/reviews", json=body, headers=guest_headers)
        assert response.status_code == 409
        assert response.json()["code"] == "CONFLICT"

    async def test_upcoming_stay_rejected(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        guest_headers: dict,
        test_property: Property,
        guest_user: User,
    ) -> None:
        check_in = date.today() + timedelta(days=20)
        booking = await make_booking(db_session, test_property, guest_user, check_in, check_in + timedelta(days=2))

        response = await client.post(
            "/api/v1/reviews", json={"booking_id": str(booking.id), "rating": 3}, headers=guest_headers
        )
        assert response.status_code == 409
        assert response.json()["code"] == "INVALID_STATUS_TRANSITION"

    async def test_only_the_guest_reviews(
        self, client: AsyncClient, host_headers: dict, finished_stay: Booking
    ) -> None:
        response = await client.post(
            "/api/v1/reviews", json={"booking_id": str(finished_stay.id), "rating": 1}, headers=host_headers
        )
        assert response.status_code == 403

    async def test_rating_bounds(self, client: AsyncClient, guest_headers: dict, finished_stay: Booking) -> None:
        response = await client.post(
            "/api/v1/reviews", json={"booking_id": str(finished_stay.id), "rating": 6}, headers=guest_headers
        )
        assert response.status_code == 422


class TestListReviews:
    async def test_list_with_summary(
        self,
        client: AsyncClient,
        guest_headers: dict,
        test_property: Property,
        finished_stay: Booking,
    ) -> None:
        await client.post(
            "/api/v1/reviews", json={"booking_id": str(finished_stay.id), "rating": 4}, headers=guest_headers
        )

        response = await client.get("/api/v1/reviews", params={"property_id": str(test_property.id)})
        assert response.status_code == 200
        data = response.json()
        assert data["review_count"] == 1
        assert data["average_rating"] == 4.0
        assert len(data["items"]) == 1

    async def test_flagged_review_hidden(
        self,
        client: AsyncClient,
        guest_headers: dict,
        other_headers: dict,
        test_property: Property,
        finished_stay: Booking,
    ) -> None:
        created = await client.post(
            "/api/v1/reviews", json={"booking_id": str(finished_stay.id), "rating": 1}, headers=guest_headers
        )

        flagged = await client.post(f"/api/v1/reviews/{created.json()['id']}/flag", headers=other_headers)
        assert flagged.status_code == 200

        response = await client.get("/api/v1/reviews", params={"property_id": str(test_property.id)})
        assert response.json() == {"items": [], "average_rating": 0.0, "review_count": 0}

    async def test_unknown_property(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/reviews", params={"property_id": str(uuid.uuid4())})
        assert response.status_code == 404
