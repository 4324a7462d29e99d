"""Tests for profile endpoints and the service probes."""

import uuid

from factories import headers_for, make_user
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.models.user import User


class TestOwnProfile:
    async def test_get_me(self, client: AsyncClient, guest_headers: dict, guest_user: User) -> None:
        response = await client.get("/api/v1/users/me", headers=guest_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == str(guest_user.id)
        assert data["email"] == guest_user.email
        assert "hashed_password" not in data

    async def test_update_me(self, client: AsyncClient, guest_headers: dict) -> None:
        response = await client.patch(
            "/api/v1/users/me",
            json={"bio": "Loves mountain cabins", "language_preference": "en", "is_host": True},
            headers=guest_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["bio"] == "Loves mountain cabins"
        assert data["language_preference"] == "en"
        assert data["is_host"] is True

    async def test_null_fields_left_alone(self, client: AsyncClient, guest_headers: dict, guest_user: User) -> None:
        response = await client.patch("/api/v1/users/me", json={"full_name": None}, headers=guest_headers)
        assert response.status_code == 200
        assert response.json()["full_name"] == guest_user.full_name

    async def test_inactive_user_forbidden(self, client: AsyncClient, db_session: AsyncSession) -> None:
        user = await make_user(db_session, is_active=False, prefix="gone")
        response = await client.get("/api/v1/users/me", headers=headers_for(user))
        assert response.status_code == 403


class TestPublicProfile:
    async def test_public_fields_only(self, client: AsyncClient, host_user: User) -> None:
        response = await client.get(f"/api/v1/users/{host_user.id}")
        assert response.status_code == 200
        data = response.json()
        assert data["username"] == host_user.username
        assert data["is_host"] is True
        assert "email" not in data
        assert "phone_number" not in data

    async def test_unknown_user(self, client: AsyncClient) -> None:
        response = await client.get(f"/api/v1/users/{uuid.uuid4()}")
        assert response.status_code == 404

    async def test_inactive_user_hidden(self, client: AsyncClient, db_session: AsyncSession) -> None:
        user = await make_user(db_session, is_active=False, prefix="gone")
        response = await client.get(f"/api/v1/users/{user.id}")
        assert response.status_code == 404


class TestProbes:
    async def test_health(self, client: AsyncClient) -> None:
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "Staybook"}

    async def test_root(self, client: AsyncClient) -> None:
        response = await client.get("/")
        assert response.json()["docs"] == "/docs"
