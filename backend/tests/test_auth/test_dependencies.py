"""Tests for auth dependencies: get_current_user edge cases."""

import uuid
from datetime import timedelta

from factories import make_user
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.auth.jwt import create_access_token, create_token_pair
from staybook.models.user import User


class TestGetCurrentUser:
    """Exercise get_current_user through the /me endpoint."""

    async def test_missing_token_rejected(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/me")
        assert response.status_code in (401, 403)

    async def test_expired_token_rejected(self, client: AsyncClient, guest_user: User):
        token = create_access_token({"sub": str(guest_user.id)}, expires_delta=timedelta(seconds=-1))
        response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    async def test_invalid_token_format(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not.a.valid.jwt"})
        assert response.status_code == 401

    async def test_refresh_token_type_rejected(self, client: AsyncClient, guest_user: User):
        tokens = create_token_pair(str(guest_user.id))
        response = await client.get(
            "/api/v1/auth/me", headers={"Authorization": f"Bearer {tokens['refresh_token']}"}
        )
        assert response.status_code == 401

    async def test_nonexistent_user_id_rejected(self, client: AsyncClient):
        token = create_access_token({"sub": str(uuid.uuid4())})
        response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    async def test_inactive_user_forbidden(self, client: AsyncClient, db_session: AsyncSession):
        user = await make_user(db_session, is_active=False, prefix="inactive")
        token = create_access_token({"sub": str(user.id)})
        response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 403
