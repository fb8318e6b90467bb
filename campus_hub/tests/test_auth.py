import pytest
from fastapi import status
from httpx import AsyncClient

from campus_hub.models.user import User

from .test_utils import DEFAULT_PASSWORD, create_user, unique_user_data


class TestRegistration:

    @pytest.mark.asyncio
    async def test_register_creates_student(self, async_client: AsyncClient):
        user_data = unique_user_data()

        response = await async_client.post("/api/auth/register", json=user_data)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["username"] == user_data["username"]
        assert data["email"] == user_data["email"]
        assert data["role"] == "student"
        assert "password" not in data
        assert "password_hash" not in data

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, async_client: AsyncClient):
        user_data = unique_user_data()
        await async_client.post("/api/auth/register", json=user_data)

        duplicate = unique_user_data()
        duplicate["email"] = user_data["email"]
        response = await async_client.post("/api/auth/register", json=duplicate)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert "email" in response.json()["detail"].lower()

    @pytest.mark.asyncio
    async def test_register_duplicate_username(self, async_client: AsyncClient):
        user_data = unique_user_data()
        await async_client.post("/api/auth/register", json=user_data)

        duplicate = unique_user_data()
        duplicate["username"] = user_data["username"]
        response = await async_client.post("/api/auth/register", json=duplicate)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert "username" in response.json()["detail"].lower()

    @pytest.mark.asyncio
    async def test_register_weak_password(self, async_client: AsyncClient):
        user_data = unique_user_data()
        user_data["password"] = "short"

        response = await async_client.post("/api/auth/register", json=user_data)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.asyncio
    async def test_register_invalid_email(self, async_client: AsyncClient):
        user_data = unique_user_data()
        user_data["email"] = "not-an-email"

        response = await async_client.post("/api/auth/register", json=user_data)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_with_email(self, async_client: AsyncClient, student: User):
        response = await async_client.post(
            "/api/auth/login",
            json={"identifier": student.email, "password": DEFAULT_PASSWORD},
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["expires_in"] == 24 * 60 * 60
        assert data["access_token"]

    @pytest.mark.asyncio
    async def test_login_with_username(self, async_client: AsyncClient, student: User):
        response = await async_client.post(
            "/api/auth/login",
            json={"identifier": student.username, "password": DEFAULT_PASSWORD},
        )

        assert response.status_code == status.HTTP_200_OK

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, async_client: AsyncClient, student: User):
        response = await async_client.post(
            "/api/auth/login",
            json={"identifier": student.email, "password": "WrongPass123!"},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_login_unknown_user(self, async_client: AsyncClient):
        response = await async_client.post(
            "/api/auth/login",
            json={"identifier": "nobody@example.com", "password": DEFAULT_PASSWORD},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_login_banned_user(self, async_client: AsyncClient, database):
        banned = await create_user(
            database, "banned", is_banned=True, ban_reason="Spamming the forum"
        )

        response = await async_client.post(
            "/api/auth/login",
            json={"identifier": banned.email, "password": DEFAULT_PASSWORD},
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert "Spamming the forum" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_login_token_grants_access(self, async_client: AsyncClient):
        user_data = unique_user_data()
        await async_client.post("/api/auth/register", json=user_data)

        login_response = await async_client.post(
            "/api/auth/login",
            json={"identifier": user_data["email"], "password": user_data["password"]},
        )
        token = login_response.json()["access_token"]

        response = await async_client.get(
            "/api/profile/me", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["user"]["username"] == user_data["username"]
