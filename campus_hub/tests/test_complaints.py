import pytest
from fastapi import status
from httpx import AsyncClient

from campus_hub.core.security import TokenService
from campus_hub.models.user import User

from .test_utils import get_auth_headers

COMPLAINT = {
    "title": "Broken projector",
    "category": "facilities",
    "description": "The projector in room 204 has not worked for a week.",
}


async def _file_complaint(
    async_client: AsyncClient, token_service: TokenService, user: User
) -> int:
    response = await async_client.post(
        "/api/student/complaints",
        json=COMPLAINT,
        headers=get_auth_headers(token_service, user),
    )
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()["id"]


class TestComplaints:

    @pytest.mark.asyncio
    async def test_student_files_complaint(
        self, async_client: AsyncClient, token_service: TokenService, student: User
    ):
        response = await async_client.post(
            "/api/student/complaints",
            json=COMPLAINT,
            headers=get_auth_headers(token_service, student),
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["status"] == "received"

    @pytest.mark.asyncio
    async def test_student_cannot_list_complaints(
        self, async_client: AsyncClient, token_service: TokenService, student: User
    ):
        response = await async_client.get(
            "/api/complaints/", headers=get_auth_headers(token_service, student)
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    @pytest.mark.asyncio
    async def test_moderator_lists_and_responds(
        self,
        async_client: AsyncClient,
        token_service: TokenService,
        student: User,
        moderator: User,
    ):
        complaint_id = await _file_complaint(async_client, token_service, student)
        headers = get_auth_headers(token_service, moderator)

        listing = await async_client.get("/api/complaints/", headers=headers)
        reply = await async_client.post(
            f"/api/complaints/{complaint_id}/responses",
            json={"message": "Maintenance has been notified."},
            headers=headers,
        )
        detail = await async_client.get(
            f"/api/complaints/{complaint_id}", headers=headers
        )

        assert listing.status_code == status.HTTP_200_OK
        assert [c["id"] for c in listing.json()] == [complaint_id]
        assert reply.status_code == status.HTTP_201_CREATED
        assert reply.json()["responder"]["id"] == moderator.id
        assert detail.json()["user"]["id"] == student.id
        assert [r["message"] for r in detail.json()["responses"]] == [
            "Maintenance has been notified."
        ]

    @pytest.mark.asyncio
    async def test_admin_updates_status(
        self,
        async_client: AsyncClient,
        token_service: TokenService,
        student: User,
        admin: User,
    ):
        complaint_id = await _file_complaint(async_client, token_service, student)
        headers = get_auth_headers(token_service, admin)

        response = await async_client.put(
            f"/api/complaints/{complaint_id}/status",
            json={"status": "action_taken"},
            headers=headers,
        )
        filtered = await async_client.get(
            "/api/complaints/?status=action_taken", headers=headers
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "action_taken"
        assert [c["id"] for c in filtered.json()] == [complaint_id]

    @pytest.mark.asyncio
    async def test_invalid_status_rejected(
        self,
        async_client: AsyncClient,
        token_service: TokenService,
        student: User,
        admin: User,
    ):
        complaint_id = await _file_complaint(async_client, token_service, student)

        response = await async_client.put(
            f"/api/complaints/{complaint_id}/status",
            json={"status": "resolved"},
            headers=get_auth_headers(token_service, admin),
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.asyncio
    async def test_missing_complaint(
        self, async_client: AsyncClient, token_service: TokenService, admin: User
    ):
        response = await async_client.get(
            "/api/complaints/999", headers=get_auth_headers(token_service, admin)
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
