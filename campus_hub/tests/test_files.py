import io

import pytest
from fastapi import status
from httpx import AsyncClient
from PIL import Image

from campus_hub.config import Settings
from campus_hub.core.security import TokenService
from campus_hub.models.user import User

from .test_utils import get_auth_headers


def _png_bytes(mode: str = "RGBA") -> bytes:
    color = (200, 30, 30, 255) if mode == "RGBA" else (200, 30, 30)
    buffer = io.BytesIO()
    Image.new(mode, (16, 16), color).save(buffer, format="PNG")
    return buffer.getvalue()


class TestDownloadableFiles:

    @pytest.mark.asyncio
    async def test_admin_uploads_lists_and_deletes(
        self,
        async_client: AsyncClient,
        token_service: TokenService,
        test_settings: Settings,
        admin: User,
    ):
        headers = get_auth_headers(token_service, admin)

        upload = await async_client.post(
            "/api/files/upload",
            files={"file": ("syllabus.docx", b"x" * 3000, "application/msword")},
            headers=headers,
        )
        assert upload.status_code == status.HTTP_201_CREATED
        data = upload.json()
        assert data["file_name"] == "syllabus.docx"
        assert data["file_size_kb"] == 3
        assert data["uploader"]["id"] == admin.id

        stored_name = data["file_path"].rsplit("/", 1)[-1]
        stored_path = f"{test_settings.UPLOAD_DIR}/files/{stored_name}"
        with open(stored_path, "rb") as f:
            assert f.read() == b"x" * 3000

        served = await async_client.get(data["file_path"])
        assert served.status_code == status.HTTP_200_OK

        listing = await async_client.get("/api/files/", headers=headers)
        assert [f["id"] for f in listing.json()] == [data["id"]]

        deleted = await async_client.delete(f"/api/files/{data['id']}", headers=headers)
        assert deleted.status_code == status.HTTP_204_NO_CONTENT

        listing = await async_client.get("/api/files/", headers=headers)
        assert listing.json() == []
        served = await async_client.get(data["file_path"])
        assert served.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_disallowed_extension(
        self, async_client: AsyncClient, token_service: TokenService, admin: User
    ):
        response = await async_client.post(
            "/api/files/upload",
            files={"file": ("payload.exe", b"MZ...", "application/octet-stream")},
            headers=get_auth_headers(token_service, admin),
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.asyncio
    async def test_student_cannot_upload(
        self, async_client: AsyncClient, token_service: TokenService, student: User
    ):
        response = await async_client.post(
            "/api/files/upload",
            files={"file": ("notes.pdf", b"%PDF", "application/pdf")},
            headers=get_auth_headers(token_service, student),
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    @pytest.mark.asyncio
    async def test_delete_missing_file(
        self, async_client: AsyncClient, token_service: TokenService, admin: User
    ):
        response = await async_client.delete(
            "/api/files/999", headers=get_auth_headers(token_service, admin)
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestProfilePicture:

    @pytest.mark.asyncio
    async def test_upload_profile_picture(
        self, async_client: AsyncClient, token_service: TokenService, student: User
    ):
        response = await async_client.post(
            "/api/profile/picture",
            files={"file": ("me.png", _png_bytes(), "image/png")},
            headers=get_auth_headers(token_service, student),
        )

        assert response.status_code == status.HTTP_200_OK
        image_url = response.json()["profile_image_url"]
        assert image_url.startswith(f"/uploads/profile_images/{student.id}_")
        assert image_url.endswith(".jpg")

    @pytest.mark.asyncio
    async def test_replacing_picture_removes_the_old_one(
        self, async_client: AsyncClient, token_service: TokenService, student: User
    ):
        headers = get_auth_headers(token_service, student)

        first = await async_client.post(
            "/api/profile/picture",
            files={"file": ("a.png", _png_bytes(), "image/png")},
            headers=headers,
        )
        second = await async_client.post(
            "/api/profile/picture",
            files={"file": ("b.png", _png_bytes("RGB"), "image/png")},
            headers=headers,
        )

        old = await async_client.get(first.json()["profile_image_url"])
        new = await async_client.get(second.json()["profile_image_url"])
        assert old.status_code == status.HTTP_404_NOT_FOUND
        assert new.status_code == status.HTTP_200_OK

    @pytest.mark.asyncio
    async def test_rejects_non_image(
        self, async_client: AsyncClient, token_service: TokenService, student: User
    ):
        response = await async_client.post(
            "/api/profile/picture",
            files={"file": ("me.png", b"definitely not an image", "image/png")},
            headers=get_auth_headers(token_service, student),
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
