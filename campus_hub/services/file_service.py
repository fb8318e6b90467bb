import hashlib
import io
import logging
import os
import uuid
from pathlib import Path
from typing import TypedDict

from fastapi import HTTPException, UploadFile, status
from PIL import Image, UnidentifiedImageError

from ..config import Settings

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/uploads"


class StoredFile(TypedDict):
    file_name: str
    file_path: str
    file_type: str | None
    file_size_kb: int


class FileStorageService:
    """Stores uploads under ``UPLOAD_DIR`` and hands back their public path."""

    def __init__(self, settings: Settings):
        self.upload_base = Path(settings.UPLOAD_DIR).absolute()
        self.profile_images_dir = self.upload_base / "profile_images"
        self.max_file_size = settings.MAX_FILE_SIZE
        self.max_image_size = settings.MAX_PROFILE_IMAGE_SIZE
        self.allowed_extensions = set(settings.allowed_file_extensions)

        self.profile_images_dir.mkdir(parents=True, exist_ok=True)

    async def save_upload(self, file: UploadFile, folder: str = "files") -> StoredFile:
        original_name = Path(file.filename or "").name
        extension = Path(original_name).suffix.lower()

        if not original_name or extension not in self.allowed_extensions:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid file type. Allowed: {', '.join(sorted(self.allowed_extensions))}",
            )

        content = await self._read_limited(file, self.max_file_size)

        target_dir = self.upload_base / folder
        target_dir.mkdir(parents=True, exist_ok=True)

        stored_name = f"{uuid.uuid4().hex}{extension}"
        with open(target_dir / stored_name, "wb") as f:
            f.write(content)

        return StoredFile(
            file_name=original_name,
            file_path=f"{PUBLIC_PREFIX}/{folder}/{stored_name}",
            file_type=file.content_type,
            file_size_kb=max(1, (len(content) + 1023) // 1024),
        )

    async def save_profile_image(self, file: UploadFile, user_id: int) -> str:
        content = await self._read_limited(file, self.max_image_size)

        try:
            image = Image.open(io.BytesIO(content))
            image.verify()

            image = Image.open(io.BytesIO(content))
            if image.mode in ("RGBA", "LA", "P"):
                image = image.convert("RGBA")
                rgb_image = Image.new("RGB", image.size, (255, 255, 255))
                rgb_image.paste(image, mask=image.split()[-1])
                image = rgb_image
            elif image.mode != "RGB":
                image = image.convert("RGB")
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid or corrupted image file",
            ) from e

        file_hash = hashlib.sha256(content).hexdigest()[:16]
        filename = f"{user_id}_{uuid.uuid4().hex}_{file_hash}.jpg"

        self._cleanup_old_profile_images(user_id)

        with open(self.profile_images_dir / filename, "wb") as f:
            image.save(f, format="JPEG", quality=85, optimize=True)

        return f"{PUBLIC_PREFIX}/profile_images/{filename}"

    def delete_stored_file(self, public_path: str) -> bool:
        if not public_path.startswith(f"{PUBLIC_PREFIX}/"):
            return False

        relative = public_path[len(PUBLIC_PREFIX) + 1 :]
        file_path = (self.upload_base / relative).resolve()

        if not str(file_path).startswith(str(self.upload_base.resolve()) + os.sep):
            return False

        try:
            if file_path.is_file():
                file_path.unlink()
                return True
        except OSError as e:
            logger.warning(f"Failed to delete stored file {public_path}: {e}")

        return False

    async def _read_limited(self, file: UploadFile, max_size: int) -> bytes:
        if file.size and file.size > max_size:
            raise self._too_large(max_size)

        content = await file.read()
        if len(content) > max_size:
            raise self._too_large(max_size)
        if not content:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Uploaded file is empty"
            )
        return content

    @staticmethod
    def _too_large(max_size: int) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File too large. Maximum size: {max_size // 1024} KB",
        )

    def _cleanup_old_profile_images(self, user_id: int) -> None:
        for file_path in self.profile_images_dir.glob(f"{user_id}_*"):
            try:
                if file_path.is_file():
                    file_path.unlink()
            except OSError as e:
                logger.warning(f"Failed to cleanup old image {file_path.name}: {e}")
