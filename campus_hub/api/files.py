from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from ..core.dependencies import AppSettings, DatabaseSession
from ..core.logging import SecurityLogger
from ..core.permissions import ADMINS, require_roles
from ..database import transaction
from ..models.file import DownloadableFile
from ..models.user import User
from ..schemas.file import DownloadableFileDetail
from ..schemas.user import UserSummary
from ..services.file_service import FileStorageService

router = APIRouter()

FileAdmin = Annotated[User, Depends(require_roles(ADMINS))]


@router.get("/", response_model=list[DownloadableFileDetail])
async def list_files(db: DatabaseSession, _admin: FileAdmin):
    result = await db.execute(
        select(DownloadableFile)
        .options(selectinload(DownloadableFile.uploader))
        .order_by(DownloadableFile.created_at.desc(), DownloadableFile.id.desc())
    )
    return [DownloadableFileDetail.model_validate(f) for f in result.scalars().all()]


@router.post(
    "/upload",
    response_model=DownloadableFileDetail,
    status_code=status.HTTP_201_CREATED,
)
async def upload_file(
    request: Request,
    db: DatabaseSession,
    settings: AppSettings,
    admin: FileAdmin,
    file: UploadFile = File(...),
):
    stored = await FileStorageService(settings).save_upload(file, folder="files")

    async with transaction(db):
        db_file = DownloadableFile(**stored, uploader_id=admin.id)
        db.add(db_file)
        await db.flush()

    SecurityLogger.log_admin_action(
        request,
        admin_user_id=admin.id,
        action="upload_file",
        target_id=db_file.id,
        details={"file_name": stored["file_name"]},
    )

    return DownloadableFileDetail(
        id=db_file.id,
        file_name=db_file.file_name,
        file_path=db_file.file_path,
        file_type=db_file.file_type,
        file_size_kb=db_file.file_size_kb,
        created_at=db_file.created_at,
        uploader=UserSummary.model_validate(admin),
    )


@router.delete("/{file_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_file(
    request: Request,
    file_id: int,
    db: DatabaseSession,
    settings: AppSettings,
    admin: FileAdmin,
):
    db_file = await db.get(DownloadableFile, file_id)
    if not db_file:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")

    file_path = db_file.file_path
    async with transaction(db):
        await db.delete(db_file)

    FileStorageService(settings).delete_stored_file(file_path)

    SecurityLogger.log_admin_action(
        request, admin_user_id=admin.id, action="delete_file", target_id=file_id
    )
