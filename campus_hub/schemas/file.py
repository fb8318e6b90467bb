from datetime import datetime

from pydantic import BaseModel, ConfigDict

from .user import UserSummary


class DownloadableFileRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    file_name: str
    file_path: str
    file_type: str | None = None
    file_size_kb: int
    created_at: datetime


class DownloadableFileDetail(DownloadableFileRead):
    uploader: UserSummary
