from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from ..models.enums import ArticleStatus
from .user import UserSummary


class ArticleCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    content: str = Field(..., min_length=1)
    featured_image_url: str | None = Field(None, max_length=500)
    status: ArticleStatus = ArticleStatus.DRAFT


class ArticleUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=300)
    content: str | None = Field(None, min_length=1)
    featured_image_url: str | None = Field(None, max_length=500)
    status: ArticleStatus | None = None


class AttachmentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    file_name: str
    file_path: str
    file_type: str | None = None
    created_at: datetime


class ArticleSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    slug: str
    featured_image_url: str | None = None
    status: ArticleStatus
    published_at: datetime | None = None
    created_at: datetime
    author: UserSummary


class ArticleRead(ArticleSummary):
    content: str
    attachments: list[AttachmentRead] = []
