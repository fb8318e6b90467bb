import re

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.exceptions import ForbiddenError, InvalidInputError
from ..database import transaction
from ..models.content import ArticleAttachment, NewsArticle
from ..models.enums import ArticleStatus, UserRole
from ..models.user import User
from ..schemas.content import ArticleCreate, ArticleUpdate
from ..utils.datetime_utils import utc_now
from .file_service import StoredFile


def slugify(title: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
    return slug or "article"


def build_article_slug(title: str) -> str:
    # Millisecond suffix keeps slugs of identically titled articles apart
    return f"{slugify(title)[:300]}-{int(utc_now().timestamp() * 1000)}"


class ContentService:
    db: AsyncSession

    def __init__(self, db: AsyncSession):
        self.db = db

    def _article_query(self):
        return select(NewsArticle).options(
            selectinload(NewsArticle.author), selectinload(NewsArticle.attachments)
        )

    async def list_articles(self) -> list[NewsArticle]:
        result = await self.db.execute(
            self._article_query().order_by(
                NewsArticle.created_at.desc(), NewsArticle.id.desc()
            )
        )
        return list(result.scalars().all())

    async def list_published(self, limit: int | None = None) -> list[NewsArticle]:
        query = (
            self._article_query()
            .where(NewsArticle.status == ArticleStatus.PUBLISHED)
            .order_by(NewsArticle.published_at.desc(), NewsArticle.id.desc())
        )
        if limit:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_article(
        self, article_id: int, published_only: bool = False
    ) -> NewsArticle | None:
        query = (
            self._article_query()
            .where(NewsArticle.id == article_id)
            .execution_options(populate_existing=True)
        )
        if published_only:
            query = query.where(NewsArticle.status == ArticleStatus.PUBLISHED)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    @staticmethod
    def ensure_can_manage(article: NewsArticle, user: User) -> None:
        if user.role == UserRole.EDITOR and article.author_id != user.id:
            raise ForbiddenError("Editors can only manage their own articles")

    async def create_article(self, article_data: ArticleCreate, author: User) -> int:
        async with transaction(self.db):
            article = NewsArticle(
                title=article_data.title,
                slug=build_article_slug(article_data.title),
                content=article_data.content,
                featured_image_url=article_data.featured_image_url,
                status=article_data.status,
                published_at=(
                    utc_now() if article_data.status == ArticleStatus.PUBLISHED else None
                ),
                author_id=author.id,
            )
            self.db.add(article)
            await self.db.flush()
        return article.id

    async def update_article(
        self, article: NewsArticle, article_data: ArticleUpdate
    ) -> None:
        update_data = article_data.model_dump(exclude_unset=True)
        for field in ("title", "content", "status"):
            if field in update_data and update_data[field] is None:
                raise InvalidInputError(f"{field} cannot be null")


        async with transaction(self.db):
            for field, value in update_data.items():
                setattr(article, field, value)

            if "title" in update_data:
                article.slug = build_article_slug(article.title)

            if article.status == ArticleStatus.PUBLISHED and article.published_at is None:
                article.published_at = utc_now()
            elif article.status == ArticleStatus.DRAFT:
                article.published_at = None

    async def delete_article(self, article: NewsArticle) -> list[str]:
        stored_paths = [attachment.file_path for attachment in article.attachments]
        async with transaction(self.db):
            await self.db.delete(article)
        return stored_paths

    async def add_attachment(
        self, article: NewsArticle, stored: StoredFile, uploader: User
    ) -> ArticleAttachment:
        async with transaction(self.db):
            attachment = ArticleAttachment(
                article_id=article.id,
                file_name=stored["file_name"],
                file_path=stored["file_path"],
                file_type=stored["file_type"],
                uploader_id=uploader.id,
            )
            self.db.add(attachment)
            await self.db.flush()
        return attachment
