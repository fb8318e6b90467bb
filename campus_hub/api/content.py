from typing import Annotated

from fastapi import (
    APIRouter,
    Depends,
    File,
    HTTPException,
    Request,
    UploadFile,
    status,
)

from ..core.dependencies import AppSettings, DatabaseSession
from ..core.logging import SecurityLogger
from ..core.permissions import CONTENT_EDITORS, CONTENT_VIEWERS, require_roles
from ..models.content import NewsArticle
from ..models.user import User
from ..schemas.content import (
    ArticleCreate,
    ArticleRead,
    ArticleSummary,
    ArticleUpdate,
    AttachmentRead,
)
from ..services.content_service import ContentService
from ..services.file_service import FileStorageService

router = APIRouter()

ContentViewer = Annotated[User, Depends(require_roles(CONTENT_VIEWERS))]
ContentEditor = Annotated[User, Depends(require_roles(CONTENT_EDITORS))]


async def _get_managed_article(
    content_service: ContentService, article_id: int, user: User
) -> NewsArticle:
    article = await content_service.get_article(article_id)
    if not article:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Article not found"
        )
    content_service.ensure_can_manage(article, user)
    return article


@router.get("/articles", response_model=list[ArticleSummary])
async def list_articles(db: DatabaseSession, _user: ContentViewer):
    articles = await ContentService(db).list_articles()
    return [ArticleSummary.model_validate(article) for article in articles]


@router.get("/articles/{article_id}", response_model=ArticleRead)
async def get_article(article_id: int, db: DatabaseSession, user: ContentEditor):
    article = await _get_managed_article(ContentService(db), article_id, user)
    return ArticleRead.model_validate(article)


@router.post(
    "/articles", response_model=ArticleRead, status_code=status.HTTP_201_CREATED
)
async def create_article(
    request: Request,
    article_data: ArticleCreate,
    db: DatabaseSession,
    user: ContentEditor,
):
    content_service = ContentService(db)
    article_id = await content_service.create_article(article_data, user)

    SecurityLogger.log_admin_action(
        request, admin_user_id=user.id, action="create_article", target_id=article_id
    )

    article = await content_service.get_article(article_id)
    return ArticleRead.model_validate(article)


@router.put("/articles/{article_id}", response_model=ArticleRead)
async def update_article(
    request: Request,
    article_id: int,
    article_data: ArticleUpdate,
    db: DatabaseSession,
    user: ContentEditor,
):
    content_service = ContentService(db)
    article = await _get_managed_article(content_service, article_id, user)
    await content_service.update_article(article, article_data)

    SecurityLogger.log_admin_action(
        request, admin_user_id=user.id, action="update_article", target_id=article_id
    )

    article = await content_service.get_article(article_id)
    return ArticleRead.model_validate(article)


@router.delete("/articles/{article_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_article(
    request: Request,
    article_id: int,
    db: DatabaseSession,
    settings: AppSettings,
    user: ContentEditor,
):
    content_service = ContentService(db)
    article = await _get_managed_article(content_service, article_id, user)
    stored_paths = await content_service.delete_article(article)

    storage = FileStorageService(settings)
    for path in stored_paths:
        storage.delete_stored_file(path)

    SecurityLogger.log_admin_action(
        request, admin_user_id=user.id, action="delete_article", target_id=article_id
    )


@router.post(
    "/articles/{article_id}/attachments",
    response_model=AttachmentRead,
    status_code=status.HTTP_201_CREATED,
)
async def upload_attachment(
    request: Request,
    article_id: int,
    db: DatabaseSession,
    settings: AppSettings,
    user: ContentEditor,
    file: UploadFile = File(...),
):
    content_service = ContentService(db)
    article = await _get_managed_article(content_service, article_id, user)

    stored = await FileStorageService(settings).save_upload(file, folder="attachments")
    attachment = await content_service.add_attachment(article, stored, user)

    SecurityLogger.log_admin_action(
        request,
        admin_user_id=user.id,
        action="upload_attachment",
        target_id=article_id,
        details={"file_name": stored["file_name"]},
    )
    return AttachmentRead.model_validate(attachment)
