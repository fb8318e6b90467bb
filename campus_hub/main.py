import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from campus_hub.api import (
    auth,
    complaints,
    content,
    dashboard,
    events,
    files,
    home,
    profile,
    student,
    surveys,
    users,
)
from campus_hub.config import Settings
from campus_hub.core.config_validator import EnvironmentValidator
from campus_hub.core.exceptions import PortalError
from campus_hub.core.logging import configure_logging
from campus_hub.core.middleware import setup_middleware
from campus_hub.core.security import TokenService
from campus_hub.core.sentry_helpers import (
    capture_exception_with_context,
    init_sentry,
    set_request_context,
)
from campus_hub.database import Database
from campus_hub.utils.datetime_utils import utc_now

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger.info(f"🚀 {settings.APP_NAME} {settings.VERSION} starting up")

    if settings.DEBUG:
        logger.info("Running in debug mode - enhanced logging enabled")

    yield

    logger.info(f"🛑 {settings.APP_NAME} shutting down")
    await app.state.database.dispose()


async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=exc.headers,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc
    )
    set_request_context(request)
    capture_exception_with_context(
        exc, context={"endpoint": {"path": request.url.path, "method": request.method}}
    )
    return JSONResponse(
        status_code=500, content={"detail": "An unexpected error occurred"}
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    if settings is None:
        load_dotenv()
        settings = Settings()

    configure_logging(settings.LOG_LEVEL)
    EnvironmentValidator.validate_or_raise(settings)

    if init_sentry(settings):
        logger.info(f"✅ Sentry initialized for environment: {settings.ENVIRONMENT}")
    else:
        logger.info("⚠️  Sentry DSN not configured - error tracking disabled")

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.VERSION,
        openapi_url="/api/openapi.json" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = Database(settings)
    app.state.token_service = TokenService(settings)

    setup_middleware(app, settings)

    app.add_exception_handler(PortalError, portal_error_handler)  # type: ignore
    app.add_exception_handler(Exception, unhandled_exception_handler)

    upload_dir = Path(settings.UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=upload_dir), name="uploads")

    app.include_router(auth.router, prefix="/api/auth", tags=["authentication"])
    app.include_router(users.router, prefix="/api/users", tags=["users"])
    app.include_router(content.router, prefix="/api/content", tags=["content"])
    app.include_router(events.router, prefix="/api/events", tags=["events"])
    app.include_router(surveys.router, prefix="/api/surveys", tags=["surveys"])
    app.include_router(
        complaints.router, prefix="/api/complaints", tags=["complaints"]
    )
    app.include_router(files.router, prefix="/api/files", tags=["files"])
    app.include_router(profile.router, prefix="/api/profile", tags=["profile"])
    app.include_router(student.router, prefix="/api/student", tags=["student"])
    app.include_router(dashboard.router, prefix="/api/dashboard", tags=["dashboard"])
    app.include_router(home.router, prefix="/api/home", tags=["home"])

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
            "timestamp": utc_now().isoformat(),
        }

    return app
