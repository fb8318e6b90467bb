import sentry_sdk
from fastapi import Request
from typing import Any

from ..config import Settings


def init_sentry(settings: Settings) -> bool:
    if not settings.SENTRY_DSN:
        return False

    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.starlette import StarletteIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        traces_sample_rate=1.0 if settings.DEBUG else 0.1,
        environment=settings.ENVIRONMENT,
        release=f"campus-hub@{settings.VERSION}",
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            StarletteIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        send_default_pii=False,
        attach_stacktrace=True,
    )
    return True


def set_request_context(request: Request):
    sentry_sdk.set_context(
        "request",
        {
            "url": str(request.url),
            "method": request.method,
            "query_params": dict(request.query_params),
        },
    )


def capture_exception_with_context(
    error: Exception, context: dict[str, Any] | None = None, level: str = "error"
):
    with sentry_sdk.new_scope() as scope:
        if context:
            for key, value in context.items():
                scope.set_context(key, value)
        sentry_sdk.capture_exception(error, level=level)
