import logging
from pathlib import Path
from typing import TypedDict

from ..config import Settings

logger = logging.getLogger(__name__)

DEFAULT_SECRET_PLACEHOLDER = "CHANGE_THIS_TO_A_SECURE_RANDOM_KEY_IN_PRODUCTION"


def _validate_secret_key(value: str) -> bool:
    return len(value) >= 32 and value != DEFAULT_SECRET_PLACEHOLDER


def _validate_database_url(value: str) -> bool:
    return value.startswith(("postgresql+asyncpg:", "sqlite+aiosqlite:"))


def _validate_sentry_dsn(value: str | None) -> bool:
    return bool(value) and value.startswith("https://")  # type: ignore[union-attr]


class ConfigurationError(Exception):
    pass


class ValidationResult(TypedDict):
    environment: str
    errors: list[str]
    warnings: list[str]
    valid: bool


class EnvironmentValidator:
    @classmethod
    def validate(cls, settings: Settings) -> ValidationResult:
        errors: list[str] = []
        warnings: list[str] = []
        environment = settings.ENVIRONMENT.lower()

        if not _validate_secret_key(settings.SECRET_KEY):
            errors.append(
                "SECRET_KEY must be at least 32 characters and changed from default"
            )

        if not _validate_database_url(settings.DATABASE_URL):
            errors.append(
                "DATABASE_URL must start with postgresql+asyncpg:// or sqlite+aiosqlite:///"
            )

        if settings.is_production:
            if settings.DEBUG:
                errors.append("DEBUG must be false in production environment")
            if settings.is_sqlite:
                warnings.append("SQLite is not recommended in production")
            if not _validate_sentry_dsn(settings.SENTRY_DSN):
                warnings.append(
                    "SENTRY_DSN should be configured for production monitoring"
                )
            if settings.RATE_LIMIT_STORAGE_URI.startswith("memory://"):
                warnings.append(
                    "RATE_LIMIT_STORAGE_URI uses in-process memory; limits are per worker"
                )

        try:
            Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            errors.append(f"UPLOAD_DIR '{settings.UPLOAD_DIR}' cannot be created: {e}")

        if not 1024 <= settings.MAX_FILE_SIZE <= 50 * 1024 * 1024:
            warnings.append("MAX_FILE_SIZE should be between 1KB and 50MB")

        return ValidationResult(
            environment=environment,
            errors=errors,
            warnings=warnings,
            valid=len(errors) == 0,
        )

    @classmethod
    def validate_or_raise(cls, settings: Settings) -> None:
        if settings.SKIP_CONFIG_VALIDATION:
            logger.info("Skipping configuration validation")
            return

        result = cls.validate(settings)

        for warning in result["warnings"]:
            logger.warning(f"Configuration warning: {warning}")

        if result["errors"]:
            for error in result["errors"]:
                logger.error(f"Configuration error: {error}")
            raise ConfigurationError(
                "Application cannot start with configuration errors: "
                + "; ".join(result["errors"])
            )

        logger.info(f"Configuration checks passed ({result['environment']})")
