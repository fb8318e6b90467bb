import logging
import json
from fastapi import Request

from ..utils.datetime_utils import utc_now


def get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "").split(",")[0].strip()
    if forwarded:
        return forwarded
    real_ip = request.headers.get("x-real-ip", "")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"


def get_user_agent(request: Request) -> str:
    return request.headers.get("user-agent", "unknown")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


security_logger = logging.getLogger("security")
auth_logger = logging.getLogger("auth")
admin_logger = logging.getLogger("admin")
engagement_logger = logging.getLogger("engagement")


def _base_payload(request: Request, event_type: str) -> dict[str, object]:
    return {
        "event_type": event_type,
        "ip_address": get_client_ip(request),
        "user_agent": get_user_agent(request),
        "timestamp": utc_now().isoformat(),
    }


class SecurityLogger:
    @staticmethod
    def log_login_attempt(
        request: Request,
        identifier: str,
        success: bool,
        user_id: int | None = None,
        failure_reason: str | None = None,
    ):
        log_data = _base_payload(request, "login_attempt")
        log_data.update({"identifier": identifier, "success": success})

        if user_id:
            log_data["user_id"] = user_id
        if failure_reason:
            log_data["failure_reason"] = failure_reason

        message = (
            f"Login {'successful' if success else 'failed'}: {json.dumps(log_data)}"
        )

        if success:
            auth_logger.info(message)
        else:
            auth_logger.warning(message)

    @staticmethod
    def log_registration(
        request: Request,
        email: str,
        user_id: int | None = None,
        success: bool = True,
        failure_reason: str | None = None,
    ):
        log_data = _base_payload(request, "user_registration")
        log_data.update({"email": email, "success": success})

        if user_id:
            log_data["user_id"] = user_id
        if failure_reason:
            log_data["failure_reason"] = failure_reason

        message = f"Registration {'successful' if success else 'failed'}: {json.dumps(log_data)}"

        if success:
            auth_logger.info(message)
        else:
            auth_logger.warning(message)

    @staticmethod
    def log_access_denied(
        request: Request,
        user_id: int,
        role: str,
        allowed_roles: list[str],
    ):
        log_data = _base_payload(request, "access_denied")
        log_data.update(
            {
                "user_id": user_id,
                "role": role,
                "allowed_roles": allowed_roles,
                "path": request.url.path,
                "method": request.method,
            }
        )

        security_logger.warning(f"Access denied: {json.dumps(log_data)}")

    @staticmethod
    def log_admin_action(
        request: Request,
        admin_user_id: int,
        action: str,
        target_id: int | None = None,
        details: dict[str, object] | None = None,
    ):
        log_data = _base_payload(request, "admin_action")
        log_data.update({"admin_user_id": admin_user_id, "action": action})

        if target_id:
            log_data["target_id"] = target_id
        if details:
            log_data.update(details)

        admin_logger.info(f"Admin action - {action}: {json.dumps(log_data)}")

    @staticmethod
    def log_event_registration(
        request: Request,
        user_id: int,
        event_id: int,
        success: bool,
        failure_reason: str | None = None,
    ):
        log_data = _base_payload(request, "event_registration")
        log_data.update(
            {"user_id": user_id, "event_id": event_id, "success": success}
        )

        if failure_reason:
            log_data["failure_reason"] = failure_reason

        message = f"Event registration {'confirmed' if success else 'rejected'}: {json.dumps(log_data)}"

        if success:
            engagement_logger.info(message)
        else:
            engagement_logger.warning(message)

    @staticmethod
    def log_survey_submission(
        request: Request,
        user_id: int,
        survey_id: int,
        success: bool,
        answer_count: int = 0,
        failure_reason: str | None = None,
    ):
        log_data = _base_payload(request, "survey_submission")
        log_data.update(
            {
                "user_id": user_id,
                "survey_id": survey_id,
                "success": success,
                "answer_count": answer_count,
            }
        )

        if failure_reason:
            log_data["failure_reason"] = failure_reason

        message = f"Survey submission {'recorded' if success else 'rejected'}: {json.dumps(log_data)}"

        if success:
            engagement_logger.info(message)
        else:
            engagement_logger.warning(message)
