from fastapi import status


class PortalError(Exception):
    """Base for errors that map onto a definite client-facing response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "An unexpected error occurred"
    headers: dict[str, str] | None = None

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class UnauthenticatedError(PortalError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Could not validate credentials"
    headers = {"WWW-Authenticate": "Bearer"}


class ForbiddenError(PortalError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = (
        "Forbidden: You do not have the required permissions to access this resource."
    )


class NotFoundError(PortalError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found"


class InvalidInputError(PortalError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = "Invalid input"


class ConflictError(PortalError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Request conflicts with the current state"


class EventNotFoundError(NotFoundError):
    default_detail = "Event not found"


class DeadlinePassedError(ConflictError):
    default_detail = "The registration deadline for this event has passed"


class AlreadyRegisteredError(ConflictError):
    default_detail = "You are already registered for this event"


class EventFullError(ConflictError):
    default_detail = "This event is full"


class SurveyNotFoundError(NotFoundError):
    default_detail = "Survey not found or is not active"


class AlreadySubmittedError(ConflictError):
    default_detail = "You have already participated in this survey"


class AnswerValidationError(InvalidInputError):
    default_detail = "Answers do not match the survey questions"
