from enum import Enum


class UserRole(str, Enum):
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    EDITOR = "editor"
    MANAGER = "manager"
    MODERATOR = "moderator"
    STUDENT = "student"


class EventStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class SurveyStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    CLOSED = "closed"


class QuestionType(str, Enum):
    TEXT = "text"  # free-text answer, no options
    SINGLE_CHOICE = "single_choice"
    MULTIPLE_CHOICE = "multiple_choice"


class ComplaintStatus(str, Enum):
    RECEIVED = "received"
    UNDER_REVIEW = "under_review"
    PENDING_STUDENT_RESPONSE = "pending_student_response"
    ACTION_TAKEN = "action_taken"
    CLOSED = "closed"


class ArticleStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
