"""ORM models for survey_db."""

from survey_db.models.base import Base
from survey_db.models.enums import SessionStatus
from survey_db.models.session import SurveySession

__all__ = ["Base", "SessionStatus", "SurveySession"]
