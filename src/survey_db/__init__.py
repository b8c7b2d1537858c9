"""survey_db — PostgreSQL persistence layer for survey sessions.

This package provides the ORM model, async engine factory, and repository
for creating, reading, and writing survey sessions together with their
report documents.  It is consumed by the orchestrator and the FastAPI server.
"""

from survey_db.models.session import SurveySession
from survey_db.models.enums import SessionStatus
from survey_db.engine import get_engine, get_session_factory
from survey_db.repository import SessionRepository

__all__ = [
    "SurveySession",
    "SessionStatus",
    "get_engine",
    "get_session_factory",
    "SessionRepository",
]
