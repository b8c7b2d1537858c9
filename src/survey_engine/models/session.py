"""Session and turn models — the contract between the orchestrator and API callers.

These models are intentionally decoupled from the ORM models in ``survey_db``
so that API consumers never see database internals.
"""

from datetime import datetime

from pydantic import BaseModel

from survey_engine.models.report import Report


class SessionState(BaseModel):
    """Progress pointer of a session.

    ``current_order`` never decreases and ``completed`` never reverts.
    ``current_question_id`` names the question the last agent message asked,
    so the next client message is merged against it without scanning the
    transcript.
    """

    current_order: int = 0
    current_question_id: int | None = None
    completed: bool = False


class SessionStart(BaseModel):
    """Result of starting a session."""

    session_id: str
    message: str
    question_id: int | None = None
    completed: bool = False


class TurnResult(BaseModel):
    """Result of handling one client message."""

    session_id: str
    message: str
    completed: bool = False


class SessionInfo(BaseModel):
    """Public view of session state for API consumers."""

    session_id: str
    survey_id: str
    status: str
    current_order: int
    current_question_id: int | None = None
    completed: bool
    created_at: datetime
    updated_at: datetime
    completed_at: datetime | None = None


class SessionReport(BaseModel):
    """Full report of a session plus its flattened data view."""

    session_id: str
    survey_id: str
    completed: bool
    report: Report
    flat: dict[str, str]
