"""Public model re-exports for survey_engine.

Consumers should import from ``survey_engine.models`` rather than reaching
into sub-modules directly.
"""

# --- Survey definitions ---
from survey_engine.models.survey import QuestionTemplate, Survey

# --- Report document ---
from survey_engine.models.report import (
    ConversationEntry,
    DataEntry,
    QAPair,
    Report,
)

# --- Session / turn ---
from survey_engine.models.session import (
    SessionInfo,
    SessionReport,
    SessionStart,
    SessionState,
    TurnResult,
)

# --- Language collaborator inputs ---
from survey_engine.models.language import DialogueContext, ExtractionRequest

__all__ = [
    # Survey
    "QuestionTemplate",
    "Survey",
    # Report
    "ConversationEntry",
    "DataEntry",
    "QAPair",
    "Report",
    # Session
    "SessionInfo",
    "SessionReport",
    "SessionStart",
    "SessionState",
    "TurnResult",
    # Language
    "DialogueContext",
    "ExtractionRequest",
]
