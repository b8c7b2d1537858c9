"""survey_engine — Conversational survey SDK.

Public API:
    SurveyOrchestrator        — session lifecycle: start_session / handle_turn
    SurveyStore               — loads YAML survey definitions, lookup by external id
    ExtractionMergeEngine     — merges values extracted from a client message
    QuestionProgressionEngine — picks the next unanswered question, renders messages
    ValueNormalizer           — classifies values as meaningful / none-equivalent / empty
    PromptManager             — Jinja2 prompt templates per language

Language collaborators:
    LanguageCollaborator      — ABC for extraction and message rendering
    PassthroughLanguage       — no-model implementation
    LLMLanguage               — OpenAI-compatible chat-completions implementation
    CollaboratorUnavailableError — transport failure of the language service

Models:
    QuestionTemplate, Survey  — survey definitions
    Report, ConversationEntry, DataEntry — the per-session report document
    SessionState, SessionStart, TurnResult, SessionInfo, SessionReport
"""

from survey_engine.catalog import SurveyStore
from survey_engine.exceptions import CollaboratorUnavailableError
from survey_engine.extraction import ExtractionMergeEngine
from survey_engine.interfaces import LanguageCollaborator
from survey_engine.language import (
    LLMLanguage,
    PassthroughLanguage,
    build_language_collaborator,
)
from survey_engine.models import (
    ConversationEntry,
    DataEntry,
    QuestionTemplate,
    Report,
    SessionInfo,
    SessionReport,
    SessionStart,
    SessionState,
    Survey,
    TurnResult,
)
from survey_engine.normalizer import AnswerKind, ValueNormalizer
from survey_engine.orchestrator import SurveyOrchestrator
from survey_engine.progression import QuestionProgressionEngine
from survey_engine.prompt import PromptManager

__all__ = [
    # Orchestration
    "SurveyOrchestrator",
    "SurveyStore",
    "ExtractionMergeEngine",
    "QuestionProgressionEngine",
    "ValueNormalizer",
    "AnswerKind",
    "PromptManager",
    # Language
    "LanguageCollaborator",
    "LLMLanguage",
    "PassthroughLanguage",
    "build_language_collaborator",
    "CollaboratorUnavailableError",
    # Models
    "QuestionTemplate",
    "Survey",
    "Report",
    "ConversationEntry",
    "DataEntry",
    "SessionState",
    "SessionStart",
    "TurnResult",
    "SessionInfo",
    "SessionReport",
]
