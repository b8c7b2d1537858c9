"""SurveyOrchestrator — runs one survey session turn by turn.

Glues the Extraction Merge Engine and the Question Progression Engine to the
session repository:

    start_session ──► progression (question #1) ──► save report + state
    handle_turn   ──► extraction ──┬─ failed ──► fail message, save report
                                   └─ ok ──────► progression ──► save report + state

Every write of a turn happens in memory first (deep copies of the report)
and is flushed once at the end, so a collaborator error in the middle of a
turn leaves nothing behind once the caller rolls back.

Usage::

    store = SurveyStore()
    store.load()
    orchestrator = SurveyOrchestrator(store, PassthroughLanguage())

    start = await orchestrator.start_session(db, external_id="demo-scrum-daily-en")
    # start.message == "What did you work on yesterday?"

    turn = await orchestrator.handle_turn(
        db, session_id=start.session_id, text="KCD-12",
    )
    # turn.completed is False until the final question is answered

All methods take an ``AsyncSession``; the caller owns the transaction.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from survey_db.models.enums import SessionStatus
from survey_db.models.session import SurveySession
from survey_db.repository import SessionRepository

from survey_engine.catalog import SurveyStore
from survey_engine.constants import NO_QUESTIONS_MESSAGE
from survey_engine.extraction import ExtractionMergeEngine, resolve_current_question
from survey_engine.interfaces import LanguageCollaborator
from survey_engine.models.report import Report
from survey_engine.models.session import (
    SessionInfo,
    SessionReport,
    SessionStart,
    SessionState,
    TurnResult,
)
from survey_engine.models.survey import QuestionTemplate
from survey_engine.normalizer import ValueNormalizer, default_normalizer
from survey_engine.progression import QuestionProgressionEngine
from survey_engine.report import flatten

logger = logging.getLogger(__name__)


class SurveyOrchestrator:
    """Public entry point of the SDK: session lifecycle and turn handling.

    Args:
        store: a loaded :class:`SurveyStore` (survey lookup by external id)
        language: the :class:`LanguageCollaborator` used by both engines
        normalizer: value classifier shared by both engines; defaults to the
            module-level :data:`default_normalizer`
    """

    def __init__(
        self,
        store: SurveyStore,
        language: LanguageCollaborator,
        normalizer: ValueNormalizer | None = None,
    ) -> None:
        normalizer = normalizer or default_normalizer
        self._store = store
        self._extraction = ExtractionMergeEngine(language, normalizer)
        self._progression = QuestionProgressionEngine(language, normalizer)
        self._repo = SessionRepository()

    # ==================================================================
    # Conversation API
    # ==================================================================

    async def start_session(
        self,
        db: AsyncSession,
        *,
        external_id: str,
    ) -> SessionStart:
        """Create a session for the survey and ask its first question.

        Raises:
            ValueError: if no survey has ``external_id``
        """
        survey = self._store.get_survey(external_id)
        questions = survey.ordered_questions

        row = await self._repo.create_session(db, survey_id=survey.external_id)
        session_id = str(row.id)

        if not questions:
            logger.warning("Survey %s has no questions", survey.external_id)
            await self._repo.save_state(
                db, row, current_order=0, current_question_id=None, completed=True,
            )
            return SessionStart(
                session_id=session_id, message=NO_QUESTIONS_MESSAGE, completed=True,
            )

        report = Report()
        decision = await self._progression.decide_next(
            report, questions, lang=survey.lang,
        )
        report, state = self._progression.record(report, SessionState(), decision)
        await self._persist(db, row, report, state)

        logger.info(
            "Session started: session_id=%s survey=%s question=%s",
            session_id, survey.external_id, state.current_question_id,
        )
        return SessionStart(
            session_id=session_id,
            message=decision.message,
            question_id=state.current_question_id,
            completed=state.completed,
        )

    async def handle_turn(
        self,
        db: AsyncSession,
        *,
        session_id: str,
        text: str,
        external_id: str | None = None,
    ) -> TurnResult:
        """Process one client message and return the agent's reply.

        When ``external_id`` is given, the session must belong to that
        survey.

        Raises:
            ValueError: session not found (or belongs to another survey),
                or session already completed
            CollaboratorUnavailableError: the language service failed; the
                caller must roll back
        """
        row = await self._load_session(db, session_id)
        if external_id is not None and row.survey_id != external_id:
            raise ValueError(
                f"Session not found: session_id={session_id}, survey={external_id}"
            )
        if row.completed:
            raise ValueError(f"Session already completed: session_id={session_id}")

        survey = self._store.get_survey(row.survey_id)
        questions = survey.ordered_questions
        report = Report.model_validate(self._repo.get_report(row))
        state = SessionState.model_validate(self._repo.get_state(row))

        current = resolve_current_question(
            report, questions, state.current_question_id,
        )
        if current is None:
            raise ValueError(f"Survey has no questions: survey={survey.external_id}")

        outcome = await self._extraction.extract_and_merge(
            report, text, current, questions, lang=survey.lang,
        )

        # --- Failed extraction: re-ask, keep the state ---
        if not outcome.extracted:
            message = await self._progression.fail_message(
                current, outcome.report, lang=survey.lang,
            )
            await self._repo.save_report(db, row, _dump(outcome.report))
            logger.info(
                "Turn not understood: session_id=%s question=%s",
                session_id, current.id,
            )
            return TurnResult(session_id=session_id, message=message, completed=False)

        # --- Progress to the next question or complete ---
        decision = await self._progression.decide_next(
            outcome.report, questions,
            answered=_answered_question(current, questions, outcome.keys),
            lang=survey.lang,
        )
        report, state = self._progression.record(outcome.report, state, decision)
        await self._persist(db, row, report, state)

        if state.completed:
            logger.info("Session completed: session_id=%s", session_id)
        else:
            logger.info(
                "Turn processed: session_id=%s answered=%s next=%s merged=%d",
                session_id, current.id, state.current_question_id,
                len(outcome.data_ids),
            )
        return TurnResult(
            session_id=session_id,
            message=decision.message,
            completed=state.completed,
        )

    # ==================================================================
    # Session read / maintenance
    # ==================================================================

    async def get_session(
        self, db: AsyncSession, *, session_id: str
    ) -> SessionInfo | None:
        """Fetch session info.  Returns None if not found."""
        pk = _parse_session_id(session_id)
        if pk is None:
            return None
        row = await self._repo.get_by_id(db, pk)
        if row is None:
            return None
        return self._to_session_info(row)

    async def get_report(self, db: AsyncSession, *, session_id: str) -> SessionReport:
        """Return the session's report with its flattened data view."""
        row = await self._load_session(db, session_id)
        report = Report.model_validate(self._repo.get_report(row))
        return SessionReport(
            session_id=str(row.id),
            survey_id=row.survey_id,
            completed=row.completed,
            report=report,
            flat=flatten(report),
        )

    async def list_sessions(
        self,
        db: AsyncSession,
        *,
        external_id: str,
        limit: int = 20,
        offset: int = 0,
    ) -> list[SessionInfo]:
        """List live sessions of a survey, most recent first."""
        survey = self._store.get_survey(external_id)
        rows = await self._repo.list_by_survey(
            db, survey.external_id, limit=limit, offset=offset,
        )
        return [self._to_session_info(r) for r in rows]

    async def soft_delete_session(self, db: AsyncSession, *, session_id: str) -> None:
        """Hide a session from all normal queries; the row is kept."""
        row = await self._load_session(db, session_id)
        await self._repo.soft_delete(db, row)
        logger.info("Session soft-deleted: session_id=%s", session_id)

    async def hard_delete_session(self, db: AsyncSession, *, session_id: str) -> None:
        """Permanently remove a session, including soft-deleted ones."""
        row = await self._load_session(db, session_id, include_deleted=True)
        await self._repo.hard_delete(db, row)
        logger.info("Session permanently deleted: session_id=%s", session_id)

    # ==================================================================
    # Internal: helpers
    # ==================================================================

    async def _load_session(
        self,
        db: AsyncSession,
        session_id: str,
        *,
        include_deleted: bool = False,
    ) -> SurveySession:
        """Load a session row or raise ValueError if not found."""
        pk = _parse_session_id(session_id)
        row = None
        if pk is not None:
            row = await self._repo.get_by_id(db, pk, include_deleted=include_deleted)
        if row is None:
            raise ValueError(f"Session not found: session_id={session_id}")
        return row

    async def _persist(
        self,
        db: AsyncSession,
        row: SurveySession,
        report: Report,
        state: SessionState,
    ) -> None:
        await self._repo.save_report(db, row, _dump(report))
        await self._repo.save_state(
            db,
            row,
            current_order=state.current_order,
            current_question_id=state.current_question_id,
            completed=state.completed,
        )

    @staticmethod
    def _to_session_info(row: SurveySession) -> SessionInfo:
        """Convert an ORM row to a public SessionInfo."""
        return SessionInfo(
            session_id=str(row.id),
            survey_id=row.survey_id,
            status=row.status.value if isinstance(row.status, SessionStatus) else str(row.status),
            current_order=row.current_order,
            current_question_id=row.current_question_id,
            completed=row.completed,
            created_at=row.created_at,
            updated_at=row.updated_at,
            completed_at=row.completed_at,
        )


def _parse_session_id(session_id: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(session_id))
    except ValueError:
        return None


def _dump(report: Report) -> dict:
    return report.model_dump(mode="json", exclude_none=True)


def _answered_question(
    current: QuestionTemplate,
    questions: list[QuestionTemplate],
    keys: list[str],
) -> QuestionTemplate | None:
    """Question whose success template acknowledges this turn.

    The current question when its key was written, else the first question
    (by order) among the keys written this turn.
    """
    if current.data_key in keys:
        return current
    for question in questions:
        if question.data_key in keys:
            return question
    return None
