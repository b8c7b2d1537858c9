"""Async CRUD repository for SurveySession.

All public methods accept an ``AsyncSession`` so the caller controls
transaction boundaries.  Methods ``flush()`` but never ``commit()``.

The report document is read and written whole: there is no partial-update
API.  Concurrent writers are detected by the row's ``version`` column and
surface as ``sqlalchemy.orm.exc.StaleDataError`` on flush.

The repository deliberately avoids business-logic validation — that belongs
in the SDK layer.
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from survey_db.models.enums import SessionStatus
from survey_db.models.session import SurveySession, empty_report


class SessionRepository:
    """Async read/write operations on the ``survey_sessions`` table."""

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create_session(
        self,
        db: AsyncSession,
        *,
        survey_id: str,
    ) -> SurveySession:
        """Insert a new session row with an empty report and return it."""
        session = SurveySession(
            survey_id=survey_id,
            status=SessionStatus.CREATED,
            current_order=0,
            report=empty_report(),
        )
        db.add(session)
        await db.flush()  # Populate defaults (id, version, timestamps)
        return session

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_by_id(
        self,
        db: AsyncSession,
        session_pk: uuid.UUID,
        *,
        include_deleted: bool = False,
    ) -> SurveySession | None:
        """Fetch a session by primary key.

        Soft-deleted rows are excluded unless ``include_deleted`` is set
        (used for permanent deletion).
        """
        stmt = select(SurveySession).where(SurveySession.id == session_pk)
        if not include_deleted:
            stmt = stmt.where(SurveySession.deleted_at.is_(None))
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_survey(
        self,
        db: AsyncSession,
        survey_id: str,
        *,
        limit: int = 20,
        offset: int = 0,
    ) -> list[SurveySession]:
        """List live sessions of a survey, most recent first."""
        stmt = (
            select(SurveySession)
            .where(
                SurveySession.survey_id == survey_id,
                SurveySession.deleted_at.is_(None),
            )
            .order_by(SurveySession.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    def get_report(session: SurveySession) -> dict[str, Any]:
        """Return the stored report document (a fresh empty one if unset)."""
        return session.report or empty_report()

    @staticmethod
    def get_state(session: SurveySession) -> dict[str, Any]:
        """Return the session state columns as a plain mapping."""
        return {
            "current_order": session.current_order,
            "current_question_id": session.current_question_id,
            "completed": session.status == SessionStatus.COMPLETED,
        }

    # ------------------------------------------------------------------
    # Update: whole-document writes
    # ------------------------------------------------------------------

    async def save_report(
        self,
        db: AsyncSession,
        session: SurveySession,
        report: dict[str, Any],
    ) -> SurveySession:
        """Replace the session's report document."""
        session.report = report
        session.updated_at = datetime.now(timezone.utc)
        await db.flush()
        return session

    async def save_state(
        self,
        db: AsyncSession,
        session: SurveySession,
        *,
        current_order: int,
        current_question_id: int | None,
        completed: bool,
    ) -> SurveySession:
        """Replace the session state.

        Moves ``created`` to ``in_progress`` on the first write and sets
        ``completed`` (with ``completed_at``) when requested.  A completed
        session is never moved back.
        """
        now = datetime.now(timezone.utc)
        session.current_order = current_order
        session.current_question_id = current_question_id
        if completed:
            if session.status != SessionStatus.COMPLETED:
                session.status = SessionStatus.COMPLETED
                session.completed_at = now
        elif session.status == SessionStatus.CREATED:
            session.status = SessionStatus.IN_PROGRESS
        session.updated_at = now
        await db.flush()
        return session

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    async def soft_delete(
        self, db: AsyncSession, session: SurveySession
    ) -> SurveySession:
        """Set ``deleted_at``, hiding the session from normal queries."""
        if session.deleted_at is not None:
            raise ValueError(f"Session already deleted: session_id={session.id}")
        now = datetime.now(timezone.utc)
        session.deleted_at = now
        session.updated_at = now
        await db.flush()
        return session

    async def hard_delete(self, db: AsyncSession, session: SurveySession) -> None:
        """Permanently remove the session row."""
        await db.delete(session)
        await db.flush()
