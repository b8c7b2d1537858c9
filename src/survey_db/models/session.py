"""SurveySession ORM model — single row per survey session.

Each row holds the session state (order pointer, current question, status)
and the whole report document as one JSONB column.  The orchestrator reads
the row, builds the next report value in memory, and writes it back in one
flush.

``version`` is SQLAlchemy's ``version_id_col``: every UPDATE is issued as
``... WHERE id = :id AND version = :expected`` and bumps the counter, so a
concurrent writer that read the same version fails with ``StaleDataError``
instead of silently overwriting the report.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Index, Integer, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from survey_db.models.base import Base
from survey_db.models.enums import SessionStatus


def empty_report() -> dict:
    return {"conversation": [], "data": []}


class SurveySession(Base):
    """One row per survey session."""

    __tablename__ = "survey_sessions"

    # --- Primary key (exposed to clients as sessionId) ---
    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # --- Survey identity ---
    # External id of the survey definition (see surveys/*.yaml)
    survey_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)

    # --- Lifecycle / session state ---
    status: Mapped[SessionStatus] = mapped_column(
        String(20),
        nullable=False,
        default=SessionStatus.CREATED,
        index=True,
    )
    current_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Question the last agent message asked; null before start and after completion
    current_question_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # --- Report document ---
    # {"conversation": [...], "data": [...]}, written whole on every turn
    report: Mapped[dict] = mapped_column(
        JSONB,
        nullable=False,
        default=empty_report,
        server_default=text("'{\"conversation\": [], \"data\": []}'::jsonb"),
    )

    # --- Optimistic concurrency ---
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    # --- Timestamps ---
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True
    )
    # Soft-delete timestamp, None means live
    deleted_at: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        CheckConstraint("current_order >= 0", name="ck_order_non_negative"),
        # Completed sessions must record when they completed
        CheckConstraint(
            "status != 'completed' OR completed_at IS NOT NULL",
            name="ck_completed_has_timestamp",
        ),
        # Hot path: list live sessions of a survey, newest first
        Index(
            "ix_not_deleted_survey",
            "survey_id",
            "created_at",
            postgresql_where=text("deleted_at IS NULL"),
        ),
    )

    @property
    def completed(self) -> bool:
        return self.status == SessionStatus.COMPLETED

    def __repr__(self) -> str:
        return (
            f"<SurveySession(id={self.id!s}, survey={self.survey_id!r}, "
            f"status={self.status!r}, order={self.current_order}, "
            f"version={self.version})>"
        )
