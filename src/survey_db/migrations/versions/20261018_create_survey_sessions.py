"""Create the survey_sessions table.

One row per survey session: state columns, the report document as JSONB,
an optimistic-concurrency ``version`` counter, and soft-delete support.

Revision ID: 20261018_survey_sessions
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID

# revision identifiers, used by Alembic.
revision = "20261018_survey_sessions"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "survey_sessions",
        sa.Column("id", UUID(as_uuid=True), nullable=False),
        sa.Column("survey_id", sa.Text(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("current_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("current_question_id", sa.Integer(), nullable=True),
        sa.Column(
            "report",
            JSONB(),
            nullable=False,
            server_default=sa.text("'{\"conversation\": [], \"data\": []}'::jsonb"),
        ),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", TIMESTAMP(timezone=True), nullable=False),
        sa.Column("updated_at", TIMESTAMP(timezone=True), nullable=False),
        sa.Column("completed_at", TIMESTAMP(timezone=True), nullable=True),
        sa.Column("deleted_at", TIMESTAMP(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_survey_sessions"),
        sa.CheckConstraint("current_order >= 0", name="ck_order_non_negative"),
        sa.CheckConstraint(
            "status != 'completed' OR completed_at IS NOT NULL",
            name="ck_completed_has_timestamp",
        ),
    )
    op.create_index("ix_survey_sessions_survey_id", "survey_sessions", ["survey_id"])
    op.create_index("ix_survey_sessions_status", "survey_sessions", ["status"])
    # Hot path: list live sessions of a survey, newest first
    op.create_index(
        "ix_not_deleted_survey",
        "survey_sessions",
        ["survey_id", "created_at"],
        postgresql_where=sa.text("deleted_at IS NULL"),
    )


def downgrade() -> None:
    op.drop_index("ix_not_deleted_survey", table_name="survey_sessions")
    op.drop_index("ix_survey_sessions_status", table_name="survey_sessions")
    op.drop_index("ix_survey_sessions_survey_id", table_name="survey_sessions")
    op.drop_table("survey_sessions")
