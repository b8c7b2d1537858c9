"""Request-scoped dependencies for the survey routes.

``get_db`` opens one ``AsyncSession`` per request and owns the transaction:
a conversational turn is either committed whole or not at all.  The
orchestrator is built once in the lifespan handler and read back from
``app.state``.
"""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from survey_db.engine import get_session_factory
from survey_engine.orchestrator import SurveyOrchestrator


# ------------------------------------------------------------------
# Transaction per request
# ------------------------------------------------------------------

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """One session per request; a turn that raises leaves no partial writes.

    Repository writes only flush.  A collaborator outage or a version
    conflict surfaces here as an exception and rolls the turn back.
    """
    async with get_session_factory()() as db:
        try:
            yield db
        except Exception:
            await db.rollback()
            raise
        else:
            await db.commit()


# ------------------------------------------------------------------
# Lifespan singleton
# ------------------------------------------------------------------

def get_orchestrator(request: Request) -> SurveyOrchestrator:
    return request.app.state.orchestrator
