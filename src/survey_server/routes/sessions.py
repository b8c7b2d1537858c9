"""Session endpoints — inspect, list, and delete survey sessions."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from survey_engine.models.session import SessionInfo, SessionReport
from survey_engine.orchestrator import SurveyOrchestrator

from survey_server.config import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from survey_server.dependencies import get_db, get_orchestrator

router = APIRouter(tags=["sessions"])


@router.get("/sessions/{session_id}")
async def get_session(
    session_id: str,
    db: AsyncSession = Depends(get_db),
    orchestrator: SurveyOrchestrator = Depends(get_orchestrator),
) -> SessionInfo:
    """Get session info.  Raises 404 if the session does not exist."""
    info = await orchestrator.get_session(db, session_id=session_id)
    if info is None:
        raise ValueError(f"Session not found: session_id={session_id}")
    return info


@router.get("/sessions/{session_id}/report")
async def get_report(
    session_id: str,
    db: AsyncSession = Depends(get_db),
    orchestrator: SurveyOrchestrator = Depends(get_orchestrator),
) -> SessionReport:
    """Return the full report (conversation + data) and its flattened view."""
    return await orchestrator.get_report(db, session_id=session_id)


@router.get("/surveys/{external_id}/sessions")
async def list_sessions(
    external_id: str,
    db: AsyncSession = Depends(get_db),
    orchestrator: SurveyOrchestrator = Depends(get_orchestrator),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
) -> list[SessionInfo]:
    """List sessions of a survey, most recent first."""
    return await orchestrator.list_sessions(
        db, external_id=external_id, limit=limit, offset=offset,
    )


@router.delete("/sessions/{session_id}", status_code=204)
async def soft_delete_session(
    session_id: str,
    db: AsyncSession = Depends(get_db),
    orchestrator: SurveyOrchestrator = Depends(get_orchestrator),
) -> None:
    """Soft-delete a session.

    The session row is retained but excluded from all normal queries.
    Returns 204 on success, 404 if the session does not exist.
    """
    await orchestrator.soft_delete_session(db, session_id=session_id)


@router.delete("/sessions/{session_id}/permanent", status_code=204)
async def hard_delete_session(
    session_id: str,
    db: AsyncSession = Depends(get_db),
    orchestrator: SurveyOrchestrator = Depends(get_orchestrator),
) -> None:
    """Permanently delete a session (irreversible).

    Works on soft-deleted sessions too.  Returns 204 on success, 404 if
    the session does not exist.
    """
    await orchestrator.hard_delete_session(db, session_id=session_id)
