"""Conversational endpoints — start a survey session and answer it turn by turn.

    POST /s/{external_id}/init     → first question
    POST /s/{external_id}/respond  → next question, retry prompt, or completion

Request and response bodies use camelCase keys (``sessionId``,
``answerText``) as expected by the chat widgets calling these endpoints.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession

from survey_engine.orchestrator import SurveyOrchestrator

from survey_server.dependencies import get_db, get_orchestrator

router = APIRouter(prefix="/s", tags=["surveys"])


# ------------------------------------------------------------------
# Request / response models
# ------------------------------------------------------------------

class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RespondRequest(_CamelModel):
    """Body for POST /s/{external_id}/respond."""
    session_id: str
    answer_text: str


class InitResponse(_CamelModel):
    """``question`` while the survey is open; ``message`` when it has nothing to ask."""
    session_id: str
    question: str | None = None
    message: str | None = None
    completed: bool = False


class RespondResponse(_CamelModel):
    message: str
    session_id: str
    completed: bool


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.post(
    "/{external_id}/init",
    response_model=InitResponse,
    response_model_exclude_none=True,
)
async def init_session(
    external_id: str,
    db: AsyncSession = Depends(get_db),
    orchestrator: SurveyOrchestrator = Depends(get_orchestrator),
) -> InitResponse:
    """Start a new session and return its first question.

    Raises 404 if no survey has ``external_id``.
    """
    start = await orchestrator.start_session(db, external_id=external_id)
    if start.completed:
        return InitResponse(
            session_id=start.session_id, message=start.message, completed=True,
        )
    return InitResponse(session_id=start.session_id, question=start.message)


@router.post("/{external_id}/respond", response_model=RespondResponse)
async def respond(
    external_id: str,
    body: RespondRequest,
    db: AsyncSession = Depends(get_db),
    orchestrator: SurveyOrchestrator = Depends(get_orchestrator),
) -> RespondResponse:
    """Submit the client's answer and return the agent's reply.

    Raises 404 for an unknown session (or one of another survey), 409 once
    the session is completed, and 503 when the language service is down.
    """
    result = await orchestrator.handle_turn(
        db,
        session_id=body.session_id,
        text=body.answer_text,
        external_id=external_id,
    )
    return RespondResponse(
        message=result.message,
        session_id=result.session_id,
        completed=result.completed,
    )
