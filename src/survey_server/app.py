"""Application factory and CLI entry point.

``create_app()`` assembles the FastAPI application:

  - lifespan: load surveys, build the language collaborator and the
    orchestrator, release the LLM client and the DB pool on shutdown
  - CORS middleware
  - exception handlers (see :mod:`survey_server.errors`)
  - ``/s/{external_id}/...`` conversational routes, ``/api/v1`` session routes
  - ``/health`` readiness probe

``cli()`` is the ``survey-server`` console script.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.orm.exc import StaleDataError

from survey_db.engine import dispose_engine, get_engine
from survey_engine.catalog import SurveyStore
from survey_engine.exceptions import CollaboratorUnavailableError
from survey_engine.interfaces import LanguageCollaborator
from survey_engine.language import LLMLanguage, build_language_collaborator
from survey_engine.orchestrator import SurveyOrchestrator

from survey_server.config import ServerSettings, load_settings
from survey_server.errors import (
    collaborator_error_handler,
    generic_error_handler,
    stale_data_handler,
    value_error_handler,
)
from survey_server.routes import register_routes

logger = logging.getLogger(__name__)


def build_language(settings: ServerSettings) -> LanguageCollaborator:
    """Language collaborator selected by ``SURVEY_LLM_BACKEND``."""
    return build_language_collaborator(
        settings.llm_backend,
        base_url=settings.llm_base_url,
        api_key=settings.llm_api_key,
        model=settings.llm_model,
        timeout=settings.llm_timeout,
        temperature=settings.llm_temperature,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: ServerSettings = app.state.settings

    store = SurveyStore(survey_dir=settings.survey_dir)
    store.load()
    language = build_language(settings)

    app.state.store = store
    app.state.orchestrator = SurveyOrchestrator(store, language)
    logger.info(
        "Ready: %d surveys, language backend %r",
        len(store.surveys), settings.llm_backend,
    )

    try:
        yield
    finally:
        if isinstance(language, LLMLanguage):
            await language.aclose()
        await dispose_engine()
        logger.info("Shutdown complete")


def create_app(settings: ServerSettings | None = None) -> FastAPI:
    """Build and return the configured FastAPI application."""
    settings = settings or load_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title="Survey API Server",
        description="Conversational survey orchestrator",
        version="0.1.0",
        lifespan=lifespan,
    )
    # Read by the lifespan handler
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(CollaboratorUnavailableError, collaborator_error_handler)
    app.add_exception_handler(StaleDataError, stale_data_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    @app.get("/health")
    async def health() -> dict:
        """Readiness probe: database reachable and surveys loaded."""
        store = getattr(app.state, "store", None)
        surveys = len(store.surveys) if store is not None else 0
        try:
            async with get_engine().connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as exc:
            logger.error("Health check failed: %s", exc)
            return {"status": "error", "detail": str(exc), "surveys": surveys}
        return {"status": "ok", "surveys": surveys}

    register_routes(app)
    return app


# ASGI export for ``uvicorn survey_server.app:app``
app = create_app()


def cli() -> None:
    """Console-script entry point: ``survey-server``."""
    import uvicorn

    settings = load_settings()
    uvicorn.run(
        "survey_server.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=False,
    )
