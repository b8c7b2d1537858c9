"""Route registration — conversational endpoints at ``/s``, the rest under ``/api/v1``."""

from fastapi import FastAPI

from survey_server.routes.sessions import router as sessions_router
from survey_server.routes.surveys import router as surveys_router

API_PREFIX = "/api/v1"


def register_routes(app: FastAPI) -> None:
    """Include all sub-routers."""
    app.include_router(surveys_router)
    app.include_router(sessions_router, prefix=API_PREFIX)
