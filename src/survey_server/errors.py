"""Exception handlers — translate SDK and database errors into HTTP responses.

The SDK signals not-found and wrong-state conditions with ``ValueError`` and
a descriptive message; routes do not catch them.  The handlers below match
the message against a small table, log the full text, and return a generic
client-safe detail.

    ValueError "... already completed"  → 409
    ValueError "... already deleted"    → 409
    ValueError "... not found"          → 404
    other ValueError                    → 400
    CollaboratorUnavailableError        → 503 (turn rolled back, retryable)
    StaleDataError                      → 409 (concurrent turn, retryable)
    anything else                       → 500
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm.exc import StaleDataError

from survey_engine.exceptions import CollaboratorUnavailableError

logger = logging.getLogger(__name__)

# (substring of the lowercased message, status, client detail); first match wins
_VALUE_ERROR_RULES: list[tuple[str, int, str]] = [
    ("already completed", 409, "Session already completed"),
    ("already deleted", 409, "Session already deleted"),
    ("not found", 404, "Resource not found"),
]


def _error(status: int, detail: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"detail": detail})


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    msg = str(exc)
    lowered = msg.lower()
    status, detail = 400, "Invalid request"
    for pattern, code, safe_detail in _VALUE_ERROR_RULES:
        if pattern in lowered:
            status, detail = code, safe_detail
            break

    # Session and survey ids stay in the server log
    logger.warning("ValueError [%d] at %s: %s", status, request.url.path, msg)
    return _error(status, detail)


async def collaborator_error_handler(
    request: Request, exc: CollaboratorUnavailableError
) -> JSONResponse:
    logger.error("Language service unavailable at %s: %s", request.url.path, exc)
    return _error(503, "Language service unavailable")


async def stale_data_handler(request: Request, exc: StaleDataError) -> JSONResponse:
    logger.warning("Concurrent session update at %s: %s", request.url.path, exc)
    return _error(409, "Concurrent update, retry")


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception at %s", request.url.path)
    return _error(500, "Internal server error")
