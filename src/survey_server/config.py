"""Server configuration — reads settings from environment variables.

All settings have sensible defaults for local development.  In production
the values are typically overridden via env vars or a ``.env`` file.
"""

import os
from dataclasses import dataclass, field

# --- Pagination defaults ---
# Module-level constants read at import time so FastAPI Query() defaults
# can reference them (Query defaults must be static at decoration time).
DEFAULT_PAGE_LIMIT = int(os.getenv("DEFAULT_PAGE_LIMIT", "20"))
MAX_PAGE_LIMIT = int(os.getenv("MAX_PAGE_LIMIT", "100"))


@dataclass(frozen=True)
class ServerSettings:
    """Immutable server configuration read from environment at startup."""

    # Network
    host: str = "0.0.0.0"
    port: int = 8080

    # CORS: comma-separated origins, or "*" for wide-open dev mode
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    # Survey directory (None → SurveyStore default, which is surveys/ from repo root)
    survey_dir: str | None = None

    # Logging
    log_level: str = "INFO"

    # Language collaborator: "passthrough" needs no model; "openai" talks to
    # any OpenAI-compatible chat-completions endpoint.
    llm_backend: str = "passthrough"
    llm_base_url: str | None = None
    llm_api_key: str | None = None
    llm_model: str | None = None
    llm_timeout: float = 30.0
    llm_temperature: float = 0.3


def load_settings() -> ServerSettings:
    """Build settings from ``SERVER_*`` and ``SURVEY_*`` environment variables."""
    raw_origins = os.getenv("SERVER_CORS_ORIGINS", "*")
    origins = [o.strip() for o in raw_origins.split(",") if o.strip()]

    return ServerSettings(
        host=os.getenv("SERVER_HOST", "0.0.0.0"),
        port=int(os.getenv("SERVER_PORT", "8080")),
        cors_origins=origins,
        survey_dir=os.getenv("SURVEY_DIR") or None,
        log_level=os.getenv("SERVER_LOG_LEVEL", "INFO").upper(),
        llm_backend=os.getenv("SURVEY_LLM_BACKEND", "passthrough").lower(),
        llm_base_url=os.getenv("SURVEY_LLM_BASE_URL") or None,
        llm_api_key=os.getenv("SURVEY_LLM_API_KEY") or None,
        llm_model=os.getenv("SURVEY_LLM_MODEL") or None,
        llm_timeout=float(os.getenv("SURVEY_LLM_TIMEOUT", "30")),
        llm_temperature=float(os.getenv("SURVEY_LLM_TEMPERATURE", "0.3")),
    )
