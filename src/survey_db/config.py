"""Database configuration — connection URL and pool settings from environment.

The URL comes from ``DATABASE_URL`` when set, otherwise it is assembled from
``PG_HOST`` / ``PG_PORT`` / ``PG_USER`` / ``PG_PASSWORD`` / ``PG_DATABASE``
(the docker-compose style).  Either form may use the plain ``postgresql://``
scheme; the driver suffix is chosen per consumer:

    sync_url   — psycopg2, used by Alembic
    async_url  — asyncpg, used by the runtime engine
"""

import os
from dataclasses import dataclass

_ASYNC_SCHEME = "postgresql+asyncpg://"
_SYNC_SCHEME = "postgresql://"


@dataclass(frozen=True)
class DatabaseSettings:
    """Immutable database settings read from environment."""

    url: str
    pool_size: int = 5
    max_overflow: int = 10
    # Seconds before a pooled connection is recycled; -1 disables recycling
    pool_recycle: int = 1800
    echo: bool = False

    @property
    def sync_url(self) -> str:
        if self.url.startswith(_ASYNC_SCHEME):
            return _SYNC_SCHEME + self.url[len(_ASYNC_SCHEME):]
        return self.url

    @property
    def async_url(self) -> str:
        if self.url.startswith(_SYNC_SCHEME):
            return _ASYNC_SCHEME + self.url[len(_SYNC_SCHEME):]
        return self.url


def _url_from_parts() -> str:
    host = os.getenv("PG_HOST", "localhost")
    port = os.getenv("PG_PORT", "5432")
    user = os.getenv("PG_USER", "survey")
    password = os.getenv("PG_PASSWORD", "survey")
    database = os.getenv("PG_DATABASE", "survey")
    return f"{_SYNC_SCHEME}{user}:{password}@{host}:{port}/{database}"


def load_db_settings() -> DatabaseSettings:
    """Build settings from ``DATABASE_URL`` / ``PG_*`` environment variables."""
    return DatabaseSettings(
        url=os.getenv("DATABASE_URL") or _url_from_parts(),
        pool_size=int(os.getenv("PG_POOL_SIZE", "5")),
        max_overflow=int(os.getenv("PG_MAX_OVERFLOW", "10")),
        pool_recycle=int(os.getenv("PG_POOL_RECYCLE", "1800")),
        echo=os.getenv("PG_ECHO", "").lower() in ("1", "true", "yes"),
    )

