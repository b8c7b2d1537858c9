"""Alembic environment for survey_db.

Migrations run synchronously over psycopg2; the URL comes from
``survey_db.config`` (``DATABASE_URL`` / ``PG_*``), never from alembic.ini.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from survey_db.config import load_db_settings
from survey_db.models import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata
db_url = load_db_settings().sync_url


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        # The report column is JSONB; catch type drift on autogenerate
        compare_type=True,
        **kwargs,
    )


if context.is_offline_mode():
    # Emit SQL to stdout without connecting
    _configure(url=db_url, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()
else:
    connectable = create_engine(db_url, poolclass=pool.NullPool)
    with connectable.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()
