# alembic/env.py

from __future__ import annotations

import logging
import os
import sys
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool, text
from alembic import context

# This file lives at <repo_root>/alembic/env.py
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from printbay.config.settings import get_settings  # noqa: E402
from printbay.models import Base  # noqa: E402  (registers every vendor table)

config = context.config
if config.config_file_name:
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")

target_metadata = Base.metadata

VERSION_TABLE = os.getenv("ALEMBIC_VERSION_TABLE", "alembic_version")


def _coerce_sync_url(url: str | None) -> str:
    """
    Alembic needs a **sync** driver URL.
    - sqlite+aiosqlite → sqlite
    - mssql+aioodbc → mssql+pyodbc
    """
    if not url:
        return ""
    u = url.strip()
    u = u.replace("sqlite+aiosqlite", "sqlite")
    u = u.replace("+aioodbc", "+pyodbc")
    return u


def _sync_url_from_env_or_ini() -> str:
    """
    Resolve the database URL with priority:
      1) ALEMBIC_URL
      2) DATABASE_URL or the AZURE_SQL_* parts (via Settings)
      3) sqlalchemy.url from alembic.ini
    Then coerce to a sync driver.
    """
    env_url = (
        os.getenv("ALEMBIC_URL")
        or get_settings().resolved_database_url
        or config.get_main_option("sqlalchemy.url")
    )
    url = _coerce_sync_url(env_url)
    if not url:
        raise RuntimeError(
            "No database URL provided to Alembic. "
            "Set ALEMBIC_URL, DATABASE_URL or the AZURE_SQL_* variables."
        )
    return url


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode (no DBAPI connection)."""
    context.configure(
        url=_sync_url_from_env_or_ini(),
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        version_table=VERSION_TABLE,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode using a sync Engine."""
    section = config.get_section(config.config_ini_section) or {}
    section["sqlalchemy.url"] = _sync_url_from_env_or_ini()

    connectable = engine_from_config(
        section,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
        future=True,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            version_table=VERSION_TABLE,
        )

        with context.begin_transaction():
            context.run_migrations()

        rev = connection.execute(text(f"SELECT version_num FROM {VERSION_TABLE}")).scalar()
        logger.info("Current Alembic revision: %s", rev)


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
