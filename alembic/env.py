"""
============================================================
TARJETA CRC — alembic/env.py
============================================================
Responsibilities:
  - Correr las migraciones del portal (employees, transactions,
    audit_events) online u offline.
  - Resolver la URL: opción -x db_url=..., luego DATABASE_URL, luego
    Settings del portal.
  - Usar el driver psycopg v3 y sesión UTC, como la app.

Collaborators:
  - payments_portal.crosscutting.config.get_settings
  - SQLAlchemy (solo como motor de DDL; el portal no usa ORM)
============================================================
"""

import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool, text

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

# Sin ORM: cada revisión declara su DDL.
target_metadata = None

_DRIVER_PREFIXES = ("postgresql://", "postgres://")


def _with_psycopg_driver(url: str) -> str:
    for prefix in _DRIVER_PREFIXES:
        if url.startswith(prefix):
            return "postgresql+psycopg://" + url[len(prefix) :]
    return url


def resolve_database_url() -> str:
    url = context.get_x_argument(as_dictionary=True).get("db_url")
    if not url:
        url = os.environ.get("DATABASE_URL")
    if not url:
        from payments_portal.crosscutting.config import get_settings

        url = get_settings().database_url
    return _with_psycopg_driver(url)


def run_migrations_offline() -> None:
    context.configure(
        url=resolve_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(resolve_database_url(), poolclass=pool.NullPool)

    with engine.connect() as connection:
        connection.execute(text("SET TIME ZONE 'UTC'"))
        # DDL sobre tablas en uso: fallar rápido antes que bloquear la app.
        connection.execute(text("SET lock_timeout = '10s'"))
        connection.commit()
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
