"""
===============================================================================
CRC CARD — infrastructure/db/pool.py
===============================================================================

Componente:
  Pool de conexiones PostgreSQL del portal (uno por proceso)

Responsabilidades:
  - Abrir y cerrar el ConnectionPool desde el lifespan de la app.
  - Fijar la sesión de cada conexión: TimeZone UTC (las ventanas "hoy" de las
    estadísticas son días UTC), statement_timeout y lock_timeout (el batch
    toma FOR UPDATE y no debe esperar locks indefinidamente).
  - Errores tipados ante doble init o uso sin init.

Colaboradores:
  - psycopg_pool.ConnectionPool
  - api/main.py (lifespan)
  - infrastructure/repositories/postgres/_base.py (get_pool)
===============================================================================
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Optional

from psycopg import Connection
from psycopg_pool import ConnectionPool

from ...crosscutting.logger import logger

APPLICATION_NAME = "payments-portal"


class DatabasePoolError(RuntimeError):
    """Uso inválido del ciclo de vida del pool."""


class PoolAlreadyInitializedError(DatabasePoolError):
    pass


class PoolNotInitializedError(DatabasePoolError):
    pass


@dataclass(frozen=True, slots=True)
class SessionSettings:
    statement_timeout_ms: int = 30_000
    lock_timeout_ms: int = 5_000
    timezone: str = "UTC"

    def apply(self, conn: Connection) -> None:
        conn.execute(
            "SELECT set_config('TimeZone', %s, false),"
            " set_config('statement_timeout', %s, false),"
            " set_config('lock_timeout', %s, false)",
            (
                self.timezone,
                str(max(self.statement_timeout_ms, 0)),
                str(max(self.lock_timeout_ms, 0)),
            ),
        )
        conn.commit()


_pool: Optional[ConnectionPool] = None
_lock = threading.Lock()


def init_pool(
    database_url: str,
    *,
    min_size: int,
    max_size: int,
    session: SessionSettings | None = None,
) -> ConnectionPool:
    global _pool

    session = session or SessionSettings()
    with _lock:
        if _pool is not None:
            raise PoolAlreadyInitializedError("Database pool already initialized")

        logger.info(
            "Abriendo pool DB",
            extra={
                "min_size": min_size,
                "max_size": max_size,
                "statement_timeout_ms": session.statement_timeout_ms,
                "lock_timeout_ms": session.lock_timeout_ms,
            },
        )
        _pool = ConnectionPool(
            conninfo=database_url,
            min_size=min_size,
            max_size=max_size,
            kwargs={"application_name": APPLICATION_NAME},
            configure=session.apply,
            open=True,
        )
        return _pool


def get_pool() -> ConnectionPool:
    if _pool is None:
        raise PoolNotInitializedError("Database pool not initialized; call init_pool()")
    return _pool


def close_pool() -> None:
    """Idempotente."""
    global _pool

    with _lock:
        if _pool is None:
            return
        logger.info("Cerrando pool DB")
        try:
            _pool.close()
        finally:
            _pool = None
