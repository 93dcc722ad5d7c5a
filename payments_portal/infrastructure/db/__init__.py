"""Infra DB: pool de conexiones y configuración de sesión."""

from .pool import (
    DatabasePoolError,
    PoolAlreadyInitializedError,
    PoolNotInitializedError,
    SessionSettings,
    close_pool,
    get_pool,
    init_pool,
)

__all__ = [
    "init_pool",
    "get_pool",
    "close_pool",
    "SessionSettings",
    "DatabasePoolError",
    "PoolAlreadyInitializedError",
    "PoolNotInitializedError",
]
