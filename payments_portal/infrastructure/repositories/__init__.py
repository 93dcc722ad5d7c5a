"""
============================================================
TARJETA CRC
============================================================
Class: payments_portal.infrastructure.repositories (Package exports)

Responsibilities:
- Exponer implementaciones concretas de repositorios (Postgres e InMemory)
  en un único punto de importación.
- Mantener una API estable para container.py y los tests.

Collaborators:
- Repositorios Postgres (SQL crudo, psycopg)
- Repositorios InMemory (testing / local dev)
============================================================
"""

from .in_memory import (
    InMemoryAuditEventRepository,
    InMemoryEmployeeRepository,
    InMemoryTransactionRepository,
)
from .postgres import (
    PostgresAuditEventRepository,
    PostgresEmployeeRepository,
    PostgresTransactionRepository,
)

__all__ = [
    # Postgres
    "PostgresAuditEventRepository",
    "PostgresEmployeeRepository",
    "PostgresTransactionRepository",
    # InMemory
    "InMemoryAuditEventRepository",
    "InMemoryEmployeeRepository",
    "InMemoryTransactionRepository",
]
