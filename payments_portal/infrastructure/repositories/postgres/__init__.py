"""
PostgreSQL Repository Implementations.

Production implementations using psycopg 3 + psycopg_pool.
"""

from .audit_event import PostgresAuditEventRepository
from .employee import PostgresEmployeeRepository
from .transaction import PostgresTransactionRepository

__all__ = [
    "PostgresAuditEventRepository",
    "PostgresEmployeeRepository",
    "PostgresTransactionRepository",
]
