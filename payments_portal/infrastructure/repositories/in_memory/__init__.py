"""
In-Memory Repository Implementations (tests / local dev).
"""

from .audit_event import InMemoryAuditEventRepository
from .employee import InMemoryEmployeeRepository
from .transaction import InMemoryTransactionRepository

__all__ = [
    "InMemoryAuditEventRepository",
    "InMemoryEmployeeRepository",
    "InMemoryTransactionRepository",
]
