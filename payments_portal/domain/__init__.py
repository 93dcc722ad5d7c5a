"""
===============================================================================
TARJETA CRC — domain/__init__.py
===============================================================================

Módulo:
    Exportaciones de la Capa de Dominio (API pública del dominio)

Responsabilidades:
    - Centralizar exports para imports limpios en application/api.
    - Mantener estable el "surface area" del dominio.

Colaboradores:
    - domain.entities: Transaction, TransactionStatus, TransactionStatistics
    - domain.audit: AuditEvent, AuditAction, AuditOutcome
    - domain.policies: límites de verificación y lockout
    - domain.repositories: Puertos de persistencia

Reglas:
    - Solo re-exporta contratos/entidades del dominio.
    - No importar infraestructura aquí.
===============================================================================
"""

from .audit import AuditAction, AuditEvent, AuditOutcome
from .entities import (
    StatusTransitionFields,
    Transaction,
    TransactionStatistics,
    TransactionStatus,
)
from .policies import LockoutPolicy, can_bypass_limit, is_within_limit
from .repositories import (
    AuditEventRepository,
    EmployeeRepository,
    TransactionRepository,
)

__all__ = [
    # Entities
    "Transaction",
    "TransactionStatus",
    "TransactionStatistics",
    "StatusTransitionFields",
    # Audit
    "AuditEvent",
    "AuditAction",
    "AuditOutcome",
    # Policies
    "LockoutPolicy",
    "can_bypass_limit",
    "is_within_limit",
    # Repository Interfaces (Ports)
    "EmployeeRepository",
    "TransactionRepository",
    "AuditEventRepository",
]
