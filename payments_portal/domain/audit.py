"""
===============================================================================
TARJETA CRC — domain/audit.py
===============================================================================

Módulo:
    Modelos de Auditoría (Dominio)

Responsabilidades:
    - Definir AuditEvent y el catálogo de acciones auditables.
    - Mantener el contrato de auditoría independiente de infraestructura.

Colaboradores:
    - domain.repositories.AuditEventRepository: persiste eventos.
    - payments_portal/audit.py: emite eventos (best-effort).
    - infra repos: mapean hacia/desde DB.

Notas:
    - Auditoría es append-only (no se edita ni se borra).
    - metadata es flexible (dict) pero NUNCA lleva passwords, salts ni tokens.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID


class AuditAction(str, Enum):
    """Acciones emitidas por autenticación y autorización de transacciones."""

    EMPLOYEE_LOGIN_SUCCESS = "EMPLOYEE_LOGIN_SUCCESS"
    EMPLOYEE_LOGIN_FAILED = "EMPLOYEE_LOGIN_FAILED"
    EMPLOYEE_TOKEN_REFRESH = "EMPLOYEE_TOKEN_REFRESH"
    EMPLOYEE_TOKEN_REFRESH_FAILED = "EMPLOYEE_TOKEN_REFRESH_FAILED"
    EMPLOYEE_LOGOUT = "EMPLOYEE_LOGOUT"
    EMPLOYEE_ACCESS_DENIED = "EMPLOYEE_ACCESS_DENIED"
    EMPLOYEE_TRANSACTION_ACCESSED = "EMPLOYEE_TRANSACTION_ACCESSED"
    TRANSACTION_VERIFIED = "TRANSACTION_VERIFIED"
    TRANSACTION_REJECTED = "TRANSACTION_REJECTED"
    TRANSACTION_SUBMITTED_TO_SETTLEMENT = "TRANSACTION_SUBMITTED_TO_SETTLEMENT"


class AuditOutcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(slots=True)
class AuditEvent:
    """Evento de auditoría del sistema."""

    id: UUID
    actor: str
    action: str
    outcome: AuditOutcome = AuditOutcome.SUCCESS
    target_id: UUID | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
