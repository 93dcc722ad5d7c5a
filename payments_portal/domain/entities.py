"""
===============================================================================
TARJETA CRC — domain/entities.py
===============================================================================

Módulo:
    Entidades del Dominio (Transaction, TransactionStatus, estadísticas)

Responsabilidades:
    - Definir el sub-modelo de estado de una transacción cross-border.
    - Codificar la tabla de transiciones permitidas (monotónica).
    - Mantener tipos claros para casos de uso y repositorios.

Colaboradores:
    - domain.repositories: persisten/recuperan estas entidades.
    - application/usecases/transactions: consumen la máquina de estados.
    - api: serializa DTOs basados en estas entidades.

Principios:
    - Sin dependencias a DB/FastAPI.
    - Montos SIEMPRE Decimal (nunca float).
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Dict, FrozenSet
from uuid import UUID


def _utcnow() -> datetime:
    """Fecha/hora UTC (helper interno)."""
    return datetime.now(timezone.utc)


class TransactionStatus(str, Enum):
    """Estados del ciclo de vida de una transacción."""

    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATUSES

    def can_transition_to(self, target: "TransactionStatus") -> bool:
        return target in _ALLOWED_TRANSITIONS[self]


_TERMINAL_STATUSES: FrozenSet[TransactionStatus] = frozenset(
    {
        TransactionStatus.COMPLETED,
        TransactionStatus.REJECTED,
        TransactionStatus.CANCELLED,
    }
)

# Nada vuelve a PENDING; CANCELLED llega por un camino externo.
_ALLOWED_TRANSITIONS: Dict[TransactionStatus, FrozenSet[TransactionStatus]] = {
    TransactionStatus.PENDING: frozenset(
        {
            TransactionStatus.VERIFIED,
            TransactionStatus.REJECTED,
            TransactionStatus.CANCELLED,
        }
    ),
    TransactionStatus.VERIFIED: frozenset(
        {TransactionStatus.PROCESSING, TransactionStatus.CANCELLED}
    ),
    TransactionStatus.PROCESSING: frozenset(
        {TransactionStatus.COMPLETED, TransactionStatus.CANCELLED}
    ),
    TransactionStatus.COMPLETED: frozenset(),
    TransactionStatus.REJECTED: frozenset(),
    TransactionStatus.CANCELLED: frozenset(),
}


def require_transition(expected: TransactionStatus, target: TransactionStatus) -> None:
    """
    Guardia compartida por los adapters del Transaction store.

    Raises:
        ValueError: si (expected -> target) no está en la tabla de transiciones.
    """
    if not expected.can_transition_to(target):
        raise ValueError(
            f"Illegal transaction status transition: {expected.value} -> {target.value}"
        )


@dataclass(frozen=True, slots=True)
class Transaction:
    """
    Transacción de pago (solo el sub-modelo de estado/verificación).

    Importante:
      - Los datos del beneficiario viven en el componente de pagos externo.
      - verified_by guarda el UUID interno del empleado que resolvió la
        verificación; la atribución completa vive en la auditoría.
    """

    id: UUID
    amount: Decimal
    currency: str
    status: TransactionStatus = TransactionStatus.PENDING
    swift_code: str | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime | None = None
    verified_at: datetime | None = None
    verified_by: UUID | None = None
    rejection_reason: str | None = None
    submitted_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class StatusTransitionFields:
    """Campos que se estampan junto con un cambio de estado."""

    verified_at: datetime | None = None
    verified_by: UUID | None = None
    rejection_reason: str | None = None
    submitted_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class TransactionStatistics:
    """Conteos agregados para el dashboard de empleados."""

    counts: Dict[TransactionStatus, int]
    total_today: int
    total_amount_today: Decimal

    def count(self, status: TransactionStatus) -> int:
        return self.counts.get(status, 0)
