"""
===============================================================================
TRANSACTION USE CASE RESULTS (Shared Result / Error Models)
===============================================================================

Name:
    Transaction Authorization Results

Business Goal:
    Contrato estable de resultados para verificación, envío batch a
    settlement, detalle y estadísticas de transacciones.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Component:
    transaction_results models (module)

Responsibilities:
    - Definir TransactionErrorCode y TransactionError.
    - Representar TransactionResult, BatchSubmissionResult, StatisticsResult.
    - Representar BatchSubmissionSummary (lo que ve el portal tras el envío).

Collaborators:
    - domain.entities.Transaction / TransactionStatistics
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, List
from uuid import UUID

from ....domain.entities import Transaction, TransactionStatistics


class TransactionErrorCode(str, Enum):
    """
    Códigos:
      - INVALID_INPUT: notas demasiado largas, batch vacío/grande/con duplicados.
      - NOT_FOUND: transacción inexistente.
      - INVALID_STATE: la transacción no está en el estado requerido
        (incluye perder la carrera del compare-and-swap).
      - LIMIT_EXCEEDED: monto por encima del límite del empleado.
      - PARTIAL_BATCH_INVALID: alguna transacción del batch no está VERIFIED.
      - TIMEOUT: venció el deadline (sin mutaciones).
    """

    INVALID_INPUT = "INVALID_INPUT"
    NOT_FOUND = "NOT_FOUND"
    INVALID_STATE = "INVALID_STATE"
    LIMIT_EXCEEDED = "LIMIT_EXCEEDED"
    PARTIAL_BATCH_INVALID = "PARTIAL_BATCH_INVALID"
    TIMEOUT = "TIMEOUT"


@dataclass(frozen=True)
class TransactionError:
    code: TransactionErrorCode
    message: str
    offending_ids: List[UUID] = field(default_factory=list)
    errors: List[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class BatchItem:
    transaction_id: UUID
    amount: Decimal
    currency: str
    swift_code: str | None = None


@dataclass(frozen=True)
class BatchSubmissionSummary:
    submitted_count: int
    transactions: List[BatchItem]


@dataclass
class TransactionResult:
    transaction: Transaction | None = None
    error: TransactionError | None = None


@dataclass
class BatchSubmissionResult:
    summary: BatchSubmissionSummary | None = None
    error: TransactionError | None = None


@dataclass
class StatisticsResult:
    statistics: TransactionStatistics | None = None
    error: TransactionError | None = None
