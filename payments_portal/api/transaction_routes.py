"""
===============================================================================
TARJETA CRC — api/transaction_routes.py (Autorización de Transacciones)
===============================================================================

Responsabilidades:
  - Exponer detalle, verificación, envío batch a settlement y estadísticas.
  - Exigir empleado autenticado en todos los endpoints (require_employee).
  - Serializar montos Decimal como string (sin pérdida de precisión).

Colaboradores:
  - container: factories de casos de uso
  - application.usecases.transactions
  - api.error_mapping.transaction_error_to_http
===============================================================================
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Dict, List
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import AliasChoices, BaseModel, Field, field_serializer

from ..application.usecases.transactions import (
    GetTransactionStatisticsUseCase,
    GetTransactionUseCase,
    SubmitBatchUseCase,
    VerifyTransactionUseCase,
)
from ..container import (
    get_get_transaction_use_case,
    get_submit_batch_use_case,
    get_transaction_statistics_use_case,
    get_verify_transaction_use_case,
)
from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import OPENAPI_ERROR_RESPONSES
from ..crosscutting.timing import Deadline
from ..domain.entities import Transaction, TransactionStatus
from ..identity.employee_auth import require_employee
from ..identity.employees import EmployeeContext
from .error_mapping import transaction_error_to_http

router = APIRouter(prefix="/api/employees", responses=OPENAPI_ERROR_RESPONSES)


# -----------------------------------------------------------------------------
# Modelos HTTP (DTOs)
# -----------------------------------------------------------------------------


class VerifyTransactionRequest(BaseModel):
    approve: bool = Field(..., validation_alias=AliasChoices("approve", "verified"))
    # R: el largo máximo se valida en el caso de uso (INVALID_INPUT + campo)
    notes: str | None = None


class SubmitBatchRequest(BaseModel):
    transaction_ids: List[UUID] = Field(
        ...,
        validation_alias=AliasChoices("transaction_ids", "transactionIds"),
    )


class TransactionResponse(BaseModel):
    id: UUID
    amount: Decimal
    currency: str
    status: TransactionStatus
    swift_code: str | None = None
    created_at: datetime
    updated_at: datetime | None = None
    verified_at: datetime | None = None
    verified_by: UUID | None = None
    rejection_reason: str | None = None
    submitted_at: datetime | None = None

    @field_serializer("amount")
    def _serialize_amount(self, value: Decimal) -> str:
        return str(value)


class BatchItemResponse(BaseModel):
    transaction_id: UUID
    amount: Decimal
    currency: str
    swift_code: str | None = None

    @field_serializer("amount")
    def _serialize_amount(self, value: Decimal) -> str:
        return str(value)


class BatchSubmissionResponse(BaseModel):
    submitted_count: int
    transactions: List[BatchItemResponse]


class StatisticsResponse(BaseModel):
    counts: Dict[str, int]
    total_today: int
    total_amount_today: Decimal

    @field_serializer("total_amount_today")
    def _serialize_amount(self, value: Decimal) -> str:
        return str(value)


def _to_transaction_response(tx: Transaction) -> TransactionResponse:
    return TransactionResponse(
        id=tx.id,
        amount=tx.amount,
        currency=tx.currency,
        status=tx.status,
        swift_code=tx.swift_code,
        created_at=tx.created_at,
        updated_at=tx.updated_at,
        verified_at=tx.verified_at,
        verified_by=tx.verified_by,
        rejection_reason=tx.rejection_reason,
        submitted_at=tx.submitted_at,
    )


def _request_deadline() -> Deadline:
    return Deadline.after(get_settings().request_timeout_seconds)


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------


@router.get("/statistics", response_model=StatisticsResponse, tags=["transactions"])
def get_statistics(
    employee: EmployeeContext = Depends(require_employee()),
    use_case: GetTransactionStatisticsUseCase = Depends(
        get_transaction_statistics_use_case
    ),
):
    """Conteos por estado + totales del día (UTC)."""
    result = use_case.execute()
    if result.error is not None:
        raise transaction_error_to_http(result.error)
    stats = result.statistics
    return StatisticsResponse(
        counts={status.value: stats.count(status) for status in TransactionStatus},
        total_today=stats.total_today,
        total_amount_today=stats.total_amount_today,
    )


@router.post(
    "/transactions/submit-batch",
    response_model=BatchSubmissionResponse,
    tags=["transactions"],
)
def submit_batch(
    req: SubmitBatchRequest,
    employee: EmployeeContext = Depends(require_employee()),
    use_case: SubmitBatchUseCase = Depends(get_submit_batch_use_case),
):
    """
    Envía un batch de transacciones VERIFIED a settlement.

    - Todo o nada: si alguna no está VERIFIED, nada cambia (409 + ids).
    """
    result = use_case.execute(req.transaction_ids, employee, deadline=_request_deadline())
    if result.error is not None:
        raise transaction_error_to_http(result.error)
    summary = result.summary
    return BatchSubmissionResponse(
        submitted_count=summary.submitted_count,
        transactions=[
            BatchItemResponse(
                transaction_id=item.transaction_id,
                amount=item.amount,
                currency=item.currency,
                swift_code=item.swift_code,
            )
            for item in summary.transactions
        ],
    )


@router.get(
    "/transactions/{transaction_id}",
    response_model=TransactionResponse,
    tags=["transactions"],
)
def get_transaction(
    transaction_id: UUID,
    employee: EmployeeContext = Depends(require_employee()),
    use_case: GetTransactionUseCase = Depends(get_get_transaction_use_case),
):
    result = use_case.execute(transaction_id, employee)
    if result.error is not None:
        raise transaction_error_to_http(result.error, transaction_id=transaction_id)
    return _to_transaction_response(result.transaction)


@router.post(
    "/transactions/{transaction_id}/verify",
    response_model=TransactionResponse,
    tags=["transactions"],
)
def verify_transaction(
    transaction_id: UUID,
    req: VerifyTransactionRequest,
    employee: EmployeeContext = Depends(require_employee()),
    use_case: VerifyTransactionUseCase = Depends(get_verify_transaction_use_case),
):
    """
    Aprueba (VERIFIED) o rechaza (REJECTED) una transacción PENDING.

    - Aprobar por encima del límite del empleado: 403 LIMIT_EXCEEDED.
    - Transacción ya resuelta: 409 INVALID_STATE.
    """
    result = use_case.execute(
        transaction_id,
        employee,
        req.approve,
        notes=req.notes,
        deadline=_request_deadline(),
    )
    if result.error is not None:
        raise transaction_error_to_http(result.error, transaction_id=transaction_id)
    return _to_transaction_response(result.transaction)
