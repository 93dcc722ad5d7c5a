"""
===============================================================================
USE CASE: Submit Batch (VERIFIED -> PROCESSING, todo-o-nada)
===============================================================================

Name:
    Submit Batch To Settlement Use Case

Business Goal:
    Pasar un lote de transacciones verificadas a PROCESSING para que el
    componente de settlement las envíe. El envío real está fuera de este core.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    SubmitBatchUseCase

Responsibilities:
    - Validar tamaño (1..batch_max_size) y unicidad de ids.
    - Delegar la transición atómica al store (re-valida dentro del mismo paso).
    - Reportar ids ofensores sin mutar nada si alguno no está VERIFIED.
    - Auditar un evento por transacción enviada.

Collaborators:
    - TransactionRepository.transition_many
    - emit_audit_event (TRANSACTION_SUBMITTED_TO_SETTLEMENT)
===============================================================================
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Sequence
from uuid import UUID

from ....audit import emit_audit_event
from ....crosscutting.exceptions import OperationTimeout
from ....crosscutting.logger import logger
from ....crosscutting.timing import Deadline, check_deadline
from ....domain.audit import AuditAction
from ....domain.entities import StatusTransitionFields, TransactionStatus
from ....domain.repositories import AuditEventRepository, TransactionRepository
from ....identity.employees import EmployeeContext
from .transaction_results import (
    BatchItem,
    BatchSubmissionResult,
    BatchSubmissionSummary,
    TransactionError,
    TransactionErrorCode,
)

DEFAULT_BATCH_MAX_SIZE = 50


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SubmitBatchUseCase:
    def __init__(
        self,
        *,
        transaction_repository: TransactionRepository,
        audit_repository: AuditEventRepository | None = None,
        batch_max_size: int = DEFAULT_BATCH_MAX_SIZE,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._transactions = transaction_repository
        self._audit = audit_repository
        self._batch_max_size = batch_max_size
        self._clock = clock

    def execute(
        self,
        transaction_ids: Sequence[UUID],
        actor: EmployeeContext,
        deadline: Deadline | None = None,
    ) -> BatchSubmissionResult:
        ids = list(transaction_ids or [])
        if not ids or len(ids) > self._batch_max_size:
            return self._error(
                TransactionErrorCode.INVALID_INPUT,
                f"Batch must contain between 1 and {self._batch_max_size} transactions",
            )
        if len(set(ids)) != len(ids):
            return self._error(
                TransactionErrorCode.INVALID_INPUT,
                "Batch contains duplicate transaction ids",
            )

        try:
            check_deadline(deadline, "batch submission")
        except OperationTimeout:
            return self._error(TransactionErrorCode.TIMEOUT, "Batch submission timed out")

        updated, offending = self._transactions.transition_many(
            ids,
            TransactionStatus.VERIFIED,
            TransactionStatus.PROCESSING,
            StatusTransitionFields(submitted_at=self._clock()),
        )
        if offending:
            logger.warning(
                "Batch rechazado: transacciones no verificadas",
                extra={"employee_id": actor.employee_id, "offending": len(offending)},
            )
            return self._error(
                TransactionErrorCode.PARTIAL_BATCH_INVALID,
                "Some transactions are not in VERIFIED status",
                offending_ids=offending,
            )

        for tx in updated:
            emit_audit_event(
                self._audit,
                action=AuditAction.TRANSACTION_SUBMITTED_TO_SETTLEMENT,
                employee=actor,
                target_id=tx.id,
                metadata={
                    "amount": tx.amount,
                    "currency": tx.currency,
                    "swift_code": tx.swift_code,
                    "batch_size": len(updated),
                },
            )

        logger.info(
            "Batch enviado a settlement",
            extra={"employee_id": actor.employee_id, "count": len(updated)},
        )
        return BatchSubmissionResult(
            summary=BatchSubmissionSummary(
                submitted_count=len(updated),
                transactions=[
                    BatchItem(
                        transaction_id=tx.id,
                        amount=tx.amount,
                        currency=tx.currency,
                        swift_code=tx.swift_code,
                    )
                    for tx in updated
                ],
            )
        )

    @staticmethod
    def _error(
        code: TransactionErrorCode,
        message: str,
        *,
        offending_ids: list[UUID] | None = None,
    ) -> BatchSubmissionResult:
        return BatchSubmissionResult(
            error=TransactionError(
                code=code, message=message, offending_ids=offending_ids or []
            )
        )
