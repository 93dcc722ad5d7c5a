"""
===============================================================================
USE CASE: Verify Transaction (aprobar / rechazar una transacción PENDING)
===============================================================================

Name:
    Verify Transaction Use Case

Business Goal:
    Checkpoint humano antes de liberar fondos: un empleado aprueba
    (PENDING -> VERIFIED) o rechaza (PENDING -> REJECTED) una transacción,
    respetando su límite de verificación por monto.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    VerifyTransactionUseCase

Responsibilities:
    - Validar notas (largo máximo).
    - Validar existencia y estado PENDING.
    - Aplicar límite por monto (policies.is_within_limit) solo al aprobar.
    - Transicionar con compare-and-swap (nunca read-then-write).
    - Auditar TRANSACTION_VERIFIED / TRANSACTION_REJECTED.

Collaborators:
    - TransactionRepository.get_transaction / update_status
    - domain.policies.is_within_limit
    - emit_audit_event

-------------------------------------------------------------------------------
BUSINESS RULES (Reglas de negocio)
-------------------------------------------------------------------------------
R1) Solo PENDING es verificable; un segundo verify siempre es INVALID_STATE.
R2) EMPLOYEE no aprueba montos > verification_limit; ADMIN/SUPERVISOR sí.
R3) Rechazar no tiene límite de monto.
R4) Dos verify concurrentes: exactamente uno gana; el otro ve INVALID_STATE.
===============================================================================
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable
from uuid import UUID

from ....audit import emit_audit_event
from ....crosscutting.exceptions import OperationTimeout
from ....crosscutting.logger import logger
from ....crosscutting.timing import Deadline, check_deadline
from ....domain.audit import AuditAction
from ....domain.entities import StatusTransitionFields, TransactionStatus
from ....domain.policies import is_within_limit
from ....domain.repositories import AuditEventRepository, TransactionRepository
from ....identity.employees import EmployeeContext
from ....identity.validation import validate_notes
from .transaction_results import (
    TransactionError,
    TransactionErrorCode,
    TransactionResult,
)

DEFAULT_REJECTION_REASON = "Rejected by employee"
DEFAULT_NOTES_MAX_CHARS = 500


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VerifyTransactionUseCase:
    """
    Use Case (Application Service / Command):
        Resuelve la verificación de una transacción PENDING.
    """

    def __init__(
        self,
        *,
        transaction_repository: TransactionRepository,
        audit_repository: AuditEventRepository | None = None,
        notes_max_chars: int = DEFAULT_NOTES_MAX_CHARS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._transactions = transaction_repository
        self._audit = audit_repository
        self._notes_max_chars = notes_max_chars
        self._clock = clock

    def execute(
        self,
        transaction_id: UUID,
        actor: EmployeeContext,
        approve: bool,
        notes: str | None = None,
        deadline: Deadline | None = None,
    ) -> TransactionResult:
        issues = validate_notes(notes, max_chars=self._notes_max_chars)
        if issues:
            return self._error(
                TransactionErrorCode.INVALID_INPUT,
                "Invalid verification notes",
                errors=[issue.to_dict() for issue in issues],
            )

        transaction = self._transactions.get_transaction(transaction_id)
        if transaction is None:
            return self._error(
                TransactionErrorCode.NOT_FOUND, "Transaction not found"
            )

        if transaction.status != TransactionStatus.PENDING:
            return self._invalid_state(transaction.status)

        if approve and not is_within_limit(
            transaction.amount,
            role=actor.role,
            verification_limit=actor.verification_limit,
        ):
            logger.warning(
                "Verificación rechazada por límite",
                extra={
                    "transaction_id": str(transaction_id),
                    "employee_id": actor.employee_id,
                    "amount": str(transaction.amount),
                },
            )
            return self._error(
                TransactionErrorCode.LIMIT_EXCEEDED,
                "Transaction amount exceeds your verification limit",
            )

        target = TransactionStatus.VERIFIED if approve else TransactionStatus.REJECTED
        now = self._clock()
        fields = StatusTransitionFields(
            verified_at=now,
            verified_by=actor.id,
            rejection_reason=None if approve else (notes or DEFAULT_REJECTION_REASON),
        )

        try:
            check_deadline(deadline, "transaction verification")
        except OperationTimeout:
            return self._error(
                TransactionErrorCode.TIMEOUT, "Verification timed out"
            )

        updated = self._transactions.update_status(
            transaction_id, TransactionStatus.PENDING, target, fields
        )
        if updated is None:
            # Perdimos la carrera: otro empleado resolvió primero.
            current = self._transactions.get_transaction(transaction_id)
            if current is None:
                return self._error(
                    TransactionErrorCode.NOT_FOUND, "Transaction not found"
                )
            return self._invalid_state(current.status)

        metadata = {"amount": updated.amount, "currency": updated.currency}
        if notes is not None:
            metadata["notes"] = notes
        emit_audit_event(
            self._audit,
            action=(
                AuditAction.TRANSACTION_VERIFIED
                if approve
                else AuditAction.TRANSACTION_REJECTED
            ),
            employee=actor,
            target_id=updated.id,
            metadata=metadata,
        )
        return TransactionResult(transaction=updated)

    def _invalid_state(self, status: TransactionStatus) -> TransactionResult:
        return self._error(
            TransactionErrorCode.INVALID_STATE,
            f"Transaction is {status.value} and cannot be verified",
        )

    @staticmethod
    def _error(
        code: TransactionErrorCode,
        message: str,
        *,
        errors: list[dict] | None = None,
    ) -> TransactionResult:
        return TransactionResult(
            error=TransactionError(code=code, message=message, errors=errors or [])
        )
