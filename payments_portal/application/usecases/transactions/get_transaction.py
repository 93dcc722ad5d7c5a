"""
===============================================================================
USE CASE: Get Transaction (detalle para el empleado)
===============================================================================

Class:
    GetTransactionUseCase

Responsibilities:
    - Devolver una transacción por id (NOT_FOUND si no existe).
    - Auditar el acceso (EMPLOYEE_TRANSACTION_ACCESSED).
===============================================================================
"""

from __future__ import annotations

from uuid import UUID

from ....audit import emit_audit_event
from ....domain.audit import AuditAction
from ....domain.repositories import AuditEventRepository, TransactionRepository
from ....identity.employees import EmployeeContext
from .transaction_results import (
    TransactionError,
    TransactionErrorCode,
    TransactionResult,
)


class GetTransactionUseCase:
    def __init__(
        self,
        *,
        transaction_repository: TransactionRepository,
        audit_repository: AuditEventRepository | None = None,
    ) -> None:
        self._transactions = transaction_repository
        self._audit = audit_repository

    def execute(self, transaction_id: UUID, actor: EmployeeContext) -> TransactionResult:
        transaction = self._transactions.get_transaction(transaction_id)
        if transaction is None:
            return TransactionResult(
                error=TransactionError(
                    code=TransactionErrorCode.NOT_FOUND,
                    message="Transaction not found",
                )
            )

        emit_audit_event(
            self._audit,
            action=AuditAction.EMPLOYEE_TRANSACTION_ACCESSED,
            employee=actor,
            target_id=transaction.id,
            metadata={"status": transaction.status.value},
        )
        return TransactionResult(transaction=transaction)
