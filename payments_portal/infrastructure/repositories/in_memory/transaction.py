"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/transaction.py
============================================================
Class: InMemoryTransactionRepository

Responsibilities:
  - Transaction store en memoria (tests / local dev).
  - update_status como compare-and-swap bajo lock.
  - transition_many todo-o-nada: valida y muta dentro del MISMO lock.

Collaborators:
  - domain.entities.Transaction / TransactionStatus / StatusTransitionFields
  - domain.repositories.TransactionRepository (contrato a implementar)

Constraints / Notes:
  - Thread-safe: acceso protegido por Lock.
  - Pares (expected, target) fuera de la tabla de transiciones -> ValueError,
    sin tocar el store.
============================================================
"""

from __future__ import annotations

from collections import Counter
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from threading import Lock
from typing import Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from ....domain.entities import (
    StatusTransitionFields,
    Transaction,
    TransactionStatus,
    require_transition,
)
from ....domain.repositories import TransactionRepository


def _apply(
    transaction: Transaction,
    target: TransactionStatus,
    fields: StatusTransitionFields,
    now: datetime,
) -> Transaction:
    return replace(
        transaction,
        status=target,
        verified_at=fields.verified_at or transaction.verified_at,
        verified_by=fields.verified_by or transaction.verified_by,
        rejection_reason=fields.rejection_reason or transaction.rejection_reason,
        submitted_at=fields.submitted_at or transaction.submitted_at,
        updated_at=now,
    )


class InMemoryTransactionRepository(TransactionRepository):
    """Repositorio in-memory, thread-safe, para transacciones."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._transactions: Dict[UUID, Transaction] = {}

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    def get_transaction(self, transaction_id: UUID) -> Optional[Transaction]:
        with self._lock:
            return self._transactions.get(transaction_id)

    def save_transaction(self, transaction: Transaction) -> Transaction:
        with self._lock:
            self._transactions[transaction.id] = transaction
            return transaction

    def update_status(
        self,
        transaction_id: UUID,
        expected: TransactionStatus,
        target: TransactionStatus,
        fields: StatusTransitionFields,
    ) -> Optional[Transaction]:
        require_transition(expected, target)
        with self._lock:
            current = self._transactions.get(transaction_id)
            if current is None or current.status != expected:
                return None
            updated = _apply(current, target, fields, self._now())
            self._transactions[transaction_id] = updated
            return updated

    def find_many_by_ids_with_status(
        self, transaction_ids: Sequence[UUID], status: TransactionStatus
    ) -> List[Transaction]:
        with self._lock:
            return [
                tx
                for tx_id in transaction_ids
                if (tx := self._transactions.get(tx_id)) is not None
                and tx.status == status
            ]

    def transition_many(
        self,
        transaction_ids: Sequence[UUID],
        expected: TransactionStatus,
        target: TransactionStatus,
        fields: StatusTransitionFields,
    ) -> Tuple[List[Transaction], List[UUID]]:
        require_transition(expected, target)
        with self._lock:
            offending = [
                tx_id
                for tx_id in transaction_ids
                if (tx := self._transactions.get(tx_id)) is None
                or tx.status != expected
            ]
            if offending:
                return [], offending

            now = self._now()
            updated = [
                _apply(self._transactions[tx_id], target, fields, now)
                for tx_id in transaction_ids
            ]
            for tx in updated:
                self._transactions[tx.id] = tx
            return updated, []

    def count_by_status(self) -> Dict[TransactionStatus, int]:
        with self._lock:
            return dict(Counter(tx.status for tx in self._transactions.values()))

    def summarize_created_between(
        self, start: datetime, end: datetime
    ) -> Tuple[int, Decimal]:
        with self._lock:
            selected = [
                tx for tx in self._transactions.values() if start <= tx.created_at < end
            ]
        return len(selected), sum((tx.amount for tx in selected), Decimal("0"))

    # -------------------------------------------------------------------------
    # Testing helpers
    # -------------------------------------------------------------------------
    def clear(self) -> None:
        with self._lock:
            self._transactions.clear()
