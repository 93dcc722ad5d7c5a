"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/transaction.py
============================================================
Class: PostgresTransactionRepository

Responsibilities:
  - Transaction store (sub-modelo de estado) sobre la tabla `transactions`.
  - Cambios de estado como compare-and-swap: WHERE id = %s AND status = %s.
  - Transición batch todo-o-nada en UNA transacción DB (SELECT ... FOR UPDATE,
    re-validación y UPDATE).
  - Agregados para estadísticas (conteo por estado, resumen del día).

Collaborators:
  - PostgresRepositoryBase (pool + errores)
  - domain.entities.Transaction / TransactionStatus / StatusTransitionFields

Constraints / Notes:
  - amount es NUMERIC: psycopg devuelve Decimal (nunca float).
  - Filas con estado desconocido -> DatabaseError.
  - Transición ilegal (expected, target) -> ValueError antes de ir a la DB.
============================================================
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from ....crosscutting.exceptions import DatabaseError
from ....crosscutting.logger import logger
from ....domain.entities import (
    StatusTransitionFields,
    Transaction,
    TransactionStatus,
    require_transition,
)
from ._base import PostgresRepositoryBase

_TX_COLUMNS = (
    "id, amount, currency, status, swift_code, created_at, updated_at, "
    "verified_at, verified_by, rejection_reason, submitted_at"
)

# COALESCE: un campo no provisto conserva su valor previo.
_SET_TRANSITION = """
    status = %s,
    verified_at = COALESCE(%s, verified_at),
    verified_by = COALESCE(%s, verified_by),
    rejection_reason = COALESCE(%s, rejection_reason),
    submitted_at = COALESCE(%s, submitted_at),
    updated_at = now()
"""


def _parse_status(value: str) -> TransactionStatus:
    try:
        return TransactionStatus(value)
    except ValueError as exc:
        raise DatabaseError(f"Invalid transaction status in database: {value}") from exc


def _row_to_transaction(row: tuple) -> Transaction:
    return Transaction(
        id=row[0],
        amount=Decimal(row[1]),
        currency=row[2],
        status=_parse_status(row[3]),
        swift_code=row[4],
        created_at=row[5],
        updated_at=row[6],
        verified_at=row[7],
        verified_by=row[8],
        rejection_reason=row[9],
        submitted_at=row[10],
    )


def _transition_params(
    target: TransactionStatus, fields: StatusTransitionFields
) -> tuple:
    return (
        target.value,
        fields.verified_at,
        fields.verified_by,
        fields.rejection_reason,
        fields.submitted_at,
    )


class PostgresTransactionRepository(PostgresRepositoryBase):
    """Repositorio PostgreSQL del Transaction store."""

    def get_transaction(self, transaction_id: UUID) -> Optional[Transaction]:
        row = self._fetchone(
            query=f"SELECT {_TX_COLUMNS} FROM transactions WHERE id = %s",
            params=(transaction_id,),
            log_msg="PostgresTransactionRepository: get_transaction failed",
            log_extra={"transaction_id": str(transaction_id)},
        )
        return _row_to_transaction(row) if row else None

    def save_transaction(self, transaction: Transaction) -> Transaction:
        row = self._fetchone(
            query=f"""
                INSERT INTO transactions ({_TX_COLUMNS})
                VALUES (%s, %s, %s, %s, %s, %s, now(), %s, %s, %s, %s)
                ON CONFLICT (id) DO UPDATE SET
                    amount = EXCLUDED.amount,
                    currency = EXCLUDED.currency,
                    status = EXCLUDED.status,
                    swift_code = EXCLUDED.swift_code,
                    verified_at = EXCLUDED.verified_at,
                    verified_by = EXCLUDED.verified_by,
                    rejection_reason = EXCLUDED.rejection_reason,
                    submitted_at = EXCLUDED.submitted_at,
                    updated_at = now()
                RETURNING {_TX_COLUMNS}
            """,
            params=(
                transaction.id,
                transaction.amount,
                transaction.currency,
                transaction.status.value,
                transaction.swift_code,
                transaction.created_at,
                transaction.verified_at,
                transaction.verified_by,
                transaction.rejection_reason,
                transaction.submitted_at,
            ),
            log_msg="PostgresTransactionRepository: save_transaction failed",
            log_extra={"transaction_id": str(transaction.id)},
        )
        if not row:
            raise DatabaseError("Transaction upsert returned no row")
        return _row_to_transaction(row)

    def update_status(
        self,
        transaction_id: UUID,
        expected: TransactionStatus,
        target: TransactionStatus,
        fields: StatusTransitionFields,
    ) -> Optional[Transaction]:
        require_transition(expected, target)
        row = self._fetchone(
            query=f"""
                UPDATE transactions SET {_SET_TRANSITION}
                WHERE id = %s AND status = %s
                RETURNING {_TX_COLUMNS}
            """,
            params=(
                *_transition_params(target, fields),
                transaction_id,
                expected.value,
            ),
            log_msg="PostgresTransactionRepository: update_status failed",
            log_extra={
                "transaction_id": str(transaction_id),
                "expected": expected.value,
                "target": target.value,
            },
        )
        return _row_to_transaction(row) if row else None

    def find_many_by_ids_with_status(
        self, transaction_ids: Sequence[UUID], status: TransactionStatus
    ) -> List[Transaction]:
        if not transaction_ids:
            return []
        rows = self._fetchall(
            query=f"""
                SELECT {_TX_COLUMNS}
                FROM transactions
                WHERE id = ANY(%s) AND status = %s
            """,
            params=(list(transaction_ids), status.value),
            log_msg="PostgresTransactionRepository: find_many_by_ids_with_status failed",
            log_extra={"count": len(transaction_ids)},
        )
        return [_row_to_transaction(row) for row in rows]

    def transition_many(
        self,
        transaction_ids: Sequence[UUID],
        expected: TransactionStatus,
        target: TransactionStatus,
        fields: StatusTransitionFields,
    ) -> Tuple[List[Transaction], List[UUID]]:
        require_transition(expected, target)
        ids = list(transaction_ids)
        if not ids:
            return [], []

        try:
            with self._get_pool().connection() as conn:
                with conn.transaction():
                    locked = conn.execute(
                        """
                        SELECT id, status FROM transactions
                        WHERE id = ANY(%s)
                        FOR UPDATE
                        """,
                        (ids,),
                    ).fetchall()
                    current = {row[0]: row[1] for row in locked}
                    offending = [
                        tx_id for tx_id in ids if current.get(tx_id) != expected.value
                    ]
                    if offending:
                        return [], offending

                    rows = conn.execute(
                        f"""
                        UPDATE transactions SET {_SET_TRANSITION}
                        WHERE id = ANY(%s) AND status = %s
                        RETURNING {_TX_COLUMNS}
                        """,
                        (*_transition_params(target, fields), ids, expected.value),
                    ).fetchall()
        except Exception as exc:
            logger.exception(
                "PostgresTransactionRepository: transition_many failed",
                extra={"count": len(ids), "error": str(exc)},
            )
            raise DatabaseError(f"Batch transition failed: {exc}") from exc

        by_id = {tx.id: tx for tx in map(_row_to_transaction, rows)}
        return [by_id[tx_id] for tx_id in ids], []

    def count_by_status(self) -> Dict[TransactionStatus, int]:
        rows = self._fetchall(
            query="SELECT status, COUNT(*) FROM transactions GROUP BY status",
            log_msg="PostgresTransactionRepository: count_by_status failed",
            log_extra={},
        )
        return {_parse_status(status): int(count) for status, count in rows}

    def summarize_created_between(
        self, start: datetime, end: datetime
    ) -> Tuple[int, Decimal]:
        row = self._fetchone(
            query="""
                SELECT COUNT(*), COALESCE(SUM(amount), 0)
                FROM transactions
                WHERE created_at >= %s AND created_at < %s
            """,
            params=(start, end),
            log_msg="PostgresTransactionRepository: summarize_created_between failed",
            log_extra={"start": start.isoformat(), "end": end.isoformat()},
        )
        if not row:
            return 0, Decimal("0")
        return int(row[0]), Decimal(row[1])
