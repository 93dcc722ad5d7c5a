"""
===============================================================================
USE CASE: Get Transaction Statistics (solo lectura)
===============================================================================

Class:
    GetTransactionStatisticsUseCase

Responsibilities:
    - Conteo por estado (los seis estados, 0 si no hay filas).
    - Cantidad y suma de montos creados "hoy" (día UTC).

Collaborators:
    - TransactionRepository.count_by_status / summarize_created_between
===============================================================================
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from ....domain.entities import TransactionStatistics, TransactionStatus
from ....domain.repositories import TransactionRepository
from .transaction_results import StatisticsResult


def utc_day_bounds(now: datetime) -> tuple[datetime, datetime]:
    """[inicio, fin) del día UTC que contiene `now`."""
    current = now.astimezone(timezone.utc) if now.tzinfo else now.replace(
        tzinfo=timezone.utc
    )
    start = current.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


class GetTransactionStatisticsUseCase:
    def __init__(self, transaction_repository: TransactionRepository) -> None:
        self._transactions = transaction_repository

    def execute(self, now: datetime | None = None) -> StatisticsResult:
        counts = self._transactions.count_by_status()
        start, end = utc_day_bounds(now or datetime.now(timezone.utc))
        total_today, amount_today = self._transactions.summarize_created_between(
            start, end
        )
        return StatisticsResult(
            statistics=TransactionStatistics(
                counts={status: counts.get(status, 0) for status in TransactionStatus},
                total_today=total_today,
                total_amount_today=amount_today,
            )
        )
