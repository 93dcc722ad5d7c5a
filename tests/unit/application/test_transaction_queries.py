"""
Name: Transaction Query Use Case Tests

Responsibilities:
  - Statistics: counts for every status + today's totals (UTC day)
  - Get transaction: detail + access audit
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from payments_portal.application.usecases.transactions import (
    GetTransactionStatisticsUseCase,
    GetTransactionUseCase,
    TransactionErrorCode,
)
from payments_portal.application.usecases.transactions.get_transaction_statistics import (
    utc_day_bounds,
)
from payments_portal.domain.audit import AuditAction
from payments_portal.domain.entities import TransactionStatus
from payments_portal.identity.employees import EmployeeContext, EmployeeRole

pytestmark = pytest.mark.unit

NOW = datetime(2025, 3, 10, 15, 30, tzinfo=timezone.utc)


def test_utc_day_bounds():
    start, end = utc_day_bounds(NOW)
    assert start == datetime(2025, 3, 10, tzinfo=timezone.utc)
    assert end == datetime(2025, 3, 11, tzinfo=timezone.utc)


def test_utc_day_bounds_normalizes_offsets():
    local = datetime(2025, 3, 10, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
    start, _ = utc_day_bounds(local)
    assert start == datetime(2025, 3, 11, tzinfo=timezone.utc)


def test_statistics(transaction_repo, make_transaction):
    make_transaction("100.00", created_at=NOW - timedelta(hours=1))
    make_transaction("250.50", status=TransactionStatus.VERIFIED, created_at=NOW)
    make_transaction(
        "999.99", status=TransactionStatus.REJECTED, created_at=NOW - timedelta(days=1)
    )

    result = GetTransactionStatisticsUseCase(transaction_repo).execute(now=NOW)

    stats = result.statistics
    assert stats.count(TransactionStatus.PENDING) == 1
    assert stats.count(TransactionStatus.VERIFIED) == 1
    assert stats.count(TransactionStatus.REJECTED) == 1
    assert stats.count(TransactionStatus.PROCESSING) == 0
    assert set(stats.counts) == set(TransactionStatus)
    assert stats.total_today == 2
    assert stats.total_amount_today == Decimal("350.50")


def test_statistics_empty_store(transaction_repo):
    stats = GetTransactionStatisticsUseCase(transaction_repo).execute(now=NOW).statistics

    assert all(count == 0 for count in stats.counts.values())
    assert stats.total_today == 0
    assert stats.total_amount_today == Decimal("0")


def test_get_transaction_audits_access(transaction_repo, audit_repo, make_transaction):
    tx = make_transaction()
    actor = EmployeeContext(
        id=uuid4(),
        employee_id="EMP001",
        username="jsmith",
        full_name="John Smith",
        role=EmployeeRole.EMPLOYEE,
        verification_limit=Decimal("100000"),
    )
    use_case = GetTransactionUseCase(
        transaction_repository=transaction_repo, audit_repository=audit_repo
    )

    result = use_case.execute(tx.id, actor)

    assert result.transaction == tx
    assert audit_repo.actions() == [AuditAction.EMPLOYEE_TRANSACTION_ACCESSED.value]

    missing = use_case.execute(uuid4(), actor)
    assert missing.error.code == TransactionErrorCode.NOT_FOUND
