"""
Name: Verify Transaction Use Case Tests

Responsibilities:
  - Approve/reject PENDING transactions exactly once
  - Enforce per-employee verification limits (role bypass for ADMIN/SUPERVISOR)
  - Concurrent verifications: exactly one winner
"""

from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from uuid import uuid4

import pytest

from payments_portal.application.usecases.transactions import (
    TransactionErrorCode,
    VerifyTransactionUseCase,
)
from payments_portal.crosscutting.timing import Deadline
from payments_portal.domain.audit import AuditAction
from payments_portal.domain.entities import TransactionStatus
from payments_portal.identity.employees import EmployeeContext, EmployeeRole

pytestmark = pytest.mark.unit


def _actor(
    role: EmployeeRole = EmployeeRole.EMPLOYEE, limit: str = "100000"
) -> EmployeeContext:
    return EmployeeContext(
        id=uuid4(),
        employee_id="EMP001",
        username="jsmith",
        full_name="John Smith",
        role=role,
        verification_limit=Decimal(limit),
    )


@pytest.fixture
def use_case(transaction_repo, audit_repo) -> VerifyTransactionUseCase:
    return VerifyTransactionUseCase(
        transaction_repository=transaction_repo,
        audit_repository=audit_repo,
        notes_max_chars=500,
    )


def test_approve_pending(use_case, make_transaction, audit_repo):
    tx = make_transaction("500.00")
    actor = _actor()

    result = use_case.execute(tx.id, actor, approve=True)

    assert result.error is None
    assert result.transaction.status == TransactionStatus.VERIFIED
    assert result.transaction.verified_by == actor.id
    assert result.transaction.verified_at is not None
    assert result.transaction.rejection_reason is None
    event = audit_repo.list_events(action=AuditAction.TRANSACTION_VERIFIED)[0]
    assert event.target_id == tx.id
    assert event.metadata["amount"] == "500.00"
    assert "notes" not in event.metadata


def test_reject_with_notes(use_case, make_transaction, audit_repo):
    tx = make_transaction()

    result = use_case.execute(tx.id, _actor(), approve=False, notes="Suspicious beneficiary")

    assert result.transaction.status == TransactionStatus.REJECTED
    assert result.transaction.rejection_reason == "Suspicious beneficiary"
    event = audit_repo.list_events(action=AuditAction.TRANSACTION_REJECTED)[0]
    assert event.metadata["notes"] == "Suspicious beneficiary"


def test_reject_without_notes_uses_default_reason(use_case, make_transaction):
    tx = make_transaction()

    result = use_case.execute(tx.id, _actor(), approve=False)

    assert result.transaction.rejection_reason == "Rejected by employee"


def test_amount_equal_to_limit_is_allowed(use_case, make_transaction):
    tx = make_transaction("100000.00")

    result = use_case.execute(tx.id, _actor(limit="100000"), approve=True)

    assert result.transaction.status == TransactionStatus.VERIFIED


def test_amount_above_limit_is_rejected(use_case, make_transaction, transaction_repo):
    tx = make_transaction("150000.00")

    result = use_case.execute(tx.id, _actor(limit="100000"), approve=True)

    assert result.error.code == TransactionErrorCode.LIMIT_EXCEEDED
    assert transaction_repo.get_transaction(tx.id).status == TransactionStatus.PENDING


def test_low_limit_employee(use_case, make_transaction):
    tx = make_transaction("100000.00")

    result = use_case.execute(tx.id, _actor(limit="99999.99"), approve=True)

    assert result.error.code == TransactionErrorCode.LIMIT_EXCEEDED


@pytest.mark.parametrize("role", [EmployeeRole.ADMIN, EmployeeRole.SUPERVISOR])
def test_privileged_roles_bypass_limit(use_case, make_transaction, role):
    tx = make_transaction("150000.00")

    result = use_case.execute(tx.id, _actor(role=role, limit="1000"), approve=True)

    assert result.transaction.status == TransactionStatus.VERIFIED


def test_rejection_over_limit_is_allowed(use_case, make_transaction):
    tx = make_transaction("150000.00")

    result = use_case.execute(tx.id, _actor(limit="100000"), approve=False)

    assert result.transaction.status == TransactionStatus.REJECTED


def test_unknown_transaction(use_case):
    result = use_case.execute(uuid4(), _actor(), approve=True)
    assert result.error.code == TransactionErrorCode.NOT_FOUND


def test_double_verification_is_invalid_state(use_case, make_transaction):
    tx = make_transaction()
    actor = _actor()
    use_case.execute(tx.id, actor, approve=True)

    second = use_case.execute(tx.id, actor, approve=True)

    assert second.error.code == TransactionErrorCode.INVALID_STATE


@pytest.mark.parametrize(
    "status",
    [
        TransactionStatus.VERIFIED,
        TransactionStatus.PROCESSING,
        TransactionStatus.COMPLETED,
        TransactionStatus.REJECTED,
        TransactionStatus.CANCELLED,
    ],
)
def test_only_pending_can_be_verified(use_case, make_transaction, status):
    tx = make_transaction(status=status)

    result = use_case.execute(tx.id, _actor(), approve=False)

    assert result.error.code == TransactionErrorCode.INVALID_STATE


def test_notes_too_long(use_case, make_transaction, transaction_repo):
    tx = make_transaction()

    result = use_case.execute(tx.id, _actor(), approve=False, notes="x" * 501)

    assert result.error.code == TransactionErrorCode.INVALID_INPUT
    assert result.error.errors[0]["field"] == "notes"
    assert transaction_repo.get_transaction(tx.id).status == TransactionStatus.PENDING


def test_expired_deadline_does_not_mutate(use_case, make_transaction, transaction_repo):
    tx = make_transaction()

    result = use_case.execute(tx.id, _actor(), approve=True, deadline=Deadline.after(-1))

    assert result.error.code == TransactionErrorCode.TIMEOUT
    assert transaction_repo.get_transaction(tx.id).status == TransactionStatus.PENDING


def test_concurrent_verifications_have_single_winner(use_case, make_transaction, audit_repo):
    tx = make_transaction()

    def _verify(i: int):
        return use_case.execute(tx.id, _actor(), approve=i % 2 == 0)

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(_verify, range(16)))

    winners = [r for r in results if r.error is None]
    losers = [r for r in results if r.error is not None]
    assert len(winners) == 1
    assert all(r.error.code == TransactionErrorCode.INVALID_STATE for r in losers)
    decided = [
        a
        for a in audit_repo.actions()
        if a
        in (AuditAction.TRANSACTION_VERIFIED.value, AuditAction.TRANSACTION_REJECTED.value)
    ]
    assert len(decided) == 1
