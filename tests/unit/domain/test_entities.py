"""
Name: Transaction State Machine Tests

Responsibilities:
  - Allowed transitions are monotonic (nothing returns to PENDING)
  - Terminal states have no outgoing transitions
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from payments_portal.domain.entities import (
    Transaction,
    TransactionStatistics,
    TransactionStatus,
    require_transition,
)

pytestmark = pytest.mark.unit

S = TransactionStatus


@pytest.mark.parametrize(
    "source, target",
    [
        (S.PENDING, S.VERIFIED),
        (S.PENDING, S.REJECTED),
        (S.PENDING, S.CANCELLED),
        (S.VERIFIED, S.PROCESSING),
        (S.VERIFIED, S.CANCELLED),
        (S.PROCESSING, S.COMPLETED),
        (S.PROCESSING, S.CANCELLED),
    ],
)
def test_allowed_transitions(source, target):
    assert source.can_transition_to(target)


@pytest.mark.parametrize(
    "source, target",
    [
        (S.VERIFIED, S.PENDING),
        (S.VERIFIED, S.REJECTED),
        (S.PENDING, S.PROCESSING),
        (S.PENDING, S.COMPLETED),
        (S.PROCESSING, S.VERIFIED),
        (S.REJECTED, S.VERIFIED),
    ],
)
def test_forbidden_transitions(source, target):
    assert not source.can_transition_to(target)


@pytest.mark.parametrize("status", [S.COMPLETED, S.REJECTED, S.CANCELLED])
def test_terminal_states(status):
    assert status.is_terminal
    assert not any(status.can_transition_to(target) for target in S)


def test_nothing_returns_to_pending():
    assert not any(status.can_transition_to(S.PENDING) for status in S)


def test_require_transition_accepts_allowed_pair():
    require_transition(S.VERIFIED, S.PROCESSING)


def test_require_transition_rejects_reentry_to_pending():
    with pytest.raises(ValueError, match="REJECTED -> PENDING"):
        require_transition(S.REJECTED, S.PENDING)


def test_new_transaction_defaults_to_pending():
    tx = Transaction(id=uuid4(), amount=Decimal("10.00"), currency="USD")
    assert tx.status == S.PENDING
    assert tx.created_at.tzinfo is not None
    assert tx.verified_by is None


def test_statistics_count_defaults_to_zero():
    stats = TransactionStatistics(
        counts={S.PENDING: 3}, total_today=3, total_amount_today=Decimal("30")
    )
    assert stats.count(S.PENDING) == 3
    assert stats.count(S.COMPLETED) == 0
