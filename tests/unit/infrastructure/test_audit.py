"""
Name: Audit Emission Tests

Responsibilities:
  - Actor formatting and metadata sanitization
  - Best-effort writes: a failing sink never breaks the caller
"""

from decimal import Decimal
from unittest.mock import Mock
from uuid import uuid4

import pytest

from payments_portal.audit import actor_for_employee, emit_audit_event
from payments_portal.context import clear_context, set_request_context
from payments_portal.domain.audit import AuditAction, AuditOutcome
from payments_portal.identity.employees import EmployeeContext, EmployeeRole

pytestmark = pytest.mark.unit


def _employee() -> EmployeeContext:
    return EmployeeContext(
        id=uuid4(),
        employee_id="EMP001",
        username="jsmith",
        full_name="John Smith",
        role=EmployeeRole.EMPLOYEE,
        verification_limit=Decimal("100000"),
    )


def test_actor_for_employee():
    assert actor_for_employee(_employee()) == "employee:EMP001"
    assert actor_for_employee(None) == "anonymous"


def test_emit_records_event(audit_repo):
    employee = _employee()
    target = uuid4()

    emit_audit_event(
        audit_repo,
        action=AuditAction.TRANSACTION_VERIFIED,
        employee=employee,
        target_id=target,
        metadata={"amount": Decimal("500.00")},
    )

    event = audit_repo.list_events()[0]
    assert event.action == "TRANSACTION_VERIFIED"
    assert event.actor == "employee:EMP001"
    assert event.outcome == AuditOutcome.SUCCESS
    assert event.target_id == target
    assert event.metadata["amount"] == "500.00"
    assert event.metadata["employee_pk"] == str(employee.id)


def test_emit_includes_request_correlation(audit_repo):
    set_request_context(request_id="req-123", method="POST", path="/x", client_ip="10.0.0.1")
    try:
        emit_audit_event(audit_repo, action=AuditAction.EMPLOYEE_LOGOUT)
    finally:
        clear_context()

    assert audit_repo.list_events()[0].metadata["request_id"] == "req-123"


def test_emit_without_repository_is_noop():
    emit_audit_event(None, action=AuditAction.EMPLOYEE_LOGOUT)


def test_emit_swallows_sink_failures():
    repo = Mock()
    repo.record_event.side_effect = RuntimeError("db down")

    emit_audit_event(repo, action=AuditAction.EMPLOYEE_LOGIN_FAILED, outcome=AuditOutcome.FAILURE)

    repo.record_event.assert_called_once()
