"""
Name: Employee Authorization Gate Tests

Responsibilities:
  - authorize(token) resolves an active employee into EmployeeContext
  - Every failure is a uniform UnauthorizedError (+ EMPLOYEE_ACCESS_DENIED audit)
  - Token extraction from Authorization header and cookie
"""

from dataclasses import replace
from decimal import Decimal
from types import SimpleNamespace

import pytest

from payments_portal.crosscutting.exceptions import OperationTimeout, UnauthorizedError
from payments_portal.crosscutting.timing import Deadline
from payments_portal.domain.audit import AuditAction
from payments_portal.identity.employee_auth import (
    EmployeeAuthorizer,
    extract_access_token,
)
from payments_portal.identity.employees import EmployeeRole

pytestmark = pytest.mark.unit


@pytest.fixture
def authorizer(token_issuer, employee_repo, audit_repo) -> EmployeeAuthorizer:
    return EmployeeAuthorizer(
        token_issuer=token_issuer,
        employee_repository=employee_repo,
        audit_repository=audit_repo,
    )


def test_authorize_returns_context(authorizer, token_issuer, make_employee):
    employee = make_employee(
        role=EmployeeRole.SUPERVISOR, verification_limit=Decimal("250000")
    )

    context = authorizer.authorize(token_issuer.issue_access(employee))

    assert context.id == employee.id
    assert context.employee_id == "EMP001"
    assert context.role == EmployeeRole.SUPERVISOR
    assert context.verification_limit == Decimal("250000")


def test_missing_token(authorizer):
    with pytest.raises(UnauthorizedError):
        authorizer.authorize(None)


def test_refresh_token_is_not_accepted(authorizer, token_issuer, make_employee, audit_repo):
    employee = make_employee()

    with pytest.raises(UnauthorizedError):
        authorizer.authorize(token_issuer.issue_refresh(employee))

    denied = audit_repo.list_events(action=AuditAction.EMPLOYEE_ACCESS_DENIED)
    assert denied[-1].metadata["reason"] == "token_type_mismatch"


def test_garbage_token(authorizer, audit_repo):
    with pytest.raises(UnauthorizedError):
        authorizer.authorize("not-a-jwt")

    assert audit_repo.actions() == [AuditAction.EMPLOYEE_ACCESS_DENIED.value]


def test_deleted_employee(authorizer, token_issuer, make_employee, employee_repo):
    employee = make_employee()
    token = token_issuer.issue_access(employee)
    employee_repo.clear()

    with pytest.raises(UnauthorizedError):
        authorizer.authorize(token)


def test_deactivated_employee(authorizer, token_issuer, make_employee, employee_repo, audit_repo):
    employee = make_employee()
    token = token_issuer.issue_access(employee)
    employee_repo.save(replace(employee, is_active=False))

    with pytest.raises(UnauthorizedError):
        authorizer.authorize(token)

    denied = audit_repo.list_events(action=AuditAction.EMPLOYEE_ACCESS_DENIED)
    assert denied[-1].metadata["reason"] == "employee_inactive"
    assert denied[-1].actor == "employee:EMP001"


def test_expired_deadline(authorizer, token_issuer, make_employee):
    employee = make_employee()

    with pytest.raises(OperationTimeout):
        authorizer.authorize(
            token_issuer.issue_access(employee), deadline=Deadline.after(-1)
        )


def _request(cookies=None):
    return SimpleNamespace(cookies=cookies or {})


def test_extract_prefers_bearer_header():
    request = _request({"access_token": "cookie-token"})
    assert extract_access_token(request, "Bearer header-token") == "header-token"


def test_extract_falls_back_to_cookie():
    request = _request({"access_token": "cookie-token"})
    assert extract_access_token(request, None) == "cookie-token"
    assert extract_access_token(request, "Basic abc") == "cookie-token"


def test_extract_none_when_absent():
    assert extract_access_token(_request(), "Bearer ") is None
