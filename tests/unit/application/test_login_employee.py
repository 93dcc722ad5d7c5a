"""
Name: Login Employee Use Case Tests

Responsibilities:
  - Successful login issues tokens and resets counters
  - Unknown employee and wrong password are indistinguishable
  - Lockout after repeated failures (and relock after expiry)
  - Timeouts and hasher failures never mutate the Credential Store
"""

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from threading import Thread

import pytest

from payments_portal.application.usecases.auth import AuthErrorCode, LoginEmployeeUseCase
from payments_portal.crosscutting.timing import Deadline
from payments_portal.domain.audit import AuditAction
from payments_portal.domain.policies import LockoutPolicy
from payments_portal.identity.passwords import HashingWorkerPool
from payments_portal.identity.tokens import TokenType

pytestmark = pytest.mark.unit

PASSWORD = "Demo123!@#"


class _Clock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@pytest.fixture
def clock() -> _Clock:
    return _Clock(datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def use_case(employee_repo, password_hasher, token_issuer, audit_repo, clock):
    return LoginEmployeeUseCase(
        employee_repository=employee_repo,
        password_hasher=password_hasher,
        token_issuer=token_issuer,
        audit_repository=audit_repo,
        lockout_policy=LockoutPolicy(max_attempts=5, lockout_minutes=15),
        clock=clock,
    )


def test_login_success(use_case, make_employee, employee_repo, token_issuer, audit_repo, clock):
    employee = make_employee()

    result = use_case.execute("jsmith", "EMP001", PASSWORD)

    assert result.error is None
    assert result.profile.employee_id == "EMP001"
    assert result.profile.username == "jsmith"
    assert result.expires_in == 24 * 60 * 60
    access = token_issuer.validate(result.access_token, TokenType.ACCESS)
    refresh = token_issuer.validate(result.refresh_token, TokenType.REFRESH)
    assert access.subject == employee.id == refresh.subject

    stored = employee_repo.get_by_id(employee.id)
    assert stored.failed_login_attempts == 0
    assert stored.last_login_at == clock.now
    assert AuditAction.EMPLOYEE_LOGIN_SUCCESS.value in audit_repo.actions()


def test_login_result_never_exposes_secrets(use_case, make_employee):
    employee = make_employee()

    result = use_case.execute("jsmith", "EMP001", PASSWORD)

    assert not hasattr(result.profile, "password_hash")
    assert not hasattr(result.profile, "salt")
    assert employee.password_hash not in repr(result)


def test_wrong_password(use_case, make_employee, employee_repo):
    employee = make_employee()

    result = use_case.execute("jsmith", "EMP001", "wrong-password")

    assert result.error.code == AuthErrorCode.INVALID_CREDENTIALS
    assert employee_repo.get_by_id(employee.id).failed_login_attempts == 1


@pytest.mark.parametrize(
    "username, employee_id",
    [("nobody", "EMP001"), ("jsmith", "EMP999"), ("nobody", "EMP999")],
)
def test_unknown_employee_same_error_as_wrong_password(
    use_case, make_employee, username, employee_id
):
    make_employee()

    unknown = use_case.execute(username, employee_id, PASSWORD)
    wrong = use_case.execute("jsmith", "EMP001", "wrong-password")

    assert unknown.error.code == wrong.error.code == AuthErrorCode.INVALID_CREDENTIALS
    assert unknown.error.message == wrong.error.message


def test_unknown_employee_runs_decoy_verification(use_case, password_hasher, monkeypatch):
    calls = []
    original = password_hasher.verify_decoy
    monkeypatch.setattr(
        password_hasher,
        "verify_decoy",
        lambda plaintext: calls.append(plaintext) or original(plaintext),
    )

    use_case.execute("nobody", "EMP404", PASSWORD)

    assert calls == [PASSWORD]


def test_inactive_employee_is_unknown(use_case, make_employee):
    make_employee(is_active=False)

    result = use_case.execute("jsmith", "EMP001", PASSWORD)

    assert result.error.code == AuthErrorCode.INVALID_CREDENTIALS


def test_invalid_input_reports_fields(use_case, employee_repo):
    result = use_case.execute("x", "emp001", PASSWORD)

    assert result.error.code == AuthErrorCode.INVALID_INPUT
    assert {e["field"] for e in result.error.errors} == {"username", "employee_id"}


def test_lockout_after_five_failures(use_case, make_employee, employee_repo, clock):
    employee = make_employee()

    for _ in range(4):
        assert use_case.execute("jsmith", "EMP001", "bad").error.code == (
            AuthErrorCode.INVALID_CREDENTIALS
        )
    assert employee_repo.get_by_id(employee.id).locked_until is None

    fifth = use_case.execute("jsmith", "EMP001", "bad")
    assert fifth.error.code == AuthErrorCode.INVALID_CREDENTIALS

    stored = employee_repo.get_by_id(employee.id)
    assert stored.failed_login_attempts == 5
    assert stored.locked_until == clock.now + timedelta(minutes=15)


def test_locked_account_rejects_correct_password(use_case, make_employee, employee_repo, clock):
    employee = make_employee()
    for _ in range(5):
        use_case.execute("jsmith", "EMP001", "bad")

    result = use_case.execute("jsmith", "EMP001", PASSWORD)

    assert result.error.code == AuthErrorCode.ACCOUNT_LOCKED
    assert result.error.locked_until == clock.now + timedelta(minutes=15)
    # Bloqueada: no se incrementa el contador.
    assert employee_repo.get_by_id(employee.id).failed_login_attempts == 5


def test_login_after_lock_expiry_resets_counter(use_case, make_employee, employee_repo, clock):
    employee = make_employee()
    for _ in range(5):
        use_case.execute("jsmith", "EMP001", "bad")

    clock.advance(timedelta(minutes=15, seconds=1))
    result = use_case.execute("jsmith", "EMP001", PASSWORD)

    assert result.error is None
    stored = employee_repo.get_by_id(employee.id)
    assert stored.failed_login_attempts == 0
    assert stored.locked_until is None


def test_failure_after_lock_expiry_relocks(use_case, make_employee, employee_repo, clock):
    employee = make_employee()
    for _ in range(5):
        use_case.execute("jsmith", "EMP001", "bad")

    clock.advance(timedelta(minutes=16))
    result = use_case.execute("jsmith", "EMP001", "bad")

    assert result.error.code == AuthErrorCode.INVALID_CREDENTIALS
    stored = employee_repo.get_by_id(employee.id)
    assert stored.failed_login_attempts == 6
    assert stored.locked_until == clock.now + timedelta(minutes=15)


def test_concurrent_failures_are_all_counted(
    employee_repo, password_hasher, token_issuer, make_employee
):
    employee = make_employee()
    use_case = LoginEmployeeUseCase(
        employee_repository=employee_repo,
        password_hasher=password_hasher,
        token_issuer=token_issuer,
        lockout_policy=LockoutPolicy(max_attempts=100, lockout_minutes=15),
    )

    threads = [
        Thread(target=use_case.execute, args=("jsmith", "EMP001", "bad"))
        for _ in range(8)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert employee_repo.get_by_id(employee.id).failed_login_attempts == 8


def test_expired_deadline_returns_timeout_without_mutation(
    use_case, make_employee, employee_repo
):
    employee = make_employee()

    result = use_case.execute("jsmith", "EMP001", "bad", deadline=Deadline.after(-1))

    assert result.error.code == AuthErrorCode.TIMEOUT
    stored = employee_repo.get_by_id(employee.id)
    assert stored.failed_login_attempts == 0
    assert stored.last_login_at is None


def test_hashing_pool_is_used(employee_repo, password_hasher, token_issuer, make_employee):
    make_employee()
    pool = HashingWorkerPool(max_workers=1)
    use_case = LoginEmployeeUseCase(
        employee_repository=employee_repo,
        password_hasher=password_hasher,
        token_issuer=token_issuer,
        hashing_pool=pool,
    )
    try:
        result = use_case.execute(
            "jsmith", "EMP001", PASSWORD, deadline=Deadline.after(30)
        )
    finally:
        pool.shutdown()

    assert result.error is None


def test_malformed_stored_hash_is_internal_failure(use_case, make_employee, employee_repo):
    employee = make_employee()
    employee_repo.save(replace(employee, password_hash="corrupted"))

    result = use_case.execute("jsmith", "EMP001", PASSWORD)

    assert result.error.code == AuthErrorCode.INTERNAL_FAILURE
    stored = employee_repo.get_by_id(employee.id)
    assert stored.failed_login_attempts == 0
    assert stored.last_login_at is None
