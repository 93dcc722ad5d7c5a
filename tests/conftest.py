"""
Name: Pytest Configuration and Shared Fixtures

Responsibilities:
  - Configure the test environment (APP_ENV=test => in-memory adapters)
  - Keep Argon2 cheap so hashing tests stay fast
  - Provide repositories, hasher, token issuer and entity factories
  - Reset container singletons between tests

Notes:
  - Environment variables are set BEFORE importing the package, since
    Settings are cached on first use.
"""

import os

os.environ["APP_ENV"] = "test"
os.environ.setdefault("JWT_SECRET", "test-secret-for-unit-tests-only-0123456789")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret-for-unit-tests-0123")
os.environ["ARGON2_TIME_COST"] = "1"
os.environ["ARGON2_MEMORY_COST"] = "1024"
os.environ["ARGON2_PARALLELISM"] = "1"
os.environ["ARGON2_MAX_CONCURRENCY"] = "2"
os.environ["DEV_SEED_DEMO_EMPLOYEE"] = "false"

from datetime import datetime, timezone  # noqa: E402
from decimal import Decimal  # noqa: E402
from typing import Callable  # noqa: E402
from uuid import uuid4  # noqa: E402

import pytest  # noqa: E402

from payments_portal.crosscutting import config as app_config  # noqa: E402

app_config.Settings.model_config["env_file"] = None
app_config.get_settings.cache_clear()

from payments_portal.container import reset_container  # noqa: E402
from payments_portal.domain.entities import Transaction, TransactionStatus  # noqa: E402
from payments_portal.identity.employees import Employee, EmployeeRole  # noqa: E402
from payments_portal.identity.passwords import Argon2PasswordHasher  # noqa: E402
from payments_portal.identity.tokens import TokenIssuer  # noqa: E402
from payments_portal.infrastructure.repositories import (  # noqa: E402
    InMemoryAuditEventRepository,
    InMemoryEmployeeRepository,
    InMemoryTransactionRepository,
)

DEMO_PASSWORD = "Demo123!@#"


def pytest_configure(config) -> None:
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (require DATABASE_URL)"
    )


@pytest.fixture(autouse=True)
def _isolated_container():
    """R: Fresh singletons (repos, hasher, pool) for every test."""
    reset_container()
    yield
    reset_container()


# ============================================================================
# Infrastructure fixtures
# ============================================================================


@pytest.fixture
def password_hasher() -> Argon2PasswordHasher:
    return Argon2PasswordHasher(time_cost=1, memory_cost=1024, parallelism=1)


@pytest.fixture
def token_issuer() -> TokenIssuer:
    return TokenIssuer(
        secret="unit-access-secret-0123456789abcdef",
        refresh_secret="unit-refresh-secret-0123456789abcdef",
    )


@pytest.fixture
def employee_repo() -> InMemoryEmployeeRepository:
    return InMemoryEmployeeRepository()


@pytest.fixture
def transaction_repo() -> InMemoryTransactionRepository:
    return InMemoryTransactionRepository()


@pytest.fixture
def audit_repo() -> InMemoryAuditEventRepository:
    return InMemoryAuditEventRepository()


# ============================================================================
# Entity factories
# ============================================================================


@pytest.fixture
def make_employee(
    employee_repo: InMemoryEmployeeRepository,
    password_hasher: Argon2PasswordHasher,
) -> Callable[..., Employee]:
    """R: Persist an employee with a real Argon2 hash."""

    def _make(
        *,
        employee_id: str = "EMP001",
        username: str = "jsmith",
        password: str = DEMO_PASSWORD,
        role: EmployeeRole = EmployeeRole.EMPLOYEE,
        verification_limit: Decimal = Decimal("100000"),
        is_active: bool = True,
        **overrides,
    ) -> Employee:
        material = password_hasher.new_password(password)
        employee = Employee(
            id=uuid4(),
            employee_id=employee_id,
            username=username,
            email=f"{username}@bank.com",
            full_name="John Smith",
            department="International Payments",
            password_hash=material.password_hash,
            salt=material.salt,
            role=role,
            verification_limit=verification_limit,
            is_active=is_active,
            password_changed_at=material.changed_at,
            **overrides,
        )
        return employee_repo.save(employee)

    return _make


@pytest.fixture
def make_transaction(
    transaction_repo: InMemoryTransactionRepository,
) -> Callable[..., Transaction]:
    def _make(
        amount: str = "500.00",
        *,
        status: TransactionStatus = TransactionStatus.PENDING,
        currency: str = "USD",
        swift_code: str | None = "BOFAUS3N",
        created_at: datetime | None = None,
    ) -> Transaction:
        return transaction_repo.save_transaction(
            Transaction(
                id=uuid4(),
                amount=Decimal(amount),
                currency=currency,
                status=status,
                swift_code=swift_code,
                created_at=created_at or datetime.now(timezone.utc),
            )
        )

    return _make
