"""
===============================================================================
TARJETA CRC — payments_portal/container.py (Composition Root / DI manual)
===============================================================================

Responsabilidades:
  - Componer dependencias (repositorios, hasher, token issuer, casos de uso).
  - Exponer factories para FastAPI (Depends) y para scripts.
  - Mantener singletons con caching (lru_cache) para recursos pesados.
  - Elegir adapters in-memory en test y Postgres en runtime.

Colaboradores:
  - crosscutting.config.get_settings
  - domain.repositories.* (puertos)
  - infrastructure.repositories.* (implementaciones)
  - identity.* (hasher, tokens, authorizer)
  - application.usecases.* (casos de uso)

Patrones aplicados:
  - Composition Root
  - Dependency Inversion (use cases dependen de puertos)
  - Lazy singletons con lru_cache

Notas:
  - Este archivo NO contiene lógica de negocio.
  - Este archivo NO depende de FastAPI (solo expone factories).
===============================================================================
"""

from __future__ import annotations

from functools import lru_cache

from .application.usecases.auth import (
    GetCurrentEmployeeUseCase,
    LoginEmployeeUseCase,
    LogoutEmployeeUseCase,
    RefreshSessionUseCase,
)
from .application.usecases.transactions import (
    GetTransactionStatisticsUseCase,
    GetTransactionUseCase,
    SubmitBatchUseCase,
    VerifyTransactionUseCase,
)
from .crosscutting.config import get_settings
from .domain.policies import LockoutPolicy
from .domain.repositories import (
    AuditEventRepository,
    EmployeeRepository,
    TransactionRepository,
)
from .identity.employee_auth import EmployeeAuthorizer
from .identity.passwords import Argon2PasswordHasher, HashingWorkerPool
from .identity.tokens import TokenIssuer
from .infrastructure.repositories import (
    InMemoryAuditEventRepository,
    InMemoryEmployeeRepository,
    InMemoryTransactionRepository,
    PostgresAuditEventRepository,
    PostgresEmployeeRepository,
    PostgresTransactionRepository,
)

# =============================================================================
# Helpers internos
# =============================================================================


def _is_test_env() -> bool:
    """
    Regla:
      - app_env ∈ {"test", "testing", "ci"} => in-memory adapters.
    """
    return get_settings().is_test()


# =============================================================================
# Repositorios (singletons)
# =============================================================================


@lru_cache(maxsize=1)
def get_employee_repository() -> EmployeeRepository:
    """Credential Store (in-memory en test; Postgres en runtime)."""
    if _is_test_env():
        return InMemoryEmployeeRepository()
    return PostgresEmployeeRepository()


@lru_cache(maxsize=1)
def get_transaction_repository() -> TransactionRepository:
    """Transaction store (in-memory en test; Postgres en runtime)."""
    if _is_test_env():
        return InMemoryTransactionRepository()
    return PostgresTransactionRepository()


@lru_cache(maxsize=1)
def get_audit_repository() -> AuditEventRepository:
    """Audit Sink (in-memory en test; Postgres en runtime)."""
    if _is_test_env():
        return InMemoryAuditEventRepository()
    return PostgresAuditEventRepository()


# =============================================================================
# Identidad (singletons)
# =============================================================================


@lru_cache(maxsize=1)
def get_password_hasher() -> Argon2PasswordHasher:
    settings = get_settings()
    return Argon2PasswordHasher(
        memory_cost=settings.argon2_memory_cost,
        parallelism=settings.argon2_parallelism,
        time_cost=settings.argon2_time_cost,
    )


@lru_cache(maxsize=1)
def get_hashing_pool() -> HashingWorkerPool:
    return HashingWorkerPool(max_workers=get_settings().argon2_max_concurrency)


@lru_cache(maxsize=1)
def get_token_issuer() -> TokenIssuer:
    return TokenIssuer.from_settings(get_settings())


@lru_cache(maxsize=1)
def get_lockout_policy() -> LockoutPolicy:
    settings = get_settings()
    return LockoutPolicy(
        max_attempts=settings.lockout_max_attempts,
        lockout_minutes=settings.lockout_minutes,
    )


def get_employee_authorizer() -> EmployeeAuthorizer:
    return EmployeeAuthorizer(
        token_issuer=get_token_issuer(),
        employee_repository=get_employee_repository(),
        audit_repository=get_audit_repository(),
    )


# =============================================================================
# Casos de uso (factories por request)
# =============================================================================


def get_login_employee_use_case() -> LoginEmployeeUseCase:
    return LoginEmployeeUseCase(
        employee_repository=get_employee_repository(),
        password_hasher=get_password_hasher(),
        token_issuer=get_token_issuer(),
        hashing_pool=get_hashing_pool(),
        audit_repository=get_audit_repository(),
        lockout_policy=get_lockout_policy(),
    )


def get_refresh_session_use_case() -> RefreshSessionUseCase:
    return RefreshSessionUseCase(
        employee_repository=get_employee_repository(),
        token_issuer=get_token_issuer(),
        audit_repository=get_audit_repository(),
    )


def get_logout_employee_use_case() -> LogoutEmployeeUseCase:
    return LogoutEmployeeUseCase(get_audit_repository())


def get_current_employee_use_case() -> GetCurrentEmployeeUseCase:
    return GetCurrentEmployeeUseCase(get_employee_repository())


def get_verify_transaction_use_case() -> VerifyTransactionUseCase:
    return VerifyTransactionUseCase(
        transaction_repository=get_transaction_repository(),
        audit_repository=get_audit_repository(),
        notes_max_chars=get_settings().rejection_reason_max_chars,
    )


def get_submit_batch_use_case() -> SubmitBatchUseCase:
    return SubmitBatchUseCase(
        transaction_repository=get_transaction_repository(),
        audit_repository=get_audit_repository(),
        batch_max_size=get_settings().batch_max_size,
    )


def get_transaction_statistics_use_case() -> GetTransactionStatisticsUseCase:
    return GetTransactionStatisticsUseCase(get_transaction_repository())


def get_get_transaction_use_case() -> GetTransactionUseCase:
    return GetTransactionUseCase(
        transaction_repository=get_transaction_repository(),
        audit_repository=get_audit_repository(),
    )


def reset_container() -> None:
    """Limpia los singletons (tests)."""
    for factory in (
        get_employee_repository,
        get_transaction_repository,
        get_audit_repository,
        get_password_hasher,
        get_token_issuer,
        get_lockout_policy,
    ):
        factory.cache_clear()
    if get_hashing_pool.cache_info().currsize:
        get_hashing_pool().shutdown()
    get_hashing_pool.cache_clear()
