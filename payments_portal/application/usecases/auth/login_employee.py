"""
===============================================================================
USE CASE: Login Employee (credenciales + lockout + emisión de tokens)
===============================================================================

Name:
    Login Employee Use Case

Business Goal:
    Autenticar a un empleado por (username, employee_id, password), aplicar la
    política de bloqueo por intentos fallidos y emitir el par access/refresh.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    LoginEmployeeUseCase

Responsibilities:
    - Validar formato en el borde (sin tocar stores).
    - Resolver empleado activo por ambos identificadores.
    - Cortar temprano si la cuenta está bloqueada.
    - Verificar password en el pool de hashing respetando el deadline.
    - Registrar fallo (atómico) o éxito (reset) y auditar.

Collaborators:
    - EmployeeRepository: find_active_by_username_and_employee_id,
      register_failed_login, register_successful_login
    - Argon2PasswordHasher + HashingWorkerPool
    - TokenIssuer
    - LockoutPolicy
    - emit_audit_event (EMPLOYEE_LOGIN_SUCCESS / EMPLOYEE_LOGIN_FAILED)

-------------------------------------------------------------------------------
BUSINESS RULES (Reglas de negocio)
-------------------------------------------------------------------------------
R1) "Usuario inexistente" y "password incorrecto" son el MISMO error externo.
R2) Cuenta bloqueada: no se verifica password ni se incrementa el contador.
R3) Fallo: incremento atómico; al llegar a max_attempts se bloquea 15 min.
R4) Éxito: contador a 0, bloqueo limpio, last_login_at sellado.
R5) Timeout o falla del hasher: NINGUNA mutación.
===============================================================================
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from ....audit import emit_audit_event
from ....crosscutting.exceptions import OperationTimeout, PasswordValidationFailed
from ....crosscutting.logger import logger
from ....crosscutting.timing import Deadline, check_deadline
from ....domain.audit import AuditAction, AuditOutcome
from ....domain.policies import LockoutPolicy
from ....domain.repositories import AuditEventRepository, EmployeeRepository
from ....identity.employees import Employee
from ....identity.passwords import Argon2PasswordHasher, HashingWorkerPool
from ....identity.tokens import TokenIssuer
from ....identity.validation import validate_login_input
from .auth_results import AuthError, AuthErrorCode, LoginResult

_INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LoginEmployeeUseCase:
    """
    Use Case (Application Service / Command):
        Orquesta el login de un empleado.
    """

    def __init__(
        self,
        *,
        employee_repository: EmployeeRepository,
        password_hasher: Argon2PasswordHasher,
        token_issuer: TokenIssuer,
        hashing_pool: HashingWorkerPool | None = None,
        audit_repository: AuditEventRepository | None = None,
        lockout_policy: LockoutPolicy | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._employees = employee_repository
        self._hasher = password_hasher
        self._tokens = token_issuer
        self._pool = hashing_pool
        self._audit = audit_repository
        self._lockout = lockout_policy or LockoutPolicy()
        self._clock = clock

    def execute(
        self,
        username: str,
        employee_id: str,
        password: str,
        deadline: Deadline | None = None,
    ) -> LoginResult:
        issues = validate_login_input(username, employee_id, password)
        if issues:
            return LoginResult(
                error=AuthError(
                    code=AuthErrorCode.INVALID_INPUT,
                    message="Invalid login input",
                    errors=[issue.to_dict() for issue in issues],
                )
            )

        try:
            return self._login(username, employee_id, password, deadline)
        except OperationTimeout:
            logger.warning("Login: deadline vencido", extra={"employee_id": employee_id})
            return LoginResult(
                error=AuthError(code=AuthErrorCode.TIMEOUT, message="Login timed out")
            )

    def _login(
        self,
        username: str,
        employee_id: str,
        password: str,
        deadline: Deadline | None,
    ) -> LoginResult:
        check_deadline(deadline, "credential lookup")
        employee = self._employees.find_active_by_username_and_employee_id(
            username, employee_id
        )

        if employee is None:
            self._hash(self._hasher.verify_decoy, password, deadline=deadline)
            self._audit_failure(employee_id, reason="unknown_employee")
            return self._invalid_credentials()

        now = self._clock()
        if employee.is_account_locked(now):
            self._audit_failure(employee.employee_id, reason="account_locked")
            return LoginResult(
                error=AuthError(
                    code=AuthErrorCode.ACCOUNT_LOCKED,
                    message="Account is temporarily locked",
                    locked_until=employee.locked_until,
                )
            )

        try:
            matches = self._hash(
                self._hasher.verify,
                password,
                employee.salt,
                employee.password_hash,
                deadline=deadline,
            )
        except PasswordValidationFailed as exc:
            logger.error(
                "Login: verificación de password falló",
                extra={"employee_id": employee.employee_id, "error_id": exc.error_id},
            )
            return LoginResult(
                error=AuthError(
                    code=AuthErrorCode.INTERNAL_FAILURE,
                    message="Authentication is temporarily unavailable",
                )
            )

        if not matches:
            return self._register_failure(employee, deadline)

        return self._register_success(employee, deadline)

    def _register_failure(
        self, employee: Employee, deadline: Deadline | None
    ) -> LoginResult:
        check_deadline(deadline, "failed login registration")
        now = self._clock()
        updated = self._employees.register_failed_login(
            employee.id,
            now=now,
            max_attempts=self._lockout.max_attempts,
            lock_until=self._lockout.lock_expiry(now),
        )

        attempts = updated.failed_login_attempts if updated else None
        if updated is not None and updated.is_account_locked(now):
            logger.warning(
                "Login: cuenta bloqueada por intentos fallidos",
                extra={"employee_id": employee.employee_id, "attempts": attempts},
            )
        self._audit_failure(
            employee.employee_id, reason="invalid_password", attempts=attempts
        )
        return self._invalid_credentials()

    def _register_success(
        self, employee: Employee, deadline: Deadline | None
    ) -> LoginResult:
        check_deadline(deadline, "successful login registration")
        updated = self._employees.register_successful_login(
            employee.id, now=self._clock()
        )
        current = updated or employee

        context = current.to_context()
        emit_audit_event(
            self._audit,
            action=AuditAction.EMPLOYEE_LOGIN_SUCCESS,
            employee=context,
            target_id=current.id,
        )
        logger.info("Login de empleado exitoso", extra={"employee_id": current.employee_id})

        return LoginResult(
            profile=current.to_profile(),
            access_token=self._tokens.issue_access(current),
            refresh_token=self._tokens.issue_refresh(current),
            expires_in=self._tokens.access_ttl_seconds,
        )

    def _hash(self, fn, *args, deadline: Deadline | None):
        if self._pool is None:
            check_deadline(deadline, "password hashing")
            return fn(*args)
        return self._pool.run(fn, *args, deadline=deadline)

    def _audit_failure(
        self, employee_id: str, *, reason: str, attempts: int | None = None
    ) -> None:
        metadata: dict[str, object] = {"reason": reason}
        if attempts is not None:
            metadata["failed_login_attempts"] = attempts
        emit_audit_event(
            self._audit,
            action=AuditAction.EMPLOYEE_LOGIN_FAILED,
            actor=f"employee:{employee_id}",
            outcome=AuditOutcome.FAILURE,
            metadata=metadata,
        )

    @staticmethod
    def _invalid_credentials() -> LoginResult:
        return LoginResult(
            error=AuthError(
                code=AuthErrorCode.INVALID_CREDENTIALS,
                message=_INVALID_CREDENTIALS_MESSAGE,
            )
        )
