"""
===============================================================================
USE CASE: Refresh Session (rotación de access + refresh)
===============================================================================

Class:
    RefreshSessionUseCase

Responsibilities:
    - Validar el refresh token (tipo, firma, expiración, issuer/audience).
    - Exigir que el empleado exista y siga activo.
    - Emitir un par nuevo (rotación) y auditar.

Collaborators:
    - TokenIssuer, EmployeeRepository
    - emit_audit_event (EMPLOYEE_TOKEN_REFRESH / EMPLOYEE_TOKEN_REFRESH_FAILED)

Notes:
    - Cualquier falla sale como INVALID_REFRESH_TOKEN; la causa real queda en
      auditoría y logs.
    - Sin revocación: el refresh anterior sigue válido hasta su expiración.
===============================================================================
"""

from __future__ import annotations

from ....audit import emit_audit_event
from ....crosscutting.logger import logger
from ....domain.audit import AuditAction, AuditOutcome
from ....domain.repositories import AuditEventRepository, EmployeeRepository
from ....identity.tokens import TokenError, TokenIssuer, TokenType
from .auth_results import AuthError, AuthErrorCode, RefreshResult


class RefreshSessionUseCase:
    def __init__(
        self,
        *,
        employee_repository: EmployeeRepository,
        token_issuer: TokenIssuer,
        audit_repository: AuditEventRepository | None = None,
    ) -> None:
        self._employees = employee_repository
        self._tokens = token_issuer
        self._audit = audit_repository

    def execute(self, refresh_token: str | None) -> RefreshResult:
        if not refresh_token:
            return self._fail("missing_token")

        try:
            claims = self._tokens.validate(refresh_token, TokenType.REFRESH)
        except TokenError as exc:
            return self._fail(exc.reason)

        employee = self._employees.get_by_id(claims.subject)
        if employee is None:
            return self._fail("employee_not_found", employee_id=claims.employee_id)
        if not employee.is_active:
            return self._fail("employee_inactive", employee_id=employee.employee_id)

        emit_audit_event(
            self._audit,
            action=AuditAction.EMPLOYEE_TOKEN_REFRESH,
            employee=employee.to_context(),
            target_id=employee.id,
        )
        return RefreshResult(
            access_token=self._tokens.issue_access(employee),
            refresh_token=self._tokens.issue_refresh(employee),
            expires_in=self._tokens.access_ttl_seconds,
        )

    def _fail(self, reason: str, *, employee_id: str | None = None) -> RefreshResult:
        logger.info("Refresh de sesión rechazado", extra={"reason": reason})
        emit_audit_event(
            self._audit,
            action=AuditAction.EMPLOYEE_TOKEN_REFRESH_FAILED,
            actor=f"employee:{employee_id}" if employee_id else "anonymous",
            outcome=AuditOutcome.FAILURE,
            metadata={"reason": reason},
        )
        return RefreshResult(
            error=AuthError(
                code=AuthErrorCode.INVALID_REFRESH_TOKEN,
                message="Invalid refresh token",
            )
        )
