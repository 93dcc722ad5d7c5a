"""
===============================================================================
TARJETA CRC — identity/employee_auth.py
===============================================================================

Módulo:
    Authorization Middleware (gate de empleados por access token)

Responsabilidades:
    - Validar el access token y resolver el empleado (token -> id -> repo).
    - Exigir is_active y devolver EmployeeContext.
    - Rechazar ANTES de la lógica de la ruta (401 uniforme).
    - Extraer token desde Authorization: Bearer o cookie.
    - Exponer la dependencia FastAPI require_employee().

Colaboradores:
    - identity.tokens.TokenIssuer / TokenType / TokenError
    - domain.repositories.EmployeeRepository
    - payments_portal.audit.emit_audit_event (EMPLOYEE_ACCESS_DENIED)
    - crosscutting.error_responses.unauthorized
    - container.get_employee_authorizer (resolución perezosa)

Decisiones de diseño:
    - La causa interna (expirado, firma, inactivo) va a logs/auditoría; el
      cliente recibe siempre el mismo 401.
    - La dependencia es sync: FastAPI la corre en threadpool y el acceso al
      store no bloquea el event loop.
===============================================================================
"""

from __future__ import annotations

from typing import Callable

from fastapi import Header, Request

from ..audit import emit_audit_event
from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import unauthorized
from ..crosscutting.exceptions import UnauthorizedError
from ..crosscutting.logger import logger
from ..crosscutting.timing import Deadline, check_deadline
from ..domain.audit import AuditAction, AuditOutcome
from ..domain.repositories import AuditEventRepository, EmployeeRepository
from .employees import EmployeeContext
from .tokens import TokenError, TokenIssuer, TokenType

DEFAULT_ACCESS_TOKEN_COOKIE: str = "access_token"


class EmployeeAuthorizer:
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      EmployeeAuthorizer

    Responsabilidades:
      - authorize(token) -> EmployeeContext | UnauthorizedError

    Colaboradores:
      - TokenIssuer, EmployeeRepository, AuditEventRepository
    ----------------------------------------------------------------------------
    """

    def __init__(
        self,
        *,
        token_issuer: TokenIssuer,
        employee_repository: EmployeeRepository,
        audit_repository: AuditEventRepository | None = None,
    ) -> None:
        self._tokens = token_issuer
        self._employees = employee_repository
        self._audit = audit_repository

    def authorize(
        self, token: str | None, *, deadline: Deadline | None = None
    ) -> EmployeeContext:
        if not token:
            raise UnauthorizedError("Missing access token")

        try:
            claims = self._tokens.validate(token, TokenType.ACCESS)
        except TokenError as exc:
            self._deny(exc.reason)
            raise UnauthorizedError("Invalid access token", original_error=exc) from exc

        check_deadline(deadline, "employee lookup")
        employee = self._employees.get_by_id(claims.subject)
        if employee is None:
            self._deny("employee_not_found", employee_id=claims.employee_id)
            raise UnauthorizedError("Invalid access token")
        if not employee.is_active:
            self._deny("employee_inactive", employee_id=employee.employee_id)
            raise UnauthorizedError("Invalid access token")

        return employee.to_context()

    def _deny(self, reason: str, *, employee_id: str | None = None) -> None:
        logger.info("Acceso de empleado denegado", extra={"reason": reason})
        emit_audit_event(
            self._audit,
            action=AuditAction.EMPLOYEE_ACCESS_DENIED,
            actor=f"employee:{employee_id}" if employee_id else "anonymous",
            outcome=AuditOutcome.FAILURE,
            metadata={"reason": reason},
        )


# ---------------------------------------------------------------------------
# Extracción de token (header/cookie)
# ---------------------------------------------------------------------------


def _extract_bearer_token(authorization: str | None) -> str | None:
    """Extrae token desde `Authorization: Bearer <token>`."""
    if not authorization:
        return None
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    token = parts[1].strip()
    return token or None


def extract_access_token(request: Request, authorization: str | None) -> str | None:
    """Resuelve token desde Authorization o cookie."""
    token = _extract_bearer_token(authorization)
    if token:
        return token

    cookie_name = (
        get_settings().jwt_cookie_name or ""
    ).strip() or DEFAULT_ACCESS_TOKEN_COOKIE
    return request.cookies.get(cookie_name)


# ---------------------------------------------------------------------------
# Dependencias FastAPI
# ---------------------------------------------------------------------------


def require_employee() -> Callable:
    """Dependency FastAPI: requiere empleado activo autenticado por JWT."""

    def dependency(
        request: Request,
        authorization: str | None = Header(None, alias="Authorization"),
    ) -> EmployeeContext:
        from ..container import get_employee_authorizer

        token = extract_access_token(request, authorization)
        if not token:
            raise unauthorized("Missing bearer token")

        deadline = Deadline.after(get_settings().request_timeout_seconds)
        try:
            employee = get_employee_authorizer().authorize(token, deadline=deadline)
        except UnauthorizedError as exc:
            raise unauthorized() from exc

        request.state.employee = employee
        return employee

    return dependency
