"""
===============================================================================
TARJETA CRC — api/auth_routes.py (Autenticación de Empleados)
===============================================================================

Responsabilidades:
  - Exponer login / refresh / logout / me bajo /api/employees.
  - Gestionar la cookie httpOnly del access token de forma consistente.
  - Derivar el deadline del request (request_timeout_seconds).
  - Traducir resultados tipados a HTTP (api/error_mapping.py).

Patrones aplicados:
  - Adapter / Presentation Layer: traduce HTTP ↔ caso de uso.
  - Fail-safe security: si la autenticación falla, se deniega por defecto.

Colaboradores:
  - container: factories de casos de uso
  - identity.employee_auth.require_employee
  - application.usecases.auth
===============================================================================
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from pydantic import AliasChoices, BaseModel, Field

from ..application.usecases.auth import (
    GetCurrentEmployeeUseCase,
    LoginEmployeeUseCase,
    LogoutEmployeeUseCase,
    RefreshSessionUseCase,
)
from ..container import (
    get_current_employee_use_case,
    get_login_employee_use_case,
    get_logout_employee_use_case,
    get_refresh_session_use_case,
)
from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import OPENAPI_ERROR_RESPONSES
from ..crosscutting.timing import Deadline
from ..identity.employee_auth import DEFAULT_ACCESS_TOKEN_COOKIE, require_employee
from ..identity.employees import EmployeeContext, EmployeeProfile, EmployeeRole
from .error_mapping import auth_error_to_http

router = APIRouter(prefix="/api/employees", responses=OPENAPI_ERROR_RESPONSES)


# -----------------------------------------------------------------------------
# Modelos HTTP (DTOs)
# -----------------------------------------------------------------------------


class LoginRequest(BaseModel):
    # R: los formatos exactos se validan en el caso de uso (INVALID_INPUT + campo)
    username: str = Field(..., max_length=64)
    employee_id: str = Field(
        ...,
        max_length=32,
        validation_alias=AliasChoices("employee_id", "employeeId"),
    )
    password: str = Field(..., max_length=1024)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("refresh_token", "refreshToken"),
    )


class EmployeeResponse(BaseModel):
    id: UUID
    employee_id: str
    username: str
    full_name: str
    email: str
    role: EmployeeRole
    department: str
    is_active: bool
    last_login_at: datetime | None = None
    created_at: datetime | None = None


class TokenPairResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class LoginResponse(TokenPairResponse):
    employee: EmployeeResponse


class LogoutResponse(BaseModel):
    ok: bool = True


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def _to_employee_response(profile: EmployeeProfile) -> EmployeeResponse:
    return EmployeeResponse(
        id=profile.id,
        employee_id=profile.employee_id,
        username=profile.username,
        full_name=profile.full_name,
        email=profile.email,
        role=profile.role,
        department=profile.department,
        is_active=profile.is_active,
        last_login_at=profile.last_login_at,
        created_at=profile.created_at,
    )


def _cookie_name() -> str:
    return (get_settings().jwt_cookie_name or "").strip() or DEFAULT_ACCESS_TOKEN_COOKIE


def _set_auth_cookie(response: Response, token: str, expires_in: int) -> None:
    response.set_cookie(
        key=_cookie_name(),
        value=token,
        httponly=True,
        secure=get_settings().jwt_cookie_secure,
        samesite="strict",
        max_age=expires_in,
        path="/",
    )


def _clear_auth_cookie(response: Response) -> None:
    response.delete_cookie(
        key=_cookie_name(),
        path="/",
        samesite="strict",
        secure=get_settings().jwt_cookie_secure,
    )


def _request_deadline() -> Deadline:
    return Deadline.after(get_settings().request_timeout_seconds)


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------


@router.post("/login", response_model=LoginResponse, tags=["auth"])
def login(
    req: LoginRequest,
    response: Response,
    use_case: LoginEmployeeUseCase = Depends(get_login_employee_use_case),
):
    """
    Inicia sesión con (username, employee_id, password).

    - Devuelve access + refresh token y setea cookie httpOnly con el access.
    - Credenciales inválidas y empleado inexistente responden igual (401).
    """
    result = use_case.execute(
        req.username, req.employee_id, req.password, deadline=_request_deadline()
    )
    if result.error is not None:
        raise auth_error_to_http(result.error)

    _set_auth_cookie(response, result.access_token, result.expires_in)
    return LoginResponse(
        access_token=result.access_token,
        refresh_token=result.refresh_token,
        expires_in=result.expires_in,
        employee=_to_employee_response(result.profile),
    )


@router.post("/refresh", response_model=TokenPairResponse, tags=["auth"])
def refresh(
    req: RefreshRequest,
    response: Response,
    use_case: RefreshSessionUseCase = Depends(get_refresh_session_use_case),
):
    """Rota el par de tokens a partir de un refresh token válido."""
    result = use_case.execute(req.refresh_token)
    if result.error is not None:
        raise auth_error_to_http(result.error)

    _set_auth_cookie(response, result.access_token, result.expires_in)
    return TokenPairResponse(
        access_token=result.access_token,
        refresh_token=result.refresh_token,
        expires_in=result.expires_in,
    )


@router.post("/logout", response_model=LogoutResponse, tags=["auth"])
def logout(
    response: Response,
    employee: EmployeeContext = Depends(require_employee()),
    use_case: LogoutEmployeeUseCase = Depends(get_logout_employee_use_case),
):
    """
    Cierra sesión (stateless).

    - Borra la cookie; el cliente descarta sus tokens.
    """
    use_case.execute(employee)
    _clear_auth_cookie(response)
    return LogoutResponse()


@router.get("/me", response_model=EmployeeResponse, tags=["auth"])
def me(
    employee: EmployeeContext = Depends(require_employee()),
    use_case: GetCurrentEmployeeUseCase = Depends(get_current_employee_use_case),
):
    """Devuelve el perfil del empleado autenticado."""
    result = use_case.execute(employee)
    if result.error is not None:
        raise auth_error_to_http(result.error)
    return _to_employee_response(result.profile)
