"""
===============================================================================
AUTH USE CASE RESULTS (Shared Result / Error Models)
===============================================================================

Name:
    Employee Authentication Results

Business Goal:
    Proveer modelos compartidos de resultados y errores para login, refresh,
    logout y perfil del empleado, con un contrato estable para:
      - validación de borde
      - credenciales inválidas (vago a propósito: anti-enumeración)
      - bloqueo de cuenta
      - timeouts y fallas internas

Why (Context / Intención):
    - Los use cases devuelven resultados tipados en lugar de lanzar excepciones
      “hacia afuera”; la API los mapea a status codes (api/error_mapping.py).

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Component:
    auth_results models (module)

Responsibilities:
    - Definir AuthErrorCode y AuthError.
    - Representar LoginResult, RefreshResult, LogoutResult, ProfileResult.

Collaborators:
    - identity.employees.EmployeeProfile
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, List

from ....identity.employees import EmployeeProfile


class AuthErrorCode(str, Enum):
    """
    Códigos:
      - INVALID_INPUT: formato inválido (no se consultó ningún store).
      - INVALID_CREDENTIALS: usuario inexistente o password incorrecto.
      - ACCOUNT_LOCKED: bloqueo vigente por intentos fallidos.
      - INVALID_REFRESH_TOKEN: refresh token inválido/expirado/empleado inactivo.
      - NOT_FOUND: el empleado del contexto ya no existe.
      - TIMEOUT: venció el deadline (sin mutaciones).
      - INTERNAL_FAILURE: falla del hasher (sin mutaciones).
    """

    INVALID_INPUT = "INVALID_INPUT"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    ACCOUNT_LOCKED = "ACCOUNT_LOCKED"
    INVALID_REFRESH_TOKEN = "INVALID_REFRESH_TOKEN"
    NOT_FOUND = "NOT_FOUND"
    TIMEOUT = "TIMEOUT"
    INTERNAL_FAILURE = "INTERNAL_FAILURE"


@dataclass(frozen=True)
class AuthError:
    """
    Error de caso de uso.

    Campos:
      - code: categoría estable (AuthErrorCode)
      - message: descripción humana (segura para el cliente)
      - locked_until: solo para ACCOUNT_LOCKED
      - errors: detalle por campo para INVALID_INPUT
    """

    code: AuthErrorCode
    message: str
    locked_until: datetime | None = None
    errors: List[dict[str, Any]] = field(default_factory=list)


@dataclass
class LoginResult:
    profile: EmployeeProfile | None = None
    access_token: str | None = field(default=None, repr=False)
    refresh_token: str | None = field(default=None, repr=False)
    expires_in: int = 0
    error: AuthError | None = None


@dataclass
class RefreshResult:
    access_token: str | None = field(default=None, repr=False)
    refresh_token: str | None = field(default=None, repr=False)
    expires_in: int = 0
    error: AuthError | None = None


@dataclass
class LogoutResult:
    logged_out: bool
    error: AuthError | None = None


@dataclass
class ProfileResult:
    profile: EmployeeProfile | None = None
    error: AuthError | None = None
