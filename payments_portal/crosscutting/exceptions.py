# payments_portal/crosscutting/exceptions.py
"""
===============================================================================
MÓDULO: Excepciones tipadas del portal (errores internos)
===============================================================================

Objetivo
--------
Tener excepciones internas coherentes, con:
- error_code estable (taxonomía del portal)
- error_id para correlación con logs
- message “humana” (sin filtrar hashes, salts ni tokens)

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  PortalError + subclases

Responsabilidades:
  - Estandarizar errores que cruzan capas (infra -> application -> api)
  - Generar error_id para rastreo
  - Distinguir fallas internas (InternalFailure) de errores recuperables

Colaboradores:
  - api/exception_handlers.py (mapea a AppHTTPException)
  - identity/passwords.py, identity/employee_auth.py
  - infrastructure/repositories/* (DatabaseError)
===============================================================================
"""

from __future__ import annotations

from uuid import uuid4


class PortalError(Exception):
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      PortalError

    Responsabilidades:
      - Base para errores internos del sistema
      - Proveer error_code + error_id + message

    Colaboradores:
      - api/exception_handlers.py
    ----------------------------------------------------------------------------
    """

    error_code: str = "PORTAL_ERROR"

    def __init__(
        self,
        message: str,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.error_id = error_id or str(uuid4())
        self.original_error = original_error
        super().__init__(message)


class InternalFailure(PortalError):
    """Falla de hashing o storage. Nunca se expone el detalle al cliente."""

    error_code: str = "INTERNAL_FAILURE"


class DatabaseError(InternalFailure):
    """Errores de DB (conexión, query, timeout, pool)."""

    error_code: str = "DATABASE_ERROR"


class PasswordValidationFailed(InternalFailure):
    """El hasher no pudo verificar (hash corrupto, parámetros inválidos)."""

    error_code: str = "PASSWORD_VALIDATION_FAILED"


class UnauthorizedError(PortalError):
    """Falta token de acceso o es inválido (gate de autorización)."""

    error_code: str = "UNAUTHORIZED"


class OperationTimeout(PortalError):
    """El deadline del caller venció antes de mutar estado."""

    error_code: str = "TIMEOUT"
