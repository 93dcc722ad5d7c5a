# payments_portal/crosscutting/error_responses.py
"""
===============================================================================
MÓDULO: Problem Details (RFC 7807) del portal de empleados
===============================================================================

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  ErrorCode + Problem + AppHTTPException

Responsabilidades:
  - Catálogo único de códigos: status HTTP y título por código
  - Cuerpo problem+json con miembros de extensión code / request_id / error_id
  - Factories por caso (401 vago, 423 con Retry-After, 409 de batch)

Colaboradores:
  - crosscutting/middleware.py (request.state.request_id)
  - api/error_mapping.py (códigos de casos de uso -> factories)
  - api/exception_handlers.py (excepciones internas -> problem_response)

Notas:
  - Los fallos de identidad comparten un único mensaje (anti-enumeración).
===============================================================================
"""

from __future__ import annotations

from enum import Enum
from typing import Any, NamedTuple

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

PROBLEM_JSON_MEDIA_TYPE = "application/problem+json"
PROBLEM_TYPE_PREFIX = "urn:payments-portal:problem:"


class ErrorCode(str, Enum):
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    ACCOUNT_LOCKED = "ACCOUNT_LOCKED"
    INVALID_REFRESH_TOKEN = "INVALID_REFRESH_TOKEN"
    UNAUTHORIZED = "UNAUTHORIZED"
    LIMIT_EXCEEDED = "LIMIT_EXCEEDED"
    NOT_FOUND = "NOT_FOUND"
    INVALID_STATE = "INVALID_STATE"
    PARTIAL_BATCH_INVALID = "PARTIAL_BATCH_INVALID"
    INTERNAL_FAILURE = "INTERNAL_FAILURE"
    TIMEOUT = "TIMEOUT"

    @property
    def http_status(self) -> int:
        return _CATALOG[self].status

    @property
    def summary(self) -> str:
        return _CATALOG[self].title

    @property
    def problem_type(self) -> str:
        return PROBLEM_TYPE_PREFIX + self.value.lower().replace("_", "-")


class _Entry(NamedTuple):
    status: int
    title: str


_CATALOG: dict[ErrorCode, _Entry] = {
    ErrorCode.INVALID_INPUT: _Entry(422, "Invalid input"),
    ErrorCode.INVALID_CREDENTIALS: _Entry(401, "Invalid credentials"),
    ErrorCode.ACCOUNT_LOCKED: _Entry(423, "Account locked"),
    ErrorCode.INVALID_REFRESH_TOKEN: _Entry(401, "Invalid refresh token"),
    ErrorCode.UNAUTHORIZED: _Entry(401, "Authentication required"),
    ErrorCode.LIMIT_EXCEEDED: _Entry(403, "Verification limit exceeded"),
    ErrorCode.NOT_FOUND: _Entry(404, "Not found"),
    ErrorCode.INVALID_STATE: _Entry(409, "Invalid transaction state"),
    ErrorCode.PARTIAL_BATCH_INVALID: _Entry(409, "Batch contains ineligible transactions"),
    ErrorCode.INTERNAL_FAILURE: _Entry(500, "Internal failure"),
    ErrorCode.TIMEOUT: _Entry(504, "Operation timed out"),
}


class Problem(BaseModel):
    """Cuerpo RFC 7807 con extensiones del portal."""

    type: str
    title: str
    status: int
    detail: str
    code: ErrorCode
    instance: str | None = None
    request_id: str | None = None
    error_id: str | None = None
    errors: list[dict[str, Any]] | None = None


def _openapi(description: str) -> dict[str, Any]:
    return {
        "description": description,
        "model": Problem,
        "content": {PROBLEM_JSON_MEDIA_TYPE: {}},
    }


OPENAPI_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    401: _openapi("Missing, invalid or expired credentials"),
    403: _openapi("Amount above the employee verification limit"),
    404: _openapi("Resource not found"),
    409: _openapi("Transaction not in the required status"),
    422: _openapi("Malformed input"),
    423: _openapi("Account temporarily locked"),
    504: _openapi("Deadline exceeded"),
    "default": _openapi("Internal failure"),
}


class AppHTTPException(HTTPException):
    """HTTPException con ErrorCode; el status sale del catálogo."""

    def __init__(
        self,
        code: ErrorCode,
        detail: str | None = None,
        *,
        errors: list[dict[str, Any]] | None = None,
        error_id: str | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(
            status_code=code.http_status, detail=detail or code.summary, headers=headers
        )
        self.code = code
        self.errors = errors
        self.error_id = error_id


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------
def invalid_input(
    detail: str, errors: list[dict[str, Any]] | None = None
) -> AppHTTPException:
    return AppHTTPException(ErrorCode.INVALID_INPUT, detail, errors=errors)


def invalid_credentials() -> AppHTTPException:
    return AppHTTPException(ErrorCode.INVALID_CREDENTIALS)


def account_locked(retry_after: int | None = None) -> AppHTTPException:
    return AppHTTPException(
        ErrorCode.ACCOUNT_LOCKED,
        "Account is temporarily locked due to too many failed attempts",
        headers={"Retry-After": str(retry_after)} if retry_after else None,
    )


def invalid_refresh_token() -> AppHTTPException:
    return AppHTTPException(ErrorCode.INVALID_REFRESH_TOKEN)


def unauthorized(detail: str | None = None) -> AppHTTPException:
    return AppHTTPException(
        ErrorCode.UNAUTHORIZED, detail, headers={"WWW-Authenticate": "Bearer"}
    )


def limit_exceeded(detail: str) -> AppHTTPException:
    return AppHTTPException(ErrorCode.LIMIT_EXCEEDED, detail)


def not_found(resource: str, identifier: str) -> AppHTTPException:
    return AppHTTPException(ErrorCode.NOT_FOUND, f"{resource} '{identifier}' not found")


def invalid_state(detail: str) -> AppHTTPException:
    return AppHTTPException(ErrorCode.INVALID_STATE, detail)


def partial_batch_invalid(
    detail: str, errors: list[dict[str, Any]] | None = None
) -> AppHTTPException:
    return AppHTTPException(ErrorCode.PARTIAL_BATCH_INVALID, detail, errors=errors)


def timeout(detail: str | None = None) -> AppHTTPException:
    return AppHTTPException(ErrorCode.TIMEOUT, detail)


def internal_failure(error_id: str | None = None) -> AppHTTPException:
    return AppHTTPException(
        ErrorCode.INTERNAL_FAILURE, "An unexpected error occurred", error_id=error_id
    )


# ---------------------------------------------------------------------------
# Render
# ---------------------------------------------------------------------------
def problem_response(request: Request, exc: AppHTTPException) -> JSONResponse:
    problem = Problem(
        type=exc.code.problem_type,
        title=exc.code.summary,
        status=exc.status_code,
        detail=str(exc.detail),
        code=exc.code,
        instance=request.url.path,
        request_id=getattr(request.state, "request_id", None),
        error_id=exc.error_id,
        errors=exc.errors or None,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=problem.model_dump(mode="json", exclude_none=True),
        headers=exc.headers,
        media_type=PROBLEM_JSON_MEDIA_TYPE,
    )


async def app_exception_handler(
    request: Request, exc: AppHTTPException
) -> JSONResponse:
    return problem_response(request, exc)
