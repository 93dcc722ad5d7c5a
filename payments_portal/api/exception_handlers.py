"""
===============================================================================
TARJETA CRC — api/exception_handlers.py (Excepciones -> problem+json)
===============================================================================

Responsabilidades:
  - Traducir excepciones internas del portal a Problem Details.
  - Loguear la causa real con error_id; al cliente solo el mensaje genérico.
  - Normalizar errores de esquema (pydantic) a INVALID_INPUT por campo.

Colaboradores:
  - crosscutting.error_responses: AppHTTPException, ErrorCode, problem_response
  - crosscutting.exceptions: PortalError y subclases
===============================================================================
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..crosscutting.error_responses import (
    AppHTTPException,
    ErrorCode,
    app_exception_handler,
    invalid_input,
    problem_response,
    unauthorized,
)
from ..crosscutting.exceptions import (
    InternalFailure,
    OperationTimeout,
    PortalError,
    UnauthorizedError,
)
from ..crosscutting.logger import logger

# Orden de resolución por MRO: la subclase más específica gana.
_PORTAL_ERROR_CODES: dict[type[PortalError], ErrorCode] = {
    OperationTimeout: ErrorCode.TIMEOUT,
    InternalFailure: ErrorCode.INTERNAL_FAILURE,
    PortalError: ErrorCode.INTERNAL_FAILURE,
}


def _code_for(exc: PortalError) -> ErrorCode:
    for klass in type(exc).__mro__:
        if klass in _PORTAL_ERROR_CODES:
            return _PORTAL_ERROR_CODES[klass]
    return ErrorCode.INTERNAL_FAILURE


async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    if isinstance(exc, UnauthorizedError):
        # Causa ya auditada por el authorizer; respuesta uniforme.
        return problem_response(request, unauthorized())

    code = _code_for(exc)
    logger.error(
        "Error del portal",
        exc_info=exc,
        extra={
            "code": code.value,
            "error_code": exc.error_code,
            "error_id": exc.error_id,
            "internal_message": exc.message,
        },
    )
    app_exc = AppHTTPException(
        code,
        None if code == ErrorCode.TIMEOUT else "An unexpected error occurred",
        error_id=exc.error_id,
    )
    return problem_response(request, app_exc)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = []
    for err in exc.errors():
        location = [
            str(part)
            for part in err.get("loc", ())
            if part not in ("body", "query", "path")
        ]
        errors.append({"field": ".".join(location), "msg": err.get("msg", "")})
    return problem_response(request, invalid_input("Request validation failed", errors))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    wrapped = InternalFailure("Unhandled exception", original_error=exc)
    logger.error(
        "Excepción no controlada",
        exc_info=exc,
        extra={"error_id": wrapped.error_id, "error_type": type(exc).__name__},
    )
    return problem_response(
        request,
        AppHTTPException(
            ErrorCode.INTERNAL_FAILURE,
            "An unexpected error occurred",
            error_id=wrapped.error_id,
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(AppHTTPException, app_exception_handler)
    app.add_exception_handler(PortalError, portal_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = ["register_exception_handlers"]
