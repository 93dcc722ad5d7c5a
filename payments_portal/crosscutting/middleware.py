# payments_portal/crosscutting/middleware.py
"""
===============================================================================
MÓDULO: Middlewares HTTP (contexto de request + headers de seguridad)
===============================================================================

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componentes:
  - RequestContextMiddleware
  - SecurityHeadersMiddleware

Responsabilidades:
  - Aceptar o generar X-Request-Id y abrir el RequestContext
  - Una línea de log por request (método, ruta, status, latencia)
  - Respuestas del portal nunca cacheables (llevan tokens y datos de pagos)
  - Hardening básico (nosniff, DENY, CSP de API, HSTS en producción)

Colaboradores:
  - payments_portal/context.py
  - crosscutting/logger.py
  - crosscutting/config.py (is_production)
===============================================================================
"""

from __future__ import annotations

import re
import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from ..context import clear_context, set_request_context
from .logger import logger

REQUEST_ID_HEADER = "X-Request-Id"

# Ids entrantes: caracteres seguros para logs y headers.
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")

_UNLOGGED_PATHS = frozenset({"/healthz"})


def resolve_request_id(incoming: str | None) -> str:
    candidate = (incoming or "").strip()
    if _REQUEST_ID_PATTERN.fullmatch(candidate):
        return candidate
    return str(uuid.uuid4())


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      RequestContextMiddleware

    Responsabilidades:
      - Correlación por request_id (header de entrada y de salida)
      - Log de cierre con latencia; excepciones logueadas y re-lanzadas

    Colaboradores:
      - context.set_request_context / clear_context
    ----------------------------------------------------------------------------
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        token = set_request_context(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else "",
            user_agent=request.headers.get("user-agent", ""),
        )
        request.state.request_id = request_id

        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        except Exception:
            logger.exception("Request sin manejar", extra={"status_code": 500})
            raise
        finally:
            if request.url.path not in _UNLOGGED_PATHS:
                logger.info(
                    "Request completado",
                    extra={
                        "status_code": status_code,
                        "latency_ms": round((time.perf_counter() - started) * 1000, 2),
                    },
                )
            clear_context(token)


_API_CSP = "default-src 'none'; frame-ancestors 'none'"

_STATIC_HEADERS = {
    "Cache-Control": "no-store",
    "Pragma": "no-cache",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Headers de hardening; HSTS solo en producción detrás de HTTPS."""

    def __init__(self, app, *, is_production: bool | None = None):
        super().__init__(app)
        if is_production is None:
            from .config import get_settings

            is_production = get_settings().is_production()
        self._is_production = is_production

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        for name, value in _STATIC_HEADERS.items():
            response.headers.setdefault(name, value)
        # /docs necesita scripts propios; el resto es JSON puro.
        if not request.url.path.startswith(("/docs", "/redoc")):
            response.headers["Content-Security-Policy"] = _API_CSP

        if self._is_production:
            proto = (
                request.headers.get("x-forwarded-proto") or request.url.scheme or ""
            ).lower()
            if proto == "https":
                response.headers["Strict-Transport-Security"] = (
                    "max-age=31536000; includeSubDomains"
                )
        return response
