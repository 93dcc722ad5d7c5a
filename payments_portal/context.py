"""
===============================================================================
TARJETA CRC — payments_portal/context.py (Contexto por request)
===============================================================================

Responsabilidades:
  - Guardar un RequestContext inmutable por request en un único ContextVar.
  - Dar a logs y auditoría la correlación del request (id, ruta, cliente).
  - Reponer el contexto anterior al terminar (sin fugas entre requests).

Colaboradores:
  - crosscutting.middleware: abre y cierra el contexto por request.
  - crosscutting.logger: agrega as_dict() a cada línea JSON.
  - audit.emit_audit_event: copia request_id / client_ip / user_agent.

Restricciones:
  - Solo strings; vacío significa "no disponible" y se omite en as_dict().
===============================================================================
"""

from __future__ import annotations

from contextvars import ContextVar, Token
from dataclasses import asdict, dataclass


@dataclass(frozen=True, slots=True)
class RequestContext:
    request_id: str = ""
    method: str = ""
    path: str = ""
    client_ip: str = ""
    user_agent: str = ""

    def as_dict(self) -> dict[str, str]:
        return {key: value for key, value in asdict(self).items() if value}


_EMPTY = RequestContext()
_current: ContextVar[RequestContext] = ContextVar(
    "payments_portal_request_context", default=_EMPTY
)


def current_context() -> RequestContext:
    return _current.get()


def set_request_context(
    *,
    request_id: str = "",
    method: str = "",
    path: str = "",
    client_ip: str = "",
    user_agent: str = "",
) -> Token[RequestContext]:
    """Abre el contexto del request. Devuelve el token para clear_context()."""
    return _current.set(
        RequestContext(
            request_id=request_id or "",
            method=method or "",
            path=path or "",
            client_ip=client_ip or "",
            # R: el UA es texto libre del cliente; se acota para logs.
            user_agent=(user_agent or "")[:256],
        )
    )


def get_context_dict() -> dict[str, str]:
    return _current.get().as_dict()


def clear_context(token: Token[RequestContext] | None = None) -> None:
    if token is not None:
        _current.reset(token)
    else:
        _current.set(_EMPTY)
