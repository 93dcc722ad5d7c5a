"""
===============================================================================
TARJETA CRC — payments_portal/audit.py (Emisión de auditoría)
===============================================================================

Responsabilidades:
  - Construir eventos de auditoría con formato consistente (actor/action/target/metadata).
  - Normalizar actor y metadata a partir del EmployeeContext.
  - Adjuntar correlación del request (request_id, client_ip) si existe.
  - Persistir vía AuditEventRepository (puerto del dominio).
  - “Best-effort”: si falla la persistencia, NO rompe el flujo de negocio.

Colaboradores:
  - domain.audit.AuditEvent / AuditOutcome
  - domain.repositories.AuditEventRepository
  - identity.employees.EmployeeContext
  - context.get_context_dict
  - crosscutting.logger.logger

Decisiones de seguridad:
  - Nunca se guardan passwords, salts, hashes ni tokens.
  - Metadata se sanitiza a valores serializables; lo no serializable se stringifica.
===============================================================================
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from .context import get_context_dict
from .crosscutting.logger import logger
from .domain.audit import AuditEvent, AuditOutcome
from .domain.repositories import AuditEventRepository
from .identity.employees import EmployeeContext

_CORRELATION_KEYS = ("request_id", "client_ip", "user_agent")


def actor_for_employee(employee: EmployeeContext | None) -> str:
    """
    Identificador de actor estable.

    Formato:
      - employee:{employee_id}
      - anonymous
    """
    if employee is None:
        return "anonymous"
    return f"employee:{employee.employee_id}"


def _metadata_from_employee(employee: EmployeeContext | None) -> dict[str, Any]:
    if employee is None:
        return {}
    return {"employee_pk": str(employee.id), "role": employee.role.value}


def _sanitize(value: Any) -> Any:
    """
    Convierte valores a tipos serializables para JSON.
    - primitives -> OK
    - Decimal -> str (sin pérdida)
    - dict/list -> sanitiza recursivamente
    - otros -> str(value)
    """
    if value is None or isinstance(value, (str, int, float, bool)):
        return value

    if isinstance(value, Decimal):
        return str(value)

    if isinstance(value, dict):
        return {str(k): _sanitize(v) for k, v in value.items()}

    if isinstance(value, (list, tuple)):
        return [_sanitize(v) for v in value]

    return str(value)


def emit_audit_event(
    repository: AuditEventRepository | None,
    *,
    action: str,
    employee: EmployeeContext | None = None,
    actor: str | None = None,
    outcome: AuditOutcome = AuditOutcome.SUCCESS,
    target_id: UUID | None = None,
    metadata: dict[str, Any] | None = None,
) -> None:
    """
    Emite un evento de auditoría.

    Regla clave:
      - Si repository es None o falla al escribir, NO se lanza excepción.
    """
    if repository is None:
        return

    correlation = {
        key: value
        for key, value in get_context_dict().items()
        if key in _CORRELATION_KEYS
    }
    payload: dict[str, Any] = {
        **_metadata_from_employee(employee),
        **correlation,
        **(metadata or {}),
    }

    event = AuditEvent(
        id=uuid4(),
        actor=actor or actor_for_employee(employee),
        action=str(getattr(action, "value", action)),
        outcome=outcome,
        target_id=target_id,
        metadata=_sanitize(payload),
    )

    try:
        repository.record_event(event)
    except Exception as exc:
        logger.warning(
            "Falló la escritura del evento de auditoría",
            extra={"action": event.action, "error": str(exc)},
        )
