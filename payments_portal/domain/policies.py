"""
===============================================================================
TARJETA CRC — domain/policies.py
===============================================================================

Módulo:
    Políticas del portal (lockout de credenciales + capacidades por rol)

Responsabilidades:
    - Definir reglas puras (sin DB, sin FastAPI) para:
        * cuándo un intento fallido bloquea la cuenta
        * quién puede superar el límite de verificación
        * si un monto cabe en el límite de un actor
    - Ser 100% testeable: funciones puras, inputs explícitos.

Colaboradores:
    - identity.employees.EmployeeRole (catálogo de roles)
    - application/usecases/auth/login_employee.py
    - application/usecases/transactions/verify_transaction.py
    - infrastructure/repositories/*/employee.py (aplican LockoutPolicy atómicamente)

Reglas (intención):
    - ADMIN y SUPERVISOR no tienen techo de monto.
    - EMPLOYEE solo aprueba montos <= verification_limit.
    - Al llegar a max_attempts fallos (post-incremento) se bloquea por lockout_minutes,
      salvo que ya esté bloqueada.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal

from ..identity.employees import EmployeeRole

_LIMIT_BYPASS_ROLES = frozenset({EmployeeRole.ADMIN, EmployeeRole.SUPERVISOR})


def can_bypass_limit(role: EmployeeRole) -> bool:
    """Capacidad por rol: superar el verification_limit."""
    return role in _LIMIT_BYPASS_ROLES


def is_within_limit(
    amount: Decimal, *, role: EmployeeRole, verification_limit: Decimal
) -> bool:
    if can_bypass_limit(role):
        return True
    return amount <= verification_limit


@dataclass(frozen=True, slots=True)
class LockoutPolicy:
    """Umbral de intentos fallidos y ventana de bloqueo."""

    max_attempts: int = 5
    lockout_minutes: int = 15

    @property
    def lockout_window(self) -> timedelta:
        return timedelta(minutes=self.lockout_minutes)

    def lock_expiry(self, now: datetime) -> datetime:
        return now + self.lockout_window
