# payments_portal/crosscutting/timing.py
"""
===============================================================================
MÓDULO: Deadlines (timeouts por operación)
===============================================================================

Objetivo
--------
Dar a los casos de uso un deadline provisto por el caller:
- Deadline.after(seconds) arranca el reloj (monotónico)
- remaining() alimenta esperas acotadas (ej: hashing en el worker pool)
- ensure_not_expired() se chequea ANTES de cada mutación

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componentes:
  - Deadline

Responsabilidades:
  - Medir tiempo restante sin dependencias externas
  - Señalizar vencimiento con OperationTimeout (sin mutaciones parciales)

Colaboradores:
  - application/usecases/* (login, verify, submit batch)
  - identity/passwords.HashingWorkerPool
===============================================================================
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable

from .exceptions import OperationTimeout


@dataclass(frozen=True)
class Deadline:
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      Deadline

    Responsabilidades:
      - Guardar el instante de vencimiento (perf_counter)
      - Exponer remaining() / expired / ensure_not_expired()

    Colaboradores:
      - OperationTimeout
    ----------------------------------------------------------------------------
    """

    expires_at: float
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)

    @classmethod
    def after(
        cls, seconds: float, *, clock: Callable[[], float] = time.monotonic
    ) -> "Deadline":
        return cls(expires_at=clock() + seconds, clock=clock)

    def remaining(self) -> float:
        return max(0.0, self.expires_at - self.clock())

    @property
    def expired(self) -> bool:
        return self.clock() >= self.expires_at

    def ensure_not_expired(self, operation: str) -> None:
        if self.expired:
            raise OperationTimeout(f"Deadline exceeded before {operation}")


def remaining_or_none(deadline: Deadline | None) -> float | None:
    """Timeout para esperas bloqueantes: None significa sin límite."""
    return deadline.remaining() if deadline is not None else None


def check_deadline(deadline: Deadline | None, operation: str) -> None:
    if deadline is not None:
        deadline.ensure_not_expired(operation)
