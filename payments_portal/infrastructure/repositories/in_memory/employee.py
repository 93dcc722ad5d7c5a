"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/employee.py
============================================================
Class: InMemoryEmployeeRepository

Responsibilities:
  - Credential Store en memoria (tests / local dev).
  - Replicar la semántica atómica del repo Postgres:
      - incremento de fallos + bloqueo bajo el mismo lock
      - reset de contador en login exitoso

Collaborators:
  - identity.employees.Employee
  - domain.repositories.EmployeeRepository (contrato a implementar)

Constraints / Notes:
  - Thread-safe: todo read-modify-write bajo Lock.
  - Employee es inmutable: se reemplaza con dataclasses.replace.
============================================================
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, List, Optional
from uuid import UUID

from ....domain.repositories import EmployeeRepository
from ....identity.employees import Employee


class InMemoryEmployeeRepository(EmployeeRepository):
    """Repositorio in-memory, thread-safe, para empleados."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._employees: Dict[UUID, Employee] = {}

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    def find_active_by_username_and_employee_id(
        self, username: str, employee_id: str
    ) -> Optional[Employee]:
        with self._lock:
            for employee in self._employees.values():
                if (
                    employee.username == username
                    and employee.employee_id == employee_id
                    and employee.is_active
                ):
                    return employee
        return None

    def get_by_id(self, employee_pk: UUID) -> Optional[Employee]:
        with self._lock:
            return self._employees.get(employee_pk)

    def save(self, employee: Employee) -> Employee:
        with self._lock:
            for other in self._employees.values():
                if other.id == employee.id:
                    continue
                if other.username == employee.username:
                    raise ValueError(f"username '{employee.username}' already exists")
                if other.employee_id == employee.employee_id:
                    raise ValueError(
                        f"employee_id '{employee.employee_id}' already exists"
                    )
            now = self._now()
            stored = replace(
                employee,
                created_at=employee.created_at or now,
                updated_at=now,
            )
            self._employees[stored.id] = stored
            return stored

    def register_failed_login(
        self,
        employee_pk: UUID,
        *,
        now: datetime,
        max_attempts: int,
        lock_until: datetime,
    ) -> Optional[Employee]:
        with self._lock:
            current = self._employees.get(employee_pk)
            if current is None:
                return None
            attempts = current.failed_login_attempts + 1
            locked_until = current.locked_until
            if attempts >= max_attempts and not current.is_account_locked(now):
                locked_until = lock_until
            updated = replace(
                current,
                failed_login_attempts=attempts,
                locked_until=locked_until,
                updated_at=now,
            )
            self._employees[employee_pk] = updated
            return updated

    def register_successful_login(
        self, employee_pk: UUID, *, now: datetime
    ) -> Optional[Employee]:
        with self._lock:
            current = self._employees.get(employee_pk)
            if current is None:
                return None
            updated = replace(
                current,
                failed_login_attempts=0,
                locked_until=None,
                last_login_at=now,
                updated_at=now,
            )
            self._employees[employee_pk] = updated
            return updated

    def ping(self) -> bool:
        return True

    # -------------------------------------------------------------------------
    # Testing helpers
    # -------------------------------------------------------------------------
    def clear(self) -> None:
        with self._lock:
            self._employees.clear()

    def list_all(self) -> List[Employee]:
        with self._lock:
            return list(self._employees.values())
