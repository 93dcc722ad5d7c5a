"""
===============================================================================
TARJETA CRC — identity/employees.py
===============================================================================

Módulo:
    Modelos de Empleado (credenciales + autorización)

Responsabilidades:
    - Definir el enum cerrado de roles (EMPLOYEE / ADMIN / SUPERVISOR).
    - Definir el registro Employee que usa el Credential Store.
    - Definir proyecciones seguras: EmployeeProfile (pública) y EmployeeContext
      (identidad resuelta por request).
    - Exponer el predicado derivado is_account_locked(now).

Colaboradores:
    - identity/passwords.py: genera password_hash + salt.
    - identity/employee_auth.py: construye EmployeeContext.
    - infrastructure/repositories/*/employee.py: mapean filas -> Employee.
    - domain/transaction_policy.py: can_bypass_limit(role).

Notas:
    - password_hash y salt NUNCA salen en EmployeeProfile ni en repr().
    - verification_limit es Decimal: el chequeo de montos es exacto.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID


class EmployeeRole(str, Enum):
    """Roles soportados para empleados del banco."""

    EMPLOYEE = "EMPLOYEE"
    ADMIN = "ADMIN"
    SUPERVISOR = "SUPERVISOR"


@dataclass(frozen=True, slots=True)
class Employee:
    """Registro de empleado utilizado por autenticación y autorización."""

    id: UUID
    employee_id: str
    username: str
    email: str
    full_name: str
    department: str
    password_hash: str = field(repr=False)
    salt: str = field(repr=False)
    role: EmployeeRole = EmployeeRole.EMPLOYEE
    verification_limit: Decimal = Decimal("100000")
    is_active: bool = True
    phone_number: str | None = None
    failed_login_attempts: int = 0
    locked_until: datetime | None = None
    last_login_at: datetime | None = None
    password_changed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def is_account_locked(self, now: datetime) -> bool:
        return self.locked_until is not None and self.locked_until > now

    def to_profile(self) -> "EmployeeProfile":
        return EmployeeProfile(
            id=self.id,
            employee_id=self.employee_id,
            username=self.username,
            full_name=self.full_name,
            email=self.email,
            role=self.role,
            department=self.department,
            is_active=self.is_active,
            last_login_at=self.last_login_at,
            created_at=self.created_at,
        )

    def to_context(self) -> "EmployeeContext":
        return EmployeeContext(
            id=self.id,
            employee_id=self.employee_id,
            username=self.username,
            full_name=self.full_name,
            role=self.role,
            verification_limit=self.verification_limit,
            is_active=self.is_active,
        )


@dataclass(frozen=True, slots=True)
class EmployeeProfile:
    """Perfil público (sin secretos)."""

    id: UUID
    employee_id: str
    username: str
    full_name: str
    email: str
    role: EmployeeRole
    department: str
    is_active: bool
    last_login_at: datetime | None = None
    created_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class EmployeeContext:
    """Identidad del empleado resuelta por el gate de autorización."""

    id: UUID
    employee_id: str
    username: str
    full_name: str
    role: EmployeeRole
    verification_limit: Decimal
    is_active: bool = True
