"""
===============================================================================
TARJETA CRC — identity/validation.py
===============================================================================

Módulo:
    Validación de borde (patrones de identidad y texto libre)

Responsabilidades:
    - Validar formato de username / employee_id / password ANTES de tocar stores.
    - Validar campos de perfil (email, nombre, departamento, teléfono).
    - Reportar el campo ofensor (FieldIssue) sin revelar nada más.

Colaboradores:
    - application/usecases/auth/login_employee.py
    - application/usecases/transactions/verify_transaction.py (notes)
    - application/dev_seed_employee.py, scripts/create_demo_employee.py

Notas:
    - Son funciones puras: devuelven issues, no levantan excepciones.
===============================================================================
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]{3,30}$")
EMPLOYEE_ID_PATTERN = re.compile(r"^[A-Z0-9]{6,10}$")
EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
PERSON_NAME_PATTERN = re.compile(r"^[A-Za-z\s]{3,50}$")
PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{0,15}$")

PASSWORD_MAX_CHARS: int = 512


@dataclass(frozen=True, slots=True)
class FieldIssue:
    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "msg": self.message}


def validate_login_input(
    username: str | None, employee_id: str | None, password: str | None
) -> List[FieldIssue]:
    issues: List[FieldIssue] = []
    if not USERNAME_PATTERN.fullmatch(username or ""):
        issues.append(
            FieldIssue("username", "must be 3-30 letters, digits, '_' or '-'")
        )
    if not EMPLOYEE_ID_PATTERN.fullmatch(employee_id or ""):
        issues.append(
            FieldIssue("employee_id", "must be 6-10 uppercase letters or digits")
        )
    if not password:
        issues.append(FieldIssue("password", "must not be empty"))
    elif len(password) > PASSWORD_MAX_CHARS:
        issues.append(
            FieldIssue("password", f"must be at most {PASSWORD_MAX_CHARS} characters")
        )
    return issues


def validate_notes(notes: str | None, *, max_chars: int) -> List[FieldIssue]:
    if notes is not None and len(notes) > max_chars:
        return [FieldIssue("notes", f"must be at most {max_chars} characters")]
    return []


def validate_employee_profile(
    *,
    username: str,
    employee_id: str,
    email: str,
    full_name: str,
    department: str,
    phone_number: str | None = None,
) -> List[FieldIssue]:
    """Chequeos usados al crear empleados (seed / CLI)."""
    issues = validate_login_input(username, employee_id, "x")
    if not EMAIL_PATTERN.fullmatch(email or ""):
        issues.append(FieldIssue("email", "must be a valid email address"))
    if not PERSON_NAME_PATTERN.fullmatch(full_name or ""):
        issues.append(FieldIssue("full_name", "must be 3-50 letters or spaces"))
    if not PERSON_NAME_PATTERN.fullmatch(department or ""):
        issues.append(FieldIssue("department", "must be 3-50 letters or spaces"))
    if phone_number is not None and not PHONE_PATTERN.fullmatch(phone_number):
        issues.append(FieldIssue("phone_number", "must be a valid phone number"))
    return issues
