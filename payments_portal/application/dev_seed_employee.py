# =============================================================================
# FILE: application/dev_seed_employee.py
# =============================================================================
"""
===============================================================================
TASK: Dev Seed Demo Employee (local/test only)
===============================================================================

Name:
    Dev Seed Demo Employee

Qué es:
    Asegura que exista el empleado demo (EMP001 / jsmith) para desarrollo y
    pruebas end-to-end cuando DEV_SEED_DEMO_EMPLOYEE está habilitado.

Seguridad:
    - Guard estricto: solo corre en entornos local/development/test.
    - El password NUNCA se loguea.

Patrones:
    - Task orchestration (seed)
    - Dependency Injection (repo + hasher)
    - Fail-fast guard (safety boundary)
    - Idempotencia (si existe, no se toca)

CRC:
    Component: ensure_demo_employee
    Responsibilities:
      - Validar guard de ambiente
      - Validar formato del perfil demo
      - Crear el empleado si falta
    Collaborators:
      - EmployeeRepository
      - Argon2PasswordHasher.new_password
      - Settings (dev_seed_*)
===============================================================================
"""

from __future__ import annotations

from typing import Final
from uuid import uuid4

from ..crosscutting.config import Settings
from ..crosscutting.logger import logger
from ..domain.repositories import EmployeeRepository
from ..identity.employees import Employee, EmployeeRole
from ..identity.passwords import Argon2PasswordHasher
from ..identity.validation import validate_employee_profile

_SEED_ALLOWED_ENVS: Final[frozenset[str]] = frozenset(
    {"local", "development", "test", "testing", "ci"}
)


def _assert_allowed_environment(settings: Settings) -> None:
    env = (settings.app_env or "").strip().lower()
    if env not in _SEED_ALLOWED_ENVS:
        raise RuntimeError(
            f"FATAL: DEV_SEED_DEMO_EMPLOYEE is enabled but ENV is '{env}'. "
            "Safety guard prevents seeding outside local/test environments."
        )


def build_demo_employee(
    settings: Settings, password_hasher: Argon2PasswordHasher
) -> Employee:
    """Construye (sin persistir) el empleado demo a partir de settings."""
    issues = validate_employee_profile(
        username=settings.dev_seed_username,
        employee_id=settings.dev_seed_employee_id,
        email=settings.dev_seed_email,
        full_name=settings.dev_seed_full_name,
        department=settings.dev_seed_department,
    )
    if issues:
        fields = ", ".join(issue.field for issue in issues)
        raise ValueError(f"Dev seed employee has invalid fields: {fields}")
    if not settings.dev_seed_password:
        raise ValueError("Dev seed employee is enabled but password is empty")

    material = password_hasher.new_password(settings.dev_seed_password)
    return Employee(
        id=uuid4(),
        employee_id=settings.dev_seed_employee_id,
        username=settings.dev_seed_username,
        email=settings.dev_seed_email,
        full_name=settings.dev_seed_full_name,
        department=settings.dev_seed_department,
        password_hash=material.password_hash,
        salt=material.salt,
        role=EmployeeRole.EMPLOYEE,
        verification_limit=settings.default_verification_limit,
        password_changed_at=material.changed_at,
    )


def ensure_demo_employee(
    settings: Settings,
    *,
    employee_repo: EmployeeRepository,
    password_hasher: Argon2PasswordHasher,
) -> Employee | None:
    """
    Ensure the demo employee exists if configured.

    Behavior:
      - If disabled: no-op (None)
      - If enabled: create when missing, otherwise return the existing record
    """
    if not settings.dev_seed_demo_employee:
        return None

    _assert_allowed_environment(settings)

    existing = employee_repo.find_active_by_username_and_employee_id(
        settings.dev_seed_username, settings.dev_seed_employee_id
    )
    if existing is not None:
        logger.info(
            "Dev seed employee: already exists; skipping",
            extra={"employee_id": existing.employee_id},
        )
        return existing

    created = employee_repo.save(build_demo_employee(settings, password_hasher))
    logger.info(
        "Dev seed employee: created",
        extra={"employee_id": created.employee_id, "username": created.username},
    )
    return created
