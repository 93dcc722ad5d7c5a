"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/employee.py
============================================================
Class: PostgresEmployeeRepository

Responsibilities:
  - Credential Store sobre la tabla `employees`.
  - Lookup activo por (username, employee_id) y por id (sujeto del token).
  - Incremento de fallos + bloqueo en UN solo UPDATE (linearizable por fila).
  - Mapear filas crudas -> Employee y validar EmployeeRole.

Collaborators:
  - PostgresRepositoryBase (pool + errores)
  - identity.employees.Employee / EmployeeRole

Constraints / Notes:
  - Retorna None cuando no existe el recurso (no exception por “not found”).
  - Rol persistido inválido -> DatabaseError (drift de esquema o datos).
  - SQL parametrizado siempre.
============================================================
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from ....crosscutting.exceptions import DatabaseError
from ....identity.employees import Employee, EmployeeRole
from ._base import PostgresRepositoryBase

# R: Lista explícita de columnas: contrato estable con la migración 001.
_EMPLOYEE_COLUMNS = (
    "id, employee_id, username, email, full_name, department, phone_number, "
    "password_hash, salt, role, verification_limit, is_active, "
    "failed_login_attempts, locked_until, last_login_at, password_changed_at, "
    "created_at, updated_at"
)


def _row_to_employee(row: tuple) -> Employee:
    try:
        role = EmployeeRole(row[9])
    except ValueError as exc:
        raise DatabaseError(f"Invalid employee role in database: {row[9]}") from exc

    return Employee(
        id=row[0],
        employee_id=row[1],
        username=row[2],
        email=row[3],
        full_name=row[4],
        department=row[5],
        phone_number=row[6],
        password_hash=row[7],
        salt=row[8],
        role=role,
        verification_limit=row[10],
        is_active=row[11],
        failed_login_attempts=row[12],
        locked_until=row[13],
        last_login_at=row[14],
        password_changed_at=row[15],
        created_at=row[16],
        updated_at=row[17],
    )


class PostgresEmployeeRepository(PostgresRepositoryBase):
    """Repositorio PostgreSQL del Credential Store (employees)."""

    def find_active_by_username_and_employee_id(
        self, username: str, employee_id: str
    ) -> Optional[Employee]:
        row = self._fetchone(
            query=f"""
                SELECT {_EMPLOYEE_COLUMNS}
                FROM employees
                WHERE username = %s AND employee_id = %s AND is_active = TRUE
            """,
            params=(username, employee_id),
            log_msg="PostgresEmployeeRepository: lookup by credentials failed",
            log_extra={"employee_id": employee_id},
        )
        return _row_to_employee(row) if row else None

    def get_by_id(self, employee_pk: UUID) -> Optional[Employee]:
        row = self._fetchone(
            query=f"SELECT {_EMPLOYEE_COLUMNS} FROM employees WHERE id = %s",
            params=(employee_pk,),
            log_msg="PostgresEmployeeRepository: get_by_id failed",
            log_extra={"employee_pk": str(employee_pk)},
        )
        return _row_to_employee(row) if row else None

    def save(self, employee: Employee) -> Employee:
        row = self._fetchone(
            query=f"""
                INSERT INTO employees ({_EMPLOYEE_COLUMNS})
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s,
                        %s, %s, COALESCE(%s, now()), now())
                ON CONFLICT (id) DO UPDATE SET
                    employee_id = EXCLUDED.employee_id,
                    username = EXCLUDED.username,
                    email = EXCLUDED.email,
                    full_name = EXCLUDED.full_name,
                    department = EXCLUDED.department,
                    phone_number = EXCLUDED.phone_number,
                    password_hash = EXCLUDED.password_hash,
                    salt = EXCLUDED.salt,
                    role = EXCLUDED.role,
                    verification_limit = EXCLUDED.verification_limit,
                    is_active = EXCLUDED.is_active,
                    failed_login_attempts = EXCLUDED.failed_login_attempts,
                    locked_until = EXCLUDED.locked_until,
                    last_login_at = EXCLUDED.last_login_at,
                    password_changed_at = EXCLUDED.password_changed_at,
                    updated_at = now()
                RETURNING {_EMPLOYEE_COLUMNS}
            """,
            params=(
                employee.id,
                employee.employee_id,
                employee.username,
                employee.email,
                employee.full_name,
                employee.department,
                employee.phone_number,
                employee.password_hash,
                employee.salt,
                employee.role.value,
                employee.verification_limit,
                employee.is_active,
                employee.failed_login_attempts,
                employee.locked_until,
                employee.last_login_at,
                employee.password_changed_at,
                employee.created_at,
            ),
            log_msg="PostgresEmployeeRepository: save failed",
            log_extra={"employee_id": employee.employee_id},
        )
        if not row:
            raise DatabaseError("Employee upsert returned no row")
        return _row_to_employee(row)

    def register_failed_login(
        self,
        employee_pk: UUID,
        *,
        now: datetime,
        max_attempts: int,
        lock_until: datetime,
    ) -> Optional[Employee]:
        # En SET las columnas leen el valor previo: el CASE ve el contador viejo.
        row = self._fetchone(
            query=f"""
                UPDATE employees SET
                    failed_login_attempts = failed_login_attempts + 1,
                    locked_until = CASE
                        WHEN failed_login_attempts + 1 >= %s
                             AND (locked_until IS NULL OR locked_until <= %s)
                        THEN %s
                        ELSE locked_until
                    END,
                    updated_at = %s
                WHERE id = %s
                RETURNING {_EMPLOYEE_COLUMNS}
            """,
            params=(max_attempts, now, lock_until, now, employee_pk),
            log_msg="PostgresEmployeeRepository: register_failed_login failed",
            log_extra={"employee_pk": str(employee_pk)},
        )
        return _row_to_employee(row) if row else None

    def register_successful_login(
        self, employee_pk: UUID, *, now: datetime
    ) -> Optional[Employee]:
        row = self._fetchone(
            query=f"""
                UPDATE employees SET
                    failed_login_attempts = 0,
                    locked_until = NULL,
                    last_login_at = %s,
                    updated_at = %s
                WHERE id = %s
                RETURNING {_EMPLOYEE_COLUMNS}
            """,
            params=(now, now, employee_pk),
            log_msg="PostgresEmployeeRepository: register_successful_login failed",
            log_extra={"employee_pk": str(employee_pk)},
        )
        return _row_to_employee(row) if row else None
