"""
Name: Demo Employee Bootstrap Script

Responsibilities:
  - Create a portal employee (idempotent by employee_id / username)
  - Hash passwords with Argon2id + per-employee salt
  - Store the employee in PostgreSQL

Usage:
  DATABASE_URL=postgresql://... python scripts/create_demo_employee.py
  (defaults: EMP001 / jsmith / Demo123!@#)
"""

from __future__ import annotations

import argparse
import getpass
import os
import sys
from decimal import Decimal, InvalidOperation
from uuid import uuid4

import psycopg

from payments_portal.crosscutting.config import get_settings
from payments_portal.identity.employees import EmployeeRole
from payments_portal.identity.passwords import Argon2PasswordHasher
from payments_portal.identity.validation import validate_employee_profile


def _require_database_url() -> str:
    db_url = os.getenv("DATABASE_URL")
    if not db_url:
        raise SystemExit("DATABASE_URL is required to create an employee.")
    return db_url


def _prompt_password() -> str:
    password = getpass.getpass("Password: ")
    if not password:
        raise SystemExit("Password is required.")
    confirm = getpass.getpass("Confirm password: ")
    if password != confirm:
        raise SystemExit("Passwords do not match.")
    return password


def _parse_limit(raw: str) -> Decimal:
    try:
        limit = Decimal(raw)
    except InvalidOperation as exc:
        raise argparse.ArgumentTypeError(f"invalid amount: {raw}") from exc
    if limit < 0:
        raise argparse.ArgumentTypeError("verification limit must be >= 0")
    return limit


def _parse_args() -> argparse.Namespace:
    settings = get_settings()
    argv = sys.argv[1:]
    if argv and argv[0] == "--":
        argv = argv[1:]
    parser = argparse.ArgumentParser(
        description="Create a portal employee (idempotent)."
    )
    parser.add_argument("--employee-id", default=settings.dev_seed_employee_id)
    parser.add_argument("--username", default=settings.dev_seed_username)
    parser.add_argument("--email", default=settings.dev_seed_email)
    parser.add_argument("--full-name", default=settings.dev_seed_full_name)
    parser.add_argument("--department", default=settings.dev_seed_department)
    parser.add_argument("--phone-number", default=None)
    parser.add_argument(
        "--password",
        default=None,
        help="Employee password (omit to use the demo default; --prompt to type it)",
    )
    parser.add_argument(
        "--prompt",
        action="store_true",
        help="Prompt for the password securely",
    )
    parser.add_argument(
        "--role",
        default=EmployeeRole.EMPLOYEE.value,
        choices=[role.value for role in EmployeeRole],
        help="Employee role (default: EMPLOYEE)",
    )
    parser.add_argument(
        "--verification-limit",
        type=_parse_limit,
        default=settings.default_verification_limit,
        help="Max amount this employee may approve",
    )
    return parser.parse_args(argv)


def _maybe_create_employee(db_url: str, args: argparse.Namespace, password: str) -> None:
    with psycopg.connect(db_url) as conn:
        with conn.cursor() as cur:
            cur.execute(
                """
                SELECT id, employee_id, username, is_active
                FROM employees
                WHERE employee_id = %s OR username = %s
                """,
                (args.employee_id, args.username),
            )
            row = cur.fetchone()
            if row:
                print(
                    "Employee already exists: "
                    f"id={row[0]} employee_id={row[1]} username={row[2]} "
                    f"active={row[3]}"
                )
                return

            settings = get_settings()
            hasher = Argon2PasswordHasher(
                memory_cost=settings.argon2_memory_cost,
                parallelism=settings.argon2_parallelism,
                time_cost=settings.argon2_time_cost,
            )
            material = hasher.new_password(password)
            employee_pk = uuid4()
            cur.execute(
                """
                INSERT INTO employees (
                    id, employee_id, username, email, full_name, department,
                    phone_number, password_hash, salt, role, verification_limit,
                    is_active, password_changed_at
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, TRUE, %s)
                """,
                (
                    employee_pk,
                    args.employee_id,
                    args.username,
                    args.email,
                    args.full_name,
                    args.department,
                    args.phone_number,
                    material.password_hash,
                    material.salt,
                    args.role,
                    args.verification_limit,
                    material.changed_at,
                ),
            )
            conn.commit()
            print(
                f"Created employee: id={employee_pk} employee_id={args.employee_id} "
                f"username={args.username} role={args.role}"
            )


def main() -> None:
    args = _parse_args()
    issues = validate_employee_profile(
        username=args.username,
        employee_id=args.employee_id,
        email=args.email,
        full_name=args.full_name,
        department=args.department,
        phone_number=args.phone_number,
    )
    if issues:
        details = "; ".join(f"{issue.field}: {issue.message}" for issue in issues)
        raise SystemExit(f"Invalid employee data: {details}")

    db_url = _require_database_url()
    if args.prompt:
        password = _prompt_password()
    else:
        password = args.password or get_settings().dev_seed_password
    _maybe_create_employee(db_url, args, password)


if __name__ == "__main__":
    main()
