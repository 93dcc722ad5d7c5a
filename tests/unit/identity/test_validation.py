"""
Name: Boundary Validation Tests

Responsibilities:
  - Validate login field formats (username / employee_id / password)
  - Validate notes and profile fields used by seed/CLI
"""

import pytest

from payments_portal.identity.validation import (
    PASSWORD_MAX_CHARS,
    validate_employee_profile,
    validate_login_input,
    validate_notes,
)

pytestmark = pytest.mark.unit


def _fields(issues):
    return [issue.field for issue in issues]


def test_valid_login_input():
    assert validate_login_input("jsmith", "EMP001", "Demo123!@#") == []


@pytest.mark.parametrize("username", ["", "ab", "a" * 31, "john smith", "jöhn", None])
def test_invalid_usernames(username):
    assert _fields(validate_login_input(username, "EMP001", "pw")) == ["username"]


@pytest.mark.parametrize("employee_id", ["", "EMP01", "emp001", "EMP0000000001", "EMP-01"])
def test_invalid_employee_ids(employee_id):
    assert _fields(validate_login_input("jsmith", employee_id, "pw")) == ["employee_id"]


def test_password_must_not_be_empty_or_huge():
    assert _fields(validate_login_input("jsmith", "EMP001", "")) == ["password"]
    too_long = "x" * (PASSWORD_MAX_CHARS + 1)
    assert _fields(validate_login_input("jsmith", "EMP001", too_long)) == ["password"]


def test_reports_every_offending_field():
    issues = validate_login_input("x", "bad", "")
    assert _fields(issues) == ["username", "employee_id", "password"]
    assert issues[0].to_dict() == {"field": "username", "msg": issues[0].message}


def test_notes_limit():
    assert validate_notes(None, max_chars=5) == []
    assert validate_notes("12345", max_chars=5) == []
    assert _fields(validate_notes("123456", max_chars=5)) == ["notes"]


def test_employee_profile_validation():
    ok = validate_employee_profile(
        username="jsmith",
        employee_id="EMP001",
        email="john.smith@bank.com",
        full_name="John Smith",
        department="International Payments",
        phone_number="+14155550100",
    )
    assert ok == []

    bad = validate_employee_profile(
        username="jsmith",
        employee_id="EMP001",
        email="not-an-email",
        full_name="J0hn",
        department="IT",
        phone_number="abc",
    )
    assert _fields(bad) == ["email", "full_name", "department", "phone_number"]
