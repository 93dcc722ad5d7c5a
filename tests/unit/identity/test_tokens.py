"""
Name: Token Issuer Tests

Responsibilities:
  - Validate access/refresh issuance and claims
  - Ensure each failure mode maps to its own TokenError
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import jwt
import pytest

from payments_portal.crosscutting.config import DEFAULT_JWT_AUDIENCE, DEFAULT_JWT_ISSUER
from payments_portal.identity.employees import EmployeeContext, EmployeeRole
from payments_portal.identity.tokens import (
    IssuerAudienceMismatch,
    SignatureInvalid,
    TokenExpired,
    TokenIssuer,
    TokenType,
    TokenTypeMismatch,
)

pytestmark = pytest.mark.unit

ACCESS_SECRET = "unit-access-secret-0123456789abcdef"
REFRESH_SECRET = "unit-refresh-secret-0123456789abcdef"


def _identity(role: EmployeeRole = EmployeeRole.EMPLOYEE) -> EmployeeContext:
    return EmployeeContext(
        id=uuid4(),
        employee_id="EMP001",
        username="jsmith",
        full_name="John Smith",
        role=role,
        verification_limit=Decimal("100000"),
    )


def test_access_token_claims(token_issuer):
    identity = _identity(EmployeeRole.SUPERVISOR)
    token = token_issuer.issue_access(identity)

    claims = token_issuer.validate(token, TokenType.ACCESS)

    assert claims.subject == identity.id
    assert claims.employee_id == "EMP001"
    assert claims.role == EmployeeRole.SUPERVISOR
    assert claims.token_type == TokenType.ACCESS
    assert claims.expires_at - claims.issued_at == timedelta(hours=24)
    assert claims.jti


def test_refresh_token_claims(token_issuer):
    identity = _identity()
    token = token_issuer.issue_refresh(identity)

    claims = token_issuer.validate(token, TokenType.REFRESH)

    assert claims.subject == identity.id
    assert claims.role is None
    assert claims.expires_at - claims.issued_at == timedelta(days=7)


def test_tokens_have_unique_jti(token_issuer):
    identity = _identity()
    first = token_issuer.validate(token_issuer.issue_access(identity), TokenType.ACCESS)
    second = token_issuer.validate(token_issuer.issue_access(identity), TokenType.ACCESS)
    assert first.jti != second.jti


def test_access_ttl_seconds(token_issuer):
    assert token_issuer.access_ttl_seconds == 24 * 60 * 60


def test_refresh_token_rejected_as_access(token_issuer):
    token = token_issuer.issue_refresh(_identity())

    with pytest.raises(TokenTypeMismatch):
        token_issuer.validate(token, TokenType.ACCESS)


def test_access_token_rejected_as_refresh(token_issuer):
    token = token_issuer.issue_access(_identity())

    with pytest.raises(TokenTypeMismatch):
        token_issuer.validate(token, TokenType.REFRESH)


def test_expired_token():
    past = datetime.now(timezone.utc) - timedelta(days=2)
    issuer = TokenIssuer(secret=ACCESS_SECRET, clock=lambda: past)
    token = issuer.issue_access(_identity())

    current = TokenIssuer(secret=ACCESS_SECRET)
    with pytest.raises(TokenExpired) as excinfo:
        current.validate(token, TokenType.ACCESS)
    assert excinfo.value.reason == "token_expired"


def test_wrong_signing_key(token_issuer):
    other = TokenIssuer(secret="some-other-secret-0123456789abcdef")
    token = other.issue_access(_identity())

    with pytest.raises(SignatureInvalid):
        token_issuer.validate(token, TokenType.ACCESS)


def test_tampered_token(token_issuer):
    token = token_issuer.issue_access(_identity())
    header, payload, signature = token.split(".")
    tampered = ".".join([header, payload, signature[::-1]])

    with pytest.raises(SignatureInvalid):
        token_issuer.validate(tampered, TokenType.ACCESS)


@pytest.mark.parametrize("garbage", ["", "abc", "a.b.c", "Bearer xyz"])
def test_malformed_tokens(token_issuer, garbage):
    with pytest.raises(SignatureInvalid):
        token_issuer.validate(garbage, TokenType.ACCESS)


def test_issuer_mismatch():
    token = TokenIssuer(secret=ACCESS_SECRET, issuer="someone-else").issue_access(
        _identity()
    )

    with pytest.raises(IssuerAudienceMismatch):
        TokenIssuer(secret=ACCESS_SECRET).validate(token, TokenType.ACCESS)


def test_audience_mismatch():
    token = TokenIssuer(secret=ACCESS_SECRET, audience="other-app").issue_access(
        _identity()
    )

    with pytest.raises(IssuerAudienceMismatch):
        TokenIssuer(secret=ACCESS_SECRET).validate(token, TokenType.ACCESS)


def test_access_token_without_role_is_invalid(token_issuer):
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(uuid4()),
        "employee_id": "EMP001",
        "typ": "access",
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(hours=1)).timestamp()),
        "jti": "x",
        "iss": DEFAULT_JWT_ISSUER,
        "aud": DEFAULT_JWT_AUDIENCE,
    }
    token = jwt.encode(payload, ACCESS_SECRET, algorithm="HS256")

    with pytest.raises(SignatureInvalid):
        token_issuer.validate(token, TokenType.ACCESS)


def test_refresh_secret_falls_back_to_access_secret():
    issuer = TokenIssuer(secret=ACCESS_SECRET)
    token = issuer.issue_refresh(_identity())
    assert issuer.validate(token, TokenType.REFRESH).token_type == TokenType.REFRESH


def test_empty_secret_rejected():
    with pytest.raises(ValueError):
        TokenIssuer(secret="")
