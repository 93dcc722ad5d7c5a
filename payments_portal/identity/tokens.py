"""
===============================================================================
TARJETA CRC — identity/tokens.py
===============================================================================

Módulo:
    Token Issuer (JWT HS256, access + refresh)

Responsabilidades:
    - Emitir access tokens (24h) y refresh tokens (7d) firmados.
    - Validar firma, expiración, issuer/audience y tipo (typ).
    - Reportar el tipo de falla como excepción distinta, para que el caller
      pueda decidir (ej: intentar refresh ante TokenExpired).

Colaboradores:
    - PyJWT: encode/decode.
    - crosscutting.config: secretos, TTLs, issuer/audience.
    - identity.employees: EmployeeRole.
    - application/usecases/auth/*, identity/employee_auth.py

Decisiones de diseño:
    - Claims: sub, employee_id, role (solo access), typ, iat, exp, jti, iss, aud.
    - La clave de verificación se elige según el typ declarado: un token de otro
      tipo falla con TokenTypeMismatch y no con SignatureInvalid.
    - Sin lista de revocación: el refresh token vale hasta su expiración.
===============================================================================
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Protocol
from uuid import UUID

import jwt

from ..crosscutting.config import (
    DEFAULT_JWT_AUDIENCE,
    DEFAULT_JWT_ISSUER,
    Settings,
)
from .employees import EmployeeRole

JWT_ALGORITHM: str = "HS256"

CLAIM_SUB: str = "sub"
CLAIM_EMPLOYEE_ID: str = "employee_id"
CLAIM_ROLE: str = "role"
CLAIM_TYP: str = "typ"
CLAIM_IAT: str = "iat"
CLAIM_EXP: str = "exp"
CLAIM_JTI: str = "jti"
CLAIM_ISS: str = "iss"
CLAIM_AUD: str = "aud"

_REQUIRED_CLAIMS = [CLAIM_SUB, CLAIM_TYP, CLAIM_IAT, CLAIM_EXP, CLAIM_ISS, CLAIM_AUD]


class TokenType(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


# ---------------------------------------------------------------------------
# Errores (el caller ramifica por tipo)
# ---------------------------------------------------------------------------
class TokenError(Exception):
    """Base de fallas de validación de token."""

    reason: str = "invalid_token"


class TokenExpired(TokenError):
    reason = "token_expired"


class TokenTypeMismatch(TokenError):
    reason = "token_type_mismatch"


class SignatureInvalid(TokenError):
    """Firma inválida o token mal formado."""

    reason = "signature_invalid"


class IssuerAudienceMismatch(TokenError):
    reason = "issuer_audience_mismatch"


class TokenSubject(Protocol):
    """Lo mínimo que necesita el issuer (Employee o EmployeeContext)."""

    id: UUID
    employee_id: str
    role: EmployeeRole


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """Claims validados de un token."""

    subject: UUID
    employee_id: str
    token_type: TokenType
    issued_at: datetime
    expires_at: datetime
    jti: str
    role: EmployeeRole | None = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenIssuer:
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      TokenIssuer

    Responsabilidades:
      - issue_access / issue_refresh
      - validate(token, expected_type) -> TokenClaims | TokenError

    Colaboradores:
      - jwt (PyJWT)
    ----------------------------------------------------------------------------
    """

    def __init__(
        self,
        *,
        secret: str,
        refresh_secret: str | None = None,
        access_ttl: timedelta = timedelta(hours=24),
        refresh_ttl: timedelta = timedelta(days=7),
        issuer: str = DEFAULT_JWT_ISSUER,
        audience: str = DEFAULT_JWT_AUDIENCE,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._keys = {
            TokenType.ACCESS: secret,
            TokenType.REFRESH: refresh_secret or secret,
        }
        self._ttls = {TokenType.ACCESS: access_ttl, TokenType.REFRESH: refresh_ttl}
        self._issuer = issuer
        self._audience = audience
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenIssuer":
        return cls(
            secret=settings.jwt_secret,
            refresh_secret=settings.get_refresh_secret(),
            access_ttl=timedelta(minutes=settings.jwt_access_ttl_minutes),
            refresh_ttl=timedelta(days=settings.jwt_refresh_ttl_days),
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
        )

    @property
    def access_ttl_seconds(self) -> int:
        return int(self._ttls[TokenType.ACCESS].total_seconds())

    def issue_access(self, identity: TokenSubject) -> str:
        return self._issue(identity, TokenType.ACCESS)

    def issue_refresh(self, identity: TokenSubject) -> str:
        return self._issue(identity, TokenType.REFRESH)

    def _issue(self, identity: TokenSubject, token_type: TokenType) -> str:
        now = self._clock()
        payload: dict[str, object] = {
            CLAIM_SUB: str(identity.id),
            CLAIM_EMPLOYEE_ID: identity.employee_id,
            CLAIM_TYP: token_type.value,
            CLAIM_IAT: int(now.timestamp()),
            CLAIM_EXP: int((now + self._ttls[token_type]).timestamp()),
            CLAIM_JTI: secrets.token_hex(16),
            CLAIM_ISS: self._issuer,
            CLAIM_AUD: self._audience,
        }
        if token_type == TokenType.ACCESS:
            payload[CLAIM_ROLE] = EmployeeRole(identity.role).value

        return jwt.encode(payload, self._keys[token_type], algorithm=JWT_ALGORITHM)

    def validate(self, token: str, expected_type: TokenType) -> TokenClaims:
        """
        Valida un token del tipo esperado.

        Raises:
            TokenExpired, TokenTypeMismatch, SignatureInvalid, IssuerAudienceMismatch
        """
        declared_type = self._declared_type(token)

        try:
            payload = jwt.decode(
                token,
                self._keys[declared_type],
                algorithms=[JWT_ALGORITHM],
                issuer=self._issuer,
                audience=self._audience,
                options={"require": _REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpired("Token has expired") from exc
        except (jwt.InvalidIssuerError, jwt.InvalidAudienceError) as exc:
            raise IssuerAudienceMismatch("Token issuer or audience mismatch") from exc
        except jwt.InvalidTokenError as exc:
            raise SignatureInvalid("Token signature is invalid") from exc

        if declared_type != expected_type:
            raise TokenTypeMismatch(
                f"Expected {expected_type.value} token, got {declared_type.value}"
            )

        return self._to_claims(payload, declared_type)

    @staticmethod
    def _declared_type(token: str) -> TokenType:
        try:
            unverified = jwt.decode(
                token,
                options={"verify_signature": False},
                algorithms=[JWT_ALGORITHM],
            )
            return TokenType(unverified.get(CLAIM_TYP))
        except (jwt.InvalidTokenError, ValueError) as exc:
            raise SignatureInvalid("Token is malformed") from exc

    @staticmethod
    def _to_claims(payload: dict, token_type: TokenType) -> TokenClaims:
        try:
            subject = UUID(str(payload[CLAIM_SUB]))
            role_value = payload.get(CLAIM_ROLE)
            role = EmployeeRole(str(role_value)) if role_value is not None else None
        except ValueError as exc:
            raise SignatureInvalid("Token claims are malformed") from exc

        if token_type == TokenType.ACCESS and role is None:
            raise SignatureInvalid("Access token is missing its role claim")

        return TokenClaims(
            subject=subject,
            employee_id=str(payload.get(CLAIM_EMPLOYEE_ID) or ""),
            token_type=token_type,
            issued_at=datetime.fromtimestamp(int(payload[CLAIM_IAT]), tz=timezone.utc),
            expires_at=datetime.fromtimestamp(int(payload[CLAIM_EXP]), tz=timezone.utc),
            jti=str(payload.get(CLAIM_JTI) or ""),
            role=role,
        )
