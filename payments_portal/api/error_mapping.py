"""
===============================================================================
TARJETA CRC — api/error_mapping.py (UseCase Error -> HTTP RFC7807)
===============================================================================

Responsabilidades:
  - Traducir AuthErrorCode / TransactionErrorCode a AppHTTPException.
  - Centralizar el mapeo para evitar duplicación en routers.
  - Mantener vagas las fallas de identidad (anti-enumeración).

Reglas:
  - Los use cases devuelven errores tipados (code + message).
  - La API traduce a RFC7807 (crosscutting.error_responses).
  - Un código desconocido se trata como INTERNAL_FAILURE (500).

Colaboradores:
  - application.usecases.auth (AuthError)
  - application.usecases.transactions (TransactionError)
  - crosscutting.error_responses (factories)
===============================================================================
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from uuid import UUID

from ..application.usecases.auth import AuthError, AuthErrorCode
from ..application.usecases.transactions import (
    TransactionError,
    TransactionErrorCode,
)
from ..crosscutting.error_responses import (
    AppHTTPException,
    account_locked,
    internal_failure,
    invalid_credentials,
    invalid_input,
    invalid_refresh_token,
    invalid_state,
    limit_exceeded,
    not_found,
    partial_batch_invalid,
    timeout,
)


def _retry_after_seconds(locked_until: datetime | None) -> int | None:
    if locked_until is None:
        return None
    remaining = (locked_until - datetime.now(timezone.utc)).total_seconds()
    return max(1, math.ceil(remaining))


def auth_error_to_http(error: AuthError) -> AppHTTPException:
    """Traduce AuthErrorCode -> HTTP."""
    code = error.code
    if code == AuthErrorCode.INVALID_INPUT:
        return invalid_input(error.message, error.errors or None)
    if code == AuthErrorCode.INVALID_CREDENTIALS:
        return invalid_credentials()
    if code == AuthErrorCode.ACCOUNT_LOCKED:
        return account_locked(_retry_after_seconds(error.locked_until))
    if code == AuthErrorCode.INVALID_REFRESH_TOKEN:
        return invalid_refresh_token()
    if code == AuthErrorCode.NOT_FOUND:
        return not_found("Employee", "current")
    if code == AuthErrorCode.TIMEOUT:
        return timeout(error.message)
    return internal_failure()


def transaction_error_to_http(
    error: TransactionError, *, transaction_id: UUID | None = None
) -> AppHTTPException:
    """Traduce TransactionErrorCode -> HTTP."""
    code = error.code
    if code == TransactionErrorCode.INVALID_INPUT:
        return invalid_input(error.message, error.errors or None)
    if code == TransactionErrorCode.NOT_FOUND:
        return not_found("Transaction", str(transaction_id or "unknown"))
    if code == TransactionErrorCode.INVALID_STATE:
        return invalid_state(error.message)
    if code == TransactionErrorCode.LIMIT_EXCEEDED:
        return limit_exceeded(error.message)
    if code == TransactionErrorCode.PARTIAL_BATCH_INVALID:
        return partial_batch_invalid(
            error.message,
            [{"transaction_id": str(tx_id)} for tx_id in error.offending_ids],
        )
    if code == TransactionErrorCode.TIMEOUT:
        return timeout(error.message)
    return internal_failure()
