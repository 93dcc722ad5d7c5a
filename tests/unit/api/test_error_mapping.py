"""
Name: Use Case Error -> HTTP Mapping Tests
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from payments_portal.api.error_mapping import auth_error_to_http, transaction_error_to_http
from payments_portal.application.usecases.auth import AuthError, AuthErrorCode
from payments_portal.application.usecases.transactions import (
    TransactionError,
    TransactionErrorCode,
)
from payments_portal.crosscutting.error_responses import ErrorCode

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "code, status, error_code",
    [
        (AuthErrorCode.INVALID_INPUT, 422, ErrorCode.INVALID_INPUT),
        (AuthErrorCode.INVALID_CREDENTIALS, 401, ErrorCode.INVALID_CREDENTIALS),
        (AuthErrorCode.INVALID_REFRESH_TOKEN, 401, ErrorCode.INVALID_REFRESH_TOKEN),
        (AuthErrorCode.NOT_FOUND, 404, ErrorCode.NOT_FOUND),
        (AuthErrorCode.TIMEOUT, 504, ErrorCode.TIMEOUT),
        (AuthErrorCode.INTERNAL_FAILURE, 500, ErrorCode.INTERNAL_FAILURE),
    ],
)
def test_auth_mapping(code, status, error_code):
    exc = auth_error_to_http(AuthError(code=code, message="m"))
    assert exc.status_code == status
    assert exc.code == error_code


def test_account_locked_sets_retry_after():
    locked_until = datetime.now(timezone.utc) + timedelta(minutes=10)

    exc = auth_error_to_http(
        AuthError(code=AuthErrorCode.ACCOUNT_LOCKED, message="m", locked_until=locked_until)
    )

    assert exc.status_code == 423
    assert 590 <= int(exc.headers["Retry-After"]) <= 600


@pytest.mark.parametrize(
    "code, status",
    [
        (TransactionErrorCode.INVALID_INPUT, 422),
        (TransactionErrorCode.NOT_FOUND, 404),
        (TransactionErrorCode.INVALID_STATE, 409),
        (TransactionErrorCode.LIMIT_EXCEEDED, 403),
        (TransactionErrorCode.PARTIAL_BATCH_INVALID, 409),
        (TransactionErrorCode.TIMEOUT, 504),
    ],
)
def test_transaction_mapping(code, status):
    exc = transaction_error_to_http(TransactionError(code=code, message="m"))
    assert exc.status_code == status
    assert exc.code.value == code.value


def test_partial_batch_lists_offending_ids():
    offending = [uuid4(), uuid4()]

    exc = transaction_error_to_http(
        TransactionError(
            code=TransactionErrorCode.PARTIAL_BATCH_INVALID,
            message="m",
            offending_ids=offending,
        )
    )

    assert exc.errors == [{"transaction_id": str(tx_id)} for tx_id in offending]
