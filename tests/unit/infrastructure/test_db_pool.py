"""
Name: Database Pool Lifecycle Tests
"""

from unittest.mock import Mock

import pytest

from payments_portal.infrastructure.db import (
    PoolNotInitializedError,
    SessionSettings,
    close_pool,
    get_pool,
)

pytestmark = pytest.mark.unit


def test_get_pool_requires_init():
    with pytest.raises(PoolNotInitializedError):
        get_pool()


def test_close_pool_is_idempotent():
    close_pool()
    close_pool()


def test_session_settings_pin_timezone_and_timeouts():
    conn = Mock()

    SessionSettings(statement_timeout_ms=1500, lock_timeout_ms=-1).apply(conn)

    sql, params = conn.execute.call_args.args
    assert "TimeZone" in sql and "lock_timeout" in sql
    assert params == ("UTC", "1500", "0")
    conn.commit.assert_called_once()
