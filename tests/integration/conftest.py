"""
Name: Integration Test DB Setup

Responsibilities:
  - Skip integration tests unless DATABASE_URL is set
  - Run Alembic migrations once per test session
  - Provide a dedicated psycopg pool and clean tables between tests

Notes:
  - Uses DATABASE_URL from environment (see alembic/env.py)
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from psycopg_pool import ConnectionPool

REPO_ROOT = Path(__file__).resolve().parents[2]


def pytest_collection_modifyitems(config, items):
    if os.getenv("DATABASE_URL"):
        return
    skip = pytest.mark.skip(reason="DATABASE_URL not set (integration tests)")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


@pytest.fixture(scope="session")
def database_url() -> str:
    return os.environ["DATABASE_URL"]


@pytest.fixture(scope="session")
def migrated_db(database_url: str) -> str:
    config = Config(str(REPO_ROOT / "alembic.ini"))
    config.set_main_option("script_location", str(REPO_ROOT / "alembic"))
    command.upgrade(config, "head")
    return database_url


@pytest.fixture(scope="session")
def db_pool(migrated_db: str):
    pool = ConnectionPool(conninfo=migrated_db, min_size=1, max_size=4, open=True)
    yield pool
    pool.close()


@pytest.fixture(autouse=True)
def _clean_tables(request):
    if "db_pool" not in request.fixturenames:
        yield
        return
    pool = request.getfixturevalue("db_pool")
    with pool.connection() as conn:
        conn.execute("TRUNCATE audit_events, transactions, employees CASCADE")
    yield
