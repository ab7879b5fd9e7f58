"""Tests for the asyncpg pool helpers that need no server."""

import pytest

from core import db


def test_dsn_drops_libpq_only_params():
    dsn = db.asyncpg_dsn("postgres://u:p@db:5432/ekoru?sslmode=require&application_name=admin&schema=public")

    assert dsn == "postgres://u:p@db:5432/ekoru?application_name=admin"


def test_dsn_without_query_is_unchanged():
    assert db.asyncpg_dsn(" postgres://u:p@db/ekoru ") == "postgres://u:p@db/ekoru"


def test_missing_dsn_is_an_error():
    with pytest.raises(RuntimeError, match="DATABASE_URL"):
        db.asyncpg_dsn("")


def test_helpers_require_an_open_pool():
    with pytest.raises(RuntimeError, match="not initialized"):
        db.pool()
