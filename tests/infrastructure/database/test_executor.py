"""Tests for SqlAlchemyExecutor on a transactional SQLite engine."""

from __future__ import annotations

import pytest
from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError

from dbmeta.infrastructure.database.executor import SqlAlchemyExecutor


class TestSqlAlchemyExecutor:
    def test_commit_makes_changes_visible(self, sqlite_engine: Engine) -> None:
        executor = SqlAlchemyExecutor(sqlite_engine)
        txn = executor.begin()
        executor.execute("CREATE TABLE t (id INTEGER)", txn)
        executor.commit(txn)
        assert "t" in inspect(sqlite_engine).get_table_names()
        assert txn.connection.closed

    def test_rollback_discards_changes(self, sqlite_engine: Engine) -> None:
        executor = SqlAlchemyExecutor(sqlite_engine)
        txn = executor.begin()
        executor.execute("CREATE TABLE t (id INTEGER)", txn)
        executor.rollback(txn)
        assert "t" not in inspect(sqlite_engine).get_table_names()
        assert txn.connection.closed

    def test_execute_error_propagates(self, sqlite_engine: Engine) -> None:
        executor = SqlAlchemyExecutor(sqlite_engine)
        txn = executor.begin()
        with pytest.raises(OperationalError):
            executor.execute("INSERT INTO missing VALUES (1)", txn)
        executor.rollback(txn)

    def test_colons_passed_through(self, sqlite_engine: Engine) -> None:
        executor = SqlAlchemyExecutor(sqlite_engine)
        txn = executor.begin()
        executor.execute("CREATE TABLE t (v TEXT)", txn)
        executor.execute("INSERT INTO t VALUES ('a:b')", txn)
        executor.commit(txn)
        with sqlite_engine.connect() as conn:
            assert conn.exec_driver_sql("SELECT v FROM t").scalar() == "a:b"
