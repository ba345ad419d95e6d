"""Statement executors, the capability the transactional applier drives.

An executor opens one transaction, runs raw SQL strings inside it, and
commits or rolls it back. :class:`SqlAlchemyExecutor` is the real one;
tests substitute fakes that record calls.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine, RootTransaction


class StatementExecutor(Protocol):
    """begin / execute / commit / rollback over one transaction handle."""

    def begin(self) -> Any: ...

    def execute(self, sql: str, txn: Any) -> None: ...

    def commit(self, txn: Any) -> None: ...

    def rollback(self, txn: Any) -> None: ...


class SqlAlchemyExecutor:
    """Run statements on a dedicated connection of *engine*.

    Statements go through ``exec_driver_sql`` untouched: no bind-parameter
    parsing, so ``:name`` inside a procedure body is left alone. The
    connection is closed once the transaction has been committed or rolled back.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def begin(self) -> RootTransaction:
        conn = self._engine.connect()
        try:
            return conn.begin()
        except BaseException:
            conn.close()
            raise

    def execute(self, sql: str, txn: RootTransaction) -> None:
        txn.connection.exec_driver_sql(sql)

    def commit(self, txn: RootTransaction) -> None:
        # on failure the connection stays open for the rollback that follows
        txn.commit()
        txn.connection.close()

    def rollback(self, txn: RootTransaction) -> None:
        try:
            txn.rollback()
        finally:
            txn.connection.close()
