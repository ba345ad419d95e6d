"""Transactional applier: run statements all-or-nothing.

:func:`apply_statements` opens one transaction on a
:class:`~dbmeta.infrastructure.database.executor.StatementExecutor`,
runs every statement in order and commits only if all of them succeed.
The first failure rolls everything back and is reported in the returned
:class:`ApplyOutcome` together with the failing statement's index.

The applier owns the transaction boundaries: ``COMMIT`` and ``ROLLBACK``
statements found in a script are skipped, never executed.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import BaseModel

from dbmeta.services.telemetry import trace_span

if TYPE_CHECKING:
    from dbmeta.infrastructure.database.executor import StatementExecutor

log = structlog.get_logger(__name__)

TRANSACTION_CONTROL = frozenset({"COMMIT", "ROLLBACK"})


class ApplyOutcome(BaseModel):
    """What happened to one batch of statements.

    ``failed_index`` is the position in the input sequence of the
    statement that failed; it is None for success and for commit
    failures. ``rollback_error`` is set only when the rollback after a
    failure failed as well; it never replaces ``error``.
    """

    model_config = {"frozen": True}

    ok: bool
    executed: int = 0
    skipped: int = 0
    failed_index: int | None = None
    failed_statement: str | None = None
    error: str | None = None
    rollback_error: str | None = None


def is_transaction_control(statement: str) -> bool:
    """True for a bare ``COMMIT`` / ``ROLLBACK`` (any case, any spacing)."""
    return " ".join(statement.split()).upper() in TRANSACTION_CONTROL


def _rollback(executor: StatementExecutor, txn: Any) -> str | None:
    """Roll back *txn*; return the rollback error message, if any."""
    try:
        executor.rollback(txn)
    except Exception as exc:
        log.warning("apply.rollback_failed", error=str(exc))
        return str(exc)
    log.info("apply.rolled_back")
    return None


def apply_statements(statements: Sequence[str], executor: StatementExecutor) -> ApplyOutcome:
    """Execute *statements* inside one transaction of *executor*.

    Blank and transaction-control statements are skipped. Errors raised
    by ``begin`` propagate; errors raised by ``execute`` or ``commit`` are
    turned into a failed outcome after rolling back.
    """
    txn = executor.begin()
    finished = False
    executed = 0
    skipped = 0
    try:
        for index, sql in enumerate(statements):
            if not sql.strip() or is_transaction_control(sql):
                skipped += 1
                continue
            with trace_span("execute") as span:
                if span:
                    span.annotate("index", index)
                try:
                    executor.execute(sql, txn)
                except Exception as exc:
                    log.error("apply.statement_failed", index=index, error=str(exc))
                    finished = True
                    return ApplyOutcome(
                        ok=False,
                        executed=executed,
                        skipped=skipped,
                        failed_index=index,
                        failed_statement=sql,
                        error=str(exc),
                        rollback_error=_rollback(executor, txn),
                    )
            executed += 1

        try:
            executor.commit(txn)
        except Exception as exc:
            log.error("apply.commit_failed", error=str(exc))
            finished = True
            return ApplyOutcome(
                ok=False,
                executed=executed,
                skipped=skipped,
                error=str(exc),
                rollback_error=_rollback(executor, txn),
            )
        finished = True
        log.info("apply.committed", executed=executed, skipped=skipped)
        return ApplyOutcome(ok=True, executed=executed, skipped=skipped)
    finally:
        if not finished:
            # interrupted mid-batch (KeyboardInterrupt and the like)
            _rollback(executor, txn)
