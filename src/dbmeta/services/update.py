"""UpdateService: replay a DDL script against an existing database.

Pipeline: FIND SCRIPT → SPLIT → APPLY (one transaction). Either every
statement of the script takes effect or none does.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from dbmeta.domain.script import fold_lines, iter_lines
from dbmeta.infrastructure.database.executor import SqlAlchemyExecutor
from dbmeta.infrastructure.filesystem import find_script, read_script
from dbmeta.services.apply import ApplyOutcome, apply_statements, is_transaction_control
from dbmeta.services.base import BaseService
from dbmeta.services.result import ServiceResult
from dbmeta.services.telemetry import get_current_span, trace_span, traced

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from dbmeta.infrastructure.database.executor import StatementExecutor

log = structlog.get_logger(__name__)

# Characters of a failing statement echoed back in error messages.
_PREVIEW_CHARS = 80


def _preview(sql: str) -> str:
    flat = " ".join(sql.split())
    return flat if len(flat) <= _PREVIEW_CHARS else f"{flat[:_PREVIEW_CHARS]}..."


def load_statements(scripts_dir: Path, op: str) -> tuple[Path, list[str]] | ServiceResult:
    """Find, read and split the script in *scripts_dir*.

    Returns ``(script_path, statements)`` or a failed ServiceResult.
    """
    script_path = find_script(scripts_dir)
    if script_path is None:
        return ServiceResult.failure(
            op,
            "NO_SCRIPT",
            f"No .sql file found in {scripts_dir}",
            detail={"scripts_dir": str(scripts_dir)},
        )

    try:
        content = read_script(script_path)
    except (OSError, UnicodeDecodeError) as exc:
        return ServiceResult.failure(
            op,
            "READ_FAILED",
            f"Could not read file {script_path}: {exc}",
            detail={"script": str(script_path)},
        )

    with trace_span("split"):
        state, statements = fold_lines(iter_lines(content))
    if state.pending:
        log.debug("script.trailing_discarded", script=str(script_path), chars=len(state.pending))
    return script_path, statements


def outcome_result(op: str, script_path: Path, outcome: ApplyOutcome) -> ServiceResult:
    """Translate an :class:`ApplyOutcome` into a ServiceResult."""
    if outcome.ok:
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "script": str(script_path),
                "executed": outcome.executed,
                "skipped": outcome.skipped,
            },
        )

    detail = {
        "script": str(script_path),
        "index": outcome.failed_index,
        "statement": outcome.failed_statement,
        "rollback_error": outcome.rollback_error,
    }
    if outcome.failed_index is None:
        message = f"Commit failed, changes rolled back: {outcome.error}"
    else:
        message = (
            f"Statement {outcome.failed_index + 1} failed, changes rolled back: "
            f"{outcome.error} [{_preview(outcome.failed_statement or '')}]"
        )
    warnings = []
    if outcome.rollback_error:
        warnings.append(f"Rollback failed: {outcome.rollback_error}")
    return ServiceResult.failure(
        op, "EXECUTION_FAILED", message, detail=detail, warnings=warnings
    )


class UpdateService(BaseService):
    """Apply the script found in a directory to the service's database."""

    def __init__(self, engine: Engine, *, executor: StatementExecutor | None = None) -> None:
        super().__init__(engine)
        self._executor = executor or SqlAlchemyExecutor(engine)

    @traced
    def update_database(self, scripts_dir: Path, *, op: str = "update_db") -> ServiceResult:
        """Split the first script in *scripts_dir* and apply it all-or-nothing."""
        loaded = load_statements(scripts_dir, op)
        if isinstance(loaded, ServiceResult):
            return loaded
        script_path, statements = loaded
        return self.apply_script(script_path, statements, op=op)

    def apply_script(self, script_path: Path, statements: list[str], *, op: str) -> ServiceResult:
        """Apply already-split *statements* of *script_path* in one transaction."""
        root = get_current_span()
        if root:
            root.annotate("statements", len(statements))
        log.info("update.start", target=self.target, statements=len(statements))
        with trace_span("apply") as span:
            try:
                outcome = apply_statements(statements, self._executor)
            except Exception as exc:
                # begin() failed: nothing was executed
                return ServiceResult.failure(
                    op,
                    "CONNECTION_FAILED",
                    f"Could not open a transaction on {self.target}: {exc}",
                )
            if span:
                span.annotate("executed", outcome.executed)
        return outcome_result(op, script_path, outcome)


def plan_update(scripts_dir: Path) -> ServiceResult:
    """Split the script without touching a database (``--dry-run``)."""
    op = "plan_update"
    loaded = load_statements(scripts_dir, op)
    if isinstance(loaded, ServiceResult):
        return loaded
    script_path, statements = loaded
    return ServiceResult(
        ok=True,
        op=op,
        data={
            "script": str(script_path),
            "statement_count": len(statements),
            "statements": [
                {
                    "index": index,
                    "skipped": not sql.strip() or is_transaction_control(sql),
                    "preview": _preview(sql),
                }
                for index, sql in enumerate(statements)
            ],
        },
    )
