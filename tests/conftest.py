"""Shared pytest fixtures and test helpers for dbmeta tests."""

from __future__ import annotations

import logging
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
import structlog
from click.testing import CliRunner
from sqlalchemy.engine import Engine

from dbmeta.infrastructure.database.engine import create_db_engine
from dbmeta.services.telemetry import disable_telemetry

# A miniature Firebird system catalog, good enough for CatalogSource's queries.
CATALOG_DDL = [
    """CREATE TABLE RDB$FIELDS (
        RDB$FIELD_NAME TEXT, RDB$FIELD_TYPE INTEGER, RDB$FIELD_LENGTH INTEGER,
        RDB$FIELD_SCALE INTEGER, RDB$FIELD_SUB_TYPE INTEGER, RDB$NULL_FLAG INTEGER,
        RDB$DEFAULT_SOURCE TEXT, RDB$VALIDATION_SOURCE TEXT, RDB$SYSTEM_FLAG INTEGER)""",
    """CREATE TABLE RDB$RELATIONS (
        RDB$RELATION_NAME TEXT, RDB$VIEW_BLR BLOB, RDB$SYSTEM_FLAG INTEGER)""",
    """CREATE TABLE RDB$RELATION_FIELDS (
        RDB$RELATION_NAME TEXT, RDB$FIELD_NAME TEXT, RDB$FIELD_SOURCE TEXT,
        RDB$FIELD_POSITION INTEGER, RDB$NULL_FLAG INTEGER, RDB$DEFAULT_SOURCE TEXT)""",
    """CREATE TABLE RDB$PROCEDURES (
        RDB$PROCEDURE_NAME TEXT, RDB$PROCEDURE_SOURCE TEXT, RDB$SYSTEM_FLAG INTEGER)""",
    """CREATE TABLE RDB$PROCEDURE_PARAMETERS (
        RDB$PROCEDURE_NAME TEXT, RDB$PARAMETER_NAME TEXT, RDB$PARAMETER_TYPE INTEGER,
        RDB$PARAMETER_NUMBER INTEGER, RDB$FIELD_SOURCE TEXT)""",
]

CATALOG_ROWS: dict[str, list[tuple[Any, ...]]] = {
    "RDB$FIELDS": [
        ("AGE_T", 8, 4, 0, None, 1, None, "CHECK (VALUE >= 0)", 0),
        ("NAME_T", 37, 400, 0, 0, None, "DEFAULT 'x'", None, 0),
        ("RDB$2", 16, 8, -2, 1, None, None, None, 0),
        ("RDB$3", 8, 4, 0, 0, None, None, None, 0),
        ("RDB$DB_KEY", 14, 8, 0, 0, None, None, None, 1),
    ],
    "RDB$RELATIONS": [
        ("PERSON      ", None, 0),
        ("V_PERSON", b"blr", 0),
        ("RDB$PAGES", None, 1),
    ],
    "RDB$RELATION_FIELDS": [
        ("PERSON", "AGE   ", "AGE_T", 2, None, None),
        ("PERSON", "ID    ", "RDB$3", 0, 1, None),
        ("PERSON", "SALARY", "RDB$2", 3, None, None),
        ("PERSON", "NAME  ", "NAME_T", 1, None, "DEFAULT 'anon'"),
    ],
    "RDB$PROCEDURES": [
        ("GET_AGE   ", "BEGIN\n  AGE = 1;\n  SUSPEND;\nEND\n", 0),
        ("NOOP", "BEGIN END", 0),
        ("SYS_PROC", "BEGIN END", 1),
        ("EXTERNAL_PROC", None, 0),
    ],
    "RDB$PROCEDURE_PARAMETERS": [
        ("GET_AGE", "AGE   ", 1, 0, "AGE_T"),
        ("GET_AGE", "P_NAME", 0, 1, "RDB$4"),
        ("GET_AGE", "P_ID  ", 0, 0, "RDB$3"),
    ],
}

# What CatalogSource + render_schema must produce for CATALOG_ROWS.
EXPECTED_SCRIPT = (
    "/* --- GENERATED METADATA SCRIPT --- */\n"
    "/* --- 1. DOMAINS --- */\n"
    "CREATE DOMAIN AGE_T AS INTEGER NOT NULL CHECK (VALUE >= 0);\n"
    "CREATE DOMAIN NAME_T AS VARCHAR(100) DEFAULT 'x';\n"
    "\n"
    "/* --- 2. TABLES --- */\n"
    "CREATE TABLE PERSON (\n"
    "\tID INTEGER NOT NULL,\n"
    "\tNAME NAME_T DEFAULT 'anon',\n"
    "\tAGE AGE_T,\n"
    "\tSALARY NUMERIC(18, 2)\n"
    ");\n"
    "\n"
    "/* --- 3. PROCEDURES --- */\n"
    "SET TERM ^ ;\n"
    "CREATE PROCEDURE GET_AGE (\n"
    "\tP_ID INTEGER,\n"
    "\tP_NAME VARCHAR(100)\n"
    ")\n"
    "RETURNS (\n"
    "\tAGE AGE_T\n"
    ")\n"
    "AS\n"
    "BEGIN\n"
    "  AGE = 1;\n"
    "  SUSPEND;\n"
    "END\n"
    "^\n"
    "SET TERM ; ^\n"
    "\n"
    "SET TERM ^ ;\n"
    "CREATE PROCEDURE NOOP\n"
    "AS\n"
    "BEGIN END\n"
    "^\n"
    "SET TERM ; ^\n"
    "\n"
)


@pytest.fixture(autouse=True)
def _reset_logging() -> Generator[None]:
    """Undo configure_logging() and enable_telemetry() calls made by CLI invocations."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    dbmeta_logger = logging.getLogger("dbmeta")
    dbmeta_level = dbmeta_logger.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    dbmeta_logger.setLevel(dbmeta_level)
    structlog.reset_defaults()
    disable_telemetry()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the CLI from an empty directory with no dbmeta config in the environment."""
    for name in ("DBMETA_CONFIG", "DBMETA_CONNECTION__URL", "DBMETA_JSON_OUTPUT", "DBMETA_QUIET"):
        monkeypatch.delenv(name, raising=False)
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    return work


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'target.db'}"


@pytest.fixture
def sqlite_engine(sqlite_url: str) -> Generator[Engine]:
    """Empty SQLite database with transactional DDL."""
    engine = create_db_engine(sqlite_url)
    try:
        yield engine
    finally:
        engine.dispose()


def build_catalog(engine: Engine) -> None:
    """Create and fill the fake ``RDB$`` catalog on *engine*."""
    with engine.begin() as conn:
        for ddl in CATALOG_DDL:
            conn.exec_driver_sql(ddl)
        for table, rows in CATALOG_ROWS.items():
            marks = ", ".join("?" for _ in rows[0])
            conn.exec_driver_sql(f"INSERT INTO {table} VALUES ({marks})", rows)


@pytest.fixture
def catalog_url(tmp_path: Path) -> str:
    """URL of a SQLite file holding the fake catalog."""
    url = f"sqlite:///{tmp_path / 'catalog.db'}"
    engine = create_db_engine(url)
    try:
        build_catalog(engine)
    finally:
        engine.dispose()
    return url


@pytest.fixture
def catalog_engine(catalog_url: str) -> Generator[Engine]:
    engine = create_db_engine(catalog_url)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def scripts_dir(tmp_path: Path) -> Path:
    """Empty directory for test scripts."""
    path = tmp_path / "scripts"
    path.mkdir()
    return path


def write_script(directory: Path, content: str, name: str = "schema.sql") -> Path:
    path = directory / name
    path.write_text(content, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Fake executor
# ---------------------------------------------------------------------------


class RecordingExecutor:
    """StatementExecutor that records every call and fails on request."""

    def __init__(
        self,
        *,
        fail_on: str | None = None,
        fail_commit: bool = False,
        fail_rollback: bool = False,
    ) -> None:
        self.fail_on = fail_on
        self.fail_commit = fail_commit
        self.fail_rollback = fail_rollback
        self.calls: list[tuple[str, Any]] = []
        self.executed: list[str] = []

    def begin(self) -> str:
        self.calls.append(("begin", None))
        return "txn"

    def execute(self, sql: str, txn: Any) -> None:
        self.calls.append(("execute", sql))
        if self.fail_on is not None and self.fail_on in sql:
            raise RuntimeError(f"boom: {sql}")
        self.executed.append(sql)

    def commit(self, txn: Any) -> None:
        self.calls.append(("commit", txn))
        if self.fail_commit:
            raise RuntimeError("commit refused")

    def rollback(self, txn: Any) -> None:
        self.calls.append(("rollback", txn))
        if self.fail_rollback:
            raise RuntimeError("rollback refused")

    @property
    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]
