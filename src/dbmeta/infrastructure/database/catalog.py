"""CatalogSource: read domains, tables and procedures from ``RDB$`` tables.

Every query aliases its columns in lowercase so rows are addressed the
same way whether the dialect normalizes Firebird's upper-case names or
returns them as written. ``CHAR`` catalog values come back blank-padded
and are stripped.

A field source starting with ``RDB$`` is an implicit per-column domain;
anything else is a user domain referenced by name.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import text

from dbmeta.domain.model import Column, Domain, Parameter, Procedure, Table
from dbmeta.domain.types import decode_type

if TYPE_CHECKING:
    from sqlalchemy import Connection, Row
    from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

SYSTEM_PREFIX = "RDB$"
PARAM_INPUT = 0
PARAM_OUTPUT = 1

DOMAINS_SQL = """
SELECT
    F.RDB$FIELD_NAME AS field_name,
    F.RDB$FIELD_TYPE AS field_type,
    F.RDB$FIELD_LENGTH AS field_length,
    F.RDB$FIELD_SCALE AS field_scale,
    F.RDB$FIELD_SUB_TYPE AS field_sub_type,
    F.RDB$NULL_FLAG AS null_flag,
    F.RDB$DEFAULT_SOURCE AS default_source,
    F.RDB$VALIDATION_SOURCE AS validation_source
FROM RDB$FIELDS F
WHERE F.RDB$SYSTEM_FLAG = 0 AND F.RDB$FIELD_NAME NOT LIKE 'RDB$%'
"""

TABLES_SQL = """
SELECT RDB$RELATION_NAME AS relation_name
FROM RDB$RELATIONS
WHERE RDB$VIEW_BLR IS NULL AND RDB$SYSTEM_FLAG = 0
"""

COLUMNS_SQL = """
SELECT
    RF.RDB$FIELD_NAME AS field_name,
    RF.RDB$FIELD_SOURCE AS field_source,
    F.RDB$FIELD_TYPE AS field_type,
    F.RDB$FIELD_LENGTH AS field_length,
    F.RDB$FIELD_SCALE AS field_scale,
    F.RDB$FIELD_SUB_TYPE AS field_sub_type,
    RF.RDB$NULL_FLAG AS null_flag,
    RF.RDB$DEFAULT_SOURCE AS default_source
FROM RDB$RELATION_FIELDS RF
JOIN RDB$FIELDS F ON RF.RDB$FIELD_SOURCE = F.RDB$FIELD_NAME
WHERE RF.RDB$RELATION_NAME = :relation_name
ORDER BY RF.RDB$FIELD_POSITION
"""

PROCEDURES_SQL = """
SELECT
    RDB$PROCEDURE_NAME AS procedure_name,
    RDB$PROCEDURE_SOURCE AS procedure_source
FROM RDB$PROCEDURES
WHERE RDB$SYSTEM_FLAG = 0 AND RDB$PROCEDURE_SOURCE IS NOT NULL
"""

PARAMETERS_SQL = """
SELECT
    P.RDB$PARAMETER_NAME AS parameter_name,
    P.RDB$PARAMETER_TYPE AS parameter_type,
    F.RDB$FIELD_TYPE AS field_type,
    F.RDB$FIELD_LENGTH AS field_length,
    F.RDB$FIELD_SCALE AS field_scale,
    F.RDB$FIELD_SUB_TYPE AS field_sub_type,
    P.RDB$FIELD_SOURCE AS field_source
FROM RDB$PROCEDURE_PARAMETERS P
LEFT JOIN RDB$FIELDS F ON P.RDB$FIELD_SOURCE = F.RDB$FIELD_NAME
WHERE P.RDB$PROCEDURE_NAME = :procedure_name
ORDER BY P.RDB$PARAMETER_TYPE, P.RDB$PARAMETER_NUMBER
"""


# ── Row helpers ──────────────────────────────────────────────────────


def _str(value: Any) -> str:
    """Catalog text as a stripped str (``CHAR`` padding, text BLOB readers)."""
    if value is None:
        return ""
    if hasattr(value, "read"):
        value = value.read()
    return str(value).strip()


def _optional_str(value: Any) -> str | None:
    return None if value is None else _str(value)


def _int(value: Any) -> int:
    return 0 if value is None else int(value)


def _flag_set(value: Any) -> bool:
    return value is not None and int(value) == 1


def row_type(row: Row[Any]) -> str:
    """Decode the type columns of a catalog row."""
    return decode_type(
        _int(row.field_type),
        _int(row.field_length),
        _int(row.field_scale),
        _int(row.field_sub_type),
    )


def source_type(row: Row[Any]) -> str:
    """Domain name for user domains, decoded type for implicit ones."""
    source = _str(row.field_source)
    if source and not source.startswith(SYSTEM_PREFIX):
        return source
    return row_type(row)


def domain_from_row(row: Row[Any]) -> Domain:
    return Domain(
        name=_str(row.field_name),
        type_definition=row_type(row),
        is_not_null=_flag_set(row.null_flag),
        default_expression=_optional_str(row.default_source),
        check_constraint=_optional_str(row.validation_source),
    )


def column_from_row(row: Row[Any]) -> Column:
    return Column(
        name=_str(row.field_name),
        type_definition=source_type(row),
        is_nullable=not _flag_set(row.null_flag),
        default_expression=_optional_str(row.default_source),
    )


# ── Source ───────────────────────────────────────────────────────────


class CatalogSource:
    """Metadata source backed by a live database's system tables.

    Each public method opens its own connection and returns a complete,
    ordered tuple. Database errors propagate to the caller untouched.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def domains(self) -> tuple[Domain, ...]:
        """User-defined domains (``RDB$FIELDS`` minus implicit ``RDB$`` ones)."""
        with self._engine.connect() as conn:
            rows = conn.execute(text(DOMAINS_SQL)).all()
        domains = tuple(domain_from_row(row) for row in rows)
        logger.debug("catalog.domains: %d", len(domains))
        return domains

    def tables(self) -> tuple[Table, ...]:
        """User tables (views excluded) with columns in position order."""
        tables: list[Table] = []
        with self._engine.connect() as conn:
            for row in conn.execute(text(TABLES_SQL)).all():
                name = _str(row.relation_name)
                if not name:
                    logger.debug("catalog.table_skipped: unnamed relation")
                    continue
                tables.append(Table(name=name, columns=self._columns(conn, name)))
        logger.debug("catalog.tables: %d", len(tables))
        return tuple(tables)

    def procedures(self) -> tuple[Procedure, ...]:
        """Procedures with a stored body, parameters split by direction."""
        procedures: list[Procedure] = []
        with self._engine.connect() as conn:
            for row in conn.execute(text(PROCEDURES_SQL)).all():
                name = _str(row.procedure_name)
                inputs, outputs = self._parameters(conn, name)
                procedures.append(
                    Procedure(
                        name=name,
                        source=_body(row.procedure_source),
                        input_parameters=inputs,
                        output_parameters=outputs,
                    )
                )
        logger.debug("catalog.procedures: %d", len(procedures))
        return tuple(procedures)

    @staticmethod
    def _columns(conn: Connection, table_name: str) -> tuple[Column, ...]:
        rows = conn.execute(text(COLUMNS_SQL), {"relation_name": table_name}).all()
        return tuple(column_from_row(row) for row in rows)

    @staticmethod
    def _parameters(
        conn: Connection, procedure_name: str
    ) -> tuple[tuple[Parameter, ...], tuple[Parameter, ...]]:
        inputs: list[Parameter] = []
        outputs: list[Parameter] = []
        rows = conn.execute(text(PARAMETERS_SQL), {"procedure_name": procedure_name}).all()
        for row in rows:
            param = Parameter(name=_str(row.parameter_name), type_definition=source_type(row))
            direction = _int(row.parameter_type)
            if direction == PARAM_INPUT:
                inputs.append(param)
            elif direction == PARAM_OUTPUT:
                outputs.append(param)
        return tuple(inputs), tuple(outputs)


def _body(value: Any) -> str:
    """Procedure source kept verbatim; only BLOB readers are drained."""
    if value is None:
        return ""
    if hasattr(value, "read"):
        value = value.read()
    return str(value)
