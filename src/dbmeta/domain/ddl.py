"""Turn a :class:`~dbmeta.domain.model.Schema` into a script.

The script layout is a contract for diff-based tooling: a banner, then
domains, tables and procedures in that order, each under its own comment
header. Clause order and whitespace are fixed; do not reformat.

Optional clauses are small pure functions returning a fragment or None,
composed in a fixed order by :func:`_compose`.
"""

from __future__ import annotations

from collections.abc import Iterable

from dbmeta.domain.model import Column, Domain, Parameter, Procedure, Schema, Table
from dbmeta.domain.script import ALTERNATE_TERMINATOR, DEFAULT_TERMINATOR, term_directive

BANNER = "/* --- GENERATED METADATA SCRIPT --- */"
DOMAINS_HEADER = "/* --- 1. DOMAINS --- */"
TABLES_HEADER = "/* --- 2. TABLES --- */"
PROCEDURES_HEADER = "/* --- 3. PROCEDURES --- */"


# ── Optional clauses ─────────────────────────────────────────────────


def _keyword_clause(keyword: str, value: str | None) -> str | None:
    """Prefix *value* with *keyword* unless it already starts with it."""
    if not value:
        return None
    if value.upper().startswith(keyword):
        return value
    return f"{keyword} {value}"


def default_clause(expression: str | None) -> str | None:
    """``DEFAULT <expr>``; catalog sources usually carry the keyword already."""
    return _keyword_clause("DEFAULT", expression)


def check_clause(constraint: str | None) -> str | None:
    """``CHECK <cond>``; catalog sources usually hold only ``(VALUE > 0)``."""
    return _keyword_clause("CHECK", constraint)


def not_null_clause(not_null: bool) -> str | None:
    return "NOT NULL" if not_null else None


def _compose(head: str, *fragments: str | None) -> str:
    return head + "".join(f" {fragment}" for fragment in fragments if fragment)


# ── Entities ─────────────────────────────────────────────────────────


def render_domain(domain: Domain) -> str:
    """Render one ``CREATE DOMAIN`` statement (terminated, no newline)."""
    statement = _compose(
        f"CREATE DOMAIN {domain.name} AS {domain.type_definition}",
        default_clause(domain.default_expression),
        not_null_clause(domain.is_not_null),
        check_clause(domain.check_constraint),
    )
    return f"{statement};"


def render_column(column: Column) -> str:
    return _compose(
        f"\t{column.name} {column.type_definition}",
        default_clause(column.default_expression),
        not_null_clause(not column.is_nullable),
    )


def render_table(table: Table) -> str:
    """Render one ``CREATE TABLE`` statement, one column per line."""
    columns = ",\n".join(render_column(column) for column in table.columns)
    return f"CREATE TABLE {table.name} (\n{columns}\n);"


def _parameter_list(parameters: Iterable[Parameter]) -> str:
    return ",\n".join(f"\t{p.name} {p.type_definition}" for p in parameters)


def render_procedure(procedure: Procedure) -> str:
    """Render a procedure bracketed by ``SET TERM`` directives.

    The body keeps its own semicolons, so the statement is terminated
    with the alternate terminator instead.
    """
    parts = [
        term_directive(ALTERNATE_TERMINATOR, DEFAULT_TERMINATOR),
        "\n",
        f"CREATE PROCEDURE {procedure.name}",
    ]
    if procedure.input_parameters:
        parts.append(f" (\n{_parameter_list(procedure.input_parameters)}\n)")
    if procedure.output_parameters:
        parts.append(f"\nRETURNS (\n{_parameter_list(procedure.output_parameters)}\n)")

    body = procedure.source.rstrip()
    parts.append(f"\nAS\n{body}\n")
    if not body.endswith(ALTERNATE_TERMINATOR):
        parts.append(ALTERNATE_TERMINATOR)
    parts.append(f"\n{term_directive(DEFAULT_TERMINATOR, ALTERNATE_TERMINATOR)}\n")
    return "".join(parts)


# ── Sections ─────────────────────────────────────────────────────────


def render_domains(domains: Iterable[Domain]) -> str:
    lines = [DOMAINS_HEADER, *(render_domain(d) for d in domains)]
    return "".join(f"{line}\n" for line in lines)


def render_tables(tables: Iterable[Table]) -> str:
    lines = ["", TABLES_HEADER, *(render_table(t) for t in tables)]
    return "".join(f"{line}\n" for line in lines)


def render_procedures(procedures: Iterable[Procedure]) -> str:
    # each procedure is followed by one blank line
    blocks = [f"\n{PROCEDURES_HEADER}\n", *(f"{render_procedure(p)}\n" for p in procedures)]
    return "".join(blocks)


def render_schema(schema: Schema) -> str:
    """Render the full export script for *schema*."""
    return "".join(
        [
            f"{BANNER}\n",
            render_domains(schema.domains),
            render_tables(schema.tables),
            render_procedures(schema.procedures),
        ]
    )
