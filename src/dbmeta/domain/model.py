"""Immutable records for domains, tables and procedures.

Built by a metadata source, read by :mod:`dbmeta.domain.ddl`. Collections
are tuples so a constructed record cannot change under the renderer.
"""

from __future__ import annotations

from typing import Protocol

from pydantic import BaseModel, Field


class Domain(BaseModel):
    """A named, reusable column type."""

    model_config = {"frozen": True}

    name: str = Field(min_length=1)
    type_definition: str = Field(min_length=1)
    is_not_null: bool = False
    default_expression: str | None = None
    check_constraint: str | None = None


class Column(BaseModel):
    """A table column.

    ``type_definition`` is either a decoded primitive type or the name of
    a :class:`Domain` the column reuses.
    """

    model_config = {"frozen": True}

    name: str = Field(min_length=1)
    type_definition: str = Field(min_length=1)
    is_nullable: bool = True
    default_expression: str | None = None


class Table(BaseModel):
    model_config = {"frozen": True}

    name: str = Field(min_length=1)
    columns: tuple[Column, ...] = ()


class Parameter(BaseModel):
    """Procedure parameter; direction is given by the list holding it."""

    model_config = {"frozen": True}

    name: str = Field(min_length=1)
    type_definition: str = Field(min_length=1)


class Procedure(BaseModel):
    """A stored procedure with its body text (everything after ``AS``)."""

    model_config = {"frozen": True}

    name: str = Field(min_length=1)
    source: str = ""
    input_parameters: tuple[Parameter, ...] = ()
    output_parameters: tuple[Parameter, ...] = ()


class Schema(BaseModel):
    """Everything one export renders, in catalog order."""

    model_config = {"frozen": True}

    domains: tuple[Domain, ...] = ()
    tables: tuple[Table, ...] = ()
    procedures: tuple[Procedure, ...] = ()


class MetadataSource(Protocol):
    """Anything that can hand over complete, ordered schema records."""

    def domains(self) -> tuple[Domain, ...]: ...

    def tables(self) -> tuple[Table, ...]: ...

    def procedures(self) -> tuple[Procedure, ...]: ...


def load_schema(source: MetadataSource) -> Schema:
    """Pull every record from *source* into one :class:`Schema`."""
    return Schema(
        domains=source.domains(),
        tables=source.tables(),
        procedures=source.procedures(),
    )
