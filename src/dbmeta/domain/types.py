"""Catalog type codes and their SQL spelling.

``RDB$FIELDS.RDB$FIELD_TYPE`` stores a small integer per primitive type.
:func:`decode_type` turns that code (plus length, scale and subtype) back
into the type expression used in ``CREATE`` statements.
"""

from __future__ import annotations

from enum import IntEnum

FALLBACK_TYPE = "VARCHAR(100)"

# Character columns are stored in bytes; the database charset is assumed UTF8.
BYTES_PER_CHAR = 4


class FieldType(IntEnum):
    """Firebird field type codes (``RDB$FIELD_TYPE``)."""

    SHORT = 7
    LONG = 8
    FLOAT = 10
    DATE = 12
    TIME = 13
    TEXT = 14
    INT64 = 16
    DOUBLE = 27
    TIMESTAMP = 35
    VARYING = 37
    BLOB = 261


class NumericSubtype(IntEnum):
    """``RDB$FIELD_SUB_TYPE`` values for INT64 fields."""

    NUMERIC = 1
    DECIMAL = 2


_FIXED: dict[int, str] = {
    FieldType.SHORT: "SMALLINT",
    FieldType.LONG: "INTEGER",
    FieldType.FLOAT: "FLOAT",
    FieldType.DATE: "DATE",
    FieldType.TIME: "TIME",
    FieldType.DOUBLE: "DOUBLE PRECISION",
    FieldType.TIMESTAMP: "TIMESTAMP",
    FieldType.BLOB: "BLOB SUB_TYPE TEXT",
}


def _char_length(length: int) -> int:
    return length // BYTES_PER_CHAR


def decode_type(type_code: int, length: int, scale: int, sub_type: int) -> str:
    """Return the SQL type expression for a catalog type descriptor.

    Never fails: unknown codes degrade to ``VARCHAR(100)``.
    """
    fixed = _FIXED.get(type_code)
    if fixed is not None:
        return fixed
    if type_code == FieldType.TEXT:
        return f"CHAR({_char_length(length)})"
    if type_code == FieldType.VARYING:
        return f"VARCHAR({_char_length(length)})"
    if type_code == FieldType.INT64:
        if sub_type == NumericSubtype.NUMERIC:
            return f"NUMERIC(18, {-scale})"
        if sub_type == NumericSubtype.DECIMAL:
            return f"DECIMAL(18, {-scale})"
        return "BIGINT"
    return FALLBACK_TYPE
