# File: pgmodelgen/typemap.py
"""
pgmodelgen - Catalog Type Mapping
==================================

Maps PostgreSQL ``udt_name`` values to the Python value type used in the
generated modules and to a field-kind tag that selects the field class
(comparison operators, array helpers) in ``base_field_gen.py``.

Unknown catalog types map to ``str`` with the ``Generic`` kind instead of
raising, so introspection never stops on an exotic column type.
"""

from __future__ import annotations

import logging
from enum import Enum
from types import MappingProxyType
from typing import FrozenSet, List, Mapping, NamedTuple

logger: logging.Logger = logging.getLogger("pgmodelgen.typemap")


class FieldKind(str, Enum):
    """Closed set of field kinds understood by the generated field classes."""

    INT64 = "Int64"
    FLOAT64 = "Float64"
    STRING = "String"
    BOOL = "Bool"
    BYTES = "Bytes"
    DECIMAL = "Decimal"
    TIME = "Time"
    INT64_ARRAY = "Int64Array"
    STRING_ARRAY = "StringArray"
    FLOAT64_ARRAY = "Float64Array"
    BOOL_ARRAY = "BoolArray"
    GENERIC = "Generic"


class TypeMapping(NamedTuple):
    value_type: str
    field_kind: FieldKind


# Value types
INT = "int"
FLOAT = "float"
STR = "str"
BOOL = "bool"
BYTES = "bytes"
DECIMAL = "Decimal"
DATETIME = "datetime"
INT_LIST = "List[int]"
STR_LIST = "List[str]"
FLOAT_LIST = "List[float]"
BOOL_LIST = "List[bool]"

ARRAY_VALUE_TYPES: FrozenSet[str] = frozenset({INT_LIST, STR_LIST, FLOAT_LIST, BOOL_LIST})

_VALUE_TYPE_KINDS: Mapping[str, FieldKind] = MappingProxyType({
    INT: FieldKind.INT64,
    FLOAT: FieldKind.FLOAT64,
    STR: FieldKind.STRING,
    BOOL: FieldKind.BOOL,
    BYTES: FieldKind.BYTES,
    DECIMAL: FieldKind.DECIMAL,
    DATETIME: FieldKind.TIME,
    INT_LIST: FieldKind.INT64_ARRAY,
    STR_LIST: FieldKind.STRING_ARRAY,
    FLOAT_LIST: FieldKind.FLOAT64_ARRAY,
    BOOL_LIST: FieldKind.BOOL_ARRAY,
})


def _families(*pairs: tuple) -> Mapping[str, str]:
    table = {}
    for names, value_type in pairs:
        for name in names:
            table[name] = value_type
    return MappingProxyType(table)


_INTEGERS = ("int2", "int4", "int8", "integer", "bigint", "smallint")
_STRINGS = ("varchar", "text", "bpchar", "uuid")
_FLOATS = ("float4", "float8")

CATALOG_VALUE_TYPES: Mapping[str, str] = _families(
    (_INTEGERS, INT),
    (("bool",), BOOL),
    (_STRINGS, STR),
    (("json", "jsonb"), STR),
    (("bytea",), BYTES),
    (_FLOATS, FLOAT),
    (("numeric", "decimal"), DECIMAL),
    (("timestamp", "timestamptz", "date"), DATETIME),
    (tuple(f"_{n}" for n in _INTEGERS), INT_LIST),
    (tuple(f"_{n}" for n in _STRINGS), STR_LIST),
    (tuple(f"_{n}" for n in _FLOATS), FLOAT_LIST),
    (("_bool",), BOOL_LIST),
)


def field_kind_for_value_type(value_type: str) -> FieldKind:
    """Field kind for a value type; anything outside the closed set is Generic."""
    return _VALUE_TYPE_KINDS.get(value_type, FieldKind.GENERIC)


def map_catalog_type(udt_name: str) -> TypeMapping:
    """
    Map a catalog type name (case-insensitive) to its value type and kind.

    >>> map_catalog_type("INT8")
    TypeMapping(value_type='int', field_kind=<FieldKind.INT64: 'Int64'>)
    >>> map_catalog_type("box").field_kind.value
    'Generic'
    """
    value_type = CATALOG_VALUE_TYPES.get(udt_name.lower())
    if value_type is None:
        logger.debug("Unmapped catalog type %r, using %s.", udt_name, STR)
        return TypeMapping(STR, FieldKind.GENERIC)
    return TypeMapping(value_type, field_kind_for_value_type(value_type))


def is_array_value_type(value_type: str) -> bool:
    return value_type in ARRAY_VALUE_TYPES


__all__: List[str] = [
    "FieldKind",
    "TypeMapping",
    "CATALOG_VALUE_TYPES",
    "ARRAY_VALUE_TYPES",
    "map_catalog_type",
    "field_kind_for_value_type",
    "is_array_value_type",
]
