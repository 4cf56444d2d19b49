# File: pgmodelgen/deriver.py
"""
pgmodelgen - Metadata Deriver
==============================

Turns the raw catalog facts of one table into a ``TableModel``:

    RawColumn[] + KeyResolution + indexed names
        → casing, auto-set classification, insert/update/indexed subsets,
          key parameters and the generated module's import set.

Everything here is a pure function of its inputs.
"""

from __future__ import annotations

import logging
import re
from typing import Collection, Dict, FrozenSet, Iterable, List, Sequence

from pgmodelgen.errors import SchemaShapeError
from pgmodelgen.keys import KeyResolution
from pgmodelgen.models import CREATED_AT_COLUMN, FieldModel, KeyParam, RawColumn, TableModel
from pgmodelgen.typemap import (
    DATETIME,
    DECIMAL,
    is_array_value_type,
    map_catalog_type,
)
from pgmodelgen.utils import (
    file_base_name,
    lower_first,
    safe_attribute,
    safe_identifier,
    to_camel,
    to_lower_camel,
)

logger: logging.Logger = logging.getLogger("pgmodelgen.deriver")

# ---------------------------------------------------------------------------
# Import sets for the generated module
# ---------------------------------------------------------------------------

BASELINE_IMPORTS: FrozenSet[str] = frozenset({
    "from dataclasses import dataclass",
    "from typing import Any, List, Optional, Sequence",
    "from sqlalchemy.engine import Connection",
    "import sqlalchemy as sa",
})

TEMPORAL_IMPORT: str = "from datetime import datetime"
DECIMAL_IMPORT: str = "from decimal import Decimal"
ARRAY_IMPORT: str = "from sqlalchemy.dialects import postgresql"

_SEQUENCE_DEFAULT_RE: re.Pattern[str] = re.compile(r"^\s*nextval\(", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Classification helpers
# ---------------------------------------------------------------------------


def is_auto_set(column: RawColumn) -> bool:
    """True when the data store assigns the value (identity or ``nextval(...)``)."""
    if column.is_identity:
        return True
    return bool(column.column_default and _SEQUENCE_DEFAULT_RE.match(column.column_default))


def build_field(column: RawColumn) -> FieldModel:
    mapping = map_catalog_type(column.udt_name)
    return FieldModel(
        column_name=column.name,
        field=safe_identifier(to_camel(column.name)),
        attr=safe_attribute(column.name),
        value_type=mapping.value_type,
        field_kind=mapping.field_kind,
        comment=column.comment,
        nullable=column.is_nullable,
    )


def infer_imports(value_types: Iterable[str]) -> List[str]:
    """Baseline imports plus datetime/Decimal/array support as the columns need them."""
    imports = set(BASELINE_IMPORTS)
    for value_type in value_types:
        if value_type == DATETIME:
            imports.add(TEMPORAL_IMPORT)
        elif value_type == DECIMAL:
            imports.add(DECIMAL_IMPORT)
        elif is_array_value_type(value_type):
            imports.add(ARRAY_IMPORT)
    return sorted(imports)


def build_key_params(
    key_columns: Sequence[str],
    fields: Sequence[FieldModel],
) -> List[KeyParam]:
    by_name: Dict[str, FieldModel] = {f.column_name: f for f in fields}
    params: List[KeyParam] = []
    for name in key_columns:
        field = by_name.get(name)
        if field is None:
            raise SchemaShapeError(f"key column {name!r} is not a column of the table")
        params.append(KeyParam(
            column=name,
            name=safe_attribute(to_lower_camel(name)),
            value_type=field.value_type,
            field=field.field,
            attr=field.attr,
        ))
    return params


# ---------------------------------------------------------------------------
# Table model
# ---------------------------------------------------------------------------


def derive_table_model(
    schema: str,
    table: str,
    columns: Sequence[RawColumn],
    key: KeyResolution,
    indexed_columns: Collection[str],
) -> TableModel:
    """
    Build the ``TableModel`` for one table.

    Subsets keep catalog column order.  Auto-set columns are neither
    insertable nor updatable; key columns and ``created_at`` are never
    updatable.
    """
    fields: List[FieldModel] = [build_field(c) for c in columns]
    auto_set = {c.name for c in columns if is_auto_set(c)}
    key_set = set(key.columns)
    indexed = set(indexed_columns)

    insert_columns = [f for f in fields if f.column_name not in auto_set]
    update_columns = [
        f for f in insert_columns
        if f.column_name not in key_set and f.column_name != CREATED_AT_COLUMN
    ]
    indexed_fields = [f for f in fields if f.column_name in indexed]

    type_name = safe_identifier(to_camel(table))
    used_kinds = sorted({f.field_kind for f in fields}, key=lambda k: k.value)

    model = TableModel(
        schema_name=schema,
        table=table,
        type_name=type_name,
        lower_type_name=lower_first(type_name),
        file_base=file_base_name(table),
        key_columns=list(key.columns),
        key_source=key.source,
        key_params=build_key_params(key.columns, fields),
        auto_set_columns=sorted(auto_set),
        columns=fields,
        insert_columns=insert_columns,
        update_columns=update_columns,
        indexed_columns=indexed_fields,
        used_field_kinds=used_kinds,
        imports=infer_imports(f.value_type for f in fields),
    )
    logger.debug(
        "Derived %r: %d insertable, %d updatable, %d indexed.",
        model,
        len(insert_columns),
        len(update_columns),
        len(indexed_fields),
    )
    return model


__all__: List[str] = [
    "BASELINE_IMPORTS",
    "TEMPORAL_IMPORT",
    "DECIMAL_IMPORT",
    "ARRAY_IMPORT",
    "is_auto_set",
    "build_field",
    "infer_imports",
    "build_key_params",
    "derive_table_model",
]
