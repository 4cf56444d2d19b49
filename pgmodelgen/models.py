# File: pgmodelgen/models.py
"""
pgmodelgen - Core Data Models
==============================
Pydantic V2 models for every stage of the pipeline:

    Catalog facts (RawColumn) → TableModel (FieldModel, KeyParam) → Emitter

plus ``GeneratorConfig``, the run configuration assembled by the CLI.

Catalog-derived models are frozen: they are built once per table, handed to
the renderer and discarded.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from pgmodelgen.typemap import FieldKind

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("pgmodelgen.models")

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_SCHEMA: str = "public"
DEFAULT_OUTPUT_DIR: str = "./internal/model"
DEFAULT_PACKAGE: str = "model"

# Column excluded from updates by convention, whatever its key/default status.
CREATED_AT_COLUMN: str = "created_at"

# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_FROZEN_CONFIG: ConfigDict = ConfigDict(
    frozen=True,
    extra="forbid",
    use_enum_values=False,
)


# ---------------------------------------------------------------------------
# Catalog facts
# ---------------------------------------------------------------------------


class RawColumn(BaseModel):
    """One row of the column listing, in catalog ordinal order."""

    model_config = _FROZEN_CONFIG

    name: str = Field(..., min_length=1)
    udt_name: str = Field(..., description="Underlying catalog type name.")
    is_nullable: bool = False
    is_identity: bool = False
    column_default: Optional[str] = Field(
        default=None, description="Default expression text, if any."
    )
    comment: str = ""

    def with_comment(self, comment: str) -> "RawColumn":
        return self.model_copy(update={"comment": comment})

    def __repr__(self) -> str:
        flags: str = " IDENTITY" if self.is_identity else ""
        return f"<RawColumn {self.name} {self.udt_name}{flags}>"


# ---------------------------------------------------------------------------
# Derived table model
# ---------------------------------------------------------------------------


class FieldModel(BaseModel):
    """Derived description of one column, 1:1 with ``RawColumn``."""

    model_config = _FROZEN_CONFIG

    column_name: str
    field: str = Field(..., description="Capitalised compound identifier.")
    attr: str = Field(..., description="Python-safe attribute name.")
    value_type: str
    field_kind: FieldKind
    comment: str = ""
    nullable: bool = True

    def __repr__(self) -> str:
        return f"<FieldModel {self.column_name} {self.value_type} {self.field_kind.value}>"


class KeyParam(BaseModel):
    """Typed lookup parameter for one identity column."""

    model_config = _FROZEN_CONFIG

    column: str
    name: str = Field(..., description="lowerCamel parameter name.")
    value_type: str
    field: str
    attr: str


class TableModel(BaseModel):
    """
    Aggregate handed to the renderer for one table.

    Subset invariants are checked at construction: every subset column is
    in ``columns``, and neither auto-set nor key columns are updatable.
    """

    model_config = _FROZEN_CONFIG

    schema_name: str
    table: str
    type_name: str
    lower_type_name: str
    file_base: str
    key_columns: List[str] = Field(..., min_length=1)
    key_source: str
    key_params: List[KeyParam]
    auto_set_columns: List[str]
    columns: List[FieldModel]
    insert_columns: List[FieldModel]
    update_columns: List[FieldModel]
    indexed_columns: List[FieldModel]
    used_field_kinds: List[FieldKind]
    imports: List[str]

    @computed_field  # type: ignore[misc]
    @property
    def qualified_name(self) -> str:
        return f"{self.schema_name}.{self.table}"

    @model_validator(mode="after")
    def _validate_subsets(self) -> "TableModel":
        names = {c.column_name for c in self.columns}
        for label, subset in (
            ("insert", self.insert_columns),
            ("update", self.update_columns),
            ("indexed", self.indexed_columns),
        ):
            unknown = [c.column_name for c in subset if c.column_name not in names]
            if unknown:
                raise ValueError(f"{label} columns not in table: {unknown}")

        missing_keys = [k for k in self.key_columns if k not in names]
        if missing_keys:
            raise ValueError(f"key columns not in table: {missing_keys}")

        updatable = {c.column_name for c in self.update_columns}
        clash = updatable & (set(self.auto_set_columns) | set(self.key_columns))
        if clash:
            raise ValueError(f"auto-set or key columns marked updatable: {sorted(clash)}")
        return self

    def __repr__(self) -> str:
        return (
            f"<TableModel {self.qualified_name} "
            f"key={self.key_columns} cols={len(self.columns)}>"
        )


# ---------------------------------------------------------------------------
# Run configuration
# ---------------------------------------------------------------------------


class GeneratorConfig(BaseModel):
    """Settings for one generator run (command line and/or config file)."""

    model_config = ConfigDict(
        populate_by_name=True,
        validate_assignment=True,
        extra="forbid",
    )

    url: str = Field(default="", description="Catalog connection URL.")
    schema_name: str = Field(default=DEFAULT_SCHEMA, alias="schema")
    tables: List[str] = Field(default_factory=list, alias="table")
    output_dir: Path = Field(default=Path(DEFAULT_OUTPUT_DIR), alias="dir")
    package: str = DEFAULT_PACKAGE
    with_custom: bool = True
    dry_run: bool = False

    @field_validator("tables", mode="before")
    @classmethod
    def _split_tables(cls, v: Any) -> List[str]:
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        elif not isinstance(v, (list, tuple)):
            raise ValueError("expected a comma-separated string or a list")
        seen: List[str] = []
        for item in v:
            name = str(item).strip()
            if name and name not in seen:
                seen.append(name)
        return seen

    @field_validator("schema_name", mode="before")
    @classmethod
    def _default_schema(cls, v: Any) -> Any:
        return v or DEFAULT_SCHEMA

    @computed_field  # type: ignore[misc]
    @property
    def package_name(self) -> str:
        """The package name, or the output directory's base name when left at the default."""
        if self.package == DEFAULT_PACKAGE and str(self.output_dir):
            return Path(self.output_dir).name or DEFAULT_PACKAGE
        return self.package


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "DEFAULT_SCHEMA",
    "DEFAULT_OUTPUT_DIR",
    "DEFAULT_PACKAGE",
    "CREATED_AT_COLUMN",
    "RawColumn",
    "FieldModel",
    "KeyParam",
    "TableModel",
    "GeneratorConfig",
]
