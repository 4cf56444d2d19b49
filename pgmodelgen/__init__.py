# File: pgmodelgen/__init__.py
"""
pgmodelgen - Typed Data-Access Code from a PostgreSQL Catalog
==============================================================

Introspects tables in a live PostgreSQL database and writes one SQLAlchemy
Core model module per table: a row dataclass, typed column descriptors and
a CRUD access class keyed on the table's primary key, unique constraint or
partition parent's primary key.

Architecture overview::

    ┌──────────────┐     ┌────────────────┐     ┌───────────────┐
    │  CLI / Entry │────▶│ ModelGenerator │────▶│ ModelEmitter  │
    │   (cli.py)   │     │ (generator.py) │     │ (exporters.py)│
    └──────────────┘     └───────┬────────┘     └───────┬───────┘
                                 │                      │
                    ┌────────────┼────────────┐         ▼
                    ▼            ▼            ▼   ┌───────────┐
             ┌──────────┐ ┌───────────┐ ┌────────┐│ templates │
             │ catalog  │ │   keys    │ │deriver ││  (.py)    │
             │  (.py)   │ │  (.py)    │ │ (.py)  │└───────────┘
             └──────────┘ └───────────┘ └────────┘

Usage::

    # As a library
    from pgmodelgen import GeneratorConfig, generate
    report = generate(GeneratorConfig(url="postgres://...", tables=["users"]))
    print(report.summary())

    # From the command line
    python -m pgmodelgen --url postgres://... --table users,orders -v
"""

from __future__ import annotations

__version__: str = "0.1.0"

from pgmodelgen.errors import (
    CatalogConnectionError,
    CatalogError,
    KeyResolutionError,
    PgModelGenError,
    RenderError,
    SchemaShapeError,
    TableNotFoundError,
    UsageError,
)
from pgmodelgen.models import (
    FieldModel,
    GeneratorConfig,
    KeyParam,
    RawColumn,
    TableModel,
)
from pgmodelgen.typemap import FieldKind, TypeMapping, field_kind_for_value_type, map_catalog_type
from pgmodelgen.catalog import CatalogReader, open_catalog
from pgmodelgen.keys import KeyResolution, resolve_key_columns
from pgmodelgen.deriver import derive_table_model
from pgmodelgen.templates import TemplateRenderer
from pgmodelgen.exporters import ModelEmitter
from pgmodelgen.validators import ValidationResult, validate_config
from pgmodelgen.generator import GenerationReport, ModelGenerator, generate

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    # Version info
    "__version__",
    # Orchestrator
    "ModelGenerator",
    "GenerationReport",
    "generate",
    # Models
    "FieldModel",
    "GeneratorConfig",
    "KeyParam",
    "RawColumn",
    "TableModel",
    # Pipeline stages
    "CatalogReader",
    "open_catalog",
    "KeyResolution",
    "resolve_key_columns",
    "FieldKind",
    "TypeMapping",
    "field_kind_for_value_type",
    "map_catalog_type",
    "derive_table_model",
    "TemplateRenderer",
    "ModelEmitter",
    # Validation
    "ValidationResult",
    "validate_config",
    # Errors
    "PgModelGenError",
    "UsageError",
    "CatalogError",
    "CatalogConnectionError",
    "TableNotFoundError",
    "SchemaShapeError",
    "KeyResolutionError",
    "RenderError",
]
