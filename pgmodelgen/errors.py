# File: pgmodelgen/errors.py
"""
pgmodelgen - Exception hierarchy
=================================

Every error raised while processing a table carries the table (and, where
relevant, the catalog operation or template) it happened in, so the CLI can
report it without further context.
"""

from __future__ import annotations

from typing import List, Optional


class PgModelGenError(Exception):
    """Base exception for all generator errors."""


class UsageError(PgModelGenError):
    """Raised when required input is missing or malformed."""


class CatalogError(PgModelGenError):
    """Raised when a catalog query fails for a table."""

    def __init__(
        self,
        message: str,
        *,
        table: str,
        operation: Optional[str] = None,
    ) -> None:
        self.table = table
        self.operation = operation
        prefix = f"table {table}"
        if operation:
            prefix = f"{prefix}: {operation}"
        super().__init__(f"{prefix}: {message}")


class TableNotFoundError(CatalogError):
    """Raised when the column listing for a table comes back empty."""

    def __init__(self, schema: str, table: str) -> None:
        self.schema = schema
        super().__init__(
            f"relation {schema}.{table} does not exist or has no columns",
            table=table,
            operation="read columns",
        )


class CatalogConnectionError(PgModelGenError):
    """Raised when the catalog cannot be opened at all (fatal for the run)."""


class SchemaShapeError(PgModelGenError):
    """Raised when the table's shape cannot be turned into a model."""


class KeyResolutionError(SchemaShapeError):
    """Raised when no identity column set can be resolved for a table."""

    def __init__(self, schema: str, table: str, tried: List[str]) -> None:
        self.schema = schema
        self.table = table
        self.tried = list(tried)
        super().__init__(
            f"table {schema}.{table}: missing primary key or unique constraint "
            f"(tried {', '.join(tried)}; pgmodelgen requires an identity, "
            "composite primary key/unique is supported)"
        )


class RenderError(PgModelGenError):
    """Raised when a template cannot be expanded."""

    def __init__(self, template: str, message: str) -> None:
        self.template = template
        super().__init__(f"template {template}: {message}")
