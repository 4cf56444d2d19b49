"""
tests/conftest.py
Shared fixtures for the pgmodelgen test suite.

No database is needed: the catalog is replaced by in-memory fakes.
``FakeConnection`` stands in for a SQLAlchemy connection underneath the real
``CatalogReader``; ``FakeCatalog`` stands in for the reader itself when the
generator pipeline is under test.  File output goes to pytest's tmp_path.
"""

from __future__ import annotations

import pathlib
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import pytest

from pgmodelgen.catalog import (
    COLUMN_COMMENTS_QUERY,
    COLUMNS_QUERY,
    INDEXED_COLUMNS_QUERY,
    PARTITION_PARENT_KEY_QUERY,
    PRIMARY_KEY_QUERY,
    UNIQUE_KEY_QUERY,
)
from pgmodelgen.deriver import derive_table_model
from pgmodelgen.errors import CatalogError
from pgmodelgen.exporters import ModelEmitter
from pgmodelgen.keys import KeyResolution, SOURCE_PRIMARY_KEY
from pgmodelgen.models import GeneratorConfig, RawColumn, TableModel
from pgmodelgen.templates import TemplateRenderer

FIXED_TIME_TEXT: str = "2024-05-01T12:00:00Z"


# ---------------------------------------------------------------------------
# Fake SQLAlchemy connection (for CatalogReader)
# ---------------------------------------------------------------------------


class FakeMappingResult:
    def __init__(self, rows: List[Dict[str, Any]]) -> None:
        self._rows = rows

    def all(self) -> List[Dict[str, Any]]:
        return list(self._rows)


class FakeResult:
    def __init__(self, rows: List[Dict[str, Any]]) -> None:
        self._rows = rows

    def mappings(self) -> FakeMappingResult:
        return FakeMappingResult(self._rows)


class FakeConnection:
    """
    Answers ``execute(text(query), params)`` from a table of canned rows.

    ``responses`` maps a query constant to either a list of row dicts or an
    exception instance to raise.  Unknown queries return no rows.
    """

    def __init__(self, responses: Optional[Dict[str, Any]] = None) -> None:
        self.responses: Dict[str, Any] = dict(responses or {})
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    def execute(self, clause: Any, params: Optional[Dict[str, Any]] = None) -> FakeResult:
        query = clause.text
        self.calls.append((query, dict(params or {})))
        response = self.responses.get(query, [])
        if isinstance(response, BaseException):
            raise response
        return FakeResult(response)


def column_row(
    name: str,
    udt_name: str,
    *,
    nullable: bool = False,
    identity: bool = False,
    default: Optional[str] = None,
) -> Dict[str, Any]:
    return {
        "column_name": name,
        "udt_name": udt_name,
        "is_nullable": nullable,
        "is_identity": identity,
        "column_default": default,
    }


@pytest.fixture()
def users_responses() -> Dict[str, Any]:
    """Catalog rows for ``public.users``."""
    return {
        COLUMNS_QUERY: [
            column_row("id", "int8", identity=True),
            column_row("email", "text"),
            column_row("created_at", "timestamptz", default="now()"),
        ],
        COLUMN_COMMENTS_QUERY: [
            {"column_name": "email", "description": "login address"},
            {"column_name": "id", "description": None},
        ],
        PRIMARY_KEY_QUERY: [{"column_name": "id"}],
        UNIQUE_KEY_QUERY: [{"column_name": "email"}],
        PARTITION_PARENT_KEY_QUERY: [],
        INDEXED_COLUMNS_QUERY: [{"attname": "email"}, {"attname": "email"}],
    }


@pytest.fixture()
def users_connection(users_responses: Dict[str, Any]) -> FakeConnection:
    return FakeConnection(users_responses)


# ---------------------------------------------------------------------------
# Fake catalog (for ModelGenerator)
# ---------------------------------------------------------------------------


@dataclass
class FakeTable:
    columns: List[RawColumn]
    primary_key: List[str] = field(default_factory=list)
    unique: List[str] = field(default_factory=list)
    partition_parent_key: List[str] = field(default_factory=list)
    indexed: List[str] = field(default_factory=list)


class FakeCatalog:
    """In-memory stand-in for ``CatalogReader``; unknown tables fail like a missing relation."""

    def __init__(self, tables: Dict[str, FakeTable]) -> None:
        self.tables = tables
        self.reads: List[str] = []

    def _table(self, table: str) -> FakeTable:
        try:
            return self.tables[table]
        except KeyError:
            raise CatalogError(
                "relation does not exist", table=table, operation="read columns"
            ) from None

    def read_table(self, schema: str, table: str) -> List[RawColumn]:
        self.reads.append(table)
        return list(self._table(table).columns)

    def read_primary_key_columns(self, schema: str, table: str) -> List[str]:
        return list(self._table(table).primary_key)

    def read_unique_key_columns(self, schema: str, table: str) -> List[str]:
        return list(self._table(table).unique)

    def read_partition_primary_key_columns(self, schema: str, table: str) -> List[str]:
        return list(self._table(table).partition_parent_key)

    def read_indexed_columns(self, schema: str, table: str) -> List[str]:
        return sorted(set(self._table(table).indexed))


def users_columns() -> List[RawColumn]:
    return [
        RawColumn(name="id", udt_name="int8", is_identity=True),
        RawColumn(name="email", udt_name="text", comment="login address"),
        RawColumn(
            name="created_at",
            udt_name="timestamptz",
            column_default="now()",
        ),
    ]


def events_columns() -> List[RawColumn]:
    """A partition child with no constraints of its own and every type family."""
    return [
        RawColumn(name="tenant_id", udt_name="int4"),
        RawColumn(
            name="seq",
            udt_name="int8",
            column_default="NEXTVAL('events_seq_seq'::regclass)",
        ),
        RawColumn(name="happened_at", udt_name="timestamptz"),
        RawColumn(name="amount", udt_name="numeric", is_nullable=True),
        RawColumn(name="score", udt_name="float8", is_nullable=True),
        RawColumn(name="active", udt_name="bool"),
        RawColumn(name="payload", udt_name="bytea", is_nullable=True),
        RawColumn(name="labels", udt_name="_text", is_nullable=True),
        RawColumn(name="counts", udt_name="_int4", is_nullable=True),
        RawColumn(name="weights", udt_name="_float8", is_nullable=True),
        RawColumn(name="flags", udt_name="_bool", is_nullable=True),
        RawColumn(name="area", udt_name="box", is_nullable=True),
        RawColumn(
            name="class",
            udt_name="varchar",
            is_nullable=True,
            comment="event class\nsee docs",
        ),
    ]


@pytest.fixture()
def fake_catalog() -> FakeCatalog:
    return FakeCatalog({
        "users": FakeTable(
            columns=users_columns(),
            primary_key=["id"],
            unique=["email"],
            indexed=["email"],
        ),
        "events": FakeTable(
            columns=events_columns(),
            partition_parent_key=["tenant_id", "seq"],
            indexed=["tenant_id", "happened_at", "tenant_id"],
        ),
        "audit_log": FakeTable(
            columns=[RawColumn(name="message", udt_name="text")],
        ),
    })


# ---------------------------------------------------------------------------
# Derived models and rendering
# ---------------------------------------------------------------------------


@pytest.fixture()
def users_model() -> TableModel:
    return derive_table_model(
        "public",
        "users",
        users_columns(),
        KeyResolution(columns=("id",), source=SOURCE_PRIMARY_KEY),
        ["email"],
    )


@pytest.fixture()
def events_model() -> TableModel:
    return derive_table_model(
        "analytics",
        "events",
        events_columns(),
        KeyResolution(columns=("tenant_id", "seq"), source="partition parent"),
        ["happened_at", "tenant_id"],
    )


@pytest.fixture(scope="session")
def renderer() -> TemplateRenderer:
    return TemplateRenderer()


@pytest.fixture()
def output_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    return tmp_path / "internal" / "model"


@pytest.fixture()
def emitter(output_dir: pathlib.Path, renderer: TemplateRenderer) -> ModelEmitter:
    from datetime import datetime, timezone

    return ModelEmitter(
        output_dir,
        "model",
        renderer=renderer,
        generator_version="0.1.0",
        clock=lambda: datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc),
    )


@pytest.fixture()
def generator_config(output_dir: pathlib.Path) -> GeneratorConfig:
    return GeneratorConfig(
        url="postgres://app@localhost/app",
        tables=["users"],
        output_dir=output_dir,
    )
