"""
tests/test_keys.py
Unit tests for pgmodelgen.keys (identity column resolution).

Tests cover:
- Cascade order: primary key, unique constraint, partition parent
- Lazy querying (later sources are not read once a key is found)
- Composite keys keep ordinal order
- Failure when every source is empty
"""

from __future__ import annotations

from typing import Dict, List

import pytest

from pgmodelgen.errors import CatalogError, KeyResolutionError, SchemaShapeError
from pgmodelgen.keys import (
    SOURCE_PARTITION_PARENT,
    SOURCE_PRIMARY_KEY,
    SOURCE_UNIQUE,
    resolve_key_columns,
)


class StubKeySource:
    def __init__(self, **answers: List[str]) -> None:
        self.answers: Dict[str, List[str]] = answers
        self.asked: List[str] = []

    def _answer(self, name: str) -> List[str]:
        self.asked.append(name)
        answer = self.answers.get(name, [])
        if isinstance(answer, Exception):
            raise answer
        return answer

    def read_primary_key_columns(self, schema: str, table: str) -> List[str]:
        return self._answer("primary")

    def read_unique_key_columns(self, schema: str, table: str) -> List[str]:
        return self._answer("unique")

    def read_partition_primary_key_columns(self, schema: str, table: str) -> List[str]:
        return self._answer("partition")


class TestResolveKeyColumns:

    def test_primary_key_wins_over_unique(self) -> None:
        source = StubKeySource(primary=["id"], unique=["email"])
        key = resolve_key_columns(source, "public", "users")
        assert key.columns == ("id",)
        assert key.source == SOURCE_PRIMARY_KEY
        assert source.asked == ["primary"]

    def test_unique_used_without_primary_key(self) -> None:
        source = StubKeySource(unique=["tenant", "code"])
        key = resolve_key_columns(source, "public", "codes")
        assert key.columns == ("tenant", "code")
        assert key.source == SOURCE_UNIQUE
        assert source.asked == ["primary", "unique"]

    def test_partition_parent_is_last_resort(self) -> None:
        source = StubKeySource(partition=["tenant_id", "seq"])
        key = resolve_key_columns(source, "public", "events_2024")
        assert key.columns == ("tenant_id", "seq")
        assert key.source == SOURCE_PARTITION_PARENT

    def test_composite_primary_key_keeps_order(self) -> None:
        source = StubKeySource(primary=["b", "a", "c"])
        assert resolve_key_columns(source, "s", "t").columns == ("b", "a", "c")

    def test_repeated_rows_are_collapsed(self) -> None:
        source = StubKeySource(partition=["tenant_id", "seq", "tenant_id", "seq"])
        assert resolve_key_columns(source, "s", "t").columns == ("tenant_id", "seq")

    def test_no_identity_raises(self) -> None:
        source = StubKeySource()
        with pytest.raises(KeyResolutionError) as excinfo:
            resolve_key_columns(source, "public", "audit_log")
        err = excinfo.value
        assert isinstance(err, SchemaShapeError)
        assert err.tried == [SOURCE_PRIMARY_KEY, SOURCE_UNIQUE, SOURCE_PARTITION_PARENT]
        assert "public.audit_log" in str(err)
        assert "composite primary key/unique is supported" in str(err)

    def test_catalog_errors_propagate(self) -> None:
        failure = CatalogError("boom", table="users", operation="read primary key")
        source = StubKeySource(primary=failure)
        with pytest.raises(CatalogError, match="read primary key"):
            resolve_key_columns(source, "public", "users")
