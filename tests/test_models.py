"""
tests/test_models.py
Unit tests for pgmodelgen.models (GeneratorConfig and TableModel invariants).
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from pgmodelgen.models import DEFAULT_SCHEMA, GeneratorConfig, RawColumn, TableModel


class TestGeneratorConfig:

    def test_defaults(self) -> None:
        config = GeneratorConfig()
        assert config.schema_name == DEFAULT_SCHEMA
        assert config.output_dir == Path("./internal/model")
        assert config.with_custom is True
        assert config.dry_run is False
        assert config.package_name == "model"

    def test_tables_from_comma_string(self) -> None:
        config = GeneratorConfig(table=" users, orders ,,users,items ")
        assert config.tables == ["users", "orders", "items"]

    def test_aliases_and_names(self) -> None:
        by_alias = GeneratorConfig.model_validate({"schema": "billing", "dir": "out/billing"})
        by_name = GeneratorConfig(schema_name="billing", output_dir=Path("out/billing"))
        assert by_alias.schema_name == by_name.schema_name == "billing"
        assert by_alias.output_dir == by_name.output_dir

    def test_empty_schema_falls_back(self) -> None:
        assert GeneratorConfig(schema_name="").schema_name == DEFAULT_SCHEMA

    def test_package_defaults_to_directory_name(self) -> None:
        assert GeneratorConfig(output_dir=Path("app/billing_model")).package_name == (
            "billing_model"
        )

    def test_explicit_package_wins(self) -> None:
        config = GeneratorConfig(output_dir=Path("app/billing_model"), package="billing")
        assert config.package_name == "billing"

    def test_unknown_keys_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GeneratorConfig.model_validate({"tabel": "users"})


class TestTableModelInvariants:

    def test_updatable_key_rejected(self, users_model: TableModel) -> None:
        data = users_model.model_dump(exclude={"qualified_name"})
        data["update_columns"] = [
            c for c in data["columns"] if c["column_name"] in ("id", "email")
        ]
        with pytest.raises(ValidationError, match="updatable"):
            TableModel.model_validate(data)

    def test_empty_key_rejected(self, users_model: TableModel) -> None:
        data = users_model.model_dump(exclude={"qualified_name"})
        data["key_columns"] = []
        with pytest.raises(ValidationError):
            TableModel.model_validate(data)

    def test_raw_column_with_comment(self) -> None:
        column = RawColumn(name="email", udt_name="text")
        assert column.with_comment("login").comment == "login"
        assert column.comment == ""
