"""
tests/test_validators.py
Unit tests for pgmodelgen.validators.

Tests cover:
- ValidationResult accumulation, truthiness and report formatting
- Each configuration check: URL, tables, package name, output path
"""

from __future__ import annotations

import pathlib

from pgmodelgen.models import GeneratorConfig
from pgmodelgen.validators import ValidationResult, validate_config


# ===========================================================================
# Result container
# ===========================================================================


class TestValidationResult:

    def test_empty_is_valid(self) -> None:
        result = ValidationResult()
        assert result.is_valid
        assert bool(result)
        assert len(result) == 0

    def test_errors_make_it_falsy(self) -> None:
        result = ValidationResult()
        result.add_warning("W", "careful")
        assert result
        result.add_error("E", "broken")
        assert not result
        assert [e.code for e in result.errors] == ["E"]
        assert [w.code for w in result.warnings] == ["W"]

    def test_format_report_hides_info_by_default(self) -> None:
        result = ValidationResult()
        result.add_info("I", "fyi")
        result.add_error("E", "broken")
        assert "fyi" not in result.format_report()
        assert "fyi" in result.format_report(include_info=True)
        assert result.summary() == "Validation: 1 error(s), 0 warning(s)."


# ===========================================================================
# validate_config
# ===========================================================================


class TestValidateConfig:

    def test_valid(self, generator_config: GeneratorConfig) -> None:
        result = validate_config(generator_config)
        assert result.is_valid, result.format_report()

    def test_missing_url_and_tables(self) -> None:
        result = validate_config(GeneratorConfig())
        assert not result
        assert {"URL_MISSING", "TABLES_MISSING"} <= set(result.codes)

    def test_blank_table_list(self) -> None:
        config = GeneratorConfig(url="postgres://x/db", tables=" , ,")
        assert "TABLES_MISSING" in validate_config(config).codes

    def test_unparseable_url(self) -> None:
        config = GeneratorConfig(url="not a url", tables="users")
        assert "URL_INVALID" in validate_config(config).codes

    def test_non_postgres_url(self) -> None:
        config = GeneratorConfig(url="mysql://x/db", tables="users")
        assert "URL_NOT_POSTGRES" in validate_config(config).codes

    def test_driver_qualified_postgres_url(self) -> None:
        config = GeneratorConfig(url="postgresql+psycopg://x/db", tables="users")
        assert validate_config(config).is_valid

    def test_package_must_be_identifier(self) -> None:
        config = GeneratorConfig(url="postgres://x/db", tables="users", package="my-models")
        assert "PACKAGE_INVALID" in validate_config(config).codes

    def test_directory_name_used_as_package(self, tmp_path: pathlib.Path) -> None:
        config = GeneratorConfig(
            url="postgres://x/db", tables="users", output_dir=tmp_path / "bad-name"
        )
        assert "PACKAGE_INVALID" in validate_config(config).codes

    def test_output_path_is_a_file(self, tmp_path: pathlib.Path) -> None:
        target = tmp_path / "model"
        target.write_text("", encoding="utf-8")
        config = GeneratorConfig(url="postgres://x/db", tables="users", output_dir=target)
        assert "OUTPUT_NOT_DIRECTORY" in validate_config(config).codes

    def test_qualified_table_name_warns(self) -> None:
        config = GeneratorConfig(url="postgres://x/db", tables="billing.invoice")
        result = validate_config(config)
        assert result.is_valid
        assert [w.code for w in result.warnings] == ["TABLE_QUALIFIED"]

    def test_no_custom_is_informational(self, generator_config: GeneratorConfig) -> None:
        generator_config.with_custom = False
        result = validate_config(generator_config)
        assert result.is_valid
        assert "CUSTOM_DISABLED" in result.codes
