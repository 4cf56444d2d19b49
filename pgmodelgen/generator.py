# File: pgmodelgen/generator.py
"""
pgmodelgen - Generation Pipeline (Orchestrator)
================================================

Connects the phases for every requested table::

    Catalog Reader → Key Resolver → Metadata Deriver → Model Emitter

Workflow::

    1. Build a ``GeneratorConfig`` (config file + command-line overrides).
    2. Open the catalog once; the connection is reused for every table.
    3. Emit the package-wide support files.
    4. For each table, in the order requested:
         introspect → resolve keys → derive model → render generated module
         → render wrapper (only if absent).
    5. Return a ``GenerationReport``.

Error handling strategy:
    - Tables are independent.  A catalog, key, render or write failure
      aborts that table only; it is logged with the table name, recorded in
      the report, and the run continues with the next table.
    - Failing to open the catalog or to write the support files ends the
      run.  ``CatalogConnectionError`` propagates to the caller.
    - The report fails when any table failed.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol

import yaml
from pydantic import ValidationError

from pgmodelgen.catalog import open_catalog
from pgmodelgen.deriver import derive_table_model
from pgmodelgen.errors import PgModelGenError, UsageError
from pgmodelgen.exporters import FileRecord, FileStatus, ModelEmitter
from pgmodelgen.keys import KeySource, resolve_key_columns
from pgmodelgen.models import GeneratorConfig, RawColumn, TableModel
from pgmodelgen.templates import TemplateRenderer
from pgmodelgen.utils import Timer

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("pgmodelgen.generator")


class CatalogSource(KeySource, Protocol):
    """Everything the pipeline reads from the catalog for one table."""

    def read_table(self, schema: str, table: str) -> List[RawColumn]: ...

    def read_indexed_columns(self, schema: str, table: str) -> List[str]: ...


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """
    Outcome of one ``ModelGenerator.run()``.

    ``files`` holds one record per output file considered, including the
    ones kept because they already existed and, on a dry run, the ones
    that would have been written.
    """

    success: bool = False
    schema_name: str = ""
    output_directory: str = ""
    dry_run: bool = False

    tables_requested: List[str] = field(default_factory=list)
    tables_generated: List[str] = field(default_factory=list)
    table_errors: Dict[str, str] = field(default_factory=dict)
    run_errors: List[str] = field(default_factory=list)
    files: List[FileRecord] = field(default_factory=list)

    total_elapsed_seconds: float = 0.0

    def _paths(self, status: FileStatus) -> List[str]:
        return [f.path for f in self.files if f.status is status]

    @property
    def written(self) -> List[str]:
        return self._paths(FileStatus.WRITTEN)

    @property
    def skipped(self) -> List[str]:
        return self._paths(FileStatus.SKIPPED)

    @property
    def would_write(self) -> List[str]:
        return self._paths(FileStatus.DRY_RUN)

    @property
    def unformatted(self) -> List[str]:
        return [
            f.path for f in self.files
            if f.status is not FileStatus.SKIPPED and not f.formatted
        ]

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "SUCCESS" if self.success else "FAILED"
        lines.append(f"{'=' * 60}")
        lines.append("  pgmodelgen - Generation Report")
        lines.append(f"{'=' * 60}")
        lines.append(f"  Status:           {status}")
        lines.append(f"  Schema:           {self.schema_name}")
        lines.append(f"  Output:           {self.output_directory}")
        lines.append(
            f"  Tables:           {len(self.tables_generated)}/"
            f"{len(self.tables_requested)} generated"
        )
        if self.dry_run:
            lines.append(f"  Would write:      {len(self.would_write)} file(s)")
        else:
            lines.append(f"  Files written:    {len(self.written)}")
        lines.append(f"  Files kept:       {len(self.skipped)}")
        lines.append(f"  Total time:       {self.total_elapsed_seconds:.3f}s")

        if self.unformatted:
            lines.append(f"{'-' * 60}")
            lines.append(f"  Unformatted output ({len(self.unformatted)}):")
            for path in self.unformatted:
                lines.append(f"    ! {path}")

        if self.run_errors:
            lines.append(f"{'-' * 60}")
            lines.append(f"  Run Errors ({len(self.run_errors)}):")
            for err in self.run_errors:
                lines.append(f"    x {err}")

        if self.table_errors:
            lines.append(f"{'-' * 60}")
            lines.append(f"  Table Errors ({len(self.table_errors)}):")
            for table, err in self.table_errors.items():
                lines.append(f"    x {table}: {err}")

        lines.append(f"{'=' * 60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Config loader helpers
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise UsageError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise UsageError(
            f"Expected a JSON object at top level of {path}, got {type(data).__name__}."
        )
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise UsageError(f"Invalid YAML in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise UsageError(
            f"Expected a YAML mapping at top level of {path}, got {type(data).__name__}."
        )
    return data


def load_config_file(path: Path) -> Dict[str, Any]:
    """
    Load a generator config file (JSON or YAML), dispatching on extension.

    Raises:
        UsageError: If the file is missing or cannot be parsed.
    """
    if not path.exists():
        raise UsageError(f"Config file not found: {path}")
    if not path.is_file():
        raise UsageError(f"Config path is not a file: {path}")

    if path.suffix.lower() == ".json":
        return _load_json_file(path)
    # YAML is a superset of JSON, so anything else goes through the YAML loader.
    return _load_yaml_file(path)


# Config files may use the command-line spellings of these keys.
_CONFIG_KEY_ALIASES: Dict[str, str] = {
    "schema": "schema_name",
    "table": "tables",
    "dir": "output_dir",
}


def build_config(
    file_values: Optional[Mapping[str, Any]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> GeneratorConfig:
    """
    Merge config-file values with overrides and validate the result.

    Overrides whose value is ``None`` are ignored, so unset command-line
    flags never mask a file value.
    """
    merged: Dict[str, Any] = {
        _CONFIG_KEY_ALIASES.get(key, key): value
        for key, value in (file_values or {}).items()
    }
    for key, value in (overrides or {}).items():
        if value is not None:
            merged[_CONFIG_KEY_ALIASES.get(key, key)] = value
    try:
        return GeneratorConfig.model_validate(merged)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
            for err in exc.errors()
        )
        raise UsageError(f"Invalid configuration: {problems}") from exc


# ---------------------------------------------------------------------------
# ModelGenerator
# ---------------------------------------------------------------------------


class ModelGenerator:
    """
    Runs the per-table pipeline against an open catalog.

    Usage::

        generator = ModelGenerator(config)
        with open_catalog(config.url) as catalog:
            report = generator.run(catalog)
        print(report.summary())

    Tables are processed one at a time, in the order requested.
    """

    def __init__(
        self,
        config: GeneratorConfig,
        *,
        renderer: Optional[TemplateRenderer] = None,
        emitter: Optional[ModelEmitter] = None,
    ) -> None:
        from pgmodelgen import __version__

        self._config = config
        self._emitter = emitter or ModelEmitter(
            config.output_dir,
            config.package_name,
            renderer=renderer,
            generator_version=__version__,
            dry_run=config.dry_run,
        )
        logger.debug(
            "ModelGenerator initialised: schema=%s, tables=%s, dir=%s, dry_run=%s.",
            config.schema_name,
            config.tables,
            config.output_dir,
            config.dry_run,
        )

    @property
    def config(self) -> GeneratorConfig:
        return self._config

    # -----------------------------------------------------------------
    # Per-table steps
    # -----------------------------------------------------------------

    def build_table_model(self, source: CatalogSource, table: str) -> TableModel:
        """Introspect one table and derive its model."""
        schema = self._config.schema_name
        columns = source.read_table(schema, table)
        key = resolve_key_columns(source, schema, table)
        logger.info(
            "Table %s.%s: key %s from %s.",
            schema,
            table,
            ", ".join(key.columns),
            key.source,
        )
        indexed = source.read_indexed_columns(schema, table)
        return derive_table_model(schema, table, columns, key, indexed)

    def _process_table(self, source: CatalogSource, table: str) -> List[FileRecord]:
        meta = self.build_table_model(source, table)
        try:
            return self._emitter.emit_table(meta, with_custom=self._config.with_custom)
        except OSError as exc:
            raise PgModelGenError(f"table {table}: write: {exc}") from exc

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def run(self, source: CatalogSource) -> GenerationReport:
        config = self._config
        report = GenerationReport(
            schema_name=config.schema_name,
            output_directory=str(config.output_dir),
            dry_run=config.dry_run,
            tables_requested=list(config.tables),
        )

        with Timer("generation run") as total:
            try:
                report.files.extend(self._emitter.emit_support_files())
            except (PgModelGenError, OSError) as exc:
                logger.error("Could not write support files: %s", exc)
                report.run_errors.append(str(exc))
            else:
                for table in config.tables:
                    with Timer(f"table {table}") as t:
                        try:
                            records = self._process_table(source, table)
                        except PgModelGenError as exc:
                            logger.error("Table %s failed: %s", table, exc)
                            report.table_errors[table] = str(exc)
                            continue
                    report.files.extend(records)
                    report.tables_generated.append(table)
                    logger.info("Generated %s in %.3fs.", table, t.elapsed)

        report.total_elapsed_seconds = total.elapsed
        report.success = not report.run_errors and not report.table_errors
        if report.success:
            logger.info(
                "Generated %d table(s) in %.3fs.",
                len(report.tables_generated),
                total.elapsed,
            )
        else:
            logger.error(
                "%d of %d table(s) failed.",
                len(report.tables_requested) - len(report.tables_generated),
                len(report.tables_requested),
            )
        return report


def generate(
    config: GeneratorConfig,
    *,
    renderer: Optional[TemplateRenderer] = None,
) -> GenerationReport:
    """
    Open the catalog named by ``config.url`` and run the pipeline.

    Raises:
        CatalogConnectionError: If the catalog cannot be opened.
    """
    generator = ModelGenerator(config, renderer=renderer)
    with open_catalog(config.url) as catalog:
        return generator.run(catalog)


__all__: List[str] = [
    "CatalogSource",
    "GenerationReport",
    "ModelGenerator",
    "build_config",
    "generate",
    "load_config_file",
]
