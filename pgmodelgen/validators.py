# File: pgmodelgen/validators.py
"""
pgmodelgen - Configuration Validators
======================================
Checks a ``GeneratorConfig`` before anything touches the catalog or the
file system.  Any error here is a usage error: the CLI reports every issue
and exits without connecting.

Usage::

    from pgmodelgen.validators import validate_config
    result = validate_config(config)
    if not result:
        print(result.format_report())
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from pgmodelgen.models import GeneratorConfig
from pgmodelgen.utils import is_python_identifier

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("pgmodelgen.validators")

# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class ValidationIssue:
    """Lightweight issue descriptor (no Pydantic overhead)."""

    __slots__ = ("level", "code", "message", "context")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.level: str = level  # "error" | "warning" | "info"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()


class ValidationResult:
    """Accumulates ``ValidationIssue`` instances."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[ValidationIssue] = []

    def add_error(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationIssue("error", code, message, context))

    def add_warning(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationIssue("warning", code, message, context))

    def add_info(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationIssue("info", code, message, context))

    @property
    def errors(self) -> List[ValidationIssue]:
        return [e for e in self._items if e.is_error]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [e for e in self._items if e.is_warning]

    @property
    def codes(self) -> List[str]:
        return [e.code for e in self._items]

    @property
    def is_valid(self) -> bool:
        return not any(e.is_error for e in self._items)

    def summary(self) -> str:
        return (
            f"Validation: {len(self.errors)} error(s), "
            f"{len(self.warnings)} warning(s)."
        )

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are NO errors."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)

    def format_report(self, include_info: bool = False) -> str:
        lines: List[str] = [self.summary()]
        for item in self._items:
            if not include_info and item.level == "info":
                continue
            lines.append(f"  {item.level}: [{item.code}] {item.message}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Individual checks
# ---------------------------------------------------------------------------


def _check_url(config: GeneratorConfig, result: ValidationResult) -> None:
    if not config.url.strip():
        result.add_error(
            "URL_MISSING",
            "A connection URL is required (--url or PGMODELGEN_URL).",
        )
        return
    try:
        url = make_url(config.url)
    except ArgumentError as exc:
        result.add_error("URL_INVALID", f"Cannot parse connection URL: {exc}")
        return
    if url.get_backend_name() not in {"postgresql", "postgres"}:
        result.add_error(
            "URL_NOT_POSTGRES",
            f"Only PostgreSQL catalogs are supported, got '{url.drivername}'.",
            {"drivername": url.drivername},
        )


def _check_tables(config: GeneratorConfig, result: ValidationResult) -> None:
    if not config.tables:
        result.add_error(
            "TABLES_MISSING",
            "At least one table is required (--table a,b,c).",
        )
        return
    for name in config.tables:
        if "." in name:
            result.add_warning(
                "TABLE_QUALIFIED",
                f"Table '{name}' looks schema-qualified; set --schema instead.",
                {"table": name},
            )


def _check_output(config: GeneratorConfig, result: ValidationResult) -> None:
    if not is_python_identifier(config.package_name):
        result.add_error(
            "PACKAGE_INVALID",
            f"Package name '{config.package_name}' is not a valid Python identifier.",
            {"package": config.package_name},
        )
    if config.output_dir.exists() and not config.output_dir.is_dir():
        result.add_error(
            "OUTPUT_NOT_DIRECTORY",
            f"Output path {config.output_dir} exists and is not a directory.",
        )
    if not config.with_custom:
        result.add_info("CUSTOM_DISABLED", "Wrapper modules will not be created.")


def validate_config(config: GeneratorConfig) -> ValidationResult:
    """Run every configuration check and return the collected issues."""
    result = ValidationResult()
    _check_url(config, result)
    _check_tables(config, result)
    _check_output(config, result)

    if result.is_valid:
        logger.debug("Configuration valid. %s", result.summary())
    else:
        logger.debug("Configuration invalid. %s", result.summary())
    return result


__all__: List[str] = [
    "ValidationIssue",
    "ValidationResult",
    "validate_config",
]
