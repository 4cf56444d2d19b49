# File: pgmodelgen/cli.py
"""
pgmodelgen - Command-Line Interface
====================================

Built on the standard-library ``argparse`` module.

Usage examples::

    # Generate models for two tables of the public schema
    pgmodelgen --url postgres://app@localhost/app --table users,orders

    # Custom schema, output directory and package, no wrapper modules
    pgmodelgen --url $DB --schema billing --table invoice \\
        --dir ./app/billing_model --package billing_model --no-custom

    # Settings from a file, URL from the environment, nothing written
    PGMODELGEN_URL=postgres://... pgmodelgen -c pgmodelgen.yaml --dry-run -v

Exit codes:
    0 - success
    1 - one or more tables failed
    2 - usage error (missing or invalid input; nothing was touched)
    3 - the catalog could not be opened
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional, Sequence

from pgmodelgen.errors import CatalogConnectionError, UsageError
from pgmodelgen.models import GeneratorConfig

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("pgmodelgen")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_TABLE_ERROR: int = 1
EXIT_USAGE_ERROR: int = 2
EXIT_CONNECTION_ERROR: int = 3

ENV_URL: str = "PGMODELGEN_URL"


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the root pgmodelgen logger based on verbosity level.

    Args:
        verbosity: -1 = ERROR, 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    elif verbosity >= 0:
        level = logging.WARNING
    else:
        level = logging.ERROR

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    fmt: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    datefmt: str = "%H:%M:%S"
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root_logger: logging.Logger = logging.getLogger("pgmodelgen")
    root_logger.setLevel(level)

    # Remove existing handlers to prevent duplication
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from pgmodelgen import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="pgmodelgen",
        description=(
            "pgmodelgen - typed data-access code from a PostgreSQL catalog.\n\n"
            "Reads the columns, keys and indexes of each requested table and "
            "writes a SQLAlchemy Core model module per table."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s --url postgres://localhost/app --table users,orders\n"
            "  %(prog)s -c pgmodelgen.yaml --dry-run -v\n"
            f"\nThe connection URL defaults to ${ENV_URL}.\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"pgmodelgen v{__version__}",
    )

    # --- Source ---
    source_group = parser.add_argument_group("catalog")
    source_group.add_argument(
        "--url",
        type=str,
        default=None,
        metavar="URL",
        help=f"PostgreSQL connection URL (default: ${ENV_URL}).",
    )
    source_group.add_argument(
        "--schema",
        type=str,
        default=None,
        metavar="NAME",
        help="Schema holding the tables (default: public).",
    )
    source_group.add_argument(
        "--table",
        type=str,
        default=None,
        metavar="A,B,C",
        help="Comma-separated list of tables to generate.",
    )

    # --- Output ---
    output_group = parser.add_argument_group("output")
    output_group.add_argument(
        "--dir",
        type=str,
        default=None,
        metavar="DIR",
        help="Output directory (default: ./internal/model).",
    )
    output_group.add_argument(
        "--package",
        type=str,
        default=None,
        metavar="NAME",
        help="Package name (default: the output directory's base name).",
    )
    output_group.add_argument(
        "--with-custom",
        dest="with_custom",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Create the editable <table>_model.py wrapper when absent (default: on).",
    )

    # --- Modes ---
    mode_group = parser.add_argument_group("operation modes")
    mode_group.add_argument(
        "-c", "--config",
        type=str,
        default=None,
        metavar="PATH",
        help="YAML or JSON file with settings; flags override its values.",
    )
    mode_group.add_argument(
        "--dry-run",
        dest="dry_run",
        action="store_const",
        const=True,
        default=None,
        help="Render everything but write nothing.",
    )

    # --- Verbosity ---
    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Only report errors; no summary.",
    )

    return parser


# ---------------------------------------------------------------------------
# Config assembly
# ---------------------------------------------------------------------------


def _build_config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Command-line values; ``None`` means the flag was not given."""
    return {
        "url": args.url,
        "schema_name": args.schema,
        "tables": args.table,
        "output_dir": args.dir,
        "package": args.package,
        "with_custom": args.with_custom,
        "dry_run": args.dry_run,
    }


def _resolve_config(args: argparse.Namespace) -> GeneratorConfig:
    """
    Environment, then config file, then flags; later sources win.

    Raises:
        UsageError: If the config file or the merged values are invalid.
    """
    from pgmodelgen.generator import build_config, load_config_file

    file_values: Dict[str, Any] = {}
    env_url = os.environ.get(ENV_URL)
    if env_url:
        file_values["url"] = env_url
    if args.config:
        file_values.update(load_config_file(Path(args.config)))
    return build_config(file_values, _build_config_overrides(args))


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Parse arguments, run the generator and return the exit code.

    Usage errors are reported before the catalog or the output directory
    is touched.
    """
    from pgmodelgen.generator import generate
    from pgmodelgen.validators import validate_config

    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    verbosity: int = -1 if args.quiet else args.verbose
    _setup_logging(verbosity)

    # --- Usage checks ---
    try:
        config = _resolve_config(args)
    except UsageError as exc:
        logger.error("%s", exc)
        parser.print_usage(sys.stderr)
        return EXIT_USAGE_ERROR

    result = validate_config(config)
    for warning in result.warnings:
        logger.warning("%s", warning.message)
    if not result:
        for error in result.errors:
            logger.error("%s", error.message)
        parser.print_usage(sys.stderr)
        return EXIT_USAGE_ERROR

    logger.info("Schema:  %s", config.schema_name)
    logger.info("Tables:  %s", ", ".join(config.tables))
    logger.info("Output:  %s (package %s)", config.output_dir, config.package_name)
    if config.dry_run:
        logger.info("Dry-run mode: files will not be written to disk.")

    # --- Run generation ---
    try:
        report = generate(config)
    except CatalogConnectionError as exc:
        logger.error("%s", exc)
        return EXIT_CONNECTION_ERROR

    if not args.quiet:
        print(report.summary())

    if not report.success:
        logger.error(
            "Generation failed: %d table error(s), %d run error(s).",
            len(report.table_errors),
            len(report.run_errors),
        )
        return EXIT_TABLE_ERROR

    logger.info("Generation completed successfully.")
    return EXIT_SUCCESS


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """Run ``main`` and exit the process with its status."""
    sys.exit(main(argv))


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "main",
    "ENV_URL",
    "EXIT_SUCCESS",
    "EXIT_TABLE_ERROR",
    "EXIT_USAGE_ERROR",
    "EXIT_CONNECTION_ERROR",
]
