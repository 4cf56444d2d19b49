# File: pgmodelgen/exporters.py
"""
pgmodelgen - Model Emitter (File-System Writer)
================================================

Renders a ``TableModel`` into files under the output directory.

Two write policies:
    - ``ALWAYS``: rendered and written on every run (``*_gen.py`` files).
    - ``IF_ABSENT``: written only when the target does not exist yet, so
      hand-written code in it survives regeneration.  The check and the
      write are not atomic together; runs are single-process.

Each write goes through a temp file and ``os.replace``, so a file is either
fully written or left as it was.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from pgmodelgen.models import TableModel
from pgmodelgen.templates import (
    BASE_FIELD_TEMPLATE,
    MODEL_GEN_TEMPLATE,
    MODEL_TEMPLATE,
    VAR_TEMPLATE,
    TemplateRenderer,
)
from pgmodelgen.utils import count_lines, ensure_directory, sha256_hex, write_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("pgmodelgen.exporters")

GENERATOR_NAME: str = "pgmodelgen"

VAR_FILE: str = "var.py"
BASE_FIELD_FILE: str = "base_field_gen.py"


def model_gen_file(file_base: str) -> str:
    return f"{file_base}_model_gen.py"


def model_file(file_base: str) -> str:
    return f"{file_base}_model.py"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """RFC 3339 UTC timestamp with second precision, e.g. ``2024-05-01T12:00:00Z``."""
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


class WritePolicy(str, Enum):
    ALWAYS = "always"
    IF_ABSENT = "if_absent"


class FileStatus(str, Enum):
    WRITTEN = "written"
    SKIPPED = "skipped"
    DRY_RUN = "dry_run"


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Outcome of one output file."""

    path: str
    status: FileStatus
    size_bytes: int = 0
    line_count: int = 0
    sha256: str = ""
    formatted: bool = True


# ---------------------------------------------------------------------------
# ModelEmitter
# ---------------------------------------------------------------------------


class ModelEmitter:
    """
    Writes the package-wide support files and the per-table modules.

    Usage::

        emitter = ModelEmitter(Path("./internal/model"), "model")
        emitter.emit_support_files()
        emitter.emit_table(table_model, with_custom=True)

    Not thread-safe; use one emitter per output directory.
    """

    def __init__(
        self,
        output_dir: Path,
        package: str,
        *,
        renderer: Optional[TemplateRenderer] = None,
        generator_version: str = "",
        dry_run: bool = False,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._output_dir = Path(output_dir)
        self._package = package
        self._renderer = renderer or TemplateRenderer()
        self._generator_version = generator_version
        self._dry_run = dry_run
        self._clock = clock

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def _context(self, **extra: Any) -> Dict[str, Any]:
        context: Dict[str, Any] = {
            "package": self._package,
            "generator_name": GENERATOR_NAME,
            "generator_version": self._generator_version,
        }
        context.update(extra)
        return context

    def _emit(
        self,
        file_name: str,
        template_name: str,
        context: Dict[str, Any],
        policy: WritePolicy,
    ) -> FileRecord:
        path = self._output_dir / file_name

        if policy is WritePolicy.IF_ABSENT and path.exists():
            logger.info("Keeping existing %s.", path)
            return FileRecord(path=str(path), status=FileStatus.SKIPPED)

        source = self._renderer.render(template_name, context)
        size = len(source.text.encode("utf-8"))

        if self._dry_run:
            logger.info("Dry run: would write %s (%d bytes).", path, size)
            status = FileStatus.DRY_RUN
        else:
            ensure_directory(path.parent)
            write_file(path, source.text)
            logger.info("Wrote %s (%d bytes).", path, size)
            status = FileStatus.WRITTEN

        return FileRecord(
            path=str(path),
            status=status,
            size_bytes=size,
            line_count=count_lines(source.text),
            sha256=sha256_hex(source.text),
            formatted=source.formatted,
        )

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def emit_support_files(self) -> List[FileRecord]:
        """Write ``var.py`` (once) and ``base_field_gen.py`` (every run)."""
        return [
            self._emit(VAR_FILE, VAR_TEMPLATE, self._context(), WritePolicy.IF_ABSENT),
            self._emit(
                BASE_FIELD_FILE, BASE_FIELD_TEMPLATE, self._context(), WritePolicy.ALWAYS
            ),
        ]

    def emit_table(self, meta: TableModel, *, with_custom: bool = True) -> List[FileRecord]:
        """Write the generated module and, if absent, the editable wrapper."""
        context = self._context(meta=meta, generated_at=format_timestamp(self._clock()))
        records = [
            self._emit(
                model_gen_file(meta.file_base), MODEL_GEN_TEMPLATE, context, WritePolicy.ALWAYS
            )
        ]
        if with_custom:
            records.append(
                self._emit(
                    model_file(meta.file_base), MODEL_TEMPLATE, context, WritePolicy.IF_ABSENT
                )
            )
        return records


__all__: List[str] = [
    "GENERATOR_NAME",
    "VAR_FILE",
    "BASE_FIELD_FILE",
    "FileRecord",
    "FileStatus",
    "ModelEmitter",
    "WritePolicy",
    "format_timestamp",
    "model_file",
    "model_gen_file",
    "utc_now",
]
