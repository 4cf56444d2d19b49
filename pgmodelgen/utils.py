# File: pgmodelgen/utils.py
"""
pgmodelgen - Utility Functions & Helpers
=========================================
Identifier casing, file I/O and timing helpers used throughout the
generation pipeline.

Casing rules:
- Catalog identifiers are split on ``_`` and ``-`` only; each part is
  lower-cased then capitalised, so ``user_ID`` becomes ``UserId``.
- The token ``id`` is always rendered ``Id`` (never the acronym ``ID``).
- The conversions are pure, so they are cached with ``lru_cache``.
"""

from __future__ import annotations

import functools
import hashlib
import keyword
import logging
import os
import re
import tempfile
import time
from pathlib import Path
from typing import FrozenSet, List, Optional

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("pgmodelgen.utils")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns
# ---------------------------------------------------------------------------

_WORD_SEPARATOR_RE: re.Pattern[str] = re.compile(r"[_\-]+")
_NON_IDENTIFIER_RE: re.Pattern[str] = re.compile(r"[^A-Za-z0-9_]")


# ---------------------------------------------------------------------------
# Cached string transformation functions
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def to_camel(name: str) -> str:
    """
    Convert a snake/kebab catalog identifier to a Capitalised compound word.

    Examples:
        >>> to_camel("user_profile")
        'UserProfile'
        >>> to_camel("order-item")
        'OrderItem'
        >>> to_camel("user_id")
        'UserId'
        >>> to_camel("ID")
        'Id'
    """
    parts: List[str] = [p for p in _WORD_SEPARATOR_RE.split(name) if p]
    words: List[str] = []
    for part in parts:
        lowered: str = part.lower()
        if lowered == "id":
            words.append("Id")
            continue
        words.append(lowered[:1].upper() + lowered[1:])
    return "".join(words)


def lower_first(name: str) -> str:
    """Lower-case the first character only."""
    if not name:
        return name
    return name[:1].lower() + name[1:]


@functools.lru_cache(maxsize=None)
def to_lower_camel(name: str) -> str:
    """
    Convert a catalog identifier to lowerCamel (used for parameter names).

    Examples:
        >>> to_lower_camel("user_id")
        'userId'
        >>> to_lower_camel("id")
        'id'
    """
    return lower_first(to_camel(name))


# Names bound inside the generated modules (imports, locals, the filter
# method); a column attribute or key parameter must not shadow them.
RESERVED_ATTRIBUTES: FrozenSet[str] = frozenset({
    "Any",
    "Connection",
    "Decimal",
    "List",
    "Optional",
    "Sequence",
    "conditions",
    "dataclass",
    "datetime",
    "postgresql",
    "row",
    "sa",
    "self",
    "stmt",
})


@functools.lru_cache(maxsize=None)
def safe_identifier(name: str) -> str:
    """
    Make *name* a valid Python identifier.

    Characters outside ``[A-Za-z0-9_]`` become underscores, a leading digit
    gets an underscore prefix and keywords get an underscore suffix.

    Examples:
        >>> safe_identifier("2faEnabled")
        '_2faEnabled'
        >>> safe_identifier("None")
        'None_'
    """
    result: str = _NON_IDENTIFIER_RE.sub("_", name)
    if not result:
        return "_unnamed"
    if result[0].isdigit():
        result = f"_{result}"
    if keyword.iskeyword(result):
        result = f"{result}_"
    return result


@functools.lru_cache(maxsize=None)
def safe_attribute(name: str) -> str:
    """
    Make a catalog column name usable as a Python attribute or parameter.

    Same rules as ``safe_identifier``; names in ``RESERVED_ATTRIBUTES``
    also get an underscore suffix.
    """
    result: str = safe_identifier(name)
    if result in RESERVED_ATTRIBUTES:
        result = f"{result}_"
    return result


def file_base_name(table: str) -> str:
    """
    Base name shared by a table's generated files.

    Characters outside ``[A-Za-z0-9_]`` become underscores and a leading
    digit gets an underscore prefix, so the result is importable.
    """
    result: str = _NON_IDENTIFIER_RE.sub("_", table)
    if result[:1].isdigit():
        result = f"_{result}"
    return result


def is_python_identifier(name: str) -> bool:
    """True when *name* can be used as a package/module name."""
    return name.isidentifier() and not keyword.iskeyword(name)


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    """Create directory (and parents) if it doesn't exist."""
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


def write_file(path: Path, content: str) -> int:
    """
    Write *content* to *path* atomically.

    The data goes to a temporary file in the same directory which then
    replaces the target, so a failed write never leaves a truncated file.

    Returns the number of bytes written.
    """
    encoded: bytes = content.encode("utf-8")

    fd, tmp_path = tempfile.mkstemp(
        dir=str(path.parent),
        prefix=f".{path.name}.",
        suffix=".tmp",
    )
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(encoded)
        os.replace(tmp_path, str(path))
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise

    logger.debug("Wrote %d bytes to %s", len(encoded), path)
    return len(encoded)


# ---------------------------------------------------------------------------
# Checksum & metrics
# ---------------------------------------------------------------------------


def sha256_hex(content: str) -> str:
    """Return SHA-256 hex digest of a string."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def count_lines(content: str) -> int:
    """Count the number of lines in a string."""
    if not content:
        return 0
    return content.count("\n") + (1 if not content.endswith("\n") else 0)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Simple context-manager timer for profiling generation steps.

    Usage:
        with Timer("introspect users") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.debug("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "to_camel",
    "to_lower_camel",
    "lower_first",
    "RESERVED_ATTRIBUTES",
    "safe_identifier",
    "safe_attribute",
    "file_base_name",
    "is_python_identifier",
    "ensure_directory",
    "write_file",
    "sha256_hex",
    "count_lines",
    "Timer",
]
