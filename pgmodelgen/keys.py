# File: pgmodelgen/keys.py
"""
pgmodelgen - Key Resolver
==========================

Chooses the identity column set of a table.  The sources are tried in
order and the first non-empty one wins:

    1. primary key
    2. unique constraint (the one with the smallest constraint name)
    3. primary key of the partitioned parent table

Later sources are only queried when the earlier ones come back empty.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Protocol, Sequence, Tuple

from pgmodelgen.errors import KeyResolutionError

logger: logging.Logger = logging.getLogger("pgmodelgen.keys")

SOURCE_PRIMARY_KEY: str = "primary key"
SOURCE_UNIQUE: str = "unique constraint"
SOURCE_PARTITION_PARENT: str = "partition parent"


class KeySource(Protocol):
    """The part of the catalog reader the resolver depends on."""

    def read_primary_key_columns(self, schema: str, table: str) -> List[str]: ...

    def read_unique_key_columns(self, schema: str, table: str) -> List[str]: ...

    def read_partition_primary_key_columns(self, schema: str, table: str) -> List[str]: ...


@dataclass(frozen=True, slots=True)
class KeyResolution:
    """The chosen identity columns, in constraint ordinal order."""

    columns: Tuple[str, ...]
    source: str


def _cascade(source: KeySource) -> Sequence[Tuple[str, Callable[[str, str], List[str]]]]:
    return (
        (SOURCE_PRIMARY_KEY, source.read_primary_key_columns),
        (SOURCE_UNIQUE, source.read_unique_key_columns),
        (SOURCE_PARTITION_PARENT, source.read_partition_primary_key_columns),
    )


def _dedupe(columns: Sequence[str]) -> Tuple[str, ...]:
    # Partition lookups can list a key column once per matched row.
    seen: List[str] = []
    for name in columns:
        if name in seen:
            break
        seen.append(name)
    return tuple(seen)


def resolve_key_columns(source: KeySource, schema: str, table: str) -> KeyResolution:
    """
    Resolve the identity columns of ``schema.table``.

    Raises:
        KeyResolutionError: when every source is empty.
        CatalogError: propagated unchanged from the reader.
    """
    tried: List[str] = []
    for label, read in _cascade(source):
        columns = _dedupe(read(schema, table))
        tried.append(label)
        if columns:
            logger.debug(
                "Key for %s.%s from %s: %s.", schema, table, label, ", ".join(columns)
            )
            return KeyResolution(columns=columns, source=label)

    raise KeyResolutionError(schema, table, tried)


__all__: List[str] = [
    "KeySource",
    "KeyResolution",
    "resolve_key_columns",
    "SOURCE_PRIMARY_KEY",
    "SOURCE_UNIQUE",
    "SOURCE_PARTITION_PARENT",
]
