# File: pgmodelgen/catalog.py
"""
pgmodelgen - Catalog Reader
============================

Read-only introspection of a PostgreSQL table through SQLAlchemy Core.

Each ``read_*`` method issues exactly one parameterised query and returns
raw facts; no decisions are made here.  Query failures are wrapped in
``CatalogError`` naming the table and the operation.

The connection is opened in ``AUTOCOMMIT`` mode: the reader never writes,
and a failed query must not leave an aborted transaction behind for the
next table.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, URL, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError

from pgmodelgen.errors import CatalogConnectionError, CatalogError, TableNotFoundError
from pgmodelgen.models import RawColumn

logger: logging.Logger = logging.getLogger("pgmodelgen.catalog")

# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

COLUMNS_QUERY: str = """
select
  c.column_name,
  c.udt_name,
  c.is_nullable = 'YES' as is_nullable,
  c.is_identity = 'YES' as is_identity,
  c.column_default
from information_schema.columns c
where c.table_schema = :schema
  and c.table_name = :table
order by c.ordinal_position
"""

# col_description() addresses the comment by (table oid, attnum), so a
# comment can only ever resolve to the column it was written for.
COLUMN_COMMENTS_QUERY: str = """
select
  a.attname as column_name,
  col_description(c.oid, a.attnum) as description
from pg_catalog.pg_attribute a
join pg_catalog.pg_class c on a.attrelid = c.oid
join pg_catalog.pg_namespace n on c.relnamespace = n.oid
where n.nspname = :schema
  and c.relname = :table
  and a.attnum > 0
  and not a.attisdropped
  and col_description(c.oid, a.attnum) is not null
"""

PRIMARY_KEY_QUERY: str = """
select kcu.column_name
from information_schema.table_constraints tc
join information_schema.key_column_usage kcu
  on tc.constraint_name = kcu.constraint_name
  and tc.table_schema = kcu.table_schema
  and tc.table_name = kcu.table_name
where tc.table_schema = :schema
  and tc.table_name = :table
  and tc.constraint_type = 'PRIMARY KEY'
order by kcu.ordinal_position
"""

UNIQUE_KEY_QUERY: str = """
select kcu.column_name
from information_schema.table_constraints tc
join information_schema.key_column_usage kcu
  on tc.constraint_name = kcu.constraint_name
  and tc.table_schema = kcu.table_schema
  and tc.table_name = kcu.table_name
where tc.table_schema = :schema
  and tc.table_name = :table
  and tc.constraint_type = 'UNIQUE'
  and tc.constraint_name = (
    select tc2.constraint_name
    from information_schema.table_constraints tc2
    where tc2.table_schema = :schema
      and tc2.table_name = :table
      and tc2.constraint_type = 'UNIQUE'
    order by tc2.constraint_name
    limit 1
  )
order by kcu.ordinal_position
"""

PARTITION_PARENT_KEY_QUERY: str = """
with parent as (
  select i.inhparent as oid
  from pg_catalog.pg_inherits i
  join pg_catalog.pg_class child on child.oid = i.inhrelid
  join pg_catalog.pg_namespace n on n.oid = child.relnamespace
  join pg_catalog.pg_class p on p.oid = i.inhparent
  where n.nspname = :schema
    and child.relname = :table
  order by p.relname
  limit 1
)
select a.attname
from parent
join pg_catalog.pg_constraint con
  on con.conrelid = parent.oid
  and con.contype = 'p'
cross join lateral unnest(con.conkey) with ordinality as k(attnum, ord)
join pg_catalog.pg_attribute a
  on a.attrelid = parent.oid
  and a.attnum = k.attnum
order by k.ord
"""

INDEXED_COLUMNS_QUERY: str = """
select distinct a.attname
from pg_catalog.pg_class t
join pg_catalog.pg_namespace n on n.oid = t.relnamespace
join pg_catalog.pg_index ix on t.oid = ix.indrelid
join pg_catalog.pg_attribute a on a.attrelid = t.oid
where n.nspname = :schema
  and t.relname = :table
  and a.attnum = any(ix.indkey::int2[])
order by a.attname
"""


# ---------------------------------------------------------------------------
# Connection helpers
# ---------------------------------------------------------------------------


def normalize_url(url: str) -> URL:
    """
    Parse *url* and pin bare ``postgres://``/``postgresql://`` to psycopg.

    >>> normalize_url("postgres://u:p@localhost:5432/app").drivername
    'postgresql+psycopg'
    """
    parsed: URL = make_url(url)
    if parsed.drivername in {"postgresql", "postgres"}:
        parsed = parsed.set(drivername="postgresql+psycopg")
    return parsed


@contextmanager
def open_catalog(url: str) -> Iterator["CatalogReader"]:
    """Open one catalog connection for the whole run and yield a reader on it."""
    try:
        engine = create_engine(normalize_url(url), pool_pre_ping=True)
        conn = engine.connect().execution_options(isolation_level="AUTOCOMMIT")
    except (ArgumentError, SQLAlchemyError) as exc:
        raise CatalogConnectionError(f"cannot connect to catalog: {exc}") from exc

    logger.info("Connected to catalog %s.", engine.url.render_as_string(hide_password=True))
    try:
        yield CatalogReader(conn)
    finally:
        conn.close()
        engine.dispose()


# ---------------------------------------------------------------------------
# CatalogReader
# ---------------------------------------------------------------------------


class CatalogReader:
    """
    Introspection queries for one table at a time.

    Usage::

        with open_catalog(url) as reader:
            columns = reader.read_columns("public", "users")
    """

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def _fetch(
        self,
        query: str,
        schema: str,
        table: str,
        operation: str,
    ) -> List[Mapping[str, Any]]:
        logger.debug("Catalog query [%s] for %s.%s.", operation, schema, table)
        try:
            result = self._conn.execute(text(query), {"schema": schema, "table": table})
            return list(result.mappings().all())
        except SQLAlchemyError as exc:
            raise CatalogError(str(exc), table=table, operation=operation) from exc

    def _fetch_names(
        self,
        query: str,
        schema: str,
        table: str,
        operation: str,
        key: str = "column_name",
    ) -> List[str]:
        rows = self._fetch(query, schema, table, operation)
        try:
            return [str(row[key]) for row in rows]
        except KeyError as exc:
            raise CatalogError(
                f"malformed result row, missing {exc}", table=table, operation=operation
            ) from exc

    # -- Facts ---------------------------------------------------------------

    def read_columns(self, schema: str, table: str) -> List[RawColumn]:
        """Columns in ordinal order; raises ``TableNotFoundError`` if there are none."""
        rows = self._fetch(COLUMNS_QUERY, schema, table, "read columns")
        if not rows:
            raise TableNotFoundError(schema, table)
        try:
            return [
                RawColumn(
                    name=row["column_name"],
                    udt_name=row["udt_name"],
                    is_nullable=bool(row["is_nullable"]),
                    is_identity=bool(row["is_identity"]),
                    column_default=row["column_default"],
                )
                for row in rows
            ]
        except (KeyError, TypeError, ValueError) as exc:
            raise CatalogError(
                f"malformed column row: {exc}", table=table, operation="read columns"
            ) from exc

    def read_column_comments(self, schema: str, table: str) -> Dict[str, str]:
        """Mapping of column name to comment, for documented columns only."""
        rows = self._fetch(COLUMN_COMMENTS_QUERY, schema, table, "read column comments")
        try:
            return {
                str(row["column_name"]): str(row["description"])
                for row in rows
                if row["description"]
            }
        except KeyError as exc:
            raise CatalogError(
                f"malformed result row, missing {exc}",
                table=table,
                operation="read column comments",
            ) from exc

    def read_primary_key_columns(self, schema: str, table: str) -> List[str]:
        return self._fetch_names(PRIMARY_KEY_QUERY, schema, table, "read primary key")

    def read_unique_key_columns(self, schema: str, table: str) -> List[str]:
        """Columns of the unique constraint with the smallest name."""
        return self._fetch_names(UNIQUE_KEY_QUERY, schema, table, "read unique constraint")

    def read_partition_primary_key_columns(self, schema: str, table: str) -> List[str]:
        """Primary key of the partitioned parent this table belongs to, if any."""
        return self._fetch_names(
            PARTITION_PARENT_KEY_QUERY, schema, table, "read partition parent key", key="attname"
        )

    def read_indexed_columns(self, schema: str, table: str) -> List[str]:
        """Distinct, name-sorted columns taking part in any index."""
        names = self._fetch_names(
            INDEXED_COLUMNS_QUERY, schema, table, "read indexed columns", key="attname"
        )
        return sorted(set(names))

    def read_table(self, schema: str, table: str) -> List[RawColumn]:
        """Columns with their comments attached."""
        columns = self.read_columns(schema, table)
        comments = self.read_column_comments(schema, table)
        return [
            col.with_comment(comments[col.name]) if col.name in comments else col
            for col in columns
        ]


__all__: List[str] = [
    "CatalogReader",
    "open_catalog",
    "normalize_url",
    "COLUMNS_QUERY",
    "COLUMN_COMMENTS_QUERY",
    "PRIMARY_KEY_QUERY",
    "UNIQUE_KEY_QUERY",
    "PARTITION_PARENT_KEY_QUERY",
    "INDEXED_COLUMNS_QUERY",
]
