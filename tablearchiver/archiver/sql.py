"""SQL statement builders for the archival workflow.

Table and partition names cannot be bound as parameters in DDL, so they are
quoted with the MySQL dialect's identifier preparer before interpolation.
Values are always passed as bound parameters.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import column, insert, table, text
from sqlalchemy.dialects import mysql
from sqlalchemy.sql.dml import Insert
from sqlalchemy.sql.elements import TextClause

from tablearchiver.core.models import METADATA_COLUMNS

_preparer = mysql.dialect().identifier_preparer


def quote_identifier(name: str) -> str:
    """Backtick-quote a MySQL identifier, escaping embedded backticks."""
    if not name:
        raise ValueError("Identifier must be a non-empty string")
    return _preparer.quote_identifier(name)


def qualified_name(name: str, schema: Optional[str] = None) -> str:
    """Quoted ``schema.table`` (or bare table when schema is None)."""
    if schema:
        return f"{quote_identifier(schema)}.{quote_identifier(name)}"
    return quote_identifier(name)


# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------
def create_table_like(archive_table: str, source_table: str, schema: Optional[str] = None) -> TextClause:
    return text(
        f"CREATE TABLE {qualified_name(archive_table, schema)} "
        f"LIKE {qualified_name(source_table, schema)}"
    )


def remove_partitioning(archive_table: str, schema: Optional[str] = None) -> TextClause:
    return text(f"ALTER TABLE {qualified_name(archive_table, schema)} REMOVE PARTITIONING")


def exchange_partition(
    source_table: str, partition_name: str, archive_table: str, schema: Optional[str] = None
) -> TextClause:
    return text(
        f"ALTER TABLE {qualified_name(source_table, schema)} "
        f"EXCHANGE PARTITION {quote_identifier(partition_name)} "
        f"WITH TABLE {qualified_name(archive_table, schema)}"
    )


def drop_partition(source_table: str, partition_name: str, schema: Optional[str] = None) -> TextClause:
    return text(
        f"ALTER TABLE {qualified_name(source_table, schema)} "
        f"DROP PARTITION {quote_identifier(partition_name)}"
    )


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------
def archive_boundaries(
    archive_table: str, record_id_column: str, timestamp_column: str, schema: Optional[str] = None
) -> TextClause:
    """MIN/MAX of record id and timestamp, plus the server clock."""
    rid = quote_identifier(record_id_column)
    ts = quote_identifier(timestamp_column)
    return text(
        f"SELECT MIN({rid}), MAX({rid}), MIN({ts}), MAX({ts}), NOW() "
        f"FROM {qualified_name(archive_table, schema)}"
    )


def table_has_rows(table_name: str, schema: Optional[str] = None) -> TextClause:
    return text(f"SELECT EXISTS(SELECT 1 FROM {qualified_name(table_name, schema)})")


def partition_has_rows(table_name: str, partition_name: str, schema: Optional[str] = None) -> TextClause:
    return text(
        f"SELECT EXISTS(SELECT 1 FROM {qualified_name(table_name, schema)} "
        f"PARTITION ({quote_identifier(partition_name)}))"
    )


def insert_metadata(metadata_table: str, schema: Optional[str] = None) -> Insert:
    """Core INSERT against the configured metadata table name."""
    target = table(metadata_table, *(column(name) for name in METADATA_COLUMNS), schema=schema)
    return insert(target)


def rows_outside_range(
    table_name: str,
    expression: str,
    lower: Optional[str],
    upper: Optional[str],
    schema: Optional[str] = None,
) -> Optional[TextClause]:
    """EXISTS check for rows whose partitioning expression is outside ``[lower, upper)``.

    ``expression`` and the bounds are taken verbatim from
    INFORMATION_SCHEMA.PARTITIONS. Returns None when the range is unbounded
    on both sides, since no row can fall outside it.
    """
    expr = _escape_colons(expression)
    conditions = []
    if lower is not None:
        conditions.append(f"({expr}) < {_escape_colons(lower)}")
    if upper is not None:
        conditions.append(f"({expr}) >= {_escape_colons(upper)}")
    if not conditions:
        return None
    return text(
        f"SELECT EXISTS(SELECT 1 FROM {qualified_name(table_name, schema)} "
        f"WHERE {' OR '.join(conditions)})"
    )


def metadata_row_exists(metadata_table: str, schema: Optional[str] = None) -> TextClause:
    """EXISTS check for a metadata row already recording the same archive range."""
    return text(
        f"SELECT EXISTS(SELECT 1 FROM {qualified_name(metadata_table, schema)} "
        "WHERE archive_table_name = :archive_table_name "
        "AND min_record_id = :min_record_id "
        "AND max_record_id = :max_record_id)"
    )


def _escape_colons(fragment: str) -> str:
    # Colons in datetime literals would otherwise parse as bind parameters
    return fragment.replace(":", r"\:")
