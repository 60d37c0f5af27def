"""Partition inventory read from MySQL's INFORMATION_SCHEMA.

PartitionCatalog answers the read-only questions the archiver asks before and
during a run: which partitions a table has, whether a given partition or
table exists, and what columns a table has. Every method accepts an open
connection so the archiver can keep a whole run on one connection; without
one, the catalog borrows a connection from its engine.

The catch-all partition (``pmax``) is never listed and never reported as
existing, since it is not an archival target.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from tablearchiver.archiver.errors import QueryFailure
from tablearchiver.core.utils.logging_config import get_logger

logger = get_logger("archiver.catalog")

CATCH_ALL_PARTITION = "pmax"

# COALESCE lets callers pin a schema or fall back to the connection's database
_LIST_PARTITIONS_SQL = text(
    """
    SELECT PARTITION_NAME,
           TABLE_ROWS,
           PARTITION_EXPRESSION,
           PARTITION_DESCRIPTION
      FROM INFORMATION_SCHEMA.PARTITIONS
     WHERE TABLE_SCHEMA = COALESCE(:schema, DATABASE())
       AND TABLE_NAME = :table
     ORDER BY PARTITION_ORDINAL_POSITION
    """
)

_PARTITION_EXISTS_SQL = text(
    """
    SELECT COUNT(*)
      FROM INFORMATION_SCHEMA.PARTITIONS
     WHERE TABLE_SCHEMA = COALESCE(:schema, DATABASE())
       AND TABLE_NAME = :table
       AND PARTITION_NAME = :partition
    """
)

_IS_PARTITIONED_SQL = text(
    """
    SELECT COUNT(*)
      FROM INFORMATION_SCHEMA.PARTITIONS
     WHERE TABLE_SCHEMA = COALESCE(:schema, DATABASE())
       AND TABLE_NAME = :table
       AND PARTITION_NAME IS NOT NULL
    """
)

_PARTITION_RANGES_SQL = text(
    """
    SELECT PARTITION_NAME,
           PARTITION_METHOD,
           PARTITION_EXPRESSION,
           PARTITION_DESCRIPTION
      FROM INFORMATION_SCHEMA.PARTITIONS
     WHERE TABLE_SCHEMA = COALESCE(:schema, DATABASE())
       AND TABLE_NAME = :table
     ORDER BY PARTITION_ORDINAL_POSITION
    """
)

_TABLE_EXISTS_SQL = text(
    """
    SELECT COUNT(*)
      FROM INFORMATION_SCHEMA.TABLES
     WHERE TABLE_SCHEMA = COALESCE(:schema, DATABASE())
       AND TABLE_NAME = :table
    """
)

_TABLE_COLUMNS_SQL = text(
    """
    SELECT COLUMN_NAME,
           COLUMN_TYPE
      FROM INFORMATION_SCHEMA.COLUMNS
     WHERE TABLE_SCHEMA = COALESCE(:schema, DATABASE())
       AND TABLE_NAME = :table
     ORDER BY ORDINAL_POSITION
    """
)


@dataclass(frozen=True)
class PartitionDescriptor:
    """Snapshot of one partition as reported by the catalog.

    Attributes:
        name: Partition name, e.g. ``p2024_q1``.
        approximate_row_count: InnoDB's TABLE_ROWS estimate.
        partition_expression: Partitioning expression, e.g. ``to_days(`created_at`)``.
        partition_description: Range bound, e.g. ``739342``.
    """

    name: str
    approximate_row_count: int
    partition_expression: str
    partition_description: str


@dataclass(frozen=True)
class PartitionRange:
    """Value range ``[lower, upper)`` of one RANGE partition.

    ``lower`` is the previous partition's bound (None for the first
    partition); ``upper`` is None for ``MAXVALUE``.
    """

    method: str
    expression: str
    lower: Optional[str]
    upper: Optional[str]

    @property
    def is_single_range(self) -> bool:
        """True for RANGE / single-column RANGE COLUMNS partitioning."""
        return self.method in ("RANGE", "RANGE COLUMNS") and "," not in self.expression


def is_catch_all(partition_name: str) -> bool:
    return partition_name.lower() == CATCH_ALL_PARTITION


class PartitionCatalog:
    """Read partition and table inventory from INFORMATION_SCHEMA.

    Args:
        engine: Engine used when a method is called without a connection.
        schema: Database to inspect; None means the connection's current
            database (``DATABASE()``).
    """

    def __init__(self, engine: Engine, schema: Optional[str] = None) -> None:
        self._engine = engine
        self.schema = schema

    # ------------------------------------------------------------------
    # Partitions
    # ------------------------------------------------------------------
    def list_partitions(
        self, table: str, conn: Optional[Connection] = None
    ) -> list[PartitionDescriptor]:
        """List the archivable partitions of ``table`` in catalog order.

        Raises:
            QueryFailure: If INFORMATION_SCHEMA.PARTITIONS cannot be read.
        """
        rows = self._fetch(
            _LIST_PARTITIONS_SQL, {"schema": self.schema, "table": table}, conn,
            what=f"partitions of {table!r}",
        )
        descriptors: list[PartitionDescriptor] = []
        for row in rows:
            name, table_rows, expression, description = row[0], row[1], row[2], row[3]
            # Unpartitioned tables report a single row with a NULL name
            if name is None or is_catch_all(name):
                continue
            descriptors.append(
                PartitionDescriptor(
                    name=name,
                    approximate_row_count=int(table_rows or 0),
                    partition_expression=expression or "",
                    partition_description=description or "",
                )
            )
        logger.debug("partitions_listed", table=table, count=len(descriptors))
        return descriptors

    def partition_exists(
        self, table: str, partition_name: str, conn: Optional[Connection] = None
    ) -> bool:
        """True if ``partition_name`` is an archivable partition of ``table``.

        Raises:
            QueryFailure: If INFORMATION_SCHEMA.PARTITIONS cannot be read.
        """
        if not partition_name or is_catch_all(partition_name):
            return False
        rows = self._fetch(
            _PARTITION_EXISTS_SQL,
            {"schema": self.schema, "table": table, "partition": partition_name},
            conn,
            what=f"partition {partition_name!r} of {table!r}",
        )
        return bool(rows) and int(rows[0][0]) > 0

    def partition_range(
        self, table: str, partition_name: str, conn: Optional[Connection] = None
    ) -> Optional[PartitionRange]:
        """Bounds of ``partition_name``, or None if ``table`` has no such partition.

        Raises:
            QueryFailure: If INFORMATION_SCHEMA.PARTITIONS cannot be read.
        """
        rows = self._fetch(
            _PARTITION_RANGES_SQL, {"schema": self.schema, "table": table}, conn,
            what=f"range of partition {partition_name!r} of {table!r}",
        )
        previous: Optional[str] = None
        for row in rows:
            name, method, expression, description = row[0], row[1], row[2], row[3]
            if name is not None and name.lower() == partition_name.lower():
                return PartitionRange(
                    method=method or "",
                    expression=expression or "",
                    lower=previous,
                    upper=None if description in (None, "MAXVALUE") else description,
                )
            previous = description
        return None

    def is_partitioned(self, table: str, conn: Optional[Connection] = None) -> bool:
        """True if ``table`` has any partition definitions, including ``pmax``."""
        rows = self._fetch(
            _IS_PARTITIONED_SQL, {"schema": self.schema, "table": table}, conn,
            what=f"partitioning of {table!r}",
        )
        return bool(rows) and int(rows[0][0]) > 0

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------
    def table_exists(self, table: str, conn: Optional[Connection] = None) -> bool:
        """True if a table named ``table`` exists in the schema."""
        rows = self._fetch(
            _TABLE_EXISTS_SQL, {"schema": self.schema, "table": table}, conn,
            what=f"table {table!r}",
        )
        return bool(rows) and int(rows[0][0]) > 0

    def table_columns(
        self, table: str, conn: Optional[Connection] = None
    ) -> list[tuple[str, str]]:
        """(column name, column type) pairs of ``table`` in ordinal order."""
        rows = self._fetch(
            _TABLE_COLUMNS_SQL, {"schema": self.schema, "table": table}, conn,
            what=f"columns of {table!r}",
        )
        return [(row[0], row[1]) for row in rows]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @contextmanager
    def _connect(self, conn: Optional[Connection]) -> Iterator[Connection]:
        if conn is not None:
            yield conn
            return
        with self._engine.connect() as own:
            yield own

    def _fetch(
        self,
        statement,
        params: dict,
        conn: Optional[Connection],
        what: str,
    ) -> Sequence:
        try:
            with self._connect(conn) as c:
                return c.execute(statement, params).fetchall()
        except SQLAlchemyError as exc:
            logger.error("catalog_query_failed", target=what, error=str(exc))
            raise QueryFailure(f"Unable to read catalog for {what}", cause=exc) from exc


def format_partition_listing(
    descriptors: Sequence[PartitionDescriptor], table: str, schema: Optional[str] = None
) -> str:
    """Render a numbered, human-readable partition listing."""
    title = f"{schema}.{table}" if schema else table
    lines = [f"Partitions for table `{title}`:"]
    if not descriptors:
        lines.append("  (no archivable partitions)")
    for idx, d in enumerate(descriptors):
        lines.append(
            f"  id: {idx:<3} | Partition: {d.name:<20} | Rows: {d.approximate_row_count:<10} "
            f"| Expr: {d.partition_expression:<30} | Desc: {d.partition_description}"
        )
    return "\n".join(lines)
