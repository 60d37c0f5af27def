"""Hot archival of one partition -- 8-step sequential workflow.

PartitionArchiver moves the rows of one partition of a live, range-partitioned
MySQL table into a standalone archive table and records what was archived:

    resolve name -> validate partition -> ensure archive table
    -> exchange partition -> derive metadata -> persist metadata
    -> drop partition -> commit

The first two steps are read-only pre-checks and run before the transaction
begins. Steps 3-8 run inside one transaction on one connection; any failure
there rolls the transaction back and surfaces as a typed ArchiveFailure
carrying the failing step.

MySQL commits the open transaction before CREATE TABLE, EXCHANGE PARTITION
and DROP PARTITION, even when the statement then fails, so a rollback only
undoes DML that no later DDL has already committed. An archive table that was
created, a partition that was exchanged, or a metadata row followed by a DROP
attempt stays that way after a failure. Re-running ``archive()`` for the
same partition is safe because every mutating step re-enters idempotently:

- an existing archive table is reused (and un-partitioned if a previous run
  stopped between CREATE and REMOVE PARTITIONING)
- the exchange is skipped when the partition is already empty and every row
  of the archive table lies inside the partition's range
- the metadata insert is skipped when a row with the same archive table and
  record-id range is already recorded
- the drop is skipped when the partition is already gone
"""

from __future__ import annotations

import time
from typing import Callable, Optional, TypeVar

import structlog
from sqlalchemy.engine import Connection, Engine, RootTransaction
from sqlalchemy.exc import SQLAlchemyError

from tablearchiver.archiver import sql
from tablearchiver.archiver.catalog import PartitionCatalog
from tablearchiver.archiver.config import ArchiverConfig
from tablearchiver.archiver.errors import (
    ArchiveFailure,
    DdlFailure,
    EmptyArchiveMetadata,
    IncompatibleArchiveTable,
    InvalidPartitionName,
    MetadataInsertFailure,
    PartitionNotFound,
    QueryFailure,
)
from tablearchiver.archiver.metadata import ArchivedPartitionMetadata, ArchiveResult
from tablearchiver.core.enums import ArchiveStep
from tablearchiver.core.utils.logging_config import get_logger

T = TypeVar("T")

# Error raised for an unexpected exception at each step
_STEP_ERRORS: dict[ArchiveStep, type[ArchiveFailure]] = {
    ArchiveStep.RESOLVE_NAME: InvalidPartitionName,
    ArchiveStep.VALIDATE_PARTITION: QueryFailure,
    ArchiveStep.ENSURE_ARCHIVE_TABLE: DdlFailure,
    ArchiveStep.EXCHANGE_PARTITION: DdlFailure,
    ArchiveStep.DERIVE_METADATA: QueryFailure,
    ArchiveStep.PERSIST_METADATA: MetadataInsertFailure,
    ArchiveStep.DROP_PARTITION: DdlFailure,
    ArchiveStep.COMMIT: MetadataInsertFailure,
}


class PartitionArchiver:
    """Archive single partitions of ``config.source_table``.

    Args:
        engine: Engine providing one connection per ``archive()`` call.
        config: Table names, naming strategy and scan columns.
        catalog: Catalog used for existence checks; defaults to one bound to
            the same engine and ``config.schema``.
    """

    def __init__(
        self,
        engine: Engine,
        config: ArchiverConfig,
        catalog: Optional[PartitionCatalog] = None,
    ) -> None:
        self._engine = engine
        self.config = config
        self.catalog = catalog or PartitionCatalog(engine, schema=config.schema)
        self.log = get_logger("archiver.partition_archiver").bind(
            source_table=config.source_table,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def archive(self, partition_name: str) -> ArchiveResult:
        """Run the full workflow for ``partition_name``.

        Returns:
            ArchiveResult describing what was created, moved and recorded.

        Raises:
            InvalidPartitionName: Naming strategy rejected the name.
            PartitionNotFound: Partition is not in the source table.
            QueryFailure: Catalog or archive-table read failed.
            EmptyArchiveMetadata: Archive table held no rows after the exchange,
                or the partition is empty while the archive table holds
                rows outside its range.
            DdlFailure: CREATE / EXCHANGE / DROP failed.
            MetadataInsertFailure: Metadata row could not be written.
        """
        t0 = time.monotonic()
        log = self.log.bind(partition=partition_name)
        timings: dict[str, float] = {}

        archive_table = self._run_step(
            ArchiveStep.RESOLVE_NAME,
            partition_name,
            timings,
            lambda: self.config.archive_table_name(partition_name),
        )
        log = log.bind(archive_table=archive_table)
        result = ArchiveResult(
            partition_name=partition_name,
            archive_table_name=archive_table,
            step_timings=timings,
        )
        log.info("archive_started")

        try:
            connection = self._engine.connect()
        except SQLAlchemyError as exc:
            raise QueryFailure(
                "Unable to acquire a database connection",
                step=ArchiveStep.VALIDATE_PARTITION,
                partition_name=partition_name,
                cause=exc,
            ) from exc

        with connection as conn:
            self._run_step(
                ArchiveStep.VALIDATE_PARTITION,
                partition_name,
                timings,
                lambda: self._validate_partition(conn, partition_name),
            )
            # Close the implicit read transaction opened by the pre-checks
            conn.rollback()

            trans = conn.begin()
            try:
                result.archive_table_created = self._run_step(
                    ArchiveStep.ENSURE_ARCHIVE_TABLE,
                    partition_name,
                    timings,
                    lambda: self._ensure_archive_table(conn, archive_table),
                )
                result.exchange_performed = self._run_step(
                    ArchiveStep.EXCHANGE_PARTITION,
                    partition_name,
                    timings,
                    lambda: self._exchange_partition(
                        conn, partition_name, archive_table, result.archive_table_created
                    ),
                )
                result.metadata = self._run_step(
                    ArchiveStep.DERIVE_METADATA,
                    partition_name,
                    timings,
                    lambda: self._derive_metadata(conn, archive_table),
                )
                result.metadata_inserted = self._run_step(
                    ArchiveStep.PERSIST_METADATA,
                    partition_name,
                    timings,
                    lambda: self._persist_metadata(conn, result.metadata),
                )
                result.partition_dropped = self._run_step(
                    ArchiveStep.DROP_PARTITION,
                    partition_name,
                    timings,
                    lambda: self._drop_partition(conn, partition_name),
                )
                self._run_step(ArchiveStep.COMMIT, partition_name, timings, trans.commit)
            except ArchiveFailure as exc:
                exc.irreversible_steps = _irreversible_steps(result, exc)
                self._rollback(trans, exc, log)
                raise

        result.duration_seconds = time.monotonic() - t0
        log.info(
            "archive_completed",
            duration=f"{result.duration_seconds:.1f}s",
            archive_table_created=result.archive_table_created,
            exchange_performed=result.exchange_performed,
            metadata_inserted=result.metadata_inserted,
            min_record_id=result.metadata.min_record_id,
            max_record_id=result.metadata.max_record_id,
        )
        return result

    # ------------------------------------------------------------------
    # Step execution wrapper
    # ------------------------------------------------------------------
    def _run_step(
        self,
        step: ArchiveStep,
        partition_name: str,
        timings: dict[str, float],
        fn: Callable[[], T],
    ) -> T:
        """Time a step and convert any failure into a typed ArchiveFailure."""
        t0 = time.monotonic()
        try:
            value = fn()
        except ArchiveFailure as exc:
            timings[step.value] = round(time.monotonic() - t0, 3)
            if exc.step is None:
                exc.step = step
            if exc.partition_name is None:
                exc.partition_name = partition_name
            raise
        except Exception as exc:
            timings[step.value] = round(time.monotonic() - t0, 3)
            error_cls = _STEP_ERRORS[step]
            raise error_cls(
                f"Archival of partition {partition_name!r} failed at step {step.value}",
                step=step,
                partition_name=partition_name,
                cause=exc,
            ) from exc
        timings[step.value] = round(time.monotonic() - t0, 3)
        self.log.debug(
            "archive_step_completed",
            partition=partition_name,
            step=step.value,
            transactional=step.is_transactional,
            seconds=timings[step.value],
        )
        return value

    def _rollback(
        self, trans: RootTransaction, exc: ArchiveFailure, log: structlog.BoundLogger
    ) -> None:
        """Roll back after a failure, keeping the original error."""
        try:
            if trans.is_active:
                trans.rollback()
            log.warning(
                "archive_rolled_back",
                step=exc.step.value if exc.step else None,
                error=str(exc),
                irreversible_steps=[s.value for s in exc.irreversible_steps],
            )
        except SQLAlchemyError as rollback_exc:
            log.error("archive_rollback_failed", error=str(rollback_exc))

    # ------------------------------------------------------------------
    # Workflow steps
    # ------------------------------------------------------------------
    def _validate_partition(self, conn: Connection, partition_name: str) -> None:
        if not self.catalog.partition_exists(self.config.source_table, partition_name, conn):
            raise PartitionNotFound(
                f"Unable to archive: partition {partition_name!r} does not exist "
                f"in table {self.config.source_table!r}"
            )

    def _ensure_archive_table(self, conn: Connection, archive_table: str) -> bool:
        """Create the archive table if missing. Returns True when created."""
        cfg = self.config
        if not self.catalog.table_exists(archive_table, conn):
            self.log.info("archive_table_creating", archive_table=archive_table)
            conn.execute(sql.create_table_like(archive_table, cfg.source_table, cfg.schema))
            conn.execute(sql.remove_partitioning(archive_table, cfg.schema))
            return True

        self.log.info("archive_table_exists", archive_table=archive_table)
        # A previous run may have stopped between CREATE and REMOVE PARTITIONING
        if self.catalog.is_partitioned(archive_table, conn):
            conn.execute(sql.remove_partitioning(archive_table, cfg.schema))
        if cfg.verify_archive_structure:
            self._verify_structure(conn, archive_table)
        return False

    def _verify_structure(self, conn: Connection, archive_table: str) -> None:
        source_columns = self.catalog.table_columns(self.config.source_table, conn)
        archive_columns = self.catalog.table_columns(archive_table, conn)
        if source_columns != archive_columns:
            source_only = sorted(set(source_columns) - set(archive_columns))
            archive_only = sorted(set(archive_columns) - set(source_columns))
            raise IncompatibleArchiveTable(
                f"Archive table {archive_table!r} does not match "
                f"{self.config.source_table!r}: source-only columns {source_only}, "
                f"archive-only columns {archive_only}"
            )

    def _exchange_partition(
        self, conn: Connection, partition_name: str, archive_table: str, created: bool
    ) -> bool:
        """Swap partition and archive table data. Returns True when swapped."""
        cfg = self.config
        if not created and conn.execute(sql.table_has_rows(archive_table, cfg.schema)).scalar():
            partition_filled = conn.execute(
                sql.partition_has_rows(cfg.source_table, partition_name, cfg.schema)
            ).scalar()
            if partition_filled:
                raise DdlFailure(
                    f"Archive table {archive_table!r} already holds rows and partition "
                    f"{partition_name!r} is not empty; refusing to swap them"
                )
            if not self._archive_fits_partition(conn, partition_name, archive_table):
                raise EmptyArchiveMetadata(
                    f"Partition {partition_name!r} is empty and archive table "
                    f"{archive_table!r} holds rows outside its range"
                )
            self.log.warning(
                "exchange_already_applied",
                partition=partition_name,
                archive_table=archive_table,
            )
            return False

        conn.execute(sql.exchange_partition(cfg.source_table, partition_name, archive_table, cfg.schema))
        return True

    def _archive_fits_partition(
        self, conn: Connection, partition_name: str, archive_table: str
    ) -> bool:
        """True if every archive table row lies inside the partition's range."""
        cfg = self.config
        bounds = self.catalog.partition_range(cfg.source_table, partition_name, conn)
        if bounds is None or not bounds.is_single_range:
            raise DdlFailure(
                f"Cannot check archive table {archive_table!r} against partition "
                f"{partition_name!r}: unsupported partitioning"
            )
        stmt = sql.rows_outside_range(
            archive_table, bounds.expression, bounds.lower, bounds.upper, cfg.schema
        )
        return stmt is None or not conn.execute(stmt).scalar()

    def _derive_metadata(self, conn: Connection, archive_table: str) -> ArchivedPartitionMetadata:
        cfg = self.config
        row = conn.execute(
            sql.archive_boundaries(archive_table, cfg.record_id_column, cfg.timestamp_column, cfg.schema)
        ).fetchone()
        return ArchivedPartitionMetadata.from_scan(archive_table, row)

    def _persist_metadata(self, conn: Connection, metadata: ArchivedPartitionMetadata) -> bool:
        """Insert the metadata row. Returns False if it is already recorded."""
        cfg = self.config
        row = metadata.as_row()
        recorded = conn.execute(
            sql.metadata_row_exists(cfg.metadata_table, cfg.schema),
            {
                "archive_table_name": row["archive_table_name"],
                "min_record_id": row["min_record_id"],
                "max_record_id": row["max_record_id"],
            },
        ).scalar()
        if recorded:
            self.log.warning("metadata_already_recorded", archive_table=metadata.archive_table_name)
            return False
        conn.execute(sql.insert_metadata(cfg.metadata_table, cfg.schema), row)
        return True

    def _drop_partition(self, conn: Connection, partition_name: str) -> bool:
        """Drop the emptied partition. Returns False if it was already gone."""
        cfg = self.config
        if not self.catalog.partition_exists(cfg.source_table, partition_name, conn):
            self.log.warning("partition_already_absent", partition=partition_name)
            return False
        conn.execute(sql.drop_partition(cfg.source_table, partition_name, cfg.schema))
        return True


def _irreversible_steps(result: ArchiveResult, exc: ArchiveFailure) -> tuple[ArchiveStep, ...]:
    steps = []
    if result.archive_table_created:
        steps.append(ArchiveStep.ENSURE_ARCHIVE_TABLE)
    if result.exchange_performed:
        steps.append(ArchiveStep.EXCHANGE_PARTITION)
    # DROP PARTITION commits the pending insert even when the drop itself fails
    drop_attempted = result.partition_dropped or (
        exc.step is ArchiveStep.DROP_PARTITION and isinstance(exc, DdlFailure)
    )
    if result.metadata_inserted and drop_attempted:
        steps.append(ArchiveStep.PERSIST_METADATA)
    if result.partition_dropped:
        steps.append(ArchiveStep.DROP_PARTITION)
    return tuple(steps)
