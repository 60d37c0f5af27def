"""Value types produced by the archiver.

- ArchivedPartitionMetadata: boundaries derived from a filled archive table
- ArchiveResult: outcome of a successful archival run
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Sequence

from tablearchiver.archiver.errors import EmptyArchiveMetadata


@dataclass(frozen=True)
class ArchivedPartitionMetadata:
    """Record-id and timestamp range held by one archive table.

    Attributes:
        archive_table_name: Table the partition's rows were moved into.
        start_timestamp: Earliest timestamp in the archive table.
        end_timestamp: Latest timestamp in the archive table.
        min_record_id: Smallest record id in the archive table.
        max_record_id: Largest record id in the archive table.
        archived_at: Server time at which the boundaries were scanned.
    """

    archive_table_name: str
    start_timestamp: datetime
    end_timestamp: datetime
    min_record_id: int
    max_record_id: int
    archived_at: datetime

    def __post_init__(self) -> None:
        if self.start_timestamp > self.end_timestamp:
            raise ValueError(
                f"start_timestamp {self.start_timestamp} is after end_timestamp {self.end_timestamp}"
            )
        if self.min_record_id > self.max_record_id:
            raise ValueError(
                f"min_record_id {self.min_record_id} is greater than max_record_id {self.max_record_id}"
            )

    @classmethod
    def from_scan(cls, archive_table_name: str, row: Optional[Sequence[Any]]) -> ArchivedPartitionMetadata:
        """Build metadata from a ``MIN(id), MAX(id), MIN(ts), MAX(ts), NOW()`` row.

        Raises:
            EmptyArchiveMetadata: If the row is missing or any boundary is
                NULL, i.e. the archive table holds no rows.
        """
        if row is None or any(value is None for value in row[:4]):
            raise EmptyArchiveMetadata(
                f"Archived table {archive_table_name!r} appears to be empty or metadata is null"
            )
        min_id, max_id, start_ts, end_ts, archived_at = row
        return cls(
            archive_table_name=archive_table_name,
            start_timestamp=start_ts,
            end_timestamp=end_ts,
            min_record_id=int(min_id),
            max_record_id=int(max_id),
            archived_at=archived_at,
        )

    def as_row(self) -> dict[str, Any]:
        """Column/value mapping for the metadata table insert."""
        return {
            "archive_table_name": self.archive_table_name,
            "start_timestamp": self.start_timestamp,
            "end_timestamp": self.end_timestamp,
            "min_record_id": self.min_record_id,
            "max_record_id": self.max_record_id,
            "archived_at": self.archived_at,
        }


@dataclass
class ArchiveResult:
    """Output of a successful archival run.

    Attributes:
        partition_name: Partition removed from the source table.
        archive_table_name: Table now holding the partition's rows.
        metadata: Boundaries persisted to the metadata table.
        archive_table_created: False when an existing table was reused.
        exchange_performed: False when a previous run had already exchanged.
        metadata_inserted: False when a previous run had already recorded
            the same archive range.
        partition_dropped: False when the partition was already absent.
        step_timings: Per-step wall-clock seconds.
        duration_seconds: Total wall-clock seconds.
    """

    partition_name: str
    archive_table_name: str
    metadata: Optional[ArchivedPartitionMetadata] = None
    archive_table_created: bool = False
    exchange_performed: bool = False
    metadata_inserted: bool = False
    partition_dropped: bool = False
    step_timings: dict[str, float] = field(default_factory=dict)
    duration_seconds: float = 0.0
