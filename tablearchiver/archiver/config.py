"""Archiver configuration.

Frozen dataclass ArchiverConfig holds the table names and the archive naming
strategy shared by every archival call. Build it either directly, through
the fluent :class:`ArchiverConfigBuilder`, or from application settings::

    config = (
        ArchiverConfig.builder()
        .source_table("messages")
        .metadata_table("archived_message_partitions")
        .archive_name_strategy(archive_table_namer("messages"))
        .build()
    )

Construction fails immediately if a required field is missing, so a
partially-initialized configuration is never observable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional

from tablearchiver.archiver.naming import archive_table_namer

if TYPE_CHECKING:
    from tablearchiver.core.config import Settings

NamingStrategy = Callable[[str], str]


@dataclass(frozen=True)
class ArchiverConfig:
    """Immutable configuration for :class:`PartitionArchiver`.

    Attributes:
        source_table: Partitioned table whose partitions are archived.
        metadata_table: Table receiving one row per archived partition.
        archive_name_strategy: Maps a partition name to its archive table
            name; raises InvalidPartitionName on names it rejects.
        record_id_column: Column scanned for min/max record ids.
        timestamp_column: Column scanned for the start/end timestamps.
        schema: Database holding the tables (None = connection default).
        verify_archive_structure: Compare an existing archive table's
            columns with the source table before exchanging.
    """

    source_table: str
    metadata_table: str
    archive_name_strategy: NamingStrategy
    record_id_column: str = "message_id"
    timestamp_column: str = "created_at"
    schema: Optional[str] = None
    verify_archive_structure: bool = False

    def __post_init__(self) -> None:
        missing = [
            name
            for name in ("source_table", "metadata_table", "record_id_column", "timestamp_column")
            if not getattr(self, name)
        ]
        if missing:
            raise ValueError(f"ArchiverConfig missing required fields: {', '.join(missing)}")
        if not callable(self.archive_name_strategy):
            raise ValueError("ArchiverConfig.archive_name_strategy must be callable")

    def archive_table_name(self, partition_name: str) -> str:
        """Apply the naming strategy to a partition name."""
        return self.archive_name_strategy(partition_name)

    @staticmethod
    def builder() -> ArchiverConfigBuilder:
        """Return a new fluent builder."""
        return ArchiverConfigBuilder()

    @classmethod
    def from_settings(cls, settings: Settings) -> ArchiverConfig:
        """Create an ArchiverConfig from ``archiver_*`` application settings.

        Uses the default prefix naming strategy for the configured source
        table.
        """
        return cls(
            source_table=settings.archiver_source_table,
            metadata_table=settings.archiver_metadata_table,
            archive_name_strategy=archive_table_namer(
                settings.archiver_source_table,
                settings.archiver_partition_prefix,
            ),
            record_id_column=settings.archiver_record_id_column,
            timestamp_column=settings.archiver_timestamp_column,
        )


class ArchiverConfigBuilder:
    """Fluent builder for :class:`ArchiverConfig`.

    ``build()`` reports every missing required field at once.
    """

    _REQUIRED = ("source_table", "metadata_table", "archive_name_strategy")

    def __init__(self) -> None:
        self._values: dict[str, object] = {}

    def source_table(self, name: str) -> ArchiverConfigBuilder:
        self._values["source_table"] = name
        return self

    def metadata_table(self, name: str) -> ArchiverConfigBuilder:
        self._values["metadata_table"] = name
        return self

    def archive_name_strategy(self, strategy: NamingStrategy) -> ArchiverConfigBuilder:
        self._values["archive_name_strategy"] = strategy
        return self

    def record_id_column(self, column: str) -> ArchiverConfigBuilder:
        self._values["record_id_column"] = column
        return self

    def timestamp_column(self, column: str) -> ArchiverConfigBuilder:
        self._values["timestamp_column"] = column
        return self

    def schema(self, schema: Optional[str]) -> ArchiverConfigBuilder:
        self._values["schema"] = schema
        return self

    def verify_archive_structure(self, enabled: bool = True) -> ArchiverConfigBuilder:
        self._values["verify_archive_structure"] = enabled
        return self

    def build(self) -> ArchiverConfig:
        """Validate and return the immutable configuration.

        Raises:
            ValueError: If any of source_table, metadata_table or
                archive_name_strategy was not set.
        """
        missing = [name for name in self._REQUIRED if not self._values.get(name)]
        if missing:
            raise ValueError(f"ArchiverConfig missing required fields: {', '.join(missing)}")
        return ArchiverConfig(**self._values)  # type: ignore[arg-type]
