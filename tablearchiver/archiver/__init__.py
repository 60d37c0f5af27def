"""Hot partition archival for range-partitioned MySQL tables.

Exports:
- ``PartitionArchiver`` -- runs the archival workflow for one partition
- ``PartitionCatalog`` / ``PartitionDescriptor`` -- partition inventory
- ``ArchiverConfig`` -- immutable configuration and its builder
- ``ArchivedPartitionMetadata`` / ``ArchiveResult`` -- workflow outputs
- the ``ArchiveFailure`` exception hierarchy

Usage::

    from tablearchiver.archiver import ArchiverConfig, PartitionArchiver
    from tablearchiver.core.config import settings
    from tablearchiver.core.database import sync_engine

    archiver = PartitionArchiver(sync_engine, ArchiverConfig.from_settings(settings))
    result = archiver.archive("p2024_q1")
"""

from tablearchiver.archiver.catalog import (
    CATCH_ALL_PARTITION,
    PartitionCatalog,
    PartitionDescriptor,
    PartitionRange,
    format_partition_listing,
)
from tablearchiver.archiver.config import ArchiverConfig, ArchiverConfigBuilder
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
from tablearchiver.archiver.naming import PrefixNamingStrategy, archive_table_namer
from tablearchiver.archiver.partition_archiver import PartitionArchiver

__all__ = [
    "CATCH_ALL_PARTITION",
    "ArchiveFailure",
    "ArchiveResult",
    "ArchivedPartitionMetadata",
    "ArchiverConfig",
    "ArchiverConfigBuilder",
    "DdlFailure",
    "EmptyArchiveMetadata",
    "IncompatibleArchiveTable",
    "InvalidPartitionName",
    "MetadataInsertFailure",
    "PartitionArchiver",
    "PartitionCatalog",
    "PartitionDescriptor",
    "PartitionNotFound",
    "PartitionRange",
    "PrefixNamingStrategy",
    "QueryFailure",
    "archive_table_namer",
    "format_partition_listing",
]
