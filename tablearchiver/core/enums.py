"""Shared enumerations used across the archiver.

All enums use the (str, Enum) mixin pattern so their values are
serializable strings, compatible with log output and JSON.
"""

from enum import Enum


class ArchiveStep(str, Enum):
    """Ordered states of the partition archival workflow.

    RESOLVE_NAME and VALIDATE_PARTITION are read-only pre-checks; the
    remaining steps run inside the archival transaction.
    """

    RESOLVE_NAME = "RESOLVE_NAME"
    VALIDATE_PARTITION = "VALIDATE_PARTITION"
    ENSURE_ARCHIVE_TABLE = "ENSURE_ARCHIVE_TABLE"
    EXCHANGE_PARTITION = "EXCHANGE_PARTITION"
    DERIVE_METADATA = "DERIVE_METADATA"
    PERSIST_METADATA = "PERSIST_METADATA"
    DROP_PARTITION = "DROP_PARTITION"
    COMMIT = "COMMIT"

    @property
    def is_transactional(self) -> bool:
        """True for steps that run inside the archival transaction."""
        return self not in (ArchiveStep.RESOLVE_NAME, ArchiveStep.VALIDATE_PARTITION)
