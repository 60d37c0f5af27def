"""Exception hierarchy for partition archival.

- ArchiveFailure: base for all archival errors
- InvalidPartitionName: naming strategy rejected the partition name
- PartitionNotFound: partition is not present in the source table
- QueryFailure: catalog or archive-table read failed
- EmptyArchiveMetadata: archive table held no rows after the exchange
- DdlFailure: CREATE / EXCHANGE / DROP statement failed
- IncompatibleArchiveTable: existing archive table has a different shape
- MetadataInsertFailure: metadata row could not be inserted or committed

Every error carries the workflow step it was raised at (when known), the
partition being archived, and the underlying cause. The archiver fills in
``step`` and ``partition_name`` for errors raised by its collaborators.
"""

from __future__ import annotations

from typing import Optional

from tablearchiver.core.enums import ArchiveStep


class ArchiveFailure(Exception):
    """Base exception for all partition archival errors."""

    def __init__(
        self,
        message: str,
        *,
        step: Optional[ArchiveStep] = None,
        partition_name: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.step = step
        self.partition_name = partition_name
        self.cause = cause
        # DDL steps already applied when the failure hit; not undone by rollback
        self.irreversible_steps: tuple[ArchiveStep, ...] = ()

    def __str__(self) -> str:
        prefix = f"[{self.step.value}] " if self.step is not None else ""
        suffix = f" (cause: {self.cause})" if self.cause is not None else ""
        return f"{prefix}{self.message}{suffix}"


class InvalidPartitionName(ArchiveFailure):
    """Raised when the naming strategy cannot map a partition name."""


class PartitionNotFound(ArchiveFailure):
    """Raised when the partition does not exist in the source table."""


class QueryFailure(ArchiveFailure):
    """Raised when a catalog view or the archive table cannot be read."""


class EmptyArchiveMetadata(ArchiveFailure):
    """Raised when the archive table has no rows to derive boundaries from."""


class DdlFailure(ArchiveFailure):
    """Raised when a CREATE / EXCHANGE / DROP statement fails."""


class IncompatibleArchiveTable(DdlFailure):
    """Raised when an existing archive table does not match the source columns."""


class MetadataInsertFailure(ArchiveFailure):
    """Raised when the metadata row cannot be inserted or committed."""
