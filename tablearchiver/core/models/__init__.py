"""SQLAlchemy 2.0 ORM models for the Table Archiver.

Re-exports Base and the archived partition metadata model.
"""

from .archived_partitions import METADATA_COLUMNS, ArchivedPartitionRecord
from .base import Base

__all__ = [
    "Base",
    "ArchivedPartitionRecord",
    "METADATA_COLUMNS",
]
