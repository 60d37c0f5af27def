"""Archived partition metadata table -- one row per archived partition.

Records which archive table holds a former partition of the source table,
the record-id and timestamp range it covers, and when it was archived.
The archiver writes these rows with a Core insert against the configured
table name; this model describes the default table for Alembic.

Created by Alembic migration 001.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

# Columns written by the archiver, in insert order
METADATA_COLUMNS = (
    "archive_table_name",
    "start_timestamp",
    "end_timestamp",
    "min_record_id",
    "max_record_id",
    "archived_at",
)


class ArchivedPartitionRecord(Base):
    """ORM model for the archived_message_partitions table.

    A surrogate autoincrement key is used because the same archive table
    may legitimately be recorded more than once (an archive table reused
    across quarters by a custom naming strategy).
    """

    __tablename__ = "archived_message_partitions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    archive_table_name: Mapped[str] = mapped_column(String(64), nullable=False)
    start_timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    min_record_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    max_record_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    archived_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    __table_args__ = (
        Index("ix_archived_message_partitions_archive_table_name", "archive_table_name"),
        {"mysql_engine": "InnoDB"},
    )

    def __repr__(self) -> str:
        return (
            f"<ArchivedPartitionRecord("
            f"archive_table_name={self.archive_table_name!r}, "
            f"records={self.min_record_id}..{self.max_record_id}, "
            f"archived_at={self.archived_at})>"
        )
