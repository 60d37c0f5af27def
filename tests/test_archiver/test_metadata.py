"""Tests for ArchivedPartitionMetadata and ArchiveResult."""

from datetime import datetime

import pytest

from tablearchiver.archiver.errors import EmptyArchiveMetadata
from tablearchiver.archiver.metadata import ArchivedPartitionMetadata, ArchiveResult
from tablearchiver.core.models import METADATA_COLUMNS, ArchivedPartitionRecord

START = datetime(2024, 1, 1)
END = datetime(2024, 3, 31)
NOW = datetime(2026, 10, 19, 12, 0)


class TestFromScan:
    def test_builds_from_boundary_row(self):
        meta = ArchivedPartitionMetadata.from_scan(
            "messages_archive_2024_Q1", (1000, 5000, START, END, NOW)
        )
        assert meta.archive_table_name == "messages_archive_2024_Q1"
        assert meta.min_record_id == 1000
        assert meta.max_record_id == 5000
        assert meta.start_timestamp == START
        assert meta.end_timestamp == END
        assert meta.archived_at == NOW

    def test_decimal_like_ids_coerced_to_int(self):
        meta = ArchivedPartitionMetadata.from_scan("t", ("7", 9.0, START, END, NOW))
        assert meta.min_record_id == 7
        assert meta.max_record_id == 9

    def test_empty_table_rejected(self):
        with pytest.raises(EmptyArchiveMetadata, match="appears to be empty"):
            ArchivedPartitionMetadata.from_scan("t", (None, None, None, None, NOW))

    def test_missing_row_rejected(self):
        with pytest.raises(EmptyArchiveMetadata):
            ArchivedPartitionMetadata.from_scan("t", None)

    def test_partial_null_rejected(self):
        with pytest.raises(EmptyArchiveMetadata):
            ArchivedPartitionMetadata.from_scan("t", (1, 2, START, None, NOW))


class TestInvariants:
    def test_inverted_timestamps_rejected(self):
        with pytest.raises(ValueError, match="start_timestamp"):
            ArchivedPartitionMetadata("t", END, START, 1, 2, NOW)

    def test_inverted_ids_rejected(self):
        with pytest.raises(ValueError, match="min_record_id"):
            ArchivedPartitionMetadata("t", START, END, 5, 1, NOW)

    def test_single_row_range_allowed(self):
        meta = ArchivedPartitionMetadata("t", START, START, 42, 42, NOW)
        assert meta.min_record_id == meta.max_record_id


class TestAsRow:
    def test_keys_match_metadata_table_columns(self):
        meta = ArchivedPartitionMetadata("t", START, END, 1, 2, NOW)
        assert tuple(meta.as_row()) == METADATA_COLUMNS

    def test_orm_model_declares_every_written_column(self):
        table_columns = set(ArchivedPartitionRecord.__table__.columns.keys())
        assert set(METADATA_COLUMNS) <= table_columns


class TestArchiveResult:
    def test_defaults(self):
        result = ArchiveResult(partition_name="p2024_q1", archive_table_name="a")
        assert result.metadata is None
        assert result.archive_table_created is False
        assert result.exchange_performed is False
        assert result.metadata_inserted is False
        assert result.partition_dropped is False
        assert result.step_timings == {}
        assert result.duration_seconds == 0.0
