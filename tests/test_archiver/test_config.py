"""Tests for ArchiverConfig, its builder and settings integration."""

from dataclasses import FrozenInstanceError

import pytest

from tablearchiver.archiver.config import ArchiverConfig
from tablearchiver.archiver.errors import InvalidPartitionName
from tablearchiver.archiver.naming import archive_table_namer
from tablearchiver.core.config import Settings


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------
class TestBuilder:
    def test_builds_with_all_required_fields(self):
        config = (
            ArchiverConfig.builder()
            .source_table("messages")
            .metadata_table("archived_message_partitions")
            .archive_name_strategy(archive_table_namer("messages"))
            .build()
        )
        assert config.source_table == "messages"
        assert config.metadata_table == "archived_message_partitions"
        assert config.archive_table_name("p2024_q1") == "messages_archive_2024_Q1"

    def test_defaults_for_optional_fields(self):
        config = (
            ArchiverConfig.builder()
            .source_table("messages")
            .metadata_table("meta")
            .archive_name_strategy(str.upper)
            .build()
        )
        assert config.record_id_column == "message_id"
        assert config.timestamp_column == "created_at"
        assert config.schema is None
        assert config.verify_archive_structure is False

    def test_optional_fields_set(self):
        config = (
            ArchiverConfig.builder()
            .source_table("events")
            .metadata_table("meta")
            .archive_name_strategy(str.upper)
            .record_id_column("event_id")
            .timestamp_column("occurred_at")
            .schema("analytics")
            .verify_archive_structure()
            .build()
        )
        assert config.record_id_column == "event_id"
        assert config.timestamp_column == "occurred_at"
        assert config.schema == "analytics"
        assert config.verify_archive_structure is True

    def test_missing_fields_all_reported(self):
        with pytest.raises(ValueError) as excinfo:
            ArchiverConfig.builder().source_table("messages").build()
        message = str(excinfo.value)
        assert "metadata_table" in message
        assert "archive_name_strategy" in message
        assert "source_table" not in message

    def test_empty_builder_fails(self):
        with pytest.raises(ValueError, match="source_table"):
            ArchiverConfig.builder().build()

    def test_empty_string_counts_as_missing(self):
        with pytest.raises(ValueError, match="metadata_table"):
            (
                ArchiverConfig.builder()
                .source_table("messages")
                .metadata_table("")
                .archive_name_strategy(str.upper)
                .build()
            )


# ---------------------------------------------------------------------------
# Direct construction
# ---------------------------------------------------------------------------
class TestArchiverConfig:
    def test_frozen(self):
        config = ArchiverConfig("messages", "meta", str.upper)
        with pytest.raises(FrozenInstanceError):
            config.source_table = "other"  # type: ignore[misc]

    def test_non_callable_strategy_rejected(self):
        with pytest.raises(ValueError, match="callable"):
            ArchiverConfig("messages", "meta", "messages_archive")  # type: ignore[arg-type]

    def test_empty_scan_column_rejected(self):
        with pytest.raises(ValueError, match="record_id_column"):
            ArchiverConfig("messages", "meta", str.upper, record_id_column="")

    def test_strategy_errors_propagate(self):
        config = ArchiverConfig("messages", "meta", archive_table_namer("messages"))
        with pytest.raises(InvalidPartitionName):
            config.archive_table_name("2024_q1")


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------
class TestFromSettings:
    def test_uses_archiver_settings(self):
        settings = Settings(
            archiver_source_table="events",
            archiver_metadata_table="archived_event_partitions",
            archiver_partition_prefix="p",
            archiver_record_id_column="event_id",
            archiver_timestamp_column="occurred_at",
        )
        config = ArchiverConfig.from_settings(settings)
        assert config.source_table == "events"
        assert config.metadata_table == "archived_event_partitions"
        assert config.record_id_column == "event_id"
        assert config.timestamp_column == "occurred_at"
        assert config.archive_table_name("p2024_q1") == "events_archive_2024_Q1"

    def test_database_url_uses_pymysql(self):
        settings = Settings(
            mysql_host="db.internal",
            mysql_port=3307,
            mysql_db="cliq",
            mysql_user="archiver",
            mysql_password="p@ss:word",
        )
        url = settings.sync_database_url
        assert url.startswith("mysql+pymysql://archiver:")
        assert "p%40ss%3Aword" in url
        assert "@db.internal:3307/cliq" in url
