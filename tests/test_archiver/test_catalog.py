"""Tests for PartitionCatalog against the fake MySQL server."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from fake_mysql import FakeTable
from tablearchiver.archiver.catalog import (
    PartitionCatalog,
    PartitionDescriptor,
    PartitionRange,
    format_partition_listing,
)
from tablearchiver.archiver.errors import QueryFailure


# ---------------------------------------------------------------------------
# list_partitions
# ---------------------------------------------------------------------------
class TestListPartitions:
    def test_lists_in_catalog_order_without_pmax(self, engine):
        partitions = PartitionCatalog(engine).list_partitions("messages")
        assert [p.name for p in partitions] == ["p2023_q4", "p2024_q1", "p2024_q2"]

    def test_descriptor_fields(self, engine):
        q1 = PartitionCatalog(engine).list_partitions("messages")[1]
        assert q1 == PartitionDescriptor(
            name="p2024_q1",
            approximate_row_count=4001,
            partition_expression="to_days(`created_at`)",
            partition_description="739342",
        )

    def test_unpartitioned_table_has_no_partitions(self, engine, server):
        server.tables["plain"] = FakeTable(columns=[("id", "int")], rows=[{"id": 1}])
        assert PartitionCatalog(engine).list_partitions("plain") == []

    def test_unknown_table_has_no_partitions(self, engine):
        assert PartitionCatalog(engine).list_partitions("nope") == []

    def test_uses_supplied_connection(self, engine, server):
        catalog = PartitionCatalog(engine)
        with engine.connect() as conn:
            catalog.list_partitions("messages", conn)
        assert len(engine.connections) == 1

    def test_borrows_and_releases_connection(self, engine):
        PartitionCatalog(engine).list_partitions("messages")
        assert len(engine.connections) == 1
        assert engine.connections[0].closed

    def test_catalog_read_failure_raises_query_failure(self, engine, server):
        server.fail_on[r"INFORMATION_SCHEMA\.PARTITIONS"] = OperationalError(
            "SELECT", {}, Exception("Access denied")
        )
        with pytest.raises(QueryFailure, match="partitions of 'messages'") as excinfo:
            PartitionCatalog(engine).list_partitions("messages")
        assert isinstance(excinfo.value.cause, OperationalError)
        assert excinfo.value.__cause__ is excinfo.value.cause

    def test_schema_is_bound_as_parameter(self):
        conn = MagicMock()
        conn.execute.return_value.fetchall.return_value = []
        PartitionCatalog(MagicMock(), schema="cliq").list_partitions("messages", conn)
        params = conn.execute.call_args.args[1]
        assert params == {"schema": "cliq", "table": "messages"}


# ---------------------------------------------------------------------------
# partition_exists
# ---------------------------------------------------------------------------
class TestPartitionExists:
    def test_existing_partition(self, engine):
        assert PartitionCatalog(engine).partition_exists("messages", "p2024_q1")

    def test_missing_partition(self, engine):
        assert not PartitionCatalog(engine).partition_exists("messages", "p1999_q1")

    def test_catch_all_never_exists(self, engine):
        catalog = PartitionCatalog(engine)
        assert not catalog.partition_exists("messages", "pmax")
        assert not catalog.partition_exists("messages", "PMAX")

    def test_catch_all_short_circuits_query(self, engine, server):
        PartitionCatalog(engine).partition_exists("messages", "pmax")
        assert server.statements == []

    def test_consistent_with_listing(self, engine):
        catalog = PartitionCatalog(engine)
        for descriptor in catalog.list_partitions("messages"):
            assert catalog.partition_exists("messages", descriptor.name)

    def test_read_failure(self, engine, server):
        server.fail_on[r"PARTITION_NAME = :partition"] = OperationalError(
            "SELECT", {}, Exception("gone away")
        )
        with pytest.raises(QueryFailure):
            PartitionCatalog(engine).partition_exists("messages", "p2024_q1")


# ---------------------------------------------------------------------------
# partition_range
# ---------------------------------------------------------------------------
class TestPartitionRange:
    def test_bounds_from_neighbouring_descriptions(self, engine):
        bounds = PartitionCatalog(engine).partition_range("messages", "p2024_q1")
        assert bounds == PartitionRange(
            method="RANGE", expression="to_days(`created_at`)", lower="739251", upper="739342"
        )
        assert bounds.is_single_range

    def test_first_partition_unbounded_below(self, engine):
        bounds = PartitionCatalog(engine).partition_range("messages", "p2023_q4")
        assert bounds.lower is None
        assert bounds.upper == "739251"

    def test_maxvalue_unbounded_above(self, engine):
        bounds = PartitionCatalog(engine).partition_range("messages", "pmax")
        assert bounds.lower == "739433"
        assert bounds.upper is None

    def test_name_matched_case_insensitively(self, engine):
        assert PartitionCatalog(engine).partition_range("messages", "P2024_Q1").upper == "739342"

    def test_unknown_partition(self, engine):
        assert PartitionCatalog(engine).partition_range("messages", "p1999_q1") is None

    @pytest.mark.parametrize(
        "method, expression",
        [("HASH", "`message_id`"), ("RANGE COLUMNS", "`created_at`,`message_id`")],
    )
    def test_unsupported_partitioning_not_single_range(self, method, expression):
        assert not PartitionRange(method, expression, None, None).is_single_range

    def test_read_failure(self, engine, server):
        server.fail_on[r"PARTITION_METHOD"] = OperationalError("SELECT", {}, Exception("gone away"))
        with pytest.raises(QueryFailure, match="range of partition 'p2024_q1'"):
            PartitionCatalog(engine).partition_range("messages", "p2024_q1")


# ---------------------------------------------------------------------------
# tables
# ---------------------------------------------------------------------------
class TestTables:
    def test_table_exists(self, engine):
        catalog = PartitionCatalog(engine)
        assert catalog.table_exists("messages")
        assert not catalog.table_exists("messages_archive_2024_Q1")

    def test_is_partitioned(self, engine, server):
        server.tables["plain"] = FakeTable(columns=[("id", "int")])
        catalog = PartitionCatalog(engine)
        assert catalog.is_partitioned("messages")
        assert not catalog.is_partitioned("plain")

    def test_table_columns_in_ordinal_order(self, engine):
        columns = PartitionCatalog(engine).table_columns("messages")
        assert [name for name, _ in columns] == ["message_id", "sender_id", "body", "created_at"]


# ---------------------------------------------------------------------------
# Listing format
# ---------------------------------------------------------------------------
class TestFormatPartitionListing:
    def test_numbered_rows(self, engine):
        partitions = PartitionCatalog(engine).list_partitions("messages")
        text = format_partition_listing(partitions, "messages", "cliq")
        lines = text.splitlines()
        assert lines[0] == "Partitions for table `cliq.messages`:"
        assert "id: 0" in lines[1] and "p2023_q4" in lines[1]
        assert "id: 1" in lines[2] and "p2024_q1" in lines[2] and "4001" in lines[2]
        assert len(lines) == 4

    def test_empty_listing(self):
        text = format_partition_listing([], "messages")
        assert "`messages`" in text
        assert "no archivable partitions" in text
