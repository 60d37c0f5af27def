"""Tests for archive table naming strategies."""

import pytest

from tablearchiver.archiver.errors import InvalidPartitionName
from tablearchiver.archiver.naming import (
    MAX_IDENTIFIER_LENGTH,
    PrefixNamingStrategy,
    archive_table_namer,
)


class TestPrefixNamingStrategy:
    def test_quarter_partition_maps_to_upper_cased_suffix(self):
        namer = archive_table_namer("messages")
        assert namer("p2024_q1") == "messages_archive_2024_Q1"

    def test_deterministic(self):
        namer = archive_table_namer("messages")
        assert namer("p2023_q4") == namer("p2023_q4")

    def test_missing_prefix_rejected(self):
        namer = archive_table_namer("messages")
        with pytest.raises(InvalidPartitionName, match="expected prefix"):
            namer("2024_q1")

    def test_rejection_carries_partition_name(self):
        namer = archive_table_namer("messages")
        with pytest.raises(InvalidPartitionName) as excinfo:
            namer("2024_q1")
        assert excinfo.value.partition_name == "2024_q1"
        assert excinfo.value.step is None

    @pytest.mark.parametrize("name", ["", "p", "p2024-q1", "p2024 q1", "p2024`q1"])
    def test_malformed_identifier_rejected(self, name):
        with pytest.raises(InvalidPartitionName):
            archive_table_namer("messages")(name)

    def test_too_long_archive_name_rejected(self):
        namer = archive_table_namer("messages")
        name = "p" + "x" * MAX_IDENTIFIER_LENGTH
        with pytest.raises(InvalidPartitionName, match="exceeds"):
            namer(name)

    def test_custom_prefixes(self):
        namer = PrefixNamingStrategy(table_prefix="events_", partition_prefix="part_")
        assert namer("part_2025_h1") == "events_2025_H1"
        with pytest.raises(InvalidPartitionName):
            namer("p2025_h1")

    def test_strategy_is_immutable(self):
        namer = archive_table_namer("messages")
        with pytest.raises(AttributeError):
            namer.table_prefix = "other_"  # type: ignore[misc]
