"""Archiver-specific pytest fixtures.

Builds a fake MySQL server (see ``fake_mysql``) holding a quarterly
partitioned ``messages`` table, an engine over it, and the default
ArchiverConfig for that table.
"""

from __future__ import annotations

import copy
from datetime import datetime

import pytest

from fake_mysql import MESSAGE_COLUMNS, FakeEngine, FakeMySQL, FakeTable, make_rows
from tablearchiver.archiver import ArchiverConfig, archive_table_namer

ARCHIVED_AT = datetime(2026, 10, 19, 12, 0, 0)


@pytest.fixture
def server() -> FakeMySQL:
    """Fake server with a quarterly-partitioned ``messages`` table.

    p2023_q4: ids 1-999, p2024_q1: ids 1000-5000 (Jan 1 - Mar 31 2024),
    p2024_q2: ids 5001-6000, pmax: empty.
    """
    db = FakeMySQL(now=ARCHIVED_AT)
    db.tables["messages"] = FakeTable(
        columns=list(MESSAGE_COLUMNS),
        partitions={
            "p2023_q4": make_rows(1, 999, datetime(2023, 10, 1), datetime(2023, 12, 31, 23, 0)),
            "p2024_q1": make_rows(1000, 5000, datetime(2024, 1, 1), datetime(2024, 3, 31)),
            "p2024_q2": make_rows(5001, 6000, datetime(2024, 4, 1), datetime(2024, 6, 30)),
            "pmax": [],
        },
        bounds={"p2023_q4": "739251", "p2024_q1": "739342", "p2024_q2": "739433"},
    )
    db.tables["archived_message_partitions"] = FakeTable(columns=[])
    return db


@pytest.fixture
def engine(server: FakeMySQL) -> FakeEngine:
    return FakeEngine(server)


@pytest.fixture
def config() -> ArchiverConfig:
    return (
        ArchiverConfig.builder()
        .source_table("messages")
        .metadata_table("archived_message_partitions")
        .archive_name_strategy(archive_table_namer("messages"))
        .build()
    )


@pytest.fixture
def snapshot():
    """Return a callable that deep-copies server state for later comparison."""
    def _snap(db: FakeMySQL) -> tuple:
        return copy.deepcopy(db.tables), copy.deepcopy(db.committed_inserts)
    return _snap

