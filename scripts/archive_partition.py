#!/usr/bin/env python3
"""Partition archival CLI entry point.

Lists the partitions of the source table and archives one of them into a
standalone archive table, recording its range in the metadata table.

Usage::

    python scripts/archive_partition.py --list                  # show partitions
    python scripts/archive_partition.py                         # pick interactively
    python scripts/archive_partition.py --partition p2024_q1    # archive directly
    python scripts/archive_partition.py --table events --partition p2023_q4 --verify-structure

Exit codes: 0 on success, 1 on archival failure, 2 on invalid selection.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence, TextIO

# Ensure project root is on sys.path so ``tablearchiver.*`` imports work when
# this script is invoked directly (e.g. ``python scripts/archive_partition.py``).
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from tablearchiver.archiver import (
    ArchiveFailure,
    ArchiverConfig,
    PartitionArchiver,
    PartitionCatalog,
    PartitionDescriptor,
    archive_table_namer,
    format_partition_listing,
)
from tablearchiver.core.config import settings


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments.

    Args:
        argv: Argument list (defaults to sys.argv[1:]).
    """
    parser = argparse.ArgumentParser(
        description="Archive one partition of a partitioned MySQL table.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python scripts/archive_partition.py --list\n"
            "  python scripts/archive_partition.py --partition p2024_q1\n"
            "  python scripts/archive_partition.py --table events --schema cliq\n"
        ),
    )
    parser.add_argument(
        "--table",
        default=settings.archiver_source_table,
        help=f"Partitioned source table (default: {settings.archiver_source_table})",
    )
    parser.add_argument(
        "--metadata-table",
        default=settings.archiver_metadata_table,
        help=f"Metadata table (default: {settings.archiver_metadata_table})",
    )
    parser.add_argument(
        "--schema",
        default=None,
        help="Database holding the tables (default: the connection's database)",
    )
    parser.add_argument(
        "--partition",
        default=None,
        help="Partition to archive; prompts for a partition id when omitted",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        default=False,
        help="Only list archivable partitions and exit",
    )
    parser.add_argument(
        "--verify-structure",
        action="store_true",
        default=False,
        help="Check that an existing archive table matches the source columns",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ArchiverConfig:
    """ArchiverConfig for the parsed arguments with the default naming strategy."""
    return (
        ArchiverConfig.builder()
        .source_table(args.table)
        .metadata_table(args.metadata_table)
        .archive_name_strategy(archive_table_namer(args.table, settings.archiver_partition_prefix))
        .record_id_column(settings.archiver_record_id_column)
        .timestamp_column(settings.archiver_timestamp_column)
        .schema(args.schema)
        .verify_archive_structure(args.verify_structure)
        .build()
    )


def select_partition(
    partitions: Sequence[PartitionDescriptor],
    stdin: Optional[TextIO] = None,
) -> Optional[str]:
    """Prompt for a partition id and return the partition name.

    Returns None when the input is not a valid id.
    """
    print("Enter a partition id to archive: ", end="", flush=True)
    raw = (stdin or sys.stdin).readline().strip()
    try:
        idx = int(raw)
    except ValueError:
        print(f"Invalid integer input: {raw!r}", file=sys.stderr)
        return None
    if not 0 <= idx < len(partitions):
        print(f"Invalid partition id {idx}; choose 0-{len(partitions) - 1}", file=sys.stderr)
        return None
    print(f"You selected: {idx} ({partitions[idx].name})")
    return partitions[idx].name


def main(argv: list[str] | None = None, engine=None) -> int:
    """Entry point for the archival CLI.

    Args:
        argv: Argument list (defaults to sys.argv[1:]).
        engine: Engine override; defaults to the configured sync engine.

    Returns:
        Exit code: 0 on success, 1 on archival failure, 2 on invalid selection.
    """
    args = parse_args(argv)
    if engine is None:
        from tablearchiver.core.database import sync_engine

        engine = sync_engine

    try:
        config = build_config(args)
    except ValueError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    try:
        catalog = PartitionCatalog(engine, schema=args.schema)
        partition_name = args.partition
        if args.list or partition_name is None:
            partitions = catalog.list_partitions(args.table)
            print(format_partition_listing(partitions, args.table, args.schema))
            if args.list:
                return 0
            if not partitions:
                return 2
            partition_name = select_partition(partitions)
            if partition_name is None:
                return 2

        result = PartitionArchiver(engine, config, catalog=catalog).archive(partition_name)
    except ArchiveFailure as exc:
        print(f"\nFailed to archive partition: {exc}", file=sys.stderr)
        if exc.irreversible_steps:
            applied = ", ".join(step.value for step in exc.irreversible_steps)
            print(
                f"Already applied and not rolled back: {applied}. "
                "Re-run the same partition or repair manually.",
                file=sys.stderr,
            )
        return 1

    meta = result.metadata
    print(
        f"\nArchived {result.partition_name} -> {result.archive_table_name} "
        f"(records {meta.min_record_id}..{meta.max_record_id}, "
        f"{meta.start_timestamp} .. {meta.end_timestamp}) "
        f"in {result.duration_seconds:.1f}s"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
