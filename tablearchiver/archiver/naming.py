"""Archive table naming strategies.

A naming strategy is any callable ``(partition_name) -> archive_table_name``
that raises :class:`InvalidPartitionName` for names it does not accept. The
default strategy expects ``<prefix><identifier>`` partition names, e.g.
``p2024_q1``, and produces ``messages_archive_2024_Q1``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from tablearchiver.archiver.errors import InvalidPartitionName

# MySQL identifier length limit
MAX_IDENTIFIER_LENGTH = 64

_IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9_]+$")


@dataclass(frozen=True)
class PrefixNamingStrategy:
    """Map ``<prefix><identifier>`` partitions to ``<table_prefix><IDENTIFIER>``.

    Attributes:
        table_prefix: Prepended to the upper-cased identifier, e.g.
            ``"messages_archive_"``.
        partition_prefix: Required leading string of every partition name.
    """

    table_prefix: str
    partition_prefix: str = "p"

    def __call__(self, partition_name: str) -> str:
        if not partition_name or not partition_name.startswith(self.partition_prefix):
            raise InvalidPartitionName(
                f"Invalid partition name format: {partition_name!r} "
                f"(expected prefix {self.partition_prefix!r})",
                partition_name=partition_name,
            )
        identifier = partition_name[len(self.partition_prefix):]
        if not _IDENTIFIER_RE.match(identifier):
            raise InvalidPartitionName(
                f"Invalid partition name format: {partition_name!r} "
                f"(identifier must be letters, digits or underscores)",
                partition_name=partition_name,
            )
        archive_table_name = f"{self.table_prefix}{identifier.upper()}"
        if len(archive_table_name) > MAX_IDENTIFIER_LENGTH:
            raise InvalidPartitionName(
                f"Archive table name {archive_table_name!r} exceeds "
                f"{MAX_IDENTIFIER_LENGTH} characters",
                partition_name=partition_name,
            )
        return archive_table_name


def archive_table_namer(source_table: str, partition_prefix: str = "p") -> PrefixNamingStrategy:
    """Default strategy for a source table: ``<source_table>_archive_<IDENTIFIER>``."""
    return PrefixNamingStrategy(
        table_prefix=f"{source_table}_archive_",
        partition_prefix=partition_prefix,
    )
