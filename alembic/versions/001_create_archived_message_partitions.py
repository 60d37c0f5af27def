"""create archived_message_partitions table

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1b2c3d4e5f6"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # One row per archived partition; written by PartitionArchiver
    op.create_table(
        "archived_message_partitions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("archive_table_name", sa.String(64), nullable=False),
        sa.Column("start_timestamp", sa.DateTime(), nullable=False),
        sa.Column("end_timestamp", sa.DateTime(), nullable=False),
        sa.Column("min_record_id", sa.BigInteger(), nullable=False),
        sa.Column("max_record_id", sa.BigInteger(), nullable=False),
        sa.Column(
            "archived_at",
            sa.DateTime(),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_archived_message_partitions"),
        mysql_engine="InnoDB",
    )
    op.create_index(
        "ix_archived_message_partitions_archive_table_name",
        "archived_message_partitions",
        ["archive_table_name"],
    )


def downgrade() -> None:
    op.drop_index(
        "ix_archived_message_partitions_archive_table_name",
        table_name="archived_message_partitions",
    )
    op.drop_table("archived_message_partitions")
