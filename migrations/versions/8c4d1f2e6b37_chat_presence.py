"""chat presence

Revision ID: 8c4d1f2e6b37
Revises: 5b1e2c7d9a01
Create Date: 2026-10-19 15:30:00.000000

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "8c4d1f2e6b37"
down_revision: Union[str, Sequence[str], None] = "5b1e2c7d9a01"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the chat presence table."""
    op.create_table(
        "chat_presence",
        sa.Column("username", sa.String(length=64), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="online"),
        sa.Column("last_seen", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("username"),
    )
    op.create_index("ix_chat_presence_last_seen", "chat_presence", ["last_seen"])


def downgrade() -> None:
    """Drop the chat presence table."""
    op.drop_index("ix_chat_presence_last_seen", table_name="chat_presence")
    op.drop_table("chat_presence")
