# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""create_exchange_rates

Revision ID: 3f1c8a2d9b47
Revises:
Create Date: 2026-10-17 10:12:41.503118

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1c8a2d9b47"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "exchange_rates",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("from_currency", sa.String(length=3), nullable=False),
        sa.Column("to_currency", sa.String(length=3), nullable=False),
        sa.Column("rate", sa.Float(), nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_exchange_rates_from_currency"),
        "exchange_rates",
        ["from_currency"],
        unique=False,
    )
    op.create_index(
        op.f("ix_exchange_rates_to_currency"),
        "exchange_rates",
        ["to_currency"],
        unique=False,
    )
    op.create_index(
        op.f("ix_exchange_rates_created_at"),
        "exchange_rates",
        ["created_at"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_exchange_rates_created_at"), table_name="exchange_rates")
    op.drop_index(op.f("ix_exchange_rates_to_currency"), table_name="exchange_rates")
    op.drop_index(op.f("ix_exchange_rates_from_currency"), table_name="exchange_rates")
    op.drop_table("exchange_rates")
