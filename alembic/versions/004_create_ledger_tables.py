"""create accounts and escrow holdings tables

Revision ID: 004
Revises: 003
Create Date: 2026-10-18 10:30:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("holder", sa.String(128), nullable=False),
        sa.Column("balance", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("holder"),
        sa.CheckConstraint("balance >= 0", name="ck_accounts_balance_non_negative"),
    )

    # At most one holding per item: funds for a rental are deposited once
    op.create_table(
        "escrow_holdings",
        sa.Column("item_id", sa.Integer(), nullable=False, autoincrement=False),
        sa.Column("depositor", sa.String(128), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("item_id"),
        sa.CheckConstraint("amount > 0", name="ck_escrow_holdings_amount_positive"),
    )


def downgrade() -> None:
    op.drop_table("escrow_holdings")
    op.drop_table("accounts")
