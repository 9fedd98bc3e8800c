"""create rentals table

Revision ID: 005
Revises: 004
Create Date: 2026-10-18 10:40:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "rentals",
        sa.Column("item_id", sa.Integer(), nullable=False, autoincrement=False),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("seller", sa.String(128), nullable=False),
        sa.Column("buyer", sa.String(128), nullable=True),
        sa.Column("paid", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("received", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("confirmed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("disputed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("refunded", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("asset_token_id", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("item_id"),
        sa.UniqueConstraint("asset_token_id", name="uq_rentals_asset_token_id"),
        sa.CheckConstraint("price > 0", name="ck_rentals_price_positive"),
        # A dispute can only be open on a paid, unconfirmed rental
        sa.CheckConstraint(
            "NOT disputed OR (paid AND NOT confirmed)",
            name="ck_rentals_disputed_requires_paid_unconfirmed",
        ),
    )
    op.create_index("ix_rentals_seller", "rentals", ["seller"], unique=False)
    op.create_index("ix_rentals_buyer", "rentals", ["buyer"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_rentals_buyer", table_name="rentals")
    op.drop_index("ix_rentals_seller", table_name="rentals")
    op.drop_table("rentals")
