"""create rental events table

Revision ID: 006
Revises: 005
Create Date: 2026-10-18 10:50:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "rental_events",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("kind", sa.String(32), nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_rental_events_id", "rental_events", ["id"], unique=False)
    op.create_index("ix_rental_events_kind", "rental_events", ["kind"], unique=False)
    op.create_index("ix_rental_events_item_id", "rental_events", ["item_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_rental_events_item_id", table_name="rental_events")
    op.drop_index("ix_rental_events_kind", table_name="rental_events")
    op.drop_index("ix_rental_events_id", table_name="rental_events")
    op.drop_table("rental_events")
