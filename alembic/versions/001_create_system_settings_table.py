"""create system settings table

Revision ID: 001
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "system_settings",
        sa.Column("key", sa.String(64), nullable=False),
        sa.Column("value", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("key"),
    )

    # Get settings from environment (will be loaded by Alembic env.py)
    from escrow_rental.core.config import settings

    if not settings.admin_address:
        raise ValueError("ADMIN_ADDRESS must be set before running migrations.")

    # The administrator is fixed here, once; nothing in the application updates it
    op.execute(
        sa.text(
            "INSERT INTO system_settings (key, value) VALUES ('admin_address', :admin_address)"
        ).bindparams(admin_address=settings.admin_address)
    )


def downgrade() -> None:
    op.drop_table("system_settings")
