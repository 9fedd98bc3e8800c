"""create identities table

Revision ID: 002
Revises: 001
Create Date: 2026-10-18 10:10:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "identities",
        sa.Column("address", sa.String(128), nullable=False),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("credential_token_id", sa.Integer(), nullable=True),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("address"),
        # A credential token belongs to exactly one identity
        sa.UniqueConstraint("credential_token_id", name="uq_identities_credential_token_id"),
    )


def downgrade() -> None:
    op.drop_table("identities")
