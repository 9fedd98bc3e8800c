"""create token counters and tokens tables

Revision ID: 003
Revises: 002
Create Date: 2026-10-18 10:20:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # One monotonic counter per token namespace (credential, asset)
    op.create_table(
        "token_counters",
        sa.Column("namespace", sa.String(32), nullable=False),
        sa.Column("last_id", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("namespace"),
        sa.CheckConstraint("last_id >= 0", name="ck_token_counters_last_id_non_negative"),
    )
    op.execute(
        sa.text(
            "INSERT INTO token_counters (namespace, last_id) VALUES ('credential', 0), ('asset', 0)"
        )
    )

    op.create_table(
        "tokens",
        sa.Column("namespace", sa.String(32), nullable=False),
        sa.Column("token_id", sa.Integer(), nullable=False, autoincrement=False),
        sa.Column("owner", sa.String(128), nullable=False),
        sa.Column("minted_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("namespace", "token_id"),
    )
    op.create_index("ix_tokens_owner", "tokens", ["owner"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_tokens_owner", table_name="tokens")
    op.drop_table("tokens")
    op.drop_table("token_counters")
