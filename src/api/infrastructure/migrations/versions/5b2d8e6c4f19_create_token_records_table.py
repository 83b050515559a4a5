"""create token_records table

Revision ID: 5b2d8e6c4f19
Revises: c57e09d4f1a3
Create Date: 2026-09-29 09:47:12.377102

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "5b2d8e6c4f19"
down_revision: Union[str, Sequence[str], None] = "c57e09d4f1a3"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "token_records",
        sa.Column("token_id", sa.String(length=255), nullable=False),
        # Epoch seconds, compared against the current time on every lookup
        sa.Column("expires_at", sa.BigInteger(), nullable=False),
        sa.Column(
            "revoked", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column(
            "consumed", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.PrimaryKeyConstraint("token_id"),
    )
    op.create_index("ix_token_records_expires_at", "token_records", ["expires_at"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_token_records_expires_at", table_name="token_records")
    op.drop_table("token_records")
