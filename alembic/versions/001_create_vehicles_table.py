"""create vehicles table

Revision ID: 001
Revises:
Create Date: 2025-06-01 10:00:00.000000

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
        "vehicles",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("daily_rate", sa.Integer(), nullable=False),
        sa.Column("is_operational", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("daily_rate > 0", name="ck_vehicles_daily_rate_positive"),
    )
    op.create_index("ix_vehicles_id", "vehicles", ["id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_vehicles_id", table_name="vehicles")
    op.drop_table("vehicles")
