"""add cancellation_reason to contracts table

Revision ID: 005
Revises: 004
Create Date: 2025-06-15 09:00:00.000000

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
    bind = op.get_bind()
    dialect_name = bind.dialect.name

    if dialect_name == "sqlite":
        # SQLite ALTER support is limited, use batch mode
        with op.batch_alter_table("contracts", schema=None) as batch_op:
            batch_op.add_column(sa.Column("cancellation_reason", sa.Text(), nullable=True))
    else:
        op.add_column("contracts", sa.Column("cancellation_reason", sa.Text(), nullable=True))


def downgrade() -> None:
    bind = op.get_bind()
    dialect_name = bind.dialect.name

    if dialect_name == "sqlite":
        # SQLite can't DROP COLUMN on older versions, use batch mode
        with op.batch_alter_table("contracts", schema=None) as batch_op:
            batch_op.drop_column("cancellation_reason")
    else:
        op.drop_column("contracts", "cancellation_reason")
