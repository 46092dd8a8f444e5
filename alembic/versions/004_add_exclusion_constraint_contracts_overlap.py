"""add exclusion constraint forbidding overlapping contracts per vehicle

Revision ID: 004
Revises: 003
Create Date: 2025-06-01 10:30:00.000000

"""

from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Detect database type: only PostgreSQL supports exclusion constraints
    bind = op.get_bind()
    dialect_name = bind.dialect.name

    if dialect_name != "postgresql":
        # SQLite (tests) relies on the per-vehicle booking lock alone
        return

    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
    # Inclusive '[]' ranges: a contract ending on day D conflicts with one starting on D
    op.execute(
        """
        ALTER TABLE contracts
        ADD CONSTRAINT ex_contracts_vehicle_no_overlap
        EXCLUDE USING gist (
            vehicle_id WITH =,
            daterange(start_date, end_date, '[]') WITH &&
        )
        WHERE (status <> 'CANCELLED')
        """
    )


def downgrade() -> None:
    bind = op.get_bind()
    if bind.dialect.name != "postgresql":
        return

    op.execute("ALTER TABLE contracts DROP CONSTRAINT IF EXISTS ex_contracts_vehicle_no_overlap")
