"""create contracts and contract_accessories tables

Revision ID: 003
Revises: 002
Create Date: 2025-06-01 10:20:00.000000

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
    op.create_table(
        "contracts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("vehicle_id", sa.Integer(), nullable=False),
        sa.Column("client_id", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("daily_rate", sa.Integer(), nullable=False),
        sa.Column("total_price", sa.Integer(), nullable=False),
        sa.Column("deposit", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["vehicle_id"], ["vehicles.id"]),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"]),
        # Inclusive range: a same-day rental has start_date == end_date
        sa.CheckConstraint("end_date >= start_date", name="ck_contracts_dates_ordered"),
        sa.CheckConstraint("daily_rate > 0", name="ck_contracts_daily_rate_positive"),
        sa.CheckConstraint("total_price > 0", name="ck_contracts_total_price_positive"),
        sa.CheckConstraint(
            "deposit >= 0 AND deposit <= total_price",
            name="ck_contracts_deposit_within_total",
        ),
        sa.CheckConstraint(
            "status IN ('PENDING', 'CONFIRMED', 'ACTIVE', 'COMPLETED', 'CANCELLED')",
            name="ck_contracts_status_valid",
        ),
        sa.CheckConstraint(
            "payment_status IN ('PENDING', 'PARTIAL', 'PAID', 'REFUNDED')",
            name="ck_contracts_payment_status_valid",
        ),
    )
    op.create_index("ix_contracts_id", "contracts", ["id"], unique=False)
    op.create_index("ix_contracts_vehicle_id", "contracts", ["vehicle_id"], unique=False)
    op.create_index("ix_contracts_client_id", "contracts", ["client_id"], unique=False)

    op.create_table(
        "contract_accessories",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("contract_id", sa.Integer(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("unit_price_per_day", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["contract_id"], ["contracts.id"], ondelete="CASCADE"),
        sa.CheckConstraint(
            "unit_price_per_day >= 0",
            name="ck_contract_accessories_price_non_negative",
        ),
        sa.CheckConstraint("quantity >= 1", name="ck_contract_accessories_quantity_positive"),
    )
    op.create_index(
        "ix_contract_accessories_contract_id",
        "contract_accessories",
        ["contract_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_contract_accessories_contract_id", table_name="contract_accessories")
    op.drop_table("contract_accessories")
    op.drop_index("ix_contracts_client_id", table_name="contracts")
    op.drop_index("ix_contracts_vehicle_id", table_name="contracts")
    op.drop_index("ix_contracts_id", table_name="contracts")
    op.drop_table("contracts")
