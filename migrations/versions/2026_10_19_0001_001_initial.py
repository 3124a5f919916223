"""initial

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:01:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    # items
    op.create_table(
        "items",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("sku", sa.String(), nullable=True, unique=True),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("unit", sa.String(), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("stock", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("stock >= 0", name="ck_items_stock_non_negative"),
    )
    op.create_index("ix_items_name", "items", ["name"])

    # sales_orders
    op.create_table(
        "sales_orders",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("uid", sa.String(), nullable=False),
        sa.Column("sales_order_no", sa.String(), nullable=False),
        sa.Column("reference_no", sa.String(), nullable=False),
        sa.Column("customer_id", sa.Uuid(), nullable=True),
        sa.Column("salesperson_id", sa.String(), nullable=False),
        sa.Column("price_list_id", sa.String(), nullable=False),
        sa.Column("sales_order_date", sa.Date(), nullable=True),
        sa.Column("expected_shipment_date", sa.Date(), nullable=True),
        sa.Column("payment_term", sa.String(), nullable=False),
        sa.Column("delivery_method", sa.String(), nullable=False),
        sa.Column("shipping_charge", sa.Numeric(12, 2), nullable=False),
        sa.Column("shipping_tax_id", sa.String(), nullable=True),
        sa.Column("adjustment", sa.Numeric(12, 2), nullable=False),
        sa.Column("round_off", sa.Numeric(12, 2), nullable=False),
        sa.Column("items", sa.JSON(), nullable=False),
        sa.Column("totals", sa.JSON(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=False),
        sa.Column("terms", sa.Text(), nullable=False),
        sa.Column("files_meta", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("delivered_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("fulfillment_status", sa.String(), nullable=False),
        sa.Column("fulfillment_assignee", sa.String(), nullable=False),
        sa.Column("fulfillment_notes", sa.Text(), nullable=False),
        sa.Column("fulfillment_history", sa.JSON(), nullable=False),
        sa.Column("picked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("packed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ready_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("shipped_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_sales_orders_uid", "sales_orders", ["uid"], unique=True)
    op.create_index(
        "ix_sales_orders_sales_order_no", "sales_orders", ["sales_order_no"], unique=True
    )
    op.create_index("ix_sales_orders_customer_id", "sales_orders", ["customer_id"])
    op.create_index("ix_sales_orders_status", "sales_orders", ["status"])
    op.create_index(
        "ix_sales_orders_fulfillment_status", "sales_orders", ["fulfillment_status"]
    )

    # counters
    counters = op.create_table(
        "counters",
        sa.Column("key", sa.String(), primary_key=True),
        sa.Column("seq", sa.Integer(), nullable=False),
    )
    op.bulk_insert(counters, [{"key": "salesOrder", "seq": 0}])


def downgrade() -> None:
    op.drop_table("counters")
    op.drop_index("ix_sales_orders_fulfillment_status", table_name="sales_orders")
    op.drop_index("ix_sales_orders_status", table_name="sales_orders")
    op.drop_index("ix_sales_orders_customer_id", table_name="sales_orders")
    op.drop_index("ix_sales_orders_sales_order_no", table_name="sales_orders")
    op.drop_index("ix_sales_orders_uid", table_name="sales_orders")
    op.drop_table("sales_orders")
    op.drop_index("ix_items_name", table_name="items")
    op.drop_table("items")
