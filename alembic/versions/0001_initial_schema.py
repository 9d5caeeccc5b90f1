"""initial schema: orders, pricing, payments, shipping labels"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = '0001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ✅ Orders
    op.create_table(
        'orders',
        sa.Column('order_id', sa.String(64), primary_key=True),
        sa.Column('order_number', sa.String(32), nullable=True),
        sa.Column('customer_email', sa.String(320), nullable=True),
        sa.Column('customer_name', sa.String(200), nullable=True),
        sa.Column('customer_phone', sa.String(50), nullable=True),
        sa.Column('total', sa.Float(), nullable=True),
        sa.Column('currency', sa.String(3), nullable=False),
        sa.Column('status', sa.String(50), nullable=False),
        sa.Column('file_url', sa.Text(), nullable=True),
        sa.Column('file_name', sa.Text(), nullable=True),
        sa.Column('created', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_orders_order_number', 'orders', ['order_number'])

    # ✅ Pricing quotes
    op.create_table(
        'pricing',
        sa.Column('pricing_id', sa.String(128), primary_key=True),
        sa.Column('order_id', sa.String(64), nullable=True),
        sa.Column('material', sa.String(64), nullable=False),
        sa.Column('quality', sa.String(32), nullable=True),
        sa.Column('color', sa.String(32), nullable=True),
        sa.Column('volume', sa.Float(), nullable=False),
        sa.Column('material_cost', sa.Float(), nullable=False),
        sa.Column('labor_cost', sa.Float(), nullable=False),
        sa.Column('support_cost', sa.Float(), nullable=False),
        sa.Column('color_premium', sa.Float(), nullable=False),
        sa.Column('post_processing_cost', sa.Float(), nullable=False),
        sa.Column('service_fee', sa.Float(), nullable=False),
        sa.Column('subtotal', sa.Float(), nullable=False),
        sa.Column('tax', sa.Float(), nullable=False),
        sa.Column('total', sa.Float(), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False),
        sa.Column('estimated_days', sa.Integer(), nullable=True),
        sa.Column('created', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_pricing_order_id', 'pricing', ['order_id'])

    # ✅ Payments
    op.create_table(
        'payments',
        sa.Column('payment_id', sa.String(128), primary_key=True),
        sa.Column('order_id', sa.String(64), nullable=True),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False),
        sa.Column('status', sa.String(50), nullable=False),
        sa.Column('stripe_payment_intent_id', sa.String(128), nullable=True),
        sa.Column('processed', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_payments_order_id', 'payments', ['order_id'])

    # ✅ Shipping labels
    op.create_table(
        'shipping_labels',
        sa.Column('shipping_id', sa.String(64), primary_key=True),
        sa.Column('order_id', sa.String(64), nullable=False),
        sa.Column('tracking_number', sa.String(128), nullable=True),
        sa.Column('carrier', sa.String(32), nullable=True),
        sa.Column('label_url', sa.Text(), nullable=True),
        sa.Column('cost', sa.Float(), nullable=True),
        sa.Column('currency', sa.String(3), nullable=True),
        sa.Column('rate_id', sa.String(128), nullable=True),
        sa.Column('transaction_id', sa.String(128), nullable=True),
        sa.Column('created', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_shipping_labels_order_created', 'shipping_labels', ['order_id', 'created'])


def downgrade() -> None:
    op.drop_index('ix_shipping_labels_order_created', table_name='shipping_labels')
    op.drop_table('shipping_labels')
    op.drop_index('ix_payments_order_id', table_name='payments')
    op.drop_table('payments')
    op.drop_index('ix_pricing_order_id', table_name='pricing')
    op.drop_table('pricing')
    op.drop_index('ix_orders_order_number', table_name='orders')
    op.drop_table('orders')
