"""Reorder engine schema: catalog mirror, inventory facts, vendors and POs

Revision ID: 0001_reorder_engine
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_reorder_engine'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'merchants',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('business_name', sa.String(length=200), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'merchant_settings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('merchant_id', sa.Integer(), nullable=False),
        sa.Column('default_supply_days', sa.Integer(), nullable=True),
        sa.Column('reorder_safety_days', sa.Integer(), nullable=True),
        sa.Column('reorder_priority_urgent_days', sa.Integer(), nullable=True),
        sa.Column('reorder_priority_high_days', sa.Integer(), nullable=True),
        sa.Column('reorder_priority_medium_days', sa.Integer(), nullable=True),
        sa.Column('reorder_priority_low_days', sa.Integer(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['merchant_id'], ['merchants.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('merchant_id')
    )

    op.create_table(
        'locations',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('merchant_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['merchant_id'], ['merchants.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_locations_merchant_id', 'locations', ['merchant_id'])

    op.create_table(
        'images',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('merchant_id', sa.Integer(), nullable=False),
        sa.Column('url', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['merchant_id'], ['merchants.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_images_merchant_id', 'images', ['merchant_id'])

    op.create_table(
        'items',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('merchant_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category_id', sa.String(length=64), nullable=True),
        sa.Column('category_name', sa.String(length=255), nullable=True),
        sa.Column('product_type', sa.String(length=40), nullable=True),
        sa.Column('taxable', sa.Boolean(), nullable=True),
        sa.Column('tax_ids', sa.JSON(), nullable=True),
        sa.Column('images', sa.JSON(), nullable=True),
        sa.Column('seo_title', sa.String(length=255), nullable=True),
        sa.Column('seo_description', sa.Text(), nullable=True),
        sa.Column('present_at_all_locations', sa.Boolean(), nullable=True),
        sa.Column('present_at_location_ids', sa.JSON(), nullable=True),
        sa.Column('available_online', sa.Boolean(), nullable=True),
        sa.Column('is_deleted', sa.Boolean(), nullable=True),
        sa.Column('is_archived', sa.Boolean(), nullable=True),
        sa.ForeignKeyConstraint(['merchant_id'], ['merchants.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_items_merchant_id', 'items', ['merchant_id'])

    op.create_table(
        'variations',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('merchant_id', sa.Integer(), nullable=False),
        sa.Column('item_id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('sku', sa.String(length=100), nullable=True),
        sa.Column('upc', sa.String(length=100), nullable=True),
        sa.Column('price_money', sa.Integer(), nullable=True),
        sa.Column('track_inventory', sa.Boolean(), nullable=True),
        sa.Column('inventory_alert_type', sa.String(length=40), nullable=True),
        sa.Column('inventory_alert_threshold', sa.Integer(), nullable=True),
        sa.Column('present_at_all_locations', sa.Boolean(), nullable=True),
        sa.Column('images', sa.JSON(), nullable=True),
        sa.Column('case_pack_quantity', sa.Integer(), nullable=True),
        sa.Column('reorder_multiple', sa.Integer(), nullable=True),
        sa.Column('stock_alert_min', sa.Integer(), nullable=True),
        sa.Column('stock_alert_max', sa.Integer(), nullable=True),
        sa.Column('discontinued', sa.Boolean(), nullable=False),
        sa.Column('is_deleted', sa.Boolean(), nullable=True),
        sa.ForeignKeyConstraint(['item_id'], ['items.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['merchant_id'], ['merchants.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_variations_merchant_id', 'variations', ['merchant_id'])
    op.create_index('ix_variations_item_id', 'variations', ['item_id'])

    op.create_table(
        'inventory_counts',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('merchant_id', sa.Integer(), nullable=False),
        sa.Column('catalog_object_id', sa.String(length=64), nullable=False),
        sa.Column('location_id', sa.String(length=64), nullable=False),
        sa.Column('state', sa.String(length=40), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['catalog_object_id'], ['variations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['location_id'], ['locations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['merchant_id'], ['merchants.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('merchant_id', 'catalog_object_id', 'location_id', 'state', name='uq_inventory_count')
    )
    op.create_index('ix_inventory_counts_merchant_id', 'inventory_counts', ['merchant_id'])
    op.create_index('ix_inventory_counts_catalog_object_id', 'inventory_counts', ['catalog_object_id'])
    op.create_index('ix_inventory_counts_state', 'inventory_counts', ['merchant_id', 'state'])

    op.create_table(
        'sales_velocity',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('merchant_id', sa.Integer(), nullable=False),
        sa.Column('variation_id', sa.String(length=64), nullable=False),
        sa.Column('location_id', sa.String(length=64), nullable=True),
        sa.Column('period_days', sa.Integer(), nullable=False),
        sa.Column('total_quantity_sold', sa.Float(), nullable=False),
        sa.Column('daily_avg_quantity', sa.Float(), nullable=False),
        sa.Column('weekly_avg_quantity', sa.Float(), nullable=False),
        sa.ForeignKeyConstraint(['location_id'], ['locations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['merchant_id'], ['merchants.id']),
        sa.ForeignKeyConstraint(['variation_id'], ['variations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('merchant_id', 'variation_id', 'location_id', 'period_days', name='uq_sales_velocity')
    )
    op.create_index('ix_sales_velocity_merchant_id', 'sales_velocity', ['merchant_id'])
    op.create_index('ix_sales_velocity_variation_id', 'sales_velocity', ['variation_id'])

    op.create_table(
        'variation_location_settings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('merchant_id', sa.Integer(), nullable=False),
        sa.Column('variation_id', sa.String(length=64), nullable=False),
        sa.Column('location_id', sa.String(length=64), nullable=False),
        sa.Column('stock_alert_min', sa.Integer(), nullable=True),
        sa.Column('stock_alert_max', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['location_id'], ['locations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['merchant_id'], ['merchants.id']),
        sa.ForeignKeyConstraint(['variation_id'], ['variations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('merchant_id', 'variation_id', 'location_id', name='uq_vls')
    )
    op.create_index('ix_variation_location_settings_merchant_id', 'variation_location_settings', ['merchant_id'])

    op.create_table(
        'vendors',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('merchant_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=True),
        sa.Column('schedule_type', sa.String(length=40), nullable=True),
        sa.Column('order_day', sa.String(length=20), nullable=True),
        sa.Column('receive_day', sa.String(length=20), nullable=True),
        sa.Column('lead_time_days', sa.Integer(), nullable=True),
        sa.Column('minimum_order_amount', sa.Integer(), nullable=True),
        sa.Column('payment_method', sa.String(length=60), nullable=True),
        sa.Column('payment_terms', sa.String(length=120), nullable=True),
        sa.Column('contact_email', sa.String(length=255), nullable=True),
        sa.Column('order_method', sa.String(length=60), nullable=True),
        sa.Column('default_supply_days', sa.Integer(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['merchant_id'], ['merchants.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_vendors_merchant_id', 'vendors', ['merchant_id'])

    op.create_table(
        'variation_vendors',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('merchant_id', sa.Integer(), nullable=False),
        sa.Column('variation_id', sa.String(length=64), nullable=False),
        sa.Column('vendor_id', sa.String(length=64), nullable=False),
        sa.Column('vendor_code', sa.String(length=100), nullable=True),
        sa.Column('unit_cost_money', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['merchant_id'], ['merchants.id']),
        sa.ForeignKeyConstraint(['variation_id'], ['variations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['vendor_id'], ['vendors.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('merchant_id', 'variation_id', 'vendor_id', name='uq_variation_vendor')
    )
    op.create_index('ix_variation_vendors_merchant_id', 'variation_vendors', ['merchant_id'])
    op.create_index('ix_variation_vendors_variation_id', 'variation_vendors', ['variation_id'])
    op.create_index('ix_variation_vendors_vendor_id', 'variation_vendors', ['vendor_id'])

    op.create_table(
        'purchase_orders',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('merchant_id', sa.Integer(), nullable=False),
        sa.Column('po_number', sa.String(length=60), nullable=False),
        sa.Column('vendor_id', sa.String(length=64), nullable=False),
        sa.Column('location_id', sa.String(length=64), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('order_date', sa.Date(), nullable=True),
        sa.Column('total_cents', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['location_id'], ['locations.id']),
        sa.ForeignKeyConstraint(['merchant_id'], ['merchants.id']),
        sa.ForeignKeyConstraint(['vendor_id'], ['vendors.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('merchant_id', 'po_number', name='uq_po_number')
    )
    op.create_index('ix_purchase_orders_merchant_id', 'purchase_orders', ['merchant_id'])
    op.create_index('ix_purchase_orders_vendor_id', 'purchase_orders', ['vendor_id'])

    op.create_table(
        'purchase_order_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('merchant_id', sa.Integer(), nullable=False),
        sa.Column('purchase_order_id', sa.Integer(), nullable=False),
        sa.Column('variation_id', sa.String(length=64), nullable=False),
        sa.Column('quantity_ordered', sa.Float(), nullable=False),
        sa.Column('received_quantity', sa.Float(), nullable=True),
        sa.Column('unit_cost_cents', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['merchant_id'], ['merchants.id']),
        sa.ForeignKeyConstraint(['purchase_order_id'], ['purchase_orders.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['variation_id'], ['variations.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_purchase_order_items_merchant_id', 'purchase_order_items', ['merchant_id'])
    op.create_index('ix_purchase_order_items_purchase_order_id', 'purchase_order_items', ['purchase_order_id'])


def downgrade() -> None:
    op.drop_table('purchase_order_items')
    op.drop_table('purchase_orders')
    op.drop_table('variation_vendors')
    op.drop_table('vendors')
    op.drop_table('variation_location_settings')
    op.drop_table('sales_velocity')
    op.drop_table('inventory_counts')
    op.drop_table('variations')
    op.drop_table('items')
    op.drop_table('images')
    op.drop_table('locations')
    op.drop_table('merchant_settings')
    op.drop_table('merchants')
