"""create cart pricing tables

Revision ID: 3f1c9a2d7b4e
Revises:
Create Date: 2026-10-19 09:12:41.503218

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f1c9a2d7b4e'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('first_name', sa.String(), nullable=False),
        sa.Column('last_name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('role', sa.String(), nullable=False, server_default='user'),
        sa.Column('can_login', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('phone_number', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'package',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('slug', sa.String(), nullable=False),
        sa.Column('destination', sa.String(), nullable=True),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.Column('original_price', sa.Integer(), nullable=False),
        sa.Column('pricing', sa.JSON(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'cart_item',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('package_id', sa.Integer(), sa.ForeignKey('package.id'), nullable=False),
        sa.Column('days', sa.Integer(), nullable=False),
        sa.Column('members', sa.Integer(), nullable=False),
        sa.Column('with_flights', sa.Boolean(), nullable=False),
        sa.Column('with_visa', sa.Boolean(), nullable=False),
        sa.Column('selected_date', sa.DateTime(), nullable=True),
        sa.Column('total_price', sa.Integer(), nullable=False),
        sa.Column('price_before_admin_discount', sa.Integer(), nullable=True),
        sa.Column('coupon_title', sa.String(), nullable=True),
        sa.Column('coupon_code', sa.String(), nullable=True),
        sa.Column('coupon_percent', sa.Numeric(6, 4), nullable=True),
        sa.Column('visa_cost', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('booking_type', sa.String(), nullable=False, server_default='cart'),
        sa.Column('phone_number', sa.String(), nullable=True),
        sa.Column('best_time_to_connect', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_cart_item_user_id', 'cart_item', ['user_id'])
    op.create_index('ix_cart_item_booking_type', 'cart_item', ['booking_type'])

    op.create_table(
        'user_coupon',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('coupon_code', sa.String(), nullable=False),
        sa.Column('offer_title', sa.String(), nullable=False),
        sa.Column('discount', sa.String(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('used', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('used_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_user_coupon_user_id', 'user_coupon', ['user_id'])
    op.create_index('ix_user_coupon_coupon_code', 'user_coupon', ['coupon_code'])

    op.create_table(
        'item_event',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('item_id', sa.Integer(), nullable=False),
        sa.Column('event_type', sa.String(), nullable=False),
        sa.Column('label', sa.String(), nullable=False),
        sa.Column('meta', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('created_by', sa.String(), nullable=False),
    )
    op.create_index('ix_item_event_item_id', 'item_event', ['item_id'])
    op.create_index('ix_item_event_event_type', 'item_event', ['event_type'])

    op.create_table(
        'notification',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('recipient_role', sa.String(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('trigger_source', sa.String(), nullable=False),
        sa.Column('related_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('content', sa.String(), nullable=False),
        sa.Column('channel', sa.String(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )


def downgrade():
    op.drop_table('notification')
    op.drop_index('ix_item_event_event_type', table_name='item_event')
    op.drop_index('ix_item_event_item_id', table_name='item_event')
    op.drop_table('item_event')
    op.drop_index('ix_user_coupon_coupon_code', table_name='user_coupon')
    op.drop_index('ix_user_coupon_user_id', table_name='user_coupon')
    op.drop_table('user_coupon')
    op.drop_index('ix_cart_item_booking_type', table_name='cart_item')
    op.drop_index('ix_cart_item_user_id', table_name='cart_item')
    op.drop_table('cart_item')
    op.drop_table('package')
    op.drop_table('user')
