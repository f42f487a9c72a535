"""Initial schema - locations, tables, users, reservations, orders and feedback.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create initial database tables."""
    op.create_table(
        'locations',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('address', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_locations'))
    )
    op.create_index(op.f('ix_locations_address'), 'locations', ['address'], unique=False)

    op.create_table(
        'restaurant_tables',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('location_id', sa.String(length=64), nullable=False),
        sa.Column('table_number', sa.String(length=20), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['location_id'], ['locations.id'],
                                name=op.f('fk_restaurant_tables_location_id_locations')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_restaurant_tables'))
    )
    op.create_index(op.f('ix_restaurant_tables_location_id'), 'restaurant_tables', ['location_id'], unique=False)

    op.create_table(
        'users',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('location_id', sa.String(length=64), nullable=True),
        sa.ForeignKeyConstraint(['location_id'], ['locations.id'],
                                name=op.f('fk_users_location_id_locations')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_users')),
        sa.UniqueConstraint('email', name=op.f('uq_users_email'))
    )
    op.create_index(op.f('ix_users_role'), 'users', ['role'], unique=False)
    op.create_index(op.f('ix_users_location_id'), 'users', ['location_id'], unique=False)

    op.create_table(
        'reservations',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('location_id', sa.String(length=64), nullable=False),
        sa.Column('location_address', sa.String(length=255), nullable=False),
        sa.Column('table_id', sa.String(length=64), nullable=False),
        sa.Column('table_number', sa.String(length=20), nullable=False),
        sa.Column('table_capacity', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('time_from', sa.Time(), nullable=False),
        sa.Column('time_to', sa.Time(), nullable=False),
        sa.Column('time_slot', sa.String(length=20), nullable=False),
        sa.Column('guests_number', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('client_type', sa.String(length=20), nullable=False),
        sa.Column('user_email', sa.String(length=255), nullable=True),
        sa.Column('user_info', sa.String(length=255), nullable=True),
        sa.Column('waiter_id', sa.String(length=64), nullable=True),
        sa.Column('pre_order_count', sa.Integer(), nullable=False),
        sa.Column('order_count', sa.Integer(), nullable=False),
        sa.Column('feedback_token', sa.Text(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['location_id'], ['locations.id'],
                                name=op.f('fk_reservations_location_id_locations')),
        sa.ForeignKeyConstraint(['table_id'], ['restaurant_tables.id'],
                                name=op.f('fk_reservations_table_id_restaurant_tables')),
        sa.ForeignKeyConstraint(['waiter_id'], ['users.id'],
                                name=op.f('fk_reservations_waiter_id_users')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_reservations'))
    )
    op.create_index(op.f('ix_reservations_date'), 'reservations', ['date'], unique=False)
    op.create_index(op.f('ix_reservations_status'), 'reservations', ['status'], unique=False)
    op.create_index(op.f('ix_reservations_user_email'), 'reservations', ['user_email'], unique=False)
    op.create_index(op.f('ix_reservations_waiter_id'), 'reservations', ['waiter_id'], unique=False)
    op.create_index(op.f('ix_reservations_created_at'), 'reservations', ['created_at'], unique=False)
    op.create_index('ix_reservations_date_location_table', 'reservations',
                    ['date', 'location_address', 'table_id'], unique=False)
    op.create_index('ix_reservations_waiter_date', 'reservations', ['waiter_id', 'date'], unique=False)

    op.create_table(
        'dishes',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.Column('price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_dishes'))
    )

    op.create_table(
        'pre_orders',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('reservation_id', sa.String(length=64), nullable=False),
        sa.Column('user_email', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.ForeignKeyConstraint(['reservation_id'], ['reservations.id'],
                                name=op.f('fk_pre_orders_reservation_id_reservations')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_pre_orders')),
        sa.UniqueConstraint('reservation_id', name=op.f('uq_pre_orders_reservation_id'))
    )

    op.create_table(
        'pre_order_items',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('pre_order_id', sa.String(length=64), nullable=False),
        sa.Column('dish_id', sa.String(length=64), nullable=False),
        sa.Column('dish_name', sa.String(length=150), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.ForeignKeyConstraint(['pre_order_id'], ['pre_orders.id'],
                                name=op.f('fk_pre_order_items_pre_order_id_pre_orders')),
        sa.ForeignKeyConstraint(['dish_id'], ['dishes.id'],
                                name=op.f('fk_pre_order_items_dish_id_dishes')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_pre_order_items'))
    )
    op.create_index(op.f('ix_pre_order_items_pre_order_id'), 'pre_order_items', ['pre_order_id'], unique=False)

    op.create_table(
        'orders',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('reservation_id', sa.String(length=64), nullable=False),
        sa.Column('total_price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['reservation_id'], ['reservations.id'],
                                name=op.f('fk_orders_reservation_id_reservations')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_orders')),
        sa.UniqueConstraint('reservation_id', name=op.f('uq_orders_reservation_id'))
    )
    op.create_index(op.f('ix_orders_created_at'), 'orders', ['created_at'], unique=False)

    op.create_table(
        'order_lines',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('order_id', sa.String(length=64), nullable=False),
        sa.Column('dish_id', sa.String(length=64), nullable=False),
        sa.Column('dish_name', sa.String(length=150), nullable=False),
        sa.Column('price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'],
                                name=op.f('fk_order_lines_order_id_orders')),
        sa.ForeignKeyConstraint(['dish_id'], ['dishes.id'],
                                name=op.f('fk_order_lines_dish_id_dishes')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_order_lines'))
    )
    op.create_index(op.f('ix_order_lines_order_id'), 'order_lines', ['order_id'], unique=False)

    op.create_table(
        'feedbacks',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('reservation_id', sa.String(length=64), nullable=False),
        sa.Column('location_id', sa.String(length=64), nullable=False),
        sa.Column('type', sa.String(length=30), nullable=False),
        sa.Column('reservation_type', sa.String(length=100), nullable=False),
        sa.Column('rate', sa.Integer(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['reservation_id'], ['reservations.id'],
                                name=op.f('fk_feedbacks_reservation_id_reservations')),
        sa.ForeignKeyConstraint(['location_id'], ['locations.id'],
                                name=op.f('fk_feedbacks_location_id_locations')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_feedbacks'))
    )
    op.create_index(op.f('ix_feedbacks_reservation_type'), 'feedbacks', ['reservation_type'], unique=False)
    op.create_index(op.f('ix_feedbacks_created_at'), 'feedbacks', ['created_at'], unique=False)


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index(op.f('ix_feedbacks_created_at'), table_name='feedbacks')
    op.drop_index(op.f('ix_feedbacks_reservation_type'), table_name='feedbacks')
    op.drop_table('feedbacks')

    op.drop_index(op.f('ix_order_lines_order_id'), table_name='order_lines')
    op.drop_table('order_lines')
    op.drop_index(op.f('ix_orders_created_at'), table_name='orders')
    op.drop_table('orders')

    op.drop_index(op.f('ix_pre_order_items_pre_order_id'), table_name='pre_order_items')
    op.drop_table('pre_order_items')
    op.drop_table('pre_orders')
    op.drop_table('dishes')

    op.drop_index('ix_reservations_waiter_date', table_name='reservations')
    op.drop_index('ix_reservations_date_location_table', table_name='reservations')
    op.drop_index(op.f('ix_reservations_created_at'), table_name='reservations')
    op.drop_index(op.f('ix_reservations_waiter_id'), table_name='reservations')
    op.drop_index(op.f('ix_reservations_user_email'), table_name='reservations')
    op.drop_index(op.f('ix_reservations_status'), table_name='reservations')
    op.drop_index(op.f('ix_reservations_date'), table_name='reservations')
    op.drop_table('reservations')

    op.drop_index(op.f('ix_users_location_id'), table_name='users')
    op.drop_index(op.f('ix_users_role'), table_name='users')
    op.drop_table('users')

    op.drop_index(op.f('ix_restaurant_tables_location_id'), table_name='restaurant_tables')
    op.drop_table('restaurant_tables')

    op.drop_index(op.f('ix_locations_address'), table_name='locations')
    op.drop_table('locations')
