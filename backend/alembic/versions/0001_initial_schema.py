"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

BOOKING_STATUSES = ('PENDING', 'CONFIRMED', 'CANCELLED', 'COMPLETED', 'NO_SHOW')
PAYMENT_STATUSES = ('UNPAID', 'PENDING', 'PAID', 'REFUNDED', 'FAILED')
RECURRING_FREQUENCIES = ('DAILY', 'WEEKLY', 'BIWEEKLY', 'MONTHLY')


def upgrade() -> None:
    """Upgrade schema."""

    # 1. Businesses with booking rules
    op.create_table(
        'business',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('business_name', sa.Text, nullable=False),
        sa.Column('timezone', sa.Text, nullable=False, server_default=sa.text("'UTC'")),
        sa.Column('minimum_advance_booking_hours', sa.Integer, nullable=False, server_default=sa.text('0')),
        sa.Column('cancellation_policy_hours', sa.Integer, nullable=False, server_default=sa.text('0')),
        sa.Column('booking_buffer_minutes', sa.Integer, nullable=False, server_default=sa.text('0')),
        sa.Column('created_at', sa.DateTime, server_default=sa.text('CURRENT_TIMESTAMP')),
    )

    # 2. Weekly availability, one row per business
    op.create_table(
        'availability',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('business_id', sa.Integer, sa.ForeignKey('business.id', ondelete='CASCADE'), nullable=False, unique=True),
        *[sa.Column(day, sa.JSON) for day in (
            'monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday',
        )],
        sa.Column('updated_at', sa.DateTime, server_default=sa.text('CURRENT_TIMESTAMP')),
    )

    # 3. Locations and services
    op.create_table(
        'locations',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('business_id', sa.Integer, sa.ForeignKey('business.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.Text, nullable=False),
        sa.Column('address', sa.Text),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
    )

    op.create_table(
        'services',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('business_id', sa.Integer, sa.ForeignKey('business.id', ondelete='CASCADE'), nullable=False),
        sa.Column('location_id', sa.Integer, sa.ForeignKey('locations.id', ondelete='SET NULL')),
        sa.Column('name', sa.Text, nullable=False),
        sa.Column('description', sa.Text),
        sa.Column('duration', sa.Integer, nullable=False),
        sa.Column('buffer_time_before', sa.Integer, nullable=False, server_default=sa.text('0')),
        sa.Column('buffer_time_after', sa.Integer, nullable=False, server_default=sa.text('0')),
        sa.Column('price', sa.Float, nullable=False, server_default=sa.text('0')),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
    )

    # 4. Recurring templates
    op.create_table(
        'recurring_bookings',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('business_id', sa.Integer, sa.ForeignKey('business.id', ondelete='CASCADE'), nullable=False),
        sa.Column('location_id', sa.Integer, sa.ForeignKey('locations.id', ondelete='SET NULL')),
        sa.Column('service_id', sa.Integer, sa.ForeignKey('services.id'), nullable=False),
        sa.Column('customer_name', sa.Text, nullable=False),
        sa.Column('customer_email', sa.Text, nullable=False),
        sa.Column('customer_phone', sa.Text),
        sa.Column('frequency', sa.Enum(*RECURRING_FREQUENCIES, name='recurring_frequency'), nullable=False),
        sa.Column('day_of_week', sa.Integer),
        sa.Column('day_of_month', sa.Integer),
        sa.Column('start_time', sa.Text, nullable=False),
        sa.Column('start_date', sa.Date, nullable=False),
        sa.Column('end_date', sa.Date),
        sa.Column('number_of_occurrences', sa.Integer),
        sa.Column('last_generated_date', sa.DateTime),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('notes', sa.Text),
        sa.Column('created_at', sa.DateTime, server_default=sa.text('CURRENT_TIMESTAMP')),
    )

    # 5. Bookings
    op.create_table(
        'bookings',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('business_id', sa.Integer, sa.ForeignKey('business.id', ondelete='CASCADE'), nullable=False),
        sa.Column('location_id', sa.Integer, sa.ForeignKey('locations.id', ondelete='SET NULL')),
        sa.Column('service_id', sa.Integer, sa.ForeignKey('services.id'), nullable=False),
        sa.Column('recurring_booking_id', sa.Integer, sa.ForeignKey('recurring_bookings.id', ondelete='SET NULL')),
        sa.Column('customer_name', sa.Text, nullable=False),
        sa.Column('customer_email', sa.Text, nullable=False),
        sa.Column('customer_phone', sa.Text),
        sa.Column('start_time', sa.DateTime, nullable=False),
        sa.Column('end_time', sa.DateTime, nullable=False),
        sa.Column('status', sa.Enum(*BOOKING_STATUSES, name='booking_status'), nullable=False, server_default=sa.text("'PENDING'")),
        sa.Column('payment_status', sa.Enum(*PAYMENT_STATUSES, name='payment_status'), nullable=False, server_default=sa.text("'UNPAID'")),
        sa.Column('notes', sa.Text),
        sa.Column('cancel_reason', sa.Text),
        sa.Column('created_at', sa.DateTime, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.CheckConstraint('end_time > start_time', name='ck_bookings_end_after_start'),
    )

    op.create_index('ix_bookings_business_id', 'bookings', ['business_id'])
    op.create_index('ix_bookings_start_time', 'bookings', ['start_time'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_bookings_start_time', table_name='bookings')
    op.drop_index('ix_bookings_business_id', table_name='bookings')
    op.drop_table('bookings')
    op.drop_table('recurring_bookings')
    op.drop_table('services')
    op.drop_table('locations')
    op.drop_table('availability')
    op.drop_table('business')

    bind = op.get_bind()
    for name in ('payment_status', 'booking_status', 'recurring_frequency'):
        sa.Enum(name=name).drop(bind, checkfirst=True)
