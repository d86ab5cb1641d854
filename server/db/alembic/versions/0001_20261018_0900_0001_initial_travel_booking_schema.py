"""Initial travel booking schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade database schema."""
    # Create users table
    op.create_table('users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint("role IN ('user', 'admin')", name='ck_users_role_valid'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    # Create flights table
    op.create_table('flights',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('airline', sa.String(length=100), nullable=False),
        sa.Column('origin', sa.String(length=100), nullable=False),
        sa.Column('destination', sa.String(length=100), nullable=False),
        sa.Column('city', sa.String(length=100), nullable=False),
        sa.Column('departs_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('arrives_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('travel_class', sa.String(length=20), nullable=False),
        sa.Column('direct', sa.Boolean(), nullable=False),
        sa.Column('price_amount', sa.Integer(), nullable=False),
        sa.Column('price_currency', sa.String(length=3), nullable=False),
        sa.Column('seats_available', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('seats_available >= 0', name='ck_flights_seats_available_non_negative'),
        sa.CheckConstraint('price_amount > 0', name='ck_flights_price_amount_positive'),
        sa.CheckConstraint('length(price_currency) = 3', name='ck_flights_price_currency_length'),
        sa.CheckConstraint("travel_class IN ('economy', 'business', 'first')", name='ck_flights_travel_class_valid'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_flights_city'), 'flights', ['city'], unique=False)
    op.create_index(op.f('ix_flights_departs_at'), 'flights', ['departs_at'], unique=False)

    # Create hotels table
    op.create_table('hotels',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('city', sa.String(length=100), nullable=False),
        sa.Column('address', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('check_in_date', sa.Date(), nullable=False),
        sa.Column('check_out_date', sa.Date(), nullable=False),
        sa.Column('price_per_night', sa.Integer(), nullable=False),
        sa.Column('price_currency', sa.String(length=3), nullable=False),
        sa.Column('free_cancellation', sa.Boolean(), nullable=False),
        sa.Column('available_rooms', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('available_rooms >= 0', name='ck_hotels_available_rooms_non_negative'),
        sa.CheckConstraint('price_per_night > 0', name='ck_hotels_price_per_night_positive'),
        sa.CheckConstraint('length(price_currency) = 3', name='ck_hotels_price_currency_length'),
        sa.CheckConstraint('check_out_date >= check_in_date', name='ck_hotels_stay_dates_ordered'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_hotels_city'), 'hotels', ['city'], unique=False)
    op.create_index(op.f('ix_hotels_check_in_date'), 'hotels', ['check_in_date'], unique=False)

    # Create reservations table (append-only booking and cancellation events)
    op.create_table('reservations',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('hotel_id', sa.Integer(), nullable=True),
        sa.Column('flight_id', sa.Integer(), nullable=True),
        sa.Column('check_in', sa.Date(), nullable=True),
        sa.Column('check_out', sa.Date(), nullable=True),
        sa.Column('total_price', sa.Integer(), nullable=True),
        sa.Column('price_currency', sa.String(length=3), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('(hotel_id IS NULL) <> (flight_id IS NULL)', name='ck_reservations_exactly_one_item'),
        sa.CheckConstraint("status IN ('booked', 'cancelled')", name='ck_reservations_status_valid'),
        sa.CheckConstraint('total_price IS NULL OR total_price >= 0', name='ck_reservations_total_price_non_negative'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['hotel_id'], ['hotels.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['flight_id'], ['flights.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_reservations_user_id'), 'reservations', ['user_id'], unique=False)
    op.create_index('ix_reservations_user_flight', 'reservations', ['user_id', 'flight_id'], unique=False)
    op.create_index('ix_reservations_user_hotel', 'reservations', ['user_id', 'hotel_id'], unique=False)

    # Create visa_applications table
    op.create_table('visa_applications',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('visa_type', sa.String(length=50), nullable=False),
        sa.Column('destination', sa.String(length=100), nullable=False),
        sa.Column('travel_date', sa.Date(), nullable=False),
        sa.Column('passport_number', sa.String(length=20), nullable=False),
        sa.Column('nationality', sa.String(length=50), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint("status IN ('pending', 'approved', 'rejected')", name='ck_visa_applications_status_valid'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_visa_applications_user_id'), 'visa_applications', ['user_id'], unique=False)
    op.create_index(op.f('ix_visa_applications_status'), 'visa_applications', ['status'], unique=False)

    # Create support_tickets table
    op.create_table('support_tickets',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('subject', sa.String(length=200), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint("status IN ('open', 'in_progress', 'resolved', 'closed')", name='ck_support_tickets_status_valid'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_support_tickets_user_id'), 'support_tickets', ['user_id'], unique=False)
    op.create_index(op.f('ix_support_tickets_status'), 'support_tickets', ['status'], unique=False)


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table('support_tickets')
    op.drop_table('visa_applications')
    op.drop_table('reservations')
    op.drop_table('hotels')
    op.drop_table('flights')
    op.drop_table('users')
