"""Initial rent lifecycle schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('role', sa.Enum('ADMIN', 'LANDLORD', 'TENANT', name='userrole'), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=True),
        sa.Column('last_name', sa.String(100), nullable=True),
        sa.Column('phone_number', sa.String(20), nullable=True),
        sa.Column('is_disabled', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])

    op.create_table(
        'properties',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('address', sa.String(500), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id']),
    )
    op.create_index('ix_properties_owner_id', 'properties', ['owner_id'])

    op.create_table(
        'units',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('property_id', sa.Uuid(), nullable=False),
        sa.Column('label', sa.String(100), nullable=False),
        sa.Column('target_price', sa.Float(), nullable=True),
        sa.Column('status', sa.Enum('AVAILABLE', 'OCCUPIED', 'MAINTENANCE', name='unitstatus'), nullable=False),
        sa.Column('listed_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id']),
    )
    op.create_index('ix_units_property_id', 'units', ['property_id'])

    # Listings: at most one PENDING/APPROVED/ACTIVE row per unit
    op.create_table(
        'listings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('unit_id', sa.Uuid(), nullable=False),
        sa.Column('landlord_id', sa.Uuid(), nullable=False),
        sa.Column(
            'status',
            sa.Enum('PENDING', 'APPROVED', 'ACTIVE', 'REJECTED', 'BLOCKED', 'EXPIRED', name='listingstatus'),
            nullable=False,
        ),
        sa.Column('attempt_count', sa.Integer(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=True),
        sa.Column('admin_notes', sa.JSON(), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('payment_status', sa.Enum('UNPAID', 'PAID', name='listingpaymentstatus'), nullable=False),
        sa.Column('risk_level', sa.Enum('LOW', 'MEDIUM', 'HIGH', name='risklevel'), nullable=False),
        sa.Column('fraud_risk_score', sa.Float(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['unit_id'], ['units.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['landlord_id'], ['users.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_listings_unit_id', 'listings', ['unit_id'])
    op.create_index('ix_listings_landlord_id', 'listings', ['landlord_id'])
    op.create_index('ix_listings_status', 'listings', ['status'])
    op.create_index('ix_listings_unit_created', 'listings', ['unit_id', 'created_at'])
    op.create_index(
        'uq_listings_unit_inflight',
        'listings',
        ['unit_id'],
        unique=True,
        postgresql_where=sa.text("status IN ('PENDING', 'APPROVED', 'ACTIVE')"),
        sqlite_where=sa.text("status IN ('PENDING', 'APPROVED', 'ACTIVE')"),
    )

    # Leases: at most one ACTIVE row per unit
    op.create_table(
        'leases',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('unit_id', sa.Uuid(), nullable=False),
        sa.Column('tenant_id', sa.Uuid(), nullable=True),
        sa.Column('lease_nickname', sa.String(255), nullable=False),
        sa.Column(
            'lease_type',
            sa.Enum('STANDARD', 'SHORT_TERM', 'LONG_TERM', 'FIXED_TERM', name='leasetype'),
            nullable=False,
        ),
        sa.Column(
            'status',
            sa.Enum('DRAFT', 'ACTIVE', 'EXPIRED', 'TERMINATED', name='leasestatus'),
            nullable=False,
        ),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('rent_amount', sa.Float(), nullable=False),
        sa.Column('interval', sa.Enum('DAILY', 'WEEKLY', 'MONTHLY', name='leaseinterval'), nullable=False),
        sa.Column('landlord_name', sa.String(255), nullable=True),
        sa.Column('tenant_name', sa.String(255), nullable=True),
        sa.Column('rules', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['unit_id'], ['units.id']),
        sa.ForeignKeyConstraint(['tenant_id'], ['users.id']),
    )
    op.create_index('ix_leases_unit_id', 'leases', ['unit_id'])
    op.create_index('ix_leases_tenant_id', 'leases', ['tenant_id'])
    op.create_index('ix_leases_status', 'leases', ['status'])
    op.create_index(
        'uq_leases_unit_active',
        'leases',
        ['unit_id'],
        unique=True,
        postgresql_where=sa.text("status = 'ACTIVE'"),
        sqlite_where=sa.text("status = 'ACTIVE'"),
    )

    op.create_table(
        'payments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('lease_id', sa.Uuid(), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column(
            'method',
            sa.Enum('CASH', 'GCASH', 'BANK_TRANSFER', 'CARD', 'PAYPAL', 'OTHER', name='paymentmethod'),
            nullable=False,
        ),
        sa.Column('provider_txn_id', sa.String(255), nullable=True),
        sa.Column('status', sa.Enum('PENDING', 'PAID', name='paymentstatus'), nullable=False),
        sa.Column('timing_status', sa.Enum('ONTIME', 'LATE', 'ADVANCE', name='timingstatus'), nullable=False),
        sa.Column('paid_at', sa.DateTime(), nullable=True),
        sa.Column('is_partial', sa.Boolean(), nullable=False),
        sa.Column('note', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['lease_id'], ['leases.id']),
    )
    op.create_index('ix_payments_lease_id', 'payments', ['lease_id'])
    op.create_index('ix_payments_status', 'payments', ['status'])

    op.create_table(
        'tenant_screenings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('tenant_id', sa.Uuid(), nullable=False),
        sa.Column('unit_id', sa.Uuid(), nullable=False),
        sa.Column('full_name', sa.String(255), nullable=False),
        sa.Column('employment_status', sa.String(50), nullable=True),
        sa.Column('employer_name', sa.String(255), nullable=True),
        sa.Column('monthly_income', sa.Float(), nullable=True),
        sa.Column('is_smoker', sa.Boolean(), nullable=False),
        sa.Column('has_pets', sa.Boolean(), nullable=False),
        sa.Column('risk_level', sa.Enum('LOW', 'MEDIUM', 'HIGH', name='screeningrisklevel'), nullable=False),
        sa.Column('ai_risk_score', sa.Float(), nullable=False),
        sa.Column('screening_summary', sa.Text(), nullable=True),
        sa.Column('is_approved', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['tenant_id'], ['users.id']),
        sa.ForeignKeyConstraint(['unit_id'], ['units.id']),
    )
    op.create_index('ix_tenant_screenings_tenant_id', 'tenant_screenings', ['tenant_id'])
    op.create_index('ix_tenant_screenings_unit_id', 'tenant_screenings', ['unit_id'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column(
            'type',
            sa.Enum(
                'LISTING_REQUEST', 'LISTING', 'LEASE', 'PAYMENT', 'PAYMENT_RECEIVED', 'APPLICATION',
                name='notificationtype',
            ),
            nullable=False,
        ),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('status', sa.Enum('UNREAD', 'READ', name='notificationstatus'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])
    op.create_index('ix_notifications_created_at', 'notifications', ['created_at'])


def downgrade() -> None:
    for table in (
        'notifications', 'tenant_screenings', 'payments', 'leases',
        'listings', 'units', 'properties', 'users',
    ):
        op.drop_table(table)

    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        for enum_name in (
            'notificationstatus', 'notificationtype', 'screeningrisklevel', 'timingstatus',
            'paymentstatus', 'paymentmethod', 'leaseinterval', 'leasestatus', 'leasetype',
            'risklevel', 'listingpaymentstatus', 'listingstatus', 'unitstatus', 'userrole',
        ):
            op.execute(f'DROP TYPE IF EXISTS {enum_name}')
