"""initial household schema

Revision ID: initial_household_schema
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = 'initial_household_schema'
down_revision = None
branch_labels = None
depends_on = None

UUID = postgresql.UUID(as_uuid=True)

partner_type = sa.Enum('PARTNER_1', 'PARTNER_2', name='partnertype')
invitation_status = sa.Enum('PENDING', 'ACCEPTED', 'REJECTED', 'EXPIRED', name='invitationstatus')
transaction_type = sa.Enum('INCOME', 'EXPENSE', name='transactiontype')
savings_type = sa.Enum(
    'SAVINGS', 'EMERGENCY_FUND', 'CONDOLENCE', 'TRAVEL_SAVINGS', 'HOUSE_SAVINGS', name='savingstype'
)


def _record_columns():
    """Columns shared by every household record table."""
    return [
        sa.Column('id', UUID, primary_key=True),
        sa.Column('created_by', UUID, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('user_id', UUID, sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
    ]


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime, server_default=sa.func.now()),
    ]


def upgrade():
    op.create_table(
        'auth_accounts',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('email', sa.String, nullable=False, unique=True, index=True),
        sa.Column('hashed_password', sa.String, nullable=False),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('is_superuser', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('is_verified', sa.Boolean, nullable=False, server_default=sa.false()),
    )

    op.create_table(
        'users',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('auth_user_id', UUID, sa.ForeignKey('auth_accounts.id', ondelete='CASCADE'), nullable=True, unique=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('type', partner_type, nullable=True),
        sa.Column('character', sa.String(length=50), nullable=True),
        sa.Column('partner_id', UUID, sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'invitations',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('inviter_id', UUID, sa.ForeignKey('auth_accounts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('invitee_email', sa.String, nullable=False, index=True),
        sa.Column('code', sa.String(length=16), nullable=False, unique=True, index=True),
        sa.Column('status', invitation_status, nullable=False, server_default='PENDING'),
        sa.Column('expires_at', sa.DateTime, nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'salaries',
        *_record_columns(),
        sa.Column('amount', sa.Float, nullable=False),
        sa.Column('date', sa.Date, nullable=False),
        sa.Column('memo', sa.String(length=255), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'fixed_expenses',
        *_record_columns(),
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.Column('amount', sa.Float, nullable=False),
        sa.Column('day_of_month', sa.Integer, nullable=False),
        sa.Column('memo', sa.String(length=255), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'living_expenses',
        *_record_columns(),
        sa.Column('amount', sa.Float, nullable=False),
        sa.Column('date', sa.Date, nullable=False),
        sa.Column('category', sa.String(length=50), nullable=False),
        sa.Column('memo', sa.String(length=255), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'allowances',
        *_record_columns(),
        sa.Column('amount', sa.Float, nullable=False),
        sa.Column('date', sa.Date, nullable=False),
        sa.Column('memo', sa.String(length=255), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'ledger_transactions',
        *_record_columns(),
        sa.Column('type', transaction_type, nullable=False),
        sa.Column('amount', sa.Float, nullable=False),
        sa.Column('date', sa.Date, nullable=False),
        sa.Column('category', sa.String(length=50), nullable=False),
        sa.Column('memo', sa.String(length=255), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'savings',
        *_record_columns(),
        sa.Column('type', savings_type, nullable=False, server_default='SAVINGS'),
        sa.Column('amount', sa.Float, nullable=False),
        sa.Column('date', sa.Date, nullable=False),
        sa.Column('memo', sa.String(length=255), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'investments',
        *_record_columns(),
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.Column('type', sa.String(length=50), nullable=False),
        sa.Column('amount', sa.Float, nullable=False),
        sa.Column('date', sa.Date, nullable=False),
        sa.Column('current_value', sa.Float, nullable=True),
        sa.Column('memo', sa.String(length=255), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'goals',
        *_record_columns(),
        sa.Column('title', sa.String(length=150), nullable=False),
        sa.Column('target_amount', sa.Float, nullable=False),
        sa.Column('current_amount', sa.Float, nullable=False, server_default='0'),
        sa.Column('deadline', sa.Date, nullable=True),
        sa.Column('memo', sa.String(length=255), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'investment_snapshots',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('user_id', UUID, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('snapshot_date', sa.Date, nullable=False),
        sa.Column('investment_amount', sa.Float, nullable=False, server_default='0'),
        sa.Column('kis_total_value', sa.Float, nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
        sa.UniqueConstraint('user_id', 'snapshot_date', name='uq_investment_snapshot_user_date'),
    )

    op.create_table(
        'kis_connections',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('user_id', UUID, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('app_key', sa.String, nullable=False),
        sa.Column('app_secret', sa.String, nullable=False),
        sa.Column('account_number', sa.String(length=20), nullable=False),
        sa.Column('is_virtual', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('access_token', sa.String, nullable=True),
        sa.Column('token_expires_at', sa.DateTime, nullable=True),
        *_timestamps(),
    )


def downgrade():
    for table in (
        'kis_connections',
        'investment_snapshots',
        'goals',
        'investments',
        'savings',
        'ledger_transactions',
        'allowances',
        'living_expenses',
        'fixed_expenses',
        'salaries',
        'invitations',
        'users',
        'auth_accounts',
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for enum_type in (savings_type, transaction_type, invitation_status, partner_type):
        enum_type.drop(bind, checkfirst=True)
