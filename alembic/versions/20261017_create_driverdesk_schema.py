"""create_driverdesk_schema

Revision ID: 4f2d9c1a7b3e
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

from driverdesk.infrastructure.persistence.models.security_audit_log import (
    DROP_IMMUTABILITY_TRIGGERS,
    IMMUTABILITY_TRIGGERS,
)

# revision identifiers, used by Alembic.
revision: str = '4f2d9c1a7b3e'
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

DRIVER_RECORD_TABLES = {
    'daily_logs': [
        sa.Column('log_date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.CheckConstraint(
            "status IN ('in_progress', 'completed', 'cancelled')",
            name='ck_daily_logs_status',
        ),
    ],
    'vehicle_checks': [
        sa.Column('van_id', sa.String(length=36), nullable=True),
        sa.Column('passed', sa.Boolean(), nullable=True),
    ],
    'route_feedback': [
        sa.Column('rating', sa.Integer(), nullable=True),
        sa.Column('comments', sa.Text(), nullable=True),
    ],
    'sod_logs': [sa.Column('mileage', sa.Integer(), nullable=True)],
    'eod_reports': [sa.Column('parcels_delivered', sa.Integer(), nullable=True)],
    'incident_reports': [sa.Column('description', sa.Text(), nullable=True)],
    'driver_expenses': [sa.Column('amount', sa.Numeric(10, 2), nullable=False)],
    'driver_earnings': [sa.Column('amount', sa.Numeric(10, 2), nullable=False)],
    'driver_achievements': [sa.Column('achievement', sa.String(length=100), nullable=True)],
    'driver_ratings': [sa.Column('score', sa.Integer(), nullable=True)],
    'driver_invoices': [sa.Column('total', sa.Numeric(10, 2), nullable=False)],
    'payments': [sa.Column('amount', sa.Numeric(10, 2), nullable=False)],
    'schedules': [sa.Column('scheduled_date', sa.Date(), nullable=True)],
}


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('companies',
        sa.Column('id', sa.String(length=36), nullable=False, comment='Company ID (UUID)'),
        sa.Column('name', sa.String(length=255), nullable=False, comment='Display name'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_table('users',
        sa.Column('id', sa.String(length=36), nullable=False, comment='User ID (UUID)'),
        sa.Column('email', sa.String(length=255), nullable=False, comment='Login email address (lowercased)'),
        sa.Column('password_hash', sa.String(length=255), nullable=False, comment='Hashed password (argon2)'),
        sa.Column('is_active', sa.Boolean(), nullable=False, comment='Whether the user can log in'),
        sa.Column('user_metadata', sa.JSON(), nullable=True, comment='Metadata supplied when the account was created'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table('profiles',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=50), nullable=True),
        sa.Column('last_name', sa.String(length=50), nullable=True),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('user_type', sa.String(length=16), nullable=False),
        sa.Column('company_id', sa.String(length=36), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("user_type IN ('admin', 'driver', 'staff')", name='ck_profiles_user_type'),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_profiles_user_id'), 'profiles', ['user_id'], unique=True)
    op.create_index(op.f('ix_profiles_email'), 'profiles', ['email'], unique=False)
    op.create_index(op.f('ix_profiles_company_id'), 'profiles', ['company_id'], unique=False)

    op.create_table('user_companies',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('company_id', sa.String(length=36), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("role IN ('admin', 'driver', 'staff')", name='ck_user_companies_role'),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'company_id', name='uq_user_companies_user_company')
    )
    op.create_index(op.f('ix_user_companies_user_id'), 'user_companies', ['user_id'], unique=False)
    op.create_index(op.f('ix_user_companies_company_id'), 'user_companies', ['company_id'], unique=False)

    op.create_table('driver_profiles',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('company_id', sa.String(length=36), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('assigned_van_id', sa.String(length=36), nullable=True),
        sa.Column('parcel_rate', sa.Numeric(10, 2), nullable=True),
        sa.Column('cover_rate', sa.Numeric(10, 2), nullable=True),
        sa.Column('hourly_rate', sa.Numeric(10, 2), nullable=True),
        sa.Column('requires_onboarding', sa.Boolean(), nullable=False),
        sa.Column('first_login_completed', sa.Boolean(), nullable=False),
        sa.Column('onboarding_progress', sa.JSON(), nullable=True),
        sa.Column('onboarding_completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("status IN ('pending', 'active', 'suspended')", name='ck_driver_profiles_status'),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'company_id', name='uq_driver_profiles_user_company')
    )
    op.create_index(op.f('ix_driver_profiles_user_id'), 'driver_profiles', ['user_id'], unique=False)
    op.create_index(op.f('ix_driver_profiles_company_id'), 'driver_profiles', ['company_id'], unique=False)

    op.create_table('driver_invitations',
        sa.Column('id', sa.String(length=36), nullable=False, comment='Invitation ID (UUID)'),
        sa.Column('email', sa.String(length=255), nullable=False, comment='Email address of the invited driver'),
        sa.Column('first_name', sa.String(length=50), nullable=False),
        sa.Column('last_name', sa.String(length=50), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('hourly_rate', sa.Numeric(10, 2), nullable=True),
        sa.Column('company_id', sa.String(length=36), nullable=False, comment='Foreign key to companies table'),
        sa.Column('invite_token', sa.String(length=128), nullable=False, comment='Secure random token for completing onboarding'),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('created_by', sa.String(length=36), nullable=False, comment='Identity ID of the inviting admin'),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False, comment='Timestamp when the invitation expires'),
        sa.Column('accepted_at', sa.DateTime(timezone=True), nullable=True, comment='Timestamp when the invitation was accepted'),
        sa.Column('driver_profile_id', sa.String(length=36), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "status IN ('pending', 'accepted', 'expired', 'cancelled')",
            name='ck_driver_invitations_status',
        ),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.ForeignKeyConstraint(['driver_profile_id'], ['driver_profiles.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_driver_invitations_email'), 'driver_invitations', ['email'], unique=False)
    op.create_index(op.f('ix_driver_invitations_company_id'), 'driver_invitations', ['company_id'], unique=False)
    op.create_index(op.f('ix_driver_invitations_invite_token'), 'driver_invitations', ['invite_token'], unique=True)
    op.create_index('ix_driver_invitations_company_email', 'driver_invitations', ['company_id', 'email'], unique=False)
    op.create_index(
        'uq_driver_invitations_pending_email',
        'driver_invitations',
        ['company_id', 'email'],
        unique=True,
        sqlite_where=sa.text("status = 'pending'"),
        postgresql_where=sa.text("status = 'pending'"),
    )

    for table_name, columns in DRIVER_RECORD_TABLES.items():
        op.create_table(table_name,
            sa.Column('id', sa.String(length=36), nullable=False),
            sa.Column('driver_id', sa.String(length=36), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            *columns,
            sa.ForeignKeyConstraint(['driver_id'], ['driver_profiles.id']),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f(f'ix_{table_name}_driver_id'), table_name, ['driver_id'], unique=False)

    op.create_table('invitation_rate_limits',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('company_id', sa.String(length=36), nullable=False),
        sa.Column('invitations_sent', sa.Integer(), nullable=False),
        sa.Column('window_start', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'ix_invitation_rate_limits_user_company_window',
        'invitation_rate_limits',
        ['user_id', 'company_id', 'window_start'],
        unique=False,
    )

    op.create_table('security_audit_log',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('subject_id', sa.String(length=36), nullable=True),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('performed_by', sa.String(length=64), nullable=False),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('ip_address', sa.String(length=64), nullable=False),
        sa.Column('user_agent', sa.String(length=512), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_security_audit_log_subject_id'), 'security_audit_log', ['subject_id'], unique=False)
    op.create_index(op.f('ix_security_audit_log_action'), 'security_audit_log', ['action'], unique=False)
    op.create_index(op.f('ix_security_audit_log_performed_by'), 'security_audit_log', ['performed_by'], unique=False)
    op.create_index(op.f('ix_security_audit_log_created_at'), 'security_audit_log', ['created_at'], unique=False)
    op.create_index('ix_security_audit_log_action_created', 'security_audit_log', ['action', 'created_at'], unique=False)

    for statement in IMMUTABILITY_TRIGGERS.get(op.get_bind().dialect.name, ()):
        op.execute(statement)


def downgrade() -> None:
    """Downgrade schema."""
    for statement in DROP_IMMUTABILITY_TRIGGERS.get(op.get_bind().dialect.name, ()):
        op.execute(statement)

    op.drop_table('security_audit_log')
    op.drop_table('invitation_rate_limits')
    for table_name in reversed(list(DRIVER_RECORD_TABLES)):
        op.drop_table(table_name)
    op.drop_table('driver_invitations')
    op.drop_table('driver_profiles')
    op.drop_table('user_companies')
    op.drop_table('profiles')
    op.drop_table('users')
    op.drop_table('companies')
