"""initial identity schema

Revision ID: 3f0c9a2e71b4
Revises:
Create Date: 2026-03-02 09:14:51.204117

This migration creates the identity and access-control schema:

Enums:
- role_enum: Profile role tiers
- session_kind_enum: Credential origin of a session
- audit_event_type_enum: Session lifecycle and privileged action events

Tables:
- organizations, departments: Tenant hierarchy
- profiles: Principals and their authorization attributes
- local_credentials, federated_credentials: Credential records owned by a profile
- auth_sessions: Issued sessions, keyed by token digest
- audit_records: Append-only audit trail
- bootstrap_state: Single-row marker for super administrator seeding

Adding enum values later must happen outside a transaction:

    with op.get_context().autocommit_block():
        op.execute("ALTER TYPE audit_event_type_enum ADD VALUE 'action.example'")
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '3f0c9a2e71b4'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


role_enum = postgresql.ENUM(
    'super_admin', 'org_admin', 'manager', 'employee',
    name='role_enum',
    create_type=False,
)
session_kind_enum = postgresql.ENUM(
    'federated', 'local',
    name='session_kind_enum',
    create_type=False,
)
audit_event_type_enum = postgresql.ENUM(
    'session.login',
    'session.logout',
    'session.refresh',
    'action.user_created',
    'action.user_deleted',
    'action.user_activated',
    'action.user_deactivated',
    'action.password_changed',
    'action.org_created',
    'action.org_deleted',
    name='audit_event_type_enum',
    create_type=False,
)


def _uuid_pk() -> sa.Column:
    return sa.Column(
        'id',
        postgresql.UUID(as_uuid=True),
        nullable=False,
        server_default=sa.text('gen_random_uuid()'),
    )


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def _audit_fields() -> list[sa.Column]:
    return [
        sa.Column('created_by', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('updated_by', postgresql.UUID(as_uuid=True), nullable=True),
    ]


def upgrade() -> None:
    """Create the identity schema."""
    bind = op.get_bind()
    role_enum.create(bind, checkfirst=True)
    session_kind_enum.create(bind, checkfirst=True)
    audit_event_type_enum.create(bind, checkfirst=True)

    # Tenant hierarchy
    op.create_table(
        'organizations',
        _uuid_pk(),
        sa.Column('name', sa.String(length=255), nullable=False),
        *_timestamps(),
        *_audit_fields(),
        sa.PrimaryKeyConstraint('id', name='pk_organizations'),
        sa.UniqueConstraint('name', name='uq_organizations_name'),
    )
    op.create_index('ix_organizations_created_at', 'organizations', ['created_at'])

    op.create_table(
        'departments',
        _uuid_pk(),
        sa.Column('organization_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        *_timestamps(),
        *_audit_fields(),
        sa.ForeignKeyConstraint(
            ['organization_id'], ['organizations.id'],
            name='fk_departments_organization_id_organizations',
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_departments'),
        sa.UniqueConstraint('organization_id', 'name', name='uq_departments_organization_name'),
    )
    op.create_index('ix_departments_organization_id', 'departments', ['organization_id'])
    op.create_index('ix_departments_created_at', 'departments', ['created_at'])

    # Principals
    op.create_table(
        'profiles',
        _uuid_pk(),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('display_name', sa.String(length=255), nullable=False),
        sa.Column('role', role_enum, nullable=False),
        sa.Column('organization_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('department_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('TRUE')),
        sa.Column('tracking_id', sa.String(length=32), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        *_audit_fields(),
        sa.CheckConstraint(
            "role = 'super_admin' OR organization_id IS NOT NULL",
            name='ck_profiles_organization_required',
        ),
        sa.ForeignKeyConstraint(
            ['organization_id'], ['organizations.id'],
            name='fk_profiles_organization_id_organizations',
            ondelete='RESTRICT',
        ),
        sa.ForeignKeyConstraint(
            ['department_id'], ['departments.id'],
            name='fk_profiles_department_id_departments',
            ondelete='SET NULL',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_profiles'),
        sa.UniqueConstraint('tracking_id', name='uq_profiles_tracking_id'),
    )
    op.create_index('ix_profiles_username', 'profiles', ['username'], unique=True)
    op.create_index('ix_profiles_role', 'profiles', ['role'])
    op.create_index('ix_profiles_organization_id', 'profiles', ['organization_id'])
    op.create_index('ix_profiles_department_id', 'profiles', ['department_id'])
    op.create_index('ix_profiles_created_at', 'profiles', ['created_at'])

    # Credentials
    op.create_table(
        'local_credentials',
        _uuid_pk(),
        sa.Column('profile_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('hash_algorithm', sa.String(length=32), nullable=False),
        sa.Column('changed_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(
            ['profile_id'], ['profiles.id'],
            name='fk_local_credentials_profile_id_profiles',
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_local_credentials'),
        sa.UniqueConstraint('profile_id', name='uq_local_credentials_profile_id'),
    )

    op.create_table(
        'federated_credentials',
        _uuid_pk(),
        sa.Column('profile_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('provider', sa.String(length=50), nullable=False),
        sa.Column('provider_subject', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('provider_username', sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ['profile_id'], ['profiles.id'],
            name='fk_federated_credentials_profile_id_profiles',
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_federated_credentials'),
        sa.UniqueConstraint('profile_id', name='uq_federated_credentials_profile_id'),
        sa.UniqueConstraint(
            'provider', 'provider_subject',
            name='uq_federated_credentials_provider_subject',
        ),
    )
    op.create_index('ix_federated_credentials_email', 'federated_credentials', ['email'])
    op.create_index('ix_federated_credentials_created_at', 'federated_credentials', ['created_at'])

    # Sessions
    op.create_table(
        'auth_sessions',
        _uuid_pk(),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('profile_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('kind', session_kind_enum, nullable=False),
        sa.Column('issued_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_refreshed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('user_agent', sa.String(length=500), nullable=True),
        sa.ForeignKeyConstraint(
            ['profile_id'], ['profiles.id'],
            name='fk_auth_sessions_profile_id_profiles',
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_auth_sessions'),
    )
    op.create_index('ix_auth_sessions_token_hash', 'auth_sessions', ['token_hash'], unique=True)
    op.create_index('ix_auth_sessions_profile_id', 'auth_sessions', ['profile_id'])
    op.create_index('ix_auth_sessions_expires_at', 'auth_sessions', ['expires_at'])
    op.create_index('ix_auth_sessions_profile_expires', 'auth_sessions', ['profile_id', 'expires_at'])

    # Audit trail
    op.create_table(
        'audit_records',
        _uuid_pk(),
        sa.Column('actor_profile_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('event_type', audit_event_type_enum, nullable=False),
        sa.Column('target_profile_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('target_organization_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('success', sa.Boolean(), nullable=False, server_default=sa.text('TRUE')),
        sa.Column('failure_reason', sa.String(length=64), nullable=True),
        sa.Column('attempted_identifier', sa.String(length=255), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('user_agent', sa.String(length=500), nullable=True),
        sa.Column('request_id', sa.String(length=100), nullable=True),
        sa.Column('details', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('occurred_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(
            ['actor_profile_id'], ['profiles.id'],
            name='fk_audit_records_actor_profile_id_profiles',
            ondelete='SET NULL',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_audit_records'),
    )
    op.create_index('ix_audit_records_actor_profile_id', 'audit_records', ['actor_profile_id'])
    op.create_index('ix_audit_records_event_type', 'audit_records', ['event_type'])
    op.create_index('ix_audit_records_target_profile_id', 'audit_records', ['target_profile_id'])
    op.create_index('ix_audit_records_occurred_at', 'audit_records', ['occurred_at'])
    op.create_index('ix_audit_records_actor_occurred', 'audit_records', ['actor_profile_id', 'occurred_at'])
    op.create_index('ix_audit_records_event_occurred', 'audit_records', ['event_type', 'occurred_at'])
    op.create_index(
        'ix_audit_records_target_org_occurred',
        'audit_records',
        ['target_organization_id', 'occurred_at'],
    )

    # Super administrator seeding marker
    op.create_table(
        'bootstrap_state',
        _uuid_pk(),
        sa.Column('completed', sa.Boolean(), nullable=False, server_default=sa.text('TRUE')),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('admin_profile_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.CheckConstraint('completed = TRUE', name='ck_bootstrap_state_completed'),
        sa.ForeignKeyConstraint(
            ['admin_profile_id'], ['profiles.id'],
            name='fk_bootstrap_state_admin_profile_id_profiles',
            ondelete='SET NULL',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_bootstrap_state'),
        sa.UniqueConstraint('completed', name='uq_bootstrap_state_completed'),
    )


def downgrade() -> None:
    """Drop the identity schema."""
    op.drop_table('bootstrap_state')

    op.drop_table('audit_records')

    op.drop_table('auth_sessions')
    op.drop_table('federated_credentials')
    op.drop_table('local_credentials')
    op.drop_table('profiles')
    op.drop_table('departments')
    op.drop_table('organizations')

    bind = op.get_bind()
    audit_event_type_enum.drop(bind, checkfirst=True)
    session_kind_enum.drop(bind, checkfirst=True)
    role_enum.drop(bind, checkfirst=True)
