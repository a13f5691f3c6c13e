"""initial membership schema

Revision ID: 8d41c2e07a13
Revises:
Create Date: 2025-06-01 00:00:00.000000
"""
import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = '8d41c2e07a13'
down_revision = None
branch_labels = None
depends_on = None

USER_ROLES = ('SUPER_ADMIN', 'ADMIN', 'ZONAL_COORDINATOR', 'CELL_LEADER', 'FOLLOW_UP_TEAM')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(),
                  nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(),
                  nullable=False),
    ]


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(length=254), nullable=False),
        sa.Column('password_hash', sa.String(length=254), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('role', sa.Enum(*USER_ROLES, name='enum_user_role'), nullable=False),
        sa.Column('must_change_password', sa.Boolean(), server_default='0', nullable=False),
        sa.Column('reset_token', sa.String(length=128), nullable=True),
        sa.Column('reset_token_expires_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('email', name='uq_users_email'),
        sa.UniqueConstraint('reset_token', name='uq_users_reset_token'),
    )
    op.create_index('ix_users_email', 'users', ['email'])

    op.create_table(
        'refresh_tokens',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('token', sa.String(length=128), nullable=False),
        sa.Column('user_id', sa.Integer(),
                  sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_revoked', sa.Boolean(), server_default='0', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(),
                  nullable=False),
        sa.UniqueConstraint('token', name='uq_refresh_tokens_token'),
    )
    op.create_index('ix_refresh_tokens_user_id', 'refresh_tokens', ['user_id'])

    op.create_table(
        'zones',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('coordinator_id', sa.Integer(),
                  sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_zones_coordinator_id', 'zones', ['coordinator_id'])

    op.create_table(
        'cells',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('zone_id', sa.Integer(),
                  sa.ForeignKey('zones.id', ondelete='CASCADE'), nullable=False),
        sa.Column('leader_id', sa.Integer(),
                  sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_cells_zone_id', 'cells', ['zone_id'])
    op.create_index('ix_cells_leader_id', 'cells', ['leader_id'])

    op.create_table(
        'departments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('name', name='uq_departments_name'),
    )

    op.create_table(
        'members',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('email', sa.String(length=254), nullable=True),
        sa.Column('phone', sa.String(length=32), nullable=False),
        sa.Column('address', sa.String(length=255), nullable=False),
        sa.Column('gender', sa.String(length=16), nullable=False),
        sa.Column('zone_id', sa.Integer(),
                  sa.ForeignKey('zones.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('cell_id', sa.Integer(),
                  sa.ForeignKey('cells.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('status', sa.Enum('FIRST_TIMER', 'SECOND_TIMER', 'FULL_MEMBER',
                                    name='enum_member_status'), nullable=False),
        sa.Column('conversion_status', sa.Enum('NOT_CONVERTED', 'CONVERTED',
                                               name='enum_conversion_status'), nullable=False),
        sa.Column('sunday_attendance', sa.Integer(), nullable=False),
        sa.Column('first_visit', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_visit', sa.DateTime(timezone=True), nullable=False),
        sa.Column('prayer_request', sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('email', name='uq_members_email'),
        sa.CheckConstraint('sunday_attendance >= 0', name='sunday_attendance_nonneg'),
    )
    op.create_index('ix_members_zone_id', 'members', ['zone_id'])
    op.create_index('ix_members_cell_id', 'members', ['cell_id'])

    op.create_table(
        'follow_ups',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('member_id', sa.Integer(),
                  sa.ForeignKey('members.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(),
                  sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.Enum('CALL', 'VISIT', 'MESSAGE', 'PRAYER',
                                  name='enum_follow_up_type'), nullable=False),
        sa.Column('status', sa.Enum('PENDING', 'COMPLETED', 'CANCELLED',
                                    name='enum_follow_up_status'), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('next_follow_up_date', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_follow_ups_member_id', 'follow_ups', ['member_id'])
    op.create_index('ix_follow_ups_user_id', 'follow_ups', ['user_id'])


def downgrade():
    for table in ('follow_ups', 'members', 'departments', 'cells', 'zones',
                  'refresh_tokens', 'users'):
        op.drop_table(table)
    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        for enum in ('enum_follow_up_status', 'enum_follow_up_type', 'enum_conversion_status',
                     'enum_member_status', 'enum_user_role'):
            sa.Enum(name=enum).drop(bind, checkfirst=True)
