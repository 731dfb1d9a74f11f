"""create initial schema

Revision ID: 3f9c2a7d1b64
Revises:
Create Date: 2026-10-16 09:12:40

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c2a7d1b64'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


USER_ROLE = sa.Enum('Admin', 'Leader', 'Shepherd', name='user_role')
MEMBER_ROLE = sa.Enum('Leader', 'Shepherd', 'Member', 'New Convert', 'Guest', name='member_role')
MEMBER_STATUS = sa.Enum('Active', 'Inactive', 'Archived', name='member_status')
CAMPUS = sa.Enum('CoHK', 'KNUST', 'Legon', 'Other', name='campus')
CATEGORY = sa.Enum('Student', 'Workforce', 'NSS', 'Alumni', name='category')
EVENT_TYPE = sa.Enum('Service', 'Retreat', 'Meeting', 'Outreach', name='event_type')
ATTENDANCE_STATUS = sa.Enum('Present', 'Absent', 'Excused', name='attendance_status')
FOLLOW_UP_TYPE = sa.Enum('Call', 'WhatsApp', 'Prayer', 'Visit', 'Other', name='follow_up_type')
FOLLOW_UP_OUTCOME = sa.Enum('Reached', 'NoAnswer', 'ScheduledCallback', name='follow_up_outcome')
ADMIN_ACTION = sa.Enum('PROMOTE_MEMBER', 'DEMOTE_MEMBER', 'DELETE_MEMBER', 'IMPORT_MEMBERS', 'CREATE_ACCOUNT', name='admin_action')


def upgrade() -> None:
    # camps.leader_id <-> members.camp_id 순환 참조: FK 는 members 생성 후 추가
    op.create_table(
        'camps',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('leader_id', sa.UUID(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_camps_name', 'camps', ['name'])

    op.create_table(
        'members',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('middle_name', sa.String(length=100), nullable=True),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('role', MEMBER_ROLE, nullable=False),
        sa.Column('status', MEMBER_STATUS, nullable=False),
        sa.Column('campus', CAMPUS, nullable=False),
        sa.Column('category', CATEGORY, nullable=False),
        sa.Column('camp_id', sa.UUID(), nullable=True),
        sa.Column('birthday', sa.Date(), nullable=True),
        sa.Column('join_date', sa.Date(), nullable=False),
        sa.Column('region', sa.String(length=100), nullable=True),
        sa.Column('residence', sa.String(length=255), nullable=True),
        sa.Column('guardian', sa.String(length=255), nullable=True),
        sa.Column('guardian_contact', sa.String(length=50), nullable=True),
        sa.Column('guardian_location', sa.String(length=255), nullable=True),
        sa.Column('profile_picture', sa.String(length=500), nullable=True),
        sa.Column('update_token', sa.String(length=64), nullable=True),
        sa.Column('token_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['camp_id'], ['camps.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
        sa.UniqueConstraint('update_token'),
    )
    op.create_index('ix_members_phone', 'members', ['phone'])
    op.create_index('ix_members_status', 'members', ['status'])
    op.create_index('ix_members_camp_id', 'members', ['camp_id'])

    op.create_foreign_key(
        'fk_camps_leader_id_members', 'camps', 'members', ['leader_id'], ['id'], ondelete='SET NULL'
    )

    op.create_table(
        'users',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('role', USER_ROLE, nullable=False),
        sa.Column('member_id', sa.UUID(), nullable=True),
        sa.Column('camp_id', sa.UUID(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['member_id'], ['members.id']),
        sa.ForeignKeyConstraint(['camp_id'], ['camps.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_member_id', 'users', ['member_id'])

    op.create_table(
        'events',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('type', EVENT_TYPE, nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('meeting_url', sa.String(length=500), nullable=True),
        sa.Column('recurrence', sa.String(length=30), nullable=True),
        sa.Column('camp_id', sa.UUID(), nullable=True),
        sa.Column('created_by_id', sa.UUID(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['camp_id'], ['camps.id']),
        sa.ForeignKeyConstraint(['created_by_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_events_date', 'events', ['date'])
    op.create_index('ix_events_camp_id', 'events', ['camp_id'])

    op.create_table(
        'attendance',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('member_id', sa.UUID(), nullable=False),
        sa.Column('event_id', sa.UUID(), nullable=False),
        sa.Column('status', ATTENDANCE_STATUS, nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['member_id'], ['members.id']),
        sa.ForeignKeyConstraint(['event_id'], ['events.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('member_id', 'event_id', name='uq_attendance_member_event'),
    )
    op.create_index('ix_attendance_event_id', 'attendance', ['event_id'])

    op.create_table(
        'member_assignments',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('member_id', sa.UUID(), nullable=False),
        sa.Column('shepherd_id', sa.UUID(), nullable=False),
        sa.Column('assigned_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['member_id'], ['members.id']),
        sa.ForeignKeyConstraint(['shepherd_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_member_assignments_shepherd_id', 'member_assignments', ['shepherd_id'])
    op.create_index('ix_member_assignments_member_id', 'member_assignments', ['member_id'])

    op.create_table(
        'leader_campuses',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('leader_id', sa.UUID(), nullable=False),
        sa.Column('campus', CAMPUS, nullable=False),
        sa.ForeignKeyConstraint(['leader_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('leader_id', 'campus', name='uq_leader_campuses_leader_campus'),
    )
    op.create_index('ix_leader_campuses_leader_id', 'leader_campuses', ['leader_id'])

    op.create_table(
        'follow_ups',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('member_id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=True),
        sa.Column('type', FOLLOW_UP_TYPE, nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('outcome', FOLLOW_UP_OUTCOME, nullable=True),
        sa.Column('scheduled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['member_id'], ['members.id']),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_follow_ups_member_id', 'follow_ups', ['member_id'])
    op.create_index('ix_follow_ups_scheduled_at', 'follow_ups', ['scheduled_at'])

    op.create_table(
        'admin_action_logs',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('actor_id', sa.UUID(), nullable=True),
        sa.Column('target_member_id', sa.UUID(), nullable=True),
        sa.Column('action', ADMIN_ACTION, nullable=False),
        sa.Column('before_role', sa.String(length=20), nullable=True),
        sa.Column('after_role', sa.String(length=20), nullable=True),
        sa.Column('detail', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['actor_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'app_settings',
        sa.Column('key', sa.String(length=100), nullable=False),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('key'),
    )


def downgrade() -> None:
    op.drop_table('app_settings')
    op.drop_table('admin_action_logs')
    op.drop_index('ix_follow_ups_scheduled_at', table_name='follow_ups')
    op.drop_index('ix_follow_ups_member_id', table_name='follow_ups')
    op.drop_table('follow_ups')
    op.drop_index('ix_leader_campuses_leader_id', table_name='leader_campuses')
    op.drop_table('leader_campuses')
    op.drop_index('ix_member_assignments_member_id', table_name='member_assignments')
    op.drop_index('ix_member_assignments_shepherd_id', table_name='member_assignments')
    op.drop_table('member_assignments')
    op.drop_index('ix_attendance_event_id', table_name='attendance')
    op.drop_table('attendance')
    op.drop_index('ix_events_camp_id', table_name='events')
    op.drop_index('ix_events_date', table_name='events')
    op.drop_table('events')
    op.drop_index('ix_users_member_id', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
    op.drop_constraint('fk_camps_leader_id_members', 'camps', type_='foreignkey')
    op.drop_index('ix_members_camp_id', table_name='members')
    op.drop_index('ix_members_status', table_name='members')
    op.drop_index('ix_members_phone', table_name='members')
    op.drop_table('members')
    op.drop_index('ix_camps_name', table_name='camps')
    op.drop_table('camps')

    bind = op.get_bind()
    for enum in (
        ADMIN_ACTION,
        FOLLOW_UP_OUTCOME,
        FOLLOW_UP_TYPE,
        ATTENDANCE_STATUS,
        EVENT_TYPE,
        CATEGORY,
        CAMPUS,
        MEMBER_STATUS,
        MEMBER_ROLE,
        USER_ROLE,
    ):
        enum.drop(bind, checkfirst=True)
