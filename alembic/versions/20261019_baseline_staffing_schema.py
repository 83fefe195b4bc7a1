"""Baseline staffing schema

Revision ID: 3c7e1a52b9d4
Revises:
Create Date: 2026-10-19

Creates the account-scoped staffing tables:
- events: parent of every staffing row
- team_members: people available for staffing
- team_assignments, traffic_controls, supervisors, event_tasks: per-event
  children, removed with their event (ON DELETE CASCADE)
- assignment_categories: per-account labels, unique ignoring case
- task_categories: colored task groupings
- profiles: account details keyed by account id
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c7e1a52b9d4'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'events',
        sa.Column('event_id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('event_name', sa.String(length=200), nullable=False),
        sa.Column('event_date', sa.String(length=10), nullable=True),
        sa.Column('location', sa.String(length=200), server_default='Location TBD', nullable=False),
        sa.Column('start_time', sa.String(length=8), server_default='00:00', nullable=False),
        sa.Column('end_time', sa.String(length=8), server_default='00:00', nullable=False),
        sa.Column('team_meet_time', sa.String(length=8), server_default='00:00', nullable=False),
        sa.Column('meet_location', sa.String(length=200), server_default='Meet TBD', nullable=False),
        sa.Column('prepared_by', sa.String(length=100), server_default='Unassigned', nullable=False),
        sa.Column('prepared_date', sa.String(length=10), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_audit_columns(),
        sa.PrimaryKeyConstraint('event_id'),
    )
    with op.batch_alter_table('events', schema=None) as batch_op:
        batch_op.create_index('idx_event_user_date', ['user_id', 'event_date'], unique=False)
        batch_op.create_index(batch_op.f('ix_events_user_id'), ['user_id'], unique=False)

    op.create_table(
        'team_members',
        sa.Column('member_id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('member_name', sa.String(length=100), nullable=False),
        sa.Column('active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('emergency_contact', sa.String(length=100), nullable=True),
        sa.Column('emergency_phone', sa.String(length=50), nullable=True),
        *_audit_columns(),
        sa.PrimaryKeyConstraint('member_id'),
    )
    with op.batch_alter_table('team_members', schema=None) as batch_op:
        batch_op.create_index('idx_member_user_name', ['user_id', 'member_name'], unique=False)
        batch_op.create_index(batch_op.f('ix_team_members_user_id'), ['user_id'], unique=False)

    op.create_table(
        'task_categories',
        sa.Column('category_id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('color', sa.String(length=7), server_default='#3B82F6', nullable=False),
        sa.Column('sort_order', sa.Integer(), server_default='0', nullable=False),
        *_audit_columns(),
        sa.PrimaryKeyConstraint('category_id'),
    )
    with op.batch_alter_table('task_categories', schema=None) as batch_op:
        batch_op.create_index('idx_task_category_user_order', ['user_id', 'sort_order'], unique=False)
        batch_op.create_index(batch_op.f('ix_task_categories_user_id'), ['user_id'], unique=False)

    op.create_table(
        'assignment_categories',
        sa.Column('category_id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('category_name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        *_audit_columns(),
        sa.PrimaryKeyConstraint('category_id'),
    )
    op.create_index(
        'uq_assignment_category_user_name',
        'assignment_categories',
        ['user_id', sa.text('lower(category_name)')],
        unique=True,
    )
    op.create_index(op.f('ix_assignment_categories_user_id'), 'assignment_categories', ['user_id'], unique=False)

    op.create_table(
        'team_assignments',
        sa.Column('assignment_id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('event_id', sa.String(length=64), nullable=False),
        sa.Column('member_id', sa.String(length=64), nullable=False),
        sa.Column('assignment_type', sa.String(length=100), server_default='General Support', nullable=False),
        sa.Column('equipment_area', sa.String(length=200), server_default='Assignment TBD', nullable=False),
        sa.Column('start_time', sa.String(length=8), server_default='00:00', nullable=False),
        sa.Column('end_time', sa.String(length=8), server_default='00:00', nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('sort_order', sa.Integer(), server_default='0', nullable=False),
        *_audit_columns(),
        sa.ForeignKeyConstraint(['event_id'], ['events.event_id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['member_id'], ['team_members.member_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('assignment_id'),
    )
    with op.batch_alter_table('team_assignments', schema=None) as batch_op:
        batch_op.create_index('idx_assignment_event', ['user_id', 'event_id', 'sort_order'], unique=False)
        batch_op.create_index(batch_op.f('ix_team_assignments_user_id'), ['user_id'], unique=False)

    op.create_table(
        'traffic_controls',
        sa.Column('traffic_id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('event_id', sa.String(length=64), nullable=False),
        sa.Column('member_id', sa.String(length=64), nullable=True),
        sa.Column('staff_name', sa.String(length=100), nullable=True),
        sa.Column('patrol_vehicle', sa.String(length=100), server_default='Vehicle TBD', nullable=False),
        sa.Column('area_assignment', sa.String(length=200), server_default='Area TBD', nullable=False),
        sa.Column('sort_order', sa.Integer(), server_default='0', nullable=False),
        *_audit_columns(),
        sa.ForeignKeyConstraint(['event_id'], ['events.event_id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['member_id'], ['team_members.member_id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('traffic_id'),
    )
    with op.batch_alter_table('traffic_controls', schema=None) as batch_op:
        batch_op.create_index('idx_traffic_event', ['user_id', 'event_id', 'sort_order'], unique=False)
        batch_op.create_index(batch_op.f('ix_traffic_controls_user_id'), ['user_id'], unique=False)

    op.create_table(
        'supervisors',
        sa.Column('supervisor_id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('event_id', sa.String(length=64), nullable=False),
        sa.Column('supervisor_name', sa.String(length=100), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('sort_order', sa.Integer(), server_default='0', nullable=False),
        *_audit_columns(),
        sa.ForeignKeyConstraint(['event_id'], ['events.event_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('supervisor_id'),
    )
    with op.batch_alter_table('supervisors', schema=None) as batch_op:
        batch_op.create_index('idx_supervisor_event', ['user_id', 'event_id', 'sort_order'], unique=False)
        batch_op.create_index(batch_op.f('ix_supervisors_user_id'), ['user_id'], unique=False)

    op.create_table(
        'event_tasks',
        sa.Column('task_id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('event_id', sa.String(length=64), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), server_default='Not Started', nullable=False),
        sa.Column('due_date', sa.String(length=10), nullable=True),
        sa.Column('due_time', sa.String(length=8), nullable=True),
        sa.Column('assignee_id', sa.String(length=64), nullable=True),
        sa.Column('category_id', sa.String(length=64), nullable=True),
        sa.Column('sort_order', sa.Integer(), server_default='0', nullable=False),
        *_audit_columns(),
        sa.CheckConstraint(
            "status IN ('Not Started', 'In Progress', 'Completed')",
            name='ck_event_task_status',
        ),
        sa.ForeignKeyConstraint(['event_id'], ['events.event_id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['assignee_id'], ['team_members.member_id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['category_id'], ['task_categories.category_id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('task_id'),
    )
    with op.batch_alter_table('event_tasks', schema=None) as batch_op:
        batch_op.create_index('idx_task_event', ['user_id', 'event_id', 'sort_order'], unique=False)
        batch_op.create_index(batch_op.f('ix_event_tasks_user_id'), ['user_id'], unique=False)

    op.create_table(
        'profiles',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('full_name', sa.String(length=100), nullable=True),
        sa.Column('organization', sa.String(length=200), nullable=True),
        sa.Column('role', sa.String(length=50), nullable=True),
        *_audit_columns(),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade() -> None:
    # Children before parents
    op.drop_table('profiles')
    op.drop_table('event_tasks')
    op.drop_table('supervisors')
    op.drop_table('traffic_controls')
    op.drop_table('team_assignments')
    op.drop_index(op.f('ix_assignment_categories_user_id'), table_name='assignment_categories')
    op.drop_index('uq_assignment_category_user_name', table_name='assignment_categories')
    op.drop_table('assignment_categories')
    op.drop_table('task_categories')
    op.drop_table('team_members')
    op.drop_table('events')
