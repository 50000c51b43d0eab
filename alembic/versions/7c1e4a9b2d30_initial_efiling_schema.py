"""Initial e-filing workflow schema

Revision ID: 7c1e4a9b2d30
Revises:
Create Date: 2026-10-19 10:12:31.418502

"""
from alembic import op
import sqlalchemy as sa

from efiling.models.base import GUID, JSON


# revision identifiers, used by Alembic.
revision = '7c1e4a9b2d30'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _location_columns():
    return [
        sa.Column('zone_id', GUID(), sa.ForeignKey('zones.id'), nullable=True),
        sa.Column('district_id', GUID(), sa.ForeignKey('districts.id'), nullable=True),
        sa.Column('town_id', GUID(), sa.ForeignKey('towns.id'), nullable=True),
        sa.Column('division_id', GUID(), sa.ForeignKey('divisions.id'), nullable=True),
    ]


def upgrade() -> None:
    # Identity
    op.create_table('users',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('designation', sa.String(255), nullable=True),
        sa.Column('role', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table('efiling_departments',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('code', sa.String(50), nullable=True, unique=True),
        sa.Column('department_type', sa.String(50), nullable=False, server_default='district'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    # Geography
    op.create_table('zones',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        *_timestamps(),
    )
    op.create_table('districts',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('zone_id', GUID(), sa.ForeignKey('zones.id'), nullable=True),
        *_timestamps(),
    )
    op.create_table('towns',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('district_id', GUID(), sa.ForeignKey('districts.id'), nullable=True),
        *_timestamps(),
    )
    op.create_table('divisions',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('department_id', GUID(), sa.ForeignKey('efiling_departments.id'), nullable=True),
        *_timestamps(),
    )

    op.create_table('efiling_roles',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('code', sa.String(100), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('department_id', GUID(), sa.ForeignKey('efiling_departments.id'), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('ix_efiling_roles_code', 'efiling_roles', ['code'], unique=True)

    op.create_table('efiling_role_locations',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('role_id', GUID(), sa.ForeignKey('efiling_roles.id'), nullable=False),
        *_location_columns(),
        *_timestamps(),
    )
    op.create_index('ix_efiling_role_locations_role_id', 'efiling_role_locations', ['role_id'])

    op.create_table('efiling_users',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('user_id', GUID(), sa.ForeignKey('users.id'), nullable=False, unique=True),
        sa.Column('efiling_role_id', GUID(), sa.ForeignKey('efiling_roles.id'), nullable=True),
        sa.Column('department_id', GUID(), sa.ForeignKey('efiling_departments.id'), nullable=True),
        sa.Column('district_id', GUID(), sa.ForeignKey('districts.id'), nullable=True),
        sa.Column('town_id', GUID(), sa.ForeignKey('towns.id'), nullable=True),
        sa.Column('division_id', GUID(), sa.ForeignKey('divisions.id'), nullable=True),
        sa.Column('designation', sa.String(255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('can_sign', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('can_approve_files', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('can_create_files', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('is_consultant', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )

    # Workflow definitions
    op.create_table('efiling_role_groups',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('code', sa.String(100), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('role_codes', JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_table('efiling_role_group_locations',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('role_group_id', GUID(), sa.ForeignKey('efiling_role_groups.id'), nullable=False),
        *_location_columns(),
        *_timestamps(),
    )
    op.create_index(
        'ix_efiling_role_group_locations_role_group_id',
        'efiling_role_group_locations',
        ['role_group_id'],
    )

    op.create_table('efiling_workflow_templates',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('file_type', sa.String(100), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('ix_efiling_workflow_templates_file_type', 'efiling_workflow_templates', ['file_type'])

    op.create_table('efiling_workflow_stages',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('template_id', GUID(), sa.ForeignKey('efiling_workflow_templates.id'), nullable=False),
        sa.Column('stage_name', sa.String(255), nullable=False),
        sa.Column('stage_code', sa.String(100), nullable=True),
        sa.Column('stage_order', sa.Integer(), nullable=False),
        sa.Column('role_group_id', GUID(), sa.ForeignKey('efiling_role_groups.id'), nullable=True),
        sa.Column('sla_hours', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint('template_id', 'stage_order', name='uq_stage_template_order'),
    )
    op.create_index('ix_efiling_workflow_stages_template_id', 'efiling_workflow_stages', ['template_id'])

    op.create_table('efiling_stage_transitions',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('from_stage_id', GUID(), sa.ForeignKey('efiling_workflow_stages.id'), nullable=False),
        sa.Column('to_stage_id', GUID(), sa.ForeignKey('efiling_workflow_stages.id'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint('from_stage_id', 'to_stage_id', name='uq_stage_transition'),
    )
    op.create_index('ix_efiling_stage_transitions_from_stage_id', 'efiling_stage_transitions', ['from_stage_id'])

    # Files and live workflow state
    op.create_table('efiling_files',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('file_number', sa.String(100), nullable=False),
        sa.Column('subject', sa.String(500), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('priority', sa.String(20), nullable=False, server_default='normal'),
        sa.Column(
            'status',
            sa.Enum('DRAFT', 'IN_PROGRESS', 'COMPLETED', 'CANCELLED', name='file_status'),
            nullable=False,
            server_default='DRAFT',
        ),
        sa.Column('department_id', GUID(), sa.ForeignKey('efiling_departments.id'), nullable=True),
        *_location_columns(),
        sa.Column('created_by', GUID(), sa.ForeignKey('efiling_users.id'), nullable=True),
        sa.Column('assigned_to', GUID(), sa.ForeignKey('efiling_users.id'), nullable=True),
        sa.Column('sla_deadline', sa.DateTime(timezone=True), nullable=True),
        sa.Column('sla_breached', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index('ix_efiling_files_file_number', 'efiling_files', ['file_number'], unique=True)

    op.create_table('efiling_file_workflows',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('file_id', GUID(), sa.ForeignKey('efiling_files.id'), nullable=False),
        sa.Column('template_id', GUID(), sa.ForeignKey('efiling_workflow_templates.id'), nullable=False),
        sa.Column('current_stage_id', GUID(), sa.ForeignKey('efiling_workflow_stages.id'), nullable=True),
        sa.Column('current_assignee_id', GUID(), sa.ForeignKey('efiling_users.id'), nullable=True),
        sa.Column(
            'workflow_status',
            sa.Enum('IN_PROGRESS', 'COMPLETED', 'CANCELLED', name='workflow_status'),
            nullable=False,
            server_default='IN_PROGRESS',
        ),
        sa.Column('sla_deadline', sa.DateTime(timezone=True), nullable=True),
        sa.Column('sla_breached', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', GUID(), sa.ForeignKey('efiling_users.id'), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        *_timestamps(),
    )
    op.create_index('ix_efiling_file_workflows_file_id', 'efiling_file_workflows', ['file_id'])
    op.create_index(
        'uq_file_active_workflow',
        'efiling_file_workflows',
        ['file_id'],
        unique=True,
        postgresql_where=sa.text("workflow_status = 'IN_PROGRESS'"),
        sqlite_where=sa.text("workflow_status = 'IN_PROGRESS'"),
    )

    op.create_table('efiling_file_movements',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('file_id', GUID(), sa.ForeignKey('efiling_files.id'), nullable=False),
        sa.Column('from_user_id', GUID(), sa.ForeignKey('efiling_users.id'), nullable=True),
        sa.Column('to_user_id', GUID(), sa.ForeignKey('efiling_users.id'), nullable=True),
        sa.Column('from_department_id', GUID(), sa.ForeignKey('efiling_departments.id'), nullable=True),
        sa.Column('to_department_id', GUID(), sa.ForeignKey('efiling_departments.id'), nullable=True),
        sa.Column(
            'action_type',
            sa.Enum('ASSIGNED', name='movement_type'),
            nullable=False,
            server_default='ASSIGNED',
        ),
        sa.Column('remarks', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_efiling_file_movements_file_id', 'efiling_file_movements', ['file_id'])

    op.create_table('efiling_workflow_actions',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('workflow_id', GUID(), sa.ForeignKey('efiling_file_workflows.id'), nullable=False),
        sa.Column('from_stage_id', GUID(), sa.ForeignKey('efiling_workflow_stages.id'), nullable=True),
        sa.Column('to_stage_id', GUID(), sa.ForeignKey('efiling_workflow_stages.id'), nullable=True),
        sa.Column(
            'action_type',
            sa.Enum('START', 'FORWARD', 'COMPLETE', 'CANCEL', name='workflow_action_type'),
            nullable=False,
        ),
        sa.Column('action_data', JSON(), nullable=True),
        sa.Column('performed_by', GUID(), sa.ForeignKey('efiling_users.id'), nullable=True),
        sa.Column('performed_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('sla_breached', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index('ix_efiling_workflow_actions_workflow_id', 'efiling_workflow_actions', ['workflow_id'])

    op.create_table('efiling_document_signatures',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('file_id', GUID(), sa.ForeignKey('efiling_files.id'), nullable=False),
        sa.Column('user_id', GUID(), sa.ForeignKey('efiling_users.id'), nullable=True),
        sa.Column('user_name', sa.String(255), nullable=True),
        sa.Column('user_role', sa.String(100), nullable=True),
        sa.Column('signature_type', sa.String(50), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('ix_efiling_document_signatures_file_id', 'efiling_document_signatures', ['file_id'])

    op.create_table('efiling_comments',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('file_id', GUID(), sa.ForeignKey('efiling_files.id'), nullable=False),
        sa.Column('user_id', GUID(), sa.ForeignKey('efiling_users.id'), nullable=False),
        sa.Column('comment', sa.Text(), nullable=False),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index('ix_efiling_comments_file_id', 'efiling_comments', ['file_id'])

    op.create_table('efiling_notifications',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('user_id', GUID(), sa.ForeignKey('efiling_users.id'), nullable=False),
        sa.Column('file_id', GUID(), sa.ForeignKey('efiling_files.id'), nullable=True),
        sa.Column('type', sa.String(100), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('priority', sa.String(20), nullable=False, server_default='normal'),
        sa.Column('action_required', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('read_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('notification_metadata', JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_efiling_notifications_user_id', 'efiling_notifications', ['user_id'])
    op.create_index('ix_efiling_notifications_file_id', 'efiling_notifications', ['file_id'])

    op.create_table('efiling_user_actions',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('entity_type', sa.String(100), nullable=False),
        sa.Column('entity_id', sa.String(100), nullable=False),
        sa.Column('action', sa.String(100), nullable=False),
        sa.Column('user_id', GUID(), nullable=True),
        sa.Column('details', JSON(), nullable=True),
        sa.Column('request_id', sa.String(100), nullable=True),
        sa.Column('ip_address', sa.String(45), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_efiling_user_actions_entity_type', 'efiling_user_actions', ['entity_type'])
    op.create_index('ix_efiling_user_actions_entity_id', 'efiling_user_actions', ['entity_id'])
    op.create_index('ix_efiling_user_actions_action', 'efiling_user_actions', ['action'])
    op.create_index('ix_efiling_user_actions_user_id', 'efiling_user_actions', ['user_id'])


def downgrade() -> None:
    op.drop_table('efiling_user_actions')
    op.drop_table('efiling_notifications')
    op.drop_table('efiling_comments')
    op.drop_table('efiling_document_signatures')
    op.drop_table('efiling_workflow_actions')
    op.drop_table('efiling_file_movements')
    op.drop_index('uq_file_active_workflow', table_name='efiling_file_workflows')
    op.drop_table('efiling_file_workflows')
    op.drop_table('efiling_files')
    op.drop_table('efiling_stage_transitions')
    op.drop_table('efiling_workflow_stages')
    op.drop_table('efiling_workflow_templates')
    op.drop_table('efiling_role_group_locations')
    op.drop_table('efiling_role_groups')
    op.drop_table('efiling_users')
    op.drop_table('efiling_role_locations')
    op.drop_table('efiling_roles')
    op.drop_table('divisions')
    op.drop_table('towns')
    op.drop_table('districts')
    op.drop_table('zones')
    op.drop_table('efiling_departments')
    op.drop_table('users')

    for enum_name in ('workflow_action_type', 'movement_type', 'workflow_status', 'file_status'):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
