"""Initial CareFlow schema: employees, leave rules and requests, sync pipeline

Revision ID: 001_initial_careflow
Revises:
Create Date: 2026-02-14

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial_careflow'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    # Use SQL-standard CURRENT_TIMESTAMP so it works on SQLite and Postgres
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    ]


def upgrade() -> None:
    # Skip if tables already exist (e.g. DB created by app create_all())
    existing = sa.inspect(op.get_bind()).get_table_names()
    if 'employees' in existing:
        return

    op.create_table(
        'employees',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('external_employee_id', sa.Integer(), nullable=False),
        sa.Column('first_name', sa.String(), nullable=False),
        sa.Column('last_name', sa.String(), nullable=False, server_default=''),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('role', sa.String(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='active'),
        sa.Column('right_to_work_status', sa.String(), nullable=False, server_default='Pending'),
        sa.Column('right_to_work_expiry', sa.String(), nullable=True),
        sa.Column('dbs_status', sa.String(), nullable=False, server_default='Pending'),
        sa.Column('dbs_expiry', sa.String(), nullable=True),
        sa.Column('dbs_number', sa.String(), nullable=True),
        sa.Column('compliance_data', sa.JSON(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_employees_id'), 'employees', ['id'], unique=False)
    op.create_index(op.f('ix_employees_tenant_id'), 'employees', ['tenant_id'], unique=False)
    op.create_index(op.f('ix_employees_external_employee_id'), 'employees', ['external_employee_id'], unique=True)

    op.create_table(
        'leave_approval_rules',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('leave_type', sa.String(length=50), nullable=True),
        sa.Column('min_duration_days', sa.Integer(), nullable=True),
        sa.Column('max_duration_days', sa.Integer(), nullable=True),
        sa.Column('min_days_notice', sa.Integer(), nullable=True),
        sa.Column('requires_manager_approval', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('auto_approve', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('action', sa.String(length=20), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('priority', sa.Integer(), nullable=False, server_default='100'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint(
            "action IS NULL OR action IN ('approved', 'pending', 'rejected')",
            name='check_leave_approval_rules_action',
        )
    )
    op.create_index(op.f('ix_leave_approval_rules_id'), 'leave_approval_rules', ['id'], unique=False)
    op.create_index(op.f('ix_leave_approval_rules_is_active'), 'leave_approval_rules', ['is_active'], unique=False)
    op.create_index(op.f('ix_leave_approval_rules_priority'), 'leave_approval_rules', ['priority'], unique=False)

    op.create_table(
        'leave_requests',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('leave_type', sa.String(length=50), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('total_days', sa.Integer(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('requested_by', sa.String(), nullable=False),
        sa.Column('requested_at', sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('start_date <= end_date', name='check_start_date_le_end_date')
    )
    op.create_index(op.f('ix_leave_requests_id'), 'leave_requests', ['id'], unique=False)
    op.create_index(op.f('ix_leave_requests_employee_id'), 'leave_requests', ['employee_id'], unique=False)
    op.create_index('ix_leave_requests_employee_dates', 'leave_requests', ['employee_id', 'start_date', 'end_date'], unique=False)

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('actor_id', sa.String(), nullable=False),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('entity_type', sa.String(), nullable=False),
        sa.Column('entity_id', sa.Integer(), nullable=True),
        sa.Column('details', sa.Text(), nullable=True),
        sa.Column('meta_json', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_audit_logs_id'), 'audit_logs', ['id'], unique=False)
    op.create_index(op.f('ix_audit_logs_actor_id'), 'audit_logs', ['actor_id'], unique=False)

    role_mappings = op.create_table(
        'role_mappings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('external_role', sa.String(), nullable=False),
        sa.Column('internal_role', sa.String(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_role_mappings_id'), 'role_mappings', ['id'], unique=False)
    op.create_index(op.f('ix_role_mappings_external_role'), 'role_mappings', ['external_role'], unique=True)

    op.create_table(
        'failed_syncs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('error_message', sa.Text(), nullable=False),
        sa.Column('retries', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=30), nullable=False, server_default='pending_retry'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_failed_syncs_id'), 'failed_syncs', ['id'], unique=False)
    op.create_index(op.f('ix_failed_syncs_status'), 'failed_syncs', ['status'], unique=False)

    # Same table the service falls back to when role_mappings cannot be read
    op.bulk_insert(
        role_mappings,
        [
            {'external_role': 'Recruiter', 'internal_role': 'Manager'},
            {'external_role': 'HR Manager', 'internal_role': 'Manager'},
            {'external_role': 'Care Worker', 'internal_role': 'Carer'},
            {'external_role': 'Senior Care Worker', 'internal_role': 'Senior Carer'},
            {'external_role': 'Nurse', 'internal_role': 'Nurse'},
            {'external_role': 'Admin', 'internal_role': 'Manager'},
        ],
    )


def downgrade() -> None:
    op.drop_index(op.f('ix_failed_syncs_status'), table_name='failed_syncs')
    op.drop_index(op.f('ix_failed_syncs_id'), table_name='failed_syncs')
    op.drop_table('failed_syncs')
    op.drop_index(op.f('ix_role_mappings_external_role'), table_name='role_mappings')
    op.drop_index(op.f('ix_role_mappings_id'), table_name='role_mappings')
    op.drop_table('role_mappings')
    op.drop_index(op.f('ix_audit_logs_actor_id'), table_name='audit_logs')
    op.drop_index(op.f('ix_audit_logs_id'), table_name='audit_logs')
    op.drop_table('audit_logs')
    op.drop_index('ix_leave_requests_employee_dates', table_name='leave_requests')
    op.drop_index(op.f('ix_leave_requests_employee_id'), table_name='leave_requests')
    op.drop_index(op.f('ix_leave_requests_id'), table_name='leave_requests')
    op.drop_table('leave_requests')
    op.drop_index(op.f('ix_leave_approval_rules_priority'), table_name='leave_approval_rules')
    op.drop_index(op.f('ix_leave_approval_rules_is_active'), table_name='leave_approval_rules')
    op.drop_index(op.f('ix_leave_approval_rules_id'), table_name='leave_approval_rules')
    op.drop_table('leave_approval_rules')
    op.drop_index(op.f('ix_employees_external_employee_id'), table_name='employees')
    op.drop_index(op.f('ix_employees_tenant_id'), table_name='employees')
    op.drop_index(op.f('ix_employees_id'), table_name='employees')
    op.drop_table('employees')
