"""create leave and attendance ledger tables

Revision ID: 3b1f0c2a9d41
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3b1f0c2a9d41'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

role_enum = sa.Enum('System Admin', 'Executive', 'HR', 'Employee', 'Intern', name='role')
attendance_status_enum = sa.Enum('Present', 'Absent', 'Half Day', 'Leave', 'Holiday', name='attendancestatus')
leave_type_enum = sa.Enum(
    'Sick Leave', 'Casual Leave', 'Earned Leave', 'Compensatory Off', 'Maternity Leave',
    'Paternity Leave', 'Bereavement Leave', 'Unpaid Leave', 'Other', name='leavetype'
)
leave_status_enum = sa.Enum('Pending', 'Approved', 'Rejected', 'Cancelled', name='leavestatus')
holiday_type_enum = sa.Enum('National', 'Regional', 'Company', 'Religious', name='holidaytype')
audit_status_enum = sa.Enum('SUCCESS', 'FAILED', 'PENDING', name='auditstatus')


def _base_columns():
    return [
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_deleted', sa.Boolean(), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('updated_by', sa.Integer(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'employees',
        *_base_columns(),
        sa.Column('full_name', sa.String(length=150), nullable=False),
        sa.Column('email', sa.String(length=100), nullable=False),
        sa.Column('department', sa.String(length=100), nullable=True),
        sa.Column('role', role_enum, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_employees_id'), 'employees', ['id'], unique=False)
    op.create_index(op.f('ix_employees_email'), 'employees', ['email'], unique=True)

    op.create_table(
        'holidays',
        *_base_columns(),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('holiday_type', holiday_type_enum, nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_holidays_id'), 'holidays', ['id'], unique=False)
    op.create_index(op.f('ix_holidays_date'), 'holidays', ['date'], unique=False)
    op.create_index(op.f('ix_holidays_year'), 'holidays', ['year'], unique=False)

    op.create_table(
        'attendances',
        *_base_columns(),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('attendance_date', sa.Date(), nullable=False),
        sa.Column('check_in_time', sa.Time(), nullable=True),
        sa.Column('check_out_time', sa.Time(), nullable=True),
        sa.Column('expected_check_in', sa.Time(), nullable=True),
        sa.Column('expected_check_out', sa.Time(), nullable=True),
        sa.Column('is_late', sa.Boolean(), nullable=True),
        sa.Column('late_minutes', sa.Integer(), nullable=True),
        sa.Column('is_early_exit', sa.Boolean(), nullable=True),
        sa.Column('early_exit_minutes', sa.Integer(), nullable=True),
        sa.Column('work_hours', sa.Float(), nullable=True),
        sa.Column('status', attendance_status_enum, nullable=False),
        sa.Column('check_in_location', sa.String(length=255), nullable=True),
        sa.Column('check_out_location', sa.String(length=255), nullable=True),
        sa.Column('remarks', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('employee_id', 'attendance_date', name='uq_attendance_employee_date')
    )
    op.create_index(op.f('ix_attendances_id'), 'attendances', ['id'], unique=False)
    op.create_index(op.f('ix_attendances_employee_id'), 'attendances', ['employee_id'], unique=False)

    op.create_table(
        'leaves',
        *_base_columns(),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('leave_type', leave_type_enum, nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('total_days', sa.Float(), nullable=False),
        sa.Column('is_extra_leave', sa.Boolean(), nullable=True),
        sa.Column('status', leave_status_enum, nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('applied_by', sa.Integer(), nullable=False),
        sa.Column('approved_by', sa.Integer(), nullable=True),
        sa.Column('approved_by_role', role_enum, nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id']),
        sa.ForeignKeyConstraint(['approved_by'], ['employees.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_leaves_id'), 'leaves', ['id'], unique=False)
    op.create_index(op.f('ix_leaves_employee_id'), 'leaves', ['employee_id'], unique=False)

    op.create_table(
        'leave_balances',
        *_base_columns(),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('leave_type', leave_type_enum, nullable=False),
        sa.Column('total_allocated', sa.Float(), nullable=False),
        sa.Column('used', sa.Float(), nullable=False),
        sa.Column('pending', sa.Float(), nullable=False),
        sa.Column('balance', sa.Float(), nullable=False),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('employee_id', 'year', 'leave_type', name='uq_leave_balance_employee_year_type')
    )
    op.create_index(op.f('ix_leave_balances_id'), 'leave_balances', ['id'], unique=False)
    op.create_index(op.f('ix_leave_balances_employee_id'), 'leave_balances', ['employee_id'], unique=False)

    op.create_table(
        'audit_logs',
        *_base_columns(),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('user_role', sa.String(length=50), nullable=True),
        sa.Column('action', sa.String(length=100), nullable=False),
        sa.Column('entity_type', sa.String(length=100), nullable=False),
        sa.Column('entity_id', sa.Integer(), nullable=True),
        sa.Column('changes', sa.JSON(), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('status', audit_status_enum, nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_audit_logs_id'), 'audit_logs', ['id'], unique=False)
    op.create_index(op.f('ix_audit_logs_user_id'), 'audit_logs', ['user_id'], unique=False)


def downgrade() -> None:
    op.drop_table('audit_logs')
    op.drop_table('leave_balances')
    op.drop_table('leaves')
    op.drop_table('attendances')
    op.drop_table('holidays')
    op.drop_table('employees')

    bind = op.get_bind()
    for enum_type in (
        audit_status_enum, holiday_type_enum, leave_status_enum,
        leave_type_enum, attendance_status_enum, role_enum
    ):
        enum_type.drop(bind, checkfirst=True)
