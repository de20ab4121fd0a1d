"""Initial schema - all tables

Revision ID: 001
Revises: 
Create Date: 2025-01-01 00:00:00.000000

This migration creates all initial tables for ClinicClock:
- employees: Kiosk users and their credentials
- attendance_records: One row per shift
- admin_users: Admin panel accounts
- admin_sessions: Admin panel sessions
- public_holidays: Dates with the early report time
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Employees table
    op.create_table(
        'employees',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('uses_default_password', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_employees_name', 'employees', ['name'])
    
    # Attendance records table
    op.create_table(
        'attendance_records',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('employee_id', sa.String(length=36), nullable=False),
        sa.Column('employee_name', sa.String(length=150), nullable=False),
        sa.Column('record_date', sa.Date(), nullable=False),
        sa.Column('clock_in_time', sa.DateTime(), nullable=False),
        sa.Column('clock_out_time', sa.DateTime(), nullable=True),
        sa.Column('total_hours', sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], name='fk_attendance_employee', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_attendance_record_date', 'attendance_records', ['record_date'])
    op.create_index('ix_attendance_employee_date', 'attendance_records', ['employee_id', 'record_date'])
    
    # Admin users table
    op.create_table(
        'admin_users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('username', sa.String(length=100), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_admin_users_username', 'admin_users', ['username'], unique=True)
    
    # Admin sessions table
    op.create_table(
        'admin_sessions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('admin_id', sa.String(length=36), nullable=False),
        sa.Column('session_token', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('logged_out_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['admin_id'], ['admin_users.id'], name='fk_admin_sessions_admin', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_admin_sessions_session_token', 'admin_sessions', ['session_token'], unique=True)
    op.create_index('ix_admin_sessions_admin_active', 'admin_sessions', ['admin_id', 'is_active'])
    
    # Public holidays table
    op.create_table(
        'public_holidays',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('holiday_date', sa.Date(), nullable=False),
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_public_holidays_holiday_date', 'public_holidays', ['holiday_date'], unique=True)


def downgrade() -> None:
    op.drop_table('public_holidays')
    op.drop_table('admin_sessions')
    op.drop_table('admin_users')
    op.drop_table('attendance_records')
    op.drop_table('employees')
