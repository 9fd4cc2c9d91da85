"""create expense tables

Revision ID: 3a7d1c9e2b10
Revises:
Create Date: 2026-10-12 09:20:41.118203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3a7d1c9e2b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('department', sa.String(255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("role IN ('employee', 'accounting')", name='user_role'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'expense_reports',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('trip_purpose', sa.Text(), nullable=False),
        sa.Column('trip_start_date', sa.Date(), nullable=False),
        sa.Column('trip_end_date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='draft'),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('approved_by', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('trip_end_date >= trip_start_date', name='ck_expense_reports_trip_dates'),
        sa.CheckConstraint(
            "status IN ('draft', 'submitted', 'approved', 'rejected', 'paid')",
            name='report_status',
        ),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['approved_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_expense_reports_user_id', 'expense_reports', ['user_id'])
    op.create_index('ix_expense_reports_status', 'expense_reports', ['status'])

    op.create_table(
        'expense_items',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('expense_report_id', sa.Uuid(), nullable=False),
        sa.Column('category', sa.String(20), nullable=False),
        sa.Column('description', sa.String(500), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('receipt_url', sa.String(1000), nullable=True),
        sa.Column('expense_date', sa.Date(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('amount > 0', name='ck_expense_items_amount_positive'),
        sa.CheckConstraint(
            "category IN ('transportation', 'accommodation', 'meal', 'other')",
            name='expense_category',
        ),
        sa.ForeignKeyConstraint(['expense_report_id'], ['expense_reports.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_expense_items_expense_report_id', 'expense_items', ['expense_report_id'])

    op.create_table(
        'approval_history',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('expense_report_id', sa.Uuid(), nullable=False),
        sa.Column('action', sa.String(20), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint(
            "action IN ('submitted', 'approved', 'rejected', 'paid')",
            name='history_action',
        ),
        sa.ForeignKeyConstraint(['expense_report_id'], ['expense_reports.id']),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_approval_history_expense_report_id', 'approval_history', ['expense_report_id'])


def downgrade() -> None:
    op.drop_index('ix_approval_history_expense_report_id', table_name='approval_history')
    op.drop_table('approval_history')
    op.drop_index('ix_expense_items_expense_report_id', table_name='expense_items')
    op.drop_table('expense_items')
    op.drop_index('ix_expense_reports_status', table_name='expense_reports')
    op.drop_index('ix_expense_reports_user_id', table_name='expense_reports')
    op.drop_table('expense_reports')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
