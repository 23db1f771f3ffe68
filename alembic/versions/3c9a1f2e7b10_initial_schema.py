"""initial_schema

Users, shifts, financial configs, production, sales, expenses, credit
accounts and daily closings.

Revision ID: 3c9a1f2e7b10
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op


# revision identifiers, used by Alembic.
revision: str = '3c9a1f2e7b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('pin_hash', sa.String(), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='STAFF'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_name'), 'users', ['name'], unique=True)
    op.create_index(op.f('ix_users_role'), 'users', ['role'], unique=False)
    op.create_index(op.f('ix_users_is_active'), 'users', ['is_active'], unique=False)

    op.create_table(
        'shifts',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('opened_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('closed_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_shifts_user_id'), 'shifts', ['user_id'], unique=False)
    op.create_index(op.f('ix_shifts_opened_at'), 'shifts', ['opened_at'], unique=False)
    # At most one open shift per user
    op.create_index(
        'uq_shifts_one_open_per_user',
        'shifts',
        ['user_id'],
        unique=True,
        postgresql_where=sa.text('closed_at IS NULL'),
        sqlite_where=sa.text('closed_at IS NULL'),
    )

    op.create_table(
        'financial_configs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('effective_from', sa.Date(), nullable=False),
        sa.Column('sell_price_per_liter', sa.Numeric(12, 2), nullable=False),
        sa.Column('cost_per_basket', sa.Numeric(12, 2), nullable=False),
        sa.Column('monthly_rent', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('monthly_electricity', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('created_by_id', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('sell_price_per_liter >= 0', name='financial_config_price_non_negative'),
        sa.CheckConstraint('cost_per_basket >= 0', name='financial_config_cost_non_negative'),
        sa.ForeignKeyConstraint(['created_by_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        op.f('ix_financial_configs_effective_from'),
        'financial_configs',
        ['effective_from'],
        unique=True,
    )

    op.create_table(
        'credit_customers',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('phone', sa.String(30), nullable=True),
        sa.Column('balance_owed', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('settled_at', sa.DateTime(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('balance_owed >= 0', name='credit_customer_balance_non_negative'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_credit_customers_name'), 'credit_customers', ['name'], unique=False)

    op.create_table(
        'production_entries',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('baskets_count', sa.Integer(), nullable=False),
        sa.Column('liters_produced', sa.Numeric(12, 3), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('shift_id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('baskets_count >= 0', name='production_baskets_non_negative'),
        sa.CheckConstraint('liters_produced >= 0', name='production_liters_non_negative'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['shift_id'], ['shifts.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_production_entries_date'), 'production_entries', ['date'], unique=False)
    op.create_index(op.f('ix_production_entries_user_id'), 'production_entries', ['user_id'], unique=False)
    op.create_index(op.f('ix_production_entries_shift_id'), 'production_entries', ['shift_id'], unique=False)

    op.create_table(
        'sales',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('liters', sa.Numeric(12, 3), nullable=True),
        sa.Column('payment_type', sa.String(20), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('shift_id', sa.Uuid(), nullable=False),
        sa.Column('credit_customer_id', sa.Uuid(), nullable=True),
        sa.CheckConstraint('amount >= 0', name='sale_amount_non_negative'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['shift_id'], ['shifts.id']),
        sa.ForeignKeyConstraint(['credit_customer_id'], ['credit_customers.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_sales_date'), 'sales', ['date'], unique=False)
    op.create_index(op.f('ix_sales_payment_type'), 'sales', ['payment_type'], unique=False)
    op.create_index(op.f('ix_sales_user_id'), 'sales', ['user_id'], unique=False)
    op.create_index(op.f('ix_sales_shift_id'), 'sales', ['shift_id'], unique=False)
    op.create_index(op.f('ix_sales_credit_customer_id'), 'sales', ['credit_customer_id'], unique=False)

    op.create_table(
        'expenses',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('description', sa.String(200), nullable=False),
        sa.Column('category', sa.String(100), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='PENDING'),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('shift_id', sa.Uuid(), nullable=True),
        sa.Column('approved_by_id', sa.Uuid(), nullable=True),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('amount >= 0', name='expense_amount_non_negative'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['shift_id'], ['shifts.id']),
        sa.ForeignKeyConstraint(['approved_by_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_expenses_date'), 'expenses', ['date'], unique=False)
    op.create_index(op.f('ix_expenses_status'), 'expenses', ['status'], unique=False)
    op.create_index(op.f('ix_expenses_user_id'), 'expenses', ['user_id'], unique=False)
    op.create_index(op.f('ix_expenses_shift_id'), 'expenses', ['shift_id'], unique=False)

    op.create_table(
        'credit_ledger_entries',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('customer_id', sa.Uuid(), nullable=False),
        sa.Column('kind', sa.String(20), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('sale_id', sa.Uuid(), nullable=True),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('marked_paid', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('paid_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('amount > 0', name='credit_entry_amount_positive'),
        sa.ForeignKeyConstraint(['customer_id'], ['credit_customers.id']),
        sa.ForeignKeyConstraint(['sale_id'], ['sales.id']),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('sale_id'),
    )
    op.create_index(
        op.f('ix_credit_ledger_entries_customer_id'), 'credit_ledger_entries', ['customer_id'], unique=False
    )
    op.create_index(op.f('ix_credit_ledger_entries_kind'), 'credit_ledger_entries', ['kind'], unique=False)
    op.create_index(op.f('ix_credit_ledger_entries_date'), 'credit_ledger_entries', ['date'], unique=False)

    op.create_table(
        'daily_closings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('expected_amount', sa.Numeric(15, 5), nullable=False),
        sa.Column('actual_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('difference', sa.Numeric(15, 5), nullable=False),
        sa.Column('leftover_liters', sa.Numeric(12, 3), nullable=False),
        sa.Column('justification', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='SUBMITTED'),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('shift_id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['shift_id'], ['shifts.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('shift_id'),
    )
    op.create_index(op.f('ix_daily_closings_date'), 'daily_closings', ['date'], unique=False)
    op.create_index(op.f('ix_daily_closings_user_id'), 'daily_closings', ['user_id'], unique=False)


def downgrade() -> None:
    op.drop_table('daily_closings')
    op.drop_table('credit_ledger_entries')
    op.drop_table('expenses')
    op.drop_table('sales')
    op.drop_table('production_entries')
    op.drop_table('credit_customers')
    op.drop_table('financial_configs')
    op.drop_index('uq_shifts_one_open_per_user', table_name='shifts')
    op.drop_table('shifts')
    op.drop_table('users')
