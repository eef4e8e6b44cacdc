"""Create commission core tables.

Revision ID: 20261019_000001
Revises:
Create Date: 2026-10-19

Tier configuration, members, order snapshot, commission ledger, team
incentive ledger and level change audit trail.
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261019_000001'
down_revision = None
branch_labels = None
depends_on = None


MONEY = sa.DECIMAL(precision=12, scale=2)
RATE = sa.DECIMAL(precision=7, scale=4)


def upgrade() -> None:
    """Create commission core tables."""
    op.create_table(
        'member_tiers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('rank', sa.Integer(), nullable=False),
        sa.Column('min_points', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('max_points', sa.Integer(), nullable=True),
        sa.Column(
            'is_sharing_earner', sa.Boolean(), nullable=False,
            server_default=sa.false()
        ),
        sa.Column(
            'direct_rate', RATE, nullable=False, server_default='0',
            comment='Direct commission percent (0-100)'
        ),
        sa.Column(
            'indirect_rate', RATE, nullable=False, server_default='0',
            comment='Indirect commission percent (0-100)'
        ),
        sa.Column(
            'auto_upgrade_enabled', sa.Boolean(), nullable=False,
            server_default=sa.false()
        ),
        sa.Column(
            'status', sa.String(length=20), nullable=False,
            server_default='active'
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_member_tiers_rank', 'member_tiers', ['rank'])

    op.create_table(
        'distributor_tiers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('rank', sa.Integer(), nullable=False),
        sa.Column('min_sales', MONEY, nullable=False, server_default='0'),
        sa.Column('max_sales', MONEY, nullable=True),
        sa.Column('min_fans', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('max_fans', sa.Integer(), nullable=True),
        sa.Column(
            'upgrade_condition_logic', sa.String(length=3), nullable=False,
            server_default='and'
        ),
        sa.Column(
            'cost_rate', RATE, nullable=False, server_default='0',
            comment='Wholesale cost percent of order price (0-100)'
        ),
        sa.Column(
            'procurement_cost', RATE, nullable=True,
            comment='Legacy wholesale cost fraction (0-1)'
        ),
        sa.Column(
            'sharer_direct_rate', RATE, nullable=True,
            comment='Direct sharing fraction (0-1)'
        ),
        sa.Column(
            'sharer_indirect_rate', RATE, nullable=True,
            comment='Indirect sharing fraction (0-1)'
        ),
        sa.Column(
            'auto_upgrade_enabled', sa.Boolean(), nullable=False,
            server_default=sa.false()
        ),
        sa.Column(
            'status', sa.String(length=20), nullable=False,
            server_default='active'
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_distributor_tiers_rank', 'distributor_tiers', ['rank'])

    op.create_table(
        'team_expansion_tiers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('rank', sa.Integer(), nullable=False),
        sa.Column('min_incentive_base', MONEY, nullable=True),
        sa.Column('max_incentive_base', MONEY, nullable=True),
        sa.Column(
            'incentive_rate', RATE, nullable=False, server_default='0',
            comment='Incentive percent of downstream monthly sales (0-100)'
        ),
        sa.Column(
            'status', sa.String(length=20), nullable=False,
            server_default='active'
        ),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'members',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('nickname', sa.String(length=50), nullable=False),
        sa.Column(
            'status', sa.String(length=20), nullable=False,
            server_default='active'
        ),
        sa.Column('referrer_id', sa.Integer(), nullable=True),
        sa.Column('member_tier_id', sa.Integer(), nullable=True),
        sa.Column('distributor_tier_id', sa.Integer(), nullable=True),
        sa.Column('team_expansion_tier_id', sa.Integer(), nullable=True),
        sa.Column('total_points', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_sales', MONEY, nullable=False, server_default='0'),
        sa.Column('direct_sales', MONEY, nullable=False, server_default='0'),
        sa.Column('indirect_sales', MONEY, nullable=False, server_default='0'),
        sa.Column('distributor_sales', MONEY, nullable=False, server_default='0'),
        sa.Column('total_commission', MONEY, nullable=False, server_default='0'),
        sa.Column(
            'available_commission', MONEY, nullable=False, server_default='0'
        ),
        sa.Column(
            'total_team_incentive', MONEY, nullable=False, server_default='0'
        ),
        sa.Column(
            'available_team_incentive', MONEY, nullable=False,
            server_default='0'
        ),
        sa.Column('direct_fans', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_fans', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('personal_direct_rate', RATE, nullable=True),
        sa.Column('personal_indirect_rate', RATE, nullable=True),
        sa.Column('personal_cost_rate', RATE, nullable=True),
        sa.Column(
            'created_at', sa.DateTime(timezone=True), nullable=False,
            server_default=sa.text('now()')
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['referrer_id'], ['members.id'], ondelete='SET NULL'
        ),
        sa.ForeignKeyConstraint(
            ['member_tier_id'], ['member_tiers.id'], ondelete='SET NULL'
        ),
        sa.ForeignKeyConstraint(
            ['distributor_tier_id'], ['distributor_tiers.id'],
            ondelete='SET NULL'
        ),
        sa.ForeignKeyConstraint(
            ['team_expansion_tier_id'], ['team_expansion_tiers.id'],
            ondelete='SET NULL'
        ),
        sa.CheckConstraint(
            'available_commission >= 0',
            name='check_member_available_commission_non_negative'
        ),
        sa.CheckConstraint(
            'total_commission >= 0',
            name='check_member_total_commission_non_negative'
        ),
    )
    op.create_index('ix_members_status', 'members', ['status'])
    op.create_index('ix_members_referrer_id', 'members', ['referrer_id'])
    op.create_index(
        'ix_members_distributor_tier_id', 'members', ['distributor_tier_id']
    )

    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('order_no', sa.String(length=50), nullable=False),
        sa.Column('member_id', sa.Integer(), nullable=False),
        sa.Column('total_amount', MONEY, nullable=False),
        sa.Column(
            'status', sa.String(length=20), nullable=False,
            server_default='pending'
        ),
        sa.Column(
            'created_at', sa.DateTime(timezone=True), nullable=False,
            server_default=sa.text('now()')
        ),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            'sales_aggregated_at', sa.DateTime(timezone=True), nullable=True,
            comment='Set once when sales counters absorbed this order'
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['member_id'], ['members.id']),
        sa.UniqueConstraint('order_no'),
    )
    op.create_index('ix_orders_member_id', 'orders', ['member_id'])
    op.create_index('ix_orders_status', 'orders', ['status'])
    op.create_index('ix_orders_paid_at', 'orders', ['paid_at'])

    op.create_table(
        'commission_entries',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('buyer_id', sa.Integer(), nullable=False),
        sa.Column('commission_type', sa.String(length=30), nullable=False),
        sa.Column('recipient_id', sa.Integer(), nullable=False),
        sa.Column('order_amount', MONEY, nullable=False),
        sa.Column(
            'commission_rate', RATE, nullable=False, comment='Percent (0-100)'
        ),
        sa.Column('commission_amount', MONEY, nullable=False),
        sa.Column('cost_rate', RATE, nullable=True),
        sa.Column('cost_amount', MONEY, nullable=True),
        sa.Column(
            'status', sa.String(length=20), nullable=False,
            server_default='pending'
        ),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column(
            'created_at', sa.DateTime(timezone=True), nullable=False,
            server_default=sa.text('now()')
        ),
        sa.Column('settled_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id']),
        sa.ForeignKeyConstraint(['buyer_id'], ['members.id']),
        sa.ForeignKeyConstraint(['recipient_id'], ['members.id']),
        sa.UniqueConstraint(
            'order_id', 'commission_type', 'recipient_id',
            name='uq_commission_entry_order_type_recipient'
        ),
        sa.CheckConstraint(
            'commission_amount >= 0',
            name='check_commission_amount_non_negative'
        ),
    )
    op.create_index(
        'ix_commission_entries_order_id', 'commission_entries', ['order_id']
    )
    op.create_index(
        'ix_commission_entries_recipient_id', 'commission_entries',
        ['recipient_id']
    )
    op.create_index(
        'ix_commission_entries_status', 'commission_entries', ['status']
    )

    op.create_table(
        'team_incentive_entries',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('distributor_id', sa.Integer(), nullable=False),
        sa.Column('referrer_id', sa.Integer(), nullable=False),
        sa.Column(
            'calculation_month', sa.String(length=7), nullable=False,
            comment='YYYY-MM'
        ),
        sa.Column('monthly_sales', MONEY, nullable=False),
        sa.Column('incentive_base', MONEY, nullable=False),
        sa.Column(
            'incentive_rate', RATE, nullable=False, comment='Percent (0-100)'
        ),
        sa.Column('incentive_amount', MONEY, nullable=False),
        sa.Column(
            'status', sa.String(length=20), nullable=False,
            server_default='pending'
        ),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column(
            'created_at', sa.DateTime(timezone=True), nullable=False,
            server_default=sa.text('now()')
        ),
        sa.Column('settled_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['distributor_id'], ['members.id']),
        sa.ForeignKeyConstraint(['referrer_id'], ['members.id']),
        sa.UniqueConstraint(
            'distributor_id', 'calculation_month',
            name='uq_team_incentive_distributor_month'
        ),
    )
    op.create_index(
        'ix_team_incentive_entries_distributor_id', 'team_incentive_entries',
        ['distributor_id']
    )
    op.create_index(
        'ix_team_incentive_entries_referrer_id', 'team_incentive_entries',
        ['referrer_id']
    )
    op.create_index(
        'ix_team_incentive_entries_status', 'team_incentive_entries',
        ['status']
    )

    op.create_table(
        'level_change_records',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('member_id', sa.Integer(), nullable=False),
        sa.Column('tier_type', sa.String(length=20), nullable=False),
        sa.Column('old_tier_id', sa.Integer(), nullable=True),
        sa.Column('new_tier_id', sa.Integer(), nullable=True),
        sa.Column('reason', sa.String(length=100), nullable=True),
        sa.Column('description', sa.String(length=200), nullable=True),
        sa.Column(
            'created_at', sa.DateTime(timezone=True), nullable=False,
            server_default=sa.text('now()')
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['member_id'], ['members.id']),
    )
    op.create_index(
        'ix_level_change_records_member_id', 'level_change_records',
        ['member_id']
    )


def downgrade() -> None:
    """Drop commission core tables."""
    op.drop_table('level_change_records')
    op.drop_table('team_incentive_entries')
    op.drop_table('commission_entries')
    op.drop_table('orders')
    op.drop_table('members')
    op.drop_table('team_expansion_tiers')
    op.drop_table('distributor_tiers')
    op.drop_table('member_tiers')
