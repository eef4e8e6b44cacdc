"""Add member points ledger.

Revision ID: 20261019_000002
Revises: 20261019_000001
Create Date: 2026-10-19

Point source configuration, per-member points records, the member tier
points multiplier and the members.available_points balance.
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261019_000002'
down_revision = '20261019_000001'
branch_labels = None
depends_on = None


RATE = sa.DECIMAL(precision=7, scale=4)


def upgrade() -> None:
    """Add points tables and columns."""
    op.add_column(
        'member_tiers',
        sa.Column(
            'points_rate', RATE, nullable=False, server_default='1',
            comment='Multiplier on points earned by members of this tier'
        ),
    )
    op.add_column(
        'members',
        sa.Column(
            'available_points', sa.Integer(), nullable=False,
            server_default='0'
        ),
    )

    op.create_table(
        'point_source_configs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('source', sa.String(length=30), nullable=False),
        sa.Column(
            'base_points', sa.Integer(), nullable=False, server_default='0'
        ),
        sa.Column(
            'multiplier', RATE, nullable=False, server_default='1',
            comment='Points per currency unit'
        ),
        sa.Column(
            'is_enabled', sa.Boolean(), nullable=False,
            server_default=sa.true()
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('source'),
    )

    op.create_table(
        'member_points_records',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('member_id', sa.Integer(), nullable=False),
        sa.Column(
            'record_type', sa.String(length=20), nullable=False,
            server_default='earn'
        ),
        sa.Column('points', sa.Integer(), nullable=False),
        sa.Column('balance', sa.Integer(), nullable=False),
        sa.Column('source', sa.String(length=30), nullable=False),
        sa.Column('source_id', sa.Integer(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column(
            'created_at', sa.DateTime(timezone=True), nullable=False,
            server_default=sa.text('now()')
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['member_id'], ['members.id']),
        sa.UniqueConstraint(
            'source', 'source_id', name='uq_member_points_source'
        ),
    )
    op.create_index(
        'ix_member_points_records_member_id', 'member_points_records',
        ['member_id']
    )

    op.alter_column(
        'team_incentive_entries', 'incentive_base',
        existing_type=sa.DECIMAL(precision=12, scale=2),
        existing_nullable=False,
        comment='Tier minimum incentive base',
    )


def downgrade() -> None:
    """Drop points tables and columns."""
    op.alter_column(
        'team_incentive_entries', 'incentive_base',
        existing_type=sa.DECIMAL(precision=12, scale=2),
        existing_nullable=False,
        comment=None,
    )
    op.drop_index(
        'ix_member_points_records_member_id',
        table_name='member_points_records'
    )
    op.drop_table('member_points_records')
    op.drop_table('point_source_configs')
    op.drop_column('members', 'available_points')
    op.drop_column('member_tiers', 'points_rate')
