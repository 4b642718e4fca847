"""create offers table

Revision ID: 4c1e9a7d2b30
Revises:
Create Date: 2025-09-02 11:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4c1e9a7d2b30'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # adjustment_id is the primary key, so concurrent ingestions of the same
    # offer collide on insert instead of creating duplicates
    op.create_table(
        'offers',
        sa.Column('adjustment_id', sa.Text(), primary_key=True),
        sa.Column('title', sa.Text(), nullable=False, server_default=''),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('type', sa.Text(), nullable=False, server_default=''),
        sa.Column('payment_instruments', sa.JSON(), nullable=False),
        sa.Column('min_trxn_value', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('max_discount', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('discount_percentage', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_ts', sa.TIMESTAMP(), server_default=sa.func.now()),
    )
    op.create_index('idx_offers_min_trxn_value', 'offers', ['min_trxn_value'])


def downgrade():
    op.drop_index('idx_offers_min_trxn_value', table_name='offers')
    op.drop_table('offers')
