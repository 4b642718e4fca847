"""index offer payment instruments

Revision ID: 7e2f5b8c1d94
Revises: 4c1e9a7d2b30
Create Date: 2025-09-16 09:30:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '7e2f5b8c1d94'
down_revision = '4c1e9a7d2b30'
branch_labels = None
depends_on = None


def upgrade():
    # Serves the bank / instrument containment filter of the discount query.
    # Other databases filter those in Python and get no index.
    if op.get_bind().dialect.name == 'postgresql':
        op.execute(
            "CREATE INDEX idx_offers_payment_instruments "
            "ON offers USING GIN ((payment_instruments::jsonb));"
        )


def downgrade():
    if op.get_bind().dialect.name == 'postgresql':
        op.execute("DROP INDEX idx_offers_payment_instruments;")
