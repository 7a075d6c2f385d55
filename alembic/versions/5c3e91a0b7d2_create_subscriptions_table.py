"""create subscriptions table

Revision ID: 5c3e91a0b7d2
Revises:
Create Date: 2025-09-14 18:02:41.508112

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '5c3e91a0b7d2'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema: create subscriptions table."""
    op.create_table(
        'subscriptions',
        sa.Column('id', sa.BigInteger(), sa.Identity(), primary_key=True, nullable=False),
        sa.Column('service_name', sa.String(), nullable=False),
        sa.Column('price', sa.BigInteger(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
    )
    op.create_index(
        'ix_subscriptions_user_id_service_name',
        'subscriptions',
        ['user_id', 'service_name'],
    )


def downgrade() -> None:
    """Downgrade schema: drop subscriptions table."""
    op.drop_index('ix_subscriptions_user_id_service_name', table_name='subscriptions')
    op.drop_table('subscriptions')
