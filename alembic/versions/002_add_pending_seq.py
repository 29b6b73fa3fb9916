"""Add insertion sequence to pending transactions

Revision ID: 002
Revises: 001
Create Date: 2026-10-18 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '002'
down_revision: Union[str, None] = '001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column(
        'pending_transactions',
        sa.Column('seq', sa.BigInteger(), nullable=False, server_default='0')
    )
    op.create_index(
        op.f('ix_pending_transactions_seq'),
        'pending_transactions',
        ['seq'],
        unique=False
    )


def downgrade() -> None:
    op.drop_index(op.f('ix_pending_transactions_seq'), table_name='pending_transactions')
    op.drop_column('pending_transactions', 'seq')
