"""Create links table

Revision ID: 001_links
Revises:
Create Date: 2026-10-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision: str = '001_links'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create the key-value links table:
    - code: short code (primary key)
    - value: JSON-encoded link record
    """
    bind = op.get_bind()
    existing_tables = inspect(bind).get_table_names()

    if 'links' not in existing_tables:
        op.create_table(
            'links',
            sa.Column('code', sa.String(length=20), nullable=False),
            sa.Column('value', sa.Text(), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint('code')
        )


def downgrade() -> None:
    op.drop_table('links')
