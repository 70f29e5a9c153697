"""create shaders table

Revision ID: 3f9c2d7a41be
Revises:
Create Date: 2026-10-19 09:12:40.511204

"""
from typing import Sequence, Union

from alembic import op  # type: ignore
import sqlalchemy as sa  # type: ignore
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3f9c2d7a41be'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None



def upgrade() -> None:
    """Upgrade schema."""
    # json, not jsonb: control config key order is significant
    op.create_table(
        'shaders',
        sa.Column('id', sa.Text(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('creator_id', sa.Text(), nullable=False),
        sa.Column('lineage_id', sa.Text(), nullable=False),
        sa.Column('parent_id', sa.Text(), nullable=True),
        sa.Column('html', sa.Text(), nullable=True),
        sa.Column('json', postgresql.JSON(), nullable=True),
        sa.Column('metadata', postgresql.JSON(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        schema='public',
    )

    op.create_index('ix_shaders_created_at', 'shaders', ['created_at'], unique=False, schema='public')
    op.create_index(
        'ix_shaders_creator_id_created_at',
        'shaders',
        ['creator_id', 'created_at'],
        unique=False,
        schema='public',
    )



def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_shaders_creator_id_created_at', table_name='shaders', schema='public')
    op.drop_index('ix_shaders_created_at', table_name='shaders', schema='public')
    op.drop_table('shaders', schema='public')
