# shaderland/models/shaders_table.py
# Single table holding every generated shader; rows are insert-only

from sqlalchemy import Table, Column, Text, TIMESTAMP, Index
from sqlalchemy.dialects.postgresql import JSON

from shaderland.db.base import metadata


# json (not jsonb): jsonb reorders object keys, control order must survive
shaders = Table(
    'shaders',
    metadata,
    Column('id', Text, primary_key=True),
    Column('created_at', TIMESTAMP(timezone=True), nullable=False),
    Column('creator_id', Text, nullable=False),
    Column('lineage_id', Text, nullable=False),
    Column('parent_id', Text, nullable=True),
    Column('html', Text, nullable=True),
    Column('json', JSON, nullable=True),
    Column('metadata', JSON, nullable=True),
    Index('ix_shaders_created_at', 'created_at'),
    Index('ix_shaders_creator_id_created_at', 'creator_id', 'created_at'),
    schema='public',
)
