# shaderland/repositories/shader_repository.py
# Persistence gateway for shaders: insert-only writes, id lookup, recent listing

from __future__ import annotations

import json
from typing import Any, AsyncContextManager, Callable, List, Optional

from sqlalchemy import insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shaderland.config import settings
from shaderland.db.base import get_session
from shaderland.middleware.error_handler import StorageError
from shaderland.models.shaders_table import shaders
from shaderland.schemas.shader import Shader
from shaderland.utils.logger import log_exception, log_info

SessionFactory = Callable[[], AsyncContextManager[AsyncSession]]

_COLUMNS = (
    shaders.c.id,
    shaders.c.created_at,
    shaders.c.creator_id,
    shaders.c.lineage_id,
    shaders.c.parent_id,
    shaders.c.html,
    shaders.c.json,
    shaders.c["metadata"],
)


def _decode_json(value: Any) -> Any:
    # Drivers may hand json columns back as text; parse so ordering is kept
    if isinstance(value, (str, bytes, bytearray)):
        return json.loads(value)
    return value


def _row_to_shader(row: Any) -> Shader:
    data = dict(row)
    data["json"] = _decode_json(data.get("json"))
    data["metadata"] = _decode_json(data.get("metadata")) or {}
    return Shader.model_validate(data)


class ShaderRepository:
    """Data access for the shaders table."""

    def __init__(self, session_factory: SessionFactory = get_session):
        self._session_factory = session_factory

    def clamp_limit(self, limit: Optional[int]) -> int:
        if limit is None:
            return settings.RECENT_DEFAULT_LIMIT
        return max(1, min(int(limit), settings.RECENT_MAX_LIMIT))

    async def insert(self, shader: Shader) -> Shader:
        """Persist a new shader row. Any database failure is a StorageError."""
        values = {
            "id": shader.id,
            "created_at": shader.created_at,
            "creator_id": shader.creator_id,
            "lineage_id": shader.lineage_id,
            "parent_id": shader.parent_id,
            "html": shader.html,
            "json": shader.control_config,
            "metadata": shader.metadata or {},
        }
        try:
            async with self._session_factory() as session:
                await session.execute(insert(shaders).values(**values))
                await session.commit()
        except (SQLAlchemyError, OSError) as e:
            log_exception(e, f"ShaderRepository.insert id={shader.id}")
            raise StorageError(f"Failed to store shader: {type(e).__name__}") from e

        log_info(f"ShaderRepository: stored shader id={shader.id} lineage={shader.lineage_id}")
        return shader

    async def get_by_id(self, shader_id: str) -> Optional[Shader]:
        """Return the shader or None when no row has this id."""
        stmt = select(*_COLUMNS).where(shaders.c.id == shader_id)
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                row = result.mappings().first()
        except (SQLAlchemyError, OSError) as e:
            log_exception(e, f"ShaderRepository.get_by_id id={shader_id}")
            raise StorageError("Failed to load shader") from e
        return _row_to_shader(row) if row else None

    async def recent(self, creator_id: Optional[str] = None, limit: Optional[int] = None) -> List[Shader]:
        """Newest first; filtered to one creator when `creator_id` is given."""
        stmt = (
            select(*_COLUMNS)
            .order_by(shaders.c.created_at.desc(), shaders.c.id.desc())
            .limit(self.clamp_limit(limit))
        )
        if creator_id:
            stmt = stmt.where(shaders.c.creator_id == creator_id)

        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                rows = result.mappings().all()
        except (SQLAlchemyError, OSError) as e:
            log_exception(e, "ShaderRepository.recent")
            raise StorageError("Failed to list shaders") from e
        return [_row_to_shader(r) for r in rows]
