# shaderland/services/lineage.py
# Give a parsed artifact its identity and place in the remix tree

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from shaderland.schemas.shader import Artifact, Shader
from shaderland.utils.ids import generate_id


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def attach_lineage(
    artifact: Artifact,
    creator_id: str,
    prompt: str,
    parent: Optional[Shader] = None,
    *,
    extra_metadata: Optional[Dict[str, Any]] = None,
    id_factory: Callable[[], str] = generate_id,
    clock: Callable[[], datetime] = utcnow,
) -> Shader:
    """Build the Shader row for a new generation.

    A root shader is its own lineage; a remix inherits the parent's lineage
    and points at the parent directly.
    """
    shader_id = id_factory()
    metadata: Dict[str, Any] = dict(extra_metadata or {})
    metadata["prompt"] = prompt

    return Shader(
        id=shader_id,
        created_at=clock(),
        creator_id=creator_id,
        lineage_id=parent.lineage_id if parent is not None else shader_id,
        parent_id=parent.id if parent is not None else None,
        html=artifact.html,
        control_config=artifact.config,
        metadata=metadata,
    )
