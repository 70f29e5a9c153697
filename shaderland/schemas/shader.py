from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Artifact(BaseModel):
    """Parsed model output before it gets an identity."""
    html: str
    config: Dict[str, Any]


class Shader(BaseModel):
    """Persisted shader row. `json` is exposed under its column name."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    created_at: datetime
    creator_id: str
    lineage_id: str
    parent_id: Optional[str] = None
    html: Optional[str] = None
    control_config: Optional[Dict[str, Any]] = Field(default=None, alias="json")
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def artifact(self) -> Artifact:
        return Artifact(html=self.html or "", config=self.control_config or {})


class GenerateShaderRequest(BaseModel):
    # Fields stay optional so missing values surface as 400s from the service
    prompt: Optional[str] = None
    model: Optional[str] = None
    creator_id: Optional[str] = None
    parent_shader: Optional[Shader] = None


class RecentShadersResponse(BaseModel):
    shaders: List[Shader]
