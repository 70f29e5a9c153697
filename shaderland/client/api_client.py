# shaderland/client/api_client.py
# Typed async client for the shader HTTP API

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from shaderland.client.session import ClientSession
from shaderland.schemas.shader import Shader

logger = logging.getLogger(__name__)

DOCK_RECENT_LIMIT = 15


class ShaderApiError(Exception):
    """Non-2xx response from the shader API."""

    def __init__(self, status: int, code: str, message: str):
        self.status = status
        self.code = code
        self.message = message
        super().__init__(f"{status} {code}: {message}")


class ShaderApiClient:
    def __init__(
        self,
        base_url: str,
        session: ClientSession,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session
        self._transport = transport
        # generation has no client-side deadline by default
        self._timeout = timeout

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, transport=self._transport, timeout=self._timeout)

    @staticmethod
    def _raise_for_error(resp: httpx.Response) -> None:
        if resp.is_success:
            return
        code, message = "HTTP_ERROR", resp.reason_phrase
        try:
            error = resp.json().get("error", {})
            code = error.get("code", code)
            message = error.get("message", message)
        except ValueError:
            pass
        raise ShaderApiError(resp.status_code, code, message)

    async def generate(self, prompt: str, parent: Optional[Shader] = None, new_project: bool = False) -> Shader:
        """Generate a shader; with `new_project` the parent is left out and a new lineage starts."""
        body: Dict[str, Any] = {
            "prompt": prompt,
            "model": self.session.selected_model,
            "creator_id": self.session.creator_id,
        }
        if parent is not None and not new_project:
            body["parent_shader"] = parent.model_dump(mode="json", by_alias=True)

        async with self._client() as client:
            resp = await client.post("/api/generate-shader", json=body)
        self._raise_for_error(resp)
        shader = Shader.model_validate(resp.json())
        if self.session.debug_mode:
            logger.info(f"Generated shader {shader.id} (lineage {shader.lineage_id}) with {body['model']}")
        return shader

    async def get_shader(self, shader_id: str) -> Shader:
        async with self._client() as client:
            resp = await client.get(f"/api/shader/{shader_id}")
        self._raise_for_error(resp)
        return Shader.model_validate(resp.json())

    async def recent(self, limit: int = DOCK_RECENT_LIMIT, mine_only: bool = False) -> List[Shader]:
        params: Dict[str, Any] = {"limit": limit}
        if mine_only:
            params["creator_id"] = self.session.creator_id
        async with self._client() as client:
            resp = await client.get("/api/recent-shaders", params=params)
        self._raise_for_error(resp)
        return [Shader.model_validate(s) for s in resp.json().get("shaders", [])]
