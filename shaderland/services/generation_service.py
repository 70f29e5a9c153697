# shaderland/services/generation_service.py

import time
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from opentelemetry import trace

from shaderland.backends.base import CompletionBackend, call_with_deadline
from shaderland.backends.selector import select_backend
from shaderland.config import Settings, settings as default_settings
from shaderland.middleware.error_handler import (
    AppError,
    InvalidConfigJSONError,
    MalformedResponseError,
    ValidationError,
)
from shaderland.observability.metrics import record_generation
from shaderland.repositories.shader_repository import ShaderRepository
from shaderland.schemas.shader import GenerateShaderRequest, Shader
from shaderland.services.lineage import attach_lineage, utcnow
from shaderland.services.prompt_template import build_prompt
from shaderland.services.response_parser import parse_response
from shaderland.utils.ids import generate_id
from shaderland.utils.logger import log_info, log_raw_output

tracer = trace.get_tracer(__name__)

BackendSelector = Callable[[str, Settings], CompletionBackend]


class ShaderGenerationService:
    """Prompt -> model -> parsed artifact -> persisted shader, one request at a time.

    Every failure is terminal for the request; nothing is retried.
    """

    def __init__(
        self,
        repository: ShaderRepository,
        backend_selector: BackendSelector = select_backend,
        config: Optional[Settings] = None,
        id_factory: Callable[[], str] = generate_id,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._repo = repository
        self._select_backend = backend_selector
        self._config = config or default_settings
        self._id_factory = id_factory
        self._clock = clock

    async def generate(self, request: GenerateShaderRequest, client_ip: Optional[str] = None) -> Shader:
        model_id = request.model or self._config.DEFAULT_MODEL
        started = time.perf_counter()
        try:
            shader = await self._generate(request, model_id, client_ip)
        except AppError as e:
            record_generation(model_id, e.error_code)
            raise
        record_generation(model_id, "ok", time.perf_counter() - started)
        return shader

    async def _generate(self, request: GenerateShaderRequest, model_id: str, client_ip: Optional[str]) -> Shader:
        prompt = (request.prompt or "").strip()
        creator_id = (request.creator_id or "").strip()
        if not prompt:
            raise ValidationError("Prompt is required")
        if not creator_id:
            raise ValidationError("creator_id is required")

        # Credentials are checked before anything touches the network
        backend = self._select_backend(model_id, self._config)

        parent = await self._resolve_parent(request.parent_shader)
        prompt_text = build_prompt(request.prompt, parent.artifact().model_dump() if parent else None)

        log_info(
            f"Generating shader: model={model_id} creator={creator_id} "
            f"parent={parent.id if parent else None} prompt_chars={len(prompt_text)}"
        )
        with tracer.start_as_current_span("shader.model_call") as span:
            span.set_attribute("shader.model", model_id)
            span.set_attribute("shader.provider", backend.provider)
            raw_text = await call_with_deadline(
                backend.complete(prompt_text, self._config.MODEL_MAX_OUTPUT_TOKENS),
                self._config.MODEL_TIMEOUT_SECONDS,
                provider=backend.provider,
            )
            span.set_attribute("shader.response_chars", len(raw_text))

        try:
            artifact = parse_response(raw_text)
        except MalformedResponseError as e:
            log_raw_output(f"Malformed response from {model_id} (missing {', '.join(e.missing)})", e.raw_text)
            raise
        except InvalidConfigJSONError as e:
            log_raw_output(f"Invalid config JSON from {model_id} ({e.reason})", e.raw_text)
            raise

        metadata: Dict[str, Any] = {"model": model_id}
        if client_ip:
            metadata["client_ip"] = client_ip

        shader = attach_lineage(
            artifact,
            creator_id=creator_id,
            prompt=request.prompt,
            parent=parent,
            extra_metadata=metadata,
            id_factory=self._id_factory,
            clock=self._clock,
        )
        await self._repo.insert(shader)
        log_info(f"Generated shader id={shader.id} lineage={shader.lineage_id} html_chars={len(shader.html or '')}")
        return shader

    async def _resolve_parent(self, supplied: Optional[Shader]) -> Optional[Shader]:
        """Use the stored parent row; client-supplied lineage fields are not trusted."""
        if supplied is None:
            return None
        stored = await self._repo.get_by_id(supplied.id)
        if stored is None:
            raise ValidationError("Unknown parent shader", details={"parent_id": supplied.id})
        return stored
