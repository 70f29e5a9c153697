# shaderland/routers/shaders.py
# Generation, lookup and listing endpoints

from typing import Optional

from fastapi import APIRouter, Depends, Request

from shaderland.middleware.error_handler import NotFoundError, ValidationError
from shaderland.repositories.shader_repository import ShaderRepository
from shaderland.schemas.shader import GenerateShaderRequest, RecentShadersResponse, Shader
from shaderland.services.generation_service import ShaderGenerationService
from shaderland.utils.client_ip import get_client_ip

router = APIRouter(tags=["Shaders"])


def get_repository() -> ShaderRepository:
    return ShaderRepository()


def get_service(repo: ShaderRepository = Depends(get_repository)) -> ShaderGenerationService:
    return ShaderGenerationService(repo)


@router.post("/generate-shader", response_model=Shader, response_model_by_alias=True)
async def generate_shader(
    body: GenerateShaderRequest,
    request: Request,
    service: ShaderGenerationService = Depends(get_service),
):
    """Generate a new shader (or a remix of `parent_shader`) and store it."""
    peer = request.client.host if request.client else None
    client_ip = get_client_ip({k.lower(): v for k, v in request.headers.items()}, peer=peer)
    return await service.generate(body, client_ip=client_ip)


@router.get("/shader/{shader_id}", response_model=Shader, response_model_by_alias=True)
async def get_shader(shader_id: str, repo: ShaderRepository = Depends(get_repository)):
    shader = await repo.get_by_id(shader_id)
    if shader is None:
        raise NotFoundError("Shader not found", details={"id": shader_id})
    return shader


@router.get("/recent-shaders", response_model=RecentShadersResponse, response_model_by_alias=True)
async def recent_shaders(
    creator_id: Optional[str] = None,
    limit: Optional[str] = None,
    repo: ShaderRepository = Depends(get_repository),
):
    """Newest shaders first, optionally for a single creator."""
    parsed_limit = None
    if limit is not None:
        try:
            parsed_limit = int(limit)
        except ValueError:
            raise ValidationError("Invalid limit parameter", details={"limit": limit})
        if parsed_limit < 1:
            raise ValidationError("Invalid limit parameter", details={"limit": limit})

    shaders = await repo.recent(creator_id=creator_id, limit=parsed_limit)
    return RecentShadersResponse(shaders=shaders)
