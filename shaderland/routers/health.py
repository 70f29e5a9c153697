# shaderland/routers/health.py
# Liveness and readiness probes for load balancers

import time
import logging
from typing import Dict, Any
from fastapi import APIRouter, Response, status
from pydantic import BaseModel
from shaderland.db.base import check_connection
from shaderland.middleware.error_handler import StorageError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


class HealthStatus(BaseModel):
    """Health check response model."""
    status: str  # "healthy", "unhealthy"
    timestamp: float
    version: str = "1.0.0"
    checks: Dict[str, Dict[str, Any]] = {}


class ComponentHealth(BaseModel):
    status: str
    latency_ms: float = 0.0
    message: str = ""


async def check_database_health() -> ComponentHealth:
    """Check that the shader store answers a trivial query."""
    start = time.time()

    try:
        await check_connection()
    except StorageError as e:
        logger.error(f"Database health check failed: {e.message}")
        return ComponentHealth(
            status="unhealthy",
            latency_ms=(time.time() - start) * 1000,
            message=e.message
        )

    return ComponentHealth(status="healthy", latency_ms=(time.time() - start) * 1000)


@router.get("/health", response_model=HealthStatus)
async def health_check(response: Response):
    """Full health check: status of every dependency."""
    db_health = await check_database_health()
    checks = {
        "database": {
            "status": db_health.status,
            "latency_ms": round(db_health.latency_ms, 2),
            "message": db_health.message,
        }
    }

    overall_status = "healthy"
    if db_health.status == "unhealthy":
        overall_status = "unhealthy"
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthStatus(status=overall_status, timestamp=time.time(), checks=checks)


@router.get("/health/live")
async def liveness_probe():
    """Returns 200 while the process is up; no dependency checks."""
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_probe(response: Response):
    """Returns 200 only when the database answers."""
    db_health = await check_database_health()

    if db_health.status == "unhealthy":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {
            "status": "not_ready",
            "reason": db_health.message
        }

    return {"status": "ready"}
