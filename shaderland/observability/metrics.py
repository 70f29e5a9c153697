# shaderland/observability/metrics.py
# minimal prometheus instrumentation for the generation pipeline

from __future__ import annotations

import os
from typing import Optional

from fastapi import APIRouter, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY as DEFAULT_REGISTRY,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

from shaderland.constants import SUPPORTED_MODEL_IDS

# Detect multiprocess mode via environment.
# NOTE: PROMETHEUS_MULTIPROC_DIR must be set BEFORE importing this module in real multi-proc setups.
PROM_MP_DIR = os.environ.get("PROMETHEUS_MULTIPROC_DIR")
HAVE_MP = bool(PROM_MP_DIR and os.path.isdir(PROM_MP_DIR))

REGISTRY: CollectorRegistry = DEFAULT_REGISTRY
if HAVE_MP:
    from prometheus_client.multiprocess import MultiProcessCollector

    REGISTRY = CollectorRegistry()
    MultiProcessCollector(REGISTRY)

# Global references to metrics (initialized on first use)
GENERATION_COUNT: Optional[Counter] = None
GENERATION_LATENCY: Optional[Histogram] = None

router = APIRouter(tags=["Metrics"])


def _ensure_metrics():
    global GENERATION_COUNT, GENERATION_LATENCY
    if GENERATION_COUNT is not None:
        return

    GENERATION_COUNT = Counter(
        "shader_generation_count",
        "Shader generation requests by model and outcome",
        labelnames=("model", "outcome"),
        registry=DEFAULT_REGISTRY,
    )
    # Model calls take seconds to minutes
    GENERATION_LATENCY = Histogram(
        "shader_generation_latency_seconds",
        "End-to-end shader generation latency in seconds",
        labelnames=("model",),
        buckets=(1, 2.5, 5, 10, 20, 30, 60, 120, 300),
        registry=DEFAULT_REGISTRY,
    )


def model_label(model: Optional[str]) -> str:
    # Client-supplied ids must not mint new series
    return model if model in SUPPORTED_MODEL_IDS else "unsupported"


def record_generation(model: str, outcome: str, elapsed: Optional[float] = None) -> None:
    """Count one generation; `outcome` is "ok" or the AppError code."""
    _ensure_metrics()
    label = model_label(model)
    GENERATION_COUNT.labels(label, outcome).inc()
    if elapsed is not None:
        GENERATION_LATENCY.labels(label).observe(elapsed)


@router.get("/metrics", include_in_schema=False)
async def prometheus_metrics() -> Response:
    """// expose /metrics"""
    _ensure_metrics()
    return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)
