# shaderland/backends/base.py
# Completion capability shared by every provider backend

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Awaitable, TypeVar

from shaderland.middleware.error_handler import UpstreamError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ModelSpec:
    """One supported provider+model pair and the setting holding its credential."""
    model_id: str
    provider: str
    credential_setting: str


class CompletionBackend(ABC):
    """Send a prompt, get text back. Failures surface as UpstreamError."""

    def __init__(self, spec: ModelSpec, api_key: str):
        self.spec = spec
        self._api_key = api_key

    @property
    def model_id(self) -> str:
        return self.spec.model_id

    @property
    def provider(self) -> str:
        return self.spec.provider

    @abstractmethod
    async def complete(self, prompt: str, max_output_tokens: int) -> str:
        ...

    def __repr__(self) -> str:
        # never include the credential
        return f"{type(self).__name__}(model={self.model_id!r})"


async def call_with_deadline(awaitable: Awaitable[T], seconds: float, provider: str = "") -> T:
    """Await a backend call, mapping deadline expiry to UpstreamError(reason="Timeout")."""
    try:
        return await asyncio.wait_for(awaitable, timeout=seconds)
    except asyncio.TimeoutError:
        logger.error(f"Timeout ({seconds}s) exceeded waiting for {provider or 'model backend'}")
        raise UpstreamError(
            f"Model backend timed out after {seconds:g}s",
            provider=provider,
            reason="Timeout",
        )
