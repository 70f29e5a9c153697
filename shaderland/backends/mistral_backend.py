"""Mistral chat completions over plain HTTP."""

from __future__ import annotations

from typing import Optional

import httpx

from shaderland.backends.base import CompletionBackend, ModelSpec
from shaderland.middleware.error_handler import UpstreamError

MISTRAL_CHAT_ENDPOINT = "https://api.mistral.ai/v1/chat/completions"


class MistralBackend(CompletionBackend):

    def __init__(self, spec: ModelSpec, api_key: str, transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(spec, api_key)
        self._transport = transport

    async def complete(self, prompt: str, max_output_tokens: int) -> str:
        payload = {
            "model": self.model_id,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_output_tokens,
        }
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Accept": "application/json",
        }
        # No client-side timeout here; the pipeline deadline bounds the call
        async with httpx.AsyncClient(transport=self._transport, timeout=None) as client:
            try:
                resp = await client.post(MISTRAL_CHAT_ENDPOINT, json=payload, headers=headers)
                resp.raise_for_status()
                data = resp.json()
            except httpx.HTTPStatusError as e:
                raise UpstreamError(
                    f"Mistral API error {e.response.status_code}: {e.response.text[:500]}",
                    provider=self.provider,
                ) from e
            except (httpx.HTTPError, ValueError) as e:
                raise UpstreamError(str(e) or type(e).__name__, provider=self.provider) from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise UpstreamError("Mistral response had no message content", provider=self.provider) from e
        return content if isinstance(content, str) else ""
