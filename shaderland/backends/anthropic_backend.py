"""Anthropic Messages API backend."""

from __future__ import annotations

import anthropic

from shaderland.backends.base import CompletionBackend
from shaderland.middleware.error_handler import UpstreamError


class AnthropicBackend(CompletionBackend):

    def _client(self) -> anthropic.AsyncAnthropic:
        # SDK-level retries off: a failed call is terminal for the request
        return anthropic.AsyncAnthropic(api_key=self._api_key, max_retries=0)

    async def complete(self, prompt: str, max_output_tokens: int) -> str:
        client = self._client()
        try:
            response = await client.messages.create(
                model=self.model_id,
                max_tokens=max_output_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as e:
            raise UpstreamError(str(e), provider=self.provider) from e
        finally:
            await client.close()

        return "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
