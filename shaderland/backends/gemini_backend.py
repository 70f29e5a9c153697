"""Google Gemini backend (google-genai SDK)."""

from __future__ import annotations

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from shaderland.backends.base import CompletionBackend
from shaderland.middleware.error_handler import UpstreamError


class GeminiBackend(CompletionBackend):

    async def complete(self, prompt: str, max_output_tokens: int) -> str:
        client = genai.Client(api_key=self._api_key)
        try:
            response = await client.aio.models.generate_content(
                model=self.model_id,
                contents=prompt,
                config=types.GenerateContentConfig(max_output_tokens=max_output_tokens),
            )
        except (genai_errors.APIError, httpx.HTTPError) as e:
            raise UpstreamError(str(e), provider=self.provider) from e
        finally:
            await client.aio.aclose()

        # .text is None when the candidate was blocked or empty
        return response.text or ""
