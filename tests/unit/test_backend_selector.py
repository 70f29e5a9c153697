# tests/unit/test_backend_selector.py

import asyncio
import json
from types import SimpleNamespace

import httpx
import pytest

from shaderland.backends.anthropic_backend import AnthropicBackend
from shaderland.backends import gemini_backend
from shaderland.backends.base import call_with_deadline
from shaderland.backends.gemini_backend import GeminiBackend
from shaderland.backends.mistral_backend import MistralBackend
from shaderland.backends.selector import SUPPORTED_MODELS, select_backend, supported_model_ids
from shaderland.config import Settings
from shaderland.constants import SUPPORTED_MODEL_IDS
from shaderland.middleware.error_handler import ConfigurationError, UnsupportedModelError, UpstreamError


def make_settings(**keys) -> Settings:
    base = {
        "ANTHROPIC_API_KEY": None,
        "MISTRAL_API_KEY": None,
        "GOOGLE_GENERATIVE_AI_API_KEY": None,
    }
    base.update(keys)
    return Settings(_env_file=None, **base)


class TestSelectBackend:

    def test_supported_ids(self):
        assert supported_model_ids() == [
            "claude-3-5-sonnet-20241022",
            "mistral-small-2503",
            "gemini-2.0-flash-exp",
        ]

    @pytest.mark.parametrize(
        "model_id,setting,backend_cls",
        [
            ("claude-3-5-sonnet-20241022", "ANTHROPIC_API_KEY", AnthropicBackend),
            ("mistral-small-2503", "MISTRAL_API_KEY", MistralBackend),
            ("gemini-2.0-flash-exp", "GOOGLE_GENERATIVE_AI_API_KEY", GeminiBackend),
        ],
    )
    def test_selects_configured_backend(self, model_id, setting, backend_cls):
        backend = select_backend(model_id, make_settings(**{setting: "secret-key"}))
        assert isinstance(backend, backend_cls)
        assert backend.model_id == model_id
        assert "secret-key" not in repr(backend)

    def test_unknown_model(self):
        with pytest.raises(UnsupportedModelError) as exc:
            select_backend("gpt-4", make_settings(ANTHROPIC_API_KEY="k"))
        assert exc.value.status_code == 400

    def test_missing_credential_never_falls_back(self):
        # another provider is configured, but the requested one is not
        config = make_settings(ANTHROPIC_API_KEY="k")
        with pytest.raises(ConfigurationError) as exc:
            select_backend("mistral-small-2503", config)
        assert exc.value.message == "MISTRAL_API_KEY not configured"
        assert exc.value.status_code == 500

    def test_blank_credential_counts_as_missing(self):
        with pytest.raises(ConfigurationError):
            select_backend("gemini-2.0-flash-exp", make_settings(GOOGLE_GENERATIVE_AI_API_KEY="   "))

    def test_every_model_has_a_backend(self):
        for spec in SUPPORTED_MODELS.values():
            backend = select_backend(spec.model_id, make_settings(**{spec.credential_setting: "k"}))
            assert backend.provider == spec.provider

    def test_table_matches_shared_ids(self):
        assert tuple(SUPPORTED_MODELS) == SUPPORTED_MODEL_IDS


class TestMistralBackend:

    @pytest.mark.asyncio
    async def test_posts_chat_completion(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"choices": [{"message": {"content": "hello"}}]})

        backend = MistralBackend(SUPPORTED_MODELS["mistral-small-2503"], "key-1", transport=httpx.MockTransport(handler))
        text = await backend.complete("draw a circle", 4096)

        assert text == "hello"
        assert seen["auth"] == "Bearer key-1"
        assert seen["body"]["model"] == "mistral-small-2503"
        assert seen["body"]["max_tokens"] == 4096
        assert seen["body"]["messages"] == [{"role": "user", "content": "draw a circle"}]

    @pytest.mark.asyncio
    async def test_http_error_is_upstream_error(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(401, json={"message": "Unauthorized"}))
        backend = MistralBackend(SUPPORTED_MODELS["mistral-small-2503"], "bad", transport=transport)
        with pytest.raises(UpstreamError) as exc:
            await backend.complete("x", 10)
        assert "401" in exc.value.message
        assert exc.value.provider == "mistral"

    @pytest.mark.asyncio
    async def test_missing_content_is_upstream_error(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"choices": []}))
        backend = MistralBackend(SUPPORTED_MODELS["mistral-small-2503"], "k", transport=transport)
        with pytest.raises(UpstreamError):
            await backend.complete("x", 10)


class FakeGenaiClient:
    """Stands in for genai.Client; records whether the async client was closed."""

    instances = []

    def __init__(self, api_key, reply="<SHADER_HTML>x</SHADER_HTML>", error=None):
        self.api_key = api_key
        self.closed = False
        self.reply = reply
        self.error = error
        self.aio = SimpleNamespace(models=SimpleNamespace(generate_content=self._generate), aclose=self._aclose)
        FakeGenaiClient.instances.append(self)

    async def _generate(self, model, contents, config):
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.reply)

    async def _aclose(self):
        self.closed = True


class TestGeminiBackend:

    @pytest.fixture(autouse=True)
    def fake_client(self, monkeypatch):
        FakeGenaiClient.instances = []
        monkeypatch.setattr(gemini_backend.genai, "Client", FakeGenaiClient)

    @pytest.mark.asyncio
    async def test_client_is_closed_after_call(self):
        backend = GeminiBackend(SUPPORTED_MODELS["gemini-2.0-flash-exp"], "g-key")
        assert await backend.complete("x", 10) == "<SHADER_HTML>x</SHADER_HTML>"
        assert [c.closed for c in FakeGenaiClient.instances] == [True]
        assert FakeGenaiClient.instances[0].api_key == "g-key"

    @pytest.mark.asyncio
    async def test_client_is_closed_after_failure(self, monkeypatch):
        def failing(api_key):
            return FakeGenaiClient(api_key, error=httpx.ConnectError("refused"))

        monkeypatch.setattr(gemini_backend.genai, "Client", failing)
        backend = GeminiBackend(SUPPORTED_MODELS["gemini-2.0-flash-exp"], "g-key")
        with pytest.raises(UpstreamError):
            await backend.complete("x", 10)
        assert [c.closed for c in FakeGenaiClient.instances] == [True]


class TestCallWithDeadline:

    @pytest.mark.asyncio
    async def test_returns_result_in_time(self):
        async def quick():
            return "done"

        assert await call_with_deadline(quick(), 1.0) == "done"

    @pytest.mark.asyncio
    async def test_timeout_is_upstream_error(self):
        async def slow():
            await asyncio.sleep(5)
            return "late"

        with pytest.raises(UpstreamError) as exc:
            await call_with_deadline(slow(), 0.05, provider="anthropic")
        assert exc.value.reason == "Timeout"
        assert exc.value.details == {"provider": "anthropic", "reason": "Timeout"}
