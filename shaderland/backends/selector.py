# shaderland/backends/selector.py
# Map a requested model id to a configured completion backend

from __future__ import annotations

from typing import Callable, Dict, Optional

from shaderland.backends.anthropic_backend import AnthropicBackend
from shaderland.backends.base import CompletionBackend, ModelSpec
from shaderland.backends.gemini_backend import GeminiBackend
from shaderland.backends.mistral_backend import MistralBackend
from shaderland.config import Settings, settings as default_settings
from shaderland.constants import SUPPORTED_MODEL_IDS
from shaderland.middleware.error_handler import ConfigurationError, UnsupportedModelError

SUPPORTED_MODELS: Dict[str, ModelSpec] = {
    "claude-3-5-sonnet-20241022": ModelSpec(
        model_id="claude-3-5-sonnet-20241022",
        provider="anthropic",
        credential_setting="ANTHROPIC_API_KEY",
    ),
    "mistral-small-2503": ModelSpec(
        model_id="mistral-small-2503",
        provider="mistral",
        credential_setting="MISTRAL_API_KEY",
    ),
    "gemini-2.0-flash-exp": ModelSpec(
        model_id="gemini-2.0-flash-exp",
        provider="google",
        credential_setting="GOOGLE_GENERATIVE_AI_API_KEY",
    ),
}

BACKEND_CLASSES: Dict[str, Callable[[ModelSpec, str], CompletionBackend]] = {
    "anthropic": AnthropicBackend,
    "mistral": MistralBackend,
    "google": GeminiBackend,
}


def supported_model_ids() -> list[str]:
    return list(SUPPORTED_MODEL_IDS)


def select_backend(model_id: str, config: Optional[Settings] = None) -> CompletionBackend:
    """Return the backend for `model_id`.

    Raises UnsupportedModelError for unknown ids and ConfigurationError when
    the provider's credential is unset. Never substitutes another provider.
    """
    spec = SUPPORTED_MODELS.get(model_id)
    if spec is None:
        raise UnsupportedModelError(model_id)

    config = config or default_settings
    api_key = getattr(config, spec.credential_setting, None)
    if not api_key:
        raise ConfigurationError(provider=spec.provider, setting_name=spec.credential_setting)

    return BACKEND_CLASSES[spec.provider](spec, api_key)
