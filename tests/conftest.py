# tests/conftest.py
# Shared test setup: keep tracing off and provider keys out of the environment

import os

# Must be set before shaderland.config is first imported
os.environ["OTEL_ENABLED"] = "false"
for _key in ("ANTHROPIC_API_KEY", "MISTRAL_API_KEY", "GOOGLE_GENERATIVE_AI_API_KEY"):
    os.environ.pop(_key, None)
