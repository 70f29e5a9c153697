# shaderland/utils/ids.py
# Collision-resistant identifiers for shaders and anonymous creators

from __future__ import annotations

import secrets

from shaderland.constants import ID_ALPHABET, ID_LENGTH


def generate_id(length: int = ID_LENGTH, alphabet: str = ID_ALPHABET) -> str:
    """Generate a URL-safe random ID (62**15 ≈ 7.7e26 possibilities at the default length)."""
    return ''.join(secrets.choice(alphabet) for _ in range(length))
