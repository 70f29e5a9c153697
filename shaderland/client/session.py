# shaderland/client/session.py
# Client-side session: creator id, selected model and debug flag

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional, Protocol

from shaderland.config import settings
from shaderland.constants import SUPPORTED_MODEL_IDS
from shaderland.utils.ids import generate_id

logger = logging.getLogger(__name__)

USER_ID_KEY = "shaderland_user_id"
SELECTED_MODEL_KEY = "shaderland_selected_model"
DEBUG_MODE_KEY = "shaderland_debug_mode"


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class InMemoryStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStore:
    """String key-value pairs in one JSON file, read on first use."""

    def __init__(self, path: str):
        self.path = path
        self._data: Optional[Dict[str, str]] = None

    def _load(self) -> Dict[str, str]:
        if self._data is None:
            if os.path.exists(self.path):
                with open(self.path, "r", encoding="utf-8") as f:
                    loaded = json.load(f)
                self._data = {str(k): str(v) for k, v in loaded.items()} if isinstance(loaded, dict) else {}
            else:
                self._data = {}
        return self._data

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)


class ClientSession:
    """Explicit per-user client state, passed into the API client."""

    def __init__(self, store: KeyValueStore, default_model: Optional[str] = None):
        self._store = store
        self._default_model = default_model or settings.DEFAULT_MODEL

    @property
    def creator_id(self) -> str:
        """Stable user id, created and persisted on first access."""
        user_id = self._store.get(USER_ID_KEY)
        if not user_id:
            user_id = generate_id()
            self._store.set(USER_ID_KEY, user_id)
            logger.info(f"Created client user id {user_id}")
        return user_id

    @property
    def selected_model(self) -> str:
        stored = self._store.get(SELECTED_MODEL_KEY)
        if stored and stored in SUPPORTED_MODEL_IDS:
            return stored
        return self._default_model

    @selected_model.setter
    def selected_model(self, model_id: str) -> None:
        if model_id not in SUPPORTED_MODEL_IDS:
            raise ValueError(f"Unsupported model: {model_id}")
        self._store.set(SELECTED_MODEL_KEY, model_id)

    @property
    def debug_mode(self) -> bool:
        return self._store.get(DEBUG_MODE_KEY) == "true"

    @debug_mode.setter
    def debug_mode(self, enabled: bool) -> None:
        self._store.set(DEBUG_MODE_KEY, "true" if enabled else "false")

    def snapshot(self) -> Dict[str, Any]:
        return {
            "creator_id": self.creator_id,
            "selected_model": self.selected_model,
            "debug_mode": self.debug_mode,
        }
