# shaderland/bridge/renderer.py
# Renderer side of the UPDATE_PARAMS protocol

from typing import Any, Dict, Mapping

from shaderland.constants import UPDATE_PARAMS_MESSAGE


class RendererUniforms:
    """Uniform state a renderer samples each frame.

    Only keys declared at construction are applied; missing keys keep their
    previous value; messages of any other type are ignored.
    """

    def __init__(self, defaults: Mapping[str, Any]):
        self._values: Dict[str, Any] = dict(defaults)
        self.applied_messages = 0

    def handle_message(self, message: Any) -> bool:
        if not isinstance(message, Mapping) or message.get("type") != UPDATE_PARAMS_MESSAGE:
            return False
        params = message.get("params")
        if not isinstance(params, Mapping):
            return False
        for key, value in params.items():
            if key in self._values:
                self._values[key] = value
        self.applied_messages += 1
        return True

    def snapshot(self) -> Dict[str, Any]:
        return dict(self._values)

    def __getitem__(self, key: str) -> Any:
        return self._values[key]
