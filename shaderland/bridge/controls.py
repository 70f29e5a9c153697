# shaderland/bridge/controls.py
# UI-side bindings built from a Control Config

from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Dict, List, Optional

from shaderland.schemas.controls import (
    BoundedNumericControl,
    Control,
    ControlConfig,
    DiscreteChoiceControl,
    is_numeric,
    validate_control_config,
)

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[str, Any], None]

WIDGET_BY_KIND = {
    "bounded": "slider",
    "choice": "list",
    "plain": "input",
}


class BoundControl:
    """One interactive control bound to a parameter."""

    def __init__(self, group: str, name: str, control: Control):
        self.group = group
        self.name = name
        self.control = control
        self.value = copy.deepcopy(control.value)

    @property
    def kind(self) -> str:
        return self.control.kind

    @property
    def widget(self) -> str:
        return WIDGET_BY_KIND[self.control.kind]

    @property
    def label(self) -> str:
        return self.control.display_label(self.name)

    def coerce(self, value: Any) -> Any:
        """Return the value this control would hold after an edit to `value`."""
        if isinstance(self.control, BoundedNumericControl):
            if not is_numeric(value):
                raise ValueError(f"{self.name}: {value!r} is not a number")
            return self.control.clamp(value)
        if isinstance(self.control, DiscreteChoiceControl):
            if value not in self.control.options.values():
                raise ValueError(f"{self.name}: {value!r} is not one of the options")
        return value

    def set_value(self, value: Any) -> Any:
        self.value = self.coerce(value)
        return self.value


class ControlPanel:
    """All bound controls for one artifact, in config order.

    Every successful edit calls `on_change(name, value)`.
    """

    def __init__(self, config: ControlConfig, on_change: Optional[ChangeCallback] = None):
        self.controls: List[BoundControl] = [
            BoundControl(group, name, control)
            for group, params in config.items()
            for name, control in params.items()
        ]
        self.on_change = on_change

    @classmethod
    def from_raw(cls, raw: Any, on_change: Optional[ChangeCallback] = None) -> "ControlPanel":
        config, issues = validate_control_config(raw)
        for issue in issues:
            logger.warning(f"Skipping control: {issue}")
        return cls(config, on_change=on_change)

    def params(self) -> Dict[str, Any]:
        """Flat name -> value mapping; a later group's duplicate name wins."""
        return {c.name: copy.deepcopy(c.value) for c in self.controls}

    def find(self, name: str, group: Optional[str] = None) -> BoundControl:
        matches = [c for c in self.controls if c.name == name and (group is None or c.group == group)]
        if not matches:
            raise KeyError(name)
        return matches[-1]

    def set(self, name: str, value: Any, group: Optional[str] = None) -> Any:
        control = self.find(name, group)
        applied = control.set_value(value)
        if self.on_change is not None:
            self.on_change(name, applied)
        return applied

    def __len__(self) -> int:
        return len(self.controls)
