# shaderland/schemas/controls.py
"""
Typed view of a Control Config.

The model emits controls as loose JSON; this module classifies each
descriptor into one of three kinds by which keys it carries:

- ``options`` present      -> DiscreteChoiceControl (selector widget)
- ``min`` or ``max`` given with a numeric ``value`` -> BoundedNumericControl (slider)
- anything else            -> PlainValueControl (number/color/text field)

Validation happens here, after JSON parsing and before UI binding. The
response parser never calls into this module.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, StrictFloat, StrictInt, StrictStr, ValidationError, field_validator

Number = Union[StrictInt, StrictFloat]
ControlValue = Union[Number, List[Number], StrictStr, List[StrictStr]]


class _ControlBase(BaseModel):
    model_config = ConfigDict(extra="ignore")

    label: Optional[str] = None

    def display_label(self, param_name: str) -> str:
        return self.label or param_name


class BoundedNumericControl(_ControlBase):
    kind: Literal["bounded"] = "bounded"
    value: Union[Number, List[Number]]
    min: Optional[Number] = None
    max: Optional[Number] = None
    step: Optional[Number] = None

    @field_validator("max")
    @classmethod
    def max_not_below_min(cls, v, info):
        lo = info.data.get("min")
        if v is not None and lo is not None and v < lo:
            raise ValueError("max must not be below min")
        return v

    def clamp(self, value: Any) -> Any:
        if isinstance(value, list):
            return [self.clamp(v) for v in value]
        if self.min is not None and value < self.min:
            return self.min
        if self.max is not None and value > self.max:
            return self.max
        return value


class DiscreteChoiceControl(_ControlBase):
    kind: Literal["choice"] = "choice"
    value: Any
    options: Dict[str, Any]

    @field_validator("options", mode="before")
    @classmethod
    def normalize_options(cls, v):
        # Tweakpane also accepts a bare list; label each entry by its value
        if isinstance(v, list):
            return {str(item): item for item in v}
        return v

    @field_validator("options")
    @classmethod
    def options_not_empty(cls, v):
        if not v:
            raise ValueError("options must not be empty")
        return v


class PlainValueControl(_ControlBase):
    kind: Literal["plain"] = "plain"
    value: ControlValue
    step: Optional[Number] = None


Control = Union[BoundedNumericControl, DiscreteChoiceControl, PlainValueControl]
ControlConfig = Dict[str, Dict[str, Control]]


def is_numeric(value: Any) -> bool:
    """True for a number or a non-empty list of numbers; bools are not numbers here."""
    if isinstance(value, list):
        return bool(value) and all(is_numeric(v) for v in value)
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def classify_control(raw: Mapping[str, Any]) -> Control:
    """Build the typed control for one descriptor; raises pydantic.ValidationError."""
    if "options" in raw:
        return DiscreteChoiceControl.model_validate(raw)
    # Bounds on a non-numeric value are ignored
    if ("min" in raw or "max" in raw) and is_numeric(raw.get("value")):
        return BoundedNumericControl.model_validate(raw)
    return PlainValueControl.model_validate(raw)


def validate_control_config(raw: Any) -> Tuple[ControlConfig, List[str]]:
    """Return (typed config, issues). Invalid groups/controls are skipped, order kept."""
    issues: List[str] = []
    config: ControlConfig = {}

    if not isinstance(raw, Mapping):
        return config, [f"control config must be an object, got {type(raw).__name__}"]

    for group_name, params in raw.items():
        if not isinstance(params, Mapping):
            issues.append(f"{group_name}: group must be an object")
            continue
        group: Dict[str, Control] = {}
        for param_name, descriptor in params.items():
            path = f"{group_name}.{param_name}"
            if not isinstance(descriptor, Mapping):
                issues.append(f"{path}: control must be an object")
                continue
            if "value" not in descriptor:
                issues.append(f"{path}: missing value")
                continue
            try:
                group[param_name] = classify_control(descriptor)
            except ValidationError as e:
                first = e.errors()[0]
                issues.append(f"{path}: {first.get('msg', 'invalid control')}")
        config[group_name] = group

    return config, issues
