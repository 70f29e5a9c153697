# tests/unit/test_controls.py

import pytest

from shaderland.bridge.controls import ControlPanel
from shaderland.bridge.renderer import RendererUniforms
from shaderland.schemas.controls import (
    BoundedNumericControl,
    DiscreteChoiceControl,
    PlainValueControl,
    validate_control_config,
)

SAMPLE_CONFIG = {
    "Controls": {
        "speed": {"value": 1.0, "min": 0, "max": 5, "step": 0.1, "label": "Speed"},
        "color": {"value": "#ff0000"},
        "mode": {"value": "waves", "options": {"Waves": "waves", "Rings": "rings"}},
    },
    "Advanced": {
        "offset": {"value": [0.0, 0.5]},
        "count": {"value": 3, "options": [1, 3, 5]},
    },
}


class TestValidateControlConfig:

    def test_classifies_each_kind(self):
        config, issues = validate_control_config(SAMPLE_CONFIG)
        assert issues == []
        assert isinstance(config["Controls"]["speed"], BoundedNumericControl)
        assert isinstance(config["Controls"]["color"], PlainValueControl)
        assert isinstance(config["Controls"]["mode"], DiscreteChoiceControl)
        assert isinstance(config["Advanced"]["offset"], PlainValueControl)

    def test_list_options_are_normalised(self):
        config, _ = validate_control_config(SAMPLE_CONFIG)
        assert config["Advanced"]["count"].options == {"1": 1, "3": 3, "5": 5}

    def test_order_is_preserved(self):
        config, _ = validate_control_config(SAMPLE_CONFIG)
        assert list(config) == ["Controls", "Advanced"]
        assert list(config["Controls"]) == ["speed", "color", "mode"]

    def test_invalid_controls_are_skipped_and_reported(self):
        raw = {
            "Controls": {
                "ok": {"value": 1},
                "novalue": {"min": 0, "max": 1},
                "badrange": {"value": 1, "min": 5, "max": 1},
                "emptyopts": {"value": 1, "options": []},
                "notobj": 3,
            },
            "Broken": [1, 2],
        }
        config, issues = validate_control_config(raw)
        assert list(config["Controls"]) == ["ok"]
        assert "Broken" not in config
        assert len(issues) == 5

    def test_bounds_on_non_numeric_value_are_ignored(self):
        config, issues = validate_control_config({"G": {"tint": {"value": "#ff0000", "min": 0, "max": 1}}})
        assert issues == []
        tint = config["G"]["tint"]
        assert isinstance(tint, PlainValueControl)
        assert tint.value == "#ff0000"

    def test_non_object_config(self):
        config, issues = validate_control_config(["x"])
        assert config == {}
        assert issues

    def test_bounded_clamp(self):
        control = BoundedNumericControl(value=1, min=0, max=2)
        assert control.clamp(5) == 2
        assert control.clamp(-1) == 0
        assert control.clamp([3, 1]) == [2, 1]


class TestControlPanel:

    def test_binds_in_config_order(self):
        panel = ControlPanel.from_raw(SAMPLE_CONFIG)
        assert [c.name for c in panel.controls] == ["speed", "color", "mode", "offset", "count"]
        assert [c.widget for c in panel.controls] == ["slider", "input", "list", "input", "list"]
        assert panel.find("speed").label == "Speed"
        assert panel.find("color").label == "color"

    def test_params_are_flattened(self):
        panel = ControlPanel.from_raw(SAMPLE_CONFIG)
        assert panel.params() == {
            "speed": 1.0,
            "color": "#ff0000",
            "mode": "waves",
            "offset": [0.0, 0.5],
            "count": 3,
        }

    def test_later_group_wins_on_duplicate_name(self):
        panel = ControlPanel.from_raw({"A": {"x": {"value": 1}}, "B": {"x": {"value": 2}}})
        assert panel.params() == {"x": 2}

    def test_set_clamps_and_notifies(self):
        changes = []
        panel = ControlPanel.from_raw(SAMPLE_CONFIG, on_change=lambda name, value: changes.append((name, value)))
        assert panel.set("speed", 9) == 5
        assert changes == [("speed", 5)]
        assert panel.params()["speed"] == 5

    def test_choice_rejects_unknown_value(self):
        panel = ControlPanel.from_raw(SAMPLE_CONFIG)
        with pytest.raises(ValueError):
            panel.set("mode", "spirals")
        assert panel.params()["mode"] == "waves"

    def test_bounded_rejects_non_numeric_value(self):
        panel = ControlPanel.from_raw(SAMPLE_CONFIG)
        with pytest.raises(ValueError):
            panel.set("speed", "fast")
        assert panel.params()["speed"] == 1.0

    def test_edits_do_not_mutate_the_config(self):
        config, _ = validate_control_config(SAMPLE_CONFIG)
        panel = ControlPanel(config)
        panel.set("offset", [1.0, 1.0])
        assert config["Advanced"]["offset"].value == [0.0, 0.5]


class TestRendererUniforms:

    def test_applies_known_keys_only(self):
        uniforms = RendererUniforms({"speed": 1.0, "color": "#000000"})
        applied = uniforms.handle_message({"type": "UPDATE_PARAMS", "params": {"speed": 2.0, "unknown": 7}})
        assert applied
        assert uniforms.snapshot() == {"speed": 2.0, "color": "#000000"}

    def test_missing_keys_keep_previous_value(self):
        uniforms = RendererUniforms({"speed": 1.0, "color": "#000000"})
        uniforms.handle_message({"type": "UPDATE_PARAMS", "params": {"color": "#ffffff"}})
        uniforms.handle_message({"type": "UPDATE_PARAMS", "params": {"speed": 3.0}})
        assert uniforms.snapshot() == {"speed": 3.0, "color": "#ffffff"}

    def test_other_messages_are_ignored(self):
        uniforms = RendererUniforms({"speed": 1.0})
        assert not uniforms.handle_message({"type": "RESIZE", "params": {"speed": 9}})
        assert not uniforms.handle_message("UPDATE_PARAMS")
        assert uniforms["speed"] == 1.0
        assert uniforms.applied_messages == 0
