# tests/unit/test_prompt_template.py

from shaderland.services.prompt_template import build_prompt


class TestBuildPrompt:

    def test_is_deterministic(self):
        assert build_prompt("plasma waves") == build_prompt("plasma waves")

    def test_request_is_the_tail(self):
        prompt = build_prompt("a spinning tunnel")
        assert prompt.endswith("## User Request:\na spinning tunnel")

    def test_mentions_the_output_contract(self):
        prompt = build_prompt("x")
        for marker in ("<SHADER_HTML>", "</SHADER_HTML>", "<TWEAKPANE_CONFIG>", "</TWEAKPANE_CONFIG>"):
            assert marker in prompt
        assert "shader-canvas" in prompt
        assert "UPDATE_PARAMS" in prompt

    def test_root_prompt_has_no_parent_section(self):
        assert "Existing shader to adapt" not in build_prompt("x")

    def test_parent_artifact_is_embedded_before_request(self):
        parent = {
            "html": "<html><body>PARENT_MARKER</body></html>",
            "config": {"Controls": {"speed": {"value": 2, "min": 0, "max": 10}}},
        }
        prompt = build_prompt("make it red", parent)
        assert "PARENT_MARKER" in prompt
        assert '"speed"' in prompt
        assert prompt.index("Existing shader to adapt") < prompt.index("## User Request:")
        assert prompt.endswith("make it red")

    def test_request_text_is_not_escaped(self):
        request = 'use "quotes" & <tags> {braces}'
        assert build_prompt(request).endswith(request)
