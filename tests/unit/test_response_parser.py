# tests/unit/test_response_parser.py

import pytest

from shaderland.middleware.error_handler import InvalidConfigJSONError, MalformedResponseError
from shaderland.services.response_parser import parse_response

HTML_DOC = "<!DOCTYPE html><html><body><canvas id=\"shader-canvas\"></canvas></body></html>"


def wrap(html: str, config: str) -> str:
    return f"<SHADER_HTML>{html}</SHADER_HTML>\n<TWEAKPANE_CONFIG>{config}</TWEAKPANE_CONFIG>"


class TestParseResponse:

    def test_extracts_both_blocks_ignoring_commentary(self):
        raw = "Sure! Here is your shader:\n\n" + wrap(
            f"\n  {HTML_DOC}\n", '{"Controls": {"speed": {"value": 1, "min": 0, "max": 5}}}'
        ) + "\n\nEnjoy the effect."
        artifact = parse_response(raw)
        assert artifact.html == HTML_DOC
        assert artifact.config == {"Controls": {"speed": {"value": 1, "min": 0, "max": 5}}}

    def test_blocks_in_reverse_order(self):
        raw = '<TWEAKPANE_CONFIG>{"Controls": {}}</TWEAKPANE_CONFIG> then <SHADER_HTML>x</SHADER_HTML>'
        artifact = parse_response(raw)
        assert artifact.html == "x"
        assert artifact.config == {"Controls": {}}

    def test_config_key_order_is_preserved(self):
        raw = wrap(HTML_DOC, '{"B": {"z": {"value": 1}, "a": {"value": 2}}, "A": {}}')
        artifact = parse_response(raw)
        assert list(artifact.config.keys()) == ["B", "A"]
        assert list(artifact.config["B"].keys()) == ["z", "a"]

    def test_missing_html_block(self):
        with pytest.raises(MalformedResponseError) as exc:
            parse_response('<TWEAKPANE_CONFIG>{}</TWEAKPANE_CONFIG>')
        assert exc.value.missing == ("html",)
        assert exc.value.status_code == 500
        assert exc.value.message == "Invalid response format from AI model"

    def test_missing_config_block(self):
        with pytest.raises(MalformedResponseError) as exc:
            parse_response(f"<SHADER_HTML>{HTML_DOC}</SHADER_HTML>")
        assert exc.value.missing == ("config",)

    def test_plain_text_reply_is_malformed(self):
        raw = "I cannot help with that."
        with pytest.raises(MalformedResponseError) as exc:
            parse_response(raw)
        assert exc.value.missing == ("html", "config")
        assert exc.value.raw_text == raw

    def test_unclosed_block_is_malformed(self):
        with pytest.raises(MalformedResponseError):
            parse_response('<SHADER_HTML>abc<TWEAKPANE_CONFIG>{}</TWEAKPANE_CONFIG>')

    def test_empty_html_is_malformed(self):
        with pytest.raises(MalformedResponseError):
            parse_response(wrap("   \n ", "{}"))

    def test_invalid_json(self):
        with pytest.raises(InvalidConfigJSONError) as exc:
            parse_response(wrap(HTML_DOC, "{Controls: {speed: 1}}"))
        assert exc.value.message == "Invalid TweakPane configuration format"
        assert exc.value.error_code == "INVALID_CONFIG_JSON"

    def test_non_object_json(self):
        with pytest.raises(InvalidConfigJSONError):
            parse_response(wrap(HTML_DOC, "[1, 2, 3]"))

    def test_nan_is_rejected(self):
        with pytest.raises(InvalidConfigJSONError):
            parse_response(wrap(HTML_DOC, '{"Controls": {"x": {"value": NaN}}}'))

    def test_first_block_wins(self):
        raw = wrap("first", '{"n": 1}') + wrap("second", '{"n": 2}')
        artifact = parse_response(raw)
        assert artifact.html == "first"
        assert artifact.config == {"n": 1}

    def test_html_is_not_rewritten(self):
        html = "<html><script>const s = `<b>${1 < 2}</b>`;</script></html>"
        assert parse_response(wrap(html, "{}")).html == html
