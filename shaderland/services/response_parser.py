# shaderland/services/response_parser.py
# Extract the HTML and control-config blocks from raw model output

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict

from shaderland.constants import CONFIG_CLOSE_TAG, CONFIG_OPEN_TAG, HTML_CLOSE_TAG, HTML_OPEN_TAG
from shaderland.middleware.error_handler import InvalidConfigJSONError, MalformedResponseError
from shaderland.schemas.shader import Artifact

logger = logging.getLogger(__name__)

# Non-greedy so commentary between or after the blocks is never captured
HTML_BLOCK_RE = re.compile(re.escape(HTML_OPEN_TAG) + r"([\s\S]*?)" + re.escape(HTML_CLOSE_TAG))
CONFIG_BLOCK_RE = re.compile(re.escape(CONFIG_OPEN_TAG) + r"([\s\S]*?)" + re.escape(CONFIG_CLOSE_TAG))


def _reject_constant(name: str):
    # NaN / Infinity are not JSON; browsers reject them too
    raise ValueError(f"non-standard JSON constant {name}")


def _load_config(text: str) -> Dict[str, Any]:
    try:
        parsed = json.loads(text, parse_constant=_reject_constant)
    except ValueError as e:  # JSONDecodeError is a ValueError
        raise InvalidConfigJSONError(raw_text=text, reason=str(e)) from e
    if not isinstance(parsed, dict):
        raise InvalidConfigJSONError(raw_text=text, reason=f"expected a JSON object, got {type(parsed).__name__}")
    return parsed


def parse_response(raw_text: str) -> Artifact:
    """Split a completion into {html, config}.

    Raises MalformedResponseError when either delimited block is absent and
    InvalidConfigJSONError when the config block is not a JSON object. The
    HTML is returned trimmed and otherwise untouched; control shape is not
    checked here.
    """
    html_match = HTML_BLOCK_RE.search(raw_text)
    config_match = CONFIG_BLOCK_RE.search(raw_text)

    missing = tuple(
        name
        for name, match in (("html", html_match), ("config", config_match))
        if match is None
    )
    if missing:
        raise MalformedResponseError(raw_text=raw_text, missing=missing)

    # The contract asks for one block each; extra blocks are ignored, first wins
    for name, pattern in (("html", HTML_BLOCK_RE), ("config", CONFIG_BLOCK_RE)):
        count = len(pattern.findall(raw_text))
        if count > 1:
            logger.warning(f"Model returned {count} {name} blocks; using the first")

    html = html_match.group(1).strip()
    if not html:
        # an empty document would be persisted as an unrenderable shader
        raise MalformedResponseError(raw_text=raw_text, missing=("html",))
    config = _load_config(config_match.group(1).strip())

    logger.info(f"Parsed model response: html={len(html)} chars, config groups={list(config.keys())}")
    return Artifact(html=html, config=config)
