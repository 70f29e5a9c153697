# shaderland/services/prompt_template.py
"""
Instruction document sent to every model backend.

The response parser relies on the model honouring the delimiter contract
written here, so the wording of the format section is load-bearing: change
it together with ``shaderland.constants`` and the parser, never alone.

``build_prompt`` is pure string composition; it performs no I/O and does
not raise for any string input.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional

from shaderland.constants import (
    CANVAS_ELEMENT_ID,
    CONFIG_CLOSE_TAG,
    CONFIG_OPEN_TAG,
    HTML_CLOSE_TAG,
    HTML_OPEN_TAG,
    UPDATE_PARAMS_MESSAGE,
)

INTRO = (
    "You are an expert WebGL fragment shader programmer. "
    "Your task is to generate shader content based on the user's request."
)

FORMAT_CONTRACT = f"""IMPORTANT: You must return your response in this EXACT format.
Use each delimiter pair exactly once, spelled exactly as shown:

{HTML_OPEN_TAG}
[Complete HTML document for the shader]
{HTML_CLOSE_TAG}

{CONFIG_OPEN_TAG}
[JSON configuration object for TweakPane controls]
{CONFIG_CLOSE_TAG}"""

HTML_REQUIREMENTS = f"""### HTML Document Structure:
- Complete HTML with DOCTYPE, head, and body
- WebGL fragment shader that creates visually interesting effects
- Canvas element with id="{CANVAS_ELEMENT_ID}"
- NO TweakPane controls or UI elements (these will be rendered externally)
- PostMessage listener to receive parameter updates from external controls (message type '{UPDATE_PARAMS_MESSAGE}')
- Animation loop using requestAnimationFrame
- Self-contained: no external scripts, stylesheets, fonts or textures"""

SHADER_REQUIREMENTS = """### Shader Requirements:
- Always use WebGL 2.0
- Use WebGL fragment shader with gl_FragCoord for pixel coordinates
- Always include: uniform float u_time; uniform vec2 u_resolution;
- Add custom uniforms for user-controllable parameters
- Canvas should fill the available space (width: 100%, height: 100vh)"""

MESSAGE_EXAMPLE = f"""### PostMessage Integration:
- Listen for messages with type '{UPDATE_PARAMS_MESSAGE}'
- Update shader uniforms when receiving parameter changes
- Ignore parameters you do not recognise; keep the previous value of any parameter that is missing
- Example listener:
```javascript
const params = {{
  speed: 1.0,
  color: '#ff0000'
}};

window.addEventListener('message', (event) => {{
  if (event.data && event.data.type === '{UPDATE_PARAMS_MESSAGE}') {{
    for (const [key, value] of Object.entries(event.data.params || {{}})) {{
      if (key in params) params[key] = value;
    }}
  }}
}});

function hexToRgb(hex) {{
  const n = parseInt(hex.slice(1), 16);
  return [((n >> 16) & 255) / 255, ((n >> 8) & 255) / 255, (n & 255) / 255];
}}
// in the render loop:
// gl.uniform1f(speedLocation, params.speed);
// gl.uniform3fv(colorLocation, hexToRgb(params.color));
```"""

AUDIO_RECIPE = """### Audio Input (only if the request implies sound or music reactivity):
- Request the microphone with navigator.mediaDevices.getUserMedia({ audio: true })
- Feed it through an AudioContext AnalyserNode (fftSize 256) and read getByteFrequencyData each frame
- Average the frequency bins into a 0.0-1.0 level and pass it as uniform float u_audio;
- Start the AudioContext from a user gesture (click) and fall back to u_audio = 0.0 when access is denied
- Example:
```javascript
let analyser = null;
const bins = new Uint8Array(128);
document.addEventListener('click', async () => {
  if (analyser) return;
  const stream = await navigator.mediaDevices.getUserMedia({ audio: true });
  const ctx = new AudioContext();
  analyser = ctx.createAnalyser();
  analyser.fftSize = 256;
  ctx.createMediaStreamSource(stream).connect(analyser);
});
function audioLevel() {
  if (!analyser) return 0.0;
  analyser.getByteFrequencyData(bins);
  let sum = 0;
  for (let i = 0; i < bins.length; i++) sum += bins[i];
  return sum / (bins.length * 255);
}
```"""

HTML_TEMPLATE = f"""### HTML Template:
```html
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Shader</title>
    <style>
        body {{ margin: 0; padding: 0; overflow: hidden; }}
        canvas {{ width: 100%; height: 100vh; display: block; }}
    </style>
</head>
<body>
    <canvas id="{CANVAS_ELEMENT_ID}"></canvas>
    <script>
        // WebGL setup, shader compilation, postMessage listener, animation loop
        // NO TweakPane code here!
    </script>
</body>
</html>
```"""

CONFIG_SCHEMA = """### TweakPane Configuration:
Return a JSON object with this structure (groups map parameter names to controls):
```json
{
  "Controls": {
    "paramName": {
      "value": 1.0,
      "min": 0.0,
      "max": 2.0,
      "step": 0.1
    },
    "colorParam": {
      "value": "#ff0000"
    },
    "selectParam": {
      "value": "option1",
      "options": {
        "Option 1": "option1",
        "Option 2": "option2"
      }
    }
  }
}
```
The JSON must be strictly valid: double-quoted keys, no comments, no trailing commas.
Every parameter name must match a key of the params object in the HTML."""

CLOSING = "Generate the shader HTML and TweakPane config in the specified format!"


def _parent_section(parent: Mapping[str, Any]) -> str:
    html = parent.get("html") or ""
    config = parent.get("config") or {}
    config_text = json.dumps(config, indent=2, ensure_ascii=False, default=str)
    return (
        "## Existing shader to adapt:\n"
        "Modify this shader according to the user's request. Keep what the request does not ask to change, "
        "and keep its controls unless the request replaces them.\n\n"
        f"### Existing HTML:\n```html\n{html}\n```\n\n"
        f"### Existing TweakPane Configuration:\n```json\n{config_text}\n```"
    )


def build_prompt(user_request: str, parent_artifact: Optional[Mapping[str, Any]] = None) -> str:
    """Compose the full instruction document; the user's request is always the tail."""
    sections = [
        INTRO,
        FORMAT_CONTRACT,
        "## Requirements:",
        HTML_REQUIREMENTS,
        SHADER_REQUIREMENTS,
        MESSAGE_EXAMPLE,
        AUDIO_RECIPE,
        HTML_TEMPLATE,
        CONFIG_SCHEMA,
    ]
    if parent_artifact is not None:
        sections.append(_parent_section(parent_artifact))
    sections.append(CLOSING)
    sections.append(f"## User Request:\n{user_request}")
    return "\n\n".join(sections)
