# shaderland/constants.py
# Wire-level constants shared by the generation pipeline and the control bridge

# Output contract delimiters the model must use exactly once each
HTML_OPEN_TAG: str = "<SHADER_HTML>"
HTML_CLOSE_TAG: str = "</SHADER_HTML>"
CONFIG_OPEN_TAG: str = "<TWEAKPANE_CONFIG>"
CONFIG_CLOSE_TAG: str = "</TWEAKPANE_CONFIG>"

# Renderer contract
CANVAS_ELEMENT_ID: str = "shader-canvas"
UPDATE_PARAMS_MESSAGE: str = "UPDATE_PARAMS"

# Identifier generation: [0-9a-zA-Z]{15}
ID_ALPHABET: str = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
ID_LENGTH: int = 15

# Live control bridge timings (seconds)
LOAD_TIMEOUT_SECONDS: float = 10.0
SETTLE_DELAY_SECONDS: float = 0.1
RELOAD_DEBOUNCE_SECONDS: float = 0.25

# Model ids the generation endpoint accepts, in selector order
SUPPORTED_MODEL_IDS: tuple = (
    "claude-3-5-sonnet-20241022",
    "mistral-small-2503",
    "gemini-2.0-flash-exp",
)
