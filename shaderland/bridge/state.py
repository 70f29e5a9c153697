# shaderland/bridge/state.py

from enum import Enum


class RendererState(Enum):
    """Lifecycle of one renderer instance."""
    UNLOADED = "unloaded"  # No HTML assigned
    LOADING = "loading"    # Sandbox created, waiting for its load signal
    READY = "ready"        # Load signal received, pushes are delivered
    FAILED = "failed"      # Load error or timeout; waits for a manual retry


class LoadFailure(Enum):
    LOAD_TIMEOUT = "LoadTimeout"
    LOAD_FAILURE = "LoadFailure"
