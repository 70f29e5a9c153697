# shaderland/bridge/live_bridge.py
# Keeps a sandboxed renderer's uniforms in step with the control panel
# Lifecycle: UNLOADED -> LOADING -> READY | FAILED, retry re-enters LOADING

import asyncio
import logging
from typing import Any, Dict, Optional

from shaderland.bridge.controls import ControlPanel
from shaderland.bridge.sandbox import ContentHandle, ContentStore, Sandbox, SandboxFactory
from shaderland.bridge.state import LoadFailure, RendererState
from shaderland.constants import (
    LOAD_TIMEOUT_SECONDS,
    RELOAD_DEBOUNCE_SECONDS,
    SETTLE_DELAY_SECONDS,
    UPDATE_PARAMS_MESSAGE,
)

logger = logging.getLogger(__name__)


class LiveControlBridge:
    """
    Pairs one ControlPanel with one renderer instance at a time.

    - Every control edit sends the full parameter mapping, fire-and-forget.
    - Entering READY schedules one extra push after `settle_delay` so the
      first frame sees current values even if an earlier push was missed.
    - A load that neither completes nor fails within `load_timeout` fails.
    - Each sandbox carries a generation token; signals from replaced
      instances are ignored.
    - Sandboxes and content handles are released on replacement, failure
      and close().
    """

    def __init__(
        self,
        content_store: ContentStore,
        sandbox_factory: SandboxFactory,
        load_timeout: float = LOAD_TIMEOUT_SECONDS,
        settle_delay: float = SETTLE_DELAY_SECONDS,
        reload_debounce: float = RELOAD_DEBOUNCE_SECONDS,
        name: str = "renderer",
    ):
        self.name = name
        self.load_timeout = load_timeout
        self.settle_delay = settle_delay
        self.reload_debounce = reload_debounce

        self._store = content_store
        self._factory = sandbox_factory

        self._state = RendererState.UNLOADED
        self._html: Optional[str] = None
        self._panel: Optional[ControlPanel] = None
        self._generation = 0
        self._sandbox: Optional[Sandbox] = None
        self._handle: Optional[ContentHandle] = None

        self._load_timer: Optional[asyncio.TimerHandle] = None
        self._settle_timer: Optional[asyncio.TimerHandle] = None
        self._reload_timer: Optional[asyncio.TimerHandle] = None

        self.last_failure: Optional[str] = None
        self.last_failure_detail: Optional[str] = None
        self.pushes_sent = 0

    @property
    def state(self) -> RendererState:
        return self._state

    @property
    def panel(self) -> Optional[ControlPanel]:
        return self._panel

    @property
    def sandbox(self) -> Optional[Sandbox]:
        return self._sandbox

    @property
    def can_retry(self) -> bool:
        return self._state == RendererState.FAILED and bool(self._html)

    def _transition_to(self, new_state: RendererState):
        """Transition to a new state with logging."""
        if self._state != new_state:
            logger.info(f"Live bridge '{self.name}': {self._state.value} -> {new_state.value}")
            self._state = new_state

    # --- binding ---

    def bind(self, config: Any) -> ControlPanel:
        """Build controls from a raw control config; edits push immediately."""
        self._panel = ControlPanel.from_raw(config, on_change=self._on_control_change)
        logger.debug(f"Live bridge '{self.name}': bound {len(self._panel)} controls")
        return self._panel

    def load_artifact(self, html: str, config: Any) -> None:
        self.bind(config)
        self.assign_html(html)

    def assign_html(self, html: Optional[str]) -> None:
        self._cancel_reload()
        self._teardown_instance()
        self._html = html or None
        self.last_failure = None
        self.last_failure_detail = None
        if not self._html:
            self._transition_to(RendererState.UNLOADED)
            return
        self._start_loading()

    # --- user actions ---

    def retry(self) -> bool:
        """Re-load the same HTML in a fresh sandbox. Only valid from FAILED."""
        if not self.can_retry:
            logger.debug(f"Live bridge '{self.name}': retry ignored in state {self._state.value}")
            return False
        self._start_loading()
        return True

    def reload(self) -> None:
        """Debounced manual reload: replace the renderer, re-push on ready."""
        if not self._html:
            return
        self._cancel_reload()
        self._reload_timer = asyncio.get_running_loop().call_later(self.reload_debounce, self._do_reload)

    def push_params(self) -> bool:
        """Send the full parameter state to the renderer. Dropped unless READY."""
        if self._state != RendererState.READY or self._sandbox is None:
            return False
        params: Dict[str, Any] = self._panel.params() if self._panel is not None else {}
        self._sandbox.post_message({"type": UPDATE_PARAMS_MESSAGE, "params": params})
        self.pushes_sent += 1
        return True

    def close(self) -> None:
        self._cancel_reload()
        self._teardown_instance()
        self._html = None
        self._transition_to(RendererState.UNLOADED)

    # --- internals ---

    def _start_loading(self) -> None:
        self._teardown_instance()
        self._generation += 1
        token = self._generation

        self._handle = self._store.create(self._html)
        self._sandbox = self._factory.create(
            self._handle,
            on_load=lambda: self._on_load(token),
            on_error=lambda message="": self._on_error(token, message),
        )
        self._transition_to(RendererState.LOADING)
        self._load_timer = asyncio.get_running_loop().call_later(self.load_timeout, self._on_timeout, token)

    def _is_current(self, token: int) -> bool:
        return token == self._generation and self._state == RendererState.LOADING

    def _on_load(self, token: int) -> None:
        if not self._is_current(token):
            logger.debug(f"Live bridge '{self.name}': stale load signal (token {token}) ignored")
            return
        self._cancel_timer("_load_timer")
        self.last_failure = None
        self.last_failure_detail = None
        self._transition_to(RendererState.READY)
        self._settle_timer = asyncio.get_running_loop().call_later(self.settle_delay, self._settled_push, token)

    def _settled_push(self, token: int) -> None:
        self._settle_timer = None
        if token == self._generation:
            self.push_params()

    def _on_error(self, token: int, message: str) -> None:
        if not self._is_current(token):
            logger.debug(f"Live bridge '{self.name}': stale error signal (token {token}) ignored")
            return
        self._fail(LoadFailure.LOAD_FAILURE, message or "renderer reported an error")

    def _on_timeout(self, token: int) -> None:
        self._load_timer = None
        if not self._is_current(token):
            return
        self._fail(LoadFailure.LOAD_TIMEOUT, f"no load signal within {self.load_timeout:g}s")

    def _fail(self, kind: LoadFailure, detail: str) -> None:
        self._teardown_instance()
        self.last_failure = kind.value
        self.last_failure_detail = detail
        logger.warning(f"Live bridge '{self.name}': {kind.value}: {detail}")
        self._transition_to(RendererState.FAILED)

    def _do_reload(self) -> None:
        self._reload_timer = None
        if not self._html:
            return
        logger.info(f"Live bridge '{self.name}': manual reload")
        self._start_loading()

    def _teardown_instance(self) -> None:
        self._cancel_timer("_load_timer")
        self._cancel_timer("_settle_timer")
        if self._sandbox is not None:
            self._sandbox.dispose()
            self._sandbox = None
        if self._handle is not None:
            self._store.release(self._handle)
            self._handle = None

    def _cancel_reload(self) -> None:
        self._cancel_timer("_reload_timer")

    def _cancel_timer(self, attr: str) -> None:
        timer = getattr(self, attr)
        if timer is not None:
            timer.cancel()
            setattr(self, attr, None)

    def _on_control_change(self, name: str, value: Any) -> None:
        self.push_params()
