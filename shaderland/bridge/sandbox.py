# shaderland/bridge/sandbox.py
# Collaborators the bridge drives: content handles and sandboxed renderer instances

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol

logger = logging.getLogger(__name__)

LoadCallback = Callable[[], None]
ErrorCallback = Callable[[str], None]


@dataclass(frozen=True)
class ContentHandle:
    """Addressable reference to an HTML document (object-URL analogue)."""
    url: str
    html: str = field(repr=False)


class ContentStore(Protocol):
    def create(self, html: str) -> ContentHandle: ...

    def release(self, handle: ContentHandle) -> None: ...


class Sandbox(Protocol):
    def post_message(self, message: Mapping[str, Any]) -> None: ...

    def dispose(self) -> None: ...


class SandboxFactory(Protocol):
    def create(self, handle: ContentHandle, on_load: LoadCallback, on_error: ErrorCallback) -> Sandbox: ...


class InMemoryContentStore:
    """Content-addressed handles with reference counts.

    `active` lists every handle created and not yet released, so leaks are visible.
    """

    def __init__(self):
        self._refs: Dict[str, int] = {}
        self._handles: Dict[str, ContentHandle] = {}

    def create(self, html: str) -> ContentHandle:
        digest = hashlib.sha256(html.encode("utf-8")).hexdigest()[:32]
        url = f"blob:shaderland/{digest}"
        handle = self._handles.setdefault(url, ContentHandle(url=url, html=html))
        self._refs[url] = self._refs.get(url, 0) + 1
        return handle

    def release(self, handle: ContentHandle) -> None:
        count = self._refs.get(handle.url, 0)
        if count <= 0:
            logger.warning(f"release of unknown content handle {handle.url}")
            return
        if count == 1:
            del self._refs[handle.url]
            del self._handles[handle.url]
        else:
            self._refs[handle.url] = count - 1

    @property
    def active(self) -> List[str]:
        return [url for url, n in self._refs.items() for _ in range(n)]


class RecordingSandbox:
    """Sandbox that records posted messages; the test and headless stand-in for an iframe."""

    def __init__(self, handle: ContentHandle, on_load: LoadCallback, on_error: ErrorCallback):
        self.handle = handle
        self.on_load = on_load
        self.on_error = on_error
        self.messages: List[Dict[str, Any]] = []
        self.disposed = False

    def post_message(self, message: Mapping[str, Any]) -> None:
        if self.disposed:
            return
        self.messages.append(dict(message))

    def dispose(self) -> None:
        self.disposed = True

    # signals a real renderer would raise on its own
    def signal_load(self) -> None:
        self.on_load()

    def signal_error(self, message: str = "script error") -> None:
        self.on_error(message)


class RecordingSandboxFactory:
    def __init__(self):
        self.created: List[RecordingSandbox] = []

    def create(self, handle: ContentHandle, on_load: LoadCallback, on_error: ErrorCallback) -> RecordingSandbox:
        sandbox = RecordingSandbox(handle, on_load, on_error)
        self.created.append(sandbox)
        return sandbox

    @property
    def latest(self) -> Optional[RecordingSandbox]:
        return self.created[-1] if self.created else None
