from __future__ import annotations
import logging
from typing import Callable, Dict, Optional, Protocol

from engine.events import Signal

logger = logging.getLogger(__name__)

UP = "up"
DOWN = "down"
ACTION = "action"
SIGNALS = (UP, DOWN, ACTION)


class InputSource:
    """
    Upstream of all connections: named raw signals, each its own Signal.

    Unknown names are filtered, never raised: emit("jump") with nobody
    listening (or no such channel) just does nothing.
    """

    def __init__(self) -> None:
        self._channels: Dict[str, Signal] = {name: Signal(name) for name in SIGNALS}

    def channel(self, name: str) -> Signal:
        ch = self._channels.get(name)
        if ch is None:
            ch = self._channels[name] = Signal(name)
        return ch

    def on(self, name: str, handler: Callable[[], None]) -> None:
        self.channel(name).connect(handler)

    def off(self, name: str, handler: Callable[[], None]) -> None:
        ch = self._channels.get(name)
        if ch is not None:
            ch.disconnect(handler)

    def emit(self, name: str) -> bool:
        """Deliver `name`; True if anybody was listening."""
        ch = self._channels.get(name)
        if ch is None or not len(ch):
            return False
        ch.emit()
        return True

    def listeners(self, name: str) -> int:
        ch = self._channels.get(name)
        return len(ch) if ch is not None else 0


class Connection(Protocol):
    def route(self) -> None: ...
    def unroute(self) -> None: ...


class InputRouter:
    """
    Holds at most one active connection.

    switch_to(new):
      - unroute() the old one first, then route() the new one, so no signal
        can ever reach two connections
      - switching to the already-active connection does nothing
      - switch_to(None) leaves input unrouted
    """

    def __init__(self, source: InputSource) -> None:
        self.source = source
        self._active: Optional[Connection] = None

    @property
    def active(self) -> Optional[Connection]:
        return self._active

    def switch_to(self, connection: Optional[Connection]) -> None:
        if connection is self._active:
            return
        old = self._active
        if old is not None:
            old.unroute()
        self._active = None
        if connection is not None:
            connection.route()
            self._active = connection
        logger.debug("input: %s -> %s", type(old).__name__ if old else None,
                     type(connection).__name__ if connection else None)

    def clear(self) -> None:
        self.switch_to(None)
