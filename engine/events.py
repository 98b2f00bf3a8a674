from __future__ import annotations
from typing import Callable, List, Tuple

from engine.errors import SignalLoopError


Handler = Callable[..., None]


class Signal:
    """
    One observer list owned by one component (no shared bus, no string keys).

    Rules:
      - connect() the same handler twice -> it is still called once per emit.
      - Higher priority runs first; equal priorities keep connection order.
      - emit() is synchronous; every handler has run when it returns.
      - Emitting from inside one of our own handlers nests. Past `max_depth`
        nested emits we raise SignalLoopError instead of recursing forever.
    """

    def __init__(self, name: str, *, max_depth: int = 16) -> None:
        self.name = name
        self.max_depth = int(max_depth)
        self._handlers: List[Tuple[int, int, Handler]] = []
        self._seq = 0
        self._depth = 0

    # --- subscription -------------------------------------------------------
    def connect(self, handler: Handler, *, priority: int = 0) -> Handler:
        if self.is_connected(handler):
            return handler
        self._seq += 1
        self._handlers.append((-int(priority), self._seq, handler))
        self._handlers.sort(key=lambda h: (h[0], h[1]))
        return handler

    def disconnect(self, handler: Handler) -> None:
        # Disconnecting something we never saw is a valid no-op.
        self._handlers = [h for h in self._handlers if h[2] != handler]

    def is_connected(self, handler: Handler) -> bool:
        return any(h[2] == handler for h in self._handlers)

    def clear(self) -> None:
        self._handlers.clear()

    def __len__(self) -> int:
        return len(self._handlers)

    # --- dispatch -----------------------------------------------------------
    def emit(self, *args) -> None:
        if self._depth >= self.max_depth:
            raise SignalLoopError(
                f"'{self.name}' re-entered {self._depth} times; listener cycle?"
            )
        self._depth += 1
        try:
            # Snapshot: handlers (dis)connected during dispatch apply next emit,
            # except that a disconnected handler must not fire afterwards.
            for _, _, handler in list(self._handlers):
                if not self.is_connected(handler):
                    continue
                handler(*args)
        finally:
            self._depth -= 1

    @property
    def emitting(self) -> bool:
        return self._depth > 0

    def __repr__(self) -> str:
        return f"Signal({self.name!r}, handlers={len(self._handlers)})"
