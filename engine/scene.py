from __future__ import annotations
from typing import Any, List, Optional, Protocol
import pygame

from engine.input_router import Connection, InputRouter


class Scene(Protocol):
    """Lightweight scene protocol with no inheritance burden."""
    # Input connection routed while this scene is on top (None: no input)
    connection: Optional[Connection]

    # Lifecycle
    def on_enter(self, prev: Optional["Scene"]) -> None: ...
    def on_exit(self,  nxt: Optional["Scene"]) -> None: ...
    def on_pause(self) -> None: ...
    def on_resume(self) -> None: ...

    # Loop
    def update(self, dt: float) -> None: ...
    def draw(self, surface: pygame.Surface) -> None: ...


class SceneManager:
    """
    Simple stack:
      - push(scene) pauses the old top, enters the new one
      - pop() exits the top and resumes the new top
      - update() updates only the top scene
      - draw() draws the whole stack (bottom->top) so overlays are possible
    After every stack change the top scene's connection is handed to the
    router, so input always belongs to exactly the top scene.
    """
    def __init__(self, screen: Any, router: Optional[InputRouter] = None) -> None:
        self._stack: List[Scene] = []
        self.screen = screen
        self.router = router
        self.request_quit = False

    # ----- stack ops --------------------------------------------------------
    def push(self, scene: Scene) -> None:
        prev = self._stack[-1] if self._stack else None
        if prev:
            prev.on_pause()
        self._stack.append(scene)
        scene.on_enter(prev)
        self._route_top()

    def pop(self) -> Optional[Scene]:
        if not self._stack:
            return None
        top = self._stack.pop()
        nxt = self._stack[-1] if self._stack else None
        top.on_exit(nxt)
        if nxt:
            nxt.on_resume()
        self._route_top()
        return top

    def clear(self) -> None:
        while self._stack:
            self.pop()

    def _route_top(self) -> None:
        if self.router is None:
            return
        top = self.active()
        self.router.switch_to(getattr(top, "connection", None) if top else None)

    # ----- loop -------------------------------------------------------------
    def active(self) -> Optional[Scene]:
        return self._stack[-1] if self._stack else None

    def __len__(self) -> int:
        return len(self._stack)

    def update(self, dt: float) -> None:
        top = self.active()
        if top:
            top.update(dt)

    def draw(self) -> None:
        # draw full stack bottom -> top (supports overlay scenes)
        for s in self._stack:
            s.draw(self.screen)
