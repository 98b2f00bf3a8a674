from __future__ import annotations
from typing import TYPE_CHECKING, Optional

import pygame

from engine.input_connections import MenuConnection

if TYPE_CHECKING:
    from engine.app import GameApp
    from engine.scene import Scene


class MenuScene:
    """Pause menu. `action` confirms (closes the menu)."""

    def __init__(self, app: "GameApp"):
        self.app = app
        self.connection = MenuConnection(app.keyboard, self)

    def menu_action(self) -> None:
        if self.app.scenes.active() is self:
            self.app.scenes.pop()

    def on_enter(self, prev: Optional["Scene"]) -> None: pass
    def on_exit(self, nxt: Optional["Scene"]) -> None: pass
    def on_pause(self) -> None: pass
    def on_resume(self) -> None: pass

    def update(self, dt: float) -> None:
        pass

    def draw(self, surface: pygame.Surface) -> None:
        shade = pygame.Surface(surface.get_size(), pygame.SRCALPHA)
        shade.fill((0, 0, 0, 140))
        surface.blit(shade, (0, 0))
        w, h = surface.get_size()
        title = self.app.font.render("Paused", True, (240, 240, 240))
        tip = self.app.small.render("Action to resume", True, (200, 200, 200))
        surface.blit(title, title.get_rect(center=(w // 2, h // 2 - 20)))
        surface.blit(tip, tip.get_rect(center=(w // 2, h // 2 + 20)))
