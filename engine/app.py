from __future__ import annotations
import logging
from typing import Optional

import pygame

from engine.settings import AppCfg
from engine.scene import SceneManager
from engine.input_router import InputRouter
from engine.keyboard_input import KeyboardInput
from engine.narrative.core import NarrativeCore
from engine.narrative.loader import load_dialogue_dir

from game.scenes.town import TownScene
from game.scenes.menu import MenuScene

logger = logging.getLogger(__name__)


class GameApp:
    """
    Assembles the narrative core, keyboard input, router and scene stack, and
    runs the pygame loop. Decision logic lives in the core; this only draws
    its outputs and feeds it key presses.
    """

    def __init__(self, cfg: AppCfg, storyline: Optional[str] = None):
        self.cfg = cfg

        # Game logic (content errors raise here, before any window opens)
        self.core = NarrativeCore.from_file(cfg.content.town)
        self.dialogues = load_dialogue_dir(cfg.content.dialogues)

        pygame.init()
        pygame.display.set_caption(cfg.window.title)
        self.screen = pygame.display.set_mode(
            (int(cfg.window.width), int(cfg.window.height)),
            flags=pygame.RESIZABLE | pygame.DOUBLEBUF,
        )
        self.font = pygame.font.SysFont(None, 26)
        self.small = pygame.font.SysFont(None, 20)
        self.clock = pygame.time.Clock()
        self.running = True
        self.show_debug = False

        # Input
        self.keyboard = KeyboardInput(cfg.input.keymap)
        self.keyboard.add_toggle(cfg.input.debug_toggle, self.toggle_debug)
        self.keyboard.add_toggle(cfg.input.menu_toggle, self.toggle_menu)
        self.router = InputRouter(self.keyboard)

        # Scenes; the town listens before the first storyline is selected
        self.scenes = SceneManager(self.screen, self.router)
        self.town = TownScene(self)
        self.scenes.push(self.town)
        self.core.start(storyline or cfg.content.start_storyline)

    # ------------------------------------------------------------------ #
    # Admin / debug entry point (replaces a global "set storyline" hook)
    # ------------------------------------------------------------------ #
    def set_storyline(self, storyline_id: str) -> None:
        logger.info("admin: set storyline '%s'", storyline_id)
        self.core.set_storyline(storyline_id)

    def toggle_debug(self) -> None:
        self.show_debug = not self.show_debug

    def toggle_menu(self) -> None:
        if isinstance(self.scenes.active(), MenuScene):
            self.scenes.pop()
        else:
            self.scenes.push(MenuScene(self))

    # ------------------------------------------------------------------ #
    # Main loop
    # ------------------------------------------------------------------ #
    def run(self) -> None:
        while self.running and not self.scenes.request_quit:
            dt = self.clock.tick(self.cfg.fps) / 1000.0

            for e in pygame.event.get():
                if e.type == pygame.QUIT:
                    self.running = False
                    break
                if e.type == pygame.VIDEORESIZE:
                    self.screen = pygame.display.set_mode(
                        (max(1, e.w), max(1, e.h)), flags=pygame.RESIZABLE | pygame.DOUBLEBUF)
                    self.scenes.screen = self.screen
                    continue
                self.keyboard.feed(e)

            self.scenes.update(dt)
            self.screen.fill(self.cfg.window.bg_rgb)
            self.scenes.draw()
            if self.show_debug:
                self._draw_debug(self.screen)
            pygame.display.flip()

        pygame.quit()

    def _draw_debug(self, surface: pygame.Surface) -> None:
        lines = [
            f"fps {self.clock.get_fps():.0f}",
            f"storyline {self.core.storylines.current}",
            f"input {type(self.router.active).__name__ if self.router.active else '-'}",
            f"active {', '.join(self.core.quests.active_quests()) or '-'}",
            f"done {', '.join(self.core.quests.done_quests()) or '-'}",
        ]
        lines += [f"{k} = {v!r}" for k, v in sorted(self.core.flags.snapshot().items())]
        y = 8
        for line in lines:
            img = self.small.render(line, True, (20, 20, 20))
            surface.blit(img, (surface.get_width() - img.get_width() - 10, y))
            y += img.get_height() + 2
